"""
Modelos relacionados con órdenes/pedidos
"""
from sqlalchemy import Column, Integer, String, DateTime, Text, DECIMAL, ForeignKey, CheckConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from order_service.core.database import Base


class Order(Base):
    """
    Tabla principal de órdenes
    """
    __tablename__ = "orders"

    id = Column(Integer, primary_key=True, index=True)

    user_id = Column(Integer, nullable=False, index=True)
    order_date = Column(DateTime(timezone=True), server_default=func.now(), index=True)

    status = Column(String(50), nullable=False, default="pending", server_default="pending", index=True)
    total_amount = Column(DECIMAL(10, 2), nullable=False)
    shipping_address = Column(Text)

    # Metadata
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    items = relationship("OrderItem", back_populates="order", cascade="all, delete-orphan")


class OrderItem(Base):
    """
    Items/productos de cada orden

    product_id points at the Product Service database, so there is no FK.
    """
    __tablename__ = "order_items"
    __table_args__ = (
        CheckConstraint("quantity > 0", name="ck_order_items_quantity_positive"),
    )

    id = Column(Integer, primary_key=True, index=True)
    order_id = Column(Integer, ForeignKey("orders.id", ondelete="CASCADE"), index=True, nullable=False)
    product_id = Column(Integer, nullable=False, index=True)

    quantity = Column(Integer, nullable=False)
    # Precio al momento de la compra
    price_at_purchase = Column(DECIMAL(10, 2), nullable=False)
    item_total = Column(DECIMAL(10, 2), nullable=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now())

    order = relationship("Order", back_populates="items")
