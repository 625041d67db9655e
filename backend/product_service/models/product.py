"""
Products table
"""
from sqlalchemy import Column, Integer, String, DateTime, Text, DECIMAL, CheckConstraint
from sqlalchemy.sql import func

from product_service.core.database import Base


class Product(Base):
    """
    Catálogo de productos
    """
    __tablename__ = "products"
    __table_args__ = (
        CheckConstraint("price > 0", name="ck_products_price_positive"),
        CheckConstraint("stock_quantity >= 0", name="ck_products_stock_non_negative"),
    )

    id = Column(Integer, primary_key=True, index=True)

    name = Column(String(255), nullable=False, index=True)
    description = Column(Text)

    price = Column(DECIMAL(10, 2), nullable=False)
    stock_quantity = Column(Integer, nullable=False, default=0, server_default="0")

    # SAS URL of the image in Azure Blob Storage
    image_url = Column(String(2048))

    # Metadata
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())
