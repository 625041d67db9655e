"""
Product Domain Model

Represents a product in the catalog.
"""
from pydantic import BaseModel, Field, ConfigDict
from typing import Optional
from datetime import datetime
from decimal import Decimal


class Product(BaseModel):
    """
    Product domain model - represents a product in our catalog

    Fields:
        id: Internal product ID (primary key)
        name: Product name
        description: Product description (optional)
        price: Unit price, always positive
        stock_quantity: Units available, never negative
        image_url: Time-limited URL of the product image (optional)
        created_at: When product was created
        updated_at: When product was last updated
    """

    id: int = Field(..., description="Internal product ID")
    name: str = Field(..., description="Product name")
    description: Optional[str] = Field(None, description="Product description")
    price: Decimal = Field(..., description="Unit price", gt=0)
    stock_quantity: int = Field(0, description="Units in stock", ge=0)
    image_url: Optional[str] = Field(None, description="Product image URL (SAS)")
    created_at: Optional[datetime] = Field(None, description="Creation timestamp")
    updated_at: Optional[datetime] = Field(None, description="Last update timestamp")

    model_config = ConfigDict(from_attributes=True)

    @property
    def is_out_of_stock(self) -> bool:
        """Check if product is out of stock"""
        return self.stock_quantity <= 0

    def has_stock_for(self, quantity: int) -> bool:
        return self.stock_quantity >= quantity

    def to_dict(self) -> dict:
        """
        Convert to a JSON-friendly dictionary

        Decimal becomes float and datetimes become ISO strings.
        """
        data = self.model_dump()
        data['price'] = float(self.price)
        data['in_stock'] = not self.is_out_of_stock

        for field in ['created_at', 'updated_at']:
            if data.get(field) is not None:
                data[field] = data[field].isoformat()

        return data


class ProductCreate(BaseModel):
    """Schema for creating a new product"""
    name: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    price: Decimal = Field(..., gt=0, max_digits=10, decimal_places=2)
    stock_quantity: int = Field(0, ge=0)


class ProductUpdate(BaseModel):
    """Schema for updating an existing product - only provided fields change"""
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    price: Optional[Decimal] = Field(None, gt=0, max_digits=10, decimal_places=2)
    stock_quantity: Optional[int] = Field(None, ge=0)


class StockDeduction(BaseModel):
    """Body of PATCH /products/{id}/deduct-stock"""
    quantity_to_deduct: int = Field(..., ge=1)
