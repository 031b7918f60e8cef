from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class Category(BaseModel):
    id: int
    name: str
    description: Optional[str] = None
    model_config = ConfigDict(from_attributes=True)


class ProductBase(BaseModel):
    name: str = Field(min_length=1, max_length=200)
    description: str = Field(default='', max_length=1000)
    price: Decimal = Field(ge=0, max_digits=18, decimal_places=2)
    stock: int = Field(default=0, ge=0)
    category_id: int
    is_active: bool = True


class ProductCreate(ProductBase):
    expiration_date: Optional[datetime] = None


class ProductUpdate(ProductBase):
    id: int


class Product(ProductBase):
    id: int
    is_discontinued: bool = False
    expiration_date: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    category: Optional[Category] = None
    model_config = ConfigDict(from_attributes=True)


class ProductSummary(BaseModel):
    id: int
    name: str
    price: Decimal
    category_name: str
    stock: int
    model_config = ConfigDict(from_attributes=True)


class OrderResult(BaseModel):
    order_id: Optional[int] = None
    success: bool
    error_message: Optional[str] = None
