"""
SQLAlchemy models for the sample catalog and ordering domain.

Split into submodules; import from ``samples.db.models``.
"""
from .base import Base, now_utc
from .catalog import Category, Product
from .orders import Customer, Order, OrderItem, OrderStatus

__all__ = [
    "Base",
    "now_utc",
    "Category",
    "Product",
    "Customer",
    "Order",
    "OrderItem",
    "OrderStatus",
]
