"""
Database models for StockDesk
"""
from app.database import Base

# Import all models
from .catalog import Category, Brand
from .product import Product, ProductSupplier, ProductBarcode, ItemType, BarcodeType
from .inventory import Warehouse, StockItem

__all__ = [
    "Base",
    "Category",
    "Brand",
    "Product",
    "ProductSupplier",
    "ProductBarcode",
    "ItemType",
    "BarcodeType",
    "Warehouse",
    "StockItem",
]
