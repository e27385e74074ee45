"""
API routes for StockDesk
"""
from .product_import import router as product_import_router
from .products import router as products_router
from .catalog import router as catalog_router

__all__ = [
    "product_import_router",
    "products_router",
    "catalog_router",
]
