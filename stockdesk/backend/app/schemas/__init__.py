"""
Pydantic schemas for request/response validation
"""
from .catalog import (
    CategoryCreate, CategoryResponse,
    BrandCreate, BrandResponse,
    WarehouseCreate, WarehouseResponse,
)
from .product import (
    ProductResponse, ProductDetailResponse,
    StockItemResponse, ProductSupplierResponse, ProductBarcodeResponse,
    BulkImportResponse, ImageUploadResponse, ImageUploadResults, UpdatedProductImages,
)

__all__ = [
    # Catalog
    "CategoryCreate",
    "CategoryResponse",
    "BrandCreate",
    "BrandResponse",
    "WarehouseCreate",
    "WarehouseResponse",
    # Product
    "ProductResponse",
    "ProductDetailResponse",
    "StockItemResponse",
    "ProductSupplierResponse",
    "ProductBarcodeResponse",
    "BulkImportResponse",
    "ImageUploadResponse",
    "ImageUploadResults",
    "UpdatedProductImages",
]
