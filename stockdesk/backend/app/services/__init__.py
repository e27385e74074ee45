"""
Business logic services for StockDesk
"""
from .product_import_service import ProductImportService, ImportResult
from .product_import_writer import ProductImportWriter, ImportContext
from .image_upload_service import ImageUploadService

__all__ = [
    "ProductImportService",
    "ImportResult",
    "ProductImportWriter",
    "ImportContext",
    "ImageUploadService",
]
