"""
Product schemas for responses and bulk import/upload results.
"""
from pydantic import BaseModel, Field
from typing import Optional, List
from datetime import datetime
from uuid import UUID


class StockItemResponse(BaseModel):
    """Stock position of a product in one warehouse"""
    id: UUID
    warehouse_id: Optional[UUID] = None
    quantity: float = 0
    reserved: float = 0
    available: float = 0
    average_cost: float = 0
    total_value: float = 0
    reorder_point: float = 0

    class Config:
        from_attributes = True


class ProductSupplierResponse(BaseModel):
    id: UUID
    supplier_name: str
    supplier_sku: Optional[str] = None
    supplier_barcode: Optional[str] = None
    cost: Optional[float] = None
    is_preferred: bool = False
    is_active: bool = True
    notes: Optional[str] = None

    class Config:
        from_attributes = True


class ProductBarcodeResponse(BaseModel):
    id: UUID
    barcode: str
    barcode_type: str
    source: Optional[str] = None
    is_primary: bool = False
    is_active: bool = True

    class Config:
        from_attributes = True


class ProductResponse(BaseModel):
    """Product list row"""
    id: UUID
    type: str
    sku: Optional[str] = None
    service_code: Optional[str] = None
    name: str
    description: Optional[str] = None
    price: Optional[float] = None
    cost: Optional[float] = None
    original_price: Optional[float] = None
    original_cost: Optional[float] = None
    original_price_currency: Optional[str] = None
    original_cost_currency: Optional[str] = None
    base_currency: str
    uom_base: str
    uom_sell: str
    active: bool
    category_id: UUID
    brand_id: Optional[UUID] = None
    barcode: Optional[str] = None
    barcode_type: Optional[str] = None
    duration: Optional[str] = None
    image_urls: List[str] = Field(default_factory=list, description="Public image URLs")
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class ProductDetailResponse(ProductResponse):
    """Product with stock, supplier links and additional barcodes"""
    stock_items: List[StockItemResponse] = Field(default_factory=list)
    suppliers: List[ProductSupplierResponse] = Field(default_factory=list)
    additional_barcodes: List[ProductBarcodeResponse] = Field(default_factory=list)


class BulkImportResponse(BaseModel):
    """Result of a bulk import: success count plus per-row errors and warnings"""
    success: int
    errors: List[str] = Field(default_factory=list)
    warnings: List[str] = Field(default_factory=list)


class UpdatedProductImages(BaseModel):
    sku: Optional[str] = None
    serviceCode: Optional[str] = None
    name: str
    imageCount: int


class ImageUploadResults(BaseModel):
    totalImages: int = 0
    matchedProducts: int = 0
    updated: int = 0
    failed: int = 0
    notFound: int = 0
    notFoundSkus: List[str] = Field(default_factory=list)
    updatedProducts: List[UpdatedProductImages] = Field(default_factory=list)
    errors: List[str] = Field(default_factory=list)


class ImageUploadResponse(BaseModel):
    """Result of matching a ZIP of images to products"""
    success: bool
    message: str
    results: ImageUploadResults
