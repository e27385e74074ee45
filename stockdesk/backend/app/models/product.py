"""
Product, supplier link and additional barcode models
"""
import enum
import json

from sqlalchemy import Column, String, Boolean, Float, Integer, Text, ForeignKey, Uuid
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from sqlalchemy.types import TIMESTAMP
import uuid
from app.database import Base


class ItemType(str, enum.Enum):
    PRODUCT = "PRODUCT"
    SERVICE = "SERVICE"


class BarcodeType(str, enum.Enum):
    EAN13 = "EAN13"
    EAN8 = "EAN8"
    UPCA = "UPCA"
    UPCE = "UPCE"
    CODE128 = "CODE128"
    CODE39 = "CODE39"
    ITF14 = "ITF14"
    QR = "QR"
    DATAMATRIX = "DATAMATRIX"
    CUSTOM = "CUSTOM"


class Product(Base):
    """
    Catalog product or service.

    PRODUCT rows carry a SKU (and usually a barcode); SERVICE rows carry a
    service code instead. Both identifiers are globally unique.
    """
    __tablename__ = "products"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    type = Column(String(20), nullable=False, default=ItemType.PRODUCT.value)  # PRODUCT | SERVICE
    sku = Column(String(100), unique=True, nullable=True)
    service_code = Column(String(100), unique=True, nullable=True)
    name = Column(String(255), nullable=False)
    description = Column(Text)
    images = Column(Text)  # JSON list of public URLs
    # Units of measure
    uom_base = Column(String(50), nullable=False, default="pcs")
    uom_sell = Column(String(50), nullable=False, default="pcs")
    # Prices in base currency, plus the values as imported
    price = Column(Float)
    cost = Column(Float)
    original_price = Column(Float)
    original_cost = Column(Float)
    original_price_currency = Column(String(10))
    original_cost_currency = Column(String(10))
    base_currency = Column(String(10), nullable=False, default="GHS")  # Selling price currency
    active = Column(Boolean, nullable=False, default=True)
    category_id = Column(Uuid(as_uuid=True), ForeignKey("categories.id", ondelete="RESTRICT"), nullable=False)
    brand_id = Column(Uuid(as_uuid=True), ForeignKey("brands.id", ondelete="SET NULL"), nullable=True)
    # Primary barcode
    barcode = Column(String(100), unique=True, nullable=True)
    barcode_type = Column(String(20), nullable=True)  # NULL for services
    generate_barcode = Column(Boolean, nullable=False, default=True)
    # Services only
    duration = Column(String(100))
    created_at = Column(TIMESTAMP(timezone=True), server_default=func.now())
    updated_at = Column(TIMESTAMP(timezone=True), server_default=func.now(), onupdate=func.now())

    # Relationships
    category = relationship("Category", back_populates="products")
    brand = relationship("Brand", back_populates="products")
    stock_items = relationship("StockItem", back_populates="product")
    suppliers = relationship("ProductSupplier", back_populates="product", cascade="all, delete-orphan")
    additional_barcodes = relationship("ProductBarcode", back_populates="product", cascade="all, delete-orphan")

    @property
    def image_urls(self) -> list:
        """Decoded images list; malformed JSON reads as no images."""
        if not self.images:
            return []
        try:
            urls = json.loads(self.images)
        except ValueError:
            return []
        return urls if isinstance(urls, list) else []


class ProductSupplier(Base):
    """Supplier reference for a product (supplier's own SKU/barcode and cost)"""
    __tablename__ = "product_suppliers"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    product_id = Column(Uuid(as_uuid=True), ForeignKey("products.id", ondelete="CASCADE"), nullable=False, index=True)
    supplier_name = Column(String(255), nullable=False)
    supplier_sku = Column(String(100))
    supplier_barcode = Column(String(100))
    cost = Column(Float)
    lead_time = Column(Integer)  # days
    moq = Column(Integer)  # minimum order quantity
    is_preferred = Column(Boolean, nullable=False, default=False)
    is_active = Column(Boolean, nullable=False, default=True)
    notes = Column(Text)
    created_at = Column(TIMESTAMP(timezone=True), server_default=func.now())
    updated_at = Column(TIMESTAMP(timezone=True), server_default=func.now(), onupdate=func.now())

    # Relationships
    product = relationship("Product", back_populates="suppliers")


class ProductBarcode(Base):
    """Additional (non-primary) barcode, e.g. supplier-assigned"""
    __tablename__ = "product_barcodes"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    product_id = Column(Uuid(as_uuid=True), ForeignKey("products.id", ondelete="CASCADE"), nullable=False, index=True)
    barcode = Column(String(100), nullable=False, unique=True)
    barcode_type = Column(String(20), nullable=False, default=BarcodeType.EAN13.value)
    source = Column(String(255))  # Supplier name or "Supplier"
    description = Column(Text)
    is_primary = Column(Boolean, nullable=False, default=False)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(TIMESTAMP(timezone=True), server_default=func.now())
    updated_at = Column(TIMESTAMP(timezone=True), server_default=func.now(), onupdate=func.now())

    # Relationships
    product = relationship("Product", back_populates="additional_barcodes")
