"""
Warehouse and StockItem models

StockItem holds the on-hand position of one product in one warehouse.
Services never get a stock item.
"""
from sqlalchemy import Column, String, Boolean, Float, Text, ForeignKey, UniqueConstraint, Uuid
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from sqlalchemy.types import TIMESTAMP
import uuid
from app.database import Base


class Warehouse(Base):
    """Warehouse (stock location) model"""
    __tablename__ = "warehouses"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name = Column(String(255), nullable=False)
    code = Column(String(50), nullable=False, unique=True)
    address = Column(Text)
    city = Column(String(100))
    country = Column(String(100))
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(TIMESTAMP(timezone=True), server_default=func.now())
    updated_at = Column(TIMESTAMP(timezone=True), server_default=func.now(), onupdate=func.now())

    # Relationships
    stock_items = relationship("StockItem", back_populates="warehouse")


class StockItem(Base):
    """Stock position of a product in a warehouse"""
    __tablename__ = "stock_items"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    product_id = Column(Uuid(as_uuid=True), ForeignKey("products.id", ondelete="RESTRICT"), nullable=False)
    warehouse_id = Column(Uuid(as_uuid=True), ForeignKey("warehouses.id", ondelete="SET NULL"), nullable=True)
    quantity = Column(Float, nullable=False, default=0)
    reserved = Column(Float, nullable=False, default=0)
    available = Column(Float, nullable=False, default=0)  # quantity - reserved
    average_cost = Column(Float, nullable=False, default=0)
    total_value = Column(Float, nullable=False, default=0)  # quantity * average_cost
    reorder_point = Column(Float, nullable=False, default=0)
    created_at = Column(TIMESTAMP(timezone=True), server_default=func.now())
    updated_at = Column(TIMESTAMP(timezone=True), server_default=func.now(), onupdate=func.now())

    __table_args__ = (
        UniqueConstraint("product_id", "warehouse_id", name="uq_stock_items_product_warehouse"),
    )

    # Relationships
    product = relationship("Product", back_populates="stock_items")
    warehouse = relationship("Warehouse", back_populates="stock_items")
