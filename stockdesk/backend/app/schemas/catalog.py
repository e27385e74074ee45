"""
Catalog lookup schemas: categories, brands, warehouses
"""
from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime
from uuid import UUID


class CategoryBase(BaseModel):
    """Category base schema"""
    name: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    parent_id: Optional[UUID] = None


class CategoryCreate(CategoryBase):
    """Create category request"""
    pass


class CategoryResponse(CategoryBase):
    """Category response"""
    id: UUID
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class BrandBase(BaseModel):
    """Brand base schema"""
    name: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    is_active: bool = True


class BrandCreate(BrandBase):
    """Create brand request"""
    pass


class BrandResponse(BrandBase):
    """Brand response"""
    id: UUID
    auto_created: bool = False
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class WarehouseBase(BaseModel):
    """Warehouse base schema"""
    name: str = Field(..., min_length=1, max_length=255)
    code: str = Field(..., min_length=1, max_length=50, description="Short unique warehouse code")
    address: Optional[str] = None
    city: Optional[str] = None
    country: Optional[str] = None
    is_active: bool = True


class WarehouseCreate(WarehouseBase):
    """Create warehouse request"""
    pass


class WarehouseResponse(WarehouseBase):
    """Warehouse response"""
    id: UUID
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True
