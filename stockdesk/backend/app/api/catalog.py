"""
Catalog lookup API routes: categories, brands, warehouses
"""
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from sqlalchemy import func
from typing import List
from app.database import get_db
from app.models import Category, Brand, Warehouse
from app.schemas import (
    CategoryCreate, CategoryResponse,
    BrandCreate, BrandResponse,
    WarehouseCreate, WarehouseResponse,
)

router = APIRouter()


@router.get("/categories", response_model=List[CategoryResponse])
def list_categories(db: Session = Depends(get_db)):
    """List all categories"""
    return db.query(Category).order_by(Category.name).all()


@router.post("/categories", response_model=CategoryResponse, status_code=status.HTTP_201_CREATED)
def create_category(category: CategoryCreate, db: Session = Depends(get_db)):
    """Create a new category"""
    if category.parent_id:
        parent = db.query(Category).filter(Category.id == category.parent_id).first()
        if not parent:
            raise HTTPException(status_code=404, detail="Parent category not found")
    db_category = Category(
        name=category.name.strip(),
        description=category.description,
        parent_id=category.parent_id,
    )
    db.add(db_category)
    db.commit()
    db.refresh(db_category)
    return db_category


@router.get("/brands", response_model=List[BrandResponse])
def list_brands(db: Session = Depends(get_db)):
    """List all brands, including ones auto-created by bulk import"""
    return db.query(Brand).order_by(Brand.name).all()


@router.post("/brands", response_model=BrandResponse, status_code=status.HTTP_201_CREATED)
def create_brand(brand: BrandCreate, db: Session = Depends(get_db)):
    """Create a new brand. Names are unique regardless of case."""
    name = brand.name.strip()
    existing = db.query(Brand).filter(func.lower(Brand.name) == name.lower()).first()
    if existing:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"Brand '{existing.name}' already exists",
        )
    db_brand = Brand(name=name, description=brand.description, is_active=brand.is_active)
    db.add(db_brand)
    db.commit()
    db.refresh(db_brand)
    return db_brand


@router.get("/warehouses", response_model=List[WarehouseResponse])
def list_warehouses(db: Session = Depends(get_db)):
    """List all warehouses"""
    return db.query(Warehouse).order_by(Warehouse.name).all()


@router.post("/warehouses", response_model=WarehouseResponse, status_code=status.HTTP_201_CREATED)
def create_warehouse(warehouse: WarehouseCreate, db: Session = Depends(get_db)):
    """Create a new warehouse"""
    code = warehouse.code.strip().upper()
    if db.query(Warehouse).filter(Warehouse.code == code).first():
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"Warehouse code '{code}' already exists",
        )
    db_warehouse = Warehouse(
        name=warehouse.name.strip(),
        code=code,
        address=warehouse.address,
        city=warehouse.city,
        country=warehouse.country,
        is_active=warehouse.is_active,
    )
    db.add(db_warehouse)
    db.commit()
    db.refresh(db_warehouse)
    return db_warehouse
