"""
Products API routes
"""
import logging
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, File, HTTPException, Query, UploadFile, status
from fastapi.responses import JSONResponse
from sqlalchemy import func, or_
from sqlalchemy.orm import Session, selectinload

from app.database import get_db
from app.exceptions import StockDeskError
from app.models import Brand, Product
from app.schemas import ImageUploadResponse, ProductDetailResponse, ProductResponse
from app.services.image_upload_service import ImageUploadService

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("", response_model=List[ProductResponse])
def list_products(
    search: Optional[str] = Query(None, description="Matches name, SKU, service code, description or brand"),
    type: Optional[str] = Query(None, description="PRODUCT or SERVICE"),
    active: Optional[bool] = Query(None),
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=500),
    db: Session = Depends(get_db),
):
    """List products and services, newest first"""
    query = db.query(Product).outerjoin(Brand, Product.brand_id == Brand.id)
    if search and search.strip():
        term = f"%{search.strip().lower()}%"
        query = query.filter(
            or_(
                func.lower(Product.name).like(term),
                func.lower(Product.sku).like(term),
                func.lower(Product.service_code).like(term),
                func.lower(Product.description).like(term),
                func.lower(Brand.name).like(term),
            )
        )
    if type:
        query = query.filter(Product.type == type.strip().upper())
    if active is not None:
        query = query.filter(Product.active == active)
    return query.order_by(Product.created_at.desc(), Product.name).offset(skip).limit(limit).all()


@router.post("/bulk-upload-images", response_model=ImageUploadResponse)
async def bulk_upload_images(
    zipFile: Optional[UploadFile] = File(None),
    db: Session = Depends(get_db),
):
    """
    Upload product images from a ZIP file.
    Images are named by SKU, service code or product name
    (e.g. PROD-001.jpg, PROD-001-2.jpg for a second image).
    """
    if zipFile is None:
        return JSONResponse({"error": "No ZIP file provided"}, status_code=status.HTTP_400_BAD_REQUEST)
    try:
        contents = await zipFile.read()
        return ImageUploadService.upload_images(db, zipFile.filename, zipFile.content_type, contents)
    except StockDeskError as e:
        return JSONResponse(e.to_dict(), status_code=e.status_code)
    except Exception as e:
        logger.error(f"Error processing bulk image upload: {str(e)}", exc_info=True)
        return JSONResponse(
            {"error": f"Failed to process bulk image upload: {str(e)}", "success": False},
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )


@router.get("/{product_id}", response_model=ProductDetailResponse)
def get_product(product_id: UUID, db: Session = Depends(get_db)):
    """Get product by ID with stock, suppliers and additional barcodes"""
    product = db.query(Product).options(
        selectinload(Product.stock_items),
        selectinload(Product.suppliers),
        selectinload(Product.additional_barcodes),
    ).filter(Product.id == product_id).first()
    if not product:
        raise HTTPException(status_code=404, detail="Product not found")
    return product
