"""
Product bulk import API endpoints.

The import runs synchronously inside the request: rows are processed one
by one and the response carries the success count plus per-row errors and
warnings. Batch-fatal problems (bad file, no category, no warehouse) answer
with {"error": message}.
"""
import logging
from typing import Optional

from fastapi import APIRouter, Depends, File, UploadFile, status
from fastapi.responses import JSONResponse, Response
from sqlalchemy.orm import Session

from app.database import get_db
from app.exceptions import StockDeskError
from app.schemas import BulkImportResponse
from app.services.column_normalizer import expected_fields
from app.services.product_import_service import (
    ProductImportService,
    TEMPLATE_FILENAME,
    build_template_csv,
)

logger = logging.getLogger(__name__)
router = APIRouter()


@router.post("/bulk-import", response_model=BulkImportResponse)
async def bulk_import_products(
    file: Optional[UploadFile] = File(None),
    db: Session = Depends(get_db),
):
    """
    Import products and services from a CSV, XLS or XLSX file.

    Rows whose SKU already exists are skipped (reported in errors), never
    updated. Products get a stock item in the default warehouse; services
    get a service code and no stock.
    """
    if file is None or not file.filename:
        return JSONResponse({"error": "No file provided"}, status_code=status.HTTP_400_BAD_REQUEST)

    try:
        contents = await file.read()
        result = ProductImportService.import_file(db, file.filename, file.content_type, contents)
        return result.to_dict()
    except StockDeskError as e:
        logger.warning(f"Bulk import rejected: {e.message}")
        return JSONResponse(e.to_dict(), status_code=e.status_code)
    except Exception as e:
        logger.error(f"Bulk import error: {str(e)}", exc_info=True)
        return JSONResponse(
            {
                "error": "Internal server error",
                "success": 0,
                "errors": [f"Import failed: {str(e)}"],
                "warnings": [],
            },
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )


@router.get("/bulk-import/template")
def download_import_template():
    """CSV template with every supported column and example rows"""
    return Response(
        content=build_template_csv(),
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{TEMPLATE_FILENAME}"'},
    )


@router.get("/bulk-import/fields")
def get_import_fields():
    """
    Canonical import fields with their accepted header names.
    Frontend uses this to build a "Map your columns" dropdown.
    """
    return {"fields": expected_fields()}
