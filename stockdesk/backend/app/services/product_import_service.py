"""
Product Bulk Import Service

Reconciles an uploaded CSV/spreadsheet of products and services into the
catalog and inventory:

- Non-destructive: a row whose SKU already exists is rejected, never updated.
- Row-isolated: one bad row adds an error and the loop moves on.
- Batch-fatal only before the loop: no rows, no category, no warehouse.

Rows are processed strictly one at a time; each write commits on its own
(see ProductImportWriter), so later rows see what earlier rows created.
"""
import csv
import hashlib
import io
import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple
from uuid import UUID

from sqlalchemy import func, or_
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.config import settings
from app.exceptions import ImportAbortedError, RowRejectedError
from app.models import Brand, Category, Product, Warehouse, ItemType
from app.services.column_normalizer import CANONICAL_FIELDS, FIELD_SYNONYMS, ImportRow, normalize_item_type
from app.services.file_decoder import decode_file
from app.services.product_import_writer import ImportContext, ProductImportWriter, ProductPlan
from app.utils.barcode import EAN13, detect_barcode_type, generate_barcode, validate_barcode

logger = logging.getLogger(__name__)

TEMPLATE_FILENAME = 'product-import-template.csv'

# Example rows for the downloadable template, keyed by canonical field
TEMPLATE_ROWS: List[Dict[str, str]] = [
    {
        'sku': 'PROD-001', 'name': 'Premium Headphones', 'description': 'High-quality wireless headphones',
        'brand': 'AudioTech', 'type': 'PRODUCT', 'price': '299.99', 'cost': '200.00', 'quantity': '50',
        'reorder_point': '10', 'import_currency': 'USD', 'selling_currency': 'GHS', 'uom_base': 'pcs',
        'uom_sell': 'pcs', 'active': 'true', 'barcode': '4006381333931', 'barcode_type': 'EAN13',
        'supplier_name': 'AudioTech Inc', 'supplier_sku': 'ATH-001', 'supplier_barcode': 'ATH-001-BC',
        'category': 'Electronics',
    },
    {
        'sku': 'PROD-002', 'name': 'Office Chair', 'description': 'Ergonomic office chair',
        'type': 'PRODUCT', 'price': '199.99', 'cost': '120.00', 'quantity': '25', 'reorder_point': '5',
        'import_currency': 'USD', 'selling_currency': 'GHS', 'uom_base': 'pcs', 'uom_sell': 'pcs',
        'active': 'true', 'supplier_name': 'Office Solutions', 'supplier_sku': 'OS-002',
        'category': 'Furniture',
    },
    {
        'sku': 'SERV-001', 'name': 'Consulting Service', 'description': 'Professional consulting services',
        'type': 'SERVICE', 'quantity': '0', 'reorder_point': '0', 'import_currency': 'USD',
        'selling_currency': 'GHS', 'uom_base': 'hours', 'uom_sell': 'hours', 'active': 'true',
        'service_code': 'CONS-001', 'duration': '2 hours', 'category': 'Services',
    },
]


def build_template_csv() -> str:
    """CSV template: one column per canonical field plus example product and service rows."""
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator='\n')
    writer.writerow([FIELD_SYNONYMS[f][0] for f in CANONICAL_FIELDS])
    for example in TEMPLATE_ROWS:
        writer.writerow([example.get(f, '') for f in CANONICAL_FIELDS])
    return buffer.getvalue()


@dataclass
class ImportResult:
    """Summary returned to the caller; never persisted."""
    success: int = 0
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict:
        return {'success': self.success, 'errors': self.errors, 'warnings': self.warnings}


class ProductImportService:
    """Service for bulk importing products from CSV/Excel files"""

    @staticmethod
    def import_file(
        db: Session,
        filename: Optional[str],
        content_type: Optional[str],
        payload: bytes,
        context: Optional[ImportContext] = None,
    ) -> ImportResult:
        """
        Decode, normalize and import an uploaded file.

        Raises:
            UnsupportedFormatError / FileDecodeError: file could not be read
            ImportAbortedError: batch-fatal condition (no rows, no category, no warehouse)
        """
        file_hash = hashlib.md5(payload).hexdigest()
        logger.info(
            f"Processing file: {filename}, size: {len(payload)} bytes, "
            f"type: {content_type}, hash: {file_hash[:8]}..."
        )

        max_bytes = settings.MAX_IMPORT_FILE_SIZE_MB * 1024 * 1024
        if len(payload) > max_bytes:
            raise ImportAbortedError(
                f"File is too large. Maximum size is {settings.MAX_IMPORT_FILE_SIZE_MB}MB"
            )

        raw_rows = decode_file(filename, content_type, payload)
        if not raw_rows:
            raise ImportAbortedError("No valid data found in the file")

        rows = [ImportRow.from_raw(raw) for raw in raw_rows]
        return ProductImportService.import_rows(db, rows, context=context)

    @staticmethod
    def build_context(db: Session) -> ImportContext:
        """
        Resolve the batch-wide defaults: first category, first warehouse, and
        the current brand list keyed by lower-cased name.
        """
        default_category = db.query(Category).first()
        if not default_category:
            raise ImportAbortedError("No categories found. Please create a category first.")

        default_warehouse = db.query(Warehouse).first()
        if not default_warehouse:
            raise ImportAbortedError("No warehouses found. Please create a warehouse first.")

        brand_ids = {name.strip().lower(): brand_id for brand_id, name in db.query(Brand.id, Brand.name).all()}
        return ImportContext(
            default_category_id=default_category.id,
            default_warehouse_id=default_warehouse.id,
            brand_ids=brand_ids,
        )

    @staticmethod
    def import_rows(
        db: Session,
        rows: List[ImportRow],
        context: Optional[ImportContext] = None,
    ) -> ImportResult:
        """Import already-normalized rows. Row numbers start at 2 (row 1 is the header)."""
        if not rows:
            raise ImportAbortedError("No valid data found in the file")

        if context is None:
            try:
                context = ProductImportService.build_context(db)
            except SQLAlchemyError as e:
                logger.error(f"Database error while preparing import: {e}", exc_info=True)
                raise ImportAbortedError("Database error occurred during import", status_code=500) from e

        result = ImportResult()
        logger.info(f"Starting product import of {len(rows)} rows")

        for row_number, row in enumerate(rows, start=2):
            try:
                plan, warnings = ProductImportService.reconcile_row(db, context, row, row_number)
                ProductImportWriter.write(db, context, plan)
                result.success += 1
                result.warnings.extend(warnings)
            except RowRejectedError as e:
                logger.info(f"Row {row_number} skipped: {e.message}")
                result.errors.append(e.message)
            except Exception as e:
                db.rollback()
                logger.error(f"Error processing row {row_number} ({row.name or 'Unknown'}): {e}", exc_info=True)
                result.errors.append(
                    f"Row {row_number}: Error processing product: {row.name or 'Unknown'} - {e}"
                )

        if context.soft_failures:
            logger.warning(f"{len(context.soft_failures)} supplier/barcode records could not be saved")
        logger.info(
            f"Import completed: {result.success} successful, "
            f"{len(result.errors)} errors, {len(result.warnings)} warnings"
        )
        return result

    @staticmethod
    def reconcile_row(
        db: Session,
        context: ImportContext,
        row: ImportRow,
        row_number: int,
    ) -> Tuple[ProductPlan, List[str]]:
        """
        Validate one row and resolve everything needed to create it.

        Steps run in a fixed order: required fields, duplicate SKU, numbers
        (already parsed on ImportRow), barcode, type, category, brand, active
        flag, payload. Raises RowRejectedError for validation failures.
        """
        warnings: List[str] = []

        # 1. Required fields
        if not row.sku or not row.name:
            raise RowRejectedError(
                f"Row {row_number}: Missing required fields: SKU and Name are required"
            )

        # 5 (needed by 2 for services). Type
        item_type = normalize_item_type(row.type)
        is_service = item_type == ItemType.SERVICE.value
        service_code = (row.service_code or row.sku) if is_service else None

        # 2. Duplicate SKU / service code
        ProductImportService._reject_duplicates(db, row, row_number, service_code)

        # 4. Barcode (products only)
        barcode, barcode_type = None, None
        if not is_service:
            barcode, barcode_type = ProductImportService._resolve_barcode(
                db, context, row, row_number, warnings
            )

        # 6. Category
        category_id = ProductImportService._resolve_category(db, context, row, row_number, warnings)

        # 7. Brand
        brand_id = ProductImportService._resolve_brand(db, context, row.brand)

        # Supplier barcode distinct from the primary one becomes an extra barcode
        secondary_barcode, secondary_type = None, None
        if row.supplier_barcode and row.supplier_barcode != barcode and not is_service:
            detected = detect_barcode_type(row.supplier_barcode)
            if validate_barcode(row.supplier_barcode, detected):
                secondary_barcode, secondary_type = row.supplier_barcode, detected
            else:
                logger.info(f"Row {row_number}: supplier barcode '{row.supplier_barcode}' is not a valid {detected}, not stored")

        # 8-9. Active flag (parsed on ImportRow) and payload
        default_unit = 'hours' if is_service else 'pcs'
        plan = ProductPlan(
            row_number=row_number,
            item_type=item_type,
            sku=None if is_service else row.sku,
            service_code=service_code,
            name=row.name,
            description=row.description or f"Imported {'service' if is_service else 'product'} from bulk upload",
            category_id=category_id,
            brand_id=brand_id,
            barcode=barcode,
            barcode_type=barcode_type,
            generate_barcode=not is_service and not row.barcode,
            price=row.price,
            cost=row.cost,
            import_currency=row.import_currency or settings.DEFAULT_IMPORT_CURRENCY,
            selling_currency=row.selling_currency or settings.DEFAULT_SELLING_CURRENCY,
            uom_base=row.uom_base or default_unit,
            uom_sell=row.uom_sell or default_unit,
            active=row.active,
            duration=row.duration if is_service else None,
            quantity=row.quantity,
            reorder_point=row.reorder_point,
            supplier_name=row.supplier_name,
            supplier_sku=row.supplier_sku,
            supplier_barcode=row.supplier_barcode,
            secondary_barcode=secondary_barcode,
            secondary_barcode_type=secondary_type,
        )
        return plan, warnings

    @staticmethod
    def _reject_duplicates(db: Session, row: ImportRow, row_number: int, service_code: Optional[str]) -> None:
        existing = db.query(Product.id).filter(
            or_(Product.sku == row.sku, Product.service_code == row.sku)
        ).first()
        if existing:
            raise RowRejectedError(
                f"Row {row_number}: SKU '{row.sku}' already exists. Skipping product: {row.name}"
            )
        if service_code and service_code != row.sku:
            existing = db.query(Product.id).filter(Product.service_code == service_code).first()
            if existing:
                raise RowRejectedError(
                    f"Row {row_number}: Service code '{service_code}' already exists. Skipping service: {row.name}"
                )

    @staticmethod
    def _resolve_barcode(
        db: Session,
        context: ImportContext,
        row: ImportRow,
        row_number: int,
        warnings: List[str],
    ) -> Tuple[str, str]:
        """
        Supplied and valid -> keep it with its detected type; supplied but
        invalid, or absent -> EAN-13 from the SKU. A collision with an
        existing product regenerates once from SKU + timestamp.
        """
        barcode, barcode_type = None, EAN13
        if row.barcode:
            detected = detect_barcode_type(row.barcode)
            if validate_barcode(row.barcode, detected):
                barcode, barcode_type = row.barcode, detected
            else:
                logger.warning(f"Invalid barcode for {row.name}: {row.barcode}")
                warnings.append(
                    f"Row {row_number}: Invalid barcode '{row.barcode}' for {row.name}; generated a new one"
                )

        if not barcode:
            barcode, barcode_type = generate_barcode(row.sku, EAN13), EAN13

        taken = db.query(Product.id).filter(Product.barcode == barcode).first()
        if taken:
            logger.warning(f"Duplicate barcode {barcode}, generating new one")
            previous = barcode
            barcode, barcode_type = generate_barcode(f"{row.sku}-{context.clock()}", EAN13), EAN13
            warnings.append(
                f"Row {row_number}: Barcode '{previous}' already in use; generated {barcode} for {row.name}"
            )
        return barcode, barcode_type

    @staticmethod
    def _resolve_category(
        db: Session,
        context: ImportContext,
        row: ImportRow,
        row_number: int,
        warnings: List[str],
    ) -> UUID:
        if not row.category:
            return context.default_category_id
        category = db.query(Category.id).filter(Category.name.contains(row.category, autoescape=True)).first()
        if category:
            return category.id
        warnings.append(
            f"Row {row_number}: Category '{row.category}' not found; using default category"
        )
        return context.default_category_id

    @staticmethod
    def _resolve_brand(db: Session, context: ImportContext, brand_name: Optional[str]) -> Optional[UUID]:
        """Case-insensitive match against the batch's brand cache; unknown brands are created."""
        if not brand_name:
            return None
        key = brand_name.strip().lower()
        if key in context.brand_ids:
            return context.brand_ids[key]

        # Another process may have added it since the cache was loaded
        brand = db.query(Brand).filter(func.lower(Brand.name) == key).first()
        if not brand:
            brand = Brand(
                name=brand_name.strip(),
                description='Auto-created during bulk import',
                is_active=True,
                auto_created=True,
            )
            db.add(brand)
            db.commit()
            db.refresh(brand)
            logger.info(f"Auto-created brand '{brand.name}'")
        context.brand_ids[key] = brand.id
        return brand.id
