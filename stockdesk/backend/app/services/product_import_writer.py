"""
Persistence for validated import rows.

Each write is committed on its own; there is no transaction spanning a row
or the batch. Supplier links and secondary barcodes are soft writes: a
failure is rolled back, logged and recorded on the batch context, but never
reported to the caller and never fails the row.
"""
import logging
import time
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional
from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.models import Product, ProductSupplier, ProductBarcode, StockItem, ItemType

logger = logging.getLogger(__name__)


def _now_millis() -> int:
    return int(time.time() * 1000)


@dataclass
class SoftFailure:
    """A secondary write that failed without failing its row."""
    kind: str  # 'supplier' | 'secondary_barcode'
    product_name: str
    message: str


@dataclass
class ImportContext:
    """
    Per-batch state handed to every row.

    default_category_id / default_warehouse_id are resolved once before the
    first row; brand_ids grows as rows auto-create brands.
    """
    default_category_id: UUID
    default_warehouse_id: UUID
    brand_ids: Dict[str, UUID] = field(default_factory=dict)  # lower-cased name -> id
    soft_failures: List[SoftFailure] = field(default_factory=list)
    clock: Callable[[], int] = _now_millis  # milliseconds, seeds barcode regeneration


@dataclass
class ProductPlan:
    """Fully resolved creation payload for one import row."""
    row_number: int
    item_type: str
    sku: Optional[str]
    service_code: Optional[str]
    name: str
    description: str
    category_id: UUID
    brand_id: Optional[UUID]
    barcode: Optional[str]
    barcode_type: Optional[str]
    generate_barcode: bool
    price: float
    cost: float
    import_currency: str
    selling_currency: str
    uom_base: str
    uom_sell: str
    active: bool
    duration: Optional[str]
    quantity: float
    reorder_point: float
    supplier_name: Optional[str] = None
    supplier_sku: Optional[str] = None
    supplier_barcode: Optional[str] = None
    secondary_barcode: Optional[str] = None
    secondary_barcode_type: Optional[str] = None

    @property
    def is_service(self) -> bool:
        return self.item_type == ItemType.SERVICE.value


class ProductImportWriter:
    """Writes a ProductPlan: product, then supplier link, extra barcode and stock item"""

    @staticmethod
    def write(db: Session, context: ImportContext, plan: ProductPlan) -> Product:
        product = Product(
            type=plan.item_type,
            sku=plan.sku,
            service_code=plan.service_code,
            name=plan.name,
            description=plan.description,
            category_id=plan.category_id,
            brand_id=plan.brand_id,
            barcode=plan.barcode,
            barcode_type=plan.barcode_type,
            generate_barcode=plan.generate_barcode,
            price=plan.price,
            cost=plan.cost,
            original_price=plan.price,
            original_cost=plan.cost,
            original_price_currency=plan.import_currency,
            original_cost_currency=plan.import_currency,
            base_currency=plan.selling_currency,
            active=plan.active,
            uom_base=plan.uom_base,
            uom_sell=plan.uom_sell,
            duration=plan.duration,
        )
        db.add(product)
        db.commit()
        db.refresh(product)

        if plan.supplier_name:
            ProductImportWriter._soft_write(
                db, context, plan, 'supplier',
                ProductSupplier(
                    product_id=product.id,
                    supplier_name=plan.supplier_name,
                    supplier_sku=plan.supplier_sku,
                    supplier_barcode=plan.supplier_barcode,
                    cost=plan.cost,
                    is_preferred=True,
                    is_active=True,
                    notes='Imported from bulk upload',
                ),
            )

        if plan.secondary_barcode:
            ProductImportWriter._soft_write(
                db, context, plan, 'secondary_barcode',
                ProductBarcode(
                    product_id=product.id,
                    barcode=plan.secondary_barcode,
                    barcode_type=plan.secondary_barcode_type,
                    source=plan.supplier_name or 'Supplier',
                    description='Supplier provided barcode',
                    is_primary=False,
                    is_active=True,
                ),
            )

        if not plan.is_service:
            db.add(StockItem(
                product_id=product.id,
                warehouse_id=context.default_warehouse_id,
                quantity=plan.quantity,
                reserved=0,
                available=plan.quantity,
                average_cost=plan.cost,
                total_value=plan.quantity * plan.cost,
                reorder_point=plan.reorder_point,
            ))
            db.commit()

        return product

    @staticmethod
    def _soft_write(db: Session, context: ImportContext, plan: ProductPlan, kind: str, record) -> bool:
        try:
            db.add(record)
            db.commit()
            return True
        except SQLAlchemyError as e:
            db.rollback()
            logger.warning(f"Could not add {kind.replace('_', ' ')} for product '{plan.name}' (row {plan.row_number}): {e}")
            context.soft_failures.append(SoftFailure(kind=kind, product_name=plan.name, message=str(e)))
            return False
