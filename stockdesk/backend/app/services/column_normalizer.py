"""
Column normalization for bulk product import.

Maps human-authored header names ("Product Name", "Item", "Selling Price")
onto the fixed set of canonical field names the importer understands, and
turns the result into a typed ImportRow so the reconciler never parses raw
strings for numbers or flags.
"""
import math
import re
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

# Canonical field names, in template column order
CANONICAL_FIELDS: List[str] = [
    'sku', 'name', 'description', 'brand', 'type', 'price', 'cost', 'quantity',
    'reorder_point', 'import_currency', 'selling_currency', 'uom_base', 'uom_sell',
    'active', 'barcode', 'barcode_type', 'supplier_name', 'supplier_sku',
    'supplier_barcode', 'service_code', 'duration', 'category',
]

# Header synonyms per canonical field. The first entry is the template header.
FIELD_SYNONYMS: Dict[str, List[str]] = {
    'sku': ['SKU', 'sku', 'Product SKU', 'product_sku', 'Item Code', 'item_code', 'Product Code', 'Code'],
    'name': ['Name', 'name', 'Product Name', 'product_name', 'Item', 'Item Name', 'item_name', 'Title'],
    'description': ['Description', 'description', 'Product Description', 'product_description', 'Details'],
    'brand': ['Brand', 'brand', 'Brand Name', 'brand_name', 'Manufacturer', 'Make'],
    'type': ['Type', 'type', 'Item Type', 'item_type', 'Product Type', 'product_type'],
    'price': ['Price', 'price', 'Selling Price', 'selling_price', 'Sale Price', 'Unit Price', 'Retail Price'],
    'cost': ['Cost', 'cost', 'Cost Price', 'cost_price', 'Purchase Price', 'purchase_price', 'Unit Cost'],
    'quantity': ['Quantity', 'quantity', 'Qty', 'Stock', 'Stock Quantity', 'stock_quantity', 'Opening Stock'],
    'reorder_point': ['Reorder Point', 'reorder_point', 'Reorder Level', 'Min Stock', 'Minimum Stock'],
    'import_currency': ['Import Currency', 'import_currency', 'Currency', 'currency', 'Cost Currency'],
    'selling_currency': ['Selling Currency', 'selling_currency', 'Price Currency', 'price_currency', 'base_currency'],
    'uom_base': ['UOM Base', 'uom_base', 'Unit Base', 'unit_base', 'Base Unit', 'Unit'],
    'uom_sell': ['UOM Sell', 'uom_sell', 'Unit Sell', 'unit_sell', 'Selling Unit', 'Sell Unit'],
    'active': ['Active', 'active', 'Is Active', 'is_active', 'Status', 'Enabled'],
    'barcode': ['Barcode', 'barcode', 'Product Barcode', 'product_barcode', 'EAN', 'UPC', 'GTIN'],
    'barcode_type': ['Barcode Type', 'barcode_type', 'Symbology'],
    'supplier_name': ['Supplier Name', 'supplier_name', 'Supplier', 'Vendor', 'Vendor Name'],
    'supplier_sku': ['Supplier SKU', 'supplier_sku', 'Vendor SKU', 'Supplier Code'],
    'supplier_barcode': ['Supplier Barcode', 'supplier_barcode', 'Vendor Barcode'],
    'service_code': ['Service Code', 'service_code', 'Service ID'],
    'duration': ['Duration', 'duration', 'Service Duration'],
    'category': ['Category', 'category', 'Category Name', 'category_name', 'Product Category'],
}

FIELD_LABELS: Dict[str, str] = {
    'sku': 'SKU (unique identifier)',
    'name': 'Name',
    'reorder_point': 'Reorder Point',
    'import_currency': 'Import Currency (cost/price as imported)',
    'selling_currency': 'Selling Currency',
    'uom_base': 'UOM Base',
    'uom_sell': 'UOM Sell',
    'active': 'Active (true/false, defaults to true)',
    'supplier_name': 'Supplier Name',
    'supplier_sku': 'Supplier SKU',
    'supplier_barcode': 'Supplier Barcode',
    'service_code': 'Service Code (services only)',
    'duration': 'Duration (services only)',
}

REQUIRED_FIELDS = ('sku', 'name')

HEADER_MAP: Dict[str, str] = {
    header: field for field, headers in FIELD_SYNONYMS.items() for header in headers
}
_HEADER_MAP_CASEFOLD: Dict[str, str] = {
    header.casefold(): field for header, field in HEADER_MAP.items()
}

TRUTHY_VALUES = {'true', '1', 'yes', 'y', 'active', 'enabled'}
SERVICE_TYPES = {'SERVICE', 'SERVICES'}

_NUMERIC_NOISE = re.compile(r'[^0-9.\-]')
_WHITESPACE = re.compile(r'\s+')


def expected_fields() -> List[Dict]:
    """Field descriptions for the column-mapping UI."""
    return [
        {
            'id': field,
            'label': FIELD_LABELS.get(field, field.replace('_', ' ').title()),
            'required': field in REQUIRED_FIELDS,
            'headers': FIELD_SYNONYMS[field],
        }
        for field in CANONICAL_FIELDS
    ]


def canonical_field_for(header: Any) -> str:
    """
    Canonical field for a header: exact match, then case-insensitive match,
    then a slug (lower-case, whitespace runs -> '_') for unknown headers.
    """
    text = str(header).strip()
    if text in HEADER_MAP:
        return HEADER_MAP[text]
    folded = _HEADER_MAP_CASEFOLD.get(text.casefold())
    if folded:
        return folded
    return _WHITESPACE.sub('_', text.lower())


def _is_blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, float) and math.isnan(value):
        return True
    return isinstance(value, str) and not value.strip()


def normalize_row(raw_row: Dict[str, Any]) -> Dict[str, Any]:
    """
    Re-key a raw row by canonical field name.

    Unknown headers survive under their slug. When two headers land on the
    same key, the first non-blank value wins.
    """
    normalized: Dict[str, Any] = {}
    for header, value in raw_row.items():
        key = canonical_field_for(header)
        if key in normalized and not _is_blank(normalized[key]):
            continue
        normalized[key] = value
    return normalized


def clean_text(value: Any) -> Optional[str]:
    """Cell value as stripped text; blank/NaN -> None, 12.0 -> '12'."""
    if _is_blank(value):
        return None
    if isinstance(value, bool):
        return 'true' if value else 'false'
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value).strip()


def parse_number(value: Any) -> float:
    """
    Lenient numeric parse: keep digits, the first decimal point and a
    leading minus sign; currency symbols, thousands separators and other
    characters are dropped. Anything unparseable is 0.

    '1,234.56 GHS' -> 1234.56, '' -> 0, 'abc' -> 0
    """
    if value is None or isinstance(value, bool):
        return float(value or 0)
    if isinstance(value, (int, float)):
        return 0.0 if isinstance(value, float) and math.isnan(value) else float(value)

    text = _NUMERIC_NOISE.sub('', str(value))
    negative = text.startswith('-')
    text = text.replace('-', '')
    head, dot, tail = text.partition('.')
    text = head + dot + tail.replace('.', '')
    try:
        number = float(text)
    except ValueError:
        return 0.0
    return -number if negative else number


def parse_active(value: Any) -> bool:
    """Active flag; blank or missing means active."""
    if _is_blank(value):
        return True
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return value != 0
    return str(value).strip().lower() in TRUTHY_VALUES


def normalize_item_type(value: Any) -> str:
    """Fold the free-text type column to PRODUCT or SERVICE."""
    text = (clean_text(value) or '').upper()
    return 'SERVICE' if text in SERVICE_TYPES else 'PRODUCT'


class ImportRow(BaseModel):
    """One normalized import row with typed numeric and boolean fields"""
    model_config = ConfigDict(extra='ignore')

    sku: Optional[str] = None
    name: Optional[str] = None
    description: Optional[str] = None
    brand: Optional[str] = None
    type: Optional[str] = None
    price: float = 0.0
    cost: float = 0.0
    quantity: float = 0.0
    reorder_point: float = 0.0
    import_currency: Optional[str] = None
    selling_currency: Optional[str] = None
    uom_base: Optional[str] = None
    uom_sell: Optional[str] = None
    active: bool = True
    barcode: Optional[str] = None
    barcode_type: Optional[str] = None
    supplier_name: Optional[str] = None
    supplier_sku: Optional[str] = None
    supplier_barcode: Optional[str] = None
    service_code: Optional[str] = None
    duration: Optional[str] = None
    category: Optional[str] = None
    # Columns with no canonical meaning, under their slugged header
    extra: Dict[str, Any] = Field(default_factory=dict)

    @field_validator(
        'sku', 'name', 'description', 'brand', 'type', 'import_currency', 'selling_currency',
        'uom_base', 'uom_sell', 'barcode', 'barcode_type', 'supplier_name', 'supplier_sku',
        'supplier_barcode', 'service_code', 'duration', 'category',
        mode='before',
    )
    @classmethod
    def _text(cls, v):
        return clean_text(v)

    @field_validator('price', 'cost', 'quantity', 'reorder_point', mode='before')
    @classmethod
    def _number(cls, v):
        return parse_number(v)

    @field_validator('active', mode='before')
    @classmethod
    def _active(cls, v):
        return parse_active(v)

    @classmethod
    def from_normalized(cls, normalized: Dict[str, Any]) -> "ImportRow":
        known = {k: v for k, v in normalized.items() if k in CANONICAL_FIELDS}
        extra = {k: v for k, v in normalized.items() if k not in CANONICAL_FIELDS}
        return cls(**known, extra=extra)

    @classmethod
    def from_raw(cls, raw_row: Dict[str, Any]) -> "ImportRow":
        return cls.from_normalized(normalize_row(raw_row))
