"""
Test data factories: import files and catalog rows.
"""

import zipfile
from io import BytesIO
from typing import Optional

import pandas as pd

from app.models import Product, ItemType


def csv_bytes(*lines: str) -> bytes:
    """CSV payload from text lines (first line is the header)."""
    return ("\n".join(lines) + "\n").encode("utf-8")


def make_xlsx(rows: list) -> bytes:
    """Build an .xlsx payload in memory from a list of dicts."""
    buffer = BytesIO()
    with pd.ExcelWriter(buffer, engine="openpyxl") as writer:
        pd.DataFrame(rows).to_excel(writer, index=False)
    return buffer.getvalue()


def make_zip(files: dict) -> bytes:
    """ZIP payload from {member name: bytes}."""
    buffer = BytesIO()
    with zipfile.ZipFile(buffer, "w") as archive:
        for name, data in files.items():
            archive.writestr(name, data)
    return buffer.getvalue()


class ProductFactory:
    """
    Factory for products inserted straight into the test database.

    Usage:
        product = ProductFactory.create(db, category, sku="PROD-001")
        service = ProductFactory.create(db, category, service_code="CONS-001", type="SERVICE")
    """

    _counter = 0

    @classmethod
    def _next_counter(cls) -> int:
        cls._counter += 1
        return cls._counter

    @classmethod
    def create(
        cls,
        db,
        category,
        sku: Optional[str] = None,
        name: Optional[str] = None,
        type: str = ItemType.PRODUCT.value,
        **overrides,
    ) -> Product:
        n = cls._next_counter()
        if type == ItemType.PRODUCT.value and sku is None:
            sku = f"TEST-{n:04d}"
        product = Product(
            type=type,
            sku=sku,
            name=name or f"Test Product {n}",
            category_id=category.id,
            price=overrides.pop("price", 10.0),
            cost=overrides.pop("cost", 5.0),
            **overrides,
        )
        db.add(product)
        db.commit()
        db.refresh(product)
        return product
