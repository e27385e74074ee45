"""
Import products from a CSV/XLS/XLSX file directly into the database.

Bypasses HTTP but runs the same pipeline as POST /api/products/bulk-import:
existing SKUs are skipped, products get a stock item in the default
warehouse, services get a service code.

Usage (from backend/):
  python scripts/import_products.py --file path/to/products.csv

Optional:
  --db-url URL   Override database URL (default: DATABASE_URL from env/.env)
  --dry-run      Decode and normalize only; print the column mapping and row count

Exit code 0 when the batch ran (even if some rows were skipped), 1 when it
could not run at all (file unreadable, no category, no warehouse).
"""
from __future__ import annotations

import argparse
import mimetypes
import sys
from pathlib import Path

# Add backend to path when run as script
_backend = Path(__file__).resolve().parent.parent
if str(_backend) not in sys.path:
    sys.path.insert(0, str(_backend))

from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker

from app.config import with_psycopg_driver
from app.database import SessionLocal, init_db
from app.exceptions import StockDeskError
from app.services.column_normalizer import canonical_field_for, CANONICAL_FIELDS
from app.services.file_decoder import decode_file
from app.services.product_import_service import ProductImportService


def _print_mapping(rows) -> None:
    headers = list(rows[0].keys()) if rows else []
    for header in headers:
        field = canonical_field_for(header)
        marker = "" if field in CANONICAL_FIELDS else "  (not imported)"
        print(f"  {header!r:30} -> {field}{marker}")


def _open_session(db_url: str | None) -> Session:
    """Session on --db-url when given, else on the configured database; tables are created if missing."""
    if not db_url:
        init_db()
        return SessionLocal()
    engine = create_engine(with_psycopg_driver(db_url))
    init_db(bind=engine)
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)()


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(
        description="Bulk import products and services from CSV or Excel.",
        epilog="Example: python scripts/import_products.py --file products.csv --dry-run",
    )
    parser.add_argument(
        "--file",
        "-f",
        type=Path,
        required=True,
        help="Path to a .csv, .xls or .xlsx file",
    )
    parser.add_argument(
        "--db-url",
        default=None,
        help="Database URL (default: DATABASE_URL from env/.env)",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Only decode the file and print the column mapping and row count; do not write to DB",
    )
    args = parser.parse_args(argv)

    path = args.file
    if not path.is_file():
        print(f"ERROR: File not found: {path}")
        return 1

    payload = path.read_bytes()
    content_type = mimetypes.guess_type(path.name)[0]

    if args.dry_run:
        try:
            rows = decode_file(path.name, content_type, payload)
        except StockDeskError as e:
            print(f"ERROR: {e.message}")
            return 1
        print(f"Parsed {len(rows)} rows from {path.name}")
        _print_mapping(rows)
        print("Dry-run: not writing to DB.")
        return 0

    db = _open_session(args.db_url)

    try:
        result = ProductImportService.import_file(db, path.name, content_type, payload)
    except StockDeskError as e:
        db.rollback()
        print(f"ERROR: {e.message}")
        return 1
    finally:
        db.close()

    print(f"Imported {result.success} products.")
    for err in result.errors[:10]:
        print(f"  Error: {err}")
    if len(result.errors) > 10:
        print(f"  ... and {len(result.errors) - 10} more errors")
    for warning in result.warnings[:10]:
        print(f"  Warning: {warning}")
    if len(result.warnings) > 10:
        print(f"  ... and {len(result.warnings) - 10} more warnings")
    return 0


if __name__ == "__main__":
    sys.exit(main())
