"""
Uploaded file decoding for bulk product import.

Turns a CSV or spreadsheet payload into raw rows: one dict per data row,
keyed by the original header text in header order. Values are left as the
file gave them (str for CSV; str/int/float for spreadsheets; None for blank
spreadsheet cells).
"""
import csv
import io
import logging
from io import BytesIO
from pathlib import PurePath
from typing import Any, Dict, List, Optional

import pandas as pd

from app.exceptions import FileDecodeError, UnsupportedFormatError

logger = logging.getLogger(__name__)

RawRow = Dict[str, Any]

SPREADSHEET_EXTENSIONS = {".xls", ".xlsx", ".xlsm"}
SPREADSHEET_MIME_TYPES = {
    "application/vnd.ms-excel",
    "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
    "application/vnd.ms-excel.sheet.macroenabled.12",
}

# Formats that cannot be read as CSV text; anything else unknown is tried as CSV
UNSUPPORTED_EXTENSIONS = {
    ".pdf", ".zip", ".gz", ".rar", ".7z", ".doc", ".docx", ".ppt", ".pptx",
    ".png", ".jpg", ".jpeg", ".gif", ".webp", ".ods", ".numbers",
}
UNSUPPORTED_MIME_PREFIXES = ("image/", "audio/", "video/")
UNSUPPORTED_MIME_TYPES = {"application/pdf", "application/zip", "application/x-zip-compressed"}

_TEXT_ENCODINGS = ("utf-8-sig", "cp1252")


def _extension(filename: Optional[str]) -> str:
    return PurePath(filename or "").suffix.lower()


def _mime(content_type: Optional[str]) -> str:
    return (content_type or "").split(";")[0].strip().lower()


def is_spreadsheet(filename: Optional[str], content_type: Optional[str] = None) -> bool:
    """True when the file name or MIME type declares an Excel workbook."""
    return _extension(filename) in SPREADSHEET_EXTENSIONS or _mime(content_type) in SPREADSHEET_MIME_TYPES


def _check_supported(filename: Optional[str], content_type: Optional[str]) -> None:
    ext = _extension(filename)
    mime = _mime(content_type)
    if ext in UNSUPPORTED_EXTENSIONS or mime in UNSUPPORTED_MIME_TYPES or mime.startswith(UNSUPPORTED_MIME_PREFIXES):
        raise UnsupportedFormatError(
            f"Unsupported file type '{ext or mime}'. Please upload a CSV, XLS or XLSX file."
        )


def _decode_text(payload: bytes) -> str:
    for encoding in _TEXT_ENCODINGS:
        try:
            return payload.decode(encoding)
        except UnicodeDecodeError:
            continue
    raise FileDecodeError("Could not decode CSV file: unknown text encoding (expected UTF-8)")


def parse_csv_text(content: str) -> List[RawRow]:
    """
    Parse CSV text into raw rows keyed by the first line's headers.

    Quoted fields may contain commas; blank lines are skipped. Short rows are
    padded with '' and extra trailing cells are dropped so every row has the
    header's keys in the header's order.
    """
    try:
        records = [
            record for record in csv.reader(io.StringIO(content), skipinitialspace=True)
            if any(cell.strip() for cell in record)
        ]
    except csv.Error as e:
        raise FileDecodeError(f"Failed to parse CSV file: {e}") from e

    if not records:
        return []

    headers = [h.strip() for h in records[0]]
    rows: List[RawRow] = []
    for record in records[1:]:
        values = [cell.strip() for cell in record]
        values += [""] * (len(headers) - len(values))
        rows.append(dict(zip(headers, values)))
    return rows


def parse_spreadsheet(payload: bytes) -> List[RawRow]:
    """Parse the first sheet of an XLS/XLSX workbook; NaN cells become None."""
    try:
        df = pd.read_excel(BytesIO(payload), sheet_name=0, dtype=object)
    except Exception as e:
        # pandas surfaces engine-specific errors (zipfile, xlrd, openpyxl) for bad workbooks
        raise FileDecodeError(f"Failed to read spreadsheet: {e}") from e

    df = df.dropna(how="all")
    df.columns = [str(c).strip() for c in df.columns]
    raw = df.to_dict("records")
    return [
        {k: (None if pd.isna(v) else v) for k, v in row.items()}
        for row in raw
    ]


def decode_file(filename: Optional[str], content_type: Optional[str], payload: bytes) -> List[RawRow]:
    """
    Decode an uploaded file into raw rows.

    Spreadsheets (by extension or MIME type) go through pandas; everything else
    is treated as CSV text. An empty result is not an error; the caller decides
    what zero rows means.
    """
    if is_spreadsheet(filename, content_type):
        rows = parse_spreadsheet(payload)
        kind = "spreadsheet"
    else:
        _check_supported(filename, content_type)
        rows = parse_csv_text(_decode_text(payload))
        kind = "CSV"
    logger.info(f"Decoded {len(rows)} rows from {kind} file '{filename}'")
    return rows
