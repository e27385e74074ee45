"""
Unit tests for the uploaded file decoder.

Run: pytest stockdesk/backend/tests/unit/test_file_decoder.py -v
"""

import pytest

from app.exceptions import FileDecodeError, UnsupportedFormatError
from app.services.file_decoder import decode_file, is_spreadsheet, parse_csv_text
from tests.factories import csv_bytes, make_xlsx


class TestParseCsvText:
    """Tests for parse_csv_text()"""

    def test_rows_keyed_by_header(self):
        rows = parse_csv_text("SKU,Name,Price\nABC-1,Widget,10.50\n")

        assert rows == [{"SKU": "ABC-1", "Name": "Widget", "Price": "10.50"}]

    def test_quoted_field_with_comma(self):
        rows = parse_csv_text('SKU,Name\nABC-1,"Widget, large"\n')

        assert rows[0]["Name"] == "Widget, large"

    def test_blank_lines_skipped(self):
        rows = parse_csv_text("SKU,Name\n\nABC-1,Widget\n   \nABC-2,Gadget\n")

        assert [r["SKU"] for r in rows] == ["ABC-1", "ABC-2"]

    def test_values_and_headers_trimmed(self):
        rows = parse_csv_text(" SKU , Name \n  ABC-1 ,  Widget  \n")

        assert rows == [{"SKU": "ABC-1", "Name": "Widget"}]

    def test_short_row_padded(self):
        rows = parse_csv_text("SKU,Name,Price\nABC-1\n")

        assert rows == [{"SKU": "ABC-1", "Name": "", "Price": ""}]

    def test_header_only_is_empty(self):
        assert parse_csv_text("SKU,Name\n") == []

    def test_empty_text(self):
        assert parse_csv_text("") == []

    def test_header_order_preserved(self):
        rows = parse_csv_text("Name,SKU\nWidget,ABC-1\n")

        assert list(rows[0].keys()) == ["Name", "SKU"]


class TestDecodeFile:
    """Tests for decode_file()"""

    def test_csv_with_utf8_bom(self):
        payload = "\ufeffSKU,Name\nABC-1,Café\n".encode("utf-8")

        rows = decode_file("products.csv", "text/csv", payload)

        assert rows == [{"SKU": "ABC-1", "Name": "Café"}]

    def test_csv_cp1252_fallback(self):
        payload = "SKU,Name\nABC-1,Café\n".encode("cp1252")

        rows = decode_file("products.csv", "text/csv", payload)

        assert rows[0]["Name"] == "Café"

    def test_unknown_extension_treated_as_csv(self):
        rows = decode_file("products.txt", None, csv_bytes("SKU,Name", "ABC-1,Widget"))

        assert rows[0]["SKU"] == "ABC-1"

    def test_xlsx_by_extension(self):
        payload = make_xlsx([
            {"SKU": "ABC-1", "Name": "Widget", "Price": 10.5},
            {"SKU": "ABC-2", "Name": "Gadget", "Price": None},
        ])

        rows = decode_file("products.xlsx", None, payload)

        assert len(rows) == 2
        assert rows[0]["SKU"] == "ABC-1"
        assert rows[0]["Price"] == 10.5
        assert rows[1]["Price"] is None

    def test_xlsx_by_mime_type(self):
        payload = make_xlsx([{"SKU": "ABC-1", "Name": "Widget"}])
        mime = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"

        rows = decode_file("upload", mime, payload)

        assert rows[0]["Name"] == "Widget"

    def test_corrupt_workbook(self):
        with pytest.raises(FileDecodeError):
            decode_file("products.xlsx", None, b"not a workbook")

    @pytest.mark.parametrize("filename,content_type", [
        ("catalog.pdf", "application/pdf"),
        ("images.zip", None),
        ("photo.png", "image/png"),
        ("upload", "image/jpeg"),
    ])
    def test_unsupported_formats(self, filename, content_type):
        with pytest.raises(UnsupportedFormatError):
            decode_file(filename, content_type, b"%PDF-1.4")


class TestIsSpreadsheet:

    def test_extensions(self):
        assert is_spreadsheet("a.xlsx")
        assert is_spreadsheet("A.XLS")
        assert not is_spreadsheet("a.csv")

    def test_mime_with_parameters(self):
        assert is_spreadsheet(None, "application/vnd.ms-excel; charset=binary")
