"""
Application exceptions.

StockDeskError subclasses carry the HTTP status the API should answer with;
route handlers turn them into {"error": message} bodies.
"""
from typing import Optional


class StockDeskError(Exception):
    """Base exception for all application errors."""

    status_code = 500

    def __init__(self, message: str, status_code: Optional[int] = None):
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        super().__init__(message)

    def to_dict(self) -> dict:
        """Convert to API response format."""
        return {"error": self.message}


class UnsupportedFormatError(StockDeskError):
    """Uploaded file is neither CSV nor a spreadsheet."""

    status_code = 400


class FileDecodeError(StockDeskError):
    """Uploaded file could not be read as CSV text or as a workbook."""

    status_code = 400


class ImportAbortedError(StockDeskError):
    """Batch-fatal import failure: nothing after this point is processed."""

    status_code = 400


class RowRejectedError(StockDeskError):
    """A single import row failed validation; the batch continues."""

    status_code = 422


class ImageUploadError(StockDeskError):
    """Image archive rejected before any product was touched."""

    status_code = 400
