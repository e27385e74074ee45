"""
Test suite for StockDesk.

Run all tests: pytest
Run unit tests only: pytest stockdesk/backend/tests/unit/
Run specific file: pytest stockdesk/backend/tests/test_product_import_service.py -v
"""
