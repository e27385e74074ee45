"""
Tests for ZIP image upload matching.

Run: pytest stockdesk/backend/tests/test_image_upload.py -v
"""

import json

import pytest

from app.exceptions import ImageUploadError
from app.models import Product
from app.services.image_upload_service import ImageUploadService, ProductLookup, base_name_for
from tests.factories import ProductFactory, make_zip

PNG = b"\x89PNG\r\n\x1a\nfake"


@pytest.fixture
def catalog(db, category):
    """A product, a service and a product known mostly by name."""
    return {
        "widget": ProductFactory.create(db, category, sku="PROD-001", name="Premium Headphones"),
        "service": ProductFactory.create(db, category, name="Consulting", type="SERVICE", service_code="CONS-001"),
        "inverter": ProductFactory.create(db, category, sku="INV-9", name="EPV150-WIFI+RS485, 5kW inverter"),
    }


class TestBaseName:

    @pytest.mark.parametrize("filename,expected", [
        ("PROD-001.jpg", "PROD-001"),
        ("PROD-001-2.jpg", "PROD-001"),
        ("PROD-001_3.PNG", "PROD-001"),
        ("PROD-001 (2).png", "PROD-001"),
        ("PROD-001 copy.webp", "PROD-001"),
        ("PROD-001 copy 2.gif", "PROD-001"),
        ("folder/sub/CONS-001.jpeg", "CONS-001"),
        ("SKU-12.jpg", "SKU-12"),
    ])
    def test_suffixes_removed(self, filename, expected):
        assert base_name_for(filename) == expected


class TestProductLookup:

    def test_match_by_sku_case_insensitive(self, db, catalog):
        lookup = ProductLookup.load(db)

        assert lookup.match("prod-001").id == catalog["widget"].id

    def test_match_by_service_code(self, db, catalog):
        assert ProductLookup.load(db).match("CONS-001").id == catalog["service"].id

    def test_match_by_name_before_comma(self, db, catalog):
        assert ProductLookup.load(db).match("EPV150-WIFI+RS485").id == catalog["inverter"].id

    def test_match_by_plus_variation(self, db, catalog):
        """File systems may turn '+' into '_'."""
        assert ProductLookup.load(db).match("EPV150-WIFI_RS485").id == catalog["inverter"].id

    def test_match_with_prefix_stripped(self, db, catalog):
        assert ProductLookup.load(db).match("prod-INV-9").id == catalog["inverter"].id

    def test_partial_name(self, db, catalog):
        assert ProductLookup.load(db).match("Premium Head").id == catalog["widget"].id

    def test_no_match(self, db, catalog):
        assert ProductLookup.load(db).match("ZZZ-404") is None


class TestUploadImages:

    def test_images_matched_and_merged(self, db, catalog, uploads_dir):
        widget = catalog["widget"]
        widget.images = json.dumps(["/uploads/product/existing.jpg"])
        db.commit()
        payload = make_zip({
            "PROD-001.jpg": PNG,
            "PROD-001-2.png": PNG,
            "CONS-001.jpg": PNG,
            "MYSTERY.jpg": PNG,
            "MYSTERY-2.jpg": PNG,
            "__MACOSX/._PROD-001.jpg": PNG,
            ".DS_Store": b"",
            "readme.txt": b"not an image",
        })

        response = ImageUploadService.upload_images(db, "images.zip", "application/zip", payload, str(uploads_dir))

        results = response["results"]
        assert response["success"] is True
        assert results["totalImages"] == 5
        assert results["matchedProducts"] == 2
        assert results["updated"] == 2
        assert results["failed"] == 0
        assert results["notFoundSkus"] == ["MYSTERY"]

        db.expire_all()
        widget = db.query(Product).filter(Product.id == widget.id).one()
        assert len(widget.image_urls) == 3
        assert widget.image_urls[0] == "/uploads/product/existing.jpg"
        assert all(url.startswith("/uploads/product/") for url in widget.image_urls)
        stored = list((uploads_dir / "product").iterdir())
        assert len(stored) == 3

        updated = {p["name"]: p for p in results["updatedProducts"]}
        assert updated["Premium Headphones"]["imageCount"] == 3
        assert updated["Consulting"]["serviceCode"] == "CONS-001"

    def test_not_a_zip_name(self, db, uploads_dir):
        with pytest.raises(ImageUploadError) as exc:
            ImageUploadService.upload_images(db, "images.rar", "application/x-rar", b"data", str(uploads_dir))

        assert exc.value.message == "Invalid file type. Please upload a ZIP file."

    def test_corrupt_zip(self, db, uploads_dir):
        with pytest.raises(ImageUploadError):
            ImageUploadService.upload_images(db, "images.zip", "application/zip", b"not a zip", str(uploads_dir))

    def test_too_large(self, db, uploads_dir, monkeypatch):
        from app.config import settings
        monkeypatch.setattr(settings, "MAX_IMAGE_ZIP_SIZE_MB", 0)

        with pytest.raises(ImageUploadError) as exc:
            ImageUploadService.upload_images(db, "images.zip", None, make_zip({"a.jpg": PNG}), str(uploads_dir))

        assert "less than" in exc.value.message

    def test_oversized_image_skipped_before_reading(self, db, catalog, uploads_dir, monkeypatch):
        """Should skip members whose uncompressed size exceeds the per-image limit."""
        from app.config import settings
        monkeypatch.setattr(settings, "MAX_IMAGE_FILE_SIZE_MB", 0)
        payload = make_zip({"PROD-001.jpg": PNG})

        response = ImageUploadService.upload_images(db, "images.zip", "application/zip", payload, str(uploads_dir))

        results = response["results"]
        assert results["totalImages"] == 1
        assert results["matchedProducts"] == 0
        assert results["errors"] == ["Image 'PROD-001.jpg' exceeds 0MB"]
        assert list((uploads_dir / "product").iterdir()) == []
        db.expire_all()
        assert db.query(Product).filter(Product.sku == "PROD-001").one().image_urls == []


class TestUploadEndpoint:

    def test_upload(self, client, db, catalog):
        response = client.post(
            "/api/products/bulk-upload-images",
            files={"zipFile": ("images.zip", make_zip({"PROD-001.jpg": PNG}), "application/zip")},
        )

        assert response.status_code == 200
        assert response.json()["results"]["updated"] == 1

    def test_missing_zip(self, client):
        response = client.post("/api/products/bulk-upload-images", data={})

        assert response.status_code == 400
        assert response.json() == {"error": "No ZIP file provided"}

    def test_wrong_type(self, client):
        response = client.post(
            "/api/products/bulk-upload-images",
            files={"zipFile": ("images.csv", b"SKU,Name", "text/csv")},
        )

        assert response.status_code == 400
        assert response.json()["error"] == "Invalid file type. Please upload a ZIP file."
