"""
Bulk product image upload.

Images in a ZIP archive are matched to products by file name (SKU, service
code or product name), written under UPLOADS_DIR/product and appended to
each product's images list:

    PROD-001.jpg, PROD-001-2.jpg, PROD-001 (3).png  -> product with SKU PROD-001
    CONS-001.jpg                                    -> service with code CONS-001
"""
import json
import logging
import os
import re
import time
import zipfile
from dataclasses import dataclass, field
from io import BytesIO
from pathlib import Path, PurePosixPath
from typing import Dict, List, Optional
from uuid import UUID

from sqlalchemy.orm import Session

from app.config import settings
from app.exceptions import ImageUploadError
from app.models import Product

logger = logging.getLogger(__name__)

IMAGE_EXTENSIONS = {'.jpg', '.jpeg', '.png', '.webp', '.gif'}
ZIP_MIME_TYPES = {'application/zip', 'application/x-zip-compressed'}
PRODUCT_IMAGE_SUBDIR = 'product'

_COUNTER_SUFFIX = re.compile(r'[-_]\d$')
_PAREN_SUFFIX = re.compile(r'\s*\(\d+\)$')
_COPY_SUFFIX = re.compile(r'\s*copy\s*\d*$', re.IGNORECASE)
_PROD_PREFIX = re.compile(r'^prod[-_]?')
_SKU_PREFIX = re.compile(r'^sku[-_]?')
_NAME_TOKEN = re.compile(r'[\s,]')


def base_name_for(filename: str) -> str:
    """
    File name -> product key: drop the extension, then a trailing single-digit
    counter ("-2", "_3"), "(n)" or "copy"/"copy n".
    """
    stem = PurePosixPath(filename).name
    stem = re.sub(r'\.(jpg|jpeg|png|gif|webp)$', '', stem, flags=re.IGNORECASE)
    stem = _COUNTER_SUFFIX.sub('', stem)
    stem = _PAREN_SUFFIX.sub('', stem)
    stem = _COPY_SUFFIX.sub('', stem)
    return stem.strip()


def _is_image_member(info: zipfile.ZipInfo) -> bool:
    if info.is_dir():
        return False
    path = info.filename
    name = PurePosixPath(path).name
    if name.startswith('.') or '__MACOSX' in path or '.DS_Store' in path:
        return False
    return PurePosixPath(name).suffix.lower() in IMAGE_EXTENSIONS


@dataclass
class ProductLookup:
    """Lower-cased SKU / service code / name maps over every product, loaded once."""
    by_sku: Dict[str, Product] = field(default_factory=dict)
    by_service_code: Dict[str, Product] = field(default_factory=dict)
    by_name: Dict[str, Product] = field(default_factory=dict)

    @classmethod
    def load(cls, db: Session) -> "ProductLookup":
        lookup = cls()
        for product in db.query(Product).all():
            if product.sku:
                lookup.by_sku[product.sku.lower()] = product
            if product.service_code:
                lookup.by_service_code[product.service_code.lower()] = product
            if product.name:
                full = product.name.lower()
                lookup.by_name.setdefault(full, product)
                before_comma = product.name.split(',')[0].strip().lower()
                if before_comma:
                    lookup.by_name.setdefault(before_comma, product)
                first_token = _NAME_TOKEN.split(product.name.strip())[0].strip().lower()
                if first_token:
                    lookup.by_name.setdefault(first_token, product)
        return lookup

    def _direct(self, key: str) -> Optional[Product]:
        return self.by_sku.get(key) or self.by_service_code.get(key) or self.by_name.get(key)

    def match(self, base_name: str) -> Optional[Product]:
        """Direct key, then common spelling variations, then a name prefix either way."""
        key = base_name.lower()
        product = self._direct(key)
        if product:
            return product

        variations = [
            _PROD_PREFIX.sub('', key),
            _SKU_PREFIX.sub('', key),
            f'prod-{key}',
            f'sku-{key}',
            # File systems sometimes rewrite '+'
            key.replace('+', ' '),
            key.replace('+', '-'),
            key.replace('+', '_'),
            key.replace('_', '+'),
            key.replace('-', '+'),
        ]
        for variation in variations:
            product = self._direct(variation)
            if product:
                logger.debug(f"Matched '{base_name}' via variation '{variation}'")
                return product

        if not key:
            return None
        for name_key, candidate in self.by_name.items():
            if name_key.startswith(key) or key.startswith(name_key):
                logger.debug(f"Matched '{base_name}' via partial name '{name_key}'")
                return candidate
        return None


class ImageUploadService:
    """Matches a ZIP of product images to products and stores them"""

    @staticmethod
    def _validate(filename: Optional[str], content_type: Optional[str], payload: bytes) -> None:
        if not payload:
            raise ImageUploadError("No ZIP file provided")
        mime = (content_type or '').split(';')[0].strip().lower()
        if not (filename or '').lower().endswith('.zip') and mime not in ZIP_MIME_TYPES:
            raise ImageUploadError("Invalid file type. Please upload a ZIP file.")
        if len(payload) > settings.MAX_IMAGE_ZIP_SIZE_MB * 1024 * 1024:
            raise ImageUploadError(f"ZIP file size must be less than {settings.MAX_IMAGE_ZIP_SIZE_MB}MB")

    @staticmethod
    def _store_image(upload_dir: Path, data: bytes, extension: str) -> str:
        """Write one image under a unique name and return its public URL."""
        filename = f"product_{int(time.time() * 1000)}_{os.urandom(4).hex()}{extension}"
        with open(upload_dir / filename, 'wb') as buffer:
            buffer.write(data)
        return f"/uploads/{PRODUCT_IMAGE_SUBDIR}/{filename}"

    @staticmethod
    def upload_images(
        db: Session,
        filename: Optional[str],
        content_type: Optional[str],
        payload: bytes,
        uploads_dir: Optional[str] = None,
    ) -> Dict:
        """
        Process an image ZIP and return the upload summary.

        Raises:
            ImageUploadError: missing, non-ZIP, oversized or corrupt archive
        """
        ImageUploadService._validate(filename, content_type, payload)

        try:
            archive = zipfile.ZipFile(BytesIO(payload))
        except zipfile.BadZipFile as e:
            raise ImageUploadError(f"Invalid ZIP file: {e}") from e

        upload_dir = Path(uploads_dir or settings.UPLOADS_DIR) / PRODUCT_IMAGE_SUBDIR
        upload_dir.mkdir(parents=True, exist_ok=True)

        with archive:
            members = [info for info in archive.infolist() if _is_image_member(info)]
            logger.info(f"Found {len(members)} image files in ZIP '{filename}'")

            lookup = ProductLookup.load(db)
            logger.info(f"Loaded {len(lookup.by_sku) + len(lookup.by_service_code)} product identifiers for matching")

            images_by_product: Dict[UUID, List[str]] = {}
            not_found: List[str] = []
            errors: List[str] = []
            max_image_bytes = settings.MAX_IMAGE_FILE_SIZE_MB * 1024 * 1024

            for info in members:
                # Declared uncompressed size, checked before anything is inflated
                if info.file_size > max_image_bytes:
                    logger.warning(f"Skipping image '{info.filename}': {info.file_size} bytes uncompressed")
                    errors.append(f"Image '{info.filename}' exceeds {settings.MAX_IMAGE_FILE_SIZE_MB}MB")
                    continue

                base_name = base_name_for(info.filename)
                product = lookup.match(base_name)
                if not product:
                    logger.info(f"No product found for image '{info.filename}' (looked for '{base_name}')")
                    if base_name not in not_found:
                        not_found.append(base_name)
                    continue

                extension = PurePosixPath(info.filename).suffix.lower()
                url = ImageUploadService._store_image(upload_dir, archive.read(info), extension)
                images_by_product.setdefault(product.id, []).append(url)

        results = {
            'totalImages': len(members),
            'matchedProducts': len(images_by_product),
            'updated': 0,
            'failed': 0,
            'notFound': 0,
            'notFoundSkus': not_found,
            'updatedProducts': [],
            'errors': errors,
        }

        for product_id, urls in images_by_product.items():
            try:
                product = db.query(Product).filter(Product.id == product_id).first()
                if not product:
                    results['notFound'] += 1
                    continue
                merged = list(dict.fromkeys(product.image_urls + urls))
                product.images = json.dumps(merged)
                db.commit()
                results['updated'] += 1
                results['updatedProducts'].append({
                    'sku': product.sku,
                    'serviceCode': product.service_code,
                    'name': product.name,
                    'imageCount': len(merged),
                })
                logger.info(f"Updated product {product.sku or product.service_code} with {len(merged)} images")
            except Exception as e:
                db.rollback()
                results['failed'] += 1
                results['errors'].append(f"Failed to update product {product_id}: {e}")
                logger.error(f"Error updating images for product {product_id}: {e}", exc_info=True)

        return {
            'success': True,
            'message': 'Bulk image upload completed',
            'results': results,
        }
