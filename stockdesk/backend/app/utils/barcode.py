"""
Barcode helpers: type detection, validation and generation.

Pure functions, no database access. EAN-13 / EAN-8 / UPC-A check digits come
from python-barcode; ITF-14 and UPC-E use the same GS1 mod-10 rule.

Generated numeric codes live in the GS1 restricted-circulation range
(prefix 2), so they never clash with manufacturer-assigned GTINs.
"""
import hashlib
import re
from typing import Optional

import barcode as python_barcode
from barcode.errors import BarcodeError

EAN13 = "EAN13"
EAN8 = "EAN8"
UPCA = "UPCA"
UPCE = "UPCE"
CODE128 = "CODE128"
CODE39 = "CODE39"
ITF14 = "ITF14"
QR = "QR"
DATAMATRIX = "DATAMATRIX"
CUSTOM = "CUSTOM"

BARCODE_TYPES = (EAN13, EAN8, UPCA, UPCE, CODE128, CODE39, ITF14, QR, DATAMATRIX, CUSTOM)

# python-barcode class names for the symbologies it computes checksums for
_LIBRARY_CLASSES = {EAN13: "ean13", EAN8: "ean8", UPCA: "upca"}
_GTIN_LENGTHS = {EAN13: 13, EAN8: 8, UPCA: 12, ITF14: 14}

_CODE39_PATTERN = re.compile(r"^[0-9A-Z\-. $/+%]+$")
_CODE39_STRIP = re.compile(r"[^0-9A-Z\-. $/+%]")
_CODE128_MAX_LENGTH = 80
_FREEFORM_MAX_LENGTH = 2000


def normalize_barcode_type(barcode_type: Optional[str]) -> Optional[str]:
    """Map 'EAN-13', 'upc_a', 'Code 128' etc. to a BARCODE_TYPES member, or None."""
    if not barcode_type:
        return None
    key = re.sub(r"[^A-Z0-9]", "", str(barcode_type).upper())
    return key if key in BARCODE_TYPES else None


def _gs1_check_digit(body: str) -> str:
    """GS1 mod-10 check digit; weights 3,1,3,... from the rightmost body digit."""
    total = sum(int(d) * (3 if i % 2 == 0 else 1) for i, d in enumerate(reversed(body)))
    return str((10 - total % 10) % 10)


def _library_fullcode(barcode_type: str, body: str) -> str:
    """Body plus check digit, computed by python-barcode."""
    barcode_class = python_barcode.get_barcode_class(_LIBRARY_CLASSES[barcode_type])
    return barcode_class(body).get_fullcode()


def _expand_upce(upce: str) -> str:
    """Expand an 8-digit UPC-E (number system + 6 digits + check) to its 11-digit UPC-A body."""
    ns, d = upce[0], upce[1:7]
    last = d[5]
    if last in "012":
        return f"{ns}{d[0]}{d[1]}{last}0000{d[2]}{d[3]}{d[4]}"
    if last == "3":
        return f"{ns}{d[0]}{d[1]}{d[2]}00000{d[3]}{d[4]}"
    if last == "4":
        return f"{ns}{d[0]}{d[1]}{d[2]}{d[3]}00000{d[4]}"
    return f"{ns}{d[0]}{d[1]}{d[2]}{d[3]}{d[4]}0000{last}"


def detect_barcode_type(value: Optional[str]) -> str:
    """
    Guess the symbology from the shape of the value.

    Digit-only values are classified by length (13 EAN-13, 8 EAN-8, 12 UPC-A,
    14 ITF-14, 6 UPC-E); anything else is CODE39 when it fits the Code 39
    alphabet and CODE128 otherwise.
    """
    text = (value or "").strip()
    if text.isdigit():
        by_length = {13: EAN13, 8: EAN8, 12: UPCA, 14: ITF14, 6: UPCE}
        if len(text) in by_length:
            return by_length[len(text)]
    if text and _CODE39_PATTERN.match(text):
        return CODE39
    return CODE128


def validate_barcode(value: Optional[str], barcode_type: Optional[str]) -> bool:
    """Return True if value is a well-formed barcode of the given type."""
    text = (value or "").strip()
    kind = normalize_barcode_type(barcode_type)
    if not text or kind is None:
        return False

    if kind in _LIBRARY_CLASSES:
        if len(text) != _GTIN_LENGTHS[kind] or not text.isdigit():
            return False
        try:
            return _library_fullcode(kind, text[:-1]) == text
        except BarcodeError:
            return False

    if kind == ITF14:
        return len(text) == 14 and text.isdigit() and _gs1_check_digit(text[:-1]) == text[-1]

    if kind == UPCE:
        if not text.isdigit() or len(text) not in (6, 7, 8):
            return False
        if len(text) == 6:
            return True
        if text[0] not in "01":
            return False
        if len(text) == 7:
            return True
        return _gs1_check_digit(_expand_upce(text)) == text[-1]

    if kind == CODE39:
        return bool(_CODE39_PATTERN.match(text))

    if kind == CODE128:
        return len(text) <= _CODE128_MAX_LENGTH and all(32 <= ord(ch) <= 126 for ch in text)

    # QR / DATAMATRIX / CUSTOM: any non-empty payload
    return len(text) <= _FREEFORM_MAX_LENGTH


def _seed_digits(seed: str) -> str:
    """Stable decimal digit stream derived from the seed."""
    digest = hashlib.sha1(seed.encode("utf-8")).hexdigest()
    return str(int(digest, 16)).zfill(48)


def generate_barcode(seed: str, barcode_type: str = EAN13) -> str:
    """
    Generate a barcode of the given type from a seed (usually the SKU).

    The same seed always yields the same code; callers wanting a fresh code
    for a colliding value must change the seed.
    """
    kind = normalize_barcode_type(barcode_type) or EAN13
    seed = str(seed or "")
    digits = _seed_digits(seed)

    if kind == EAN13:
        return _library_fullcode(EAN13, "2" + digits[:11])
    if kind == EAN8:
        return _library_fullcode(EAN8, "2" + digits[:6])
    if kind == UPCA:
        return _library_fullcode(UPCA, "2" + digits[:10])
    if kind == ITF14:
        body = "12" + digits[:11]
        return body + _gs1_check_digit(body)
    if kind == UPCE:
        # Number system 0, last data digit 5-9 so the expansion keeps all five digits
        short = "0" + digits[:5] + str(5 + int(digits[5]) % 5)
        return short + _gs1_check_digit(_expand_upce(short))
    if kind == CODE39:
        return _CODE39_STRIP.sub("", seed.upper()).strip() or digits[:12]
    if kind == CODE128:
        text = "".join(ch for ch in seed.strip() if 32 <= ord(ch) <= 126)
        return text[:_CODE128_MAX_LENGTH] or digits[:12]
    return seed.strip() or digits[:12]
