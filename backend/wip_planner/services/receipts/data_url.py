from __future__ import annotations

import base64
import binascii
import re
from typing import NamedTuple, Optional, Tuple
from urllib.parse import unquote_to_bytes

ALLOWED_MIME_TYPES = frozenset({"image/jpeg", "image/jpg", "image/png", "application/pdf"})

_DATA_URL_RE = re.compile(r"^data:(?P<mime>[\w.+-]+/[\w.+-]+)?(?P<params>(;[^,;]+)*?)(?P<b64>;base64)?,(?P<data>.*)$", re.DOTALL)


class ReceiptValidationError(ValueError):
    """Receipt file rejected (type or size)"""


def is_data_url(url: str) -> bool:
    return url.startswith("data:")


def parse_data_url(url: str) -> Optional[Tuple[str, bytes]]:
    """Return (mime type, payload) for a data: URL, None for anything else."""
    match = _DATA_URL_RE.match(url)
    if not match:
        return None
    mime = match.group("mime") or "text/plain"
    data = match.group("data")
    try:
        payload = base64.b64decode(data, validate=False) if match.group("b64") else unquote_to_bytes(data)
    except (binascii.Error, ValueError):
        return None
    return mime.lower(), payload


def detect_mime_type(file_name: str, url: str) -> str:
    """MIME type from the data URL header, else from the file extension."""
    if is_data_url(url):
        match = _DATA_URL_RE.match(url)
        if match and match.group("mime"):
            return match.group("mime").lower()
    lowered = file_name.lower()
    if lowered.endswith(".pdf"):
        return "application/pdf"
    if lowered.endswith(".png"):
        return "image/png"
    return "image/jpeg"


class CheckedReceipt(NamedTuple):
    mime_type: str
    size: int


def receipt_size(url: str, declared: int) -> int:
    """Decoded size for data URLs; anything else is trusted at the declared size."""
    if not is_data_url(url):
        return declared
    parsed = parse_data_url(url)
    if parsed is None:
        raise ReceiptValidationError("Receipt data could not be decoded.")
    return len(parsed[1])


def validate_receipt(file_name: str, url: str, size: int, max_bytes: int) -> CheckedReceipt:
    """Check a receipt's size and type."""
    actual_size = receipt_size(url, size)
    if max(size, actual_size) > max_bytes:
        raise ReceiptValidationError(
            f"File {file_name} is too large. Max size is {max_bytes // (1024 * 1024)}MB."
        )
    mime_type = detect_mime_type(file_name, url)
    if mime_type not in ALLOWED_MIME_TYPES:
        raise ReceiptValidationError(
            f"File {file_name} is not a valid type. Only JPG, PNG, and PDF files are allowed."
        )
    return CheckedReceipt("image/jpeg" if mime_type == "image/jpg" else mime_type, actual_size)
