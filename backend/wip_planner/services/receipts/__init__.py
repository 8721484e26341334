"""Receipt validation and storage"""

from .data_url import (
    CheckedReceipt,
    ReceiptValidationError,
    detect_mime_type,
    parse_data_url,
    receipt_size,
    validate_receipt,
)
from .storage import ReceiptStorage

__all__ = [
    "CheckedReceipt",
    "ReceiptStorage",
    "ReceiptValidationError",
    "detect_mime_type",
    "parse_data_url",
    "receipt_size",
    "validate_receipt",
]
