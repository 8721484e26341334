"""Bill downloads and window cost reports"""

from .bill_export import build_bill_summary, build_bills_zip, format_money, zip_filename
from .window_export import build_window_ledger, export_window_ledger, summarize_ledger

__all__ = [
    "build_bill_summary",
    "build_bills_zip",
    "build_window_ledger",
    "export_window_ledger",
    "format_money",
    "summarize_ledger",
    "zip_filename",
]
