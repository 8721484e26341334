"""
Bill download: a ZIP with a plain-text bill summary and the receipts.
"""

from __future__ import annotations

import io
import re
import zipfile
from pathlib import PurePosixPath
from typing import Optional

from wip_planner.models.event import Event
from wip_planner.schemas.api.cost_sharing import CostSplit
from wip_planner.services.cost_sharing import calculate_equal_split, confirmed_participants
from wip_planner.services.receipts import ReceiptStorage
from wip_planner.utils.logger import get_logger

logger = get_logger(__name__)

CURRENCY_SYMBOLS = {"INR": "₹", "USD": "$", "EUR": "€", "GBP": "£"}


def format_money(cents: float, currency: str = "INR") -> str:
    symbol = CURRENCY_SYMBOLS.get(currency, f"{currency} ")
    return f"{symbol}{cents / 100:,.2f}"


def zip_filename(title: str) -> str:
    return f"{re.sub(r'[^a-zA-Z0-9]', '_', title)}_Bills.zip"


def build_bill_summary(event: Event, split: Optional[CostSplit] = None) -> str:
    """Plain-text summary of every bill and the equal split"""
    currency = event.bills[0].currency if event.bills else "INR"
    split = split or calculate_equal_split(event, currency)
    creator_name = event.creator.name if event.creator else "Unknown"

    lines = [
        f"Event: {event.title}",
        f"Date: {event.date.strftime('%Y-%m-%d')}",
        f"Location: {event.location or 'Not specified'}",
        f"Created by: {creator_name}",
        "",
        "=== BILLS SUMMARY ===",
        "",
    ]

    for index, bill in enumerate(event.bills, start=1):
        payer_name = bill.payer.name if bill.payer else bill.payer_id
        lines.append(f"Bill {index}:")
        lines.append(f"  Paid by: {payer_name}")
        lines.append(f"  Subtotal: {format_money(bill.subtotal_cents, bill.currency)}")
        lines.append(f"  Tax: {format_money(bill.tax_cents, bill.currency)}")
        lines.append(f"  Tip: {format_money(bill.tip_cents, bill.currency)}")
        lines.append(f"  Total: {format_money(bill.total_cents, bill.currency)}")
        if bill.notes:
            lines.append(f"  Notes: {bill.notes}")
        if bill.items:
            lines.append("  Items:")
            for item in bill.items:
                lines.append(f"    - {item.label}: {format_money(item.amount_cents, bill.currency)} x {item.quantity}")
        lines.append("")

    lines.extend([
        "=== COST SHARING ===",
        "",
        f"Total Event Cost: {format_money(split.total_cents, split.currency)}",
        f"Number of Attendees: {split.attendee_count}",
        f"Cost per Person: {format_money(split.per_person_cents, split.currency)}",
        "",
        "Attendees:",
    ])
    for attendance in confirmed_participants(event):
        user = attendance.user
        lines.append(f"  - {user.name if user else attendance.email} ({user.email if user else attendance.email})")

    return "\n".join(lines) + "\n"


def build_bills_zip(event: Event, storage: Optional[ReceiptStorage] = None) -> bytes:
    """ZIP archive with the bill summary and a receipts/ folder"""
    storage = storage or ReceiptStorage()
    buffer = io.BytesIO()

    with zipfile.ZipFile(buffer, "w", zipfile.ZIP_DEFLATED) as archive:
        title = _entry_name(event.title, "Event")
        archive.writestr(f"{title} - Bill Summary.txt", build_bill_summary(event))

        used_names = set()
        for bill in event.bills:
            for attachment in bill.attachments:
                file_name = _entry_name(attachment.file_name, "receipt")
                content = storage.read(attachment.url)
                if content is not None:
                    name = _unique_name(f"receipts/{file_name}", used_names)
                    archive.writestr(name, content)
                    continue
                info = (
                    f"Receipt: {attachment.file_name}\n"
                    f"Size: {attachment.size_bytes} bytes\n"
                    f"Uploaded: {attachment.created_at.isoformat() if attachment.created_at else 'unknown'}\n"
                    f"URL: {attachment.url}"
                )
                archive.writestr(_unique_name(f"receipts/{file_name}.info.txt", used_names), info)

    return buffer.getvalue()


def _entry_name(name: str, fallback: str) -> str:
    """Last path component only, so archive entries stay flat"""
    cleaned = PurePosixPath(name.replace("\\", "/")).name
    return cleaned if cleaned not in ("", ".", "..") else fallback


def _unique_name(name: str, used: set) -> str:
    candidate, counter = name, 1
    while candidate in used:
        stem, dot, ext = name.rpartition(".")
        candidate = f"{stem} ({counter}).{ext}" if dot else f"{name} ({counter})"
        counter += 1
    used.add(candidate)
    return candidate
