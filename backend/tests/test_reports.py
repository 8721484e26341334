"""
Tests for the bill summary, bill ZIP and window ledger exports.
"""

import io
import zipfile

import pandas as pd

from factories import add_attendance, add_bill, make_event, make_user
from wip_planner.models import AttendanceStatus
from wip_planner.services.reports import (
    build_bill_summary,
    build_bills_zip,
    build_window_ledger,
    export_window_ledger,
    format_money,
    summarize_ledger,
    zip_filename,
)


def _dinner():
    asha = make_user("a", "Asha")
    bala = make_user("b", "Bala")
    event = make_event(asha, title="Team Dinner", location=None)
    add_attendance(event, asha)
    add_attendance(event, bala)
    add_attendance(event, make_user("c", "Chitra"), status=AttendanceStatus.DECLINED)
    add_bill(
        event, bala, 2500, tax_cents=250, tip_cents=250,
        items=[{"label": "Pizza", "amount_cents": 1000, "quantity": 2}],
        attachments=[{"file_name": "pizza.png", "url": "data:image/png;base64,aGVsbG8="}],
    )
    return event


def test_format_money():
    assert format_money(123456) == "₹1,234.56"
    assert format_money(500, "USD") == "$5.00"
    assert format_money(100, "JPY") == "JPY 1.00"


def test_zip_filename_replaces_non_alphanumerics():
    assert zip_filename("Holi @ Rooftop!") == "Holi___Rooftop__Bills.zip"


def test_bill_summary_lists_bills_and_split():
    summary = build_bill_summary(_dinner())

    assert "Event: Team Dinner" in summary
    assert "Location: Not specified" in summary
    assert "Created by: Asha" in summary
    assert "  Paid by: Bala" in summary
    assert "  Subtotal: ₹20.00" in summary
    assert "  Total: ₹25.00" in summary
    assert "    - Pizza: ₹10.00 x 2" in summary
    assert "Number of Attendees: 2" in summary
    assert "Cost per Person: ₹12.50" in summary
    assert "  - Bala (b@example.com)" in summary
    assert "Chitra" not in summary


def test_bills_zip_contains_summary_and_receipts():
    event = _dinner()
    add_bill(event, make_user("a", "Asha"), 100, attachments=[
        {"file_name": "pizza.png", "url": "https://files.example.com/pizza.png", "size_bytes": 2048},
    ])

    archive = zipfile.ZipFile(io.BytesIO(build_bills_zip(event)))

    assert sorted(archive.namelist()) == [
        "Team Dinner - Bill Summary.txt",
        "receipts/pizza.png",
        "receipts/pizza.png.info.txt",
    ]
    assert archive.read("receipts/pizza.png") == b"hello"
    info = archive.read("receipts/pizza.png.info.txt").decode()
    assert "Size: 2048 bytes" in info
    assert "URL: https://files.example.com/pizza.png" in info


def test_window_ledger_rows_and_summary(tmp_path):
    dinner = _dinner()
    lunch = make_event(make_user("a", "Asha"), title="Lunch")
    add_attendance(lunch, make_user("a", "Asha"))
    add_bill(lunch, make_user("a", "Asha"), 600)

    ledger = build_window_ledger([dinner, lunch])

    assert len(ledger) == 3
    assert ledger["share_cents"].sum() == 3100
    assert list(ledger[ledger["event_title"] == "Team Dinner"]["attendee"]) == ["Asha", "Bala"]

    summary = summarize_ledger(ledger).set_index("email")
    assert summary.loc["a@example.com", "events"] == 2
    assert summary.loc["a@example.com", "net_cents"] == -1250
    assert summary.loc["b@example.com", "net_cents"] == 1250

    output = tmp_path / "ledger.csv"
    export_window_ledger([dinner, lunch], output)
    assert len(pd.read_csv(output)) == 3


def test_empty_ledger():
    ledger = build_window_ledger([])

    assert ledger.empty
    assert list(ledger.columns)[:3] == ["event_id", "event_title", "event_date"]
    assert summarize_ledger(ledger).empty


def test_bills_zip_entries_stay_inside_the_archive():
    asha = make_user("a", "Asha")
    event = make_event(asha, title="../Team/Dinner")
    add_bill(event, asha, 100, attachments=[
        {"file_name": "../../etc/pizza.png", "url": "data:image/png;base64,aGVsbG8="},
        {"file_name": "..", "url": "https://files.example.com/x"},
    ])

    names = zipfile.ZipFile(io.BytesIO(build_bills_zip(event))).namelist()

    assert sorted(names) == [
        "Dinner - Bill Summary.txt",
        "receipts/pizza.png",
        "receipts/receipt.info.txt",
    ]
