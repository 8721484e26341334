from __future__ import annotations

from pathlib import Path
from typing import Iterable, Union

import pandas as pd

from wip_planner.models.event import Event
from wip_planner.services.cost_sharing import calculate_equal_split

LEDGER_COLUMNS = [
    "event_id",
    "event_title",
    "event_date",
    "attendee",
    "email",
    "share_cents",
    "paid_cents",
    "net_cents",
]


def build_window_ledger(events: Iterable[Event]) -> pd.DataFrame:
    """One row per confirmed attendee per event with their equal share"""
    rows = []
    for event in events:
        split = calculate_equal_split(event)
        for share in split.shares:
            rows.append({
                "event_id": str(event.id),
                "event_title": event.title,
                "event_date": event.date.date().isoformat(),
                "attendee": share.name,
                "email": share.email,
                "share_cents": share.share_cents,
                "paid_cents": share.paid_cents,
                "net_cents": share.net_cents,
            })
    return pd.DataFrame(rows, columns=LEDGER_COLUMNS)


def summarize_ledger(ledger: pd.DataFrame) -> pd.DataFrame:
    """Totals per attendee across the window"""
    if ledger.empty:
        return pd.DataFrame(columns=["email", "attendee", "events", "share_cents", "paid_cents", "net_cents"])
    summary = (
        ledger.groupby(["email", "attendee"], dropna=False)
        .agg(
            events=("event_id", "nunique"),
            share_cents=("share_cents", "sum"),
            paid_cents=("paid_cents", "sum"),
            net_cents=("net_cents", "sum"),
        )
        .reset_index()
        .sort_values("net_cents")
    )
    return summary


def export_window_ledger(events: Iterable[Event], output: Union[str, Path]) -> pd.DataFrame:
    """Write the ledger to CSV and return it"""
    ledger = build_window_ledger(events)
    ledger.to_csv(output, index=False)
    return ledger
