from __future__ import annotations

from typing import Dict, List

from wip_planner.models.attendance import Attendance, AttendanceStatus
from wip_planner.models.event import Event
from wip_planner.models.user import User
from wip_planner.schemas.api.cost_sharing import CostSplit, PersonStats, ShareEntry


def event_total_cents(event: Event) -> int:
    """Sum of all bill totals of an event."""
    return sum(bill.total_cents or 0 for bill in event.bills)


def confirmed_participants(event: Event) -> List[Attendance]:
    """Confirmed attendances linked to a registered user, ordered by name."""
    participants = [
        attendance for attendance in event.attendances
        if attendance.status == AttendanceStatus.CONFIRMED and attendance.user_id
    ]
    return sorted(participants, key=_participant_sort_key)


def confirmed_attendee_count(event: Event) -> int:
    """Head count used everywhere the event total is divided"""
    return len(confirmed_participants(event))


def _participant_sort_key(attendance: Attendance) -> tuple:
    user = attendance.user
    name = (user.name if user and user.name else attendance.email) or ""
    return (name.lower(), attendance.user_id or "")


def _paid_by_user(event: Event) -> Dict[str, int]:
    paid: Dict[str, int] = {}
    for bill in event.bills:
        paid[bill.payer_id] = paid.get(bill.payer_id, 0) + (bill.total_cents or 0)
    return paid


def calculate_equal_split(event: Event, currency: str = "INR") -> CostSplit:
    """
    Split the event total equally among confirmed attendees.

    Shares are whole cents; the first ``total % n`` attendees (by name) carry
    one extra cent so the shares always add up to the total.
    """
    participants = confirmed_participants(event)
    total = event_total_cents(event)
    count = len(participants)

    if count == 0:
        return CostSplit(total_cents=total, attendee_count=0, per_person_cents=0, currency=currency)

    base_share, remainder = divmod(total, count)
    paid = _paid_by_user(event)
    percentage = round(100 / count, 1)

    shares = []
    for index, attendance in enumerate(participants):
        share = base_share + (1 if index < remainder else 0)
        paid_cents = paid.get(attendance.user_id, 0)
        user = attendance.user
        shares.append(
            ShareEntry(
                user_id=attendance.user_id,
                name=user.name if user else None,
                email=user.email if user else attendance.email,
                share_cents=share,
                percentage=percentage,
                paid_cents=paid_cents,
                net_cents=paid_cents - share,
            )
        )

    return CostSplit(
        total_cents=total,
        attendee_count=count,
        per_person_cents=total / count,
        currency=currency,
        shares=shares,
    )


def calculate_person_stats(user: User) -> PersonStats:
    """Spending and owed amounts of a user across their confirmed events."""
    confirmed = [a for a in user.attendances if a.status == AttendanceStatus.CONFIRMED]

    total_spent = 0.0
    total_owed = 0.0
    for attendance in confirmed:
        event = attendance.event
        if event is None or not event.bills:
            continue
        event_total = event_total_cents(event)
        attendee_count = confirmed_attendee_count(event) or 1
        total_owed += event_total / attendee_count
        total_spent += sum(b.total_cents or 0 for b in event.bills if b.payer_id == user.id)

    return PersonStats(
        id=user.id,
        name=user.name,
        email=user.email,
        image=user.image,
        event_count=len(confirmed),
        total_spent=round(total_spent),
        total_owed=round(total_owed),
    )
