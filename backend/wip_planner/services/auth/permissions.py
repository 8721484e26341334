"""
Per-route permission rules: event creator vs. attendee vs. invitee.
"""

from __future__ import annotations

from typing import Iterable, Optional

from wip_planner.models.attendance import Attendance, AttendanceStatus
from wip_planner.models.bill import Bill
from wip_planner.models.event import Event

ATTENDEE_EDITABLE_EVENT_FIELDS = frozenset({"paid_by_id"})


def is_event_creator(event: Event, user_id: str) -> bool:
    return event.creator_id == user_id


def is_event_attendee(event: Event, user_id: str) -> bool:
    """Any attendance (whatever its status) linked to the user."""
    return any(a.user_id == user_id for a in event.attendances)


def is_confirmed_attendee(event: Event, user_id: str) -> bool:
    return any(
        a.user_id == user_id and a.status == AttendanceStatus.CONFIRMED
        for a in event.attendances
    )


def can_edit_event(event: Event, user_id: str, fields: Iterable[str]) -> bool:
    """Creator edits everything; attendees may only set who paid."""
    if is_event_creator(event, user_id):
        return True
    fields = set(fields)
    return bool(fields) and fields <= ATTENDEE_EDITABLE_EVENT_FIELDS and is_event_attendee(event, user_id)


def can_upload_bill(event: Event, user_id: str) -> bool:
    return is_event_creator(event, user_id) or is_event_attendee(event, user_id)


def can_delete_bill(bill: Bill, event: Event, user_id: str) -> bool:
    return bill.payer_id == user_id or is_event_creator(event, user_id)


def can_download_bills(event: Event, user_id: str) -> bool:
    return is_event_creator(event, user_id) or is_confirmed_attendee(event, user_id)


def owns_attendance(attendance: Attendance, user_id: str, email: Optional[str]) -> bool:
    """The attendance belongs to the user by id, or by invitation e-mail."""
    if attendance.user_id and attendance.user_id == user_id:
        return True
    return bool(email) and attendance.email is not None and attendance.email.lower() == email.lower()
