"""
Builders for transient ORM objects used across the tests.

Column defaults only apply on flush, so every field the code reads is set here.
"""

from datetime import datetime, timezone
from typing import Iterable, Optional
from uuid import UUID, uuid4

from main import app
from wip_planner.models import (
    Attachment,
    Attendance,
    AttendanceStatus,
    Bill,
    BillItem,
    Event,
    User,
    WipWindow,
)
from wip_planner.schemas.api.auth import SessionUser
from wip_planner.services.auth import get_current_session

NOW = datetime(2025, 3, 1, 18, 0, tzinfo=timezone.utc)


def make_user(user_id: str = "user-1", name: Optional[str] = "Asha", email: Optional[str] = None) -> User:
    return User(
        id=user_id,
        name=name,
        email=email or f"{user_id}@example.com",
        image=None,
        created_at=NOW,
        updated_at=NOW,
    )


def session_for(user: User) -> SessionUser:
    return SessionUser(id=user.id, email=user.email, name=user.name, image=user.image)


def sign_in(session_user: SessionUser) -> None:
    """Route every request through the given session identity"""
    app.dependency_overrides[get_current_session] = lambda: session_user


def make_window(name: str = "March WIP", is_active: bool = True, window_id: Optional[UUID] = None) -> WipWindow:
    return WipWindow(
        id=window_id or uuid4(),
        name=name,
        start_date=datetime(2025, 3, 1, tzinfo=timezone.utc),
        end_date=datetime(2025, 3, 8, tzinfo=timezone.utc),
        is_active=is_active,
        created_at=NOW,
        updated_at=NOW,
    )


def make_event(creator: User, window: Optional[WipWindow] = None, title: str = "Team dinner", **overrides) -> Event:
    window = window or make_window()
    event = Event(
        id=overrides.pop("event_id", uuid4()),
        title=title,
        date=overrides.pop("date", NOW),
        location=overrides.pop("location", "Indiranagar"),
        notes=overrides.pop("notes", None),
        wip_window_id=window.id,
        creator_id=creator.id,
        paid_by_id=overrides.pop("paid_by_id", None),
        created_at=NOW,
        updated_at=NOW,
    )
    event.creator = creator
    event.wip_window = window
    event.paid_by = None
    event.attendances = []
    event.bills = []
    return event


def add_attendance(
    event: Event,
    user: Optional[User] = None,
    email: Optional[str] = None,
    status: AttendanceStatus = AttendanceStatus.CONFIRMED,
) -> Attendance:
    attendance = Attendance(
        id=uuid4(),
        event_id=event.id,
        user_id=user.id if user else None,
        email=email or (user.email if user else None),
        status=status,
        invited_by_id=event.creator_id,
        is_paid=False,
        paid_by_id=None,
        created_at=NOW,
        updated_at=NOW,
    )
    attendance.user = user
    event.attendances.append(attendance)
    return attendance


def add_bill(
    event: Event,
    payer: User,
    total_cents: int,
    tax_cents: int = 0,
    tip_cents: int = 0,
    attachments: Iterable[dict] = (),
    items: Iterable[dict] = (),
    created_at: datetime = NOW,
) -> Bill:
    bill = Bill(
        id=uuid4(),
        event_id=event.id,
        payer_id=payer.id,
        subtotal_cents=total_cents - tax_cents - tip_cents,
        tax_cents=tax_cents,
        tip_cents=tip_cents,
        total_cents=total_cents,
        currency="INR",
        notes="Receipt uploaded",
        created_at=created_at,
        updated_at=created_at,
    )
    bill.payer = payer
    bill.items = [
        BillItem(id=uuid4(), bill_id=bill.id, label=item["label"], amount_cents=item["amount_cents"], quantity=item.get("quantity", 1))
        for item in items
    ]
    bill.attachments = [
        Attachment(
            id=uuid4(),
            bill_id=bill.id,
            file_name=attachment["file_name"],
            url=attachment["url"],
            size_bytes=attachment.get("size_bytes", 10),
            mime_type=attachment.get("mime_type", "image/png"),
            uploaded_by_id=payer.id,
            created_at=created_at,
        )
        for attachment in attachments
    ]
    event.bills.append(bill)
    return bill
