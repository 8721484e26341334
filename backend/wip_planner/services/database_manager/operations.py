from __future__ import annotations

import time
from typing import Any, Dict, List, Optional, Sequence, Tuple
from uuid import UUID

from sqlalchemy import delete, distinct, func, or_, select, update
from sqlalchemy.orm import selectinload

from .connection import get_session_factory
from wip_planner.models import (
    Attachment,
    Attendance,
    AttendanceStatus,
    Bill,
    BillItem,
    Event,
    OrgSetting,
    User,
    WipWindow,
)
from wip_planner.utils.logger import get_logger

logger = get_logger(__name__)

ACTIVE_STATUSES = (AttendanceStatus.PROPOSED, AttendanceStatus.CONFIRMED)


def _bill_options(path):
    return path.options(
        selectinload(Bill.payer),
        selectinload(Bill.items),
        selectinload(Bill.attachments),
    )


def _event_options() -> list:
    """Eager loads needed to serialize an event with everything attached"""
    return [
        selectinload(Event.creator),
        selectinload(Event.paid_by),
        selectinload(Event.wip_window),
        selectinload(Event.attendances).selectinload(Attendance.user),
        _bill_options(selectinload(Event.bills)),
    ]


def _ilike_any(columns, query: str):
    pattern = f"%{query}%"
    return or_(*[column.ilike(pattern) for column in columns])


def _normalize_emails(emails: Sequence[str]) -> List[str]:
    """Lower-cased, de-duplicated, order kept"""
    return list(dict.fromkeys(e.strip().lower() for e in emails if e and e.strip()))


class UserOperations:
    """Operations for users and identity reconciliation"""

    @staticmethod
    async def get_user_by_email(email: str) -> Optional[User]:
        session_factory = get_session_factory()
        async with session_factory() as session:
            result = await session.execute(select(User).where(User.email == email))
            return result.scalar_one_or_none()

    @staticmethod
    async def get_user_by_id(user_id: str) -> Optional[User]:
        session_factory = get_session_factory()
        async with session_factory() as session:
            return await session.get(User, user_id)

    @staticmethod
    async def create_user(user_id: str, email: str, name: Optional[str] = None, image: Optional[str] = None) -> User:
        session_factory = get_session_factory()
        async with session_factory() as session:
            user = User(id=user_id, email=email, name=name, image=image)
            session.add(user)
            await session.commit()
            await session.refresh(user)
            return user

    @staticmethod
    async def ensure_user(user_id: str, email: str, name: Optional[str] = None, image: Optional[str] = None) -> User:
        """Return the user owning the e-mail, creating it from session claims if missing"""
        existing = await UserOperations.get_user_by_email(email)
        if existing:
            return existing
        logger.info(f"Creating missing user record for {email}")
        return await UserOperations.create_user(user_id, email, name or "Unknown User", image)

    @staticmethod
    async def update_profile(user_id: str, name: Optional[str] = None, image: Optional[str] = None) -> User:
        """Refresh name and image, keeping stored values the provider did not send"""
        session_factory = get_session_factory()
        async with session_factory() as session:
            user = await session.get(User, user_id)
            if user is None:
                raise ValueError(f"User {user_id} not found")
            if name:
                user.name = name
            if image:
                user.image = image
            await session.commit()
            await session.refresh(user)
            return user

    @staticmethod
    async def link_pending_attendances(email: str, user_id: str) -> int:
        """Attach e-mail-only invitations to a newly registered user"""
        session_factory = get_session_factory()
        async with session_factory() as session:
            result = await session.execute(
                update(Attendance)
                .where(func.lower(Attendance.email) == email.lower(), Attendance.user_id.is_(None))
                .values(user_id=user_id)
            )
            await session.commit()
            return result.rowcount or 0

    @staticmethod
    async def list_people() -> List[User]:
        """Users with a proposed or confirmed attendance, with their events and bills loaded"""
        session_factory = get_session_factory()
        async with session_factory() as session:
            query = (
                select(User)
                .where(User.attendances.any(Attendance.status.in_(ACTIVE_STATUSES)))
                .options(
                    selectinload(User.attendances)
                    .selectinload(Attendance.event)
                    .options(selectinload(Event.bills), selectinload(Event.attendances))
                )
                .order_by(User.name)
            )
            result = await session.execute(query)
            return list(result.scalars().unique().all())

    @staticmethod
    async def search_users(query: str, limit: int = 10) -> List[User]:
        session_factory = get_session_factory()
        async with session_factory() as session:
            result = await session.execute(
                select(User)
                .where(_ilike_any([User.name, User.email], query))
                .order_by(User.name)
                .limit(limit)
            )
            return list(result.scalars().all())

    @staticmethod
    async def get_identity_debug(email: str) -> Tuple[List[User], List[Event]]:
        """All users sharing an e-mail and the events any of them created"""
        session_factory = get_session_factory()
        async with session_factory() as session:
            users_result = await session.execute(select(User).where(User.email == email))
            users = list(users_result.scalars().all())
            if not users:
                return [], []
            events_result = await session.execute(
                select(Event)
                .where(Event.creator_id.in_([u.id for u in users]))
                .options(selectinload(Event.creator))
            )
            return users, list(events_result.scalars().all())

    @staticmethod
    async def reassign_user_id(
        email: str,
        new_id: str,
        name: Optional[str] = None,
        image: Optional[str] = None,
    ) -> Optional[str]:
        """
        Move the user owning ``email`` to ``new_id`` in a single transaction.

        A new row is created under a temporary e-mail, every foreign key is
        rewritten, the old row is deleted and the real e-mail restored.
        Returns the old id, or None when no user has the e-mail.
        """
        session_factory = get_session_factory()
        async with session_factory() as session:
            async with session.begin():
                result = await session.execute(select(User).where(User.email == email))
                existing = result.scalar_one_or_none()
                if existing is None:
                    return None
                old_id = existing.id
                if old_id == new_id:
                    return old_id

                session.add(User(
                    id=new_id,
                    name=name or existing.name,
                    email=f"temp_{int(time.time() * 1000)}_{email}",
                    image=image or existing.image,
                    email_verified=existing.email_verified,
                ))
                await session.flush()

                rewrites = [
                    (Event, Event.creator_id, "creator_id"),
                    (Event, Event.paid_by_id, "paid_by_id"),
                    (Attendance, Attendance.user_id, "user_id"),
                    (Attendance, Attendance.invited_by_id, "invited_by_id"),
                    (Attendance, Attendance.paid_by_id, "paid_by_id"),
                    (Bill, Bill.payer_id, "payer_id"),
                    (Attachment, Attachment.uploaded_by_id, "uploaded_by_id"),
                ]
                for model, column, name_ in rewrites:
                    await session.execute(
                        update(model).where(column == old_id).values({name_: new_id})
                    )

                await session.execute(delete(User).where(User.id == old_id))
                await session.execute(update(User).where(User.id == new_id).values(email=email))

            logger.info(f"Reassigned user {email} from {old_id} to {new_id}")
            return old_id


class WipWindowOperations:
    """Operations for WIP windows and the org's active window"""

    @staticmethod
    async def list_windows_with_stats() -> List[Tuple[WipWindow, int, int]]:
        """Windows (newest first) with their event count and confirmed participant count"""
        session_factory = get_session_factory()
        async with session_factory() as session:
            windows_result = await session.execute(select(WipWindow).order_by(WipWindow.start_date.desc()))
            windows = list(windows_result.scalars().all())

            event_counts_result = await session.execute(
                select(Event.wip_window_id, func.count(Event.id)).group_by(Event.wip_window_id)
            )
            event_counts = dict(event_counts_result.all())

            participant_counts_result = await session.execute(
                select(Event.wip_window_id, func.count(distinct(Attendance.user_id)))
                .join(Attendance, Attendance.event_id == Event.id)
                .where(Attendance.status == AttendanceStatus.CONFIRMED)
                .group_by(Event.wip_window_id)
            )
            participant_counts = dict(participant_counts_result.all())

            return [
                (window, event_counts.get(window.id, 0), participant_counts.get(window.id, 0))
                for window in windows
            ]

    @staticmethod
    async def get_window(window_id: UUID) -> Optional[WipWindow]:
        session_factory = get_session_factory()
        async with session_factory() as session:
            return await session.get(WipWindow, window_id)

    @staticmethod
    async def count_events(window_id: UUID) -> int:
        session_factory = get_session_factory()
        async with session_factory() as session:
            result = await session.execute(
                select(func.count(Event.id)).where(Event.wip_window_id == window_id)
            )
            return result.scalar() or 0

    @staticmethod
    async def _make_current(session, window_id: UUID) -> None:
        """Deactivate every other window and point org settings at this one"""
        await session.execute(
            update(WipWindow)
            .where(WipWindow.is_active.is_(True), WipWindow.id != window_id)
            .values(is_active=False)
        )
        result = await session.execute(update(OrgSetting).values(current_wip_window_id=window_id))
        if not result.rowcount:
            session.add(OrgSetting(current_wip_window_id=window_id))

    @staticmethod
    async def create_window(name: str, start_date, end_date, is_active: bool = False) -> WipWindow:
        session_factory = get_session_factory()
        async with session_factory() as session:
            if is_active:
                await session.execute(
                    update(WipWindow).where(WipWindow.is_active.is_(True)).values(is_active=False)
                )
            window = WipWindow(name=name, start_date=start_date, end_date=end_date, is_active=is_active)
            session.add(window)
            await session.flush()
            if is_active:
                await WipWindowOperations._make_current(session, window.id)
            await session.commit()
            await session.refresh(window)
            logger.info(f"Created WIP window: {window.name} (ID: {window.id}, active: {window.is_active})")
            return window

    @staticmethod
    async def update_window(window_id: UUID, updates: Dict[str, Any]) -> Optional[WipWindow]:
        session_factory = get_session_factory()
        async with session_factory() as session:
            window = await session.get(WipWindow, window_id)
            if window is None:
                return None
            if updates.get("is_active"):
                await WipWindowOperations._make_current(session, window_id)
            for key, value in updates.items():
                setattr(window, key, value)
            await session.commit()
            await session.refresh(window)
            return window

    @staticmethod
    async def delete_window(window_id: UUID) -> bool:
        session_factory = get_session_factory()
        async with session_factory() as session:
            window = await session.get(WipWindow, window_id)
            if window is None:
                return False
            await session.delete(window)
            await session.commit()
            logger.info(f"Deleted WIP window: {window.name} (ID: {window_id})")
            return True


class EventOperations:
    """Operations for events"""

    @staticmethod
    async def get_event(event_id: UUID) -> Optional[Event]:
        """Event with creator, window, attendances and bills loaded"""
        session_factory = get_session_factory()
        async with session_factory() as session:
            result = await session.execute(
                select(Event).where(Event.id == event_id).options(*_event_options())
            )
            return result.scalar_one_or_none()

    @staticmethod
    async def list_events(user_id: str, filter_name: Optional[str] = None, search: Optional[str] = None) -> List[Event]:
        """
        Events ordered by date, newest first.

        Filters: ``my-events`` (proposed or confirmed for the user),
        ``created`` (created by the user), ``current-window`` (in the active
        window). Anything else lists all events.
        """
        query = select(Event).options(*_event_options()).order_by(Event.date.desc())

        if filter_name == "my-events":
            query = query.where(
                Event.attendances.any(
                    (Attendance.user_id == user_id) & Attendance.status.in_(ACTIVE_STATUSES)
                )
            )
        elif filter_name == "created":
            query = query.where(Event.creator_id == user_id)
        elif filter_name in ("current-window", "current-vip"):
            query = query.where(Event.wip_window.has(WipWindow.is_active.is_(True)))

        if search:
            query = query.where(_ilike_any([Event.title, Event.location, Event.notes], search))

        session_factory = get_session_factory()
        async with session_factory() as session:
            result = await session.execute(query)
            return list(result.scalars().unique().all())

    @staticmethod
    async def list_window_events(window_id: UUID) -> List[Event]:
        session_factory = get_session_factory()
        async with session_factory() as session:
            result = await session.execute(
                select(Event)
                .where(Event.wip_window_id == window_id)
                .options(*_event_options())
                .order_by(Event.date)
            )
            return list(result.scalars().unique().all())

    @staticmethod
    async def search_events(query: str, limit: int = 10) -> List[Event]:
        session_factory = get_session_factory()
        async with session_factory() as session:
            result = await session.execute(
                select(Event)
                .where(_ilike_any([Event.title, Event.location, Event.notes], query))
                .options(selectinload(Event.creator), selectinload(Event.wip_window))
                .order_by(Event.date.desc())
                .limit(limit)
            )
            return list(result.scalars().all())

    @staticmethod
    async def create_event(creator: User, data: Dict[str, Any], attendee_emails: Sequence[str]) -> Event:
        """Create an event and invite attendees (registered users and bare e-mails)"""
        session_factory = get_session_factory()
        async with session_factory() as session:
            event = Event(creator_id=creator.id, **data)
            session.add(event)
            await session.flush()

            emails = [e for e in _normalize_emails(attendee_emails) if e != creator.email.lower()]
            if emails:
                users_result = await session.execute(select(User).where(func.lower(User.email).in_(emails)))
                users_by_email = {u.email.lower(): u for u in users_result.scalars().all()}
                for email in emails:
                    user = users_by_email.get(email)
                    session.add(Attendance(
                        event_id=event.id,
                        user_id=user.id if user else None,
                        email=email,
                        invited_by_id=creator.id,
                        status=AttendanceStatus.PROPOSED,
                    ))

            await session.commit()
            event_id = event.id

        logger.info(f"Created event {event_id} with {len(emails)} invitations")
        return await EventOperations.get_event(event_id)

    @staticmethod
    async def update_event(event_id: UUID, updates: Dict[str, Any]) -> Optional[Event]:
        session_factory = get_session_factory()
        async with session_factory() as session:
            event = await session.get(Event, event_id)
            if event is None:
                return None
            for key, value in updates.items():
                setattr(event, key, value)
            await session.commit()
        return await EventOperations.get_event(event_id)

    @staticmethod
    async def delete_event(event_id: UUID) -> bool:
        session_factory = get_session_factory()
        async with session_factory() as session:
            event = await session.get(Event, event_id)
            if event is None:
                return False
            await session.delete(event)
            await session.commit()
            logger.info(f"Deleted event {event_id}")
            return True


class AttendanceOperations:
    """Operations for invitations and RSVPs"""

    @staticmethod
    async def list_for_event(event_id: UUID) -> List[Attendance]:
        session_factory = get_session_factory()
        async with session_factory() as session:
            result = await session.execute(
                select(Attendance)
                .where(Attendance.event_id == event_id)
                .options(selectinload(Attendance.user))
                .order_by(Attendance.created_at)
            )
            return list(result.scalars().all())

    @staticmethod
    async def add_attendees(event_id: UUID, emails: Sequence[str], invited_by_id: str) -> int:
        """Invite e-mails to an event, skipping people already invited. Returns the number added."""
        emails = _normalize_emails(emails)
        session_factory = get_session_factory()
        async with session_factory() as session:
            users_result = await session.execute(select(User).where(func.lower(User.email).in_(emails)))
            users = list(users_result.scalars().all())
            user_ids = [u.id for u in users]

            existing_result = await session.execute(
                select(Attendance).where(
                    Attendance.event_id == event_id,
                    or_(Attendance.user_id.in_(user_ids), func.lower(Attendance.email).in_(emails)),
                )
            )
            existing = list(existing_result.scalars().all())
            attending_user_ids = {a.user_id for a in existing if a.user_id}
            attending_emails = {a.email.lower() for a in existing if a.email}

            added = 0
            registered_emails = set()
            for user in users:
                registered_emails.add(user.email.lower())
                if user.id in attending_user_ids or user.email.lower() in attending_emails:
                    continue
                session.add(Attendance(
                    event_id=event_id,
                    user_id=user.id,
                    email=user.email,
                    invited_by_id=invited_by_id,
                    status=AttendanceStatus.PROPOSED,
                ))
                added += 1

            for email in emails:
                if email in registered_emails or email in attending_emails:
                    continue
                session.add(Attendance(
                    event_id=event_id,
                    email=email,
                    invited_by_id=invited_by_id,
                    status=AttendanceStatus.PROPOSED,
                ))
                added += 1

            await session.commit()
            logger.info(f"Added {added} attendees to event {event_id}")
            return added

    @staticmethod
    async def get_attendance(attendance_id: UUID) -> Optional[Attendance]:
        """Attendance with its user and event loaded"""
        session_factory = get_session_factory()
        async with session_factory() as session:
            result = await session.execute(
                select(Attendance)
                .where(Attendance.id == attendance_id)
                .options(selectinload(Attendance.user), selectinload(Attendance.event))
            )
            return result.scalar_one_or_none()

    @staticmethod
    async def update_attendance(attendance_id: UUID, updates: Dict[str, Any]) -> Optional[Attendance]:
        session_factory = get_session_factory()
        async with session_factory() as session:
            attendance = await session.get(Attendance, attendance_id)
            if attendance is None:
                return None
            for key, value in updates.items():
                setattr(attendance, key, value)
            await session.commit()
        return await AttendanceOperations.get_attendance(attendance_id)


class BillOperations:
    """Operations for bills, line items and attachments"""

    @staticmethod
    async def get_bill(bill_id: UUID) -> Optional[Bill]:
        session_factory = get_session_factory()
        async with session_factory() as session:
            result = await session.execute(
                _bill_options(select(Bill).where(Bill.id == bill_id)).options(selectinload(Bill.event))
            )
            return result.scalar_one_or_none()

    @staticmethod
    async def create_bill(
        event_id: UUID,
        payer_id: str,
        amounts: Dict[str, int],
        notes: Optional[str],
        currency: str,
        items: Sequence[Dict[str, Any]],
        attachments: Sequence[Dict[str, Any]],
    ) -> Bill:
        session_factory = get_session_factory()
        async with session_factory() as session:
            bill = Bill(event_id=event_id, payer_id=payer_id, notes=notes, currency=currency, **amounts)
            session.add(bill)
            await session.flush()

            for item in items:
                session.add(BillItem(bill_id=bill.id, **item))
            for attachment in attachments:
                session.add(Attachment(bill_id=bill.id, uploaded_by_id=payer_id, **attachment))

            await session.commit()
            bill_id = bill.id

        logger.info(f"Created bill {bill_id} for event {event_id} with {len(attachments)} attachments")
        return await BillOperations.get_bill(bill_id)

    @staticmethod
    async def delete_bill(bill_id: UUID) -> bool:
        session_factory = get_session_factory()
        async with session_factory() as session:
            bill = await session.get(Bill, bill_id)
            if bill is None:
                return False
            await session.delete(bill)
            await session.commit()
            logger.info(f"Deleted bill {bill_id}")
            return True
