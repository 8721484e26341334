"""
FastAPI routes for inviting attendees to an event and updating their RSVP or payment.
"""

from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException

from wip_planner.models import Attendance
from wip_planner.schemas.api.attendances import (
    AddAttendeesRequest,
    AddAttendeesResponse,
    AttendanceResponse,
    AttendeeUpdateRequest,
)
from wip_planner.schemas.api.auth import SessionUser
from wip_planner.services.auth import get_current_session
from wip_planner.services.auth.permissions import is_event_creator, owns_attendance
from wip_planner.services.database_manager.operations import (
    AttendanceOperations,
    EventOperations,
    UserOperations,
)
from wip_planner.utils.logger import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/events", tags=["attendees"])


async def resolve_user_id(session_user: SessionUser) -> str:
    """Stored user id for the session e-mail, falling back to the session id"""
    if session_user.email:
        user = await UserOperations.get_user_by_email(session_user.email)
        if user is not None:
            return user.id
    return session_user.id


async def claim_invitation(attendance: Attendance, session_user: SessionUser, updates: dict) -> None:
    """Answering an e-mail-only invitation links it to the answering user"""
    if attendance.user_id is None and session_user.email:
        user = await UserOperations.ensure_user(
            session_user.id, session_user.email, session_user.name, session_user.image
        )
        updates["user_id"] = user.id


@router.post("/{event_id}/attendees", response_model=AddAttendeesResponse, status_code=201)
async def add_attendees(
    event_id: UUID,
    payload: AddAttendeesRequest,
    session_user: SessionUser = Depends(get_current_session),
):
    """
    Invite people to an event. Only the event creator may do this.

    People already attending (by user or by e-mail) are skipped.
    """
    try:
        event = await EventOperations.get_event(event_id)
        if event is None:
            raise HTTPException(status_code=404, detail="Event not found")

        user = await UserOperations.get_user_by_email(session_user.email) if session_user.email else None
        if user is None:
            raise HTTPException(status_code=404, detail="User not found")

        if not is_event_creator(event, user.id):
            raise HTTPException(status_code=403, detail="Only event creator can add attendees")

        added = await AttendanceOperations.add_attendees(
            event_id, [str(email) for email in payload.attendee_emails], invited_by_id=user.id
        )
        attendances = await AttendanceOperations.list_for_event(event_id)
        return AddAttendeesResponse(
            message=f"Added {added} new attendees",
            attendances=[AttendanceResponse.model_validate(a) for a in attendances],
        )

    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error adding attendees to event {event_id}: {e}")
        raise HTTPException(status_code=500, detail="Internal server error")


@router.patch("/{event_id}/attendees", response_model=AttendanceResponse)
async def update_attendee(
    event_id: UUID,
    payload: AttendeeUpdateRequest,
    session_user: SessionUser = Depends(get_current_session),
):
    """
    Update one attendance of an event.

    - the attendee may change **status**
    - the event creator may change **is_paid**; marking paid records who
      marked it in **paid_by_id**, marking unpaid clears it
    """
    try:
        attendance = await AttendanceOperations.get_attendance(payload.attendance_id)
        if attendance is None or attendance.event_id != event_id:
            raise HTTPException(status_code=404, detail="Attendance not found")

        event = await EventOperations.get_event(event_id)
        if event is None:
            raise HTTPException(status_code=404, detail="Event not found")

        user_id = await resolve_user_id(session_user)
        is_owner = owns_attendance(attendance, user_id, session_user.email)
        is_creator = is_event_creator(event, user_id)

        updates = {}
        if payload.status is not None:
            if not is_owner:
                raise HTTPException(status_code=403, detail="Permission denied")
            updates["status"] = payload.status
            await claim_invitation(attendance, session_user, updates)

        if payload.is_paid is not None or payload.paid_by_id is not None:
            if not is_creator:
                raise HTTPException(status_code=403, detail="Permission denied")
            if payload.is_paid is not None:
                updates["is_paid"] = payload.is_paid
                updates["paid_by_id"] = (payload.paid_by_id or user_id) if payload.is_paid else None
            else:
                updates["paid_by_id"] = payload.paid_by_id

        if not updates:
            if not (is_owner or is_creator):
                raise HTTPException(status_code=403, detail="Permission denied")
            return AttendanceResponse.model_validate(attendance)

        updated = await AttendanceOperations.update_attendance(attendance.id, updates)
        if updated is None:
            raise HTTPException(status_code=404, detail="Attendance not found")

        logger.info(f"Updated attendance {attendance.id} on event {event_id}: {sorted(updates)}")
        return AttendanceResponse.model_validate(updated)

    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error updating attendee on event {event_id}: {e}")
        raise HTTPException(status_code=500, detail="Internal server error")
