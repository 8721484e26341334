"""
FastAPI routes for events.
"""

from __future__ import annotations

from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query

from wip_planner.models.event import Event
from wip_planner.schemas.api.auth import SessionUser
from wip_planner.schemas.api.common import ActionResponse
from wip_planner.schemas.api.cost_sharing import CostSplit
from wip_planner.schemas.api.events import (
    EventCreate,
    EventDetailResponse,
    EventListResponse,
    EventResponse,
    EventUpdate,
)
from wip_planner.services.auth import get_current_session
from wip_planner.services.auth.permissions import can_edit_event, is_event_creator
from wip_planner.services.cost_sharing import (
    calculate_equal_split,
    confirmed_attendee_count,
    event_total_cents,
)
from wip_planner.services.database_manager.operations import (
    EventOperations,
    UserOperations,
    WipWindowOperations,
)
from wip_planner.utils.logger import get_logger
from wip_planner.utils.settings import get_settings

logger = get_logger(__name__)

router = APIRouter(prefix="/events", tags=["events"])

EVENT_FILTERS = ("my-events", "created", "current-window", "current-vip", "all")


def event_currency(event: Event) -> str:
    if event.bills:
        return event.bills[0].currency
    return get_settings().DEFAULT_CURRENCY


def serialize_event(event: Event) -> EventResponse:
    """Event with its confirmed attendee count and bill total"""
    return EventResponse.model_validate(event).model_copy(
        update={
            "attendee_count": confirmed_attendee_count(event),
            "total_amount": event_total_cents(event),
        }
    )


def serialize_event_detail(event: Event) -> EventDetailResponse:
    """Event with attendances by name, newest bills first and the cost split"""
    detail = EventDetailResponse.model_validate(event)
    attendances = sorted(
        detail.attendances,
        key=lambda a: ((a.user.name if a.user and a.user.name else a.email) or "").lower(),
    )
    bills = sorted(detail.bills, key=lambda b: b.created_at, reverse=True)
    return detail.model_copy(
        update={
            "attendances": attendances,
            "bills": bills,
            "attendee_count": confirmed_attendee_count(event),
            "total_amount": event_total_cents(event),
            "split": calculate_equal_split(event, event_currency(event)),
        }
    )


async def load_event_or_404(event_id: UUID) -> Event:
    event = await EventOperations.get_event(event_id)
    if event is None:
        raise HTTPException(status_code=404, detail="Event not found")
    return event


@router.post("/", response_model=EventResponse, status_code=201)
async def create_event(
    payload: EventCreate,
    session_user: SessionUser = Depends(get_current_session),
):
    """
    Create an event in a WIP window.

    - **attendee_emails**: registered users get a PROPOSED attendance, other
      addresses get an e-mail-only invitation that is linked on first sign-in
    """
    try:
        if not session_user.email:
            raise HTTPException(status_code=401, detail="Unauthorized")

        window = await WipWindowOperations.get_window(payload.wip_window_id)
        if window is None:
            raise HTTPException(status_code=404, detail="WIP window not found")

        creator = await UserOperations.ensure_user(
            session_user.id, session_user.email, session_user.name, session_user.image
        )
        event = await EventOperations.create_event(
            creator,
            payload.model_dump(include={"title", "date", "location", "notes", "wip_window_id"}),
            [str(email) for email in payload.attendee_emails],
        )
        logger.info(f"Created event: {event.title} (ID: {event.id}) by {creator.id}")
        return serialize_event(event)

    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error creating event: {e}")
        raise HTTPException(status_code=500, detail="Internal server error")


@router.get("/", response_model=EventListResponse)
async def list_events(
    filter: Optional[str] = Query(None, description="my-events, created, current-window or all"),
    search: Optional[str] = Query(None, description="Search title, location and notes"),
    session_user: SessionUser = Depends(get_current_session),
):
    """List events, newest first, with attendee counts and bill totals."""
    if filter is not None and filter not in EVENT_FILTERS:
        raise HTTPException(status_code=400, detail=f"Unknown filter '{filter}'")
    try:
        events = await EventOperations.list_events(session_user.id, filter, search)
        return EventListResponse(events=[serialize_event(event) for event in events])

    except Exception as e:
        logger.error(f"Error fetching events: {e}")
        raise HTTPException(status_code=500, detail="Internal server error")


@router.get("/{event_id}", response_model=EventDetailResponse)
async def get_event(event_id: UUID, session_user: SessionUser = Depends(get_current_session)):
    """Get an event with attendances, bills and the equal split."""
    try:
        event = await load_event_or_404(event_id)
        return serialize_event_detail(event)

    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error fetching event {event_id}: {e}")
        raise HTTPException(status_code=500, detail="Internal server error")


@router.get("/{event_id}/split", response_model=CostSplit)
async def get_event_split(event_id: UUID, session_user: SessionUser = Depends(get_current_session)):
    """Equal split of all bills among confirmed attendees."""
    try:
        event = await load_event_or_404(event_id)
        return calculate_equal_split(event, event_currency(event))

    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error computing split for event {event_id}: {e}")
        raise HTTPException(status_code=500, detail="Internal server error")


@router.patch("/{event_id}", response_model=EventDetailResponse)
async def update_event(
    event_id: UUID,
    payload: EventUpdate,
    session_user: SessionUser = Depends(get_current_session),
):
    """
    Update an event.

    The creator may change every field. Attendees may only send
    **paid_by_id** to record who paid.
    """
    try:
        event = await load_event_or_404(event_id)

        fields = payload.model_fields_set
        if not can_edit_event(event, session_user.id, fields):
            raise HTTPException(status_code=403, detail="Forbidden")

        updates = payload.model_dump(exclude_unset=True)
        for required in ("title", "date"):
            if updates.get(required) is None:
                updates.pop(required, None)

        if updates.get("paid_by_id"):
            if await UserOperations.get_user_by_id(updates["paid_by_id"]) is None:
                raise HTTPException(status_code=400, detail="paid_by_id does not match a user")

        updated = await EventOperations.update_event(event_id, updates)
        if updated is None:
            raise HTTPException(status_code=404, detail="Event not found")

        logger.info(f"Updated event {event_id}: {sorted(updates)}")
        return serialize_event_detail(updated)

    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error updating event {event_id}: {e}")
        raise HTTPException(status_code=500, detail="Internal server error")


@router.delete("/{event_id}", response_model=ActionResponse)
async def delete_event(
    event_id: UUID,
    force: bool = Query(False, description="Delete even when bills exist"),
    session_user: SessionUser = Depends(get_current_session),
):
    """Delete an event. Creator only; events with bills need **force**."""
    try:
        event = await load_event_or_404(event_id)

        if not is_event_creator(event, session_user.id):
            raise HTTPException(status_code=403, detail="Forbidden")

        if event.bills and not force:
            raise HTTPException(
                status_code=400,
                detail={
                    "error": "Cannot delete event with existing bills",
                    "bill_count": len(event.bills),
                    "can_force_delete": True,
                },
            )

        await EventOperations.delete_event(event_id)
        return ActionResponse(success=True)

    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error deleting event {event_id}: {e}")
        raise HTTPException(status_code=500, detail="Internal server error")
