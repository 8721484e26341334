"""
FastAPI routes for WIP window management.
"""

from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query

from wip_planner.schemas.api.auth import SessionUser
from wip_planner.schemas.api.common import ActionResponse
from wip_planner.schemas.api.wip_windows import (
    WipWindowCreate,
    WipWindowListResponse,
    WipWindowResponse,
    WipWindowUpdate,
)
from wip_planner.services.auth import get_current_session
from wip_planner.services.database_manager.operations import WipWindowOperations
from wip_planner.utils.logger import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/wip-windows", tags=["wip-windows"])


@router.get("/", response_model=WipWindowListResponse)
async def list_wip_windows(session_user: SessionUser = Depends(get_current_session)):
    """
    List all WIP windows, newest first.

    Each window carries its event count and the number of distinct confirmed
    participants across its events.
    """
    try:
        rows = await WipWindowOperations.list_windows_with_stats()
        windows = [
            WipWindowResponse.model_validate(window).model_copy(
                update={"event_count": event_count, "participant_count": participant_count}
            )
            for window, event_count, participant_count in rows
        ]
        return WipWindowListResponse(wip_windows=windows)

    except Exception as e:
        logger.error(f"Error fetching WIP windows: {e}")
        raise HTTPException(status_code=500, detail="Internal server error")


@router.post("/", response_model=WipWindowResponse, status_code=201)
async def create_wip_window(
    payload: WipWindowCreate,
    session_user: SessionUser = Depends(get_current_session),
):
    """
    Create a WIP window.

    When **is_active** is true every other window is deactivated first and the
    org settings point at the new window.
    """
    try:
        window = await WipWindowOperations.create_window(
            name=payload.name,
            start_date=payload.start_date,
            end_date=payload.end_date,
            is_active=bool(payload.is_active),
        )
        return WipWindowResponse.model_validate(window)

    except Exception as e:
        logger.error(f"Error creating WIP window: {e}")
        raise HTTPException(status_code=500, detail="Internal server error")


@router.patch("/{window_id}", response_model=WipWindowResponse)
async def update_wip_window(
    window_id: UUID,
    payload: WipWindowUpdate,
    session_user: SessionUser = Depends(get_current_session),
):
    """Update a WIP window. Only provided fields change."""
    try:
        updates = {k: v for k, v in payload.model_dump(exclude_unset=True).items() if v is not None}

        existing = await WipWindowOperations.get_window(window_id)
        if existing is None:
            raise HTTPException(status_code=404, detail="WIP window not found")

        start = updates.get("start_date", existing.start_date)
        end = updates.get("end_date", existing.end_date)
        if end < start:
            raise HTTPException(status_code=400, detail="end_date must not be before start_date")

        window = await WipWindowOperations.update_window(window_id, updates)
        if window is None:
            raise HTTPException(status_code=404, detail="WIP window not found")

        logger.info(f"Updated WIP window {window_id}: {sorted(updates)}")
        return WipWindowResponse.model_validate(window)

    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error updating WIP window {window_id}: {e}")
        raise HTTPException(status_code=500, detail="Internal server error")


@router.delete("/{window_id}", response_model=ActionResponse)
async def delete_wip_window(
    window_id: UUID,
    force: bool = Query(False, description="Delete even when the window has events"),
    session_user: SessionUser = Depends(get_current_session),
):
    """
    Delete a WIP window.

    Windows with events need **force**; the active window can never be deleted.
    Events of a force-deleted window are removed with it.
    """
    try:
        window = await WipWindowOperations.get_window(window_id)
        if window is None:
            raise HTTPException(status_code=404, detail="WIP window not found")

        event_count = await WipWindowOperations.count_events(window_id)
        if event_count > 0 and not force:
            raise HTTPException(
                status_code=400,
                detail={
                    "error": "Cannot delete WIP window with existing events",
                    "event_count": event_count,
                    "can_force_delete": True,
                },
            )

        if window.is_active:
            raise HTTPException(
                status_code=400,
                detail="Cannot delete the active WIP window. Please activate another window first.",
            )

        await WipWindowOperations.delete_window(window_id)
        return ActionResponse(success=True)

    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error deleting WIP window {window_id}: {e}")
        raise HTTPException(status_code=500, detail="Internal server error")
