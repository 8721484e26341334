"""
FastAPI routes for diagnosing and repairing session/user id mismatches.

A user row is keyed by e-mail but its id is the provider subject from the
first sign-in. Signing in later with another provider leaves the session
carrying a different id; fix-user moves the stored user onto the session id.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException

from wip_planner.schemas.api.auth import (
    CreatedEventBrief,
    DebugUserResponse,
    FixUserResponse,
    SessionUser,
)
from wip_planner.schemas.api.common import UserSummary
from wip_planner.services.auth import get_current_session
from wip_planner.services.database_manager.operations import UserOperations
from wip_planner.utils.logger import get_logger

logger = get_logger(__name__)

router = APIRouter(tags=["identity"])


@router.get("/debug-user", response_model=DebugUserResponse)
async def debug_user(session_user: SessionUser = Depends(get_current_session)):
    """Session identity, stored users sharing its e-mail and the events they created."""
    try:
        if not session_user.email:
            raise HTTPException(status_code=401, detail="Unauthorized")

        users, events = await UserOperations.get_identity_debug(session_user.email)
        return DebugUserResponse(
            session_user=session_user,
            users_with_same_email=[UserSummary.model_validate(u) for u in users],
            events_created_by_those_users=[CreatedEventBrief.model_validate(e) for e in events],
        )

    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error loading identity debug info: {e}")
        raise HTTPException(status_code=500, detail="Internal server error")


@router.post("/fix-user", response_model=FixUserResponse)
async def fix_user(session_user: SessionUser = Depends(get_current_session)):
    """Re-key the stored user to the session id, rewriting every reference in one transaction."""
    try:
        if not session_user.id or not session_user.email:
            raise HTTPException(status_code=401, detail="Unauthorized")

        old_id = await UserOperations.reassign_user_id(
            session_user.email,
            session_user.id,
            name=session_user.name,
            image=session_user.image,
        )
        if old_id is None:
            raise HTTPException(status_code=404, detail="No existing user found")

        if old_id == session_user.id:
            message = "User ID already matches session"
        else:
            message = "User ID updated successfully"

        return FixUserResponse(success=True, message=message, old_id=old_id, new_id=session_user.id)

    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error fixing user id for {session_user.email}: {e}")
        raise HTTPException(status_code=500, detail="Internal server error")
