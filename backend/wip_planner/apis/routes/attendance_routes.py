"""
FastAPI route for an attendee's own RSVP.
"""

from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException

from wip_planner.apis.routes.attendee_routes import claim_invitation, resolve_user_id
from wip_planner.schemas.api.attendances import AttendanceResponse, AttendanceStatusUpdate
from wip_planner.schemas.api.auth import SessionUser
from wip_planner.services.auth import get_current_session
from wip_planner.services.auth.permissions import owns_attendance
from wip_planner.services.database_manager.operations import AttendanceOperations
from wip_planner.utils.logger import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/attendances", tags=["attendances"])


@router.patch("/{attendance_id}", response_model=AttendanceResponse)
async def update_attendance_status(
    attendance_id: UUID,
    payload: AttendanceStatusUpdate,
    session_user: SessionUser = Depends(get_current_session),
):
    """Set the RSVP status. Any status may follow any other."""
    try:
        attendance = await AttendanceOperations.get_attendance(attendance_id)
        if attendance is None:
            raise HTTPException(status_code=404, detail="Attendance not found")

        user_id = await resolve_user_id(session_user)
        if not owns_attendance(attendance, user_id, session_user.email):
            raise HTTPException(status_code=403, detail="Forbidden")

        updates = {"status": payload.status}
        await claim_invitation(attendance, session_user, updates)

        updated = await AttendanceOperations.update_attendance(attendance_id, updates)
        if updated is None:
            raise HTTPException(status_code=404, detail="Attendance not found")

        logger.info(f"Attendance {attendance_id} is now {payload.status.value}")
        return AttendanceResponse.model_validate(updated)

    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error updating attendance {attendance_id}: {e}")
        raise HTTPException(status_code=500, detail="Internal server error")
