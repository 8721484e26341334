"""
API schemas for attendance and invitation endpoints.
"""

from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from wip_planner.models.attendance import AttendanceStatus
from wip_planner.schemas.api.common import UserSummary


class AttendanceResponse(BaseModel):
    id: UUID
    event_id: UUID
    user_id: Optional[str] = None
    email: Optional[str] = None
    status: AttendanceStatus
    invited_by_id: Optional[str] = None
    is_paid: bool = False
    paid_by_id: Optional[str] = None
    created_at: datetime
    user: Optional[UserSummary] = None

    model_config = ConfigDict(from_attributes=True)


class AddAttendeesRequest(BaseModel):
    attendee_emails: List[EmailStr] = Field(..., min_length=1, description="E-mails to invite")


class AddAttendeesResponse(BaseModel):
    message: str
    attendances: List[AttendanceResponse]


class AttendeeUpdateRequest(BaseModel):
    """Update sent by an attendee (status) or the event creator (payment)"""
    attendance_id: UUID
    status: Optional[AttendanceStatus] = None
    is_paid: Optional[bool] = None
    paid_by_id: Optional[str] = None


class AttendanceStatusUpdate(BaseModel):
    status: AttendanceStatus
