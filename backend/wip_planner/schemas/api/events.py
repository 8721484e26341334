"""
API schemas for event endpoints.
"""

from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

from wip_planner.schemas.api.attendances import AttendanceResponse
from wip_planner.schemas.api.bills import BillResponse
from wip_planner.schemas.api.common import UserSummary, WipWindowBrief, as_utc
from wip_planner.schemas.api.cost_sharing import CostSplit


class EventCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    date: datetime
    location: Optional[str] = None
    notes: Optional[str] = None
    wip_window_id: UUID
    attendee_emails: List[EmailStr] = Field(default_factory=list)

    @field_validator("date")
    @classmethod
    def normalize_timezone(cls, value):
        return as_utc(value)


class EventUpdate(BaseModel):
    """Partial event update; attendees may only send paid_by_id"""
    title: Optional[str] = Field(None, min_length=1, max_length=200)
    date: Optional[datetime] = None
    location: Optional[str] = None
    notes: Optional[str] = None
    paid_by_id: Optional[str] = None

    @field_validator("date")
    @classmethod
    def normalize_timezone(cls, value):
        return as_utc(value)


class EventResponse(BaseModel):
    id: UUID
    title: str
    date: datetime
    location: Optional[str] = None
    notes: Optional[str] = None
    wip_window_id: UUID
    creator_id: str
    paid_by_id: Optional[str] = None
    created_at: datetime
    updated_at: datetime
    creator: Optional[UserSummary] = None
    wip_window: Optional[WipWindowBrief] = None
    attendances: List[AttendanceResponse] = Field(default_factory=list)
    bills: List[BillResponse] = Field(default_factory=list)
    attendee_count: int = 0
    total_amount: int = 0

    model_config = ConfigDict(from_attributes=True)


class EventDetailResponse(EventResponse):
    paid_by: Optional[UserSummary] = None
    split: Optional[CostSplit] = None


class EventListResponse(BaseModel):
    events: List[EventResponse]
