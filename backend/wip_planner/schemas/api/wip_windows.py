"""
API schemas for WIP window endpoints.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from wip_planner.schemas.api.common import as_utc


class WipWindowCreate(BaseModel):
    """Schema for creating a WIP window"""
    name: str = Field(..., min_length=1, max_length=100, description="Display name of the window")
    start_date: datetime = Field(..., description="Start of the window")
    end_date: datetime = Field(..., description="End of the window")
    is_active: Optional[bool] = Field(None, description="Make this the active window")

    @field_validator("start_date", "end_date")
    @classmethod
    def normalize_timezone(cls, value):
        return as_utc(value)

    @model_validator(mode="after")
    def check_range(self):
        if self.end_date < self.start_date:
            raise ValueError("end_date must not be before start_date")
        return self


class WipWindowUpdate(BaseModel):
    """Schema for updating a WIP window (all fields optional)"""
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    is_active: Optional[bool] = None

    @field_validator("start_date", "end_date")
    @classmethod
    def normalize_timezone(cls, value):
        return as_utc(value)

    @model_validator(mode="after")
    def check_range(self):
        if self.start_date and self.end_date and self.end_date < self.start_date:
            raise ValueError("end_date must not be before start_date")
        return self


class WipWindowResponse(BaseModel):
    """Schema for WIP window response"""
    id: UUID
    name: str
    start_date: datetime
    end_date: datetime
    is_active: bool
    created_at: datetime
    updated_at: datetime
    event_count: int = 0
    participant_count: int = 0

    model_config = ConfigDict(from_attributes=True)


class WipWindowListResponse(BaseModel):
    wip_windows: list[WipWindowResponse]
