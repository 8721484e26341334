from datetime import datetime, timezone
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Treat naive datetimes as UTC so they compare with stored timestamps"""
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class ActionResponse(BaseModel):
    """Standard acknowledgement for mutations without a resource body."""

    success: bool = True
    message: Optional[str] = None


class UserSummary(BaseModel):
    """Public fields of a registered user."""

    id: str
    name: Optional[str] = None
    email: str
    image: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


class WipWindowBrief(BaseModel):
    id: UUID
    name: str
    start_date: datetime
    end_date: datetime
    is_active: bool

    model_config = ConfigDict(from_attributes=True)
