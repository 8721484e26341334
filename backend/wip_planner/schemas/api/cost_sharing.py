"""
API schemas for equal-split cost sharing.
"""

from typing import List, Optional

from pydantic import BaseModel, Field


class ShareEntry(BaseModel):
    """One confirmed attendee's part of the event cost."""
    user_id: str = Field(..., description="Attendee user ID")
    name: Optional[str] = Field(None, description="Attendee display name")
    email: Optional[str] = Field(None, description="Attendee e-mail")
    share_cents: int = Field(..., description="Amount this attendee owes for the event")
    percentage: float = Field(..., description="Share of the total, in percent")
    paid_cents: int = Field(0, description="Amount of bills this attendee paid for the event")
    net_cents: int = Field(0, description="paid_cents - share_cents")


class CostSplit(BaseModel):
    """Equal split of all bills of an event among confirmed attendees."""
    total_cents: int = Field(..., description="Sum of all bill totals")
    attendee_count: int = Field(..., description="Number of confirmed attendees")
    per_person_cents: float = Field(..., description="Unrounded total / attendee_count")
    currency: str = Field("INR", description="Currency of the amounts")
    shares: List[ShareEntry] = Field(default_factory=list)


class PersonStats(BaseModel):
    id: str
    name: Optional[str] = None
    email: str
    image: Optional[str] = None
    event_count: int
    total_spent: int = Field(..., description="Cents paid on bills of confirmed events")
    total_owed: int = Field(..., description="Cents owed across confirmed events")


class PeopleListResponse(BaseModel):
    people: List[PersonStats]
