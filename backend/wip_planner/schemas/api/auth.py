"""
API schemas for sign-in, session and identity repair endpoints.
"""

from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from wip_planner.schemas.api.common import UserSummary


class SessionUser(BaseModel):
    """Identity carried by the session token"""
    id: str = Field(..., description="Session user ID (stored user ID or provider subject)")
    email: Optional[str] = None
    name: Optional[str] = None
    image: Optional[str] = None


class ProviderProfile(BaseModel):
    """Normalized userinfo returned by an identity provider"""
    provider: str
    subject: str
    email: Optional[str] = None
    name: Optional[str] = None
    image: Optional[str] = None


class ProviderInfo(BaseModel):
    id: str
    name: str
    login_url: str


class ProvidersResponse(BaseModel):
    providers: List[ProviderInfo]


class FixUserResponse(BaseModel):
    success: bool
    message: str
    old_id: str
    new_id: str


class CreatedEventBrief(BaseModel):
    id: UUID
    title: str
    creator_id: str
    creator: Optional[UserSummary] = None

    model_config = ConfigDict(from_attributes=True)


class DebugUserResponse(BaseModel):
    session_user: SessionUser
    users_with_same_email: List[UserSummary]
    events_created_by_those_users: List[CreatedEventBrief]
