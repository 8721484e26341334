"""
API schemas for bills, line items and receipt attachments.
"""

from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from wip_planner.schemas.api.common import UserSummary


class ReceiptFile(BaseModel):
    """Receipt uploaded inline, usually as a data: URL"""
    name: str = Field(..., min_length=1, max_length=255)
    url: str = Field(..., min_length=1)
    size: int = Field(..., ge=0, description="Size of the original file in bytes")


class BillItemCreate(BaseModel):
    label: str = Field(..., min_length=1, max_length=200)
    amount_cents: int = Field(..., ge=0)
    quantity: int = Field(1, ge=1)


class BillCreate(BaseModel):
    notes: Optional[str] = None
    subtotal_cents: Optional[int] = Field(None, ge=0)
    tax_cents: int = Field(0, ge=0)
    tip_cents: int = Field(0, ge=0)
    items: List[BillItemCreate] = Field(default_factory=list)
    files: List[ReceiptFile] = Field(..., min_length=1, description="At least one receipt file is required")


class BillItemResponse(BaseModel):
    id: UUID
    label: str
    amount_cents: int
    quantity: int

    model_config = ConfigDict(from_attributes=True)


class AttachmentResponse(BaseModel):
    id: UUID
    bill_id: UUID
    file_name: str
    url: str
    size_bytes: int
    mime_type: str
    uploaded_by_id: Optional[str] = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class BillResponse(BaseModel):
    id: UUID
    event_id: UUID
    payer_id: str
    payer: Optional[UserSummary] = None
    subtotal_cents: int
    tax_cents: int
    tip_cents: int
    total_cents: int
    currency: str
    notes: Optional[str] = None
    created_at: datetime
    items: List[BillItemResponse] = Field(default_factory=list)
    attachments: List[AttachmentResponse] = Field(default_factory=list)

    model_config = ConfigDict(from_attributes=True)
