from __future__ import annotations

from datetime import datetime
from typing import List, Optional
from uuid import UUID

from sqlalchemy import BigInteger, DateTime, ForeignKey, Index, Integer, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from wip_planner.services.database_manager.connection import Base


class Bill(Base):
    """Expense receipt for an event; amounts are integer minor units"""

    __tablename__ = "bills"

    id: Mapped[UUID] = mapped_column(primary_key=True, server_default=func.gen_random_uuid())
    event_id: Mapped[UUID] = mapped_column(ForeignKey("events.id", ondelete="CASCADE"), nullable=False)
    payer_id: Mapped[str] = mapped_column(ForeignKey("users.id"), nullable=False)
    subtotal_cents: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)
    tax_cents: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)
    tip_cents: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)
    total_cents: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)
    currency: Mapped[str] = mapped_column(String(3), nullable=False, default="INR")
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())

    # Relationships
    event: Mapped["Event"] = relationship("Event", back_populates="bills")
    payer: Mapped["User"] = relationship("User", foreign_keys=[payer_id])
    items: Mapped[List["BillItem"]] = relationship(
        "BillItem", back_populates="bill", cascade="all, delete-orphan", passive_deletes=True
    )
    attachments: Mapped[List["Attachment"]] = relationship(
        "Attachment", back_populates="bill", cascade="all, delete-orphan", passive_deletes=True
    )

    __table_args__ = (
        Index('ix_bills_event', 'event_id'),
        Index('ix_bills_payer', 'payer_id'),
    )


class BillItem(Base):
    """Line item on a bill"""

    __tablename__ = "bill_items"

    id: Mapped[UUID] = mapped_column(primary_key=True, server_default=func.gen_random_uuid())
    bill_id: Mapped[UUID] = mapped_column(ForeignKey("bills.id", ondelete="CASCADE"), nullable=False)
    label: Mapped[str] = mapped_column(String(200), nullable=False)
    amount_cents: Mapped[int] = mapped_column(BigInteger, nullable=False)
    quantity: Mapped[int] = mapped_column(Integer, nullable=False, default=1)

    bill: Mapped["Bill"] = relationship("Bill", back_populates="items")


class Attachment(Base):
    """Receipt file attached to a bill"""

    __tablename__ = "attachments"

    id: Mapped[UUID] = mapped_column(primary_key=True, server_default=func.gen_random_uuid())
    bill_id: Mapped[UUID] = mapped_column(ForeignKey("bills.id", ondelete="CASCADE"), nullable=False)
    file_name: Mapped[str] = mapped_column(String(255), nullable=False)
    url: Mapped[str] = mapped_column(Text, nullable=False)  # data: URL or gs:// reference
    size_bytes: Mapped[int] = mapped_column(BigInteger, nullable=False)
    mime_type: Mapped[str] = mapped_column(String(100), nullable=False)
    uploaded_by_id: Mapped[Optional[str]] = mapped_column(ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, server_default=func.now())

    bill: Mapped["Bill"] = relationship("Bill", back_populates="attachments")

    __table_args__ = (
        Index('ix_attachments_bill', 'bill_id'),
    )
