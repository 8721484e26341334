from __future__ import annotations

from datetime import datetime
from typing import List, Optional
from uuid import UUID

from sqlalchemy import DateTime, ForeignKey, Index, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from wip_planner.services.database_manager.connection import Base


class Event(Base):
    """An in-person event inside a WIP window"""

    __tablename__ = "events"

    id: Mapped[UUID] = mapped_column(primary_key=True, server_default=func.gen_random_uuid())
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    location: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    wip_window_id: Mapped[UUID] = mapped_column(ForeignKey("wip_windows.id", ondelete="CASCADE"), nullable=False)
    creator_id: Mapped[str] = mapped_column(ForeignKey("users.id"), nullable=False)
    paid_by_id: Mapped[Optional[str]] = mapped_column(ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())

    # Relationships
    wip_window: Mapped["WipWindow"] = relationship("WipWindow", back_populates="events")
    creator: Mapped["User"] = relationship("User", foreign_keys=[creator_id])
    paid_by: Mapped[Optional["User"]] = relationship("User", foreign_keys=[paid_by_id])
    attendances: Mapped[List["Attendance"]] = relationship(
        "Attendance", back_populates="event", cascade="all, delete-orphan", passive_deletes=True
    )
    bills: Mapped[List["Bill"]] = relationship(
        "Bill", back_populates="event", cascade="all, delete-orphan", passive_deletes=True
    )

    __table_args__ = (
        Index('ix_events_date', 'date'),
        Index('ix_events_creator', 'creator_id'),
        Index('ix_events_wip_window', 'wip_window_id'),
    )
