from __future__ import annotations

import enum
from datetime import datetime
from typing import Optional
from uuid import UUID

from sqlalchemy import Boolean, DateTime, Enum, ForeignKey, Index, String, UniqueConstraint, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from wip_planner.services.database_manager.connection import Base


class AttendanceStatus(str, enum.Enum):
    PROPOSED = "PROPOSED"
    CONFIRMED = "CONFIRMED"
    DECLINED = "DECLINED"


class Attendance(Base):
    """Invitation and RSVP of one person (user or bare e-mail) for one event"""

    __tablename__ = "attendances"

    id: Mapped[UUID] = mapped_column(primary_key=True, server_default=func.gen_random_uuid())
    event_id: Mapped[UUID] = mapped_column(ForeignKey("events.id", ondelete="CASCADE"), nullable=False)
    user_id: Mapped[Optional[str]] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), nullable=True)
    email: Mapped[Optional[str]] = mapped_column(String(320), nullable=True)  # Invitees without an account
    status: Mapped[AttendanceStatus] = mapped_column(
        Enum(AttendanceStatus, name="attendance_status", native_enum=False, length=16),
        nullable=False,
        default=AttendanceStatus.PROPOSED,
    )
    invited_by_id: Mapped[Optional[str]] = mapped_column(ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    is_paid: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    paid_by_id: Mapped[Optional[str]] = mapped_column(ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())

    # Relationships
    event: Mapped["Event"] = relationship("Event", back_populates="attendances")
    user: Mapped[Optional["User"]] = relationship("User", foreign_keys=[user_id], back_populates="attendances")
    invited_by: Mapped[Optional["User"]] = relationship("User", foreign_keys=[invited_by_id])

    __table_args__ = (
        Index('ix_attendances_event', 'event_id'),
        Index('ix_attendances_user', 'user_id'),
        Index('ix_attendances_email', 'email'),
        UniqueConstraint('event_id', 'user_id', name='uq_attendances_event_user'),
        UniqueConstraint('event_id', 'email', name='uq_attendances_event_email'),
    )
