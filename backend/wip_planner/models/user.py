from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from sqlalchemy import DateTime, Index, String, Text, UniqueConstraint, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from wip_planner.services.database_manager.connection import Base


class User(Base):
    """Registered person, keyed by the identity provider's subject id"""

    __tablename__ = "users"

    id: Mapped[str] = mapped_column(String(255), primary_key=True)
    name: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    email: Mapped[str] = mapped_column(String(320), nullable=False)
    image: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    email_verified: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())

    # Relationships
    attendances: Mapped[List["Attendance"]] = relationship(
        "Attendance", foreign_keys="Attendance.user_id", back_populates="user"
    )

    __table_args__ = (
        Index('ix_users_name', 'name'),
        UniqueConstraint('email', name='uq_users_email'),
    )
