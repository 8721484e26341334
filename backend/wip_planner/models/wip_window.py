from __future__ import annotations

from datetime import datetime
from typing import List, Optional
from uuid import UUID

from sqlalchemy import Boolean, DateTime, ForeignKey, Index, String, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from wip_planner.services.database_manager.connection import Base


class WipWindow(Base):
    """Time-boxed window during which WIP events take place"""

    __tablename__ = "wip_windows"

    id: Mapped[UUID] = mapped_column(primary_key=True, server_default=func.gen_random_uuid())
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    start_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    end_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())

    # Relationships
    events: Mapped[List["Event"]] = relationship(
        "Event", back_populates="wip_window", cascade="all, delete-orphan", passive_deletes=True
    )

    __table_args__ = (
        Index('ix_wip_windows_active', 'is_active'),
        Index('ix_wip_windows_start_date', 'start_date'),
    )


class OrgSetting(Base):
    """Organization-wide settings (single row)"""

    __tablename__ = "org_settings"

    id: Mapped[UUID] = mapped_column(primary_key=True, server_default=func.gen_random_uuid())
    current_wip_window_id: Mapped[Optional[UUID]] = mapped_column(
        ForeignKey("wip_windows.id", ondelete="SET NULL"), nullable=True
    )
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())
