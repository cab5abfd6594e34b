# agency_admin/models/project.py
from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime, ForeignKey, String, Text, func, text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from agency_admin.db.base import Base, BigId


class Project(Base):
    __tablename__ = "projects"

    id: Mapped[int] = mapped_column(BigId, primary_key=True, autoincrement=True)

    client_id: Mapped[int] = mapped_column(
        BigId, ForeignKey("clients.id", ondelete="CASCADE"), nullable=False, index=True
    )

    # business code (PRJ-XXXXXX-XXXX) and the identifier derived from it
    code: Mapped[str] = mapped_column(String(60), nullable=False, unique=True)
    tracking_id: Mapped[str] = mapped_column(String(80), nullable=False, unique=True)

    name: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    type: Mapped[str] = mapped_column(String(40), nullable=False)
    other_type: Mapped[Optional[str]] = mapped_column(String(80), nullable=True)

    # free-form lifecycle label
    status: Mapped[str] = mapped_column(
        String(30), nullable=False, default="new", server_default=text("'new'")
    )

    updated_by: Mapped[Optional[int]] = mapped_column(
        BigId, ForeignKey("accounts.id", ondelete="SET NULL"), nullable=True
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now()
    )

    client = relationship("Client", back_populates="projects")
    editor = relationship("Account", foreign_keys=[updated_by])
