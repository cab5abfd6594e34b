# agency_admin/models/token_link.py
from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Optional

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    Numeric,
    String,
    func,
    text,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from agency_admin.db.base import Base, BigId


class TokenLink(Base):
    """
    Bearer capability scoped to one resource.

    kind = onboarding -> candidate_id is set, upload_completed tracks completion
    kind = payment    -> project_id is set, amount/payment_kind configure the form

    Usable only while active AND now < expires_at.
    """

    __tablename__ = "token_links"

    id: Mapped[int] = mapped_column(BigId, primary_key=True, autoincrement=True)

    kind: Mapped[str] = mapped_column(String(20), nullable=False)
    token: Mapped[str] = mapped_column(String(100), nullable=False, unique=True)

    candidate_id: Mapped[Optional[int]] = mapped_column(
        BigId, ForeignKey("candidates.id", ondelete="CASCADE"), nullable=True
    )
    project_id: Mapped[Optional[int]] = mapped_column(
        BigId, ForeignKey("projects.id", ondelete="CASCADE"), nullable=True
    )

    active: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=True, server_default=text("true")
    )
    expires_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    created_by: Mapped[Optional[int]] = mapped_column(
        BigId, ForeignKey("accounts.id", ondelete="SET NULL"), nullable=True
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )

    # onboarding only
    upload_completed: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, server_default=text("false")
    )

    # payment only
    amount: Mapped[Optional[Decimal]] = mapped_column(Numeric(10, 2), nullable=True)
    payment_kind: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)

    candidate = relationship("Candidate")
    project = relationship("Project")

    __table_args__ = (
        CheckConstraint(
            "(kind = 'onboarding' AND candidate_id IS NOT NULL AND project_id IS NULL)"
            " OR (kind = 'payment' AND project_id IS NOT NULL AND candidate_id IS NULL)",
            name="owner_matches_kind",
        ),
        # at most one usable onboarding link per candidate
        Index(
            "uq_token_links_active_onboarding",
            "candidate_id",
            unique=True,
            postgresql_where=text("kind = 'onboarding' AND active"),
            sqlite_where=text("kind = 'onboarding' AND active"),
        ),
        Index("ix_token_links_candidate", "candidate_id"),
        Index("ix_token_links_project", "project_id"),
    )
