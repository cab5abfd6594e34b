# agency_admin/models/submission.py
from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Optional

from sqlalchemy import BigInteger, DateTime, ForeignKey, Index, Numeric, String, Text, UniqueConstraint, func
from sqlalchemy.orm import Mapped, mapped_column

from agency_admin.db.base import Base, BigId


class Submission(Base):
    """
    Artifact recorded through a token link.

    Onboarding submissions are unique per candidate; payment submissions are
    not, a payment link stays reusable. Payment rows keep a snapshot of the
    client/project they were made for.
    """

    __tablename__ = "submissions"

    id: Mapped[int] = mapped_column(BigId, primary_key=True, autoincrement=True)

    kind: Mapped[str] = mapped_column(String(20), nullable=False)

    link_id: Mapped[Optional[int]] = mapped_column(
        BigId, ForeignKey("token_links.id", ondelete="SET NULL"), nullable=True
    )
    candidate_id: Mapped[Optional[int]] = mapped_column(
        BigId, ForeignKey("candidates.id", ondelete="CASCADE"), nullable=True
    )
    project_id: Mapped[Optional[int]] = mapped_column(
        BigId, ForeignKey("projects.id", ondelete="SET NULL"), nullable=True
    )
    client_id: Mapped[Optional[int]] = mapped_column(
        BigId, ForeignKey("clients.id", ondelete="SET NULL"), nullable=True
    )

    # artifact
    file_name: Mapped[str] = mapped_column(String(255), nullable=False)
    file_path: Mapped[str] = mapped_column(Text, nullable=False)
    file_size: Mapped[int] = mapped_column(BigInteger, nullable=False)
    content_type: Mapped[str] = mapped_column(String(128), nullable=False)

    status: Mapped[str] = mapped_column(String(20), nullable=False)

    # payment only
    reference_id: Mapped[Optional[str]] = mapped_column(String(60), nullable=True, unique=True)
    amount: Mapped[Optional[Decimal]] = mapped_column(Numeric(10, 2), nullable=True)
    due_date: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    payment_kind: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    payment_type: Mapped[Optional[str]] = mapped_column(String(40), nullable=True)
    payment_description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    client_name: Mapped[Optional[str]] = mapped_column(String(120), nullable=True)
    project_name: Mapped[Optional[str]] = mapped_column(String(200), nullable=True)
    project_code: Mapped[Optional[str]] = mapped_column(String(60), nullable=True)
    tracking_id: Mapped[Optional[str]] = mapped_column(String(80), nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )

    __table_args__ = (
        UniqueConstraint("candidate_id", name="uq_submissions_candidate"),
        Index("ix_submissions_link", "link_id"),
        Index("ix_submissions_kind_created", "kind", "created_at"),
    )
