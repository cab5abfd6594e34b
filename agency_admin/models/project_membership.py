# agency_admin/models/project_membership.py
from __future__ import annotations

from datetime import datetime

from sqlalchemy import Boolean, DateTime, ForeignKey, Index, UniqueConstraint, func, text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from agency_admin.db.base import Base, BigId


class ProjectMembership(Base):
    """
    Per-project grant to a non-administrator account. The only source of
    non-administrator authority over a project.
    """

    __tablename__ = "project_memberships"

    id: Mapped[int] = mapped_column(BigId, primary_key=True, autoincrement=True)

    project_id: Mapped[int] = mapped_column(
        BigId, ForeignKey("projects.id", ondelete="CASCADE"), nullable=False
    )
    account_id: Mapped[int] = mapped_column(
        BigId, ForeignKey("accounts.id", ondelete="CASCADE"), nullable=False
    )

    can_edit: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, server_default=text("false")
    )
    can_manage_payments: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, server_default=text("false")
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )

    account = relationship("Account")

    __table_args__ = (
        UniqueConstraint(
            "project_id",
            "account_id",
            name="uq_project_memberships_project_account",
        ),
        Index("ix_project_memberships_account", "account_id"),
    )
