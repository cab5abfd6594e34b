# agency_admin/services/memberships_service.py
from __future__ import annotations

import logging
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, joinedload

from agency_admin.core.errors import NotFound, ValidationError
from agency_admin.models.account import Account
from agency_admin.models.project import Project
from agency_admin.models.project_membership import ProjectMembership

logger = logging.getLogger(__name__)


class MembershipsService:
    """
    One row per (project, account); the unique constraint on the pair is the
    authority, the lookup before insert only avoids the round trip.
    """

    def _find(self, db: Session, project_id: int, account_id: int) -> Optional[ProjectMembership]:
        return db.execute(
            select(ProjectMembership).where(
                ProjectMembership.project_id == project_id,
                ProjectMembership.account_id == account_id,
            )
        ).scalar_one_or_none()

    def list(self, db: Session, project_id: int) -> List[ProjectMembership]:
        if db.get(Project, project_id) is None:
            raise NotFound("Project not found.")
        return list(
            db.execute(
                select(ProjectMembership)
                .options(joinedload(ProjectMembership.account))
                .where(ProjectMembership.project_id == project_id)
                .order_by(ProjectMembership.id)
            )
            .scalars()
            .all()
        )

    def grant(
        self,
        db: Session,
        *,
        project_id: int,
        account_id: int,
        can_edit: bool,
        can_manage_payments: bool,
    ) -> ProjectMembership:
        """Upsert: a second grant for the same pair replaces the flags."""
        if db.get(Project, project_id) is None:
            raise NotFound("Project not found.")
        if db.get(Account, account_id) is None:
            raise NotFound("Account not found.")

        m = self._find(db, project_id, account_id)
        if m is None:
            m = ProjectMembership(
                project_id=project_id,
                account_id=account_id,
                can_edit=can_edit,
                can_manage_payments=can_manage_payments,
            )
            db.add(m)
            try:
                db.commit()
            except IntegrityError:
                # concurrent grant won the insert; fall through to update it
                db.rollback()
                m = self._find(db, project_id, account_id)
                if m is None:
                    raise
                m.can_edit = can_edit
                m.can_manage_payments = can_manage_payments
                db.commit()
        else:
            m.can_edit = can_edit
            m.can_manage_payments = can_manage_payments
            db.commit()

        db.refresh(m)
        logger.info(
            "membership_granted",
            extra={
                "project_id": project_id,
                "account_id": account_id,
                "can_edit": can_edit,
                "can_manage_payments": can_manage_payments,
            },
        )
        return m

    def update(
        self,
        db: Session,
        *,
        project_id: int,
        account_id: int,
        can_edit: Optional[bool],
        can_manage_payments: Optional[bool],
    ) -> ProjectMembership:
        if can_edit is None and can_manage_payments is None:
            raise ValidationError("No fields to update.")

        m = self._find(db, project_id, account_id)
        if m is None:
            raise NotFound("Membership not found.")

        if can_edit is not None:
            m.can_edit = can_edit
        if can_manage_payments is not None:
            m.can_manage_payments = can_manage_payments
        db.commit()
        db.refresh(m)
        return m

    def revoke(self, db: Session, *, project_id: int, account_id: int) -> None:
        m = self._find(db, project_id, account_id)
        if m is None:
            raise NotFound("Membership not found.")
        db.delete(m)
        db.commit()
        logger.info("membership_revoked", extra={"project_id": project_id, "account_id": account_id})
