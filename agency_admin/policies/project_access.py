#agency_admin/policies/project_access.py
from __future__ import annotations

from typing import Dict

from sqlalchemy import select
from sqlalchemy.orm import Session
from sqlalchemy.sql import Select

from agency_admin.models.project import Project
from agency_admin.models.project_membership import ProjectMembership
from agency_admin.policies.rbac import Principal, is_admin

# Every predicate below re-reads membership rows; grants can change between
# calls and nothing here is cached.


def _has_membership(db: Session, principal: Principal, project_id: int, *flags) -> bool:
    stmt = select(ProjectMembership.id).where(
        ProjectMembership.project_id == project_id,
        ProjectMembership.account_id == principal.account_id,
        *[flag.is_(True) for flag in flags],
    )
    return db.execute(stmt.limit(1)).first() is not None


def can_view_project(db: Session, principal: Principal, project_id: int) -> bool:
    if is_admin(principal):
        return True
    return _has_membership(db, principal, project_id)


def can_edit_project(db: Session, principal: Principal, project_id: int) -> bool:
    if is_admin(principal):
        return True
    return _has_membership(db, principal, project_id, ProjectMembership.can_edit)


def can_manage_payments(db: Session, principal: Principal, project_id: int) -> bool:
    if is_admin(principal):
        return True
    return _has_membership(db, principal, project_id, ProjectMembership.can_manage_payments)


def can_view_client(db: Session, principal: Principal, client_id: int) -> bool:
    if is_admin(principal):
        return True
    stmt = (
        select(ProjectMembership.id)
        .join(Project, Project.id == ProjectMembership.project_id)
        .where(
            Project.client_id == client_id,
            ProjectMembership.account_id == principal.account_id,
        )
        .limit(1)
    )
    return db.execute(stmt).first() is not None


def restrict_projects(stmt: Select, principal: Principal) -> Select:
    """
    Narrow a SELECT over Project to the rows reachable through the caller's
    own membership rows. Administrators are not narrowed.
    """
    if is_admin(principal):
        return stmt
    return stmt.join(
        ProjectMembership,
        (ProjectMembership.project_id == Project.id)
        & (ProjectMembership.account_id == principal.account_id),
    )


def permissions_for(
    db: Session, principal: Principal, project_ids: list[int]
) -> Dict[int, Dict[str, bool]]:
    """
    {project_id: {"can_edit": ..., "can_manage_payments": ...}} for the caller.
    """
    if is_admin(principal):
        return {pid: {"can_edit": True, "can_manage_payments": True} for pid in project_ids}

    perms = {pid: {"can_edit": False, "can_manage_payments": False} for pid in project_ids}
    if not project_ids:
        return perms

    rows = db.execute(
        select(
            ProjectMembership.project_id,
            ProjectMembership.can_edit,
            ProjectMembership.can_manage_payments,
        ).where(
            ProjectMembership.account_id == principal.account_id,
            ProjectMembership.project_id.in_(project_ids),
        )
    ).all()
    for pid, can_edit, can_pay in rows:
        perms[pid] = {"can_edit": bool(can_edit), "can_manage_payments": bool(can_pay)}
    return perms
