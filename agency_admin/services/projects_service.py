# agency_admin/services/projects_service.py
from __future__ import annotations

import secrets
import string
import time
from typing import Any, Dict, List, Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from agency_admin.core.errors import Conflict, Forbidden, NotFound, ValidationError
from agency_admin.models.client import Client
from agency_admin.models.enums import ProjectType
from agency_admin.models.project import Project
from agency_admin.policies.project_access import can_view_project, restrict_projects
from agency_admin.policies.rbac import Principal

_ALPHABET = string.ascii_uppercase + string.digits


def _rand(n: int) -> str:
    return "".join(secrets.choice(_ALPHABET) for _ in range(n))


def generate_project_code() -> str:
    ts = str(int(time.time() * 1000))[-6:]
    return f"PRJ-{ts}-{_rand(4)}"


def generate_tracking_id(code: str) -> str:
    return f"TRK-{code.removeprefix('PRJ-')}-{_rand(3)}"


class ProjectsService:
    def create(
        self,
        db: Session,
        *,
        client_id: int,
        name: str,
        description: Optional[str],
        type: ProjectType,
        other_type: Optional[str],
        actor_id: int,
    ) -> Project:
        if db.get(Client, client_id) is None:
            raise NotFound("Client not found.")

        code = generate_project_code()
        p = Project(
            client_id=client_id,
            code=code,
            tracking_id=generate_tracking_id(code),
            name=name.strip(),
            description=description or "",
            type=type.value,
            other_type=other_type if type == ProjectType.OTHER else None,
            updated_by=actor_id,
        )
        db.add(p)
        try:
            db.commit()
        except IntegrityError:
            db.rollback()
            raise Conflict("Project code already exists, retry.")
        db.refresh(p)
        return p

    def get(self, db: Session, project_id: int) -> Project:
        p = db.get(Project, project_id)
        if p is None:
            raise NotFound("Project not found.")
        return p

    def get_visible(self, db: Session, principal: Principal, project_id: int) -> Project:
        p = self.get(db, project_id)
        if not can_view_project(db, principal, project_id):
            raise Forbidden()
        return p

    def list_for_client(self, db: Session, principal: Principal, client_id: int) -> List[Project]:
        stmt = restrict_projects(select(Project).where(Project.client_id == client_id), principal)
        return list(db.execute(stmt.order_by(Project.created_at.desc(), Project.id.desc())).scalars().all())

    def update(self, db: Session, project_id: int, changes: Dict[str, Any], *, actor_id: int) -> Project:
        if not changes:
            raise ValidationError("No fields to update.")

        p = self.get(db, project_id)
        for key, value in changes.items():
            if key == "type":
                p.type = ProjectType(value).value
            else:
                setattr(p, key, value)

        if p.type != ProjectType.OTHER.value:
            p.other_type = None
        p.updated_by = actor_id
        db.commit()
        db.refresh(p)
        return p

    def delete(self, db: Session, project_id: int) -> None:
        p = self.get(db, project_id)
        db.delete(p)
        db.commit()
