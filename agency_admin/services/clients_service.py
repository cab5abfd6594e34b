# agency_admin/services/clients_service.py
from __future__ import annotations

from typing import Any, Dict, List, Tuple

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from agency_admin.core.errors import Forbidden, NotFound, ValidationError
from agency_admin.models.client import Client
from agency_admin.models.project import Project
from agency_admin.policies.project_access import can_view_client, restrict_projects
from agency_admin.policies.rbac import Principal


class ClientsService:
    def list_visible(self, db: Session, principal: Principal) -> List[Tuple[Client, int]]:
        """
        Clients with the number of projects the caller can see for each.
        Non-administrators only get clients they reach through a membership.
        """
        visible = restrict_projects(select(Project.id, Project.client_id), principal).subquery()

        counts = (
            select(visible.c.client_id, func.count(func.distinct(visible.c.id)).label("project_count"))
            .group_by(visible.c.client_id)
            .subquery()
        )

        stmt = select(Client, func.coalesce(counts.c.project_count, 0)).outerjoin(
            counts, counts.c.client_id == Client.id
        )
        if not principal.is_admin:
            stmt = stmt.where(counts.c.client_id.is_not(None))

        rows = db.execute(stmt.order_by(Client.created_at.desc(), Client.id.desc())).all()
        return [(client, int(count)) for client, count in rows]

    def get(self, db: Session, client_id: int) -> Client:
        client = db.get(Client, client_id)
        if client is None:
            raise NotFound("Client not found.")
        return client

    def get_visible(self, db: Session, principal: Principal, client_id: int) -> Client:
        client = self.get(db, client_id)
        if not can_view_client(db, principal, client_id):
            raise Forbidden()
        return client

    def create(self, db: Session, *, name: str, email: str, phone: str, company: str | None) -> Client:
        client = Client(name=name.strip(), email=email, phone=phone.strip(), company=company or None)
        db.add(client)
        db.commit()
        db.refresh(client)
        return client

    def update(self, db: Session, client_id: int, changes: Dict[str, Any]) -> Client:
        if not changes:
            raise ValidationError("No fields to update.")
        client = self.get(db, client_id)
        for key, value in changes.items():
            setattr(client, key, value)
        db.commit()
        db.refresh(client)
        return client

    def delete(self, db: Session, client_id: int) -> None:
        client = self.get(db, client_id)
        db.delete(client)
        db.commit()
