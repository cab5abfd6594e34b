# agency_admin/services/contacts_service.py
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, time, timedelta
from typing import Any, Dict, Iterator, List, Optional, Sequence, Tuple

from sqlalchemy import delete, func, or_, select, update
from sqlalchemy.orm import Session
from sqlalchemy.sql import Select

from agency_admin.core.errors import NotFound, ValidationError
from agency_admin.core.query import PageParams, SortParams
from agency_admin.models.contact import Contact
from agency_admin.models.enums import ContactStatus

logger = logging.getLogger(__name__)

SORTABLE = {
    "created_at": Contact.created_at,
    "status": Contact.status,
    "name": Contact.name,
    "email": Contact.email,
}

EXPORT_FIELDS = ["id", "name", "email", "phone", "subject", "message", "status", "created_at"]


@dataclass(frozen=True)
class ContactFilters:
    search: Optional[str] = None
    status: Optional[str] = None
    date_from: Optional[datetime] = None
    date_to: Optional[datetime] = None

    def apply(self, stmt: Select) -> Select:
        if self.search:
            like = f"%{self.search.strip().lower()}%"
            stmt = stmt.where(
                or_(
                    func.lower(Contact.name).like(like),
                    func.lower(Contact.email).like(like),
                    func.lower(Contact.phone).like(like),
                    func.lower(Contact.subject).like(like),
                    func.lower(Contact.message).like(like),
                )
            )
        if self.status:
            stmt = stmt.where(Contact.status == self.status)
        if self.date_from:
            stmt = stmt.where(Contact.created_at >= self.date_from)
        if self.date_to:
            # a bare date means "through the end of that day"
            end = self.date_to
            if end.time() == time(0, 0):
                end = end + timedelta(days=1)
            stmt = stmt.where(Contact.created_at < end)
        return stmt


class ContactsService:
    def submit(self, db: Session, *, name: str, email: str, phone: str, subject: str, message: str) -> Contact:
        c = Contact(
            name=name,
            email=email,
            phone=phone,
            subject=subject,
            message=message,
            status=ContactStatus.NEW.value,
        )
        db.add(c)
        db.commit()
        db.refresh(c)
        logger.info("contact_received", extra={"contact_id": c.id})
        return c

    def list(
        self, db: Session, *, filters: ContactFilters, sort: SortParams, page: PageParams
    ) -> Tuple[List[Contact], int]:
        stmt = filters.apply(select(Contact))
        total = db.execute(select(func.count()).select_from(stmt.subquery())).scalar_one()

        stmt = sort.apply(stmt, SORTABLE).order_by(Contact.id.desc())
        rows = db.execute(page.apply(stmt)).scalars().all()
        return list(rows), int(total)

    def get(self, db: Session, contact_id: int) -> Contact:
        c = db.get(Contact, contact_id)
        if c is None:
            raise NotFound("Contact not found.")
        return c

    def update(self, db: Session, contact_id: int, changes: Dict[str, Any]) -> Contact:
        if not changes:
            raise ValidationError("No fields to update.")
        c = self.get(db, contact_id)
        if changes.get("status") is not None:
            c.status = ContactStatus(changes["status"]).value
        if "admin_notes" in changes:
            c.admin_notes = changes["admin_notes"]
        db.commit()
        db.refresh(c)
        return c

    def delete(self, db: Session, contact_id: int) -> None:
        c = self.get(db, contact_id)
        db.delete(c)
        db.commit()

    def bulk(self, db: Session, *, ids: Sequence[int], action: str, status: Optional[ContactStatus]) -> int:
        if action == "delete":
            result = db.execute(
                delete(Contact).where(Contact.id.in_(ids)).execution_options(synchronize_session=False)
            )
        else:
            result = db.execute(
                update(Contact)
                .where(Contact.id.in_(ids))
                .values(status=ContactStatus(status).value, updated_at=func.now())
                .execution_options(synchronize_session=False)
            )
        db.commit()
        logger.info("contacts_bulk", extra={"action": action, "count": result.rowcount})
        return int(result.rowcount or 0)

    def export_rows(self, db: Session, *, filters: ContactFilters, sort: SortParams) -> Iterator[Dict[str, Any]]:
        stmt = sort.apply(filters.apply(select(Contact)), SORTABLE).order_by(Contact.id.desc())
        for c in db.execute(stmt).scalars():
            yield {
                "id": c.id,
                "name": c.name,
                "email": c.email,
                "phone": c.phone,
                "subject": c.subject,
                "message": (c.message or "").replace("\n", " "),
                "status": c.status,
                "created_at": c.created_at.isoformat() if c.created_at else "",
            }
