# agency_admin/services/links_service.py
from __future__ import annotations

import logging
import secrets
from dataclasses import dataclass
from datetime import datetime, timedelta
from decimal import Decimal
from typing import Any, Dict, List, Optional

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from agency_admin.core.config import Settings
from agency_admin.core.deps import Clock, utcnow
from agency_admin.core.errors import Conflict, Forbidden, LinkUnavailable, NotFound, ValidationError
from agency_admin.models.candidate import Candidate
from agency_admin.models.client import Client
from agency_admin.models.enums import LinkKind, PaymentKind
from agency_admin.models.project import Project
from agency_admin.models.submission import Submission
from agency_admin.models.token_link import TokenLink
from agency_admin.policies.project_access import can_manage_payments
from agency_admin.policies.rbac import Principal

logger = logging.getLogger(__name__)

# 32 random bytes, 256 bits of entropy
TOKEN_BYTES = 32
# how far ahead the public payment form shows the due date
PAYMENT_CONTEXT_DUE_DAYS = 7


def new_token() -> str:
    return secrets.token_hex(TOKEN_BYTES)


def normalize_payment_kind(value: Optional[str], default: str = PaymentKind.PROJECT.value) -> str:
    kind = (value or default or "").strip().lower()
    return kind if kind in {k.value for k in PaymentKind} else PaymentKind.PROJECT.value


@dataclass(frozen=True)
class OnboardingContext:
    link: TokenLink
    candidate: Candidate
    upload: Optional[Submission]

    @property
    def has_uploaded(self) -> bool:
        return self.upload is not None


@dataclass(frozen=True)
class PaymentContext:
    link: TokenLink
    project: Project
    client: Client
    amount: Decimal
    due_date: datetime
    payment_kind: str


class TokenLinkService:
    """
    Issue, validate and administer token links.

    A link is usable only while active and now < expires_at. Validation is a
    single query and every miss raises the same LinkUnavailable, whatever the
    reason. Onboarding links are superseded: issuing or re-activating one
    deactivates the candidate's other active links in the same transaction.
    """

    def __init__(self, settings: Settings, clock: Clock = utcnow):
        self.settings = settings
        self.clock = clock

    # ---------------------------
    # helpers
    # ---------------------------

    def _window(self, kind: str) -> timedelta:
        if kind == LinkKind.ONBOARDING.value:
            return timedelta(hours=self.settings.onboarding_link_hours)
        return timedelta(days=self.settings.payment_link_days)

    def public_url(self, link: TokenLink) -> str:
        base = self.settings.public_base_url.rstrip("/")
        if link.kind == LinkKind.PAYMENT.value:
            return f"{base}/payment/{link.token}"
        return f"{base}/candidate/{link.token}"

    def _supersede(self, db: Session, candidate_id: int, keep_id: Optional[int] = None) -> None:
        stmt = update(TokenLink).where(
            TokenLink.kind == LinkKind.ONBOARDING.value,
            TokenLink.candidate_id == candidate_id,
            TokenLink.active.is_(True),
        )
        if keep_id is not None:
            stmt = stmt.where(TokenLink.id != keep_id)
        db.execute(stmt.values(active=False).execution_options(synchronize_session="fetch"))

    def _lock_candidate(self, db: Session, candidate_id: int) -> Candidate:
        c = db.execute(
            select(Candidate).where(Candidate.id == candidate_id).with_for_update()
        ).scalar_one_or_none()
        if c is None:
            raise NotFound("Candidate not found.")
        return c

    def _commit(self, db: Session) -> None:
        try:
            db.commit()
        except IntegrityError:
            db.rollback()
            raise Conflict("Link conflicts with an existing link, retry.")

    def get(self, db: Session, link_id: int, kind: Optional[LinkKind] = None) -> TokenLink:
        link = db.get(TokenLink, link_id)
        if link is None or (kind is not None and link.kind != kind.value):
            raise NotFound("Link not found.")
        return link

    def authorize(self, db: Session, principal: Principal, link: TokenLink) -> None:
        """
        Administrators may manage any link; payment links also yield to
        can-manage-payments on their project.
        """
        if principal.is_admin:
            return
        if link.kind == LinkKind.PAYMENT.value and can_manage_payments(db, principal, link.project_id):
            return
        raise Forbidden()

    # ---------------------------
    # ISSUE
    # ---------------------------

    def issue_onboarding(self, db: Session, *, candidate_id: int, actor_id: Optional[int]) -> TokenLink:
        # row lock on the candidate serializes concurrent issuers; the partial
        # unique index on active onboarding links backs it up
        self._lock_candidate(db, candidate_id)
        self._supersede(db, candidate_id)

        now = self.clock()
        link = TokenLink(
            kind=LinkKind.ONBOARDING.value,
            token=new_token(),
            candidate_id=candidate_id,
            active=True,
            expires_at=now + self._window(LinkKind.ONBOARDING.value),
            created_by=actor_id,
            created_at=now,
        )
        db.add(link)
        self._commit(db)
        db.refresh(link)

        logger.info("onboarding_link_issued", extra={"link_id": link.id, "candidate_id": candidate_id})
        return link

    def issue_payment(
        self,
        db: Session,
        *,
        project_id: int,
        actor_id: Optional[int],
        amount: Optional[Decimal] = None,
        payment_kind: Optional[str] = None,
    ) -> TokenLink:
        if db.get(Project, project_id) is None:
            raise NotFound("Project not found.")

        now = self.clock()
        link = TokenLink(
            kind=LinkKind.PAYMENT.value,
            token=new_token(),
            project_id=project_id,
            active=True,
            expires_at=now + self._window(LinkKind.PAYMENT.value),
            created_by=actor_id,
            created_at=now,
            amount=amount,
            payment_kind=normalize_payment_kind(payment_kind),
        )
        db.add(link)
        self._commit(db)
        db.refresh(link)

        logger.info("payment_link_issued", extra={"link_id": link.id, "project_id": project_id})
        return link

    # ---------------------------
    # VALIDATE
    # ---------------------------

    def resolve(self, db: Session, token: str, kind: LinkKind, *, lock: bool = False) -> TokenLink:
        stmt = select(TokenLink).where(
            TokenLink.token == token,
            TokenLink.kind == kind.value,
            TokenLink.active.is_(True),
            TokenLink.expires_at > self.clock(),
        )
        if lock:
            stmt = stmt.with_for_update()

        link = db.execute(stmt).scalar_one_or_none()
        if link is None:
            raise LinkUnavailable()
        return link

    def validate_onboarding(self, db: Session, token: str) -> OnboardingContext:
        link = self.resolve(db, token, LinkKind.ONBOARDING)
        candidate = db.get(Candidate, link.candidate_id)
        if candidate is None:
            raise LinkUnavailable()
        upload = db.execute(
            select(Submission).where(Submission.candidate_id == candidate.id)
        ).scalar_one_or_none()
        return OnboardingContext(link=link, candidate=candidate, upload=upload)

    def validate_payment(self, db: Session, token: str) -> PaymentContext:
        link = self.resolve(db, token, LinkKind.PAYMENT)
        row = db.execute(
            select(Project, Client)
            .join(Client, Client.id == Project.client_id)
            .where(Project.id == link.project_id)
        ).first()
        if row is None:
            raise LinkUnavailable()
        project, client = row
        return PaymentContext(
            link=link,
            project=project,
            client=client,
            amount=link.amount if link.amount is not None else Decimal("0"),
            due_date=self.clock() + timedelta(days=PAYMENT_CONTEXT_DUE_DAYS),
            payment_kind=normalize_payment_kind(link.payment_kind),
        )

    # ---------------------------
    # ADMINISTER
    # ---------------------------

    def toggle(
        self,
        db: Session,
        principal: Principal,
        link_id: int,
        active: bool,
        kind: Optional[LinkKind] = None,
    ) -> TokenLink:
        """Flip active; expiry is left alone."""
        link = self.get(db, link_id, kind)
        self.authorize(db, principal, link)

        if active and link.kind == LinkKind.ONBOARDING.value:
            self._lock_candidate(db, link.candidate_id)
            self._supersede(db, link.candidate_id, keep_id=link.id)

        link.active = active
        self._commit(db)
        db.refresh(link)

        logger.info("link_toggled", extra={"link_id": link.id, "kind": link.kind, "active": active})
        return link

    def toggle_candidate(self, db: Session, principal: Principal, candidate_id: int, active: bool) -> TokenLink:
        """Toggle the candidate's most recent link that has not expired yet."""
        link = db.execute(
            select(TokenLink)
            .where(
                TokenLink.kind == LinkKind.ONBOARDING.value,
                TokenLink.candidate_id == candidate_id,
                TokenLink.expires_at > self.clock(),
            )
            .order_by(TokenLink.created_at.desc(), TokenLink.id.desc())
            .limit(1)
        ).scalar_one_or_none()
        if link is None:
            raise NotFound("No active link found for this candidate.")
        return self.toggle(db, principal, link.id, active, LinkKind.ONBOARDING)

    def toggle_project(self, db: Session, *, project_id: int, active: bool) -> int:
        if db.get(Project, project_id) is None:
            raise NotFound("Project not found.")
        result = db.execute(
            update(TokenLink)
            .where(TokenLink.kind == LinkKind.PAYMENT.value, TokenLink.project_id == project_id)
            .values(active=active)
            .execution_options(synchronize_session=False)
        )
        db.commit()
        logger.info("project_links_toggled", extra={"project_id": project_id, "active": active})
        return int(result.rowcount or 0)

    def regenerate(
        self, db: Session, principal: Principal, link_id: int, kind: Optional[LinkKind] = None
    ) -> TokenLink:
        """
        Re-activate and push expiry a full window forward from now. The token
        value is kept, so links already handed out keep working.
        """
        link = self.get(db, link_id, kind)
        self.authorize(db, principal, link)

        if link.kind == LinkKind.ONBOARDING.value:
            self._lock_candidate(db, link.candidate_id)
            self._supersede(db, link.candidate_id, keep_id=link.id)

        link.active = True
        link.expires_at = self.clock() + self._window(link.kind)
        self._commit(db)
        db.refresh(link)

        logger.info("link_regenerated", extra={"link_id": link.id, "kind": link.kind})
        return link

    def update_payment_link(
        self, db: Session, principal: Principal, link_id: int, changes: Dict[str, Any]
    ) -> TokenLink:
        if not changes:
            raise ValidationError("No fields to update.")

        link = self.get(db, link_id, LinkKind.PAYMENT)
        self.authorize(db, principal, link)

        if "amount" in changes:
            link.amount = changes["amount"]
        if "active" in changes and changes["active"] is not None:
            link.active = bool(changes["active"])
        if "expires_at" in changes and changes["expires_at"] is not None:
            link.expires_at = changes["expires_at"]

        db.commit()
        db.refresh(link)
        return link

    def delete_payment_link(self, db: Session, link_id: int) -> None:
        """Submissions made through the link stay, detached from it."""
        link = self.get(db, link_id, LinkKind.PAYMENT)
        db.delete(link)
        db.commit()
        logger.info("payment_link_deleted", extra={"link_id": link_id})

    # ---------------------------
    # READS
    # ---------------------------

    def list_payment_links(self, db: Session, project_id: int) -> List[TokenLink]:
        if db.get(Project, project_id) is None:
            raise NotFound("Project not found.")
        return list(
            db.execute(
                select(TokenLink)
                .where(TokenLink.kind == LinkKind.PAYMENT.value, TokenLink.project_id == project_id)
                .order_by(TokenLink.created_at.desc(), TokenLink.id.desc())
            )
            .scalars()
            .all()
        )

    def list_link_submissions(self, db: Session, principal: Principal, link_id: int) -> List[Submission]:
        link = self.get(db, link_id, LinkKind.PAYMENT)
        self.authorize(db, principal, link)
        return list(
            db.execute(
                select(Submission)
                .where(Submission.link_id == link.id)
                .order_by(Submission.created_at.desc(), Submission.id.desc())
            )
            .scalars()
            .all()
        )
