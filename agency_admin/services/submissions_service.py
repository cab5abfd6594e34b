# agency_admin/services/submissions_service.py
from __future__ import annotations

import logging
import secrets
import string
from datetime import timedelta
from decimal import Decimal, InvalidOperation
from typing import Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from agency_admin.core.artifacts import ArtifactPolicy, IncomingArtifact
from agency_admin.core.deps import Clock, utcnow
from agency_admin.core.errors import AlreadySubmitted, Conflict, NotFound, ValidationError
from agency_admin.core.storage import ArtifactStorage, StoredArtifact
from agency_admin.models.candidate import Candidate
from agency_admin.models.client import Client
from agency_admin.models.enums import CandidateStatus, LinkKind, PaymentKind, SubmissionStatus
from agency_admin.models.project import Project
from agency_admin.models.submission import Submission
from agency_admin.services.links_service import TokenLinkService, normalize_payment_kind

logger = logging.getLogger(__name__)

PAYMENT_DUE_DAYS = 1
# largest value a Numeric(10, 2) amount column holds
MAX_AMOUNT = Decimal("99999999.99")


def generate_reference_id(year: int) -> str:
    rand = "".join(secrets.choice(string.ascii_uppercase + string.digits) for _ in range(6))
    return f"PAY-{year}-{rand}"


def parse_amount(raw: Optional[str]) -> Optional[Decimal]:
    """
    Form amounts arrive as text; anything unparseable counts as 0. A number
    that parses but cannot be stored (negative, or beyond MAX_AMOUNT) is a
    field error.
    """
    if raw is None:
        return None
    try:
        value = Decimal(str(raw).strip())
    except InvalidOperation:
        return Decimal("0")
    if not value.is_finite():
        return Decimal("0")
    if value < 0 or value > MAX_AMOUNT:
        raise ValidationError(fields={"amount": f"Amount must be between 0 and {MAX_AMOUNT}"})
    return value.quantize(Decimal("0.01"))


class SubmissionService:
    """
    Records artifacts presented through token links.

    Order of checks: link, artifact policy, (onboarding) uniqueness, then the
    write. The store commit is the point of acceptance; a file written before
    a failed commit is deleted before the error leaves this class, and the
    incoming upload is always closed.
    """

    def __init__(
        self,
        links: TokenLinkService,
        storage: ArtifactStorage,
        policy: ArtifactPolicy,
        clock: Clock = utcnow,
    ):
        self.links = links
        self.storage = storage
        self.policy = policy
        self.clock = clock

    def _discard(self, stored: Optional[StoredArtifact]) -> None:
        if stored is not None:
            self.storage.delete(stored.path)
            logger.info("artifact_discarded", extra={"stored_name": stored.stored_name})

    # ---------------------------
    # ONBOARDING
    # ---------------------------

    def submit_candidate_upload(
        self, db: Session, token: str, artifact: Optional[IncomingArtifact]
    ) -> Submission:
        stored: Optional[StoredArtifact] = None
        try:
            link = self.links.resolve(db, token, LinkKind.ONBOARDING, lock=True)
            self.policy.check_declared(artifact)

            existing = db.execute(
                select(Submission.id).where(Submission.candidate_id == link.candidate_id)
            ).first()
            if existing is not None:
                raise AlreadySubmitted()

            stored = self.storage.save(artifact, prefix="certificate", max_bytes=self.policy.max_bytes)

            sub = Submission(
                kind=LinkKind.ONBOARDING.value,
                link_id=link.id,
                candidate_id=link.candidate_id,
                file_name=stored.original_name,
                file_path=stored.path,
                file_size=stored.size,
                content_type=stored.content_type,
                status=SubmissionStatus.UPLOADED.value,
                created_at=self.clock(),
            )
            db.add(sub)
            link.upload_completed = True
            candidate = db.get(Candidate, link.candidate_id)
            if candidate is not None:
                candidate.status = CandidateStatus.DOCUMENTS_UPLOADED.value

            try:
                db.commit()
            except IntegrityError:
                # lost the race against a concurrent upload for this candidate
                db.rollback()
                raise AlreadySubmitted()
        except BaseException:
            db.rollback()
            self._discard(stored)
            raise
        finally:
            if artifact is not None:
                artifact.close()

        db.refresh(sub)
        logger.info(
            "candidate_upload_recorded",
            extra={"submission_id": sub.id, "candidate_id": sub.candidate_id, "size": sub.file_size},
        )
        return sub

    # ---------------------------
    # PAYMENT
    # ---------------------------

    def submit_payment(
        self,
        db: Session,
        token: str,
        artifact: Optional[IncomingArtifact],
        *,
        amount: Optional[str] = None,
        payment_kind: Optional[str] = None,
        payment_type: Optional[str] = None,
        payment_description: Optional[str] = None,
    ) -> Submission:
        stored: Optional[StoredArtifact] = None
        try:
            link = self.links.resolve(db, token, LinkKind.PAYMENT)
            self.policy.check_declared(artifact)

            row = db.execute(
                select(Project, Client)
                .join(Client, Client.id == Project.client_id)
                .where(Project.id == link.project_id)
            ).first()
            project, client = row if row is not None else (None, None)

            # submitted amount, then the link's amount, then 0
            resolved_amount = parse_amount(amount)
            if resolved_amount is None:
                resolved_amount = link.amount if link.amount is not None else Decimal("0")

            kind = normalize_payment_kind(payment_kind, default=link.payment_kind or PaymentKind.PROJECT.value)
            ptype = (payment_type or "").strip() or (
                "registration" if kind == PaymentKind.REGISTRATION.value else "other"
            )

            stored = self.storage.save(artifact, prefix="receipt", max_bytes=self.policy.max_bytes)

            now = self.clock()
            sub = Submission(
                kind=LinkKind.PAYMENT.value,
                link_id=link.id,
                project_id=project.id if project else None,
                client_id=client.id if client else None,
                file_name=stored.original_name,
                file_path=stored.path,
                file_size=stored.size,
                content_type=stored.content_type,
                status=SubmissionStatus.PENDING.value,
                reference_id=generate_reference_id(now.year),
                amount=resolved_amount,
                due_date=now + timedelta(days=PAYMENT_DUE_DAYS),
                payment_kind=kind,
                payment_type=ptype[:40],
                payment_description=(payment_description or "").strip() or None,
                client_name=client.name if client else None,
                project_name=project.name if project else None,
                project_code=project.code if project else None,
                tracking_id=project.tracking_id if project else None,
                created_at=now,
            )
            db.add(sub)
            try:
                db.commit()
            except IntegrityError:
                db.rollback()
                raise Conflict("Reference id collision, retry.")
        except BaseException:
            db.rollback()
            self._discard(stored)
            raise
        finally:
            if artifact is not None:
                artifact.close()

        db.refresh(sub)
        logger.info(
            "payment_submission_recorded",
            extra={"submission_id": sub.id, "link_id": sub.link_id, "reference_id": sub.reference_id},
        )
        return sub

    # ---------------------------
    # DOWNLOADS
    # ---------------------------

    def _downloadable(self, sub: Optional[Submission]) -> Submission:
        if sub is None:
            raise NotFound("File not found.")
        if not self.storage.exists(sub.file_path):
            raise NotFound("File missing on server.")
        return sub

    def candidate_upload(self, db: Session, candidate_id: int) -> Submission:
        sub = db.execute(
            select(Submission).where(
                Submission.kind == LinkKind.ONBOARDING.value,
                Submission.candidate_id == candidate_id,
            )
        ).scalar_one_or_none()
        return self._downloadable(sub)

    def payment_receipt(self, db: Session, submission_id: int) -> Submission:
        sub = db.get(Submission, submission_id)
        if sub is not None and sub.kind != LinkKind.PAYMENT.value:
            sub = None
        return self._downloadable(sub)
