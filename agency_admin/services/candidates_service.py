# agency_admin/services/candidates_service.py
from __future__ import annotations

import secrets
import string
import time
from typing import Dict, List, Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from agency_admin.core.errors import Conflict, NotFound
from agency_admin.models.candidate import Candidate
from agency_admin.models.enums import CandidateStatus, LinkKind
from agency_admin.models.submission import Submission
from agency_admin.models.token_link import TokenLink


def generate_candidate_code() -> str:
    ts = str(int(time.time() * 1000))[-6:]
    rand = "".join(secrets.choice(string.ascii_uppercase + string.digits) for _ in range(4))
    return f"CAN-{ts}-{rand}"


class CandidatesService:
    def create(self, db: Session, *, name: str, email: str, phone: str, position: str) -> Candidate:
        c = Candidate(
            name=name,
            email=email,
            phone=phone,
            position=position,
            candidate_code=generate_candidate_code(),
            status=CandidateStatus.PENDING.value,
        )
        db.add(c)
        try:
            db.commit()
        except IntegrityError:
            db.rollback()
            raise Conflict("Candidate code already exists, retry.")
        db.refresh(c)
        return c

    def get(self, db: Session, candidate_id: int) -> Candidate:
        c = db.get(Candidate, candidate_id)
        if c is None:
            raise NotFound("Candidate not found.")
        return c

    def list(self, db: Session) -> List[Dict]:
        """
        Candidates with their latest onboarding link and upload, newest first.
        """
        candidates = db.execute(
            select(Candidate).order_by(Candidate.created_at.desc(), Candidate.id.desc())
        ).scalars().all()
        if not candidates:
            return []

        ids = [c.id for c in candidates]

        latest_link: Dict[int, TokenLink] = {}
        links = db.execute(
            select(TokenLink)
            .where(TokenLink.kind == LinkKind.ONBOARDING.value, TokenLink.candidate_id.in_(ids))
            .order_by(TokenLink.created_at.desc(), TokenLink.id.desc())
        ).scalars()
        for link in links:
            latest_link.setdefault(link.candidate_id, link)

        uploads: Dict[int, Submission] = {
            s.candidate_id: s
            for s in db.execute(select(Submission).where(Submission.candidate_id.in_(ids))).scalars()
        }

        return [
            {"candidate": c, "link": latest_link.get(c.id), "upload": uploads.get(c.id)}
            for c in candidates
        ]

    def set_status(self, db: Session, candidate_id: int, status: CandidateStatus) -> Candidate:
        c = self.get(db, candidate_id)
        c.status = status.value
        db.commit()
        db.refresh(c)
        return c

    def upload_for(self, db: Session, candidate_id: int) -> Optional[Submission]:
        return db.execute(
            select(Submission).where(Submission.candidate_id == candidate_id)
        ).scalar_one_or_none()
