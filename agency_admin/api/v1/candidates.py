# agency_admin/api/v1/candidates.py
from __future__ import annotations

from fastapi import APIRouter, Depends, Request
from fastapi.responses import FileResponse
from sqlalchemy.orm import Session

from agency_admin.api.v1.deps import get_link_service, get_submission_service
from agency_admin.api.v1.links_resp import link_resp, submission_resp
from agency_admin.core.auth_deps import require_admin
from agency_admin.db.session import get_db
from agency_admin.policies.rbac import Principal
from agency_admin.schemas.candidates import CandidateCreateRequest, CandidateStatusRequest
from agency_admin.schemas.links import CandidateLinkRequest, LinkToggleRequest
from agency_admin.services.candidates_service import CandidatesService
from agency_admin.services.links_service import TokenLinkService
from agency_admin.services.submissions_service import SubmissionService

router = APIRouter(prefix="/admin")

svc = CandidatesService()


def _iso(dt):
    return dt.isoformat() if dt else None


def _candidate_resp(c) -> dict:
    return {
        "id": c.id,
        "candidate_code": c.candidate_code,
        "name": c.name,
        "email": c.email,
        "phone": c.phone,
        "position": c.position,
        "status": c.status,
        "created_at": _iso(c.created_at),
    }


def _download_url(request: Request, candidate_id: int) -> str:
    return str(request.url_for("download_candidate_upload", candidate_id=candidate_id))


# ---------------------------
# CANDIDATES
# ---------------------------


@router.post("/candidates", status_code=201)
def create_candidate(
    body: CandidateCreateRequest,
    db: Session = Depends(get_db),
    _admin: Principal = Depends(require_admin),
):
    c = svc.create(db, name=body.name, email=body.email, phone=body.phone, position=body.position)
    return _candidate_resp(c)


@router.get("/candidates")
def list_candidates(
    request: Request,
    db: Session = Depends(get_db),
    _admin: Principal = Depends(require_admin),
    links: TokenLinkService = Depends(get_link_service),
):
    out = []
    for row in svc.list(db):
        c, link, upload = row["candidate"], row["link"], row["upload"]
        item = _candidate_resp(c)
        item["link"] = link_resp(link, links) if link is not None else None
        item["upload"] = submission_resp(upload, _download_url(request, c.id)) if upload is not None else None
        out.append(item)
    return {"data": out}


@router.put("/candidates/{candidate_id}/status")
def set_candidate_status(
    candidate_id: int,
    body: CandidateStatusRequest,
    db: Session = Depends(get_db),
    _admin: Principal = Depends(require_admin),
):
    return _candidate_resp(svc.set_status(db, candidate_id, body.status))


@router.get("/candidates/{candidate_id}/download", name="download_candidate_upload")
def download_candidate_upload(
    candidate_id: int,
    db: Session = Depends(get_db),
    _admin: Principal = Depends(require_admin),
    submissions: SubmissionService = Depends(get_submission_service),
):
    sub = submissions.candidate_upload(db, candidate_id)
    return FileResponse(sub.file_path, media_type=sub.content_type, filename=sub.file_name)


# ---------------------------
# ONBOARDING LINKS
# ---------------------------


@router.post("/candidate-links", status_code=201)
def issue_candidate_link(
    body: CandidateLinkRequest,
    db: Session = Depends(get_db),
    admin: Principal = Depends(require_admin),
    links: TokenLinkService = Depends(get_link_service),
):
    link = links.issue_onboarding(db, candidate_id=body.candidate_id, actor_id=admin.account_id)
    return link_resp(link, links)


@router.put("/candidate-links/{candidate_id}/toggle")
def toggle_candidate_link(
    candidate_id: int,
    body: LinkToggleRequest,
    db: Session = Depends(get_db),
    admin: Principal = Depends(require_admin),
    links: TokenLinkService = Depends(get_link_service),
):
    link = links.toggle_candidate(db, admin, candidate_id, body.active)
    return link_resp(link, links)
