from __future__ import annotations

from agency_admin.schemas.links import LinkResponse
from agency_admin.services.links_service import TokenLinkService


def link_resp(link, links: TokenLinkService) -> dict:
    return LinkResponse(
        id=link.id,
        kind=link.kind,
        token=link.token,
        active=link.active,
        expires_at=link.expires_at,
        created_at=link.created_at,
        candidate_id=link.candidate_id,
        project_id=link.project_id,
        amount=link.amount,
        payment_kind=link.payment_kind,
        upload_completed=link.upload_completed,
        url=links.public_url(link),
    ).model_dump(mode="json")


def submission_resp(sub, download_url: str | None = None) -> dict:
    return {
        "id": sub.id,
        "kind": sub.kind,
        "link_id": sub.link_id,
        "candidate_id": sub.candidate_id,
        "project_id": sub.project_id,
        "client_id": sub.client_id,
        "file_name": sub.file_name,
        "file_size": sub.file_size,
        "content_type": sub.content_type,
        "status": sub.status,
        "reference_id": sub.reference_id,
        "amount": str(sub.amount) if sub.amount is not None else None,
        "due_date": sub.due_date.isoformat() if sub.due_date else None,
        "payment_kind": sub.payment_kind,
        "payment_type": sub.payment_type,
        "payment_description": sub.payment_description,
        "client_name": sub.client_name,
        "project_name": sub.project_name,
        "project_code": sub.project_code,
        "tracking_id": sub.tracking_id,
        "created_at": sub.created_at.isoformat() if sub.created_at else None,
        "download_url": download_url,
    }
