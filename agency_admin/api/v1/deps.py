from __future__ import annotations

from fastapi import Depends, Request

from agency_admin.core.artifacts import ArtifactPolicy
from agency_admin.core.deps import Clock, get_artifact_policy, get_clock, get_storage
from agency_admin.core.storage import ArtifactStorage
from agency_admin.services.links_service import TokenLinkService
from agency_admin.services.submissions_service import SubmissionService


def get_link_service(request: Request, clock: Clock = Depends(get_clock)) -> TokenLinkService:
    return TokenLinkService(request.app.state.settings, clock=clock)


def get_submission_service(
    links: TokenLinkService = Depends(get_link_service),
    storage: ArtifactStorage = Depends(get_storage),
    policy: ArtifactPolicy = Depends(get_artifact_policy),
    clock: Clock = Depends(get_clock),
) -> SubmissionService:
    return SubmissionService(links, storage, policy, clock=clock)
