# agency_admin/core/deps.py
from __future__ import annotations

from datetime import datetime, timezone
from typing import Callable

from fastapi import Request

from agency_admin.core.artifacts import ArtifactPolicy
from agency_admin.core.config import Settings
from agency_admin.core.storage import ArtifactStorage

Clock = Callable[[], datetime]


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def get_clock() -> Clock:
    """Overridden in tests to move time forward."""
    return utcnow


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_storage(request: Request) -> ArtifactStorage:
    return request.app.state.storage


def get_artifact_policy(request: Request) -> ArtifactPolicy:
    return ArtifactPolicy.from_settings(request.app.state.settings)


def as_utc(value: datetime) -> datetime:
    """SQLite hands back naive datetimes; everything stored here is UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value
