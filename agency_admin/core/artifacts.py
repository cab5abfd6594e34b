# agency_admin/core/artifacts.py
from __future__ import annotations

import os
from dataclasses import dataclass
from typing import BinaryIO, FrozenSet, Optional

from agency_admin.core.config import Settings
from agency_admin.core.errors import InvalidArtifact


@dataclass
class IncomingArtifact:
    """An upload as received from the caller, before it is accepted."""

    filename: str
    content_type: Optional[str]
    stream: BinaryIO

    @property
    def extension(self) -> str:
        return os.path.splitext(self.filename or "")[1].lower()

    def close(self) -> None:
        self.stream.close()


@dataclass(frozen=True)
class ArtifactPolicy:
    allowed_mime_types: FrozenSet[str]
    allowed_extensions: FrozenSet[str]
    max_bytes: int

    @classmethod
    def from_settings(cls, settings: Settings) -> "ArtifactPolicy":
        return cls(
            allowed_mime_types=frozenset(m.lower() for m in settings.upload_allowed_mime_types),
            allowed_extensions=frozenset(e.lower() for e in settings.upload_allowed_extensions),
            max_bytes=settings.upload_max_bytes,
        )

    def check_declared(self, artifact: Optional[IncomingArtifact]) -> None:
        """
        Declared type checks. Size is enforced while the bytes are written.
        """
        if artifact is None or not artifact.filename:
            raise InvalidArtifact("No file uploaded.")

        mime = (artifact.content_type or "").split(";")[0].strip().lower()
        if mime not in self.allowed_mime_types:
            raise InvalidArtifact()

        if artifact.extension and artifact.extension not in self.allowed_extensions:
            raise InvalidArtifact()
