# agency_admin/core/storage.py
from __future__ import annotations

import logging
import os
import secrets
import time
import uuid
from dataclasses import dataclass
from pathlib import Path

from agency_admin.core.artifacts import IncomingArtifact
from agency_admin.core.errors import InvalidArtifact

logger = logging.getLogger(__name__)

CHUNK_SIZE = 64 * 1024


@dataclass(frozen=True)
class StoredArtifact:
    path: str
    stored_name: str
    original_name: str
    size: int
    content_type: str


class ArtifactStorage:
    """
    Local directory storage for accepted uploads.

    Bytes go to a staging file first and are moved into place with an atomic
    rename, so a stored name is never visible half-written.
    """

    def __init__(self, root: str | Path):
        self.root = Path(root)
        self.staging = self.root / ".staging"

    def _ensure_dirs(self) -> None:
        self.staging.mkdir(parents=True, exist_ok=True)

    def save(self, artifact: IncomingArtifact, *, prefix: str, max_bytes: int) -> StoredArtifact:
        self._ensure_dirs()
        stage_path = self.staging / f"{uuid.uuid4().hex}.part"
        stored_name = f"{prefix}-{int(time.time() * 1000)}-{secrets.randbelow(10**9)}{artifact.extension}"
        final_path = self.root / stored_name

        size = 0
        try:
            with open(stage_path, "wb") as out:
                while True:
                    chunk = artifact.stream.read(CHUNK_SIZE)
                    if not chunk:
                        break
                    size += len(chunk)
                    if size > max_bytes:
                        raise InvalidArtifact("File too large.", details={"max_bytes": max_bytes})
                    out.write(chunk)
            if size == 0:
                raise InvalidArtifact("Uploaded file is empty.")
            os.replace(stage_path, final_path)
        except BaseException:
            stage_path.unlink(missing_ok=True)
            raise

        return StoredArtifact(
            path=str(final_path),
            stored_name=stored_name,
            original_name=artifact.filename,
            size=size,
            content_type=(artifact.content_type or "application/octet-stream").split(";")[0].strip(),
        )

    def delete(self, path: str) -> None:
        try:
            Path(path).unlink(missing_ok=True)
        except OSError:
            logger.exception("artifact_delete_failed", extra={"path": path})
            raise

    def exists(self, path: str) -> bool:
        return Path(path).is_file()
