# agency_admin/core/security.py
from __future__ import annotations

import uuid
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional, Tuple

from jose import jwt
from passlib.context import CryptContext

from agency_admin.core.config import Settings

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

# session tokens must carry these or they are rejected outright
_REQUIRED = {"require_exp": True, "require_sub": True}


def hash_password(raw: str) -> str:
    return pwd_context.hash(raw)


def verify_and_upgrade(raw: str, hashed: Optional[str]) -> Tuple[bool, Optional[str]]:
    """
    Check a password against a stored hash.

    Returns (ok, new_hash); new_hash is set when the stored hash uses
    outdated parameters and should be replaced. With no stored hash a dummy
    verify still runs, so unknown accounts take as long as wrong passwords.
    """
    if not hashed:
        pwd_context.dummy_verify()
        return False, None
    return pwd_context.verify_and_update(raw, hashed)


def create_session_token(
    settings: Settings,
    account_id: int,
    claims: Dict[str, Any],
    expires_minutes: Optional[int] = None,
) -> str:
    exp_minutes = expires_minutes or settings.jwt_access_token_minutes
    now = datetime.now(timezone.utc)
    payload = {
        **claims,
        "sub": str(account_id),
        "jti": uuid.uuid4().hex,
        "iat": int(now.timestamp()),
        "exp": int((now + timedelta(minutes=exp_minutes)).timestamp()),
    }
    return jwt.encode(payload, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def decode_session_token(settings: Settings, token: str) -> Dict[str, Any]:
    return jwt.decode(
        token,
        settings.jwt_secret_key,
        algorithms=[settings.jwt_algorithm],
        options=_REQUIRED,
    )
