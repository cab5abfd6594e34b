import logging

from sqlalchemy import select
from sqlalchemy.orm import Session

from agency_admin.core.config import Settings, get_settings
from agency_admin.core.logging import configure_logging
from agency_admin.core.security import hash_password
from agency_admin.db.session import build_engine, build_session_factory
from agency_admin.models.account import Account
from agency_admin.models.enums import AccountRole

logger = logging.getLogger(__name__)


def seed_admin(db: Session, settings: Settings) -> Account | None:
    """
    Provision the initial administrator from ADMIN_EMAIL / ADMIN_PASSWORD.
    An existing account with that email is left untouched.
    """
    if not settings.admin_email or not settings.admin_password:
        logger.warning("seed_admin_skipped", extra={"reason": "admin credentials not configured"})
        return None

    email = settings.admin_email.strip().lower()
    existing = db.execute(select(Account).where(Account.email == email)).scalar_one_or_none()
    if existing is not None:
        logger.info("seed_admin_exists", extra={"account_id": existing.id})
        return existing

    admin = Account(
        email=email,
        handle=(settings.admin_handle or "").strip().lower() or None,
        name=settings.admin_name,
        role=AccountRole.ADMIN.value,
        password_hash=hash_password(settings.admin_password),
        is_active=True,
    )
    db.add(admin)
    db.commit()
    db.refresh(admin)
    logger.info("seed_admin_created", extra={"account_id": admin.id})
    return admin


def seed():
    settings = get_settings()
    configure_logging(settings)

    engine = build_engine(settings.database_url)
    db: Session = build_session_factory(engine)()
    try:
        seed_admin(db, settings)
    finally:
        db.close()
        engine.dispose()


if __name__ == "__main__":
    seed()
