import logging
from typing import Optional

from fastapi import FastAPI

from agency_admin.api.v1.router import v1_router
from agency_admin.core.config import Settings, get_settings
from agency_admin.core.errors import setup_exception_handlers
from agency_admin.core.logging import configure_logging
from agency_admin.core.middleware import RequestIdMiddleware
from agency_admin.core.middleware_rate_limit import PublicSubmitRateLimitMiddleware
from agency_admin.core.rate_limit import per_minute_limiter
from agency_admin.core.storage import ArtifactStorage
from agency_admin.db.session import build_engine, build_session_factory

logger = logging.getLogger(__name__)


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or get_settings()
    configure_logging(settings)

    app = FastAPI(
        title=settings.app_name,
        version="0.1.0",
    )

    # Store, pool and upload storage live on app.state for the app's lifetime
    engine = build_engine(settings.database_url)
    app.state.settings = settings
    app.state.engine = engine
    app.state.session_factory = build_session_factory(engine)
    app.state.storage = ArtifactStorage(settings.upload_dir)

    # Middleware: public contact form rate limit, then Request ID (outermost)
    app.add_middleware(
        PublicSubmitRateLimitMiddleware,
        limiter=per_minute_limiter(settings.contact_rate_limit_per_minute),
        paths=[f"{settings.api_prefix}/public/contact"],
    )
    app.add_middleware(RequestIdMiddleware, header_name=settings.request_id_header)

    setup_exception_handlers(app)

    # API v1
    app.include_router(v1_router, prefix=settings.api_prefix)

    logger.info("app_created", extra={"environment": settings.environment})
    return app


app = create_app()
