from functools import lru_cache
from typing import List

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",
    )

    # ─────────── APP ───────────
    app_name: str = "Agency Admin Backend"
    environment: str = "dev"
    log_level: str = "INFO"

    # ─────────── API ───────────
    api_prefix: str = "/api/v1"
    request_id_header: str = "X-Request-Id"
    public_base_url: str = "http://localhost:5001"

    # ─────────── DATABASE ───────────
    database_url: str

    # ─────────── JWT / AUTH ───────────
    jwt_secret_key: str
    jwt_algorithm: str = "HS256"
    jwt_access_token_minutes: int = 1440  # 24 hours
    session_cookie_name: str = "admin_token"

    # ─────────── TOKEN LINKS ───────────
    onboarding_link_hours: int = 5
    payment_link_days: int = 30

    # ─────────── UPLOADS ───────────
    upload_dir: str = "uploads"
    upload_max_bytes: int = 5 * 1024 * 1024
    upload_allowed_mime_types: List[str] = [
        "application/pdf",
        "image/jpeg",
        "image/jpg",
        "image/png",
    ]
    upload_allowed_extensions: List[str] = [".pdf", ".jpg", ".jpeg", ".png"]

    # ─────────── PUBLIC CONTACT FORM ───────────
    contact_rate_limit_per_minute: int = 5

    # ─────────── SEED ADMIN ───────────
    admin_email: str | None = None
    admin_password: str | None = None
    admin_handle: str | None = None
    admin_name: str = "Administrator"

    @property
    def is_production(self) -> bool:
        return self.environment.lower() == "production"


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
