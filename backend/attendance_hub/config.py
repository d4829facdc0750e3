import logging
from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)

REQUIRED_AUTH_SETTINGS = (
    "supabase_url",
    "supabase_anon_key",
    "supabase_service_role_key",
    "app_base_url",
    "auth_cookie_secret",
    "allowed_email_domain",
)


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        frozen=True,
    )

    # Application
    app_name: str = "Attendance Hub"
    environment: str = Field(default="development")
    log_level: str = Field(default="INFO")

    # CORS
    cors_origins: list[str] = Field(default=["http://localhost:5173", "http://localhost:8080"])

    # Supabase (identity provider + role store)
    supabase_url: str | None = Field(default=None)
    supabase_anon_key: str | None = Field(default=None)
    supabase_service_role_key: str | None = Field(default=None)

    # Session / OAuth
    app_base_url: str | None = Field(default=None)
    auth_cookie_secret: str | None = Field(default=None)
    allowed_email_domain: str | None = Field(default=None)
    oauth_http_timeout: float = Field(default=10.0)  # seconds, provider + role store calls

    @field_validator("supabase_url", "app_base_url")
    @classmethod
    def _strip_trailing_slash(cls, value: str | None) -> str | None:
        return value.rstrip("/") if value else value

    @property
    def is_production(self) -> bool:
        return self.environment.lower() == "production"

    def missing_auth_settings(self) -> list[str]:
        return [name for name in REQUIRED_AUTH_SETTINGS if not getattr(self, name)]

    def validate_auth(self) -> None:
        missing = self.missing_auth_settings()
        if missing:
            raise RuntimeError(
                "Missing environment variable: " + ", ".join(name.upper() for name in missing)
            )


@lru_cache
def get_settings() -> Settings:
    return Settings()
