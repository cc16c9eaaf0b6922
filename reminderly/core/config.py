from __future__ import annotations

import os
from functools import lru_cache

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class BaseAppSettings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    APP_NAME: str = "Reminderly"
    ENV: str = "dev"
    DATABASE_URL: str | None = None
    REDIS_URL: str = "redis://localhost:6379/0"

    # Brevo transactional email
    BREVO_API_KEY: str | None = None
    BREVO_API_URL: str = "https://api.brevo.com/v3/smtp/email"
    BREVO_ACCOUNT_URL: str = "https://api.brevo.com/v3/account"
    EMAIL_FROM: str | None = None
    EMAIL_FROM_NAME: str = "Employee Reminder System"
    EMAIL_SEND_TIMEOUT_SECONDS: float = 15.0

    # Reminder calendar
    REMINDER_TIMEZONE: str = "UTC"  # "today" is taken in this zone
    REMINDER_DATE_FORMAT: str = "%B %d, %Y"
    DISPATCH_HOUR_UTC: int = 7
    RECURRING_HOUR_UTC: int = 6
    JOB_STALE_AFTER_MINUTES: int = 60

    CORS_ALLOW_ORIGINS: list[str] = ["*"]
    CORS_ALLOW_METHODS: list[str] = ["*"]
    CORS_ALLOW_HEADERS: list[str] = ["*"]
    CORS_ALLOW_CREDENTIALS: bool = True
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "plain"
    SENTRY_DSN: str | None = None

    @field_validator("DISPATCH_HOUR_UTC", "RECURRING_HOUR_UTC")
    @classmethod
    def _validate_hour(cls, v: int) -> int:
        if not 0 <= v <= 23:
            raise ValueError("Hour must be between 0 and 23")
        return v

    @model_validator(mode="after")
    def _validate_required_fields(self) -> BaseAppSettings:
        # Heroku-style postgres:// URLs are rejected by SQLAlchemy 2.x
        if self.DATABASE_URL and self.DATABASE_URL.startswith("postgres://"):
            self.DATABASE_URL = self.DATABASE_URL.replace("postgres://", "postgresql://", 1)

        required_in_prod = (
            "DATABASE_URL",
            "BREVO_API_KEY",
            "EMAIL_FROM",
        )
        if self.ENV.lower() == "prod":
            missing = [name for name in required_in_prod if not getattr(self, name)]
            if missing:
                raise ValueError(f"Missing required production settings: {', '.join(missing)}")
        return self


class DevSettings(BaseAppSettings):
    ENV: str = "dev"
    DATABASE_URL: str = "sqlite:///./storage/dev.db"
    EMAIL_FROM: str = "noreply@example.com"


class TestSettings(BaseAppSettings):
    ENV: str = "test"
    DATABASE_URL: str = "sqlite:///:memory:"
    BREVO_API_KEY: str = "test-brevo-key"
    EMAIL_FROM: str = "noreply@example.com"


class ProdSettings(BaseAppSettings):
    ENV: str = "prod"
    LOG_FORMAT: str = "json"


_ENV_TO_SETTINGS: dict[str, type[BaseAppSettings]] = {
    "dev": DevSettings,
    "development": DevSettings,
    "test": TestSettings,
    "testing": TestSettings,
    "prod": ProdSettings,
    "production": ProdSettings,
}


@lru_cache
def get_settings() -> BaseAppSettings:
    env_name = os.getenv("APP_ENV") or os.getenv("ENV") or "dev"
    env = env_name.lower()
    settings_cls = _ENV_TO_SETTINGS.get(env, DevSettings)
    return settings_cls()


settings = get_settings()
