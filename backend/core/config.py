from __future__ import annotations

from functools import lru_cache
from typing import Annotated, Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=("../.env", ".env"),
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    app_name: str = "Hanti Waitlist API"
    brand_name: str = "Hanti"
    environment: Literal["development", "staging", "production"] = "development"
    host: str = "0.0.0.0"
    port: int = Field(default=3000, alias="PORT")
    app_url: str = Field(default="https://hanti.com/app", alias="APP_URL")
    log_level: str = "INFO"

    database_url: str = Field(default="sqlite:///./waitlist.db", alias="DATABASE_URL")
    auto_create_tables: bool = True

    smtp_host: str = Field(default="smtp.gmail.com", alias="SMTP_HOST")
    smtp_port: int = Field(default=587, alias="SMTP_PORT")
    smtp_user: str | None = Field(default=None, alias="SMTP_USER")
    smtp_pass: str | None = Field(default=None, alias="SMTP_PASS")
    smtp_starttls: bool = True
    from_email: str = Field(default="noreply@hanti.com", alias="FROM_EMAIL")
    mail_timeout_seconds: float = 20.0

    resend_api_key: str | None = Field(default=None, alias="RESEND_API_KEY")

    rate_limit_api: str = "10/15 minutes"
    cors_origins: Annotated[list[str], NoDecode] = Field(default_factory=lambda: ["*"])
    static_dir: str = "public"
    admin_timezone: str = "America/New_York"

    @field_validator("cors_origins", mode="before")
    @classmethod
    def parse_cors_origins(cls, value: str | list[str]) -> list[str]:
        if isinstance(value, list):
            return value
        if isinstance(value, str):
            return [origin.strip() for origin in value.split(",") if origin.strip()]
        return ["*"]


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()


def normalize_database_url(url: str) -> str:
    if url.startswith("postgres://"):
        return url.replace("postgres://", "postgresql+psycopg://", 1)
    if url.startswith("postgresql://") and "+psycopg" not in url:
        return url.replace("postgresql://", "postgresql+psycopg://", 1)
    return url
