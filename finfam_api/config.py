"""
Configuration for the FinFam API.

Values come from environment variables and an optional .env file.
DATABASE_URL, SESSION_SECRET and JWT_SECRET have no defaults and must be set.
"""

import re
from datetime import timedelta
from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

_DURATION_RE = re.compile(r"^\s*(\d+)\s*(ms|s|m|h|d|w)?\s*$")
_DURATION_UNITS = {
    "ms": timedelta(milliseconds=1),
    "s": timedelta(seconds=1),
    "m": timedelta(minutes=1),
    "h": timedelta(hours=1),
    "d": timedelta(days=1),
    "w": timedelta(weeks=1),
}


def parse_duration(value: str) -> timedelta:
    """Parse an expiry such as ``7d``, ``12h`` or ``3600`` (bare numbers are seconds)."""
    match = _DURATION_RE.match(str(value))
    if not match:
        raise ValueError(f"Invalid duration: {value!r}")
    amount, unit = match.groups()
    return int(amount) * _DURATION_UNITS[unit or "s"]


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    database_url: str = Field(..., description="SQLAlchemy database URL")
    session_secret: str = Field(..., min_length=1, description="Session cookie signing key")
    jwt_secret: str = Field(..., min_length=1, description="Token signing key")
    jwt_expires_in: str = Field(default="7d", description="Token lifetime")
    jwt_algorithm: str = Field(default="HS256")

    host: str = Field(default="0.0.0.0")
    port: int = Field(default=3000, ge=1, le=65535)
    cors_origin: str = Field(
        default="http://localhost:5173",
        description="Comma-separated list of allowed origins",
    )
    node_env: str = Field(default="development")

    bcrypt_rounds: int = Field(default=10, ge=4, le=31)

    rate_limit_enabled: bool = Field(default=True)
    rate_limit_max: int = Field(default=100, ge=1)
    rate_limit_window_seconds: int = Field(default=15 * 60, ge=1)
    auth_rate_limit_max: int = Field(default=10, ge=1)
    auth_rate_limit_window_seconds: int = Field(default=60 * 60, ge=1)

    @field_validator("jwt_expires_in")
    @classmethod
    def validate_jwt_expires_in(cls, v: str) -> str:
        parse_duration(v)
        return v

    @property
    def token_lifetime(self) -> timedelta:
        return parse_duration(self.jwt_expires_in)

    @property
    def cors_origins(self) -> list[str]:
        return [o.strip() for o in self.cors_origin.split(",") if o.strip()]

    @property
    def is_production(self) -> bool:
        return self.node_env.lower() == "production"

    @property
    def is_development(self) -> bool:
        return self.node_env.lower() == "development"


@lru_cache()
def get_settings() -> Settings:
    """
    Load settings once per process.

    Call get_settings.cache_clear() to reload.
    """
    return Settings()
