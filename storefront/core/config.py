"""
Configuration helpers for the storefront backend.

Exposes a frozen Settings object read from environment variables (public base
URL, database, SMTP, pricing knobs, etc.) so routers/services never fetch
os.environ directly.
"""

from dataclasses import dataclass
from functools import lru_cache
import os


@dataclass(frozen=True)
class Settings:
    """Typed view of environment variables."""

    app_env: str
    public_base_url: str
    database_url: str
    log_level: str
    smtp_host: str
    smtp_port: int
    smtp_user: str
    smtp_password: str
    smtp_from: str
    contact_recipient: str
    session_ttl_seconds: int
    cart_ttl_seconds: int
    tax_rate: float
    egp_rate: float
    seed_on_startup: bool
    cors_origins: tuple[str, ...]


@lru_cache
def get_settings() -> Settings:
    """Read the current environment and build a Settings instance."""
    def _int(value: str, default: int = 0) -> int:
        try:
            return int(value)
        except (TypeError, ValueError):
            return default

    def _float(value: str, default: float = 0.0) -> float:
        try:
            return float(value)
        except (TypeError, ValueError):
            return default

    def _bool(value: str | None, default: bool = False) -> bool:
        if value is None:
            return default
        return value.strip().lower() in {"1", "true", "yes", "on"}

    origins = tuple(o.strip().rstrip("/") for o in os.getenv("CORS_ORIGINS", "").split(",") if o.strip())

    return Settings(
        app_env=(os.getenv("APP_ENV") or "dev").lower(),
        public_base_url=os.getenv("PUBLIC_BASE_URL", "http://localhost:5173").rstrip("/"),
        database_url=os.getenv("DATABASE_URL", "sqlite:///storefront.db"),
        log_level=(os.getenv("LOG_LEVEL") or "INFO").upper(),
        smtp_host=os.getenv("SMTP_HOST", ""),
        smtp_port=_int(os.getenv("SMTP_PORT", "465"), 465),
        smtp_user=os.getenv("SMTP_USER", ""),
        smtp_password=os.getenv("SMTP_PASSWORD", ""),
        smtp_from=os.getenv("SMTP_FROM", os.getenv("SMTP_USER", "")),
        contact_recipient=os.getenv("CONTACT_RECIPIENT", ""),
        session_ttl_seconds=_int(os.getenv("SESSION_TTL_SECONDS", "86400"), 86400),
        cart_ttl_seconds=_int(os.getenv("CART_TTL_SECONDS", "2592000"), 2592000),
        tax_rate=_float(os.getenv("TAX_RATE", "0.10"), 0.10),
        egp_rate=_float(os.getenv("EGP_RATE", "31"), 31.0),
        seed_on_startup=_bool(os.getenv("SEED_ON_STARTUP"), True),
        cors_origins=origins,
    )
