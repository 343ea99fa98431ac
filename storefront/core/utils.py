"""
Utility helpers shared across routers/services.
"""

import re
import unicodedata
from typing import Optional

from .config import get_settings

_EMAIL_PATTERN = re.compile(r"[^@\s]+@[^@\s]+\.[^@\s]+")


def absolute_url(path: str, base: Optional[str] = None) -> str:
    """
    Turn relative paths into absolute URLs using PUBLIC_BASE_URL.
    """
    settings = get_settings()
    base_url = (base or settings.public_base_url).rstrip("/")
    if not path:
        return base_url + "/"
    if path.startswith("http://") or path.startswith("https://"):
        return path
    if not path.startswith("/"):
        path = "/" + path
    return base_url + path


def slugify(value: str | None) -> str:
    """"Power Supplies" -> "power-supplies"."""
    text = unicodedata.normalize("NFKD", value or "").encode("ascii", "ignore").decode("ascii")
    text = re.sub(r"[^a-zA-Z0-9]+", "-", text).strip("-")
    return text.lower()


def is_valid_email(value: str | None) -> bool:
    return bool(_EMAIL_PATTERN.fullmatch((value or "").strip()))


def round_money(value: float) -> float:
    return round(float(value), 2)
