"""Account rules: username format and staff roles."""
from __future__ import annotations

import re

USERNAME_PATTERN = re.compile(r"[a-z0-9_.-]{3,30}")
RESERVED_USERNAMES = {"admin", "root", "api", "support", "system"}
MIN_PASSWORD_LENGTH = 8

ROLE_CUSTOMER = "customer"
ROLE_ADMIN = "admin"
ROLES = {ROLE_CUSTOMER, "editor", "manager", ROLE_ADMIN}
STAFF_ROLES = {ROLE_ADMIN, "manager"}


def normalize_username(value: str | None) -> str:
    return (value or "").strip().lower()


def is_valid_username(value: str | None) -> bool:
    """Return True when username matches the allowed pattern and is not reserved."""
    if not value:
        return False
    return bool(USERNAME_PATTERN.fullmatch(value)) and value not in RESERVED_USERNAMES


def is_staff(role: str | None) -> bool:
    return (role or "") in STAFF_ROLES
