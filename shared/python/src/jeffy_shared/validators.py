"""Form-level validation shared by the API payload models."""

from __future__ import annotations

import re

_EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


def is_valid_email(email: str | None) -> bool:
    return bool(email) and bool(_EMAIL_RE.match(email.strip()))


def normalize_email(email: str) -> str:
    """Validate and lower-case an email, raising ValueError when malformed."""
    if not is_valid_email(email):
        raise ValueError("Invalid email address")
    return email.strip().lower()
