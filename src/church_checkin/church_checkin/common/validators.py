from __future__ import annotations

import re
from typing import Optional

from ..core.constants import EMAIL_PATTERN
from ..core.exceptions import ValidationError

_EMAIL_RE = re.compile(EMAIL_PATTERN)


def require_non_empty(value: Optional[str], field_name: str) -> str:
    if not value or not value.strip():
        raise ValidationError(f"{field_name} is required")
    return value.strip()


def require_min_length(value: Optional[str], field_name: str, min_len: int) -> str:
    if value is None or len(value.strip()) < min_len:
        raise ValidationError(f"{field_name} must be at least {min_len} characters")
    return value.strip()


def is_valid_email(value: Optional[str]) -> bool:
    return bool(value) and _EMAIL_RE.match(value.strip()) is not None


def require_email(value: Optional[str], field_name: str = "Email") -> str:
    email = require_non_empty(value, field_name)
    if not is_valid_email(email):
        raise ValidationError("Invalid email format")
    return email


def optional_text(value: Optional[str]) -> Optional[str]:
    """Strip ``value``; blank strings become ``None``."""
    if value is None:
        return None
    value = value.strip()
    return value or None
