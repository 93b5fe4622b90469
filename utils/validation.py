"""
Validation utilities for user input (emails, required fields)
"""
import re
from typing import Iterable, Optional

EMAIL_REGEX = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


def is_valid_email(email: str) -> bool:
    if not email or not isinstance(email, str):
        return False
    return bool(EMAIL_REGEX.match(email.strip()))


def is_blank(value) -> bool:
    """None, empty strings and empty containers count as missing."""
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    if isinstance(value, (dict, list, tuple)):
        return len(value) == 0
    return False


def first_missing(payload: Optional[dict], fields: Iterable[str]) -> Optional[str]:
    """Name of the first required field that is absent or blank, else None."""
    data = payload or {}
    for field in fields:
        if is_blank(data.get(field)):
            return field
    return None
