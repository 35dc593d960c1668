"""
utils/validation_utils.py

Purpose: Input validation

- Email format and normalization
- Password rules
- Display name sanitization
"""

import re
from typing import Optional


EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


def normalize_email(email: Optional[str]) -> Optional[str]:
    """
    Lower-cases and trims an email address.

    Args:
        email: Raw email input

    Returns:
        Normalized email, or None for empty input
    """
    if email is None:
        return None
    email = email.strip().lower()
    return email or None


def validate_email(email: Optional[str]) -> bool:
    """
    Validates the general shape of an email address (local@domain.tld).

    Args:
        email: Email string to validate

    Returns:
        True if valid, False otherwise
    """
    if not email:
        return False
    return bool(EMAIL_PATTERN.match(email.strip()))


def validate_password(password: Optional[str], min_length: int = 6) -> Optional[str]:
    """
    Checks a new password against the account rules.

    Returns:
        An error message, or None when the password is acceptable
    """
    if not password:
        return "New password is required"
    if len(password) < min_length:
        return f"Password must be at least {min_length} characters long"
    return None


def sanitize_display_name(name: Optional[str]) -> Optional[str]:
    """
    Collapses whitespace in a display name.
    Returns None when nothing printable is left.
    """
    if name is None:
        return None
    cleaned = " ".join(name.split())
    return cleaned or None
