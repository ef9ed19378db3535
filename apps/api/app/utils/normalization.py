"""Data normalization utilities for consistent data quality."""

import re
from typing import Optional
from uuid import UUID

from email_validator import EmailNotValidError, validate_email


def parse_uuid(value: object) -> Optional[UUID]:
    """
    Parse an id from a query string or body.

    Returns None for anything that is not a UUID, so callers can treat
    malformed ids the same as missing rows.
    """
    if isinstance(value, UUID):
        return value
    if not value:
        return None
    try:
        return UUID(str(value))
    except ValueError:
        return None


def normalize_email(email: Optional[str]) -> Optional[str]:
    """
    Normalize email to lowercase.

    Args:
        email: Raw email input

    Returns:
        Lowercased email or None if empty
    """
    if not email:
        return None
    return email.strip().lower()


def is_valid_email(email: Optional[str]) -> bool:
    """Syntax-only email check (no DNS lookups)."""
    if not email:
        return False
    try:
        validate_email(email, check_deliverability=False)
    except EmailNotValidError:
        return False
    return True


def normalize_name(name: Optional[str]) -> Optional[str]:
    """
    Normalize name by stripping whitespace and collapsing multiple spaces.

    Args:
        name: Raw name input

    Returns:
        Cleaned name or None if empty
    """
    if not name:
        return None
    return " ".join(name.split())


def normalize_identifier(value: Optional[str]) -> Optional[str]:
    """
    Normalize identifier-like strings (MRNs, claim numbers) for storage.

    - Remove surrounding whitespace
    - Collapse internal whitespace
    """
    if not value:
        return None
    collapsed = re.sub(r"\s+", " ", value).strip()
    return collapsed or None


def split_full_name(full_name: Optional[str]) -> tuple[str, str]:
    """Split "First Middle Last" into ("First", "Middle Last")."""
    parts = (normalize_name(full_name) or "").split(" ")
    first = parts[0] if parts else ""
    last = " ".join(parts[1:])
    return first, last
