"""Shared utilities used across the scheduling core."""

import re

from email_validator import EmailNotValidError, validate_email

_TAG_RE = re.compile(r"<[^>]*>")


def normalize_phone(value: str) -> str:
    """Normalize a phone number by stripping everything except digits and a leading +.

    Examples:
        >>> normalize_phone("0412 345 678")
        '0412345678'
        >>> normalize_phone("+61 (412) 345-678")
        '+61412345678'
    """
    value = value.strip()
    if value.startswith("+"):
        return "+" + re.sub(r"[^\d]", "", value[1:])
    return re.sub(r"[^\d]", "", value)

def sanitize_text(value: str) -> str:
    """Strip markup tags and surrounding whitespace from free-text input.

    Examples:
        >>> sanitize_text("  <b>Quarterly</b> review ")
        'Quarterly review'
    """
    return _TAG_RE.sub("", value).strip()

def normalize_email(value: str) -> str:
    """Lower-case and trim an email address for comparison."""
    return value.strip().lower()

def is_valid_email(value: str) -> bool:
    """Syntax check for an email address; no DNS lookup is made.

    Examples:
        >>> is_valid_email("jane@example.com")
        True
        >>> is_valid_email("a,b@x..com")
        False
    """
    try:
        validate_email(value.strip(), check_deliverability=False)
    except EmailNotValidError:
        return False
    return True
