"""
Identity input validators. Pure functions with no framework imports.

Normalizers return the canonical stored form; validators return bools and
leave it to the service layer to decide which error to raise.
"""

from __future__ import annotations

import re
from typing import Optional

import validators as _validators

# Regional 10-digit mobile numbers, ASCII digits only (leading digit 6-9)
MOBILE_NUMBER_PATTERN = re.compile(r"^[6-9][0-9]{9}$")

PASSWORD_MIN_LENGTH = 6
NAME_MAX_LENGTH = 50
USERNAME_MAX_LENGTH = 30


def normalize_email(email: str) -> str:
    """Return *email* trimmed and lowercased; the form that is stored and queried."""
    return email.strip().lower()


def normalize_username(username: Optional[str]) -> Optional[str]:
    """Trim and lowercase *username*; empty strings collapse to ``None``."""
    if username is None:
        return None
    username = username.strip().lower()
    return username or None


def validate_email(email: str) -> bool:
    """Return True if *email* (already normalized) is a well-formed address."""
    if not email or not is_utf8_text(email):
        return False
    return bool(_validators.email(email))


def validate_password(password: str) -> bool:
    """Return True if *password* meets the minimum length."""
    return bool(password) and len(password) >= PASSWORD_MIN_LENGTH


def validate_mobile_number(mobile_number: str) -> bool:
    """Return True if *mobile_number* is a 10-digit number starting with 6–9."""
    return bool(MOBILE_NUMBER_PATTERN.match(mobile_number))


def validate_name(name: str) -> bool:
    return len(name) <= NAME_MAX_LENGTH


def validate_username(username: str) -> bool:
    return len(username) <= USERNAME_MAX_LENGTH


def is_utf8_text(value: str) -> bool:
    """False when *value* holds lone surrogates, which BSON cannot store."""
    try:
        value.encode("utf-8")
    except UnicodeEncodeError:
        return False
    return True
