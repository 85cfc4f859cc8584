"""Random values for one-time codes and token ids, all drawn from ``secrets``."""

from __future__ import annotations

import secrets


def generate_otp_code(length: int = 6) -> str:
    """Uniform numeric code with no leading zero.

    For the default length that is any value in [100000, 999999].
    """
    smallest = 10 ** (length - 1)
    return str(smallest + secrets.randbelow(9 * smallest))


def generate_token_id(nbytes: int = 16) -> str:
    """URL-safe random id, used as the ``jti`` claim of refresh tokens."""
    return secrets.token_urlsafe(nbytes)
