"""
Password and secret digests.

Passwords go through argon2id (argon2-cffi). One-time codes and refresh
tokens are only ever stored as SHA-256 hex digests, and compared in
constant time.

Input is encoded with ``surrogatepass`` so any str a JSON body can carry,
lone surrogates included, hashes instead of raising.
"""

from __future__ import annotations

import hashlib
import hmac

from argon2 import PasswordHasher
from argon2.exceptions import InvalidHashError, VerificationError

_hasher = PasswordHasher()


def _utf8(value: str) -> bytes:
    return value.encode("utf-8", "surrogatepass")


def hash_password(password: str) -> str:
    return _hasher.hash(_utf8(password))


def verify_password(password: str, password_hash: str) -> bool:
    """True only for a matching password; malformed hashes count as a mismatch."""
    try:
        return _hasher.verify(password_hash, _utf8(password))
    except (VerificationError, InvalidHashError):
        return False


def password_needs_rehash(password_hash: str) -> bool:
    """True when *password_hash* was made with weaker argon2 parameters."""
    try:
        return _hasher.check_needs_rehash(password_hash)
    except InvalidHashError:
        return True


def hash_token(value: str) -> str:
    """SHA-256 hex digest of *value*, the form codes and tokens are stored in."""
    return hashlib.sha256(_utf8(value)).hexdigest()


def digests_match(value: str, expected_digest: str) -> bool:
    return hmac.compare_digest(hash_token(value), expected_digest)
