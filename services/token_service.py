"""
Access/refresh token issuance and refresh-token lifecycle.

Access tokens are stateless HS256 JWTs checked by signature and expiry only.
Refresh tokens are JWTs too, but the `tokens` collection is authoritative:
a refresh token is live only while a matching, unexpired, non-blacklisted
record exists, whatever its signature says.

The access-token lifetime is passed in by the caller (resolved from the
named presets in config), so nothing here inspects the environment.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Literal, Optional

import jwt
from bson import ObjectId

from errors import AuthenticationError, InvalidRefreshTokenError
from repositories.protocol import RefreshTokenStore
from schemas.models.token import TOKEN_TYPE_REFRESH, RefreshTokenDoc
from schemas.models.user import UserDoc
from shared.crypto import hash_token
from shared.generators import generate_token_id
from shared.logging import get_logger

log = get_logger(__name__)

_ALGORITHM = "HS256"


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class TokenPair:
    """
    An access/refresh token pair with their expiry instants.

    Attributes:
        access_token: Short-lived JWT carrying sub, email and exp.
        access_expires_at: When the access token stops being accepted.
        refresh_token: Long-lived JWT whose liveness is tracked in the store.
        refresh_expires_at: When the refresh record lapses.
        token_type: Always "bearer".
    """

    access_token: str
    access_expires_at: datetime
    refresh_token: str
    refresh_expires_at: datetime
    token_type: Literal["bearer"] = "bearer"


class TokenService:
    def __init__(
        self,
        store: RefreshTokenStore,
        *,
        access_secret: str,
        refresh_secret: str,
        access_ttl_seconds: int,
        refresh_ttl_days: int = 30,
        issuer: str = "identity-service",
        audience: str = "identity-service.api",
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        if not access_secret:
            raise RuntimeError("JWT_SECRET must be set")
        self._store = store
        self._access_secret = access_secret
        self._refresh_secret = refresh_secret or access_secret
        self._access_ttl = timedelta(seconds=access_ttl_seconds)
        self._refresh_ttl = timedelta(days=refresh_ttl_days)
        self._issuer = issuer
        self._audience = audience
        self._clock = clock

    # ── Encoding ─────────────────────────────────────────────────────────────

    def _encode(self, claims: dict[str, Any], secret: str) -> str:
        return jwt.encode(
            {**claims, "iss": self._issuer, "aud": self._audience},
            secret,
            algorithm=_ALGORITHM,
        )

    def _decode(self, token: str, secret: str, expected_type: str) -> dict[str, Any]:
        claims = jwt.decode(
            token,
            secret,
            algorithms=[_ALGORITHM],
            audience=self._audience,
            issuer=self._issuer,
            options={"require": ["exp", "sub"]},
        )
        if claims.get("type") != expected_type:
            raise jwt.InvalidTokenError(f"Not an {expected_type} token")
        return claims

    def create_access_token(self, user: UserDoc) -> tuple[str, datetime]:
        now = self._clock()
        expires_at = now + self._access_ttl
        token = self._encode(
            {
                "sub": str(user.id),
                "email": user.email,
                "type": "access",
                "iat": int(now.timestamp()),
                "exp": int(expires_at.timestamp()),
            },
            self._access_secret,
        )
        return token, expires_at

    def create_refresh_token(self, user: UserDoc) -> tuple[str, datetime]:
        now = self._clock()
        expires_at = now + self._refresh_ttl
        token = self._encode(
            {
                "sub": str(user.id),
                "type": TOKEN_TYPE_REFRESH,
                # Keeps two pairs minted in the same second distinct
                "jti": generate_token_id(),
                "iat": int(now.timestamp()),
                "exp": int(expires_at.timestamp()),
            },
            self._refresh_secret,
        )
        return token, expires_at

    def decode_access(self, token: str) -> dict[str, Any]:
        """Verify an access token and return its claims.

        Raises:
            AuthenticationError: bad signature, expired, wrong issuer/audience
                or not an access token.
        """
        try:
            return self._decode(token, self._access_secret, "access")
        except jwt.ExpiredSignatureError:
            raise AuthenticationError("Token expired")
        except (jwt.InvalidTokenError, UnicodeEncodeError):
            raise AuthenticationError("Invalid token")

    def decode_refresh(self, token: str) -> Optional[dict[str, Any]]:
        """Return refresh-token claims, or None if the JWT itself is invalid."""
        try:
            return self._decode(token, self._refresh_secret, TOKEN_TYPE_REFRESH)
        except (jwt.InvalidTokenError, UnicodeEncodeError):
            return None

    # ── Lifecycle ────────────────────────────────────────────────────────────

    async def issue_pair(self, user: UserDoc) -> TokenPair:
        """Mint an access/refresh pair, recording the refresh token first."""
        access_token, access_expires_at = self.create_access_token(user)
        refresh_token, refresh_expires_at = self.create_refresh_token(user)

        await self._store.insert(
            RefreshTokenDoc(
                token_hash=hash_token(refresh_token),
                user_id=user.id,
                expires_at=refresh_expires_at,
                blacklisted=False,
                created_at=self._clock(),
            )
        )

        log.info(
            "token_pair_issued",
            user_id=str(user.id),
            access_expires_at=access_expires_at.isoformat(),
            refresh_expires_at=refresh_expires_at.isoformat(),
        )
        return TokenPair(
            access_token=access_token,
            access_expires_at=access_expires_at,
            refresh_token=refresh_token,
            refresh_expires_at=refresh_expires_at,
        )

    async def consume(self, refresh_token: str) -> ObjectId:
        """Blacklist a live refresh token and return its owner's id.

        The record must exist, be unexpired and not blacklisted, and the JWT
        must verify. The blacklist write is conditional, so of two concurrent
        refreshes with the same token only one gets through.

        Raises:
            InvalidRefreshTokenError: for every rejection reason alike.
        """
        record = await self._store.find_active(hash_token(refresh_token), self._clock())
        if record is None:
            log.warning("refresh_rejected", reason="no_live_record")
            raise InvalidRefreshTokenError()

        if self.decode_refresh(refresh_token) is None:
            log.warning("refresh_rejected", reason="bad_signature", record_id=str(record.id))
            raise InvalidRefreshTokenError()

        if not await self._store.blacklist(record.id):
            log.warning("refresh_rejected", reason="already_consumed", record_id=str(record.id))
            raise InvalidRefreshTokenError()

        return record.user_id

    async def revoke(self, refresh_token: str) -> None:
        """Blacklist a refresh token that has not been blacklisted yet.

        Raises:
            InvalidRefreshTokenError: (status 400) unknown or already
                blacklisted token. Repeat logout is an error, not a no-op.
        """
        record = await self._store.find_unblacklisted(hash_token(refresh_token))
        if record is None or not await self._store.blacklist(record.id):
            log.warning("logout_rejected", reason="unknown_or_blacklisted")
            raise InvalidRefreshTokenError(status_code=400)
        log.info("refresh_token_blacklisted", record_id=str(record.id), user_id=str(record.user_id))

    async def revoke_all(self, user_id: ObjectId) -> int:
        count = await self._store.blacklist_all_for_user(user_id)
        log.info("refresh_tokens_blacklisted", user_id=str(user_id), count=count)
        return count
