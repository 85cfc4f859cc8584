"""
Identity orchestration: registration, email verification, login, token
refresh and logout, profile read/update and password reset.

IdentityService owns no storage of its own. It is built once by the app
factory with the user store, the one-time code service and the token
service, and every operation is a short sequence of calls into them.
Password hashing happens here, explicitly, before the user is persisted.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Optional

from bson import ObjectId

from errors import (
    AlreadyVerifiedError,
    AuthenticationError,
    ConflictError,
    EmailNotVerifiedError,
    InternalError,
    InvalidCredentialsError,
    InvalidRefreshTokenError,
    NotFoundError,
    ValidationError,
)
from infrastructure.email.protocol import EmailDeliveryError
from repositories.protocol import UserStore
from schemas.models.token import OTP_PURPOSE_PASSWORD_RESET, OTP_PURPOSE_VERIFICATION
from schemas.models.user import UserDoc
from services.otp_service import IssuedCode, OneTimeCodeService
from services.token_service import TokenPair, TokenService
from shared.crypto import hash_password, password_needs_rehash, verify_password
from shared.logging import get_logger
from shared.validators import (
    MOBILE_NUMBER_PATTERN,
    NAME_MAX_LENGTH,
    PASSWORD_MIN_LENGTH,
    USERNAME_MAX_LENGTH,
    normalize_email,
    normalize_username,
    validate_email,
    validate_mobile_number,
    validate_name,
    validate_password,
    validate_username,
)

log = get_logger(__name__)

PROFILE_FIELDS = ("name", "username", "mobile_number")

EMAIL_DISPATCH_FAILED_NOTE = (
    "Account created, but the verification email could not be sent. "
    "Request a new code to verify your email."
)

EMAIL_RETRY_NOTE = "The email could not be sent. Please try again shortly."


@dataclass(frozen=True)
class RegistrationResult:
    user: UserDoc
    email_sent: bool
    email_dispatch_note: Optional[str] = None
    email_preview_url: Optional[str] = None


@dataclass(frozen=True)
class AuthResult:
    user: UserDoc
    tokens: TokenPair


@dataclass(frozen=True)
class DispatchResult:
    dispatched: bool = True
    email_dispatch_note: Optional[str] = None
    email_preview_url: Optional[str] = None


class IdentityService:
    def __init__(
        self,
        users: UserStore,
        codes: OneTimeCodeService,
        tokens: TokenService,
        *,
        expose_email_preview: bool = False,
    ) -> None:
        self._users = users
        self._codes = codes
        self._tokens = tokens
        self._expose_email_preview = expose_email_preview

    # ── Helpers ──────────────────────────────────────────────────────────────

    def _preview_url(self, issued: Optional[IssuedCode]) -> Optional[str]:
        if issued is None or not self._expose_email_preview:
            return None
        return issued.receipt.preview_url

    def _checked_email(self, email: str) -> str:
        email = normalize_email(email or "")
        if not validate_email(email):
            raise ValidationError("A valid email address is required", field="email")
        return email

    @staticmethod
    def _checked_password(password: str) -> str:
        if not validate_password(password):
            raise ValidationError(
                f"Password must be at least {PASSWORD_MIN_LENGTH} characters",
                field="password",
            )
        return password

    @staticmethod
    def _checked_name(name: Optional[str]) -> Optional[str]:
        if name is None:
            return None
        name = name.strip()
        if not validate_name(name):
            raise ValidationError(
                f"Name cannot exceed {NAME_MAX_LENGTH} characters", field="name"
            )
        return name or None

    @staticmethod
    def _checked_username(username: Optional[str]) -> Optional[str]:
        username = normalize_username(username)
        if username is not None and not validate_username(username):
            raise ValidationError(
                f"Username cannot exceed {USERNAME_MAX_LENGTH} characters",
                field="username",
            )
        return username

    @staticmethod
    def _checked_mobile(mobile_number: Optional[str]) -> Optional[str]:
        if mobile_number is None:
            return None
        mobile_number = mobile_number.strip()
        if not mobile_number:
            return None
        if not validate_mobile_number(mobile_number):
            raise ValidationError(
                "Mobile number must be 10 digits starting with 6-9",
                field="mobile_number",
                details={"pattern": MOBILE_NUMBER_PATTERN.pattern},
            )
        return mobile_number

    async def _send_code_quietly(
        self, user: UserDoc, purpose: str
    ) -> Optional[IssuedCode]:
        """Issue a code, logging instead of raising when it cannot be sent."""
        try:
            return await self._codes.issue(user.email, purpose, user_name=user.name)
        except (EmailDeliveryError, InternalError) as e:
            log.error(
                "otp_dispatch_failed",
                email=user.email,
                purpose=purpose,
                error=str(e),
                error_type=type(e).__name__,
            )
            return None

    def _dispatch_result(self, issued: Optional[IssuedCode]) -> DispatchResult:
        if issued is None:
            return DispatchResult(dispatched=False, email_dispatch_note=EMAIL_RETRY_NOTE)
        return DispatchResult(dispatched=True, email_preview_url=self._preview_url(issued))

    # ── Registration & verification ──────────────────────────────────────────

    async def register(
        self,
        email: str,
        password: str,
        name: Optional[str] = None,
        username: Optional[str] = None,
        mobile_number: Optional[str] = None,
    ) -> RegistrationResult:
        """Create an unverified account and mail it a verification code.

        A failed email does not undo the registration; the result says so
        through email_sent / email_dispatch_note instead.

        Raises:
            ValidationError: malformed email, short password, bad profile field.
            ConflictError: email or username already taken.
        """
        email = self._checked_email(email)
        self._checked_password(password)
        name = self._checked_name(name)
        username = self._checked_username(username)
        mobile_number = self._checked_mobile(mobile_number)

        if await self._users.find_by_email(email) is not None:
            log.info("registration_rejected", email=email, reason="email_taken")
            raise ConflictError("Email is already registered", field="email")
        if username is not None and await self._users.find_by_username(username) is not None:
            log.info("registration_rejected", email=email, reason="username_taken")
            raise ConflictError("Username is already taken", field="username")

        user = await self._users.insert(
            UserDoc(
                email=email,
                password_hash=hash_password(password),
                name=name,
                username=username,
                mobile_number=mobile_number,
                is_email_verified=False,
                is_mobile_verified=False,
            )
        )
        log.info("user_registered", user_id=str(user.id), email=email)

        issued = await self._send_code_quietly(user, OTP_PURPOSE_VERIFICATION)
        return RegistrationResult(
            user=user,
            email_sent=issued is not None,
            email_dispatch_note=None if issued is not None else EMAIL_DISPATCH_FAILED_NOTE,
            email_preview_url=self._preview_url(issued),
        )

    async def verify_email(self, email: str, code: str) -> AuthResult:
        """Consume a verification code, mark the email verified, sign the user in."""
        email = normalize_email(email or "")
        await self._codes.consume(email, code or "", OTP_PURPOSE_VERIFICATION)

        user = await self._users.find_by_email(email)
        if user is None:
            raise NotFoundError("User not found")

        user = await self._users.update(user.id, {"is_email_verified": True})
        if user is None:
            raise NotFoundError("User not found")

        log.info("email_verified", user_id=str(user.id), email=email)
        return AuthResult(user=user, tokens=await self._tokens.issue_pair(user))

    async def resend_verification(self, email: str) -> DispatchResult:
        """Mail a fresh verification code, superseding the previous one.

        A send failure does not raise; it comes back as ``dispatched=False``
        with a note, like registration.

        Raises:
            NotFoundError: no account for this email.
            AlreadyVerifiedError: the email is verified already.
        """
        email = normalize_email(email or "")
        user = await self._users.find_by_email(email)
        if user is None:
            raise NotFoundError("User not found")
        if user.is_email_verified:
            raise AlreadyVerifiedError("Email is already verified")

        issued = await self._send_code_quietly(user, OTP_PURPOSE_VERIFICATION)
        log.info("verification_resent", user_id=str(user.id), dispatched=issued is not None)
        return self._dispatch_result(issued)

    # ── Sessions ─────────────────────────────────────────────────────────────

    async def login(self, email: str, password: str) -> AuthResult:
        """Check credentials and issue a token pair.

        Unknown email and wrong password are indistinguishable to the caller.
        Correct credentials on an unverified account trigger a new
        verification code and EmailNotVerifiedError.
        """
        email = normalize_email(email or "")
        user = await self._users.find_by_email(email)
        if user is None or not verify_password(password or "", user.password_hash):
            log.warning(
                "login_failed",
                email=email,
                reason="unknown_email" if user is None else "bad_credentials",
            )
            raise InvalidCredentialsError()

        if not user.is_email_verified:
            await self._send_code_quietly(user, OTP_PURPOSE_VERIFICATION)
            log.info("login_blocked_unverified", user_id=str(user.id), email=email)
            raise EmailNotVerifiedError(
                "Email is not verified. A new verification code has been sent."
            )

        if password_needs_rehash(user.password_hash):
            await self._users.update(user.id, {"password_hash": hash_password(password)})
            log.info("password_rehashed", user_id=str(user.id))

        log.info("login_success", user_id=str(user.id))
        return AuthResult(user=user, tokens=await self._tokens.issue_pair(user))

    async def refresh(self, refresh_token: str) -> TokenPair:
        """Rotate a refresh token: blacklist it and issue a new pair."""
        user_id = await self._tokens.consume(refresh_token or "")
        user = await self._users.find_by_id(user_id)
        if user is None:
            log.warning("refresh_rejected", reason="owner_missing", user_id=str(user_id))
            raise InvalidRefreshTokenError()
        return await self._tokens.issue_pair(user)

    async def logout(self, refresh_token: str) -> None:
        await self._tokens.revoke(refresh_token or "")

    async def authenticate(self, access_token: str) -> UserDoc:
        """Resolve the user behind a Bearer access token.

        Raises:
            AuthenticationError: invalid or expired token, or the user is gone.
        """
        claims = self._tokens.decode_access(access_token)
        sub = claims.get("sub", "")
        if not ObjectId.is_valid(sub):
            raise AuthenticationError("Invalid token")
        user = await self._users.find_by_id(ObjectId(sub))
        if user is None:
            raise AuthenticationError("Invalid token")
        return user

    # ── Profile ──────────────────────────────────────────────────────────────

    async def get_profile(self, user_id: ObjectId) -> UserDoc:
        user = await self._users.find_by_id(user_id)
        if user is None:
            raise NotFoundError("User not found")
        return user

    async def update_profile(
        self, user_id: ObjectId, fields: Mapping[str, Any]
    ) -> UserDoc:
        """Apply name / username / mobile_number from *fields*.

        Any other key in *fields* is ignored. A key present with a None
        value clears that field.

        Raises:
            ValidationError: a field fails its length or pattern check.
            ConflictError: the username belongs to another user.
            NotFoundError: no such user.
        """
        updates: dict[str, Any] = {}
        if "name" in fields:
            updates["name"] = self._checked_name(fields["name"])
        if "mobile_number" in fields:
            updates["mobile_number"] = self._checked_mobile(fields["mobile_number"])
        if "username" in fields:
            username = self._checked_username(fields["username"])
            if username is not None:
                owner = await self._users.find_by_username(username)
                if owner is not None and owner.id != user_id:
                    raise ConflictError("Username is already taken", field="username")
            updates["username"] = username

        if not updates:
            return await self.get_profile(user_id)

        user = await self._users.update(user_id, updates)
        if user is None:
            raise NotFoundError("User not found")
        log.info("profile_updated", user_id=str(user_id), fields=sorted(updates))
        return user

    # ── Password reset ───────────────────────────────────────────────────────

    async def request_password_reset(self, email: str) -> DispatchResult:
        email = normalize_email(email or "")
        user = await self._users.find_by_email(email)
        if user is None:
            raise NotFoundError("User not found")

        issued = await self._send_code_quietly(user, OTP_PURPOSE_PASSWORD_RESET)
        log.info("password_reset_requested", user_id=str(user.id), dispatched=issued is not None)
        return self._dispatch_result(issued)

    async def reset_password(self, email: str, code: str, new_password: str) -> None:
        """Set a new password with a reset code and sign out every session."""
        email = normalize_email(email or "")
        self._checked_password(new_password)
        await self._codes.consume(email, code or "", OTP_PURPOSE_PASSWORD_RESET)

        user = await self._users.find_by_email(email)
        if user is None:
            raise NotFoundError("User not found")

        await self._users.update(user.id, {"password_hash": hash_password(new_password)})
        await self._tokens.revoke_all(user.id)
        log.info("password_reset", user_id=str(user.id))
