"""
One-time code lifecycle: issue, mail, consume.

Codes are stored as SHA-256 digests. Issuing a code for an (email, purpose)
first deletes every earlier code for that pair, so only the newest one can
ever be consumed.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Callable, Optional

from bson import ObjectId

from errors import InvalidOrExpiredCodeError
from infrastructure.email.protocol import EmailProvider, EmailReceipt
from infrastructure.email.templates import EmailTemplates
from repositories.protocol import OneTimeCodeStore
from schemas.models.token import OneTimeCodeDoc
from services.token_service import utc_now
from shared.crypto import digests_match, hash_token
from shared.generators import generate_otp_code
from shared.logging import get_logger

log = get_logger(__name__)


@dataclass(frozen=True)
class IssuedCode:
    code_id: Optional[ObjectId]
    expires_at: datetime
    receipt: EmailReceipt


class OneTimeCodeService:
    def __init__(
        self,
        store: OneTimeCodeStore,
        email_provider: EmailProvider,
        templates: EmailTemplates,
        *,
        expiry_minutes: int = 10,
        length: int = 6,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._store = store
        self._email = email_provider
        self._templates = templates
        self._expiry = timedelta(minutes=expiry_minutes)
        self._expiry_minutes = expiry_minutes
        self._length = length
        self._clock = clock

    def generate(self) -> str:
        return generate_otp_code(self._length)

    async def issue(
        self, email: str, purpose: str, user_name: Optional[str] = None
    ) -> IssuedCode:
        """Replace any outstanding code for (email, purpose) and mail a new one.

        The code is persisted before sending, so a delivery failure leaves a
        valid code behind; a later resend supersedes it.

        Raises:
            EmailDeliveryError: the provider could not deliver the message.
        """
        code = self.generate()
        now = self._clock()

        superseded = await self._store.delete_many(email, purpose)
        record = await self._store.insert(
            OneTimeCodeDoc(
                email=email,
                code_hash=hash_token(code),
                purpose=purpose,
                expires_at=now + self._expiry,
                is_used=False,
                created_at=now,
            )
        )
        log.info(
            "otp_issued",
            email=email,
            purpose=purpose,
            superseded=superseded,
            expires_at=record.expires_at.isoformat(),
        )

        rendered = self._templates.one_time_code(
            purpose, code, self._expiry_minutes, user_name=user_name
        )
        receipt = await self._email.send(
            to_email=email,
            subject=rendered.subject,
            html_body=rendered.html_body,
            text_body=rendered.text_body,
            to_name=user_name,
        )
        return IssuedCode(code_id=record.id, expires_at=record.expires_at, receipt=receipt)

    async def consume(self, email: str, code: str, purpose: str) -> None:
        """Accept *code* once for (email, purpose).

        Wrong, unknown, expired and already-used codes all raise the same
        InvalidOrExpiredCodeError.
        """
        record = await self._store.find_active(email, purpose, self._clock())
        if record is None:
            log.warning("otp_rejected", email=email, purpose=purpose, reason="no_active_code")
            raise InvalidOrExpiredCodeError()

        if not digests_match(code, record.code_hash):
            log.warning("otp_rejected", email=email, purpose=purpose, reason="mismatch")
            raise InvalidOrExpiredCodeError()

        if not await self._store.mark_used(record.id):
            log.warning("otp_rejected", email=email, purpose=purpose, reason="already_used")
            raise InvalidOrExpiredCodeError()

        log.info("otp_consumed", email=email, purpose=purpose)
