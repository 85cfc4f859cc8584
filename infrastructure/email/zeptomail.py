"""EmailProvider for production: ZeptoMail's transactional email API.

One JSON POST per message through the shared HttpClient. A missing API
key, a transport error or a non-2xx answer all surface as
EmailDeliveryError; whether that is fatal is the caller's call.
"""

from __future__ import annotations

from typing import Optional

import httpx

from config import EmailSettings
from infrastructure.email.protocol import EmailDeliveryError, EmailReceipt
from infrastructure.http_client import HttpClient
from shared.logging import get_logger

log = get_logger(__name__)

ZEPTOMAIL_SEND_URL = "https://api.zeptomail.com/v1.1/email"
_AUTH_SCHEME = "Zoho-enczapikey"


class ZeptoMailProvider:
    def __init__(self, settings: EmailSettings, http_client: HttpClient) -> None:
        self._settings = settings
        self._http = http_client

    def _authorization(self) -> str:
        # The console hands out keys both with and without the scheme prefix
        credential = self._settings.zepto_api_token.strip()
        if credential.startswith(f"{_AUTH_SCHEME} "):
            return credential
        return f"{_AUTH_SCHEME} {credential}"

    def _message(
        self, to_email: str, to_name: Optional[str], subject: str, html: str, text: str
    ) -> dict:
        return {
            "from": {
                "address": self._settings.zepto_from_email,
                "name": self._settings.zepto_from_name,
            },
            "to": [{"email_address": {"address": to_email, "name": to_name or to_email}}],
            "subject": subject,
            "htmlbody": html,
            "textbody": text,
        }

    async def send(
        self,
        to_email: str,
        subject: str,
        html_body: str,
        text_body: str,
        to_name: Optional[str] = None,
    ) -> EmailReceipt:
        if not self._settings.zepto_api_token:
            log.error("zeptomail_not_configured", to_email=to_email)
            raise EmailDeliveryError("Email provider is not configured")

        try:
            response = await self._http.post_json(
                ZEPTOMAIL_SEND_URL,
                self._message(to_email, to_name, subject, html_body, text_body),
                headers={"Authorization": self._authorization(), "Accept": "application/json"},
            )
        except httpx.HTTPError as e:
            log.error(
                "zeptomail_unreachable",
                to_email=to_email,
                error=str(e),
                error_type=type(e).__name__,
            )
            raise EmailDeliveryError(f"ZeptoMail unreachable: {e}") from e

        if not 200 <= response.status_code < 300:
            log.error(
                "zeptomail_rejected",
                to_email=to_email,
                status_code=response.status_code,
                body=response.text[:200],
            )
            raise EmailDeliveryError(f"ZeptoMail answered {response.status_code}")

        try:
            request_id = response.json().get("request_id", "")
        except ValueError:
            request_id = ""
        log.info("email_delivered", provider="zeptomail", to_email=to_email, request_id=request_id)
        return EmailReceipt(message_id=request_id)
