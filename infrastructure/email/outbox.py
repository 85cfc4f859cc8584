"""In-memory EmailProvider for development.

Nothing leaves the process: each message is kept in a bounded outbox and
the receipt carries a preview link served by routes/dev_routes.py, so the
verification code can be read in a browser during local testing.
"""

from __future__ import annotations

import uuid
from collections import OrderedDict
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional

from infrastructure.email.protocol import EmailReceipt
from shared.logging import get_logger

log = get_logger(__name__)


@dataclass(frozen=True)
class OutboxMessage:
    message_id: str
    to_email: str
    to_name: Optional[str]
    subject: str
    html_body: str
    text_body: str
    sent_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


class OutboxEmailProvider:
    def __init__(self, preview_base_url: str, capacity: int = 100) -> None:
        self._preview_base_url = preview_base_url.rstrip("/")
        self._capacity = capacity
        self._messages: OrderedDict[str, OutboxMessage] = OrderedDict()

    async def send(
        self,
        to_email: str,
        subject: str,
        html_body: str,
        text_body: str,
        to_name: Optional[str] = None,
    ) -> EmailReceipt:
        message = OutboxMessage(
            message_id=uuid.uuid4().hex,
            to_email=to_email,
            to_name=to_name,
            subject=subject,
            html_body=html_body,
            text_body=text_body,
        )
        self._messages[message.message_id] = message
        while len(self._messages) > self._capacity:
            self._messages.popitem(last=False)

        preview_url = f"{self._preview_base_url}/dev/emails/{message.message_id}"
        log.info(
            "email_captured",
            to_email=to_email,
            subject=subject,
            message_id=message.message_id,
            preview_url=preview_url,
        )
        return EmailReceipt(message_id=message.message_id, preview_url=preview_url)

    def get(self, message_id: str) -> Optional[OutboxMessage]:
        return self._messages.get(message_id)

    def latest_for(self, to_email: str) -> Optional[OutboxMessage]:
        for message in reversed(self._messages.values()):
            if message.to_email == to_email:
                return message
        return None

    def __len__(self) -> int:
        return len(self._messages)
