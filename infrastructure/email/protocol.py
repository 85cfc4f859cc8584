"""EmailProvider protocol. Services depend on this, never on a concrete provider."""

from dataclasses import dataclass
from typing import Optional, Protocol


class EmailDeliveryError(Exception):
    """Raised by a provider when a message could not be handed off."""


@dataclass(frozen=True)
class EmailReceipt:
    message_id: str
    # Browser link to a rendered copy; only development providers set it
    preview_url: Optional[str] = None


class EmailProvider(Protocol):
    async def send(
        self,
        to_email: str,
        subject: str,
        html_body: str,
        text_body: str,
        to_name: Optional[str] = None,
    ) -> EmailReceipt: ...
