"""
Development-only email preview.

GET /dev/emails/{message_id} renders a message captured by the outbox
provider. The app factory mounts this router only outside production.
"""

from __future__ import annotations

from fastapi import APIRouter, Request
from fastapi.responses import HTMLResponse

from errors import NotFoundError
from infrastructure.email.outbox import OutboxEmailProvider

router = APIRouter(prefix="/dev", tags=["dev"], include_in_schema=False)


@router.get("/emails/{message_id}", response_class=HTMLResponse)
async def preview_email(message_id: str, request: Request) -> HTMLResponse:
    provider = request.app.state.email_provider
    if not isinstance(provider, OutboxEmailProvider):
        raise NotFoundError("Email previews are not available")

    message = provider.get(message_id)
    if message is None:
        raise NotFoundError("Email not found")
    return HTMLResponse(content=message.html_body)
