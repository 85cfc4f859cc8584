"""Outbound HTTP for provider APIs (currently the ZeptoMail transport)."""

from __future__ import annotations

from typing import Any, Optional

import httpx


class HttpClient:
    """One pooled httpx.AsyncClient per process.

    Built by the app factory at startup and closed on shutdown. Every
    request carries the service's User-Agent.
    """

    def __init__(self, timeout: float = 10.0, user_agent: str = "identity-service") -> None:
        self._client = httpx.AsyncClient(
            timeout=timeout,
            headers={"User-Agent": user_agent},
        )

    async def post_json(
        self,
        url: str,
        payload: dict[str, Any],
        headers: Optional[dict[str, str]] = None,
    ) -> httpx.Response:
        return await self._client.post(url, json=payload, headers=headers)

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> "HttpClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()
