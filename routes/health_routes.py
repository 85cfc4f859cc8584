"""
GET /health

Identity operations all need MongoDB, so the probe is a single ping and
a failed ping makes the service unhealthy (503).
"""

from __future__ import annotations

from fastapi import APIRouter, Request, Response

from schemas.dto.responses.common import HealthResponse
from shared.logging import get_logger

log = get_logger(__name__)

router = APIRouter(tags=["health"])


async def _ping_mongo(request: Request) -> bool:
    try:
        await request.app.state.db.client.admin.command("ping")
    except Exception as e:
        log.warning("health_check_failed", dependency="mongodb", error=str(e))
        return False
    return True


@router.get(
    "/health",
    response_model=HealthResponse,
    responses={503: {"model": HealthResponse}},
)
async def health_check(request: Request, response: Response) -> HealthResponse:
    if await _ping_mongo(request):
        return HealthResponse(status="healthy", checks={"mongodb": "ok"})
    response.status_code = 503
    return HealthResponse(status="unhealthy", checks={"mongodb": "error"})
