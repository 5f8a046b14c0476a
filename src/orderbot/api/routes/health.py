from __future__ import annotations

from fastapi import APIRouter, Depends, Response, status

from orderbot.api.container import Container, get_container
from orderbot.infrastructure.cache.redis_client import ping_redis
from orderbot.infrastructure.db.session import ping_database

router = APIRouter()


@router.get("/health/live")
def live() -> dict[str, str]:
    return {"status": "ok"}


@router.get("/health/ready")
def ready(response: Response, container: Container = Depends(get_container)) -> dict[str, object]:
    checks = {"database": ping_database(container.engine)}
    # redis is optional; only checked when configured
    if container.redis_client is not None:
        checks["redis"] = ping_redis(container.redis_client)

    if all(checks.values()):
        return {"status": "ok"}

    response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    return {"status": "unavailable", "checks": checks}
