"""
Health endpoints shared by every service
"""

from datetime import datetime, timezone

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from clinic.core.logger import logger

router = APIRouter()


@router.get("/health")
def health_check(request: Request):
    """Liveness probe"""
    return {
        "status": "healthy",
        "service": request.app.state.settings.service_name,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "version": request.app.state.settings.service_version,
    }


@router.get("/health/ready")
async def readiness_check(request: Request):
    """Readiness probe: database reachable and broker connection open, plus depth of this service's queues"""
    broker = request.app.state.broker
    checks = [
        {"name": "mongodb", "status": "healthy" if await request.app.state.database.ping() else "unhealthy"},
        {"name": "broker", "status": "healthy" if broker.is_healthy() else "unhealthy"},
    ]
    failed = [check["name"] for check in checks if check["status"] != "healthy"]

    body = {
        "status": "ready" if not failed else "not ready",
        "service": request.app.state.settings.service_name,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "checks": checks,
        "queues": [await broker.get_stats(binding.queue) for binding in request.app.state.topology.bindings],
    }
    if failed:
        logger.warning(
            f"Readiness check failed - {len(failed)} checks failed",
            metadata={"failed_checks": failed, "event": "readiness_check_failed"}
        )
        return JSONResponse(status_code=503, content=body)
    return body
