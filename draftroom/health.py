"""Health check endpoints for monitoring and readiness checks."""

import time
from typing import Any, Dict

from fastapi import APIRouter, Request, Response
from fastapi.responses import JSONResponse

from draftroom.errors import StoreError

router = APIRouter(tags=["meta"])

# Store service start time
START_TIME = time.time()


@router.get("/health")
async def health_check() -> JSONResponse:
    """
    Basic health check endpoint.

    Returns:
        JSON with status and uptime information
    """
    uptime = int(time.time() - START_TIME)
    return JSONResponse({
        "status": "healthy",
        "uptime_seconds": uptime,
        "service": "draftroom-api"
    })


@router.get("/readiness")
def readiness_check(request: Request) -> Response:
    """
    Kubernetes-style readiness check.

    Returns:
        200 if the database answers
        503 if it does not
    """
    try:
        request.app.state.storage.ping()
        return Response(status_code=200, content="Ready")
    except StoreError as e:
        return Response(status_code=503, content=f"Not ready: {e}")


@router.get("/liveness")
async def liveness_check() -> Response:
    """
    Kubernetes-style liveness check.

    Returns:
        200 if service is alive
    """
    return Response(status_code=200, content="Alive")


@router.get("/metrics")
async def metrics() -> Dict[str, Any]:
    """Basic uptime metrics."""
    uptime = int(time.time() - START_TIME)
    return {
        "uptime_seconds": uptime,
        "start_time": START_TIME,
    }
