"""
DriveDesk Relay — Health Check Route
=====================================

What:  Liveness endpoint for Docker health checks and load balancers.
How:   Reports whether the upstream credentials are configured. It makes no
       outbound calls: probing Gemini or WhatsApp would cost quota on every
       probe, and neither has a free "ping".
"""

import time

from fastapi import APIRouter, Depends

from drivedesk import __version__
from drivedesk.config import Settings
from drivedesk.dependencies import get_app_settings
from drivedesk.schemas.relay import HealthResponse

router = APIRouter(tags=["Health"])

_start_time = time.time()


@router.get("/health", response_model=HealthResponse, summary="Service health check")
async def health_check(settings: Settings = Depends(get_app_settings)) -> HealthResponse:
    status = "healthy" if settings.gemini_configured else "degraded"
    return HealthResponse(
        status=status,
        version=__version__,
        gemini_configured=settings.gemini_configured,
        whatsapp_configured=settings.whatsapp_configured,
        uptime_seconds=round(time.time() - _start_time, 2),
    )
