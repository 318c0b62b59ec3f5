"""Health check endpoint."""

import time
from fastapi import APIRouter

from webapp import __version__
from webapp.config import get_settings
from webapp.models.responses import HealthResponse

router = APIRouter()

_start_time = time.time()


@router.get("/health", response_model=HealthResponse)
async def health_check():
    """Process health with uptime and test-mode flag."""
    return HealthResponse(
        status="healthy",
        version=__version__,
        uptime_seconds=round(time.time() - _start_time, 2),
        test_mode=get_settings().WEBAPP_IS_TEST,
    )
