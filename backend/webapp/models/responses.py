"""API response models."""

from pydantic import BaseModel
from typing import Literal


class HealthResponse(BaseModel):
    """System health check response."""

    status: Literal["healthy", "unhealthy", "degraded"]
    version: str
    uptime_seconds: float
    test_mode: bool = False


class FormResponse(BaseModel):
    """Outcome of a form submission, in the shape templates consume."""

    success: bool
    form: dict[str, dict]
