"""Main API router — combines all endpoint routers."""

from fastapi import APIRouter

from webapp.api.health import router as health_router
from webapp.api.forms import router as forms_router

api_router = APIRouter()

# Health check
api_router.include_router(health_router, tags=["Health"])

# Form validation
api_router.include_router(forms_router, prefix="/forms", tags=["Forms"])
