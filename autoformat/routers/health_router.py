"""Health endpoints."""

from datetime import UTC, datetime

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from autoformat import __version__
from autoformat.dependencies import get_template_manager
from autoformat.exceptions import TemplateInitError
from autoformat.models import DetailedHealthResponse, HealthResponse
from autoformat.state_managers import TemplateEngineManager

router = APIRouter()


@router.get("/health", response_model=HealthResponse)
async def health_check():
    """Basic health check endpoint.

    Returns simple status for container healthchecks. For the status of
    shared resources, use `/health/ready`.
    """
    return HealthResponse(status="ok", version=__version__)


@router.get("/health/ready", response_model=DetailedHealthResponse)
async def readiness_check(manager: TemplateEngineManager = Depends(get_template_manager)):
    """Readiness probe - can the application serve HTML?

    Builds the template engine if nothing has yet. A failed build is cached
    for the process lifetime, so this keeps answering 503 until restart.

    **Returns:**
    - 200: Template engine is ready
    - 503: Template engine failed to initialize
    """
    try:
        manager.get_engine()
    except TemplateInitError:
        # Outcome is reported through status() below
        pass

    engine_status = manager.status()
    all_healthy = engine_status == "ok"

    return JSONResponse(
        status_code=200 if all_healthy else 503,
        content=DetailedHealthResponse(
            status="healthy" if all_healthy else "unhealthy",
            version=__version__,
            timestamp=datetime.now(UTC),
            checks={"template_engine": engine_status},
        ).model_dump(mode="json"),
    )
