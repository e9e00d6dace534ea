"""Core routes: health, metrics."""

from typing import Optional

from fastapi import APIRouter, Request
from fastapi.responses import PlainTextResponse
from pydantic import BaseModel

from matchday.telemetry import get_metrics_text, is_sentry_enabled

router = APIRouter(tags=["core"])


class HealthResponse(BaseModel):
    status: str
    scheduler_running: bool
    sentry_enabled: bool
    last_sync_at: Optional[str] = None


@router.get("/health", response_model=HealthResponse)
async def health_check(request: Request):
    """Health check endpoint."""
    scheduler = getattr(request.app.state, "scheduler", None)
    last_sync_at = scheduler.last_sync_at if scheduler else None
    return HealthResponse(
        status="ok",
        scheduler_running=bool(scheduler and scheduler.running),
        sentry_enabled=is_sentry_enabled(),
        last_sync_at=last_sync_at.isoformat() if last_sync_at else None,
    )


@router.get("/metrics", response_class=PlainTextResponse)
async def metrics():
    """Prometheus scrape endpoint."""
    content, content_type = get_metrics_text()
    return PlainTextResponse(content=content, media_type=content_type)
