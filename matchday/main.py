"""FastAPI application for the Matchday dashboard."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from matchday.config import get_settings
from matchday.dashboard.routes import router as dashboard_router
from matchday.database import AsyncSessionLocal, close_db, init_db
from matchday.errors import MatchdayError
from matchday.etl.api_football import APIFootballClient
from matchday.routes.core import router as core_router
from matchday.routes.favourites import router as favourites_router
from matchday.routes.fixtures import router as fixtures_router
from matchday.routes.sync import router as sync_router
from matchday.scheduler import FixtureSyncScheduler
from matchday.telemetry import capture_exception, init_sentry

settings = get_settings()


def configure_logging(level: str | None = None) -> None:
    logging.basicConfig(
        level=getattr(logging, (level or settings.LOG_LEVEL).upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    # Request lines and job bookkeeping drown out sync summaries
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("apscheduler").setLevel(logging.WARNING)


configure_logging()
logger = logging.getLogger(__name__)

# Only activates if SENTRY_DSN is set in environment
init_sentry()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    # Startup
    logger.info("Starting Matchday dashboard...")
    if not settings.API_FOOTBALL_KEY:
        logger.warning("API_FOOTBALL_KEY is not set; upstream calls will be rejected")

    await init_db()

    app.state.api_client = APIFootballClient(settings)
    app.state.scheduler = FixtureSyncScheduler(AsyncSessionLocal, settings=settings)
    if settings.SCHEDULER_ENABLED:
        app.state.scheduler.start()
    else:
        logger.info("Scheduler disabled (SCHEDULER_ENABLED=false)")

    yield

    # Shutdown
    logger.info("Shutting down...")
    app.state.scheduler.stop()
    await app.state.api_client.close()
    await close_db()


app = FastAPI(
    title="Matchday Dashboard",
    description="Today's football fixtures, live events and lineups from a local cache",
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)


# =============================================================================
# ERROR HANDLERS
# =============================================================================


@app.exception_handler(MatchdayError)
async def matchday_error_handler(request: Request, exc: MatchdayError):
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc}")
    return JSONResponse(status_code=exc.status_code, content={"error": exc.public_message})


@app.exception_handler(RequestValidationError)
async def request_validation_error_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    message = errors[0].get("msg", "Invalid request") if errors else "Invalid request"
    return JSONResponse(status_code=400, content={"error": message})


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.detail},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(SQLAlchemyError)
async def database_error_handler(request: Request, exc: SQLAlchemyError):
    logger.error(f"{request.method} {request.url.path} database error: {exc}")
    capture_exception(exc, path=request.url.path)
    return JSONResponse(status_code=500, content={"error": "Database operation failed"})


# Include routers
app.include_router(core_router)
app.include_router(fixtures_router, prefix=settings.API_PREFIX)
app.include_router(favourites_router, prefix=settings.API_PREFIX)
app.include_router(sync_router, prefix=settings.API_PREFIX)
app.include_router(dashboard_router)
