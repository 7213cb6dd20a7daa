"""
Event Waitlist Lottery API - Main Application Entry Point

Organizers create events with registration windows and capacity limits,
entrants join waitlists, and organizers run a random draw that selects
winners plus a replacement pool. Winners accept or decline from their
notification inbox; declined spots are refilled from the pool.

- Atomic membership moves between waitlist sets on Redis (MULTI/EXEC)
- Per-event draw lock so two draws cannot double-allocate entrants
- Structured logging with request correlation
- Prometheus metrics at /metrics
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from waitlist.api.middleware import RequestLoggingMiddleware
from waitlist.api.router import api_router
from waitlist.core.config import get_settings
from waitlist.core.exceptions import WaitlistError
from waitlist.core.logging import get_logger, setup_logging
from waitlist.core.metrics import metrics_endpoint
from waitlist.infrastructure.redis_client import close_redis, get_redis

settings = get_settings()
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifecycle: startup and shutdown hooks."""
    setup_logging()

    logger.info(
        "application_starting",
        app=settings.APP_NAME,
        version=settings.APP_VERSION,
        environment=settings.ENVIRONMENT,
    )

    # The store is required; fail startup if it is unreachable
    await get_redis()
    logger.info("redis_ready")

    yield

    await close_redis()
    logger.info("application_shutdown")


app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description="Event waitlists with lottery draws, replacement pools and invitation responses",
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Restrict in production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.add_middleware(RequestLoggingMiddleware)

app.include_router(api_router)


@app.exception_handler(WaitlistError)
async def waitlist_error_handler(request: Request, exc: WaitlistError) -> JSONResponse:
    content = {"detail": exc.message}
    if getattr(exc, "requires_registration", False):
        content["requires_registration"] = True
    return JSONResponse(status_code=exc.status_code, content=content)


@app.get("/health", tags=["Health"])
async def health_check():
    """Health check endpoint for Docker and load balancers."""
    try:
        client = await get_redis()
        await client.ping()
        store = "connected"
    except Exception as e:
        logger.warning("health_store_unreachable", error=str(e))
        store = "unreachable"
    return {
        "status": "healthy" if store == "connected" else "degraded",
        "version": settings.APP_VERSION,
        "environment": settings.ENVIRONMENT,
        "store": store,
    }


@app.get("/metrics", tags=["Health"])
def metrics():
    return metrics_endpoint()


@app.get("/", tags=["Root"])
async def root():
    return {
        "message": f"Welcome to {settings.APP_NAME}",
        "version": settings.APP_VERSION,
        "docs": "/docs",
    }
