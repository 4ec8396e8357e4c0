import logging
import time
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from orderdesk.core.config import CORS_ORIGINS, ENV
from orderdesk.core.logging_setup import configure_logging
from orderdesk.core.startup_checks import validate_cors_settings, validate_pricing_settings
from orderdesk.middleware.observability import ObservabilityMiddleware
from orderdesk.routers.internal_metrics import router as internal_metrics_router
from orderdesk.routers.orders import router as orders_router
from orderdesk.routers.pricing import router as pricing_router

configure_logging()

logger = logging.getLogger(__name__)
STARTED_AT = time.monotonic()


@asynccontextmanager
async def lifespan(_: FastAPI):
    _startup_tasks()
    yield


app = FastAPI(
    title="Bakery Order Desk API",
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(ObservabilityMiddleware)


def _startup_tasks() -> None:
    try:
        validate_pricing_settings()
        validate_cors_settings()
    except Exception:
        logger.exception("[STARTUP] ERROR startup failed env=%s", ENV)
        raise
    logger.info("[STARTUP] ready env=%s", ENV)


# Routers
app.include_router(pricing_router)
app.include_router(orders_router)
app.include_router(internal_metrics_router)


@app.get("/")
def root():
    return {"status": "ok"}


@app.get("/health")
def health():
    return {
        "status": "healthy",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "uptime_seconds": round(time.monotonic() - STARTED_AT, 2),
    }
