import importlib
import logging
import uuid

import sentry_sdk
from fastapi import FastAPI, Request, Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest
from sqlalchemy import text

from busbook.config import settings
from busbook.db.session import engine
from busbook.exception_handlers import register_exception_handlers
from busbook.logging_setup import TRACE_ID_CTX, setup_logging
from busbook.redis_client import redis_client

logger = logging.getLogger(__name__)

app = FastAPI(title=settings.APP_NAME)

# initialize logging and Sentry
setup_logging(settings.LOG_LEVEL)
if settings.SENTRY_DSN:
    sentry_sdk.init(dsn=settings.SENTRY_DSN)

register_exception_handlers(app)


@app.middleware("http")
async def add_trace_id(request: Request, call_next):
    trace_id = request.headers.get("x-trace-id") or str(uuid.uuid4())
    TRACE_ID_CTX.set(trace_id)
    response = await call_next(request)
    response.headers["X-Trace-Id"] = trace_id
    return response

# List of module names to include as routers
MODULES = [
    "auth",
    "trips",
    "bookings",
]


for mod in MODULES:
    pkg = importlib.import_module(f"busbook.modules.{mod}.router")
    app.include_router(pkg.router, prefix=f"/api/{mod}")


@app.get("/")
async def root():
    return {"app": settings.APP_NAME, "status": "ok"}


@app.get("/metrics")
async def metrics():
    content = generate_latest()
    return Response(content=content, media_type=CONTENT_TYPE_LATEST)


@app.get("/health")
async def health():
    return {"status": "ok"}


@app.get("/ready")
async def ready():
    try:
        await redis_client.ping()
    except Exception:
        logger.warning("Readiness check failed: redis unavailable")
        return Response(status_code=503, content="redis unavailable")
    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
    except Exception:
        logger.warning("Readiness check failed: database unavailable")
        return Response(status_code=503, content="database unavailable")
    return {"status": "ready"}
