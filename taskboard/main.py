# PURPOSE: assemble the FastAPI app: routers, error handlers, rate limiting,
# request logging, CORS, security headers and health/metrics endpoints.

from fastapi import FastAPI, HTTPException, status, Request
from fastapi.responses import RedirectResponse
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager

from sqlalchemy import text
import logging
import time
import uuid

from . import accounts
from .db import Base, engine
from . import db_models  # noqa: F401 (register tables on Base.metadata)
from .api.errors import register_exception_handlers
from .api.v1.router import api_router
from .config import settings
from .logging_utils import setup_logging
from prometheus_fastapi_instrumentator import Instrumentator
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from .rate_limit import limiter, rate_limit_exceeded_handler


@asynccontextmanager
async def lifespan(app: FastAPI):
    """App startup/shutdown lifecycle."""
    setup_logging(settings.LOG_LEVEL)
    if settings.DB_CREATE_ALL:
        # Local dev convenience; production schema is managed by Alembic (upgrade head)
        Base.metadata.create_all(bind=engine)
    # unknown-email logins must not be the ones paying for the dummy hash
    accounts.warm_up()
    logging.getLogger("taskboard").info("startup database=%s", engine.url.render_as_string(hide_password=True))
    yield


tags_metadata = [
    {"name": "auth", "description": "Authentication: register, login, profile, logout."},
    {"name": "tasks", "description": "Task management: CRUD, filters, search, pagination, stats."},
]

app = FastAPI(
    title="Taskboard API",
    version="1.0.0",
    description=(
        "Versioned JSON API exposed under /api/v1. "
        "Register or log in to obtain a Bearer token and access protected endpoints."
    ),
    openapi_tags=tags_metadata,
    lifespan=lifespan,
)


@app.get("/health")
def health():
    """Simple healthcheck endpoint."""
    return {"status": "ok"}


# Versioned JSON API
app.include_router(api_router)

# Unified error handlers
register_exception_handlers(app)

# Rate limiting (global middleware + handler)
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)
app.add_middleware(SlowAPIMiddleware)


# Request ID + access log middleware
@app.middleware("http")
async def request_id_and_logging(request: Request, call_next):
    start = time.perf_counter()
    incoming = request.headers.get(settings.REQUEST_ID_HEADER)
    req_id = incoming or uuid.uuid4().hex
    request.state.request_id = req_id
    response = await call_next(request)
    response.headers.setdefault(settings.REQUEST_ID_HEADER, req_id)
    duration_ms = int((time.perf_counter() - start) * 1000)
    logging.getLogger("taskboard.request").info(
        "method=%s path=%s status=%s duration_ms=%s request_id=%s",
        request.method,
        request.url.path,
        getattr(response, "status_code", "-"),
        duration_ms,
        req_id,
    )
    return response

# --- Security: CORS and security headers ---

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ALLOW_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization", settings.CSRF_HEADER_NAME, settings.REQUEST_ID_HEADER],
)


@app.middleware("http")
async def security_headers(request, call_next):
    response = await call_next(request)
    # Basic hardening headers
    response.headers.setdefault("X-Content-Type-Options", "nosniff")
    response.headers.setdefault("X-Frame-Options", "DENY")
    response.headers.setdefault("Referrer-Policy", "no-referrer")
    response.headers.setdefault(
        "Permissions-Policy",
        "camera=(), microphone=(), geolocation=()",
    )
    if settings.SECURITY_CSP:
        csp = settings.SECURITY_CSP
        path = request.url.path
        if path.startswith("/docs") or path.startswith("/redoc"):
            # Swagger/ReDoc need inline scripts and styles + CDN assets
            csp = (
                "default-src 'self'; "
                "script-src 'self' https://cdn.jsdelivr.net 'unsafe-inline'; "
                "style-src 'self' https://cdn.jsdelivr.net 'unsafe-inline'; "
                "img-src 'self' https: data:; "
                "font-src 'self' https://cdn.jsdelivr.net data:; "
                "connect-src 'self'; "
                "frame-ancestors 'none'"
            )
        response.headers["Content-Security-Policy"] = csp
    if settings.SECURITY_ENABLE_HSTS:
        # 6 months + preload; adjust as needed in prod
        response.headers.setdefault("Strict-Transport-Security", "max-age=15552000; includeSubDomains; preload")
    return response


# --- Observability: liveness, readiness, metrics ---

@app.get("/live")
def live():
    return {"status": "live"}


@app.get("/ready")
def ready():
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        return {"status": "ready"}
    except Exception as exc:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail="not ready") from exc


# Expose Prometheus metrics at /metrics
Instrumentator().instrument(app).expose(app, include_in_schema=False)


# --- Unversioned paths ------------------------------------------------------

@app.middleware("http")
async def unversioned_api_redirect(request: Request, call_next):
    """Redirect bare /auth/* and /tasks/* to /api/v1 with 308.

    Preserves method and body; keeps query string intact.
    """
    path = request.url.path
    if path.startswith("/auth") or path.startswith("/tasks"):
        successor = "/api/v1" + path
        if request.url.query:
            successor = successor + "?" + request.url.query
        return RedirectResponse(url=successor, status_code=308)
    return await call_next(request)
