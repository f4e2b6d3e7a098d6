import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from sqlalchemy.exc import OperationalError
from starlette.exceptions import HTTPException as StarletteHTTPException

from ..errors import AppError

logger = logging.getLogger("taskboard.errors")


def _error_response(request: Request, status_code: int, message: str, headers=None, **extra) -> JSONResponse:
    content = {
        "success": False,
        "message": message,
        "status": status_code,
        "path": request.url.path,
    }
    content.update(extra)
    return JSONResponse(status_code=status_code, content=content, headers=headers)


def _describe(errors) -> str:
    """One line per failing field, e.g. 'title: Field required'."""
    parts = []
    for err in errors:
        loc = [str(p) for p in err.get("loc", ()) if p not in ("body", "query", "path")]
        field = ".".join(loc)
        parts.append(f"{field}: {err.get('msg')}" if field else str(err.get("msg")))
    return "; ".join(parts) or "Invalid input"


def register_exception_handlers(app: FastAPI) -> None:
    """Attach consistent JSON error handlers: {success: false, message, status, path}."""

    @app.exception_handler(AppError)
    async def app_error_handler(request: Request, exc: AppError):
        return _error_response(request, exc.status_code, exc.message, headers=exc.headers)

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        return _error_response(
            request,
            exc.status_code,
            exc.detail if isinstance(exc.detail, str) else "HTTPError",
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        errors = exc.errors()
        details = [
            {"loc": list(e.get("loc", ())), "msg": e.get("msg"), "type": e.get("type")}
            for e in errors
        ]
        return _error_response(request, 400, _describe(errors), details=details)

    @app.exception_handler(OperationalError)
    async def store_unavailable_handler(request: Request, exc: OperationalError):
        logger.error("database unavailable path=%s error=%s", request.url.path, exc.__class__.__name__)
        return _error_response(request, 503, "Service temporarily unavailable, please retry")

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        logger.exception("unhandled error path=%s", request.url.path)
        return _error_response(request, 500, "Internal server error")
