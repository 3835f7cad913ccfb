"""
Exception handlers mapping the error taxonomy onto HTTP responses.
"""
import logging
from urllib.parse import quote

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, RedirectResponse

from api.deps import templates
from core.config import API_V1_PREFIX
from core.exceptions import LMSError, NotAuthenticated, PermissionDenied, StorageError

logger = logging.getLogger(__name__)


def wants_json(request: Request) -> bool:
    """API-style callers get a JSON envelope, browsers get a page."""
    if request.url.path.startswith(API_V1_PREFIX):
        return True
    if request.method not in ("GET", "POST"):
        return True
    accept = request.headers.get("accept", "")
    return "application/json" in accept and "text/html" not in accept


def json_error(exc: LMSError) -> JSONResponse:
    content = {"success": False, "message": exc.message}
    errors = getattr(exc, "errors", None)
    if errors:
        content["errors"] = errors
    return JSONResponse(status_code=exc.status_code, content=content)


def render_error(request: Request, message: str, status_code: int):
    return templates.TemplateResponse(
        request,
        "error.html",
        {"message": message, "user": request.session.get("user")},
        status_code=status_code,
    )


def register_exception_handlers(app: FastAPI) -> None:

    @app.exception_handler(NotAuthenticated)
    @app.exception_handler(PermissionDenied)
    async def auth_error_handler(request: Request, exc: LMSError):
        if wants_json(request):
            return json_error(exc)
        return RedirectResponse(f"/signin?error={quote(exc.message)}", status_code=303)

    @app.exception_handler(StorageError)
    async def storage_error_handler(request: Request, exc: StorageError):
        logger.error(f"Storage error on {request.method} {request.url.path}")
        if wants_json(request):
            return json_error(exc)
        return render_error(request, "Something went wrong. Please try again.", 500)

    @app.exception_handler(LMSError)
    async def lms_error_handler(request: Request, exc: LMSError):
        logger.info(f"{type(exc).__name__} on {request.method} {request.url.path}: {exc.message}")
        if wants_json(request):
            return json_error(exc)
        return render_error(request, exc.message, exc.status_code)
