"""
Error handling for the mock render service.

Every error leaves the service in the {"ok": false, "error": ...} envelope
the client expects from the real automontage API.
"""

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.base import BaseHTTPMiddleware

logger = logging.getLogger(__name__)


def error_response(status_code: int, message: str) -> JSONResponse:
    """Build an ``ok=false`` JSON error response."""
    return JSONResponse(status_code=status_code, content={"ok": False, "error": message})


class ErrorHandlerMiddleware(BaseHTTPMiddleware):
    """
    Middleware that catches unhandled exceptions and returns consistent error responses.
    """

    async def dispatch(self, request: Request, call_next):
        try:
            return await call_next(request)
        except Exception as e:
            logger.exception(f"[MOCK-RENDER] Unhandled exception: {e}")
            return error_response(500, "Internal server error")


async def _http_exception_handler(request: Request, exc: StarletteHTTPException):
    return error_response(exc.status_code, str(exc.detail))


async def _validation_exception_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    first = errors[0] if errors else {}
    field = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    message = first.get("msg", "Invalid request")
    logger.warning(f"[MOCK-RENDER] Invalid request body: {field} {message}")
    return error_response(422, f"{field}: {message}" if field else message)


def register_error_handlers(app: FastAPI) -> None:
    """Install the middleware and exception handlers on ``app``."""
    app.add_middleware(ErrorHandlerMiddleware)
    app.add_exception_handler(StarletteHTTPException, _http_exception_handler)
    app.add_exception_handler(RequestValidationError, _validation_exception_handler)
