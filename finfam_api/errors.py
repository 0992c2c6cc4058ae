"""
Application errors and the JSON envelope they are rendered in.

Every error response has the shape ``{"status": "error", "message": ...}``,
plus an ``errors`` field map for validation failures.
"""

from typing import Optional

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = structlog.get_logger(__name__)


class AppError(Exception):
    def __init__(self, message: str, status_code: int):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class ValidationError(AppError):
    def __init__(self, message: str, errors: dict[str, str]):
        super().__init__(message, 400)
        self.errors = errors


class AuthenticationError(AppError):
    def __init__(self, message: str = "Not authenticated"):
        super().__init__(message, 401)


class AuthorizationError(AppError):
    def __init__(self, message: str = "Not authorized"):
        super().__init__(message, 403)


class NotFoundError(AppError):
    def __init__(self, resource: str):
        super().__init__(f"{resource} not found", 404)


class RateLimitError(AppError):
    def __init__(self, message: str = "Too many requests, please try again later"):
        super().__init__(message, 429)


def error_body(message: str, errors: Optional[dict[str, str]] = None) -> dict:
    body = {"status": "error", "message": message}
    if errors is not None:
        body["errors"] = errors
    return body


def _field_path(loc) -> str:
    # drop the "body"/"path"/"query" prefix
    parts = [str(p) for p in loc[1:]] if len(loc) > 1 else [str(p) for p in loc]
    return ".".join(parts) or "body"


def _clean_message(msg: str) -> str:
    prefix = "Value error, "
    return msg[len(prefix):] if msg.startswith(prefix) else msg


def validation_errors(exc: RequestValidationError) -> dict[str, str]:
    errors: dict[str, str] = {}
    for err in exc.errors():
        errors.setdefault(_field_path(err.get("loc", ())), _clean_message(err.get("msg", "Invalid value")))
    return errors


async def app_error_handler(request: Request, exc: AppError):
    if exc.status_code >= 500:
        logger.error("app_error", path=request.url.path, message=exc.message)
    errors = exc.errors if isinstance(exc, ValidationError) else None
    return JSONResponse(status_code=exc.status_code, content=error_body(exc.message, errors))


async def request_validation_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(
        status_code=400,
        content=error_body("Validation error", validation_errors(exc)),
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    message = exc.detail if isinstance(exc.detail, str) else "Request failed"
    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(message),
        headers=getattr(exc, "headers", None),
    )


def internal_error_response() -> JSONResponse:
    return JSONResponse(status_code=500, content=error_body("Internal server error"))


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
