import sys
import time
from typing import Optional

import structlog
import uvicorn
from fastapi import Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from pydantic import ValidationError as SettingsError
from starlette.middleware.sessions import SessionMiddleware

from . import __version__
from .config import Settings, get_settings
from .database import Database
from .errors import internal_error_response, register_error_handlers
from .logging_config import configure_logging
from .ratelimit import RateLimiter
from .routers import build_api_router

logger = structlog.get_logger(__name__)

SLOW_REQUEST_MS = 1000

SECURITY_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "SAMEORIGIN",
    "Referrer-Policy": "no-referrer",
    "X-XSS-Protection": "0",
    "Cross-Origin-Opener-Policy": "same-origin",
    "X-DNS-Prefetch-Control": "off",
}


def global_rate_limit(request: Request):
    request.app.state.limiter(request)


def create_app(settings: Optional[Settings] = None, database: Optional[Database] = None) -> FastAPI:
    settings = settings or get_settings()
    database = database or Database(settings.database_url)
    database.create_all()

    app = FastAPI(title="FinFam API", version=__version__, dependencies=[Depends(global_rate_limit)])
    app.state.settings = settings
    app.state.db = database
    app.state.limiter = RateLimiter(
        settings.rate_limit_max,
        settings.rate_limit_window_seconds,
        name="global",
        enabled=settings.rate_limit_enabled,
    )
    app.state.auth_limiter = RateLimiter(
        settings.auth_rate_limit_max,
        settings.auth_rate_limit_window_seconds,
        name="auth",
        enabled=settings.rate_limit_enabled,
    )

    register_error_handlers(app)

    app.add_middleware(
        SessionMiddleware,
        secret_key=settings.session_secret,
        session_cookie="finfam_session",
        https_only=settings.is_production,
        same_site="lax",
    )

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        start = time.perf_counter()
        context = {
            "method": request.method,
            "path": request.url.path,
            "ip": request.client.host if request.client else None,
            "user_agent": request.headers.get("user-agent", "unknown"),
        }
        try:
            response = await call_next(request)
        except Exception:
            logger.exception("unhandled_error", **context)
            response = internal_error_response()

        duration_ms = round((time.perf_counter() - start) * 1000, 1)
        logger.info("request_completed", status=response.status_code, duration_ms=duration_ms, **context)
        if duration_ms > SLOW_REQUEST_MS:
            logger.warning("slow_request", duration_ms=duration_ms, threshold_ms=SLOW_REQUEST_MS, **context)
        return response

    # outside log_requests so the fallback 500 carries the headers too
    @app.middleware("http")
    async def security_headers(request: Request, call_next):
        response = await call_next(request)
        for header, value in SECURITY_HEADERS.items():
            response.headers.setdefault(header, value)
        if settings.is_production:
            response.headers.setdefault("Strict-Transport-Security", "max-age=15552000; includeSubDomains")
        return response

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(build_api_router(), prefix="/api")

    @app.get("/")
    def root():
        return {"message": "FinFam API is running"}

    @app.get("/health")
    def health():
        return {"status": "ok"}

    return app


def run():
    try:
        settings = get_settings()
    except SettingsError as e:
        missing = [".".join(str(p) for p in err["loc"]).upper() for err in e.errors()]
        structlog.get_logger(__name__).error("invalid_configuration", fields=missing)
        sys.exit(1)

    configure_logging(settings)
    app = create_app(settings)
    logger.info("server_starting", host=settings.host, port=settings.port, env=settings.node_env)
    uvicorn.run(app, host=settings.host, port=settings.port)


if __name__ == "__main__":
    run()
