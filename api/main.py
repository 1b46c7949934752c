from __future__ import annotations

import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from comments import repository as comment_repository
from comments import router as comments_router
from comments.validation import ValidationError
from core import config, db, http, rate_limit

logger = logging.getLogger(__name__)

SECURITY_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "SAMEORIGIN",
    "Referrer-Policy": "no-referrer",
    "Cross-Origin-Resource-Policy": "same-origin",
    "X-DNS-Prefetch-Control": "off",
}


@asynccontextmanager
async def lifespan(app: FastAPI):
    # One storage handle per process. uvicorn only tears this down after in-flight
    # requests have drained.
    settings: config.Settings = app.state.settings
    database = db.Database(settings.database_path)
    app.state.db = database
    try:
        await database.open()
        await comment_repository.ensure_schema(database)
        database.mark_ready()
    except db.StorageError:
        # Keep serving; /api/health reports db=false and storage calls return DB_ERROR.
        logger.exception("db_init_failed path=%s", settings.database_path)
    try:
        yield
    finally:
        await database.close()


def _error(status_code: int, error: str, **extra: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"ok": False, "error": error, **extra})


def _install_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(ValidationError)
    async def _validation_error(_: Request, exc: ValidationError) -> JSONResponse:
        return _error(status.HTTP_400_BAD_REQUEST, exc.code, field=exc.field)

    @app.exception_handler(http.MalformedRequestError)
    async def _malformed_body(_: Request, exc: http.MalformedRequestError) -> JSONResponse:
        return _error(status.HTTP_400_BAD_REQUEST, "JSON_INVALID_BODY")

    @app.exception_handler(http.PayloadTooLargeError)
    async def _payload_too_large(_: Request, exc: http.PayloadTooLargeError) -> JSONResponse:
        return _error(413, "PAYLOAD_TOO_LARGE")

    @app.exception_handler(rate_limit.RateLimitExceeded)
    async def _rate_limited(_: Request, exc: rate_limit.RateLimitExceeded) -> JSONResponse:
        response = _error(status.HTTP_429_TOO_MANY_REQUESTS, "RATE_LIMITED")
        response.headers.update(rate_limit.rate_limit_headers(exc.state))
        response.headers["Retry-After"] = response.headers["RateLimit-Reset"]
        return response

    @app.exception_handler(db.StorageError)
    async def _storage_error(request: Request, exc: db.StorageError) -> JSONResponse:
        logger.error("db_error path=%s", request.url.path, exc_info=exc)
        return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, "DB_ERROR")


def create_app(settings: config.Settings | None = None) -> FastAPI:
    settings = settings or config.load_settings()

    app = FastAPI(lifespan=lifespan)
    app.state.settings = settings
    app.state.create_limiter = rate_limit.FixedWindowRateLimiter(
        max_requests=settings.rate_limit_max,
        window_s=settings.rate_limit_window_s,
    )

    # Browsers may call from anywhere in development; production is pattern-restricted.
    if settings.is_production:
        app.add_middleware(
            CORSMiddleware,
            allow_origin_regex=settings.cors_origin_regex,
            allow_methods=["*"],
            allow_headers=["*"],
        )
    else:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=["*"],
            allow_methods=["*"],
            allow_headers=["*"],
        )

    @app.middleware("http")
    async def security_headers(request: Request, call_next):
        # Unhandled errors are answered here so they still get the headers below.
        try:
            response = await call_next(request)
        except Exception:
            logger.exception("unhandled_error path=%s", request.url.path)
            response = _error(status.HTTP_500_INTERNAL_SERVER_ERROR, "INTERNAL_ERROR")
        for name, value in SECURITY_HEADERS.items():
            response.headers.setdefault(name, value)
        return response

    _install_exception_handlers(app)
    app.include_router(comments_router.router, tags=["comments"])
    return app


def run() -> None:
    settings = config.load_settings()
    config.configure_logging(settings.log_level)
    logger.info("starting host=%s port=%s env=%s", settings.host, settings.port, settings.environment)
    # uvicorn runs the lifespan startup before binding and, on SIGINT/SIGTERM, stops
    # accepting connections and drains them before the lifespan shutdown closes storage.
    uvicorn.run(create_app(settings), host=settings.host, port=settings.port)
    logger.info("stopped")


app = create_app()


if __name__ == "__main__":
    run()
