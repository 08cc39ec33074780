import logging
import time
import uuid
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from starlette.concurrency import run_in_threadpool
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.responses import Response

from tikky import __version__
from tikky.api.responses import error_response
from tikky.api.routes import counter
from tikky.core.config import settings
from tikky.core.logging import configure_logging, request_id_ctx
from tikky.core.metrics import RequestMetrics
from tikky.services.counter_store import CounterStore, connect_store

configure_logging(settings.log_level)

logger = logging.getLogger("app")


def _expected_method(headers: dict[str, str] | None) -> str:
    allow = (headers or {}).get("Allow", "")
    methods = sorted(m.strip() for m in allow.split(",") if m.strip())
    for method in methods:
        if method != "HEAD":
            return method
    return methods[0] if methods else "GET"


def create_app(store: CounterStore | None = None) -> FastAPI:
    """Build the API around ``store``.

    When no store is given the app connects to Redis on startup, refuses to
    start if it is unreachable, and closes the connection on shutdown.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        owned = None
        if getattr(app.state, "store", None) is None:
            owned = await run_in_threadpool(connect_store, settings)
            app.state.store = owned
            logger.info("Successfully connected to Redis")
        try:
            yield
        finally:
            if owned is not None:
                owned.close()
                app.state.store = None

    app = FastAPI(title=settings.service_name, version=__version__, lifespan=lifespan)
    app.state.store = store
    app.state.request_metrics = RequestMetrics()

    @app.middleware("http")
    async def add_request_id(request: Request, call_next):
        request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
        request.state.request_id = request_id
        request_id_ctx.set(request_id)
        start = time.monotonic()
        try:
            response: Response = await call_next(request)
        except Exception:
            logger.exception(
                "Unhandled exception",
                extra={"event": {"method": request.method, "path": request.url.path}},
            )
            response = error_response(500, "Internal server error")
        response.headers["X-Request-ID"] = request_id
        duration_ms = int((time.monotonic() - start) * 1000)
        logging.getLogger("access").info(
            "request",
            extra={
                "event": {
                    "method": request.method,
                    "path": request.url.path,
                    "status_code": response.status_code,
                    "duration_ms": duration_ms,
                }
            },
        )
        app.state.request_metrics.record(response.status_code)
        return response

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        message = exc.detail
        if exc.status_code == 405:
            message = f"Only {_expected_method(exc.headers)} method is allowed"
        return error_response(exc.status_code, message, headers=exc.headers)

    @app.exception_handler(Exception)
    async def generic_exception_handler(request: Request, exc: Exception):
        logger.exception(
            "Unhandled exception",
            extra={
                "event": {
                    "method": request.method,
                    "path": request.url.path,
                    "request_id": getattr(request.state, "request_id", None),
                }
            },
        )
        return error_response(500, "Internal server error")

    app.include_router(counter.router)
    return app


app = create_app()
