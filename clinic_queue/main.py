"""FastAPI app factory: request logging, CORS, error mapping, health, token routes."""
from __future__ import annotations

import time
from collections.abc import Callable
from datetime import UTC, datetime
from uuid import uuid4

from fastapi import FastAPI, Request, Response, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .api import router as tokens_router
from .api.models import HealthResponse
from .config import get_app_version_from_env, get_cors_origins_from_env
from .domain.errors import QueueError, StoreUnavailable, ValidationFailed
from .logging_conf import get_logger, setup_logging
from .service.queue_engine import QueueEngine, get_engine, reset_engine

# Configure logging before anything else.
setup_logging()
logger = get_logger("app")

# Error code -> HTTP status. Unknown codes fall back to 500.
_ERROR_STATUS = {
    "validation_failed": 422,
    "not_found": 404,
    "invalid_transition": 409,
    "number_generation_failed": 503,
    "store_unavailable": 503,
}


def error_body(exc: QueueError) -> dict:
    body = {"success": False, "error_code": exc.code, "error_message": str(exc)}
    if isinstance(exc, ValidationFailed):
        body["fields"] = exc.fields
    return body


def request_validation_fields(exc: RequestValidationError) -> dict[str, str]:
    """Flatten pydantic errors into {field: reason}, keyed by the wire (alias) name."""
    fields: dict[str, str] = {}
    for err in exc.errors():
        loc = err.get("loc") or ("body",)
        fields.setdefault(str(loc[-1]), err.get("msg", "invalid value"))
    return fields


def create_app(engine: QueueEngine | None = None) -> FastAPI:
    """Build the app around `engine` (the process-wide engine when omitted)."""
    if engine is None:
        engine = get_engine()
    else:
        reset_engine(engine)

    app = FastAPI(
        title="Clinic Queue",
        version=get_app_version_from_env(),
    )
    app.state.engine = engine

    app.add_middleware(
        CORSMiddleware,
        allow_origins=get_cors_origins_from_env(),
        allow_methods=["GET", "POST", "PATCH", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization", "X-Request-ID"],
        allow_credentials=True,
    )

    @app.on_event("startup")
    async def _on_startup() -> None:
        logger.info("startup", extra={"event": "startup"})

    @app.on_event("shutdown")
    async def _on_shutdown() -> None:
        logger.info("shutdown", extra={"event": "shutdown"})

    @app.middleware("http")
    async def request_logger(request: Request, call_next: Callable[[Request], Response]):
        """JSON request logging with a correlation id.

        - Reuses the client's X-Request-ID or mints one
        - Logs start and end with method/path/status/elapsed_ms
        - Echoes X-Request-ID on the response
        """
        request_id = request.headers.get("X-Request-ID", str(uuid4()))
        request.state.request_id = request_id

        start = time.perf_counter()
        logger.info(
            "request.start",
            extra={
                "event": "request_start",
                "method": request.method,
                "path": request.url.path,
                "request_id": request_id,
            },
        )
        try:
            response = await call_next(request)
        except Exception:  # log and let FastAPI turn it into a 500
            logger.exception(
                "request.error",
                extra={
                    "event": "request_error",
                    "path": request.url.path,
                    "method": request.method,
                    "request_id": request_id,
                },
            )
            raise
        finally:
            elapsed_ms = (time.perf_counter() - start) * 1000.0

        response.headers["X-Request-ID"] = request_id
        logger.info(
            "request.end",
            extra={
                "event": "request_end",
                "status_code": response.status_code,
                "elapsed_ms": round(elapsed_ms, 2),
                "request_id": request_id,
            },
        )
        return response

    @app.exception_handler(QueueError)
    async def queue_error_handler(request: Request, exc: QueueError) -> JSONResponse:
        status_code = _ERROR_STATUS.get(exc.code, status.HTTP_500_INTERNAL_SERVER_ERROR)
        log = logger.warning if status_code < 500 else logger.error
        log(
            "request.rejected",
            extra={
                "event": "request_rejected",
                "error_code": exc.code,
                "status_code": status_code,
                "path": request.url.path,
                "request_id": getattr(request.state, "request_id", None),
            },
        )
        return JSONResponse(status_code=status_code, content=error_body(exc))

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        return await queue_error_handler(request, ValidationFailed(request_validation_fields(exc)))

    @app.get("/api/health", response_model=HealthResponse, summary="Liveness and store reachability")
    def health() -> HealthResponse:
        try:
            app.state.engine.store.ping()
            store_state = "connected"
        except StoreUnavailable:
            store_state = "disconnected"
        return HealthResponse(
            status="healthy" if store_state == "connected" else "degraded",
            store=store_state,
            version=app.version,
            timestamp=datetime.now(UTC).isoformat(),
        )

    app.include_router(tokens_router)

    return app


# ASGI entrypoint for uvicorn: `uvicorn clinic_queue.main:app --port 5000`
app = create_app()
