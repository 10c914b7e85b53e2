"""
FastAPI application entry point.

Application setup with CORS, request ids, error mapping, route registration
and the lifetime of the progress channel client.
"""

import asyncio
import uuid
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from shared.config import Settings, settings as default_settings
from shared.errors import (
    ArtifactNotFoundError,
    BudgetExceededError,
    PipelineError,
    RateLimitError,
    RetryableError,
    ValidationError,
)
from shared.logging import get_logger
from modules.generation.client import GenerationClient
from control_api.orchestrator import PipelineController
from control_api.services.artifacts import ArtifactDownloader
from control_api.services.event_stream import EventStreamClient
from control_api.services.operator_log import OperatorLog
from control_api.services.render_client import RenderClient

logger = get_logger(__name__)


def _error_response(request: Request, status_code: int, error: str, code: str, retryable: bool, headers=None):
    return JSONResponse(
        status_code=status_code,
        content={
            "error": error,
            "code": code,
            "retryable": retryable,
            "request_id": getattr(request.state, "request_id", None)
        },
        headers=headers
    )


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(ValidationError)
    async def validation_error_handler(request: Request, exc: ValidationError):
        return _error_response(request, 400, str(exc), "VALIDATION_ERROR", False)

    @app.exception_handler(BudgetExceededError)
    async def budget_error_handler(request: Request, exc: BudgetExceededError):
        return _error_response(request, 402, str(exc), "BUDGET_EXCEEDED", False)

    @app.exception_handler(ArtifactNotFoundError)
    async def artifact_not_found_handler(request: Request, exc: ArtifactNotFoundError):
        return _error_response(request, 404, str(exc), "ARTIFACT_NOT_FOUND", True)

    @app.exception_handler(RateLimitError)
    async def rate_limit_error_handler(request: Request, exc: RateLimitError):
        return _error_response(
            request, 429, str(exc), "RATE_LIMIT_EXCEEDED", True,
            headers={"Retry-After": str(exc.retry_after or 30)}
        )

    @app.exception_handler(RetryableError)
    async def retryable_error_handler(request: Request, exc: RetryableError):
        return _error_response(request, 503, str(exc), "RETRYABLE_ERROR", True)

    @app.exception_handler(PipelineError)
    async def pipeline_error_handler(request: Request, exc: PipelineError):
        return _error_response(request, 500, str(exc), exc.code or "PIPELINE_ERROR", False)

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        logger.error(
            "Unhandled exception",
            exc_info=exc,
            extra={"request_id": getattr(request.state, "request_id", None)}
        )
        return _error_response(request, 500, "Internal server error", "INTERNAL_ERROR", False)


def create_app(
    config: Optional[Settings] = None,
    generation_client: Optional[GenerationClient] = None,
    render_client: Optional[RenderClient] = None,
    start_event_stream: bool = True
) -> FastAPI:
    """
    Build the operator API.

    Services are created here (or injected for tests) and stored on
    ``app.state``.
    """
    config = config or default_settings
    generation_client = generation_client or GenerationClient.from_settings(config)
    render_client = render_client or RenderClient(config)
    operator_log = OperatorLog()
    controller = PipelineController(generation_client, render_client, operator_log, config)
    downloader = ArtifactDownloader(render_client, config)
    event_stream = EventStreamClient(
        render_client,
        operator_log,
        config,
        downloader=downloader,
        on_completed=controller.handle_completed,
        on_folder=controller.assign_folder
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if start_event_stream:
            event_stream.start()
        cleanup_task = asyncio.create_task(operator_log.manager.cleanup_loop(), name="sse-cleanup")
        logger.info("Control API started", extra={"render_server": config.render_server_url})
        yield
        cleanup_task.cancel()
        await cleanup_task
        await event_stream.stop()
        render_client.send_cancel_beacon()
        await render_client.aclose()
        logger.info("Control API stopped")

    app = FastAPI(
        title="Reelsmith Control API",
        description="Operator surface for the content production pipeline",
        version="1.0.0",
        lifespan=lifespan
    )
    app.state.settings = config
    app.state.generation_client = generation_client
    app.state.render_client = render_client
    app.state.operator_log = operator_log
    app.state.controller = controller
    app.state.downloader = downloader
    app.state.event_stream = event_stream

    app.add_middleware(
        CORSMiddleware,
        allow_origins=[config.frontend_url],
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Content-Type"],
        allow_credentials=True,
        max_age=3600
    )

    @app.middleware("http")
    async def add_request_id(request: Request, call_next):
        request_id = str(uuid.uuid4())
        request.state.request_id = request_id
        logger.info(
            "Request started",
            extra={"request_id": request_id, "method": request.method, "path": request.url.path}
        )
        response = await call_next(request)
        response.headers["X-Request-ID"] = request_id
        return response

    register_exception_handlers(app)

    from control_api.routes import artifacts, consult, health, logs, pipeline

    app.include_router(pipeline.router, prefix="/api/v1", tags=["pipeline"])
    app.include_router(consult.router, prefix="/api/v1", tags=["consult"])
    app.include_router(logs.router, prefix="/api/v1", tags=["logs"])
    app.include_router(artifacts.router, prefix="/api/v1", tags=["artifacts"])
    app.include_router(health.router, prefix="/api/v1", tags=["health"])

    @app.get("/")
    async def root():
        return {"message": "Reelsmith Control API", "version": "1.0.0"}

    return app


def run() -> None:
    """Console entry point: serve the control API with uvicorn."""
    import uvicorn

    uvicorn.run("control_api.main:create_app", factory=True, host="0.0.0.0", port=8000)


if __name__ == "__main__":
    run()
