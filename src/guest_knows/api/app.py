"""FastAPI application factory."""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

import guest_knows
from guest_knows.config import GuestKnowsConfig
from guest_knows.infra.memory import InMemoryKeyValueStore
from guest_knows.logging import get_logger
from guest_knows.orchestrator import IngestionOrchestrator

__all__ = ["create_app"]

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Startup: wire the orchestrator unless one was injected. Shutdown: close it."""
    config: GuestKnowsConfig = app.state.config
    owned = app.state.orchestrator is None
    if owned:
        backend = InMemoryKeyValueStore() if config.api.storage_backend == "memory" else None
        app.state.orchestrator = await IngestionOrchestrator.from_config(config, backend=backend)
        logger.info("orchestrator_started", storage_backend=config.api.storage_backend)
    yield
    if owned:
        await app.state.orchestrator.close()
        app.state.orchestrator = None
    logger.info("shutdown_complete")


async def _http_error(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.detail},
        headers=getattr(exc, "headers", None),
    )


def create_app(
    config: GuestKnowsConfig | None = None,
    orchestrator: IngestionOrchestrator | None = None,
) -> FastAPI:
    """Build and return the FastAPI application.

    Args:
        config: Application configuration (loaded from the environment if None)
        orchestrator: Pre-built orchestrator; when given, the lifespan
            neither creates nor closes one

    Returns:
        Configured FastAPI app
    """
    if config is None:
        config = GuestKnowsConfig()

    app = FastAPI(
        title="guest_knows",
        version=guest_knows.__version__,
        lifespan=lifespan,
    )
    app.state.config = config
    app.state.orchestrator = orchestrator
    app.add_exception_handler(StarletteHTTPException, _http_error)

    from guest_knows.api.routers.knowledge import router as knowledge_router
    from guest_knows.api.routers.webhooks import router as webhooks_router

    app.include_router(webhooks_router)
    app.include_router(knowledge_router)

    @app.get("/health")
    async def health() -> dict[str, str]:
        return {"status": "ok", "service": "guest-knows"}

    return app
