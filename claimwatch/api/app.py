"""FastAPI application for the ClaimWatch service."""

import contextlib
import logging
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from ..config import Settings
from ..domain.exceptions import (
    InvalidRequestError,
    InvalidStatusTransitionError,
    NotFoundError,
    PipelineError,
)
from ..infrastructure.dependencies import ServiceContainer
from .endpoints import analysis, claims, clusters, health, outputs, review

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

VERSION = "0.1.0"


@contextlib.asynccontextmanager
async def lifespan(app: FastAPI):
    """Create providers on startup and release them on shutdown."""
    container: ServiceContainer = app.state.container
    await container.initialize()

    yield  # Application runs here

    await container.shutdown()


def _register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(NotFoundError)
    async def not_found(request: Request, exc: NotFoundError):
        return JSONResponse(status_code=404, content={"error": str(exc)})

    @app.exception_handler(InvalidRequestError)
    async def invalid_request(request: Request, exc: InvalidRequestError):
        content = {"error": str(exc)}
        if exc.field:
            content["field"] = exc.field
        return JSONResponse(status_code=400, content=content)

    @app.exception_handler(InvalidStatusTransitionError)
    async def invalid_transition(request: Request, exc: InvalidStatusTransitionError):
        return JSONResponse(status_code=409, content={"error": str(exc)})

    @app.exception_handler(PipelineError)
    async def pipeline_failed(request: Request, exc: PipelineError):
        # details are in the server log; clients get a generic message
        return JSONResponse(status_code=500, content={"error": "Analysis failed. Please try again later."})

    @app.exception_handler(Exception)
    async def unexpected(request: Request, exc: Exception):
        logger.error(f"❌ Unhandled error on {request.method} {request.url.path}: {exc}", exc_info=exc)
        return JSONResponse(status_code=500, content={"error": "Internal server error"})


def create_app(container: Optional[ServiceContainer] = None) -> FastAPI:
    """Build the application around a service container."""
    container = container or ServiceContainer(Settings.from_env())
    logging.getLogger().setLevel(container.settings.log_level)

    app = FastAPI(
        title="ClaimWatch API",
        description="Claim enrichment, clustering and review API for misinformation fact-checking",
        version=VERSION,
        lifespan=lifespan,
    )
    app.state.container = container

    # Add CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=container.settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    _register_error_handlers(app)

    # Include routers
    app.include_router(health.router)
    app.include_router(claims.router)
    app.include_router(analysis.router)
    app.include_router(clusters.router)
    app.include_router(review.router)
    app.include_router(outputs.router)
    return app


app = create_app()
