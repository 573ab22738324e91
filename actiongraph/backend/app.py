"""FastAPI application factory for the ActionGraph HTTP API."""

import secrets
from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator

from fastapi import Depends, FastAPI, HTTPException, Request, Security
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse
from fastapi.security import APIKeyHeader
from starlette import status

from actiongraph import __version__
from actiongraph.config import Config
from actiongraph.log_config import get_logger
from actiongraph.tracker import ActionTracker, connect_action_tracker

log = get_logger("backend.app")

# API Key header for optional authentication
api_key_header = APIKeyHeader(name="X-API-Key", auto_error=False)


async def verify_api_key(
    request: Request,
    api_key: str | None = Security(api_key_header),
) -> str | None:
    """Verify the API key when one is configured.

    Returns the API key if valid, raises 401 otherwise.
    """
    expected = request.app.state.config.api_key
    if not expected:
        return None

    if not api_key:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing API key",
            headers={"WWW-Authenticate": "ApiKey"},
        )

    # Constant-time comparison
    if not secrets.compare_digest(api_key, expected):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid API key",
            headers={"WWW-Authenticate": "ApiKey"},
        )

    return api_key


def get_tracker(request: Request) -> ActionTracker:
    """Dependency returning the connected tracker, 503 when tracking is off."""
    tracker = request.app.state.tracker
    if tracker is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Action tracker not available",
        )
    return tracker


def require_success(result: dict[str, Any]) -> dict[str, Any]:
    """Return a successful tracker payload or raise 500 with its message."""
    if not result.get("success"):
        raise HTTPException(status_code=500, detail=result.get("message", "Operation failed"))
    return result


def create_app(config: Config | None = None, tracker: ActionTracker | None = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        config: Configuration (read from the environment when None)
        tracker: Pre-built tracker; when given, the app neither connects
            nor closes it

    Returns:
        Configured FastAPI application instance.
    """
    config = config or Config()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        """Connect the tracker on startup and close it on shutdown."""
        owns_tracker = app.state.tracker is None
        if owns_tracker:
            app.state.tracker = await connect_action_tracker(config)
        log.info(
            f"API started: tracking={'enabled' if app.state.tracker else 'disabled'}, "
            f"auth={'required' if config.api_key else 'disabled'}"
        )

        yield

        if owns_tracker and app.state.tracker is not None:
            await app.state.tracker.close()
            app.state.tracker = None

    app = FastAPI(
        title="ActionGraph",
        description="Action tracking and recommendation API",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.config = config
    app.state.tracker = tracker

    app.add_middleware(GZipMiddleware, minimum_size=1000)

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        """Sanitize uncaught exceptions."""
        log.error(f"Internal error: {type(exc).__name__}: {exc}")
        return JSONResponse(
            status_code=500,
            content={"detail": "Internal server error"},
        )

    from actiongraph.backend.api import router as api_router

    app.include_router(api_router, prefix="/api/v1", dependencies=[Depends(verify_api_key)])

    @app.get("/health")
    async def health_check(request: Request) -> dict:
        """Health check endpoint for load balancers."""
        current = request.app.state.tracker
        graph_ok = await current.health_check() if current is not None else False
        return {
            "status": "healthy",
            "service": "actiongraph",
            "tracking": current is not None,
            "graph": graph_ok,
        }

    return app
