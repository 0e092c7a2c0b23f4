"""Development server exposing an in-memory production store over REST."""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from prodsync.core.logging_config import configure_logging
from prodsync.core.settings import get_settings
from prodsync.server.routes import router
from prodsync.server.store import ProductionStore


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan context manager.
    Handles startup and shutdown events.
    """
    # Startup
    settings = get_settings()
    print(f"Starting {settings.app_name} dev server v{settings.app_version}")

    yield

    # Shutdown
    print("Shutting down dev server; in-memory records are discarded")


def create_app(store: ProductionStore | None = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        store: Store to serve; a fresh empty one when omitted
    """
    settings = get_settings()

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description="In-memory production API for local sync development",
        lifespan=lifespan,
    )
    app.state.store = store or ProductionStore()

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(router)

    @app.get("/health")
    async def health_check() -> dict[str, str]:  # pyright: ignore[reportUnusedFunction]
        """Health check endpoint."""
        return {"status": "healthy"}

    return app


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    configure_logging(settings)
    uvicorn.run(
        create_app(),
        host=settings.host,
        port=settings.port,
        log_level="info" if not settings.debug else "debug",
    )
