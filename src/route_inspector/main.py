"""FastAPI application factory for the route inspector backend."""

from __future__ import annotations

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from route_inspector.api import graph
from route_inspector.api.dependencies import lifespan_dependencies, settings
from route_inspector.config import Settings
from route_inspector.utils.logging import get_logger


def create_app(app_settings: Settings | None = None) -> FastAPI:
    """Create and configure the FastAPI application."""

    app_settings = app_settings or settings()
    logger = get_logger()
    logger.info(
        "starting route inspector",
        extra={"host": app_settings.api.host, "port": app_settings.api.port, "upstream": app_settings.upstream.root},
    )

    async def lifespan(app: FastAPI):
        async with lifespan_dependencies(app_settings) as state:
            app.state.route_inspector_state = state
            yield
            del app.state.route_inspector_state

    app = FastAPI(title="Route Inspector", lifespan=lifespan)

    if app_settings.api.enable_cors:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=app_settings.api.allowed_origins,
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    app.include_router(graph.router)

    @app.get("/healthz")
    async def readiness() -> dict[str, str]:  # pragma: no cover - trivial
        return {"status": "ok"}

    return app


app = create_app()

__all__ = ["create_app", "app"]
