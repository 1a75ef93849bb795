"""Shared FastAPI dependency providers and application lifespan management."""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import dataclass

import httpx
from fastapi import Depends, Request

from route_inspector.config import Settings, get_settings
from route_inspector.services.health_prober import HealthProber
from route_inspector.services.inspector import RouteInspector
from route_inspector.services.layout_store import FileKeyValueStore, KeyValueStore, LayoutStore
from route_inspector.services.route_client import RouteApiClient
from route_inspector.utils.logging import get_logger


@dataclass(slots=True)
class AppState:
    """Holds singletons that should be reused across requests."""

    route_client: RouteApiClient
    inspector: RouteInspector


def settings() -> Settings:
    """Expose the cached settings instance for dependency injection."""

    return get_settings()


def build_inspector(
    app_settings: Settings,
    store: KeyValueStore | None = None,
    upstream_transport: httpx.AsyncBaseTransport | None = None,
    probe_transport: httpx.AsyncBaseTransport | None = None,
) -> tuple[RouteApiClient, RouteInspector]:
    """Wire the route client, prober and layout store into an inspector.

    The layout store defaults to a file store in the configured profile directory.
    """

    logger = get_logger()
    route_client = RouteApiClient(settings=app_settings.upstream, logger=logger, transport=upstream_transport)
    prober = HealthProber(settings=app_settings.probe, logger=logger, transport=probe_transport)
    layout_store = LayoutStore(
        store or FileKeyValueStore(app_settings.layout.profile_dir),
        logger=logger,
        key=app_settings.layout.key,
    )
    inspector = RouteInspector(
        route_client=route_client,
        prober=prober,
        layout_store=layout_store,
        logger=logger,
    )
    return route_client, inspector


@asynccontextmanager
async def lifespan_dependencies(app_settings: Settings) -> AsyncIterator[AppState]:
    """Construct collaborators once at startup and dispose them during shutdown."""

    route_client, inspector = build_inspector(app_settings)
    if app_settings.api.refresh_on_startup:
        await inspector.start()

    try:
        yield AppState(route_client=route_client, inspector=inspector)
    finally:
        await inspector.stop()
        await route_client.aclose()


def app_state(request: Request) -> AppState:
    """Fetch the :class:`AppState` constructed by the FastAPI lifespan."""

    state = getattr(request.app.state, "route_inspector_state", None)
    assert isinstance(state, AppState), "App state missing; ensure lifespan wiring executed."
    return state


def inspector_dep(state: AppState = Depends(app_state)) -> RouteInspector:
    """Return the inspector singleton."""

    return state.inspector


__all__ = [
    "AppState",
    "settings",
    "build_inspector",
    "lifespan_dependencies",
    "app_state",
    "inspector_dep",
]
