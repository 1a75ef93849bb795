"""Runtime configuration models for the route inspector backend."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from pydantic import Field, HttpUrl
from pydantic_settings import BaseSettings, SettingsConfigDict


class UpstreamSettings(BaseSettings):
    """Where the route catalogue lives and how we talk to it."""

    base_url: HttpUrl = Field(
        default="http://localhost:8080",
        description="Base URL of the route API serving `/routes` and `/routes/{name}`.",
    )
    timeout_seconds: float | None = Field(
        default=None,
        gt=0,
        le=300,
        description="Per-request timeout for route list and detail fetches. Unset means wait indefinitely.",
    )

    model_config = SettingsConfigDict(env_prefix="ROUTE_INSPECTOR_UPSTREAM_")

    @property
    def root(self) -> str:
        return str(self.base_url).rstrip("/")


class ProbeSettings(BaseSettings):
    """Reachability checks against external endpoint nodes."""

    method: str = Field(default="HEAD", description="HTTP method used for liveness probes; no body is read.")
    timeout_seconds: float | None = Field(
        default=None,
        gt=0,
        le=300,
        description="Optional probe timeout. Unset keeps a slow endpoint in the pending state until it answers.",
    )
    follow_redirects: bool = Field(default=True, description="Follow redirects before judging the final status.")

    model_config = SettingsConfigDict(env_prefix="ROUTE_INSPECTOR_PROBE_")


class LayoutSettings(BaseSettings):
    """Local persistence of the manual node layout."""

    storage_dir: Path = Field(
        default_factory=lambda: Path.home() / ".route-inspector",
        description="Directory holding one sub-directory per profile.",
    )
    profile: str = Field(default="default", min_length=1, description="Local profile the layout belongs to.")
    key: str = Field(default="ecm-node-positions", min_length=1, description="Record name of the layout snapshot.")

    model_config = SettingsConfigDict(env_prefix="ROUTE_INSPECTOR_LAYOUT_")

    @property
    def profile_dir(self) -> Path:
        return self.storage_dir.expanduser() / self.profile


class ApiSettings(BaseSettings):
    """API-level configuration for the FastAPI application."""

    host: str = Field(default="0.0.0.0", description="Address the server binds to; reported in the startup log.")
    port: int = Field(default=4200, ge=1, le=65535, description="Port exposed for HTTP traffic.")
    enable_cors: bool = Field(
        default=True,
        description="Allow cross-origin requests from the graph frontend during development.",
    )
    allowed_origins: list[str] = Field(
        default_factory=lambda: ["http://localhost:3000"],
        description="Whitelisted origins if CORS is enabled.",
    )
    refresh_on_startup: bool = Field(
        default=True,
        description="Build the graph once in the background when the app starts.",
    )

    model_config = SettingsConfigDict(env_prefix="ROUTE_INSPECTOR_API_")


class Settings(BaseSettings):
    """Top-level settings container that aggregates subsystem configuration."""

    upstream: UpstreamSettings = Field(default_factory=UpstreamSettings)
    probe: ProbeSettings = Field(default_factory=ProbeSettings)
    layout: LayoutSettings = Field(default_factory=LayoutSettings)
    api: ApiSettings = Field(default_factory=ApiSettings)

    model_config = SettingsConfigDict(env_prefix="ROUTE_INSPECTOR_", env_nested_delimiter="__")


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return the cached settings instance. Tests clear the cache to pick up environment overrides."""

    return Settings()


__all__ = [
    "Settings",
    "get_settings",
    "UpstreamSettings",
    "ProbeSettings",
    "LayoutSettings",
    "ApiSettings",
]
