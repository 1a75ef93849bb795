"""Client for the upstream route catalogue API."""

from __future__ import annotations

import asyncio
from typing import Any
from urllib.parse import quote

import httpx

from route_inspector.config import UpstreamSettings
from route_inspector.services.models import Route
from route_inspector.utils.diagnostics import DiagnosticError
from route_inspector.utils.logging import Logger

_JSON_HEADERS = {"Accept": "application/json"}


class RouteApiClient:
    """Fetches route names, then every route's detail record concurrently.

    Failures never escape ``fetch_routes``: a broken list call yields no routes, and a broken detail call drops just
    that route.
    """

    def __init__(
        self,
        settings: UpstreamSettings,
        logger: Logger,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._settings = settings
        self._logger = logger
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    async def aclose(self) -> None:
        if self._client:
            await self._client.aclose()
            self._client = None

    async def _client_instance(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self._settings.root,
                headers=_JSON_HEADERS,
                timeout=self._settings.timeout_seconds,
                transport=self._transport,
            )
        return self._client

    async def fetch_routes(self) -> list[Route]:
        """Return every route the upstream API could describe, in route-list order."""

        try:
            names = await self.fetch_route_names()
        except DiagnosticError as diagnostic:
            self._logger.error("route_list_failed", extra=diagnostic.to_extra())
            return []

        results = await asyncio.gather(*(self.fetch_route(name) for name in names), return_exceptions=True)
        available: list[Route] = []
        for name, result in zip(names, results):
            if isinstance(result, asyncio.CancelledError):
                raise result
            if isinstance(result, BaseException):
                self._logger.warning("route_detail_crashed", extra={"route": name, "error": repr(result)})
            elif result is not None:
                available.append(result)
        if len(available) != len(names):
            self._logger.info(
                "routes_skipped",
                extra={"requested": len(names), "available": len(available)},
            )
        return available

    async def fetch_route_names(self) -> list[str]:
        """Return the route names from ``GET /routes``.

        Raises:
            DiagnosticError: when the call fails or the body is not a JSON array.
        """

        client = await self._client_instance()
        try:
            response = await client.get("/routes")
            response.raise_for_status()
        except httpx.HTTPError as exc:
            raise DiagnosticError.from_http_error(
                "RouteListUnavailable", "Route list fetch failed.", exc
            ) from exc

        payload = _json_or_none(response)
        if not isinstance(payload, list):
            raise DiagnosticError(
                "RouteListMalformed",
                "Route list response is not a JSON array.",
                detail=type(payload).__name__,
                url=str(response.request.url),
            )
        names = [entry for entry in payload if isinstance(entry, str)]
        if len(names) != len(payload):
            self._logger.warning("route_list_entries_skipped", extra={"skipped": len(payload) - len(names)})
        return names

    async def fetch_route(self, name: str) -> Route | None:
        """Return one route's detail, or ``None`` when it is unavailable."""

        client = await self._client_instance()
        path = f"/routes/{quote(name, safe='')}"
        try:
            response = await client.get(path)
            response.raise_for_status()
        except httpx.HTTPError as exc:
            diagnostic = DiagnosticError.from_http_error("RouteUnavailable", f"Route {name} not found.", exc)
            self._logger.warning("route_detail_failed", extra={"route": name, **diagnostic.to_extra()})
            return None

        payload = _json_or_none(response)
        if not isinstance(payload, dict):
            self._logger.warning(
                "route_detail_failed",
                extra={"route": name, "code": "RouteMalformed", "detail": type(payload).__name__},
            )
            return None
        return Route.from_payload(payload, fallback_name=name)


def _json_or_none(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError:
        return None


__all__ = ["RouteApiClient"]
