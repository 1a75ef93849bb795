"""One-shot liveness probes for external endpoint nodes."""

from __future__ import annotations

import asyncio
from collections.abc import Mapping, Sequence

import httpx

from route_inspector.config import ProbeSettings
from route_inspector.services.models import ProbeResult, RouteGraph, RouteNode
from route_inspector.utils.logging import Logger


class HealthProber:
    """Probes every http(s) node of a graph once and reports ``up`` or ``down``.

    This is a snapshot taken per refresh, not a monitor: there is no polling, retry or rate limiting. Unreachable
    hosts, DNS failures and 4xx/5xx answers all collapse into ``down`` because the graph only shows a binary badge.
    """

    def __init__(
        self,
        settings: ProbeSettings,
        logger: Logger,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._settings = settings
        self._logger = logger
        self._transport = transport

    def _new_client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            timeout=self._settings.timeout_seconds,
            follow_redirects=self._settings.follow_redirects,
            transport=self._transport,
        )

    async def probe(self, url: str) -> ProbeResult:
        """Return the liveness of ``url``; never raises for network or protocol failures."""

        async with self._new_client() as client:
            return await self._probe(client, url)

    async def probe_nodes(self, nodes: Sequence[RouteNode]) -> dict[str, ProbeResult]:
        """Probe all probe-eligible nodes concurrently and map node id to status.

        Ineligible nodes are absent from the result and keep ``unknown``. One probe failing, even with an unexpected
        exception, never cancels or affects its siblings.
        """

        targets = [node for node in nodes if node.is_probe_eligible]
        if not targets:
            return {}

        async with self._new_client() as client:
            results = await asyncio.gather(
                *(self._probe(client, node.raw_label) for node in targets),
                return_exceptions=True,
            )

        statuses: dict[str, ProbeResult] = {}
        for node, result in zip(targets, results):
            if isinstance(result, BaseException):
                if isinstance(result, asyncio.CancelledError):
                    raise result
                self._logger.warning(
                    "health_probe_crashed",
                    extra={"node": node.id, "url": node.raw_label, "error": repr(result)},
                )
                statuses[node.id] = "down"
            else:
                statuses[node.id] = result
        return statuses

    async def _probe(self, client: httpx.AsyncClient, url: str) -> ProbeResult:
        try:
            response = await client.request(self._settings.method, url)
        # Malformed URLs surface as InvalidURL or as a bare ValueError depending on where httpx trips.
        except (httpx.HTTPError, httpx.InvalidURL, ValueError) as exc:
            self._logger.debug("health_probe_failed", extra={"url": url, "error": str(exc) or type(exc).__name__})
            return "down"
        if not response.is_success:
            self._logger.debug("health_probe_failed", extra={"url": url, "status_code": response.status_code})
            return "down"
        return "up"


def annotate_health(graph: RouteGraph, statuses: Mapping[str, ProbeResult]) -> int:
    """Patch probe results into the graph in place and return how many nodes were updated.

    Only ``health_status`` and ``display_label`` change; ids without a probe-eligible node are ignored.
    """

    updated = 0
    for node in graph.nodes:
        status = statuses.get(node.id)
        if status is not None and node.is_probe_eligible:
            node.mark_health(status)
            updated += 1
    return updated


__all__ = ["HealthProber", "annotate_health"]
