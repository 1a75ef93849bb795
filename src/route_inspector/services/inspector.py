"""Refresh and reset orchestration for the route topology graph."""

from __future__ import annotations

import asyncio
from collections.abc import Mapping
from typing import Literal

from route_inspector.services.graph_builder import build_graph, restore_positions
from route_inspector.services.health_prober import HealthProber, annotate_health
from route_inspector.services.layout_store import LayoutStore, next_positions
from route_inspector.services.models import Position, RouteGraph
from route_inspector.services.route_client import RouteApiClient
from route_inspector.utils.logging import Logger, log_event

InspectorState = Literal["idle", "loading", "rendered"]


class RouteInspector:
    """Owns the current graph and moves it through ``idle -> loading -> rendered``.

    Phases run strictly in order: route fetch, graph build, layout restore, publish (probe-eligible nodes show as
    pending), health probes, in-place patch. Every refresh takes a new generation number; a cycle that finds a newer
    generation at a phase boundary drops its results instead of overwriting the newer graph.
    """

    def __init__(
        self,
        route_client: RouteApiClient,
        prober: HealthProber,
        layout_store: LayoutStore,
        logger: Logger,
    ) -> None:
        self._route_client = route_client
        self._prober = prober
        self._layout_store = layout_store
        self._logger = logger
        self._state: InspectorState = "idle"
        self._graph = RouteGraph()
        self._generation = 0
        self._graph_generation = 0
        self._task: asyncio.Task[RouteGraph | None] | None = None

    @property
    def state(self) -> InspectorState:
        return self._state

    @property
    def graph(self) -> RouteGraph:
        return self._graph

    @property
    def generation(self) -> int:
        return self._generation

    async def start(self) -> None:
        """Kick off the initial refresh in the background."""

        if self._task is None:
            self._task = asyncio.create_task(self._initial_refresh())

    async def stop(self) -> None:
        if self._task:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:  # pragma: no cover - deterministic cancellation
                pass
            self._task = None

    async def _initial_refresh(self) -> RouteGraph | None:
        try:
            return await self.refresh()
        except Exception as exc:  # pragma: no cover - failures are degraded inside refresh
            self._logger.exception("initial_refresh_crash", extra={"error": str(exc)})
            return None

    async def refresh(self) -> RouteGraph | None:
        """Rebuild the graph from scratch.

        Returns the new graph, or ``None`` when a later refresh superseded this one. An unexpected failure still ends
        in ``rendered``, with whatever was published for this cycle or an empty graph.
        """

        self._generation += 1
        generation = self._generation
        self._state = "loading"

        try:
            return await self._rebuild(generation)
        except Exception as exc:
            self._logger.exception("refresh_crash", extra={"generation": generation, "error": str(exc)})
            if self._superseded(generation, "crash"):
                return None
            if self._graph_generation != generation:
                self._graph = RouteGraph()
                self._graph_generation = generation
            self._state = "rendered"
            return self._graph

    async def _rebuild(self, generation: int) -> RouteGraph | None:
        routes = await self._route_client.fetch_routes()
        if self._superseded(generation, "routes"):
            return None

        graph = build_graph(routes)
        restored = restore_positions(graph, self._layout_store.load())
        self._graph = graph
        self._graph_generation = generation

        statuses = await self._prober.probe_nodes(graph.nodes)
        if self._superseded(generation, "probes"):
            return None

        annotate_health(graph, statuses)
        self._state = "rendered"
        log_event(
            self._logger,
            "refresh_completed",
            generation=generation,
            nodes=len(graph.nodes),
            edges=len(graph.edges),
            restored=restored,
            down=sum(1 for status in statuses.values() if status == "down"),
        )
        return graph

    async def reset_layout(self) -> RouteGraph | None:
        """Forget the saved layout and rebuild on the computed grid."""

        self._layout_store.clear()
        return await self.refresh()

    def move_nodes(self, changes: Mapping[str, Position]) -> dict[str, Position]:
        """Apply dragged positions to the current graph and persist the full snapshot.

        Saved positions of nodes the current graph does not hold (nothing built yet, or a refresh still loading) are
        carried over, so a drag never shrinks the stored layout.
        """

        moved = next_positions(self._graph.nodes, changes)
        for node in self._graph.nodes:
            node.position = Position(moved[node.id].x, moved[node.id].y)
        snapshot = self._layout_store.load()
        snapshot.update(moved)
        self._layout_store.save(snapshot)
        return snapshot

    def saved_layout(self) -> dict[str, Position]:
        return self._layout_store.load()

    def _superseded(self, generation: int, phase: str) -> bool:
        if generation == self._generation:
            return False
        self._logger.info(
            "refresh_superseded",
            extra={"generation": generation, "current": self._generation, "phase": phase},
        )
        return True


__all__ = ["RouteInspector", "InspectorState"]
