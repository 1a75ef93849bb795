"""Turns route records into a deduplicated node/edge graph."""

from __future__ import annotations

from collections.abc import Iterable, Mapping

from route_inspector.services.classifier import classify
from route_inspector.services.models import Position, Route, RouteEdge, RouteGraph, RouteNode

GRID_COLUMNS = 3
CELL_WIDTH = 300
CELL_HEIGHT = 200
LONG_LABEL_THRESHOLD = 20
_DEFAULT_FONT_SIZE = 10
_LONG_LABEL_FONT_SIZE = 8


class _NodeRegistry:
    """Assigns numeric string ids in order of first appearance."""

    def __init__(self) -> None:
        self._ids: dict[str, str] = {}

    def resolve(self, label: str) -> str:
        node_id = self._ids.get(label)
        if node_id is None:
            node_id = str(len(self._ids) + 1)
            self._ids[label] = node_id
        return node_id

    def items(self) -> Iterable[tuple[str, str]]:
        return self._ids.items()


def build_graph(routes: Iterable[Route]) -> RouteGraph:
    """Build the topology graph for ``routes``.

    Sources are registered before destinations, route by route, so identical inputs always produce identical ids,
    grid positions and edge ids. Every route yields exactly one edge, including duplicates and self-loops.
    """

    registry = _NodeRegistry()
    edges: list[RouteEdge] = []
    edge_ids: dict[str, int] = {}

    for route in routes:
        source_id = registry.resolve(_label(route.source))
        target_id = registry.resolve(_label(route.dest))
        edges.append(
            RouteEdge(
                id=_edge_id(source_id, target_id, edge_ids),
                source=source_id,
                target=target_id,
                label=_label(route.name),
                module=_label(route.module),
            )
        )

    nodes = [
        RouteNode(
            id=node_id,
            raw_label=label,
            category=classify(label),
            position=grid_position(index),
            font_size=font_size_for(label),
        )
        for index, (label, node_id) in enumerate(registry.items())
    ]
    return RouteGraph(nodes=nodes, edges=edges)


def grid_position(index: int) -> Position:
    """Default position before any saved layout is applied."""

    return Position(
        x=CELL_WIDTH * (index % GRID_COLUMNS),
        y=CELL_HEIGHT * (index // GRID_COLUMNS),
    )


def font_size_for(label: str) -> int:
    return _LONG_LABEL_FONT_SIZE if len(label) > LONG_LABEL_THRESHOLD else _DEFAULT_FONT_SIZE


def restore_positions(graph: RouteGraph, saved: Mapping[str, Position]) -> int:
    """Override node positions with a saved layout snapshot and return how many nodes moved."""

    restored = 0
    for node in graph.nodes:
        position = saved.get(node.id)
        if position is not None:
            node.position = Position(position.x, position.y)
            restored += 1
    return restored


def _label(value: object) -> str:
    return "" if value is None else str(value)


def _edge_id(source_id: str, target_id: str, seen: dict[str, int]) -> str:
    # Repeated source/target pairs get a "#n" suffix so the presenter never sees duplicate keys.
    base = f"{source_id}-{target_id}"
    count = seen.get(base, 0) + 1
    seen[base] = count
    return base if count == 1 else f"{base}#{count}"


__all__ = [
    "build_graph",
    "grid_position",
    "font_size_for",
    "restore_positions",
    "GRID_COLUMNS",
    "CELL_WIDTH",
    "CELL_HEIGHT",
    "LONG_LABEL_THRESHOLD",
]
