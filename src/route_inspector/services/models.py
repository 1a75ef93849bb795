"""Domain models for the route topology graph."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Literal, Mapping

Category = Literal["local", "external", "middleware"]
HealthStatus = Literal["unknown", "up", "down"]
ProbeResult = Literal["up", "down"]

_HEALTH_SUFFIX: dict[str, str] = {
    "up": "✅ UP",
    "down": "❌ DOWN",
    "unknown": "⏳ Checking…",
}


@dataclass(frozen=True, slots=True)
class Route:
    """A named directed link between two endpoint labels, as served by the upstream route API."""

    name: str
    source: str
    dest: str
    module: str = ""

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any], fallback_name: str = "") -> Route:
        """Coerce a route detail JSON object. Missing or null fields become empty strings."""

        def _text(key: str) -> str:
            value = payload.get(key)
            return "" if value is None else str(value)

        return cls(
            name=_text("name") or fallback_name,
            source=_text("source"),
            dest=_text("dest"),
            module=_text("module"),
        )


@dataclass(slots=True)
class Position:
    x: float
    y: float

    def to_dict(self) -> dict[str, float]:
        return {"x": self.x, "y": self.y}

    @classmethod
    def from_payload(cls, payload: Any) -> Position | None:
        """Return a position for ``{"x": number, "y": number}`` payloads, ``None`` for anything else."""

        if not isinstance(payload, Mapping):
            return None
        x, y = payload.get("x"), payload.get("y")
        for value in (x, y):
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                return None
        return cls(x=x, y=y)


@dataclass(slots=True)
class RouteNode:
    """A deduplicated endpoint in the topology graph.

    ``raw_label`` and ``category`` are fixed at build time. Only the health fields and ``position`` change afterwards.
    """

    id: str
    raw_label: str
    category: Category
    position: Position
    font_size: int = 10
    health_status: HealthStatus = "unknown"
    display_label: str = ""

    def __post_init__(self) -> None:
        if not self.display_label:
            self.display_label = self._label_for(self.health_status)

    @property
    def is_probe_eligible(self) -> bool:
        return self.category == "external"

    def mark_health(self, status: HealthStatus) -> None:
        """Record a probe result and refresh the display label."""

        if not self.is_probe_eligible:
            raise ValueError(f"node {self.id} ({self.category}) is not probe-eligible")
        self.health_status = status
        self.display_label = self._label_for(status)

    def _label_for(self, status: HealthStatus) -> str:
        if not self.is_probe_eligible:
            return self.raw_label
        return f"{self.raw_label}\n{_HEALTH_SUFFIX[status]}"


@dataclass(slots=True)
class RouteEdge:
    """Directed connection representing one route record."""

    id: str
    source: str
    target: str
    label: str
    module: str = ""


@dataclass(slots=True)
class RouteGraph:
    nodes: list[RouteNode] = field(default_factory=list)
    edges: list[RouteEdge] = field(default_factory=list)

    def node(self, node_id: str) -> RouteNode | None:
        for candidate in self.nodes:
            if candidate.id == node_id:
                return candidate
        return None

    def positions(self) -> dict[str, Position]:
        """Return a copy of every node's current position keyed by node id."""

        return {node.id: Position(node.position.x, node.position.y) for node in self.nodes}


__all__ = [
    "Category",
    "HealthStatus",
    "ProbeResult",
    "Route",
    "Position",
    "RouteNode",
    "RouteEdge",
    "RouteGraph",
]
