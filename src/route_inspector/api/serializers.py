"""Serialize the route graph into the node/edge document the flow-chart frontend renders."""

from __future__ import annotations

from collections.abc import Mapping

from route_inspector.services.models import Position, RouteEdge, RouteGraph, RouteNode

CATEGORY_COLORS: dict[str, str] = {
    "local": "#1fb668ff",
    "external": "#e5e7eb",
    "middleware": "#dbeafe",
}
HEALTH_BORDERS: dict[str, str] = {
    "up": "2px solid #38a169",
    "down": "2px solid #e53e3e",
}
_DEFAULT_BORDER = "1px solid #999"
_EDGE_COLOR = "#2b6cb0"


def serialize_graph(graph: RouteGraph, state: str, generation: int) -> dict[str, object]:
    return {
        "state": state,
        "generation": generation,
        "nodes": [serialize_node(node) for node in graph.nodes],
        "edges": [serialize_edge(edge) for edge in graph.edges],
    }


def serialize_node(node: RouteNode) -> dict[str, object]:
    return {
        "id": node.id,
        "position": node.position.to_dict(),
        "data": {
            "label": node.display_label,
            "rawLabel": node.raw_label,
            "category": node.category,
            "healthStatus": node.health_status,
        },
        "sourcePosition": "right",
        "targetPosition": "left",
        "style": node_style(node),
    }


def node_style(node: RouteNode) -> dict[str, object]:
    """Style hints derived from category, health and label length."""

    style: dict[str, object] = {
        "border": HEALTH_BORDERS.get(node.health_status, _DEFAULT_BORDER),
        "padding": 10,
        "borderRadius": 8,
        "backgroundColor": CATEGORY_COLORS.get(node.category, "#ffffff"),
        "color": "#1a202c",
        "fontSize": node.font_size,
        "maxWidth": 200,
        "overflowWrap": "break-word",
        "wordBreak": "break-word",
    }
    if node.is_probe_eligible:
        # Health suffix sits on its own line.
        style.update({"whiteSpace": "pre-wrap", "textAlign": "left", "lineHeight": 1.2})
    else:
        style["whiteSpace"] = "normal"
    return style


def serialize_edge(edge: RouteEdge) -> dict[str, object]:
    return {
        "id": edge.id,
        "source": edge.source,
        "target": edge.target,
        "label": edge.label,
        "type": "smoothstep",
        "markerEnd": {"type": "arrowclosed"},
        "style": {"stroke": _EDGE_COLOR},
        "labelStyle": {"fontWeight": "bold", "fontSize": 10},
        "labelBgStyle": {"fill": "#f0f0f0", "color": "#1a202c", "fillOpacity": 0.9},
        "data": {"module": edge.module},
    }


def serialize_positions(positions: Mapping[str, Position]) -> dict[str, dict[str, float]]:
    return {node_id: position.to_dict() for node_id, position in positions.items()}


__all__ = [
    "serialize_graph",
    "serialize_node",
    "serialize_edge",
    "serialize_positions",
    "node_style",
    "CATEGORY_COLORS",
    "HEALTH_BORDERS",
]
