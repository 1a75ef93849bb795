"""Graph and layout endpoints consumed by the flow-chart frontend."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from route_inspector.services.inspector import RouteInspector
from route_inspector.services.models import Position

from .dependencies import inspector_dep
from .serializers import serialize_graph, serialize_positions

router = APIRouter(prefix="/api", tags=["graph"])


class PositionPayload(BaseModel):
    x: float
    y: float


class LayoutUpdate(BaseModel):
    """Positions of the nodes a user just dragged, keyed by node id."""

    positions: dict[str, PositionPayload]


def _document(inspector: RouteInspector) -> dict[str, object]:
    return serialize_graph(inspector.graph, inspector.state, inspector.generation)


@router.get("/graph")
async def get_graph(inspector: RouteInspector = Depends(inspector_dep)) -> dict[str, object]:
    """Return the current graph, including while it is still loading."""

    return _document(inspector)


@router.post("/graph/refresh")
async def refresh_graph(inspector: RouteInspector = Depends(inspector_dep)) -> dict[str, object]:
    """Rebuild the graph and return whatever is current once the refresh settles."""

    await inspector.refresh()
    return _document(inspector)


@router.get("/layout")
async def get_layout(inspector: RouteInspector = Depends(inspector_dep)) -> dict[str, object]:
    """Return the persisted layout snapshot."""

    return {"positions": serialize_positions(inspector.saved_layout())}


@router.put("/layout")
async def update_layout(
    payload: LayoutUpdate,
    inspector: RouteInspector = Depends(inspector_dep),
) -> dict[str, object]:
    """Apply dragged node positions and persist the complete snapshot."""

    changes = {node_id: Position(x=pos.x, y=pos.y) for node_id, pos in payload.positions.items()}
    snapshot = inspector.move_nodes(changes)
    return {"positions": serialize_positions(snapshot)}


@router.delete("/layout")
async def reset_layout(inspector: RouteInspector = Depends(inspector_dep)) -> dict[str, object]:
    """Clear saved positions and rebuild the graph on the default grid."""

    await inspector.reset_layout()
    return _document(inspector)


__all__ = ["router", "PositionPayload", "LayoutUpdate"]
