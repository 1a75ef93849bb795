"""Tests for the graph and layout HTTP endpoints."""

import logging

import pytest
from fakes import StubProber, StubRouteClient, route
from fastapi.testclient import TestClient

from route_inspector.api.dependencies import inspector_dep
from route_inspector.config import ApiSettings, LayoutSettings, Settings
from route_inspector.main import create_app
from route_inspector.services.inspector import RouteInspector
from route_inspector.services.models import Position

ROUTES = [
    route("R1", "http-/orders", "orders.topic", module="orders"),
    route("R2", "orders.topic", "https://billing.example"),
]


class TestGraphAPI:
    """Endpoints exposed to the flow-chart frontend."""

    @pytest.fixture
    def inspector(self, layout_store, logger):
        return RouteInspector(StubRouteClient(ROUTES), StubProber(status="up"), layout_store, logger)

    @pytest.fixture
    def client(self, inspector, tmp_path):
        settings = Settings(
            api=ApiSettings(refresh_on_startup=False),
            layout=LayoutSettings(storage_dir=tmp_path),
        )
        app = create_app(settings)
        app.dependency_overrides[inspector_dep] = lambda: inspector
        return TestClient(app)

    def test_graph_before_refresh_is_idle_and_empty(self, client):
        response = client.get("/api/graph")
        assert response.status_code == 200
        assert response.json() == {"state": "idle", "generation": 0, "nodes": [], "edges": []}

    def test_refresh_returns_rendered_document(self, client):
        response = client.post("/api/graph/refresh")
        assert response.status_code == 200
        data = response.json()

        assert data["state"] == "rendered"
        assert data["generation"] == 1
        assert [node["id"] for node in data["nodes"]] == ["1", "2", "3"]
        assert [edge["id"] for edge in data["edges"]] == ["1-2", "2-3"]

    def test_node_document_shape(self, client):
        nodes = {node["id"]: node for node in client.post("/api/graph/refresh").json()["nodes"]}

        local = nodes["1"]
        assert local["position"] == {"x": 0, "y": 0}
        assert local["data"] == {
            "label": "http-/orders",
            "rawLabel": "http-/orders",
            "category": "local",
            "healthStatus": "unknown",
        }
        assert local["sourcePosition"] == "right"
        assert local["targetPosition"] == "left"
        assert local["style"]["backgroundColor"] == "#1fb668ff"
        assert local["style"]["border"] == "1px solid #999"

        external = nodes["3"]
        assert external["data"]["label"] == "https://billing.example\n✅ UP"
        assert external["data"]["healthStatus"] == "up"
        assert external["style"]["border"] == "2px solid #38a169"
        assert external["style"]["whiteSpace"] == "pre-wrap"
        assert external["style"]["fontSize"] == 8

    def test_edge_document_shape(self, client):
        edge = client.post("/api/graph/refresh").json()["edges"][0]
        assert edge["label"] == "R1"
        assert edge["source"] == "1" and edge["target"] == "2"
        assert edge["type"] == "smoothstep"
        assert edge["markerEnd"] == {"type": "arrowclosed"}
        assert edge["data"] == {"module": "orders"}

    def test_drag_persists_full_snapshot(self, client, layout_store):
        client.post("/api/graph/refresh")

        response = client.put("/api/layout", json={"positions": {"2": {"x": 40, "y": 50}}})

        assert response.status_code == 200
        assert response.json()["positions"] == {
            "1": {"x": 0, "y": 0},
            "2": {"x": 40, "y": 50},
            "3": {"x": 600, "y": 0},
        }
        assert layout_store.load()["2"] == Position(40, 50)
        assert client.get("/api/layout").json()["positions"]["2"] == {"x": 40, "y": 50}
        assert client.get("/api/graph").json()["nodes"][1]["position"] == {"x": 40, "y": 50}

    def test_invalid_drag_payload_is_rejected(self, client):
        response = client.put("/api/layout", json={"positions": {"1": {"x": "left"}}})
        assert response.status_code == 422

    def test_drag_before_first_refresh_keeps_saved_layout(self, client, layout_store):
        layout_store.save({"1": Position(11, 22), "2": Position(33, 44)})

        response = client.put("/api/layout", json={"positions": {"1": {"x": 5, "y": 5}}})

        assert response.status_code == 200
        assert response.json()["positions"] == {"1": {"x": 11, "y": 22}, "2": {"x": 33, "y": 44}}
        assert layout_store.load() == {"1": Position(11, 22), "2": Position(33, 44)}

    def test_reset_clears_layout_and_rebuilds(self, client, layout_store):
        client.post("/api/graph/refresh")
        client.put("/api/layout", json={"positions": {"1": {"x": 999, "y": 999}}})

        response = client.delete("/api/layout")

        assert response.status_code == 200
        data = response.json()
        assert data["generation"] == 2
        assert data["nodes"][0]["position"] == {"x": 0, "y": 0}
        assert layout_store.load() == {}
        assert client.get("/api/layout").json() == {"positions": {}}


class TestAppFactory:
    def test_cors_and_healthz(self, tmp_path):
        settings = Settings(
            api=ApiSettings(refresh_on_startup=False, allowed_origins=["http://localhost:3000"]),
            layout=LayoutSettings(storage_dir=tmp_path),
        )
        with TestClient(create_app(settings)) as client:
            response = client.get("/healthz", headers={"Origin": "http://localhost:3000"})
            graph = client.get("/api/graph")

        assert response.json() == {"status": "ok"}
        assert response.headers["access-control-allow-origin"] == "http://localhost:3000"
        assert graph.json()["state"] == "idle"

    def test_startup_log_reports_bind_address(self, tmp_path, caplog):
        settings = Settings(
            api=ApiSettings(host="127.0.0.1", port=4300, refresh_on_startup=False),
            layout=LayoutSettings(storage_dir=tmp_path),
        )
        with caplog.at_level(logging.INFO, logger="route_inspector"):
            create_app(settings)

        record = next(r for r in caplog.records if r.getMessage() == "starting route inspector")
        assert (record.host, record.port) == ("127.0.0.1", 4300)
