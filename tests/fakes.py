"""Fake upstreams and collaborators shared by the tests."""

import asyncio

import httpx

from route_inspector.services.models import Route


def route(name, source, dest, module="core"):
    return Route(name=name, source=source, dest=dest, module=module)


def route_api_transport(details, names=None, failing=()):
    """Fake route API serving ``details`` by name; names in ``failing`` answer 500, unknown names 404."""

    listed = list(details) if names is None else list(names)

    def handler(request: httpx.Request) -> httpx.Response:
        path = request.url.path
        if path == "/routes":
            return httpx.Response(200, json=listed)
        if path.startswith("/routes/"):
            name = path[len("/routes/"):]
            if name in failing:
                return httpx.Response(500, json={"error": "boom"})
            if name not in details:
                return httpx.Response(404)
            return httpx.Response(200, json=details[name])
        return httpx.Response(404)

    return httpx.MockTransport(handler)


def probe_transport(outcomes, seen=None):
    """Fake endpoints keyed by host: an int answers with that status, an exception class is raised."""

    def handler(request: httpx.Request) -> httpx.Response:
        if seen is not None:
            seen.append((request.method, str(request.url)))
        outcome = outcomes.get(request.url.host, 404)
        if isinstance(outcome, type) and issubclass(outcome, Exception):
            raise outcome("simulated failure", request=request)
        return httpx.Response(outcome)

    return httpx.MockTransport(handler)


class StubRouteClient:
    """Returns canned routes, optionally waiting on an event first."""

    def __init__(self, routes, gate: asyncio.Event | None = None):
        self.routes = list(routes)
        self.gate = gate
        self.calls = 0

    async def fetch_routes(self):
        self.calls += 1
        routes = list(self.routes)
        if self.gate is not None:
            await self.gate.wait()
        return routes


class StubProber:
    """Marks every eligible node with a fixed status, optionally waiting on an event first."""

    def __init__(self, status="up", gate: asyncio.Event | None = None):
        self.status = status
        self.gate = gate
        self.probed = []

    async def probe_nodes(self, nodes):
        eligible = [node for node in nodes if node.is_probe_eligible]
        self.probed.extend(node.raw_label for node in eligible)
        if self.gate is not None:
            await self.gate.wait()
        return {node.id: self.status for node in eligible}
