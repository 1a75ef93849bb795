"""Shared fixtures for route inspector tests."""

import logging

import pytest

from route_inspector.config import ProbeSettings, UpstreamSettings
from route_inspector.services.health_prober import HealthProber
from route_inspector.services.layout_store import LayoutStore, MemoryKeyValueStore
from route_inspector.services.route_client import RouteApiClient


@pytest.fixture
def logger():
    return logging.getLogger("route_inspector.tests")


@pytest.fixture
def kv_store():
    return MemoryKeyValueStore()


@pytest.fixture
def layout_store(kv_store, logger):
    return LayoutStore(kv_store, logger=logger)


@pytest.fixture
def make_route_client(logger):
    def _make(transport):
        settings = UpstreamSettings(base_url="http://routes.test")
        return RouteApiClient(settings, logger=logger, transport=transport)

    return _make


@pytest.fixture
def make_prober(logger):
    def _make(transport):
        return HealthProber(ProbeSettings(), logger=logger, transport=transport)

    return _make
