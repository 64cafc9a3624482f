"""Tests for the Prometheus request middleware."""

from __future__ import annotations

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from prometheus_client import CollectorRegistry

from ethwallet.metrics.middleware import PrometheusMiddleware


@pytest.fixture
def app_and_registry() -> tuple[FastAPI, CollectorRegistry]:
    registry = CollectorRegistry()
    app = FastAPI()
    app.add_middleware(PrometheusMiddleware, registry=registry)

    @app.get("/items/{item_id}")
    async def get_item(item_id: int) -> dict[str, int]:
        return {"id": item_id}

    @app.get("/metrics")
    async def metrics() -> dict[str, str]:
        return {}

    return app, registry


class TestPrometheusMiddleware:
    def test_labels_with_route_template(self, app_and_registry: tuple) -> None:
        app, registry = app_and_registry
        client = TestClient(app)
        client.get("/items/1")
        client.get("/items/2")
        labels = {"method": "GET", "route": "/items/{item_id}", "status_code": "200"}
        assert registry.get_sample_value("ethwallet_http_requests_total", labels) == 2.0

    def test_records_duration(self, app_and_registry: tuple) -> None:
        app, registry = app_and_registry
        TestClient(app).get("/items/1")
        labels = {"method": "GET", "route": "/items/{item_id}"}
        count = registry.get_sample_value("ethwallet_http_request_duration_seconds_count", labels)
        assert count == 1.0

    def test_unmatched_paths_share_label(self, app_and_registry: tuple) -> None:
        app, registry = app_and_registry
        client = TestClient(app)
        client.get("/nope")
        client.get("/also-nope")
        labels = {"method": "GET", "route": "unmatched", "status_code": "404"}
        assert registry.get_sample_value("ethwallet_http_requests_total", labels) == 2.0

    def test_metrics_endpoint_not_counted(self, app_and_registry: tuple) -> None:
        app, registry = app_and_registry
        TestClient(app).get("/metrics")
        labels = {"method": "GET", "route": "/metrics", "status_code": "200"}
        assert registry.get_sample_value("ethwallet_http_requests_total", labels) is None
