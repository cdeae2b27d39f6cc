"""Integration tests for the /healthz endpoint."""

from __future__ import annotations

from typing import TYPE_CHECKING
from unittest.mock import AsyncMock, MagicMock

import pytest

from submission_cleanup.infra.triplestore import TriplestoreUnavailableError

if TYPE_CHECKING:
    from fastapi import FastAPI
    from fastapi.testclient import TestClient


class TestHealthz:
    @pytest.mark.integration
    def test_healthy_triplestore(self, client: TestClient) -> None:
        response = client.get("/healthz")

        assert response.status_code == 200
        assert response.json() == {
            "status": "ok",
            "checks": {"triplestore": {"status": "ok"}},
        }

    @pytest.mark.integration
    def test_unreachable_triplestore_is_degraded(self, app: FastAPI, client: TestClient) -> None:
        store = MagicMock()
        store.ping = AsyncMock(side_effect=TriplestoreUnavailableError("Triplestore unreachable"))
        app.state.graph_store = store

        response = client.get("/healthz")

        assert response.status_code == 503
        body = response.json()
        assert body["status"] == "degraded"
        assert body["checks"]["triplestore"]["status"] == "error"

    @pytest.mark.integration
    def test_missing_graph_store_is_degraded(self, app: FastAPI, client: TestClient) -> None:
        app.state.graph_store = None

        response = client.get("/healthz")

        assert response.status_code == 503
        assert response.json()["checks"]["triplestore"]["detail"] == "graph store not configured"

    @pytest.mark.integration
    def test_redis_checked_when_configured(self, app: FastAPI, client: TestClient) -> None:
        redis_client = MagicMock()
        redis_client.ping = AsyncMock(return_value=True)
        factory = MagicMock()
        factory.get_client = AsyncMock(return_value=redis_client)
        app.state.redis_factory = factory

        response = client.get("/healthz")

        assert response.status_code == 200
        assert response.json()["checks"]["redis"] == {"status": "ok"}

    @pytest.mark.integration
    def test_redis_failure_is_degraded(self, app: FastAPI, client: TestClient) -> None:
        factory = MagicMock()
        factory.get_client = AsyncMock(side_effect=ConnectionError("connection refused"))
        app.state.redis_factory = factory

        response = client.get("/healthz")

        assert response.status_code == 503
        assert response.json()["checks"]["redis"] == {
            "status": "error",
            "detail": "connection refused",
        }
