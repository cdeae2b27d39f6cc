"""Unit tests for submission_cleanup.infra.fastapi.error_handlers."""

from __future__ import annotations

from datetime import datetime
from typing import Any
from uuid import UUID

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from seeding import RecordingAlerts

from submission_cleanup.foundation.domain.exceptions import (
    AuthorizationError,
    ConflictError,
    DomainError,
    NotFoundError,
    PartialDeletionError,
    StoreFailureError,
    ValidationError,
)
from submission_cleanup.infra.fastapi.error_handlers import (
    PROBLEM_MEDIA_TYPE,
    UNEXPECTED_FAILURE_MESSAGE,
    ProblemDetail,
    _sanitize_context,
    _sanitize_value,
    register_exception_handlers,
)


def _make_app(alerts: RecordingAlerts | None = None) -> FastAPI:
    """Minimal app raising each domain error from its own route."""
    app = FastAPI()
    register_exception_handlers(app)
    if alerts is not None:
        app.state.error_alerts = alerts

    @app.get("/not-found")
    def not_found() -> None:
        raise NotFoundError("Submission", "s1")

    @app.get("/validation")
    def validation() -> None:
        raise ValidationError("subject", "There was no submission URI in the request")

    @app.get("/conflict")
    def conflict() -> None:
        raise ConflictError("has already been sent", submission_uri="http://s/1")

    @app.get("/forbidden")
    def forbidden() -> None:
        raise AuthorizationError("Vendor is not allowed", context={"vendor_key": "secret"})

    @app.get("/store-failure")
    def store_failure() -> None:
        raise StoreFailureError(
            "Content deletion failed",
            phase="ttl_files",
            entity="share://a.ttl",
            submission_uri="http://s/1",
        )

    @app.get("/partial")
    def partial() -> None:
        raise PartialDeletionError(
            "Deadline passed",
            phase="task_chain",
            completed_steps=["ttl_files:content:share://a.ttl"],
            submission_uri="http://s/1",
        )

    @app.get("/domain")
    def domain() -> None:
        raise DomainError("Something odd")

    @app.get("/crash")
    def crash() -> None:
        raise RuntimeError("boom")

    @app.get("/typed/{number}")
    def typed(number: int) -> int:
        return number

    return app


class TestProblemDetail:
    @pytest.mark.unit
    def test_exclude_none_serialization(self) -> None:
        problem = ProblemDetail(type="/errors/test", title="Test", status=400, detail="detail")
        data = problem.model_dump(exclude_none=True)
        assert set(data) == {"type", "title", "status", "detail"}

    @pytest.mark.unit
    def test_status_bounds(self) -> None:
        with pytest.raises(Exception):  # noqa: B017
            ProblemDetail(type="/errors/test", title="Test", status=200, detail="detail")


class TestSanitization:
    @pytest.mark.unit
    def test_sanitize_context_empty(self) -> None:
        assert _sanitize_context(None) is None
        assert _sanitize_context({}) is None

    @pytest.mark.unit
    def test_strips_credential_keys(self) -> None:
        result = _sanitize_context({"vendor": "http://v/1", "key": "s3cr3t", "vendor_key": "x"})
        assert result == {"vendor": "http://v/1"}

    @pytest.mark.unit
    def test_redacts_credentials_in_strings(self) -> None:
        assert _sanitize_value("redis://:pw@cache:6379/0") == "redis://[REDACTED]@cache:6379/0"
        assert _sanitize_value("failed with key=abc123") == "failed with key=[REDACTED]"

    @pytest.mark.unit
    def test_converts_non_json_values(self) -> None:
        uid = UUID("12345678-1234-5678-1234-567812345678")
        assert _sanitize_value(uid) == str(uid)
        assert _sanitize_value(datetime(2024, 1, 1)) == "2024-01-01T00:00:00"
        assert _sanitize_value(("a", "b")) == ["a", "b"]
        assert _sanitize_value(object()).startswith("<object")


class TestHandlers:
    @pytest.fixture()
    def alerts(self) -> RecordingAlerts:
        return RecordingAlerts()

    @pytest.fixture()
    def client(self, alerts: RecordingAlerts) -> TestClient:
        return TestClient(_make_app(alerts), raise_server_exceptions=False)

    @pytest.mark.unit
    @pytest.mark.parametrize(
        ("path", "status", "error_code"),
        [
            ("/not-found", 404, "RESOURCE_NOT_FOUND"),
            ("/validation", 422, "VALIDATION_ERROR"),
            ("/conflict", 409, "CONFLICT"),
            ("/forbidden", 403, "AUTHORIZATION_ERROR"),
            ("/store-failure", 500, "STORE_FAILURE"),
            ("/partial", 500, "PARTIAL_DELETION"),
            ("/domain", 400, "DOMAIN_ERROR"),
            ("/crash", 500, "INTERNAL_ERROR"),
        ],
    )
    def test_status_and_code(
        self, client: TestClient, path: str, status: int, error_code: str
    ) -> None:
        response = client.get(path)

        assert response.status_code == status
        assert response.headers["content-type"].startswith(PROBLEM_MEDIA_TYPE)
        body: dict[str, Any] = response.json()
        assert body["error_code"] == error_code
        assert body["instance"] == path

    @pytest.mark.unit
    def test_conflict_carries_reason(self, client: TestClient) -> None:
        body = client.get("/conflict").json()
        assert body["context"] == {
            "submission_uri": "http://s/1",
            "reason": "has already been sent",
        }

    @pytest.mark.unit
    def test_forbidden_hides_credentials(self, client: TestClient) -> None:
        body = client.get("/forbidden").json()
        assert "context" not in body

    @pytest.mark.unit
    def test_store_failure_sends_alert(self, client: TestClient, alerts: RecordingAlerts) -> None:
        body = client.get("/store-failure").json()

        assert body["context"]["phase"] == "ttl_files"
        assert body["context"]["entity"] == "share://a.ttl"
        assert body["error_uri"] == "http://data.lblod.info/errors/1"
        assert alerts.sent == [
            {
                "message": "Content deletion failed",
                "detail": body["detail"],
                "reference": "http://s/1",
            }
        ]

    @pytest.mark.unit
    def test_partial_deletion_lists_completed_steps(self, client: TestClient) -> None:
        body = client.get("/partial").json()
        assert body["context"]["completed_steps"] == ["ttl_files:content:share://a.ttl"]

    @pytest.mark.unit
    def test_unhandled_error_is_sanitized(
        self, client: TestClient, alerts: RecordingAlerts
    ) -> None:
        response = client.get("/crash")

        assert "boom" not in response.text
        assert response.json()["error_uri"] == "http://data.lblod.info/errors/1"
        assert alerts.sent[0]["detail"] == "RuntimeError: boom"

    @pytest.mark.unit
    def test_unhandled_error_describes_deletion(
        self, client: TestClient, alerts: RecordingAlerts
    ) -> None:
        response = client.get("/crash")

        detail = response.json()["detail"]
        assert detail == UNEXPECTED_FAILURE_MESSAGE
        assert "deleting the submission" in detail
        assert "Job" not in detail
        assert alerts.sent[0]["message"] == UNEXPECTED_FAILURE_MESSAGE

    @pytest.mark.unit
    def test_no_alert_without_reporter(self) -> None:
        response = TestClient(_make_app(), raise_server_exceptions=False).get("/store-failure")
        assert "error_uri" not in response.json()

    @pytest.mark.unit
    def test_request_validation(self, client: TestClient) -> None:
        response = client.get("/typed/not-a-number")

        assert response.status_code == 422
        body = response.json()
        assert body["error_code"] == "REQUEST_VALIDATION_ERROR"
        assert body["context"]["errors"][0]["loc"] == ["path", "number"]
