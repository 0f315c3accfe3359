"""
Tests for the HTTP surface.
"""

import pytest
from fastapi.testclient import TestClient

from altar.run import create_app


@pytest.fixture
def client(gate_config) -> TestClient:
    return TestClient(create_app(gate_config))


def payload(action: str, **parameters) -> dict:
    return {"action": action, "parameters": parameters, "timestamp": "2024-01-01T12:00:00Z"}


class TestOperationEndpoint:
    """Tests for /api/operation."""

    def test_list_files(self, client, auth_headers, sandbox):
        resp = client.post("/api/operation", json=payload("list_files", path=str(sandbox)), headers=auth_headers)

        assert resp.status_code == 200
        data = resp.json()
        assert data["status"] == "success"
        assert data["message"] == ""
        assert len(data["data"]) == 3

    def test_plural_alias(self, client, auth_headers, sandbox):
        resp = client.post(
            "/api/operations",
            json=payload("read_file", path=str(sandbox / "readme.txt")),
            headers=auth_headers,
        )

        assert resp.status_code == 200
        assert resp.json()["data"] == "Hello World"

    @pytest.mark.parametrize("method", ["GET", "PUT", "DELETE", "PATCH"])
    def test_other_methods_rejected_with_envelope(self, client, method):
        resp = client.request(method, "/api/operation")

        assert resp.status_code == 405
        assert resp.json() == {"status": "error", "data": None, "message": "Method not allowed"}

    def test_options_rejected_with_envelope(self, client):
        resp = client.options("/api/operations")

        assert resp.status_code == 405
        assert resp.json()["message"] == "Method not allowed"

    def test_head_rejected(self, client):
        resp = client.head("/api/operation")

        assert resp.status_code == 405

    def test_missing_token(self, client, sandbox):
        resp = client.post("/api/operation", json=payload("list_files", path=str(sandbox)))

        assert resp.status_code == 401
        assert resp.json()["status"] == "error"

    def test_bad_json(self, client, auth_headers):
        resp = client.post(
            "/api/operation",
            content=b"{oops",
            headers={**auth_headers, "Content-Type": "application/json"},
        )

        assert resp.status_code == 400

    def test_forbidden_action(self, client, auth_headers):
        resp = client.post("/api/operation", json=payload("delete_file", path="/"), headers=auth_headers)

        assert resp.status_code == 403
        assert resp.json()["message"] == "Operation not allowed"

    def test_write_disallowed_type(self, client, auth_headers, sandbox):
        resp = client.post(
            "/api/operation",
            json=payload("write_file", path=str(sandbox / "note.exe"), content="x"),
            headers=auth_headers,
        )

        assert resp.status_code == 403
        assert not (sandbox / "note.exe").exists()

    def test_write_too_large(self, client, auth_headers, sandbox, gate_config):
        resp = client.post(
            "/api/operation",
            json=payload("write_file", path=str(sandbox / "big.txt"), content="x" * (gate_config.max_file_size + 1)),
            headers=auth_headers,
        )

        assert resp.status_code == 413


class TestHealthEndpoint:
    """Tests for /api/health."""

    def test_health_is_public(self, client):
        resp = client.get("/api/health")

        assert resp.status_code == 200
        data = resp.json()
        assert data["healthy"] is True
        assert set(data["gates"]) == {"TokenGate", "FileSystemGate"}

    def test_health_hides_configuration(self, client, sandbox, secret):
        text = client.get("/api/health").text

        assert str(sandbox) not in text
        assert secret not in text

    def test_docs_disabled(self, client):
        assert client.get("/docs").status_code == 404
        assert client.get("/openapi.json").status_code == 404
