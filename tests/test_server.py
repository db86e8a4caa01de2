"""
Tests for the HTTP front-end.
"""

import pytest
from fastapi.testclient import TestClient

from sshmcp.server import create_app


@pytest.fixture
def client(settings, populated) -> TestClient:
    return TestClient(create_app(settings))


class TestEnvelopeRoute:
    def test_success(self, client):
        response = client.post(
            "/mcp", json={"tool": "test.echo", "args": {"message": "hi"}, "conversation_id": "h1"}
        )

        assert response.status_code == 200
        body = response.json()
        assert body["conversation_id"] == "h1"
        assert body["result"]["echo"] == {"message": "hi"}

    def test_errors_travel_in_the_envelope(self, client):
        response = client.post("/mcp", content=b"not json")

        assert response.status_code == 200
        assert response.json()["error"]["code"] == "INVALID_JSON"


class TestToolRoutes:
    def test_root_and_health(self, client):
        assert client.get("/").json()["service"] == "ssh-mcp"
        health = client.get("/health").json()
        assert health["status"] == "healthy"
        assert health["tools_loaded"] == 6

    def test_list(self, client):
        body = client.get("/tools").json()

        assert body["total"] == len(body["tools"]) == 6

    def test_list_by_category(self, client):
        body = client.get("/tools", params={"category": "test"}).json()

        assert [tool["name"] for tool in body["tools"]] == ["test.echo", "test.fail"]

    def test_describe(self, client):
        body = client.get("/tools/test.echo").json()

        assert body["author"] == "Test Suite"
        assert body["schema"]["properties"]["message"]["type"] == "string"

    def test_describe_missing(self, client):
        response = client.get("/tools/no.such.tool")

        assert response.status_code == 404

    def test_schema(self, client):
        assert client.get("/tools/meta.discover/schema").json()["type"] == "object"
