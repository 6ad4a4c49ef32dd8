"""Tests for the HTTP API."""
from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from sketchflow.api import app


@pytest.fixture
def client():
    return TestClient(app)


def test_health(client):
    response = client.get("/api/health")

    assert response.status_code == 200
    assert response.json()["status"] == "ok"


class TestQuickEndpoint:
    def test_compile(self, client):
        response = client.post("/api/quick", json={"dsl": "[A] -> (B) --> {C}", "direction": "v"})

        assert response.status_code == 200
        body = response.json()
        assert body["nodeCount"] == 3
        assert body["connectionCount"] == 2
        assert body["document"]["type"] == "excalidraw"
        assert len(body["document"]["elements"]) == 8

    def test_compiled_document_validates(self, client):
        document = client.post("/api/quick", json={"dsl": '[A] -> "ok" [B]'}).json()["document"]
        result = client.post("/api/validate", json=document).json()

        assert result["valid"] is True
        assert result["errorCount"] == 0

    def test_empty_dsl(self, client):
        response = client.post("/api/quick", json={"dsl": "->"})

        assert response.status_code == 400
        assert "No nodes" in response.json()["detail"]

    def test_bad_direction(self, client):
        response = client.post("/api/quick", json={"dsl": "[A]", "direction": "diagonal"})
        assert response.status_code == 400

    def test_missing_dsl(self, client):
        assert client.post("/api/quick", json={}).status_code == 422


class TestValidateEndpoint:
    def test_reports_errors_as_data(self, client):
        response = client.post("/api/validate", json={"type": "excalidraw", "version": 2,
                                                      "elements": [{"type": "rectangle"}]})

        assert response.status_code == 200
        assert response.json()["errorCount"] == 7

    def test_non_object_body(self, client):
        body = client.post("/api/validate", json=[1, 2]).json()

        assert body["valid"] is False
        assert body["errors"][0]["path"] == "root"

    def test_strict_query(self, client):
        doc = {"type": "excalidraw", "version": 9, "elements": []}

        assert client.post("/api/validate", json=doc).json()["valid"] is True
        strict = client.post("/api/validate", params={"strict": "true"}, json=doc).json()
        assert strict["valid"] is False
        assert strict["warningCount"] == 1


class TestElementsEndpoint:
    def test_create(self, client):
        response = client.post("/api/elements", json={"type": "arrow", "x": 1, "y": 2})

        assert response.status_code == 200
        element = response.json()["element"]
        assert element["type"] == "arrow"
        assert element["endArrowhead"] == "arrow"
        assert element["points"] == [[0, 0], [100, 100]]

    def test_unknown_kind(self, client):
        response = client.post("/api/elements", json={"type": "blob", "x": 0, "y": 0})

        assert response.status_code == 400
        assert "Unknown element type" in response.json()["detail"]

    def test_missing_position(self, client):
        response = client.post("/api/elements", json={"type": "rectangle"})
        assert response.status_code == 400

    def test_bad_field_type(self, client):
        response = client.post("/api/elements",
                               json={"type": "rectangle", "x": 0, "y": 0, "width": "wide"})
        assert response.status_code == 400

    @pytest.mark.parametrize("kind", ["line", "arrow", "freedraw"])
    def test_empty_points(self, client, kind):
        response = client.post("/api/elements",
                               json={"type": kind, "x": 0, "y": 0, "points": []})

        assert response.status_code == 200
        element = response.json()["element"]
        assert element["points"] == []
        assert (element["width"], element["height"]) == (1, 1)
