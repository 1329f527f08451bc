from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from carbon_atlas.api import create_app
from carbon_atlas.errors import DatasetLoadError


@pytest.fixture
def client(scene) -> TestClient:
    return TestClient(create_app(scene=scene))


def test_summary(client) -> None:
    body = client.get("/api/v1/atlas/summary").json()
    assert body["stats"]["department_count"] == 3
    assert body["stats"]["trip_count"] == 6
    assert body["stats"]["total_emissions"] == 3450


def test_view_bounds(client) -> None:
    body = client.get("/api/v1/atlas/view").json()
    assert body["zoom"] == 3.5
    assert body["min_zoom"] == -2
    assert body["max_zoom"] == 20


def test_layers_with_search(client) -> None:
    body = client.get("/api/v1/atlas/layers", params={"zoom": 8, "search": "Legal"}).json()
    ids = [layer["id"] for layer in body["layers"]]
    assert ids[-1] == "search-highlight"
    assert ids[0] == "purpose-highlight-layer"
    assert body["view"]["search_term"] == "Legal"
    assert set(body["active_kinds"]) == {
        "department", "purpose-group", "transport-group", "route-group", "trip",
    }


def test_layers_zoom_is_clamped(client) -> None:
    body = client.get("/api/v1/atlas/layers", params={"zoom": -40}).json()
    assert body["view"]["zoom"] == -2
    assert body["layers"] == []


def test_legend(client) -> None:
    assert client.get("/api/v1/atlas/legend", params={"zoom": 8}).json()["title"] == "Route Clusters"
    assert client.get("/api/v1/atlas/legend").json()["title"] == "Department Clusters"


def test_node_lookup(client) -> None:
    body = client.get("/api/v1/atlas/nodes/purpose:Sales/Training").json()
    assert body["kind"] == "purpose-group"
    assert body["trips"] == 1
    assert body["emissions"] == 50

    assert client.get("/api/v1/atlas/nodes/dept:Nowhere").status_code == 404


def test_hierarchy(client, scene) -> None:
    body = client.get("/api/v1/atlas/hierarchy").json()
    assert len(body["nodes"]) == len(scene.nodes)


def test_create_app_propagates_load_errors(tmp_path) -> None:
    with pytest.raises(DatasetLoadError):
        create_app(csv_path=str(tmp_path / "missing.csv"))


def test_create_app_needs_a_source(monkeypatch) -> None:
    monkeypatch.delenv("ATLAS_CSV", raising=False)
    with pytest.raises(ValueError):
        create_app()
