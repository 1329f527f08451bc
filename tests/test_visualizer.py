from __future__ import annotations

import json
import os

import numpy as np
import pytest

from carbon_atlas.cli import main
from carbon_atlas.compose import compose
from carbon_atlas.errors import DatasetLoadError
from carbon_atlas.export import write_scene_json
from carbon_atlas.presets import AtlasConfig, SnapshotSpec, VisualStyle
from carbon_atlas.render2d import draw_layers_snapshot
from carbon_atlas.visualizer import CarbonAtlasVisualizer, generate_atlas_views

CSV = """Business Dept,Carbon Emission,Trip ID,Purpose,Shipping Type,Departure City,Arrival City,Net Costs
Sales,100,1,Customer Visit,Air,London,Berlin,450
Sales,300,2,Training,Rail,London,Paris,120
Engineering,500,3,Training,Air,NYC,SF,900
Legal,20,4,,Car,Bonn,Cologne,15
"""


@pytest.fixture
def csv_path(tmp_path):
    path = tmp_path / "trips.csv"
    path.write_text(CSV, encoding="utf-8")
    return str(path)


def test_generate_views_writes_artifacts(csv_path, tmp_path) -> None:
    out = tmp_path / "atlas"
    events = []
    metas = generate_atlas_views(
        csv_path,
        str(out),
        emit=lambda kind, payload: events.append((kind, payload)),
        rng=np.random.default_rng(0),
    )

    assert [m.name for m in metas] == [
        "atlas_departments",
        "atlas_purposes",
        "atlas_transport",
        "atlas_routes",
    ]
    for name in ("atlas_scene.json", "atlas_snapshots_index.json", "atlas_loading_report.json"):
        assert (out / name).exists()
    for m in metas:
        assert (out / m.layers_file).exists()
        assert m.image and (out / m.image).exists()

    index = json.loads((out / "atlas_snapshots_index.json").read_text(encoding="utf-8"))
    assert index["stats"]["trip_count"] == 4
    assert index["snapshots"][0]["layer_ids"] == ["department-circle-layer", "department-text-layer"]
    assert index["config"]["lod"]["windows"]["route-group"]["min"] == 7.5

    kinds = [k for k, _ in events]
    assert kinds[0] == "pipeline"
    assert "artifact" in kinds


def test_snapshot_with_search_highlights_last(csv_path, tmp_path) -> None:
    config = AtlasConfig(snapshots=[SnapshotSpec(name="find_sales", zoom=5.0, search="sales")])
    viz = CarbonAtlasVisualizer(csv_path, str(tmp_path), config=config, render_png=False)
    metas = viz.run()

    assert metas[0].layer_ids[-1] == "search-highlight"
    assert metas[0].image is None
    doc = json.loads((tmp_path / "find_sales.layers.json").read_text(encoding="utf-8"))
    assert doc["view"]["search_term"] == "sales"
    assert doc["layers"][-1]["data"][0]["id"] == "dept:Sales"


def test_missing_csv_propagates(tmp_path) -> None:
    with pytest.raises(DatasetLoadError):
        generate_atlas_views(str(tmp_path / "missing.csv"), str(tmp_path / "out"))


def test_scene_json_lists_nodes(scene, tmp_path) -> None:
    path = write_scene_json(str(tmp_path), scene)
    with open(path, encoding="utf-8") as f:
        doc = json.load(f)
    assert len(doc["nodes"]) == len(scene.nodes)
    assert doc["stats"]["department_count"] == 3
    assert doc["view"]["zoom"] == 3.5


def test_render_empty_layer_list_is_noop(tmp_path) -> None:
    out = tmp_path / "empty.png"
    assert draw_layers_snapshot([], VisualStyle(), outfile=str(out)) is None
    assert not out.exists()


def test_render_route_zoom(scene, tmp_path) -> None:
    out = tmp_path / "routes.png"
    layers = compose(scene.nodes, 8.0, highlight=["dept:Sales"])
    assert draw_layers_snapshot(layers, VisualStyle(dpi=40), outfile=str(out)) == str(out)
    assert os.path.getsize(out) > 0


def test_cli_runs_and_reports_errors(csv_path, tmp_path) -> None:
    out = tmp_path / "cli"
    assert main([csv_path, "--out", str(out), "--zoom", "4.5", "--seed", "3", "--no-png"]) == 0
    assert (out / "atlas_z4.5.layers.json").exists()

    assert main([str(tmp_path / "missing.csv"), "--out", str(out)]) == 1
