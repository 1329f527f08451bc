from __future__ import annotations

import math

from carbon_atlas.analytics import describe_node, format_emissions
from carbon_atlas.events import log_event, safe_emit
from carbon_atlas.presets import DEFAULT_CONFIG, AtlasConfig, ZoomWindow, load_config
from carbon_atlas.records import Row, clean_number, clean_text


def test_load_config_reads_environment(monkeypatch) -> None:
    monkeypatch.setenv("ATLAS_SPACING", "500")
    monkeypatch.setenv("ATLAS_TRIP_SEED", "11")
    monkeypatch.setenv("ATLAS_SEARCH_DEBOUNCE_MS", "50")
    monkeypatch.delenv("ATLAS_INITIAL_ZOOM", raising=False)

    cfg = load_config()
    assert cfg.layout.spacing == 500
    assert cfg.layout.trip_seed == 11
    assert cfg.view.search_debounce_ms == 50
    assert cfg.view.initial_zoom == 3.5


def test_config_defaults_and_dict() -> None:
    cfg = AtlasConfig(layout=None, snapshots=[])
    cfg.ensure_defaults()
    assert cfg.layout.spacing == 700
    assert len(cfg.snapshots) == 4

    d = DEFAULT_CONFIG.to_dict()
    assert d["lod"]["windows"]["department"] == {"min": 0.0, "max": None, "fade": 0.5}
    assert d["view"]["max_zoom"] == 20
    assert DEFAULT_CONFIG.view.clamp_zoom(99) == 20


def test_zoom_window_contains() -> None:
    w = ZoomWindow(4.0, 12.0)
    assert w.contains(4.0)
    assert not w.contains(12.0)
    assert ZoomWindow().opacity(math.inf) == 0.0


def test_format_emissions() -> None:
    assert format_emissions(950) == "950.00"
    assert format_emissions(1234) == "1.23K"
    assert format_emissions(2_500_000) == "2.50M"


def test_describe_group_and_trip(scene) -> None:
    dept = describe_node(scene.nodes["dept:Engineering"], scene.nodes)
    assert dept["emissions"] == 3000
    assert dept["trips"] == 2
    assert dept["emissions_label"] == "3.00K"
    assert dept["children"] == 2

    trip = describe_node(scene.nodes["trip:T5"])
    assert trip["route"] == "Unknown → Lyon"
    assert trip["purpose"] == "Internal Meeting"
    assert trip["transport"] == "Car"
    assert trip["cost"] == 0.0


def test_row_cleaning() -> None:
    assert clean_text(1001.0) == "1001"
    assert clean_text("  Sales ") == "Sales"
    assert clean_number("1,500") == 1500.0
    assert clean_number("inf") is None
    assert clean_number(True) is None
    row = Row.from_mapping({"department": "HR", "emission": "12"})
    assert row.is_complete and row.emission == 12.0


def test_broken_emitter_never_raises() -> None:
    def boom(kind, payload):
        raise RuntimeError("host went away")

    safe_emit(boom, "log", {})
    log_event("still fine", boom)

    seen = []
    log_event("hello", lambda k, p: seen.append((k, p)), level="warn", step=2)
    assert seen[0][0] == "log"
    assert seen[0][1]["level"] == "warn"
    assert seen[0][1]["step"] == 2


def test_package_exports_resolve() -> None:
    import carbon_atlas
    from carbon_atlas import palette, presets

    for name in carbon_atlas.__all__:
        assert getattr(carbon_atlas, name) is not None
    assert not hasattr(palette, "css_rgb")
    assert not hasattr(presets.LodConfig, "window")
