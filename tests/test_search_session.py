from __future__ import annotations

from carbon_atlas.nodes import NodeKind
from carbon_atlas.search import SearchDebouncer, search_nodes
from carbon_atlas.session import AtlasSession


def test_blank_term_means_no_search(scene) -> None:
    assert search_nodes(scene.nodes, "") is None
    assert search_nodes(scene.nodes, "   ") is None
    assert search_nodes(scene.nodes, None) is None


def test_search_matches_label_department_and_route(scene) -> None:
    legal = search_nodes(scene.nodes, "LEGAL")
    assert legal and all(n.department == "Legal" for n in legal)
    assert any(n.kind is NodeKind.DEPARTMENT for n in legal)

    paris = search_nodes(scene.nodes, "paris")
    kinds = {n.kind for n in paris}
    assert kinds == {NodeKind.ROUTE, NodeKind.TRIP}

    assert search_nodes(scene.nodes, "zzz-no-match") == []


def test_debouncer_releases_after_quiet_period(clock) -> None:
    deb = SearchDebouncer(200, clock=clock)
    deb.push("sal")
    clock.t = 0.1
    assert deb.poll() is None
    clock.t = 0.2
    assert deb.poll() == "sal"
    assert not deb.pending
    assert deb.poll() is None


def test_debouncer_keeps_only_latest_term(clock) -> None:
    deb = SearchDebouncer(200, clock=clock)
    deb.push("eng")
    clock.t = 0.15
    deb.push("sales")
    clock.t = 0.3
    assert deb.poll() is None
    clock.t = 0.36
    assert deb.poll() == "sales"


def test_session_starts_at_initial_view(scene) -> None:
    session = AtlasSession(scene)
    assert session.view.zoom == 3.5
    assert (session.view.longitude, session.view.latitude) == scene.bounds.center
    assert [layer.id for layer in session.layers] == ["department-circle-layer", "department-text-layer"]


def test_session_clamps_zoom_and_emits(scene) -> None:
    events = []
    session = AtlasSession(scene, emit=lambda kind, payload: events.append((kind, payload)))

    session.on_view_state_change(50.0, 1.0, 2.0)
    assert session.view.zoom == 20.0
    assert (session.view.longitude, session.view.latitude) == (1.0, 2.0)

    session.on_view_state_change(-10.0)
    assert session.view.zoom == -2.0
    assert session.layers == []

    layer_events = [p for k, p in events if k == "layers"]
    assert len(layer_events) == 2
    assert layer_events[-1]["zoom"] == -2.0


def test_session_debounced_search(scene, clock) -> None:
    session = AtlasSession(scene, clock=clock)
    session.on_search_input("Eng")
    clock.t = 0.05
    session.on_search_input("Engineering")
    clock.t = 0.2
    assert session.tick() is False
    assert session.search_pending

    clock.t = 0.26
    assert session.tick() is True
    assert session.view.search_term == "Engineering"
    assert "dept:Engineering" in session.view.highlight_ids
    assert session.layers[-1].id == "search-highlight"

    session.on_search_input("")
    clock.t = 1.0
    assert session.tick() is True
    assert session.view.highlight_ids == frozenset()
    assert session.layers[-1].id != "search-highlight"


def test_session_pick_and_summary(scene) -> None:
    session = AtlasSession(scene)
    trip = scene.nodes.get("trip:T2")
    info = session.pick(trip.id)
    assert info["kind"] == "trip"
    assert info["route"] == "Berlin → Paris"
    assert info["emissions"] == 300
    assert session.pick("dept:Nope") is None

    summary = session.summary()
    assert summary["stats"]["trip_count"] == 6
    assert summary["legend"]["title"] == "Department Clusters"
