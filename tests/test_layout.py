from __future__ import annotations

import math

import numpy as np
import pytest

from carbon_atlas.aggregate import aggregate
from carbon_atlas.layout import compute_layout, phyllotaxis, ring_offsets, sample_disk
from carbon_atlas.nodes import NodeKind, NodeSet
from carbon_atlas.presets import LayoutConfig

from conftest import make_row


def _non_trip(nodes: NodeSet):
    return [n for n in nodes if n.kind is not NodeKind.TRIP]


def test_single_row_gives_five_nodes() -> None:
    nodes = compute_layout(aggregate([make_row("Engineering", 500)]), rng=np.random.default_rng(0))

    assert len(nodes) == 5
    assert [n.kind for n in nodes] == [
        NodeKind.DEPARTMENT,
        NodeKind.PURPOSE,
        NodeKind.TRANSPORT,
        NodeKind.ROUTE,
        NodeKind.TRIP,
    ]
    dept = nodes.departments[0]
    assert dept.metric.emissions == 500
    assert dept.metric.count == 1
    assert dept.position == (0.0, 0.0)


def test_phyllotaxis_first_points() -> None:
    pts = phyllotaxis(3, 700.0)
    assert pts[0] == pytest.approx([0.0, 0.0])
    assert math.hypot(*pts[1]) == pytest.approx(700.0)
    assert math.hypot(*pts[2]) == pytest.approx(700.0 * math.sqrt(2))
    assert math.degrees(math.atan2(pts[1][1], pts[1][0])) == pytest.approx(137.508)


def test_ring_offsets_and_empty() -> None:
    offs = ring_offsets(4, 10.0)
    assert offs[0] == pytest.approx([10.0, 0.0])
    assert offs[1] == pytest.approx([0.0, 10.0], abs=1e-9)
    assert ring_offsets(0, 10.0).shape == (0, 2)


def test_sample_disk_stays_inside() -> None:
    pts = sample_disk(np.random.default_rng(1), 500, 4.8)
    assert np.all(np.hypot(pts[:, 0], pts[:, 1]) <= 4.8)


def test_non_leaf_layout_is_deterministic(sample_rows) -> None:
    a = compute_layout(aggregate(sample_rows), rng=np.random.default_rng(1))
    b = compute_layout(aggregate(sample_rows), rng=np.random.default_rng(2))
    assert _non_trip(a) == _non_trip(b)


def test_seeded_trips_are_reproducible(sample_rows) -> None:
    cfg = LayoutConfig(trip_seed=42)
    a = compute_layout(aggregate(sample_rows), config=cfg)
    b = compute_layout(aggregate(sample_rows), config=cfg)
    assert a == b


def test_trips_inside_route_disk(sample_rows) -> None:
    cfg = LayoutConfig()
    nodes = compute_layout(aggregate(sample_rows), config=cfg, rng=np.random.default_rng(3))
    limit = cfg.trip_disk_factor * cfg.route_group_radius
    for trip in nodes.trips:
        route = nodes.parent_of(trip)
        assert route is not None and route.kind is NodeKind.ROUTE
        assert math.hypot(trip.x - route.x, trip.y - route.y) <= limit + 1e-9


def test_ids_unique_and_colour_inherited(sample_rows) -> None:
    nodes = compute_layout(aggregate(sample_rows), rng=np.random.default_rng(0))
    assert len(nodes.ids) == len(nodes)
    for n in nodes:
        dept = nodes.department_of(n)
        assert dept is not None
        assert n.color == dept.color


def test_single_members_collapse_rings() -> None:
    nodes = compute_layout(aggregate([make_row("HR", 10)]), rng=np.random.default_rng(0))
    purpose = nodes.of_kind(NodeKind.PURPOSE)[0]
    transport = nodes.of_kind(NodeKind.TRANSPORT)[0]
    route = nodes.of_kind(NodeKind.ROUTE)[0]
    assert purpose.position == pytest.approx((180.0, 0.0))
    assert transport.position == purpose.position
    assert route.position == transport.position


def test_group_footprints() -> None:
    nodes = compute_layout(aggregate([make_row("HR", 4000)]), rng=np.random.default_rng(0))
    assert nodes.of_kind(NodeKind.PURPOSE)[0].radius == 95
    assert nodes.of_kind(NodeKind.TRANSPORT)[0].radius == 32
    assert nodes.of_kind(NodeKind.ROUTE)[0].radius == 8
    assert nodes.trips[0].radius == pytest.approx(4.0)
    assert nodes.departments[0].text_size == pytest.approx(32 + 12 * math.sqrt(2))


def test_empty_forest_gives_empty_set() -> None:
    nodes = compute_layout(aggregate([]))
    assert len(nodes) == 0
