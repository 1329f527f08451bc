"""
Nested radial layout for the department hierarchy.

  - departments on a Fermat spiral (golden-angle phyllotaxis)
  - purposes on a fixed ring around their department
  - transport modes and routes on smaller concentric rings
  - trips sampled area-uniformly inside their route disk

Everything except trip positions is a pure function of the forest's
insertion order. Trip positions come from an injectable generator.

Exports:
    - compute_layout
    - phyllotaxis
    - ring_offsets
"""

from __future__ import annotations

import logging
import math
from typing import List, Optional

import numpy as np

from ..aggregate import HierarchyForest
from ..events import EmitFn, log_event
from ..nodes import (
    Department,
    GroupMetric,
    Node,
    NodeKind,
    NodeSet,
    PurposeGroup,
    RouteGroup,
    TransportGroup,
    Trip,
    TripMetric,
    group_id,
)
from ..presets import LayoutConfig

logger = logging.getLogger(__name__)


# ============================================================================ #
# Geometry helpers
# ============================================================================ #

def phyllotaxis(n: int, spacing: float, angle_deg: float = 137.508) -> np.ndarray:
    """(n, 2) array of Fermat-spiral points: r = spacing*sqrt(i), theta = i*angle."""
    if n <= 0:
        return np.zeros((0, 2))
    i = np.arange(n, dtype=float)
    r = spacing * np.sqrt(i)
    theta = i * np.deg2rad(angle_deg)
    return np.column_stack([r * np.cos(theta), r * np.sin(theta)])


def ring_offsets(n: int, radius: float) -> np.ndarray:
    """(n, 2) offsets evenly spaced on a circle, the first at angle 0."""
    if n <= 0:
        return np.zeros((0, 2))
    step = 2 * np.pi / max(1, n)
    theta = np.arange(n, dtype=float) * step
    return np.column_stack([radius * np.cos(theta), radius * np.sin(theta)])


def sample_disk(rng: np.random.Generator, n: int, radius: float) -> np.ndarray:
    """
    (n, 2) area-uniform samples in a disk: r = R*sqrt(U1), theta = 2*pi*U2.

    The sqrt keeps points from clumping at the centre.
    """
    if n <= 0:
        return np.zeros((0, 2))
    u = rng.random((n, 2))
    r = radius * np.sqrt(u[:, 0])
    theta = 2 * np.pi * u[:, 1]
    return np.column_stack([r * np.cos(theta), r * np.sin(theta)])


def department_text_size(emissions: float, cfg: LayoutConfig) -> float:
    return cfg.dept_text_base + cfg.dept_text_factor * math.sqrt(
        max(0.0, emissions) / cfg.dept_text_scale
    )


def trip_marker_radius(emission: float) -> float:
    return 2.0 + math.sqrt(max(0.0, emission) / 1000.0)


# ============================================================================ #
# Layout
# ============================================================================ #

def compute_layout(
    forest: HierarchyForest,
    *,
    config: Optional[LayoutConfig] = None,
    rng: Optional[np.random.Generator] = None,
    emit: Optional[EmitFn] = None,
) -> NodeSet:
    """
    Position every bucket of the forest and return the resulting NodeSet.

    Node order: all departments first, then a depth-first walk of each
    department (purpose, its transports, their routes, their trips).
    """
    cfg = config or LayoutConfig()
    if rng is None:
        rng = np.random.default_rng(cfg.trip_seed)

    if forest.is_empty:
        log_event("[layout] Empty forest - nothing to place.", emit, log=logger)
        return NodeSet()

    dept_list = list(forest.departments.values())
    centres = phyllotaxis(len(dept_list), cfg.spacing, cfg.golden_angle_deg)

    departments: List[Node] = []
    groups: List[Node] = []

    transport_ring = cfg.transport_ring_factor * cfg.purpose_group_radius
    route_ring = cfg.route_ring_factor * cfg.transport_group_radius
    trip_disk = cfg.trip_disk_factor * cfg.route_group_radius

    for dept, (dx, dy) in zip(dept_list, centres):
        dx, dy = float(dx), float(dy)
        color = dept.color
        departments.append(Department(
            id=group_id(NodeKind.DEPARTMENT, (dept.name,)),
            label=dept.name,
            x=dx,
            y=dy,
            radius=dept.radius(cfg.dept_base_radius, cfg.dept_radius_factor),
            color=color,
            parent_path=(),
            metric=GroupMetric(dept.emissions, dept.count),
            text_size=department_text_size(dept.emissions, cfg),
        ))

        purposes = list(dept.purposes.values())
        p_offsets = ring_offsets(len(purposes), cfg.dept_cluster_radius)

        for purpose, (pox, poy) in zip(purposes, p_offsets):
            px, py = dx + float(pox), dy + float(poy)
            p_path = (dept.name, purpose.name)
            groups.append(PurposeGroup(
                id=group_id(NodeKind.PURPOSE, p_path),
                label=purpose.name,
                x=px,
                y=py,
                radius=cfg.purpose_group_radius + cfg.purpose_radius_pad,
                color=color,
                parent_path=p_path[:1],
                metric=GroupMetric(purpose.emissions, purpose.count),
            ))

            transports = list(purpose.transports.values())
            t_radius = transport_ring if len(transports) > 1 else 0.0
            t_offsets = ring_offsets(len(transports), t_radius)

            for transport, (tox, toy) in zip(transports, t_offsets):
                tx, ty = px + float(tox), py + float(toy)
                t_path = p_path + (transport.name,)
                groups.append(TransportGroup(
                    id=group_id(NodeKind.TRANSPORT, t_path),
                    label=transport.name,
                    x=tx,
                    y=ty,
                    radius=cfg.transport_group_radius + cfg.transport_radius_pad,
                    color=color,
                    parent_path=p_path,
                    metric=GroupMetric(transport.emissions, transport.count),
                ))

                routes = list(transport.routes.values())
                r_radius = route_ring if len(routes) > 1 else 0.0
                r_offsets = ring_offsets(len(routes), r_radius)

                for route, (rox, roy) in zip(routes, r_offsets):
                    rx, ry = tx + float(rox), ty + float(roy)
                    r_path = t_path + (route.name,)
                    groups.append(RouteGroup(
                        id=group_id(NodeKind.ROUTE, r_path),
                        label=route.name,
                        x=rx,
                        y=ry,
                        radius=cfg.route_group_radius + cfg.route_radius_pad,
                        color=color,
                        parent_path=t_path,
                        metric=GroupMetric(route.emissions, route.count),
                    ))

                    jitter = sample_disk(rng, len(route.trips), trip_disk)
                    for rec, (jx, jy) in zip(route.trips, jitter):
                        groups.append(Trip(
                            id=rec.node_id,
                            label=rec.source_id or rec.node_id,
                            x=rx + float(jx),
                            y=ry + float(jy),
                            radius=trip_marker_radius(rec.emission),
                            color=color,
                            parent_path=r_path,
                            metric=TripMetric(rec.emission, rec.cost),
                            text_size=cfg.trip_text_size,
                            source_id=rec.source_id,
                        ))

    nodes = NodeSet(departments + groups)
    log_event(
        f"[layout] Placed {len(nodes)} nodes ({len(departments)} departments).",
        emit,
        log=logger,
        n_nodes=len(nodes),
    )
    return nodes
