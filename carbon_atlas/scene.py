"""
Immutable scene snapshot: positioned nodes plus the read-outs and camera
bounds derived from them.

``build_scene`` is the single entry point from records to a scene:

    rows -> aggregate -> compute_layout -> check_hierarchy -> Scene
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, Mapping, Optional, Union

import numpy as np

from .aggregate import aggregate
from .analytics import SceneStats, compute_scene_stats
from .compose import ViewState
from .events import EmitFn, log_event, safe_emit
from .hierarchy import check_hierarchy
from .layout import compute_layout
from .loader import load_rows
from .nodes import NodeSet
from .presets import DEFAULT_CONFIG, AtlasConfig
from .records import DEFAULT_COLUMNS, ColumnMap, Row

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SceneBounds:
    """Axis-aligned bounds of node centres in surface coordinates."""

    min_x: float = 0.0
    min_y: float = 0.0
    max_x: float = 0.0
    max_y: float = 0.0

    @property
    def center(self):
        return (self.min_x + self.max_x) / 2.0, (self.min_y + self.max_y) / 2.0

    def to_dict(self) -> Dict[str, Any]:
        cx, cy = self.center
        return {
            "min": [self.min_x, self.min_y],
            "max": [self.max_x, self.max_y],
            "center": [cx, cy],
        }


def compute_bounds(nodes: NodeSet, scale: float = 0.005) -> SceneBounds:
    if len(nodes) == 0:
        return SceneBounds()
    xy = np.array([n.position for n in nodes], float) * scale
    lo = xy.min(axis=0)
    hi = xy.max(axis=0)
    return SceneBounds(float(lo[0]), float(lo[1]), float(hi[0]), float(hi[1]))


@dataclass(frozen=True)
class Scene:
    nodes: NodeSet
    stats: SceneStats
    bounds: SceneBounds
    config: AtlasConfig = field(default_factory=lambda: DEFAULT_CONFIG, compare=False)

    @property
    def is_empty(self) -> bool:
        return len(self.nodes) == 0

    def initial_view(self) -> ViewState:
        cx, cy = self.bounds.center
        return ViewState(
            zoom=self.config.view.clamp_zoom(self.config.view.initial_zoom),
            longitude=cx,
            latitude=cy,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "stats": self.stats.to_dict(),
            "bounds": self.bounds.to_dict(),
            "view": self.initial_view().to_dict(),
            "config_version": self.config.version,
        }


def build_scene(
    rows: Iterable[Union[Row, Mapping[str, Any]]],
    *,
    config: Optional[AtlasConfig] = None,
    columns: ColumnMap = DEFAULT_COLUMNS,
    rng: Optional[np.random.Generator] = None,
    emit: Optional[EmitFn] = None,
) -> Scene:
    """Aggregate, lay out and validate rows into a Scene."""
    cfg = config or DEFAULT_CONFIG
    cfg.ensure_defaults()

    safe_emit(emit, "pipeline", {"stage": "aggregate", "event": "start"})
    forest = aggregate(rows, columns=columns, emit=emit)

    safe_emit(emit, "pipeline", {"stage": "layout", "event": "start"})
    nodes = compute_layout(forest, config=cfg.layout, rng=rng, emit=emit)
    check_hierarchy(nodes)

    stats = compute_scene_stats(
        nodes,
        processed_rows=forest.processed_rows,
        skipped_rows=forest.skipped_rows,
    )
    bounds = compute_bounds(nodes, cfg.view.position_scale)

    log_event(
        f"[scene] {stats.department_count} departments, {stats.trip_count} trips, "
        f"{len(nodes)} nodes.",
        emit,
        log=logger,
    )
    safe_emit(emit, "pipeline", {"stage": "scene", "event": "end", "n_nodes": len(nodes)})
    return Scene(nodes=nodes, stats=stats, bounds=bounds, config=cfg)


def load_scene(
    path: str,
    *,
    config: Optional[AtlasConfig] = None,
    columns: ColumnMap = DEFAULT_COLUMNS,
    rng: Optional[np.random.Generator] = None,
    emit: Optional[EmitFn] = None,
) -> Scene:
    """Read a CSV and build its scene; DatasetLoadError propagates."""
    rows = load_rows(path, columns=columns, emit=emit)
    return build_scene(rows, config=config, columns=columns, rng=rng, emit=emit)
