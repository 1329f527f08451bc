"""
Batch atlas visualiser.

Reads the travel CSV once, builds the scene, then for every configured
snapshot (zoom + optional search term) composes the layer list and writes:

    - <snapshot>.layers.json
    - <snapshot>.png            (matplotlib preview, optional)

plus atlas_scene.json, atlas_loading_report.json and the
atlas_snapshots_index.json pointer file.
"""

from __future__ import annotations

import logging
import os
from typing import Any, Dict, List, Optional

import numpy as np

from .compose import compose_view, layer_ids
from .events import DEFAULT_EMIT, EmitFn, log_event, safe_emit
from .export import SnapshotMeta, write_layers_json, write_scene_json, write_snapshots_index
from .loader import read_emissions_table, rows_from_frame, write_loading_report
from .presets import DEFAULT_CONFIG, AtlasConfig, SnapshotSpec
from .records import DEFAULT_COLUMNS, ColumnMap
from .render2d import draw_layers_snapshot
from .scene import Scene, build_scene
from .search import search_nodes

logger = logging.getLogger(__name__)


# ====================================================================== #
# Snapshot rendering
# ====================================================================== #

def render_snapshot(
    scene: Scene,
    spec: SnapshotSpec,
    out_dir: str,
    *,
    render_png: bool = True,
    emit: Optional[EmitFn] = None,
) -> SnapshotMeta:
    view = scene.initial_view().with_zoom(scene.config.view.clamp_zoom(spec.zoom))
    matches = search_nodes(scene.nodes, spec.search)
    if matches is not None:
        view = view.with_highlight(spec.search, [n.id for n in matches])

    layers = compose_view(scene, view)
    layers_file = write_layers_json(out_dir, spec.name, layers, view, emit)

    image = None
    if render_png:
        subtitle = (
            f"zoom {view.zoom:g}, {scene.stats.department_count} departments, "
            f"{scene.stats.trip_count} trips"
        )
        image = draw_layers_snapshot(
            layers,
            scene.config.style,
            outfile=os.path.join(out_dir, f"{spec.name}.png"),
            title="Carbon Atlas",
            subtitle=subtitle,
        )
        if image:
            safe_emit(emit, "artifact", {"kind": "atlas-2d", "path": image})

    return SnapshotMeta(
        name=spec.name,
        zoom=view.zoom,
        search=spec.search,
        n_layers=len(layers),
        layer_ids=layer_ids(layers),
        layers_file=os.path.basename(layers_file),
        image=os.path.basename(image) if image else None,
    )


# ====================================================================== #
# Visualizer driver
# ====================================================================== #

class CarbonAtlasVisualizer:
    """
    High-level orchestrator for:
      - loading
      - aggregation and layout
      - snapshot composition and rendering
      - metadata writing
    """

    def __init__(
        self,
        csv_path: str,
        out_dir: str,
        *,
        config: Optional[AtlasConfig] = None,
        columns: ColumnMap = DEFAULT_COLUMNS,
        rng: Optional[np.random.Generator] = None,
        render_png: bool = True,
        emit: EmitFn = DEFAULT_EMIT,
    ) -> None:
        self.csv_path = csv_path
        self.out_dir = out_dir
        self.config = config or DEFAULT_CONFIG
        self.config.ensure_defaults()
        self.columns = columns
        self.rng = rng
        self.render_png = render_png
        self.emit = emit

        self.scene: Optional[Scene] = None
        self.snapshot_meta: List[SnapshotMeta] = []
        self.artifacts: Dict[str, str] = {}

    def run(self) -> List[SnapshotMeta]:
        """DatasetLoadError from the loader propagates unchanged."""
        safe_emit(self.emit, "pipeline", {"stage": "carbon_atlas", "event": "start"})
        os.makedirs(self.out_dir, exist_ok=True)

        df = read_emissions_table(self.csv_path, self.columns, self.emit)
        self.artifacts["loading_report"] = write_loading_report(self.out_dir, df, self.columns, self.emit)

        scene = self.scene = build_scene(
            rows_from_frame(df, self.columns),
            config=self.config,
            columns=self.columns,
            rng=self.rng,
            emit=self.emit,
        )
        self.artifacts["scene"] = write_scene_json(self.out_dir, scene, self.emit)

        if scene.is_empty:
            log_event("[visualizer] Empty scene after loading.", self.emit, level="warn", log=logger)

        self.snapshot_meta = [
            render_snapshot(
                scene,
                spec,
                self.out_dir,
                render_png=self.render_png and not scene.is_empty,
                emit=self.emit,
            )
            for spec in self.config.snapshots
        ]
        self.artifacts["index"] = write_snapshots_index(
            self.out_dir, self.snapshot_meta, scene=scene, emit=self.emit
        )

        safe_emit(self.emit, "pipeline", {"stage": "carbon_atlas", "event": "end"})
        return self.snapshot_meta


# ====================================================================== #
# Convenience wrapper
# ====================================================================== #

def generate_atlas_views(
    csv_path: str,
    out_dir: str,
    config: Optional[AtlasConfig] = None,
    emit: EmitFn = DEFAULT_EMIT,
    **kwargs: Any,
) -> List[SnapshotMeta]:
    viz = CarbonAtlasVisualizer(csv_path, out_dir, config=config, emit=emit, **kwargs)
    return viz.run()
