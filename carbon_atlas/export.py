"""
JSON writers for atlas artifacts.

Outputs:

1. atlas_scene.json
      - stats, bounds, initial camera and every node with its position

2. <snapshot>.layers.json
      - the composed layer list for one (zoom, search) snapshot

3. atlas_snapshots_index.json
      - lightweight index referencing the snapshots plus the config used
"""

from __future__ import annotations

import json
import os
import time
from dataclasses import asdict, dataclass
from typing import Any, Dict, List, Optional, Sequence

from .analytics import describe_node
from .compose import LayerDescriptor, ViewState
from .events import EmitFn, safe_emit
from .scene import Scene

SCENE_VERSION = "carbon_atlas.scene.v1"
INDEX_VERSION = "carbon_atlas.snapshot.index.v1"


def _write_json(path: str, obj: Any) -> str:
    os.makedirs(os.path.dirname(path) or ".", exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(obj, f, indent=2, ensure_ascii=False)
    return path


@dataclass
class SnapshotMeta:
    """Per-snapshot entry in the index."""
    name: str
    zoom: float
    search: str
    n_layers: int
    layer_ids: List[str]
    layers_file: str
    image: Optional[str] = None


# --------------------------------------------------------------------------- #
# Writers
# --------------------------------------------------------------------------- #

def scene_to_dict(scene: Scene) -> Dict[str, Any]:
    data = scene.to_dict()
    data["version"] = SCENE_VERSION
    data["timestamp"] = time.time()
    data["nodes"] = [describe_node(n) for n in scene.nodes]
    return data


def write_scene_json(out_dir: str, scene: Scene, emit: Optional[EmitFn] = None) -> str:
    path = _write_json(os.path.join(out_dir, "atlas_scene.json"), scene_to_dict(scene))
    safe_emit(emit, "artifact", {"kind": "atlas-scene", "path": path})
    return path


def write_layers_json(
    out_dir: str,
    name: str,
    layers: Sequence[LayerDescriptor],
    view: ViewState,
    emit: Optional[EmitFn] = None,
) -> str:
    doc = {
        "snapshot": name,
        "view": view.to_dict(),
        "layers": [layer.to_dict() for layer in layers],
    }
    path = _write_json(os.path.join(out_dir, f"{name}.layers.json"), doc)
    safe_emit(emit, "artifact", {"kind": "atlas-layers", "path": path, "snapshot": name})
    return path


def write_snapshots_index(
    out_dir: str,
    snapshots: Sequence[SnapshotMeta],
    *,
    scene: Optional[Scene] = None,
    emit: Optional[EmitFn] = None,
) -> str:
    index = {
        "version": INDEX_VERSION,
        "timestamp": time.time(),
        "snapshots": [asdict(s) for s in snapshots],
        "stats": scene.stats.to_dict() if scene is not None else None,
        "config": scene.config.to_dict() if scene is not None else None,
    }
    path = _write_json(os.path.join(out_dir, "atlas_snapshots_index.json"), index)
    safe_emit(emit, "artifact", {"kind": "atlas-snapshots-index", "path": path})
    return path
