"""
Preset configuration for the carbon atlas.

Reference constants for layout, level-of-detail windows, camera bounds
and styling. Everything is a plain dataclass so a configuration can be
written next to exported snapshots for reproducibility.
"""

from __future__ import annotations

import math
import os
from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from .nodes import NodeKind


RGBA = Tuple[int, int, int, int]


# --------------------------------------------------------------------------- #
# Zoom windows
# --------------------------------------------------------------------------- #

@dataclass(frozen=True)
class ZoomWindow:
    """Half-open visibility window ``[min, max)`` on the zoom axis."""

    min: float = 0.0
    max: float = math.inf
    fade: float = 0.5  # linear fade-out before a finite max

    def contains(self, zoom: float) -> bool:
        return self.min <= zoom < self.max

    def opacity(self, zoom: float) -> float:
        if math.isnan(zoom):
            return 0.0
        if zoom < self.min or zoom >= self.max:
            return 0.0
        if self.fade > 0 and zoom > self.max - self.fade:
            return (self.max - zoom) / self.fade
        return 1.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "min": self.min,
            "max": None if math.isinf(self.max) else self.max,
            "fade": self.fade,
        }


def _default_windows() -> Dict[NodeKind, ZoomWindow]:
    return {
        NodeKind.DEPARTMENT: ZoomWindow(0.0),
        NodeKind.TRIP: ZoomWindow(4.0),
        NodeKind.PURPOSE: ZoomWindow(4.0),
        NodeKind.TRANSPORT: ZoomWindow(6.0),
        NodeKind.ROUTE: ZoomWindow(7.5),
    }


def _default_label_windows() -> Dict[NodeKind, ZoomWindow]:
    # Group labels vanish again once routes dominate the view
    return {
        NodeKind.PURPOSE: ZoomWindow(4.0, 12.0, fade=0.0),
        NodeKind.TRANSPORT: ZoomWindow(6.0, 12.0, fade=0.0),
        NodeKind.ROUTE: ZoomWindow(7.5),
    }


# --------------------------------------------------------------------------- #
# Layout
# --------------------------------------------------------------------------- #

@dataclass
class LayoutConfig:
    spacing: float = 700.0
    golden_angle_deg: float = 137.508

    dept_cluster_radius: float = 180.0
    purpose_group_radius: float = 75.0
    transport_group_radius: float = 22.0
    route_group_radius: float = 6.0

    transport_ring_factor: float = 0.65
    route_ring_factor: float = 0.6
    trip_disk_factor: float = 0.8

    # Visual footprint padding on top of the group radii
    purpose_radius_pad: float = 20.0
    transport_radius_pad: float = 10.0
    route_radius_pad: float = 2.0

    dept_base_radius: float = 100.0
    dept_radius_factor: float = 0.5

    dept_text_base: float = 32.0
    dept_text_factor: float = 12.0
    dept_text_scale: float = 2000.0
    trip_text_size: float = 8.0

    # None keeps trip placement non-reproducible
    trip_seed: Optional[int] = None


@dataclass
class LodConfig:
    windows: Dict[NodeKind, ZoomWindow] = field(default_factory=_default_windows)
    label_windows: Dict[NodeKind, ZoomWindow] = field(default_factory=_default_label_windows)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "windows": {k.value: w.to_dict() for k, w in self.windows.items()},
            "label_windows": {k.value: w.to_dict() for k, w in self.label_windows.items()},
        }


@dataclass
class ViewConfig:
    position_scale: float = 0.005
    initial_zoom: float = 3.5
    min_zoom: float = -2.0
    max_zoom: float = 20.0
    search_debounce_ms: float = 200.0

    def clamp_zoom(self, zoom: float) -> float:
        return min(self.max_zoom, max(self.min_zoom, float(zoom)))


# --------------------------------------------------------------------------- #
# Visual style
# --------------------------------------------------------------------------- #

@dataclass
class VisualStyle:
    background_color: str = "#0f172a"
    label_background: RGBA = (15, 23, 42, 200)

    purpose_background_opacity: float = 0.2
    transport_background_opacity: float = 0.3
    route_background_opacity: float = 0.4
    transport_outline: RGBA = (255, 255, 255, 100)
    route_outline: RGBA = (255, 255, 255, 150)

    purpose_label_color: RGBA = (226, 232, 240, 255)
    transport_label_color: RGBA = (203, 213, 225, 255)
    route_label_color: RGBA = (248, 250, 252, 255)

    trip_radius_min_pixels: float = 2.0
    trip_radius_max_pixels: float = 8.0
    department_radius_min_pixels: float = 10.0
    department_radius_max_pixels: float = 300.0

    highlight_fill: RGBA = (255, 255, 0, 100)
    highlight_line: RGBA = (255, 255, 0, 255)
    highlight_default_text_size: float = 20.0

    dpi: int = 160

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


# --------------------------------------------------------------------------- #
# Snapshots + top-level config
# --------------------------------------------------------------------------- #

@dataclass
class SnapshotSpec:
    name: str
    zoom: float
    search: str = ""


def _default_snapshots() -> List[SnapshotSpec]:
    return [
        SnapshotSpec(name="atlas_departments", zoom=3.5),
        SnapshotSpec(name="atlas_purposes", zoom=5.0),
        SnapshotSpec(name="atlas_transport", zoom=6.5),
        SnapshotSpec(name="atlas_routes", zoom=8.0),
    ]


@dataclass
class AtlasConfig:
    """
    High-level configuration used by the scene builder, composer and
    batch visualiser; written into exported indexes.
    """

    layout: LayoutConfig = field(default_factory=LayoutConfig)
    lod: LodConfig = field(default_factory=LodConfig)
    view: ViewConfig = field(default_factory=ViewConfig)
    style: VisualStyle = field(default_factory=VisualStyle)
    snapshots: List[SnapshotSpec] = field(default_factory=_default_snapshots)

    version: str = "carbon_atlas.scene.v1"

    def ensure_defaults(self) -> None:
        """Idempotent normalisation hook for callers that set fields to None."""
        if self.layout is None:
            self.layout = LayoutConfig()
        if self.lod is None:
            self.lod = LodConfig()
        if self.view is None:
            self.view = ViewConfig()
        if self.style is None:
            self.style = VisualStyle()
        if not self.snapshots:
            self.snapshots = _default_snapshots()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "layout": asdict(self.layout),
            "lod": self.lod.to_dict(),
            "view": asdict(self.view),
            "style": self.style.to_dict(),
            "snapshots": [asdict(s) for s in self.snapshots],
            "version": self.version,
        }


DEFAULT_CONFIG = AtlasConfig()


def load_config() -> AtlasConfig:
    """
    Build an AtlasConfig from environment variables, falling back to defaults.

    Recognized variables:
        ATLAS_SPACING              (department spiral spacing, map units)
        ATLAS_TRIP_SEED            (integer seed for trip placement)
        ATLAS_SEARCH_DEBOUNCE_MS   (search quiet period)
        ATLAS_INITIAL_ZOOM         (camera zoom at start)
        ATLAS_POSITION_SCALE       (map units -> surface coordinates)
    """

    def _env_float(name: str, default: float) -> float:
        val = os.getenv(name)
        if val is None or not val.strip():
            return default
        return float(val)

    seed_raw = os.getenv("ATLAS_TRIP_SEED")
    seed = int(seed_raw) if seed_raw and seed_raw.strip() else None

    layout = LayoutConfig(
        spacing=_env_float("ATLAS_SPACING", LayoutConfig.spacing),
        trip_seed=seed,
    )
    view = ViewConfig(
        position_scale=_env_float("ATLAS_POSITION_SCALE", ViewConfig.position_scale),
        initial_zoom=_env_float("ATLAS_INITIAL_ZOOM", ViewConfig.initial_zoom),
        search_debounce_ms=_env_float("ATLAS_SEARCH_DEBOUNCE_MS", ViewConfig.search_debounce_ms),
    )
    return AtlasConfig(layout=layout, view=view)
