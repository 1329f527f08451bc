"""
Level-of-detail policy.

Pure functions of the zoom value: which node kinds are visible, at what
opacity, which group labels are shown, and what the legend should say.
No history is kept, so the same zoom always yields the same answer.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, FrozenSet, Optional, Tuple

from .nodes import RGB, NodeKind
from .palette import DEPARTMENT_COLORS, PURPOSE_COLORS
from .presets import DEFAULT_CONFIG, LodConfig, ZoomWindow


def _windows(lod: Optional[LodConfig]) -> Dict[NodeKind, ZoomWindow]:
    return (lod or DEFAULT_CONFIG.lod).windows


def _as_kind(kind) -> Optional[NodeKind]:
    try:
        return NodeKind(kind)
    except ValueError:
        return None


def opacity(kind: NodeKind, zoom: float, lod: Optional[LodConfig] = None) -> float:
    """Opacity in [0, 1] for a node kind at a zoom; unknown kinds are hidden."""
    window = _windows(lod).get(_as_kind(kind))
    if window is None:
        return 0.0
    return window.opacity(float(zoom))


def active_kinds(zoom: float, lod: Optional[LodConfig] = None) -> FrozenSet[NodeKind]:
    return frozenset(k for k in _windows(lod) if opacity(k, zoom, lod) > 0.0)


def label_visible(kind: NodeKind, zoom: float, lod: Optional[LodConfig] = None) -> bool:
    window = (lod or DEFAULT_CONFIG.lod).label_windows.get(_as_kind(kind))
    if window is None:
        return False
    return window.opacity(float(zoom)) > 0.0


# =========================================================================== #
# Legend read-out
# =========================================================================== #

@dataclass(frozen=True)
class LegendInfo:
    title: str
    hint: str
    swatches: Tuple[Tuple[str, RGB], ...]
    more: int = 0

    def to_dict(self) -> Dict[str, object]:
        return {
            "title": self.title,
            "hint": self.hint,
            "swatches": [{"name": n, "color": list(c)} for n, c in self.swatches],
            "more": self.more,
        }


def legend_for_zoom(
    zoom: float,
    lod: Optional[LodConfig] = None,
    *,
    max_department_swatches: int = 5,
) -> LegendInfo:
    """Legend title, hint and colour swatches for the deepest visible level."""
    purposes = tuple(PURPOSE_COLORS.items())

    if opacity(NodeKind.ROUTE, zoom, lod) > 0:
        return LegendInfo("Route Clusters", "Grouped by Origin → Destination", purposes)
    if opacity(NodeKind.TRANSPORT, zoom, lod) > 0:
        return LegendInfo("Transport Modes", "Zoom for Routes", purposes)
    if opacity(NodeKind.PURPOSE, zoom, lod) > 0:
        return LegendInfo("Trip Purposes", "Colored by trip type", purposes)

    depts = tuple(DEPARTMENT_COLORS.items())
    shown = depts[:max_department_swatches]
    return LegendInfo(
        "Department Clusters",
        "Zoom in to explore",
        shown,
        more=len(depts) - len(shown),
    )
