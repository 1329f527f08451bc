"""
Scene composition: positioned nodes + zoom -> ordered layer descriptors.

The rendering surface receives a bottom-to-top list of declarative layer
descriptors. Composition is a pure function of (nodes, zoom, highlight),
so recomputing it on every viewport change is cheap and re-invoking it
with the same arguments yields an equal list with the same layer ids.

Draw order:
    purpose / transport / route background discs
    trip markers
    transport, route, purpose labels
    department circles, department labels
    search highlight (always last)
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import TYPE_CHECKING, Any, Dict, FrozenSet, Iterable, List, Optional, Tuple, Union

import numpy as np

from .lod import label_visible, opacity
from .nodes import Node, NodeKind, NodeSet, text_size_of
from .palette import with_alpha
from .presets import DEFAULT_CONFIG, RGBA, AtlasConfig

if TYPE_CHECKING:
    from .scene import Scene


class LayerType(str, Enum):
    SCATTER = "ScatterplotLayer"
    TEXT = "TextLayer"


class RadiusRule(str, Enum):
    NODE = "node-radius"
    TRIP_EMISSION = "trip-emission"
    HIGHLIGHT = "highlight"


# =========================================================================== #
# Descriptors
# =========================================================================== #

@dataclass(frozen=True)
class LayerDescriptor:
    """One drawable batch: geometry source, styling and pickability."""

    id: str
    layer_type: LayerType
    data: Tuple[Node, ...]
    node_kind: Optional[NodeKind] = None
    pickable: bool = False
    opacity: float = 1.0
    position_scale: float = 0.005

    filled: bool = True
    stroked: bool = False
    fill_color: Optional[RGBA] = None  # None: the node's department colour
    line_color: Optional[RGBA] = None
    line_width: float = 0.0

    radius_rule: RadiusRule = RadiusRule.NODE
    radius_units: str = "common"
    radius_min_pixels: Optional[float] = None
    radius_max_pixels: Optional[float] = None
    default_text_size: float = 20.0

    text_size: Optional[float] = None
    text_color: Optional[RGBA] = None  # None: department colour at layer opacity
    text_background: Optional[RGBA] = None
    font_weight: int = 400

    def __len__(self) -> int:
        return len(self.data)

    # ------------------------------------------------------------------ #
    # Accessors
    # ------------------------------------------------------------------ #
    def position_of(self, node: Node) -> Tuple[float, float]:
        return node.x * self.position_scale, node.y * self.position_scale

    def radius_of(self, node: Node) -> float:
        if self.radius_rule is RadiusRule.TRIP_EMISSION:
            r = 2.0 + math.sqrt(max(0.0, node.metric.emissions) / 1000.0)  # type: ignore[attr-defined]
        elif self.radius_rule is RadiusRule.HIGHLIGHT:
            r = (text_size_of(node) or self.default_text_size) * 2.0
        else:
            r = node.radius
        # pixel bounds apply to pixel radii only
        if self.radius_units == "pixels":
            if self.radius_min_pixels is not None:
                r = max(self.radius_min_pixels, r)
            if self.radius_max_pixels is not None:
                r = min(self.radius_max_pixels, r)
        return float(r)

    def color_of(self, node: Node) -> RGBA:
        if self.layer_type is LayerType.TEXT:
            if self.text_color is not None:
                return self.text_color
            return with_alpha(node.color, self.opacity)
        if self.fill_color is not None:
            return self.fill_color
        return with_alpha(node.color, 1.0)

    def positions(self) -> np.ndarray:
        if not self.data:
            return np.zeros((0, 2))
        return np.array([self.position_of(n) for n in self.data], float)

    # ------------------------------------------------------------------ #
    def to_dict(self) -> Dict[str, Any]:
        records = []
        for n in self.data:
            rec: Dict[str, Any] = {
                "id": n.id,
                "position": list(self.position_of(n)),
                "color": list(self.color_of(n)),
            }
            if self.layer_type is LayerType.TEXT:
                rec["text"] = n.label
            else:
                rec["radius"] = self.radius_of(n)
            records.append(rec)

        return {
            "id": self.id,
            "type": self.layer_type.value,
            "kind": self.node_kind.value if self.node_kind else None,
            "pickable": self.pickable,
            "opacity": self.opacity,
            "filled": self.filled,
            "stroked": self.stroked,
            "line_color": list(self.line_color) if self.line_color else None,
            "line_width": self.line_width,
            "radius_units": self.radius_units,
            "radius_min_pixels": self.radius_min_pixels,
            "radius_max_pixels": self.radius_max_pixels,
            "text_size": self.text_size,
            "text_background": list(self.text_background) if self.text_background else None,
            "font_weight": self.font_weight,
            "data": records,
        }


# =========================================================================== #
# View state
# =========================================================================== #

@dataclass(frozen=True)
class ViewState:
    """Camera + search state threaded through each recomputation."""

    zoom: float
    longitude: float = 0.0
    latitude: float = 0.0
    search_term: str = ""
    highlight_ids: FrozenSet[str] = field(default_factory=frozenset)

    def with_zoom(self, zoom: float, longitude: Optional[float] = None, latitude: Optional[float] = None) -> "ViewState":
        return replace(
            self,
            zoom=float(zoom),
            longitude=self.longitude if longitude is None else float(longitude),
            latitude=self.latitude if latitude is None else float(latitude),
        )

    def with_highlight(self, term: str, ids: Iterable[str]) -> "ViewState":
        return replace(self, search_term=term, highlight_ids=frozenset(ids))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "zoom": self.zoom,
            "longitude": self.longitude,
            "latitude": self.latitude,
            "search_term": self.search_term,
            "highlight_count": len(self.highlight_ids),
        }


# =========================================================================== #
# Label sizes (shrink as the camera closes in)
# =========================================================================== #

def department_label_size(zoom: float) -> float:
    return max(8.0, 24.0 - zoom * 0.8)


def purpose_label_size(zoom: float) -> float:
    return max(8.0, 14.0 - zoom * 0.3)


def transport_label_size(zoom: float) -> float:
    return max(6.0, 12.0 - zoom * 0.2)


def route_label_size(zoom: float) -> float:
    return max(5.0, 10.0 - zoom * 0.15)


# =========================================================================== #
# Composition
# =========================================================================== #

def _as_node_set(nodes: Union[NodeSet, Iterable[Node]]) -> NodeSet:
    return nodes if isinstance(nodes, NodeSet) else NodeSet(nodes)


def _highlight_ids(highlight: Optional[Iterable[Union[Node, str]]]) -> FrozenSet[str]:
    if not highlight:
        return frozenset()
    return frozenset(h.id if isinstance(h, Node) else str(h) for h in highlight)


def compose(
    nodes: Union[NodeSet, Iterable[Node]],
    zoom: float,
    highlight: Optional[Iterable[Union[Node, str]]] = None,
    *,
    config: Optional[AtlasConfig] = None,
) -> List[LayerDescriptor]:
    """
    Build the bottom-to-top layer list for a zoom value.

    ``highlight`` may hold nodes or node ids; matches are drawn in node-set
    order on a final layer regardless of zoom.
    """
    cfg = config or DEFAULT_CONFIG
    lod = cfg.lod
    style = cfg.style
    scale = cfg.view.position_scale
    node_set = _as_node_set(nodes)
    zoom = float(zoom)

    layers: List[LayerDescriptor] = []

    def visible(kind: NodeKind) -> Tuple[float, Tuple[Node, ...]]:
        op = opacity(kind, zoom, lod)
        if op <= 0.0:
            return 0.0, ()
        return op, node_set.of_kind(kind)

    # 1-3. Group background discs
    backgrounds = (
        (NodeKind.PURPOSE, "purpose-highlight-layer", style.purpose_background_opacity, None),
        (NodeKind.TRANSPORT, "transport-highlight-layer", style.transport_background_opacity, style.transport_outline),
        (NodeKind.ROUTE, "route-highlight-layer", style.route_background_opacity, style.route_outline),
    )
    for kind, layer_id, base_opacity, outline in backgrounds:
        op, data = visible(kind)
        if not data:
            continue
        layers.append(LayerDescriptor(
            id=layer_id,
            layer_type=LayerType.SCATTER,
            data=data,
            node_kind=kind,
            pickable=False,
            opacity=base_opacity * op,
            position_scale=scale,
            stroked=outline is not None,
            line_color=outline,
            line_width=1.0 if outline is not None else 0.0,
        ))

    # 4. Trip markers
    op, data = visible(NodeKind.TRIP)
    if data:
        layers.append(LayerDescriptor(
            id="trip-layer",
            layer_type=LayerType.SCATTER,
            data=data,
            node_kind=NodeKind.TRIP,
            pickable=True,
            opacity=op,
            position_scale=scale,
            radius_rule=RadiusRule.TRIP_EMISSION,
            radius_units="pixels",
            radius_min_pixels=style.trip_radius_min_pixels,
            radius_max_pixels=style.trip_radius_max_pixels,
        ))

    # 5-7. Group labels
    labels = (
        (NodeKind.TRANSPORT, "transport-label-layer", transport_label_size(zoom), style.transport_label_color),
        (NodeKind.ROUTE, "route-label-layer", route_label_size(zoom), style.route_label_color),
        (NodeKind.PURPOSE, "purpose-label-layer", purpose_label_size(zoom), style.purpose_label_color),
    )
    for kind, layer_id, size, color in labels:
        if not label_visible(kind, zoom, lod):
            continue
        op, data = visible(kind)
        if not data:
            continue
        layers.append(LayerDescriptor(
            id=layer_id,
            layer_type=LayerType.TEXT,
            data=data,
            node_kind=kind,
            pickable=False,
            opacity=op,
            position_scale=scale,
            text_size=size,
            text_color=color,
            text_background=style.label_background,
        ))

    # 8. Departments: circle first so the label is never occluded
    op, data = visible(NodeKind.DEPARTMENT)
    if data:
        layers.append(LayerDescriptor(
            id="department-circle-layer",
            layer_type=LayerType.SCATTER,
            data=data,
            node_kind=NodeKind.DEPARTMENT,
            pickable=True,
            opacity=op,
            position_scale=scale,
            radius_min_pixels=style.department_radius_min_pixels,
            radius_max_pixels=style.department_radius_max_pixels,
        ))
        layers.append(LayerDescriptor(
            id="department-text-layer",
            layer_type=LayerType.TEXT,
            data=data,
            node_kind=NodeKind.DEPARTMENT,
            pickable=True,
            opacity=op,
            position_scale=scale,
            text_size=department_label_size(zoom),
            text_background=with_alpha((15, 23, 42), 200 / 255.0 * op),
            font_weight=900,
        ))

    # 9. Search highlight on top of everything
    ids = _highlight_ids(highlight)
    if ids:
        matches = tuple(n for n in node_set if n.id in ids)
        if matches:
            layers.append(LayerDescriptor(
                id="search-highlight",
                layer_type=LayerType.SCATTER,
                data=matches,
                pickable=False,
                opacity=1.0,
                position_scale=scale,
                stroked=True,
                fill_color=style.highlight_fill,
                line_color=style.highlight_line,
                line_width=2.0,
                radius_rule=RadiusRule.HIGHLIGHT,
                radius_units="pixels",
                default_text_size=style.highlight_default_text_size,
            ))

    return layers


def compose_view(scene: "Scene", view: ViewState) -> List[LayerDescriptor]:
    return compose(scene.nodes, view.zoom, view.highlight_ids, config=scene.config)


def layer_ids(layers: Iterable[LayerDescriptor]) -> List[str]:
    return [layer.id for layer in layers]
