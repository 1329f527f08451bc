"""
Event-driven atlas controller.

An ``AtlasSession`` owns one immutable Scene and the current ViewState.
Viewport and search events replace the ViewState and recompose the
layer list synchronously; search input goes through a debouncer and is
applied by ``tick()`` once the quiet period has elapsed.
"""

from __future__ import annotations

import logging
import math
import time
from typing import Any, Callable, Dict, List, Optional

from .analytics import describe_node
from .compose import LayerDescriptor, ViewState, compose_view, layer_ids
from .events import EmitFn, log_event, safe_emit
from .lod import LegendInfo, legend_for_zoom
from .scene import Scene
from .search import SearchDebouncer, search_nodes

logger = logging.getLogger(__name__)


class AtlasSession:
    def __init__(
        self,
        scene: Scene,
        *,
        emit: Optional[EmitFn] = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.scene = scene
        self.emit = emit
        self.view: ViewState = scene.initial_view()
        self._debouncer = SearchDebouncer(scene.config.view.search_debounce_ms, clock)
        self._layers: List[LayerDescriptor] = compose_view(scene, self.view)

    # ------------------------------------------------------------------ #
    @property
    def layers(self) -> List[LayerDescriptor]:
        return list(self._layers)

    @property
    def search_pending(self) -> bool:
        return self._debouncer.pending

    def _recompute(self, reason: str) -> List[LayerDescriptor]:
        self._layers = compose_view(self.scene, self.view)
        safe_emit(self.emit, "layers", {
            "reason": reason,
            "zoom": self.view.zoom,
            "layer_ids": layer_ids(self._layers),
        })
        return self.layers

    # ------------------------------------------------------------------ #
    # Events
    # ------------------------------------------------------------------ #
    def on_view_state_change(
        self,
        zoom: float,
        longitude: Optional[float] = None,
        latitude: Optional[float] = None,
    ) -> List[LayerDescriptor]:
        """Apply a camera change (zoom clamped to the configured bounds)."""
        zoom = float(zoom)
        if math.isnan(zoom):
            zoom = self.view.zoom
        zoom = self.scene.config.view.clamp_zoom(zoom)
        self.view = self.view.with_zoom(zoom, longitude, latitude)
        return self._recompute("view")

    def on_search_input(self, term: str) -> None:
        self._debouncer.push(term)

    def tick(self) -> bool:
        """Apply a settled search term; True when the layers were recomposed."""
        term = self._debouncer.poll()
        if term is None:
            return False
        self.apply_search(term)
        return True

    def apply_search(self, term: str) -> List[LayerDescriptor]:
        matches = search_nodes(self.scene.nodes, term)
        ids = [n.id for n in matches] if matches else []
        self.view = self.view.with_highlight(term if matches is not None else "", ids)
        if matches is not None:
            log_event(f"[session] search {term!r}: {len(ids)} matches", self.emit, level="debug", log=logger)
        return self._recompute("search")

    # ------------------------------------------------------------------ #
    # Read-outs
    # ------------------------------------------------------------------ #
    def pick(self, node_id: str) -> Optional[Dict[str, Any]]:
        node = self.scene.nodes.get(node_id)
        if node is None:
            return None
        return describe_node(node, self.scene.nodes)

    def legend(self) -> LegendInfo:
        return legend_for_zoom(self.view.zoom, self.scene.config.lod)

    def summary(self) -> Dict[str, Any]:
        return {
            "stats": self.scene.stats.to_dict(),
            "view": self.view.to_dict(),
            "legend": self.legend().to_dict(),
        }
