"""
Carbon Atlas HTTP API.

A read-only FastAPI surface over one prebuilt Scene:

    GET /api/v1/atlas/summary
    GET /api/v1/atlas/view
    GET /api/v1/atlas/legend?zoom=
    GET /api/v1/atlas/layers?zoom=&search=
    GET /api/v1/atlas/nodes/{node_id}
    GET /api/v1/atlas/hierarchy

The scene is built once when the app is created; requests never mutate it.
"""

from __future__ import annotations

import logging
import os
from typing import Any, Dict, Optional

from fastapi import APIRouter, FastAPI, HTTPException, Query
from fastapi.middleware.cors import CORSMiddleware

from .analytics import describe_node
from .compose import compose_view
from .hierarchy import hierarchy_node_link
from .lod import active_kinds, legend_for_zoom
from .presets import AtlasConfig, load_config
from .scene import Scene, load_scene
from .search import search_nodes

logger = logging.getLogger(__name__)


def build_router(scene: Scene) -> APIRouter:
    router = APIRouter(prefix="/api/v1/atlas")
    view_cfg = scene.config.view

    def _zoom(zoom: Optional[float]) -> float:
        if zoom is None:
            return scene.initial_view().zoom
        return view_cfg.clamp_zoom(zoom)

    @router.get("/summary")
    async def api_summary() -> Dict[str, Any]:
        return {
            "stats": scene.stats.to_dict(),
            "bounds": scene.bounds.to_dict(),
            "n_nodes": len(scene.nodes),
        }

    @router.get("/view")
    async def api_view() -> Dict[str, Any]:
        return {
            **scene.initial_view().to_dict(),
            "min_zoom": view_cfg.min_zoom,
            "max_zoom": view_cfg.max_zoom,
        }

    @router.get("/legend")
    async def api_legend(zoom: Optional[float] = Query(None)) -> Dict[str, Any]:
        return legend_for_zoom(_zoom(zoom), scene.config.lod).to_dict()

    @router.get("/layers")
    async def api_layers(
        zoom: Optional[float] = Query(None),
        search: Optional[str] = Query(None),
    ) -> Dict[str, Any]:
        view = scene.initial_view().with_zoom(_zoom(zoom))
        matches = search_nodes(scene.nodes, search)
        if matches is not None:
            view = view.with_highlight(search or "", [n.id for n in matches])

        layers = compose_view(scene, view)
        return {
            "view": view.to_dict(),
            "active_kinds": sorted(k.value for k in active_kinds(view.zoom, scene.config.lod)),
            "layers": [layer.to_dict() for layer in layers],
        }

    @router.get("/nodes/{node_id:path}")
    async def api_node(node_id: str) -> Dict[str, Any]:
        node = scene.nodes.get(node_id)
        if node is None:
            raise HTTPException(404, f"Node {node_id} not found")
        return describe_node(node, scene.nodes)

    @router.get("/hierarchy")
    async def api_hierarchy() -> Dict[str, Any]:
        return hierarchy_node_link(scene.nodes)

    return router


def create_app(
    csv_path: Optional[str] = None,
    scene: Optional[Scene] = None,
    *,
    config: Optional[AtlasConfig] = None,
) -> FastAPI:
    """
    Build the app around ``scene``, or load one from ``csv_path``
    (falling back to the ATLAS_CSV environment variable).

    DatasetLoadError propagates: a server is never started on a partial scene.
    """
    if scene is None:
        path = csv_path or os.getenv("ATLAS_CSV")
        if not path:
            raise ValueError("create_app needs a scene, a csv_path or ATLAS_CSV")
        scene = load_scene(path, config=config or load_config())
        logger.info("[api] Loaded %s (%d nodes)", path, len(scene.nodes))

    app = FastAPI(title="Carbon Atlas API", version="1.0.0")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET"],
        allow_headers=["*"],
    )

    @app.get("/health")
    async def health() -> Dict[str, Any]:
        return {"status": "ok", "nodes": len(scene.nodes)}

    app.include_router(build_router(scene))
    return app
