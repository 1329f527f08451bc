"""
Carbon Atlas package.

Travel-emission records aggregated into a department hierarchy, laid out
radially, and composed into zoom-dependent layer lists for a 2D surface.
"""

# ---------------------------------------------------------------------------
# High-level visualiser and session API
# ---------------------------------------------------------------------------
from .visualizer import (
    CarbonAtlasVisualizer,
    generate_atlas_views,
    render_snapshot,
)
from .session import AtlasSession
from .scene import Scene, SceneBounds, build_scene, load_scene

# ---------------------------------------------------------------------------
# Configuration and presets
# ---------------------------------------------------------------------------
from .presets import (
    AtlasConfig,
    LayoutConfig,
    LodConfig,
    ViewConfig,
    VisualStyle,
    SnapshotSpec,
    ZoomWindow,
    DEFAULT_CONFIG,
    load_config,
)

# ---------------------------------------------------------------------------
# Records, aggregation and nodes
# ---------------------------------------------------------------------------
from .records import Row, ColumnMap, DEFAULT_COLUMNS
from .aggregate import aggregate, HierarchyForest
from .nodes import (
    NodeKind,
    Node,
    Department,
    PurposeGroup,
    TransportGroup,
    RouteGroup,
    Trip,
    NodeSet,
)

# ---------------------------------------------------------------------------
# Layout, LOD and composition
# ---------------------------------------------------------------------------
from .layout import compute_layout
from .lod import opacity, active_kinds, label_visible, legend_for_zoom, LegendInfo
from .compose import compose, compose_view, LayerDescriptor, LayerType, ViewState

# ---------------------------------------------------------------------------
# Loader, analytics, search, hierarchy
# ---------------------------------------------------------------------------
from .loader import read_emissions_table, load_rows, write_loading_report
from .analytics import SceneStats, describe_node, format_emissions
from .search import search_nodes, SearchDebouncer
from .hierarchy import check_hierarchy, to_networkx

# ---------------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------------
from .errors import AtlasError, DatasetLoadError, HierarchyError

# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------
__all__ = [
    # Driver and session
    "CarbonAtlasVisualizer",
    "generate_atlas_views",
    "render_snapshot",
    "AtlasSession",
    "Scene",
    "SceneBounds",
    "build_scene",
    "load_scene",

    # Config
    "AtlasConfig",
    "LayoutConfig",
    "LodConfig",
    "ViewConfig",
    "VisualStyle",
    "SnapshotSpec",
    "ZoomWindow",
    "DEFAULT_CONFIG",
    "load_config",

    # Records and nodes
    "Row",
    "ColumnMap",
    "DEFAULT_COLUMNS",
    "aggregate",
    "HierarchyForest",
    "NodeKind",
    "Node",
    "Department",
    "PurposeGroup",
    "TransportGroup",
    "RouteGroup",
    "Trip",
    "NodeSet",

    # Layout / LOD / composition
    "compute_layout",
    "opacity",
    "active_kinds",
    "label_visible",
    "legend_for_zoom",
    "LegendInfo",
    "compose",
    "compose_view",
    "LayerDescriptor",
    "LayerType",
    "ViewState",

    # Loader / analytics / search / hierarchy
    "read_emissions_table",
    "load_rows",
    "write_loading_report",
    "SceneStats",
    "describe_node",
    "format_emissions",
    "search_nodes",
    "SearchDebouncer",
    "check_hierarchy",
    "to_networkx",

    # Errors
    "AtlasError",
    "DatasetLoadError",
    "HierarchyError",
]
