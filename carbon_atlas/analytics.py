"""
Read-outs for the atlas: scene totals, emission formatting and the
payload handed to a tooltip when a node is picked.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional

from .nodes import Node, NodeKind, NodeSet, Trip


@dataclass(frozen=True)
class SceneStats:
    total_emissions: float
    department_count: int
    trip_count: int
    processed_rows: int = 0
    skipped_rows: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "total_emissions": self.total_emissions,
            "total_emissions_label": format_emissions(self.total_emissions),
            "department_count": self.department_count,
            "trip_count": self.trip_count,
            "processed_rows": self.processed_rows,
            "skipped_rows": self.skipped_rows,
        }


def compute_scene_stats(
    nodes: NodeSet,
    *,
    processed_rows: Optional[int] = None,
    skipped_rows: int = 0,
) -> SceneStats:
    """Totals derived from the department nodes (one pass, no re-aggregation)."""
    depts = nodes.departments
    total = float(sum(d.metric.emissions for d in depts))
    trips = len(nodes.trips)
    return SceneStats(
        total_emissions=total,
        department_count=len(depts),
        trip_count=trips,
        processed_rows=trips if processed_rows is None else int(processed_rows),
        skipped_rows=int(skipped_rows),
    )


def format_emissions(value: float) -> str:
    """kg figure with K/M suffixes and two decimals, e.g. 1234 -> '1.23K'."""
    v = float(value)
    if abs(v) >= 1_000_000:
        return f"{v / 1_000_000:.2f}M"
    if abs(v) >= 1_000:
        return f"{v / 1_000:.2f}K"
    return f"{v:.2f}"


def describe_node(node: Node, nodes: Optional[NodeSet] = None) -> Dict[str, Any]:
    """
    Tooltip payload for a picked node.

    Groups report summed emissions and trip count, trips report their own
    emission and cost plus the route they belong to.
    """
    info: Dict[str, Any] = {
        "id": node.id,
        "kind": NodeKind(node.kind).value,
        "label": node.label,
        "department": node.department,
        "color": list(node.color),
        "position": [node.x, node.y],
    }

    metric = getattr(node, "metric", None)
    if isinstance(node, Trip):
        info["route"] = node.route
        info["emissions"] = node.metric.emissions
        info["cost"] = node.metric.cost
        info["trip_id"] = node.source_id
    elif metric is not None:
        info["emissions"] = metric.emissions
        info["trips"] = metric.count
    if "emissions" in info:
        info["emissions_label"] = format_emissions(info["emissions"])

    if len(node.parent_path) > 1:
        info["purpose"] = node.parent_path[1]
    if len(node.parent_path) > 2:
        info["transport"] = node.parent_path[2]

    if nodes is not None:
        info["children"] = len(nodes.children_of(node))

    return info
