"""
Graph view of the containment hierarchy.

The scene is a forest: departments are roots, every other node has exactly
one parent resolved through its ``parent_path``. networkx is used to
materialise that forest as a DiGraph (parent -> child) and to verify it.
"""

from __future__ import annotations

from typing import Any, Dict, List

import networkx as nx

from .errors import HierarchyError
from .nodes import NodeKind, NodeSet


def to_networkx(nodes: NodeSet) -> nx.DiGraph:
    """DiGraph with one vertex per node and an edge from each parent to its child."""
    G = nx.DiGraph()
    for n in nodes:
        metric = getattr(n, "metric", None)
        G.add_node(
            n.id,
            kind=NodeKind(n.kind).value,
            label=n.label,
            department=n.department,
            emissions=float(metric.emissions) if metric is not None else 0.0,
        )
    for n in nodes:
        parent = nodes.parent_of(n)
        if parent is not None:
            G.add_edge(parent.id, n.id)
    return G


def check_hierarchy(nodes: NodeSet) -> nx.DiGraph:
    """
    Raise HierarchyError unless every non-department node has a parent in
    the set, shares its department's colour, and the whole is a branching.
    """
    G = to_networkx(nodes)
    if G.number_of_nodes() == 0:
        return G

    for n in nodes:
        if n.kind is NodeKind.DEPARTMENT:
            if n.parent_path:
                raise HierarchyError(f"department {n.id} has a parent path")
            continue
        parent = nodes.parent_of(n)
        if parent is None:
            raise HierarchyError(f"{n.id} has no parent for path {n.parent_path!r}")
        if parent.color != n.color:
            raise HierarchyError(f"{n.id} colour differs from its parent {parent.id}")

    if not nx.is_branching(G):
        raise HierarchyError("node set is not a forest of single-parent trees")
    return G


def hierarchy_node_link(nodes: NodeSet) -> Dict[str, List[Dict[str, Any]]]:
    """JSON-ready ``{"nodes": [...], "links": [...]}`` for the hierarchy."""
    G = to_networkx(nodes)
    return {
        "nodes": [{"id": nid, **attrs} for nid, attrs in G.nodes(data=True)],
        "links": [{"source": u, "target": v} for u, v in G.edges()],
    }
