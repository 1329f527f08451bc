from __future__ import annotations

import pytest

from carbon_atlas.errors import HierarchyError
from carbon_atlas.hierarchy import check_hierarchy, hierarchy_node_link, to_networkx
from carbon_atlas.nodes import Department, GroupMetric, NodeKind, NodeSet, PurposeGroup, group_id


def test_scene_is_a_branching(scene) -> None:
    G = check_hierarchy(scene.nodes)
    assert G.number_of_nodes() == len(scene.nodes)
    assert G.number_of_edges() == len(scene.nodes) - len(scene.nodes.departments)
    for dept in scene.nodes.departments:
        assert G.in_degree(dept.id) == 0


def test_children_follow_parent_paths(scene) -> None:
    sales = scene.nodes["dept:Sales"]
    children = scene.nodes.children_of(sales)
    assert {c.label for c in children} == {"Customer Visit", "Training"}
    assert all(c.kind is NodeKind.PURPOSE for c in children)

    G = to_networkx(scene.nodes)
    assert set(G.successors("dept:Sales")) == {c.id for c in children}


def test_orphan_is_rejected() -> None:
    orphan = PurposeGroup(
        id=group_id(NodeKind.PURPOSE, ("Ghost", "Training")),
        label="Training",
        x=0.0,
        y=0.0,
        radius=95.0,
        color=(1, 2, 3),
        parent_path=("Ghost",),
        metric=GroupMetric(1.0, 1),
    )
    with pytest.raises(HierarchyError):
        check_hierarchy(NodeSet([orphan]))


def test_colour_mismatch_is_rejected() -> None:
    dept = Department(
        id="dept:HR", label="HR", x=0.0, y=0.0, radius=100.0, color=(1, 1, 1),
        parent_path=(), metric=GroupMetric(1.0, 1), text_size=32.0,
    )
    purpose = PurposeGroup(
        id="purpose:HR/Other", label="Other", x=0.0, y=0.0, radius=95.0, color=(9, 9, 9),
        parent_path=("HR",), metric=GroupMetric(1.0, 1),
    )
    with pytest.raises(HierarchyError):
        check_hierarchy(NodeSet([dept, purpose]))


def test_duplicate_ids_are_rejected(scene) -> None:
    dept = scene.nodes.departments[0]
    with pytest.raises(ValueError):
        NodeSet([dept, dept])


def test_node_link_export(scene) -> None:
    data = hierarchy_node_link(scene.nodes)
    assert len(data["nodes"]) == len(scene.nodes)
    assert {"source": "dept:Sales", "target": "purpose:Sales/Training"} in data["links"]
    assert data["nodes"][0]["kind"] == "department"
