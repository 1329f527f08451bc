"""
Node model for the atlas scene.

Five frozen node variants share a common shape (id, label, position,
radius, colour, parent path). Ancestry is expressed by ``parent_path``
rather than object references; ``NodeSet`` resolves it through a lookup
table, so the scene stays an acyclic arena that compares structurally.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import ClassVar, Dict, FrozenSet, Iterable, Iterator, List, Optional, Sequence, Tuple


RGB = Tuple[int, int, int]
Path = Tuple[str, ...]


# =========================================================================== #
# Kinds and ids
# =========================================================================== #

class NodeKind(str, Enum):
    DEPARTMENT = "department"
    PURPOSE = "purpose-group"
    TRANSPORT = "transport-group"
    ROUTE = "route-group"
    TRIP = "trip"


_ID_PREFIX: Dict[NodeKind, str] = {
    NodeKind.DEPARTMENT: "dept",
    NodeKind.PURPOSE: "purpose",
    NodeKind.TRANSPORT: "transport",
    NodeKind.ROUTE: "route",
    NodeKind.TRIP: "trip",
}


def _escape(part: str) -> str:
    return part.replace("\\", "\\\\").replace("/", "\\/")


def group_id(kind: NodeKind, path: Sequence[str]) -> str:
    """Id of a grouping node from its full path, e.g. ``purpose:Sales/Training``."""
    return f"{_ID_PREFIX[kind]}:" + "/".join(_escape(p) for p in path)


def trip_id(source_id: Optional[str], row_index: int) -> str:
    """Id of a trip; ``trip@<row>`` is used when the source id is unusable."""
    if source_id:
        return f"trip:{_escape(source_id)}"
    return f"trip@{row_index}"


# =========================================================================== #
# Metrics
# =========================================================================== #

@dataclass(frozen=True)
class GroupMetric:
    emissions: float
    count: int


@dataclass(frozen=True)
class TripMetric:
    emissions: float
    cost: float


# =========================================================================== #
# Node variants
# =========================================================================== #

@dataclass(frozen=True)
class Node:
    id: str
    label: str
    x: float
    y: float
    radius: float
    color: RGB
    parent_path: Path

    kind: ClassVar[NodeKind]

    @property
    def position(self) -> Tuple[float, float]:
        return self.x, self.y

    @property
    def department(self) -> str:
        return self.parent_path[0] if self.parent_path else self.label

    @property
    def path(self) -> Path:
        return self.parent_path + (self.label,)


@dataclass(frozen=True)
class Department(Node):
    metric: GroupMetric
    text_size: float

    kind: ClassVar[NodeKind] = NodeKind.DEPARTMENT


@dataclass(frozen=True)
class PurposeGroup(Node):
    metric: GroupMetric

    kind: ClassVar[NodeKind] = NodeKind.PURPOSE


@dataclass(frozen=True)
class TransportGroup(Node):
    metric: GroupMetric

    kind: ClassVar[NodeKind] = NodeKind.TRANSPORT


@dataclass(frozen=True)
class RouteGroup(Node):
    metric: GroupMetric

    kind: ClassVar[NodeKind] = NodeKind.ROUTE


@dataclass(frozen=True)
class Trip(Node):
    metric: TripMetric
    text_size: float
    source_id: Optional[str] = None

    kind: ClassVar[NodeKind] = NodeKind.TRIP

    @property
    def route(self) -> str:
        return self.parent_path[-1] if self.parent_path else ""

    @property
    def path(self) -> Path:
        return self.parent_path + (self.id,)


def text_size_of(node: Node) -> Optional[float]:
    return getattr(node, "text_size", None)


# =========================================================================== #
# Arena
# =========================================================================== #

class NodeSet:
    """
    Immutable, ordered collection of positioned nodes indexed by id.

    Parent links are resolved through ``parent_path`` -> id, so nodes never
    hold references to one another.
    """

    def __init__(self, nodes: Iterable[Node] = ()) -> None:
        self._nodes: Tuple[Node, ...] = tuple(nodes)
        self._by_id: Dict[str, Node] = {}
        self._by_path: Dict[Path, str] = {}
        self._by_kind: Dict[NodeKind, List[Node]] = {k: [] for k in NodeKind}
        self._children: Dict[str, List[Node]] = {}

        for n in self._nodes:
            if n.id in self._by_id:
                raise ValueError(f"duplicate node id: {n.id}")
            self._by_id[n.id] = n
            self._by_kind[n.kind].append(n)
            if n.kind is not NodeKind.TRIP:
                self._by_path[n.path] = n.id

        for n in self._nodes:
            parent_id = self._by_path.get(n.parent_path) if n.parent_path else None
            if parent_id is not None:
                self._children.setdefault(parent_id, []).append(n)

    # ------------------------------------------------------------------ #
    def __len__(self) -> int:
        return len(self._nodes)

    def __iter__(self) -> Iterator[Node]:
        return iter(self._nodes)

    def __contains__(self, node_id: object) -> bool:
        return node_id in self._by_id

    def __getitem__(self, node_id: str) -> Node:
        return self._by_id[node_id]

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, NodeSet):
            return NotImplemented
        return self._nodes == other._nodes

    def __hash__(self) -> int:
        return hash(self._nodes)

    def __repr__(self) -> str:
        counts = ", ".join(f"{k.value}={len(v)}" for k, v in self._by_kind.items() if v)
        return f"<NodeSet {len(self)} nodes: {counts}>"

    # ------------------------------------------------------------------ #
    @property
    def nodes(self) -> Tuple[Node, ...]:
        return self._nodes

    @property
    def ids(self) -> FrozenSet[str]:
        return frozenset(self._by_id)

    def get(self, node_id: str) -> Optional[Node]:
        return self._by_id.get(node_id)

    def of_kind(self, kind: NodeKind) -> Tuple[Node, ...]:
        return tuple(self._by_kind[NodeKind(kind)])

    @property
    def departments(self) -> Tuple[Department, ...]:
        return self.of_kind(NodeKind.DEPARTMENT)  # type: ignore[return-value]

    @property
    def trips(self) -> Tuple[Trip, ...]:
        return self.of_kind(NodeKind.TRIP)  # type: ignore[return-value]

    def parent_of(self, node: Node) -> Optional[Node]:
        if not node.parent_path:
            return None
        parent_id = self._by_path.get(node.parent_path)
        return self._by_id.get(parent_id) if parent_id is not None else None

    def children_of(self, node: Node) -> Tuple[Node, ...]:
        return tuple(self._children.get(node.id, ()))

    def department_of(self, node: Node) -> Optional[Node]:
        return self._by_id.get(self._by_path.get((node.department,), ""))
