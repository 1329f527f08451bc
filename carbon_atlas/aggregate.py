"""
Record aggregation: flat rows -> Department/Purpose/Transport/Route forest.

Responsibilities:
  - Skip rows without a department or an emission value (counted, not raised)
  - Group trips into Department -> Purpose -> Transport mode -> Route buckets
  - Keep per-bucket emission sums and trip counts
  - Assign each trip a unique node id
  - Report totals used by the UI read-outs

No coordinates are assigned here; see ``layout.radial``.
"""

from __future__ import annotations

import logging
import math
from dataclasses import asdict, dataclass, field
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Set, Union

from .events import EmitFn, log_event
from .nodes import RGB, trip_id
from .palette import FALLBACK_COLOR, get_department_color
from .records import DEFAULT_COLUMNS, ColumnMap, Row, clean_number

logger = logging.getLogger(__name__)


DEFAULT_LABEL = "Other"
UNKNOWN_CITY = "Unknown"
ROUTE_ARROW = " → "


def route_key(origin: Optional[str], destination: Optional[str]) -> str:
    return f"{origin or UNKNOWN_CITY}{ROUTE_ARROW}{destination or UNKNOWN_CITY}"


# ============================================================================ #
# Buckets
# ============================================================================ #

@dataclass
class TripRecord:
    node_id: str
    emission: float
    cost: float
    row_index: int
    source_id: Optional[str] = None


@dataclass
class _Bucket:
    name: str
    emissions: float = 0.0
    count: int = 0

    def _add(self, emission: float) -> None:
        self.emissions += emission
        self.count += 1


@dataclass
class RouteBucket(_Bucket):
    trips: List[TripRecord] = field(default_factory=list)


@dataclass
class TransportBucket(_Bucket):
    routes: Dict[str, RouteBucket] = field(default_factory=dict)


@dataclass
class PurposeBucket(_Bucket):
    transports: Dict[str, TransportBucket] = field(default_factory=dict)


@dataclass
class DepartmentBucket(_Bucket):
    color: RGB = FALLBACK_COLOR
    purposes: Dict[str, PurposeBucket] = field(default_factory=dict)

    @property
    def trip_count(self) -> int:
        return self.count

    def radius(self, base: float = 100.0, factor: float = 0.5) -> float:
        # sub-linear in total emissions
        return base + factor * math.sqrt(max(0.0, self.emissions))

    def iter_trips(self) -> Iterable[TripRecord]:
        for p in self.purposes.values():
            for t in p.transports.values():
                for r in t.routes.values():
                    yield from r.trips


@dataclass
class HierarchyForest:
    """Grouped trips, keyed by department name in first-seen order."""

    departments: Dict[str, DepartmentBucket] = field(default_factory=dict)
    total_emissions: float = 0.0
    processed_rows: int = 0
    skipped_rows: int = 0

    @property
    def department_count(self) -> int:
        return len(self.departments)

    @property
    def trip_count(self) -> int:
        return sum(d.count for d in self.departments.values())

    @property
    def is_empty(self) -> bool:
        return not self.departments


# ============================================================================ #
# Aggregation
# ============================================================================ #

def _as_row(raw: Union[Row, Mapping[str, Any]], columns: ColumnMap) -> Row:
    if isinstance(raw, Row):
        return Row.from_mapping(asdict(raw))
    return Row.from_mapping(raw, columns)


def aggregate(
    rows: Iterable[Union[Row, Mapping[str, Any]]],
    *,
    columns: ColumnMap = DEFAULT_COLUMNS,
    color_for: Callable[[str], RGB] = get_department_color,
    emit: Optional[EmitFn] = None,
) -> HierarchyForest:
    """
    Group rows into a four-level forest with emission sums at every level.

    Rows lacking a department or an emission are skipped silently and only
    show up in ``skipped_rows``. Empty input yields an empty forest.
    """
    forest = HierarchyForest()
    used_ids: Set[str] = set()

    for index, raw in enumerate(rows):
        row = _as_row(raw, columns)
        if not row.is_complete:
            forest.skipped_rows += 1
            continue

        dept_name = str(row.department)
        emission = float(clean_number(row.emission))  # type: ignore[arg-type]
        cost = clean_number(row.net_cost) or 0.0

        dept = forest.departments.get(dept_name)
        if dept is None:
            dept = DepartmentBucket(name=dept_name, color=color_for(dept_name))
            forest.departments[dept_name] = dept

        purpose_name = row.purpose or DEFAULT_LABEL
        purpose = dept.purposes.setdefault(purpose_name, PurposeBucket(name=purpose_name))

        mode = row.transport_mode or DEFAULT_LABEL
        transport = purpose.transports.setdefault(mode, TransportBucket(name=mode))

        key = route_key(row.origin, row.destination)
        route = transport.routes.setdefault(key, RouteBucket(name=key))

        nid = trip_id(row.trip_id, index)
        if nid in used_ids:
            nid = trip_id(None, index)
        used_ids.add(nid)

        route.trips.append(TripRecord(
            node_id=nid,
            emission=emission,
            cost=cost,
            row_index=index,
            source_id=row.trip_id,
        ))
        for bucket in (dept, purpose, transport, route):
            bucket._add(emission)

        forest.total_emissions += emission
        forest.processed_rows += 1

    log_event(
        f"[aggregate] {forest.department_count} departments, {forest.trip_count} trips "
        f"({forest.skipped_rows} rows skipped)",
        emit,
        log=logger,
        departments=forest.department_count,
        trips=forest.trip_count,
        skipped=forest.skipped_rows,
    )
    return forest
