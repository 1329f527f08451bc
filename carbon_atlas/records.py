"""
Flat travel records as read from the emissions table.

``Row`` is the aggregator's input type. Values are cleaned on the way in:
blank strings and NaN become ``None``, numeric columns become floats,
integer-valued ids lose a spurious ``.0``.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Mapping, Optional


@dataclass(frozen=True)
class ColumnMap:
    """Source column names for each Row field."""

    department: str = "Business Dept"
    emission: str = "Carbon Emission"
    trip_id: str = "Trip ID"
    purpose: str = "Purpose"
    transport_mode: str = "Shipping Type"
    origin: str = "Departure City"
    destination: str = "Arrival City"
    net_cost: str = "Net Costs"

    @property
    def required(self) -> tuple:
        return (self.department, self.emission)


DEFAULT_COLUMNS = ColumnMap()


def _is_missing(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, float) and math.isnan(value):
        return True
    if isinstance(value, str) and not value.strip():
        return True
    return False


def clean_text(value: Any) -> Optional[str]:
    if _is_missing(value):
        return None
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value).strip()


def clean_number(value: Any) -> Optional[float]:
    if _is_missing(value):
        return None
    if isinstance(value, bool):
        return None
    try:
        v = float(str(value).replace(",", "").strip()) if isinstance(value, str) else float(value)
    except (TypeError, ValueError):
        return None
    return v if math.isfinite(v) else None


@dataclass(frozen=True)
class Row:
    department: Optional[str] = None
    emission: Optional[float] = None
    trip_id: Optional[str] = None
    purpose: Optional[str] = None
    transport_mode: Optional[str] = None
    origin: Optional[str] = None
    destination: Optional[str] = None
    net_cost: Optional[float] = None

    @property
    def is_complete(self) -> bool:
        """Department and emission are the only required fields."""
        return clean_text(self.department) is not None and clean_number(self.emission) is not None

    @classmethod
    def from_mapping(cls, mapping: Mapping[str, Any], columns: ColumnMap = DEFAULT_COLUMNS) -> "Row":
        """
        Build a Row from a record keyed by source column names; Row field
        names are accepted as well.
        """
        def pick(name: str) -> Any:
            col = getattr(columns, name)
            if col in mapping:
                return mapping[col]
            return mapping.get(name)

        return cls(
            department=clean_text(pick("department")),
            emission=clean_number(pick("emission")),
            trip_id=clean_text(pick("trip_id")),
            purpose=clean_text(pick("purpose")),
            transport_mode=clean_text(pick("transport_mode")),
            origin=clean_text(pick("origin")),
            destination=clean_text(pick("destination")),
            net_cost=clean_number(pick("net_cost")),
        )
