"""
Emissions table loader.

Responsibilities:
  - Read the travel CSV with pandas (all columns as text, blanks -> NaN)
  - Verify the required columns are present
  - Convert the frame into cleaned ``Row`` records
  - Emit an atlas_loading_report.json for diagnostics

Any failure to produce a usable table raises ``DatasetLoadError``; there
is no partial result.
"""

from __future__ import annotations

import json
import logging
import os
from typing import Any, Dict, List, Optional

import pandas as pd

from .errors import DatasetLoadError
from .events import EmitFn, log_event, safe_emit
from .records import DEFAULT_COLUMNS, ColumnMap, Row

logger = logging.getLogger(__name__)

REPORT_VERSION = "carbon_atlas.loader.v1"


# ============================================================================ #
# 1. Read table
# ============================================================================ #

def read_emissions_table(
    path: str,
    columns: ColumnMap = DEFAULT_COLUMNS,
    emit: Optional[EmitFn] = None,
) -> pd.DataFrame:
    """
    Read the CSV at ``path``.

    Raises DatasetLoadError when the file is missing, cannot be parsed, or
    lacks the department / emission columns.
    """
    if not os.path.exists(path):
        log_event(f"[loader] {path} missing", emit, level="error", log=logger)
        raise DatasetLoadError(path, "file not found")

    try:
        df = pd.read_csv(path, dtype=str, skipinitialspace=True)
    except (pd.errors.ParserError, pd.errors.EmptyDataError, UnicodeDecodeError, OSError) as exc:
        log_event(f"[loader] Failed reading {path}: {exc}", emit, level="error", log=logger)
        raise DatasetLoadError(path, str(exc)) from exc

    df.columns = [str(c).strip() for c in df.columns]

    missing = [c for c in columns.required if c not in df.columns]
    if missing:
        log_event(f"[loader] {path} missing columns: {missing}", emit, level="error", log=logger)
        raise DatasetLoadError(path, "missing required columns: " + ", ".join(missing))

    log_event(f"[loader] Read {len(df)} rows from {os.path.basename(path)}", emit, log=logger)
    return df


# ============================================================================ #
# 2. Frame -> rows
# ============================================================================ #

def rows_from_frame(df: pd.DataFrame, columns: ColumnMap = DEFAULT_COLUMNS) -> List[Row]:
    if df.empty:
        return []
    records = df.to_dict(orient="records")
    return [Row.from_mapping(rec, columns) for rec in records]


def load_rows(
    path: str,
    *,
    columns: ColumnMap = DEFAULT_COLUMNS,
    emit: Optional[EmitFn] = None,
) -> List[Row]:
    df = read_emissions_table(path, columns, emit)
    return rows_from_frame(df, columns)


# ============================================================================ #
# 3. Diagnostics: atlas_loading_report.json
# ============================================================================ #

def loading_report(df: pd.DataFrame, columns: ColumnMap = DEFAULT_COLUMNS) -> Dict[str, Any]:
    """Summary statistics and missing-data counts for a loaded table."""
    rows = rows_from_frame(df, columns)
    emissions = pd.Series([r.emission for r in rows if r.emission is not None], dtype=float)

    return {
        "n_rows": len(rows),
        "n_usable": sum(1 for r in rows if r.is_complete),
        "missing_department": sum(1 for r in rows if not r.department),
        "missing_emission": sum(1 for r in rows if r.emission is None),
        "emission_min": float(emissions.min()) if not emissions.empty else None,
        "emission_max": float(emissions.max()) if not emissions.empty else None,
        "columns": list(df.columns),
        "report_version": REPORT_VERSION,
    }


def write_loading_report(
    out_dir: str,
    df: pd.DataFrame,
    columns: ColumnMap = DEFAULT_COLUMNS,
    emit: Optional[EmitFn] = None,
) -> str:
    """Write atlas_loading_report.json into ``out_dir`` and return its path."""
    report = loading_report(df, columns)
    os.makedirs(out_dir, exist_ok=True)
    path = os.path.join(out_dir, "atlas_loading_report.json")
    with open(path, "w", encoding="utf-8") as f:
        json.dump(report, f, indent=2)
    safe_emit(emit, "artifact", {"kind": "atlas-loading-report", "path": path})
    return path
