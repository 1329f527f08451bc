"""
Command line entry point.

    python -m carbon_atlas trips.csv --out atlas_out --zoom 3.5 --zoom 8
"""

from __future__ import annotations

import argparse
import logging
import sys
from typing import List, Optional

from .errors import AtlasError
from .events import configure_logging
from .presets import SnapshotSpec, load_config
from .visualizer import generate_atlas_views

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        prog="carbon_atlas",
        description="Lay out travel emission records as a zoomable atlas and export snapshots.",
    )
    ap.add_argument("csv", help="travel records CSV")
    ap.add_argument("--out", default="atlas_out", help="output directory")
    ap.add_argument(
        "--zoom",
        type=float,
        action="append",
        help="snapshot zoom level (repeatable; default: the preset snapshots)",
    )
    ap.add_argument("--seed", type=int, default=None, help="seed for trip placement")
    ap.add_argument("--search", default="", help="highlight nodes matching this term")
    ap.add_argument("--no-png", action="store_true", help="skip matplotlib previews")
    ap.add_argument("-v", "--verbose", action="count", default=0)
    return ap


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(args.verbose)

    config = load_config()
    if args.seed is not None:
        config.layout.trip_seed = args.seed

    if args.zoom:
        config.snapshots = [
            SnapshotSpec(name=f"atlas_z{z:g}", zoom=z, search=args.search)
            for z in args.zoom
        ]
    elif args.search:
        config.snapshots = [
            SnapshotSpec(name=s.name, zoom=s.zoom, search=args.search)
            for s in config.snapshots
        ]

    try:
        metas = generate_atlas_views(
            args.csv,
            args.out,
            config=config,
            render_png=not args.no_png,
        )
    except AtlasError as exc:
        logger.error("%s", exc)
        return 1

    for meta in metas:
        logger.info("[atlas] %s: zoom %g, %d layers", meta.name, meta.zoom, meta.n_layers)
    logger.info("[atlas] Saved atlas to %s", args.out)
    return 0


if __name__ == "__main__":
    sys.exit(main())
