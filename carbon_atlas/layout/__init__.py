# carbon_atlas/layout/__init__.py

"""
Layout subpackage for the carbon atlas.

Provides:
  - nested radial layout (phyllotaxis departments, ringed sub-groups)
"""

from __future__ import annotations

from .radial import (
    compute_layout,
    phyllotaxis,
    ring_offsets,
    sample_disk,
)

__all__ = [
    "compute_layout",
    "phyllotaxis",
    "ring_offsets",
    "sample_disk",
]
