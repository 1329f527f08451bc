"""
Colour tables for the atlas.

Departments own a fixed hue (every node under a department is drawn in
that hue); purposes have their own table used by the legend. Unknown
names fall back to a neutral gray, which is never an error.
"""

from __future__ import annotations

from typing import Dict, Tuple

from .nodes import RGB


FALLBACK_COLOR: RGB = (128, 128, 128)

# Neon/vibrant hues tuned for a dark background
DEPARTMENT_COLORS: Dict[str, RGB] = {
    "Sales": (56, 189, 248),                  # sky blue
    "Marketing": (244, 114, 182),             # pink
    "Customer Support": (52, 211, 153),       # emerald
    "Executive Management": (167, 139, 250),  # violet
    "Value Engineering": (251, 191, 36),      # amber
    "Services": (34, 211, 238),               # cyan
    "Ecosystem": (251, 113, 133),             # rose
    "Office Management": (74, 222, 128),      # green
    "Legal": (251, 146, 60),                  # orange
    "Finance": (192, 132, 252),               # purple
    "Operations": (14, 165, 233),             # light blue
    "Product Management": (250, 204, 21),     # yellow
    "HR": (129, 140, 248),                    # indigo
    "Engineering": (45, 212, 191),            # teal
}

PURPOSE_COLORS: Dict[str, RGB] = {
    "Conference/Exhibition": (248, 113, 113),
    "Customer Visit": (96, 165, 250),
    "Internal Meeting": (250, 204, 21),
    "Training": (192, 132, 252),
    "Project Work": (74, 222, 128),
    "Other": (148, 163, 184),
}


def get_department_color(name: str) -> RGB:
    return DEPARTMENT_COLORS.get(name, FALLBACK_COLOR)


def with_alpha(color: RGB, alpha: float) -> Tuple[int, int, int, int]:
    """RGB + alpha in [0,1] -> RGBA with 0-255 channels."""
    a = min(1.0, max(0.0, float(alpha)))
    return int(color[0]), int(color[1]), int(color[2]), int(round(255 * a))


def to_unit_rgba(color: Tuple[int, ...]) -> Tuple[float, float, float, float]:
    """0-255 RGB(A) -> matplotlib-style RGBA in [0,1]."""
    if len(color) >= 4:
        return color[0] / 255.0, color[1] / 255.0, color[2] / 255.0, color[3] / 255.0
    return color[0] / 255.0, color[1] / 255.0, color[2] / 255.0, 1.0
