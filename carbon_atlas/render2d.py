# render2d.py

"""
Static 2D preview renderer for composed atlas layers.

Draws a layer list exactly in its bottom-to-top order onto a matplotlib
canvas so snapshots can be inspected without a GPU surface:

    - scatter layers in map units become ellipse collections in data space
    - scatter layers in pixel units become fixed-size markers
    - text layers become outlined labels
"""

from __future__ import annotations

from typing import List, Optional, Sequence, Tuple

import matplotlib

matplotlib.use("Agg")

import matplotlib.patheffects as patheffects
import matplotlib.pyplot as plt
import numpy as np
from matplotlib.collections import EllipseCollection

from .compose import LayerDescriptor, LayerType
from .palette import to_unit_rgba
from .presets import VisualStyle


# =============================================================================
# Utilities
# =============================================================================

def _frame_from_layers(
    layers: Sequence[LayerDescriptor],
    margin: float = 0.08,
) -> Tuple[float, float, float, float]:
    """Padded axis limits covering every positioned record."""
    chunks = [layer.positions() for layer in layers if len(layer)]
    xy = np.vstack(chunks) if chunks else np.zeros((1, 2))

    x_min, y_min = xy.min(axis=0)
    x_max, y_max = xy.max(axis=0)
    span = max(float(x_max - x_min), float(y_max - y_min), 1e-9)
    pad = span * margin
    return (
        float(x_min) - pad,
        float(x_max) + pad,
        float(y_min) - pad,
        float(y_max) + pad,
    )


def _faded(rgba: Tuple[float, float, float, float], opacity: float) -> Tuple[float, float, float, float]:
    r, g, b, a = rgba
    return r, g, b, float(np.clip(a * opacity, 0.0, 1.0))


# =============================================================================
# Layer painters
# =============================================================================

def _draw_scatter(ax, layer: LayerDescriptor, z: int) -> None:
    xy = layer.positions()
    faces = [_faded(to_unit_rgba(layer.color_of(n)), layer.opacity) for n in layer.data]
    edge = _faded(to_unit_rgba(layer.line_color), layer.opacity) if layer.stroked and layer.line_color else "none"
    if not layer.filled:
        faces = ["none"] * len(faces)

    radii = np.array([layer.radius_of(n) for n in layer.data], float)

    if layer.radius_units == "pixels":
        ax.scatter(
            xy[:, 0],
            xy[:, 1],
            s=(2.0 * radii) ** 2,
            c=faces,
            edgecolors=edge,
            linewidths=layer.line_width,
            zorder=z,
        )
        return

    diam = 2.0 * radii * layer.position_scale
    coll = EllipseCollection(
        diam,
        diam,
        np.zeros_like(diam),
        units="xy",
        offsets=xy,
        offset_transform=ax.transData,
        facecolors=faces,
        edgecolors=edge,
        linewidths=layer.line_width,
        zorder=z,
    )
    ax.add_collection(coll)


def _draw_text(ax, layer: LayerDescriptor, z: int, style: VisualStyle) -> None:
    size = float(layer.text_size or 10.0)
    bg = to_unit_rgba(layer.text_background or style.label_background)
    for n in layer.data:
        x, y = layer.position_of(n)
        rgba = to_unit_rgba(layer.color_of(n))
        if layer.text_color is not None:
            rgba = _faded(rgba, layer.opacity)
        txt = ax.text(
            x,
            y,
            n.label,
            fontsize=size,
            fontweight="bold" if layer.font_weight >= 700 else "normal",
            color=rgba,
            ha="center",
            va="center",
            zorder=z,
        )
        txt.set_path_effects([
            patheffects.Stroke(linewidth=2.5, foreground=bg),
            patheffects.Normal(),
        ])


# =============================================================================
# Main renderer
# =============================================================================

def draw_layers_snapshot(
    layers: Sequence[LayerDescriptor],
    style: VisualStyle,
    *,
    outfile: str,
    title: str = "",
    subtitle: str = "",
) -> Optional[str]:
    """
    Render a composed layer list to ``outfile``.

    Returns the written path, or None when there is nothing to draw.
    """
    drawable: List[LayerDescriptor] = [layer for layer in layers if len(layer)]
    if not drawable:
        return None

    x_min, x_max, y_min, y_max = _frame_from_layers(drawable)

    fig, ax = plt.subplots(figsize=(12, 10), facecolor=style.background_color)
    ax.set_facecolor(style.background_color)
    ax.set_xlim(x_min, x_max)
    ax.set_ylim(y_min, y_max)
    ax.set_xticks([])
    ax.set_yticks([])
    ax.set_aspect("equal", "box")
    for spine in ax.spines.values():
        spine.set_visible(False)

    for z, layer in enumerate(drawable, start=1):
        if layer.layer_type is LayerType.TEXT:
            _draw_text(ax, layer, z, style)
        else:
            _draw_scatter(ax, layer, z)

    if title:
        ax.set_title(title, color="#e2e8f0", fontsize=14, loc="left")
    if subtitle:
        fig.text(0.01, 0.01, subtitle, color="#94a3b8", fontsize=9)

    fig.savefig(outfile, dpi=style.dpi, facecolor=style.background_color, bbox_inches="tight")
    plt.close(fig)
    return outfile
