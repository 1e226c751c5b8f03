"""
Static plots of a decomposition tree.

Draws each leaf of a ConcavePolygon in its own colour with vertex index
labels, optionally with the original outline and a cut segment overlaid.
"""

from pathlib import Path
from typing import Optional

import matplotlib.pyplot as plt

from .geometry import BoundingBox, LineSegment
from .polygon import ConcavePolygon


LEAF_COLORS = ['#FF6B6B', '#4ECDC4', '#45B7D1', '#96CEB4', '#FFEAA7', '#DDA0DD']


def plot_polygon(ax, polygon, color='blue', alpha=0.3, edgecolor='black', linewidth=1):
    """Plot a polygon given as a list of (x, y) points."""
    if len(polygon) < 3:
        return
    poly = plt.Polygon(polygon, facecolor=color, alpha=alpha, edgecolor=edgecolor, linewidth=linewidth)
    ax.add_patch(poly)


def plot_vertex_indices(ax, points, offset=0.0, fontsize=8):
    """Label each point with its index in the ring."""
    for i, (x, y) in enumerate(points):
        ax.text(x + offset, y, str(i), fontsize=fontsize, ha='left', va='bottom')


def plot_segment(ax, segment: LineSegment, color='green', linewidth=1.5):
    ax.plot([segment.start.x, segment.end.x], [segment.start.y, segment.end.y],
            color=color, linewidth=linewidth, linestyle='--', label='Cut segment')


def plot_decomposition(polygon: ConcavePolygon,
                       ax=None,
                       show_indices: bool = True,
                       show_outline: bool = True,
                       segment: Optional[LineSegment] = None,
                       title: Optional[str] = None):
    """
    Plot the leaves of a decomposition tree.

    Args:
        polygon: Root of the tree
        ax: Matplotlib axes to draw into (a new figure is created if None)
        show_indices: Label leaf vertices with their ring indices
        show_outline: Draw the root ring as a dashed outline
        segment: Optional cut segment to overlay
        title: Axes title (defaults to the leaf count)

    Returns:
        The matplotlib Axes drawn into
    """
    if ax is None:
        _, ax = plt.subplots(figsize=(8, 8))

    leaves = polygon.flatten_leaves()
    root_points = polygon.points()
    bbox = BoundingBox.from_points(root_points)
    margin = max(bbox.size, 1e-9) * 0.1
    label_offset = margin * 0.05

    for i, leaf in enumerate(leaves):
        points = leaf.points()
        plot_polygon(ax, points, color=LEAF_COLORS[i % len(LEAF_COLORS)],
                     alpha=0.6, edgecolor='black', linewidth=1.5)
        if show_indices:
            plot_vertex_indices(ax, points, offset=label_offset)

    if show_outline and len(root_points) > 1:
        closed = root_points + root_points[:1]
        ax.plot([p[0] for p in closed], [p[1] for p in closed],
                color='gray', linewidth=1, linestyle=':', label='Outline')

    if segment is not None:
        plot_segment(ax, segment)

    bounds = bbox.expand(margin)
    ax.set_xlim(bounds.min_x, bounds.max_x)
    ax.set_ylim(bounds.min_y, bounds.max_y)
    ax.set_aspect('equal')
    ax.grid(True, alpha=0.3)
    ax.set_title(title if title is not None else f'{len(leaves)} convex piece(s)')

    return ax


def save_decomposition_plot(polygon: ConcavePolygon,
                            filepath: Path | str,
                            segment: Optional[LineSegment] = None,
                            title: Optional[str] = None,
                            dpi: int = 150) -> Path:
    """Render plot_decomposition to an image file and return its path."""
    filepath = Path(filepath)
    fig, ax = plt.subplots(figsize=(8, 8))
    try:
        plot_decomposition(polygon, ax=ax, segment=segment, title=title)
        fig.tight_layout()
        fig.savefig(filepath, dpi=dpi)
    finally:
        plt.close(fig)
    return filepath
