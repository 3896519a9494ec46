"""Spring embedder (Fruchterman-Reingold family) for 2D graph layouts.

Only topology is used: node count and (u, v) index pairs. Each iteration
accumulates repulsion between all node pairs, repulsion between each node
and the midpoints of edges not touching it, and degree-normalized attraction
along edges, then moves every node by a capped step that shrinks as the
iteration count grows.
"""

from __future__ import annotations

import math
from typing import Callable, Optional, Sequence

import numpy as np

from molgraph.graph.base import Graph

DEFAULT_WIDTH = 200
DEFAULT_HEIGHT = 200

_MIN_SQUARED_DISTANCE = 1e-3
_BLOCK = 512

IterationCallback = Callable[[int, np.ndarray], Optional[bool]]


def _repulsion(
    coords: np.ndarray,
    sources: np.ndarray,
    k: float,
    excluded: Callable[[np.ndarray], np.ndarray],
) -> np.ndarray:
    """Sum of k^2 / d^2 * (p - s) over all sources s, for every point p.

    ``excluded(rows)`` returns a boolean (len(rows), len(sources)) mask of
    pairs that must not contribute. Rows are processed in blocks to bound
    memory on large graphs.
    """
    out = np.zeros_like(coords)
    if len(sources) == 0:
        return out
    for start in range(0, len(coords), _BLOCK):
        rows = np.arange(start, min(start + _BLOCK, len(coords)))
        diff = coords[rows, None, :] - sources[None, :, :]
        dist2 = np.maximum((diff ** 2).sum(axis=-1), _MIN_SQUARED_DISTANCE)
        force = k * k / dist2
        force[excluded(rows)] = 0.0
        out[rows] = (force[..., None] * diff).sum(axis=1)
    return out


def compute_layout(
    iterations: int,
    node_count: int,
    edges: Sequence[tuple[int, int]],
    initial_coordinates: Optional[Sequence[Sequence[float]]] = None,
    callback: Optional[IterationCallback] = None,
) -> np.ndarray:
    """Compute 2D coordinates for ``node_count`` nodes, shape (node_count, 2).

    Without initial coordinates the nodes start evenly spaced on a circle of
    radius DEFAULT_WIDTH / 2. ``callback(iteration, coordinates)`` runs after
    every iteration; returning ``False`` stops early.

    With fewer than two nodes a single point at the origin is returned.
    """
    if node_count < 2:
        return np.zeros((1, 2))

    coords = np.zeros((node_count, 2))
    if initial_coordinates is not None:
        initial = np.asarray(initial_coordinates, dtype=float).reshape(-1, 2)[:node_count]
        coords[: len(initial)] = initial
        # Both extents come from the x column.
        span = coords[:, 0].max() - coords[:, 0].min()
        width = max(int(span), 1)
        height = max(int(span), 1)
    else:
        width, height = DEFAULT_WIDTH, DEFAULT_HEIGHT
        angles = 2.0 * np.pi * np.arange(node_count) / node_count
        coords[:, 0] = 0.5 * width * np.sin(angles)
        coords[:, 1] = 0.5 * height * np.cos(angles)

    edge_array = np.asarray(edges, dtype=int).reshape(-1, 2)
    src, dst = edge_array[:, 0], edge_array[:, 1]
    degree = np.bincount(edge_array.ravel(), minlength=node_count)

    k = math.sqrt(width * height / node_count) / 2
    log2 = math.log(2)

    for count in range(1, iterations):
        l2 = 25 * log2 * math.log(1 + count)
        tx = width / l2
        ty = height / l2

        disp = _repulsion(
            coords, coords, k,
            lambda rows: rows[:, None] == np.arange(node_count)[None, :],
        )
        if len(edge_array):
            midpoints = (coords[src] + coords[dst]) / 2
            disp += _repulsion(
                coords, midpoints, k,
                lambda rows: (src[None, :] == rows[:, None]) | (dst[None, :] == rows[:, None]),
            )

            delta = coords[dst] - coords[src]
            length = np.linalg.norm(delta, axis=1)
            length = length / ((degree[src] + degree[dst]) / 16.0)
            pull = delta * (length / k)[:, None]
            np.subtract.at(disp, dst, pull)
            np.add.at(disp, src, pull)

        norm = np.linalg.norm(disp, axis=1)
        moving = norm > 0
        coords[moving, 0] += tx * disp[moving, 0] / norm[moving]
        coords[moving, 1] += ty * disp[moving, 1] / norm[moving]

        if callback is not None and callback(count, coords) is False:
            break

    return coords


def center_coordinates(
    coordinates: np.ndarray,
    x_min: float,
    x_max: float,
    y_min: float,
    y_max: float,
) -> np.ndarray:
    """Scale and translate coordinates to fit the given rectangle.

    A float ndarray is updated in place and returned. Any other input (lists,
    integer arrays) is converted to a new float array; use the return value.

    The same factor is used on both axes, so the layout keeps its shape.
    Coordinates with zero extent on either axis are left unchanged.
    """
    coords = np.asarray(coordinates, dtype=float)
    if len(coords) == 0:
        return coords
    cx_min, cy_min = coords.min(axis=0)
    cx_max, cy_max = coords.max(axis=0)
    if cx_max - cx_min == 0 or cy_max - cy_min == 0:
        return coords

    factor = min((x_max - x_min) / (cx_max - cx_min), (y_max - y_min) / (cy_max - cy_min))
    dx = (x_max + x_min - factor * (cx_max + cx_min)) / 2
    dy = (y_max + y_min - factor * (cy_max + cy_min)) / 2
    coords[:, 0] = factor * coords[:, 0] + dx
    coords[:, 1] = factor * coords[:, 1] + dy
    return coords


def layout_graph(
    graph: Graph,
    iterations: int,
    initial_coordinates: Optional[Sequence[Sequence[float]]] = None,
    callback: Optional[IterationCallback] = None,
) -> np.ndarray:
    """Run compute_layout on a graph's topology; rows follow graph.nodes order."""
    node_count, edges = graph.topology()
    return compute_layout(iterations, node_count, edges, initial_coordinates, callback)
