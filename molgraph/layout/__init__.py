from molgraph.layout.spring import (
    DEFAULT_HEIGHT,
    DEFAULT_WIDTH,
    center_coordinates,
    compute_layout,
    layout_graph,
)

__all__ = [
    "DEFAULT_HEIGHT",
    "DEFAULT_WIDTH",
    "center_coordinates",
    "compute_layout",
    "layout_graph",
]
