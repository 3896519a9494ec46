"""Generic directed graph container.

Hierarchy:
    Graph[N]
    ├── nodes: ordered, identity-keyed members of type N (Node subclass)
    └── edges: ordered Edge objects, at most one per (source, target) pair

Nodes keep back-references to their incoming and outgoing edges. The graph
owns both collections and is the only place where adjacency is updated, so
removing a node or an edge always detaches it from both endpoints.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Generic, Iterator, Optional, Protocol, TypeVar, runtime_checkable

from molgraph.exceptions import (
    EdgeAlreadyExistsError,
    GraphError,
    MissingEndpointError,
    SelfLoopError,
)


# ======================================================================
# Nodes and edges
# ======================================================================

@dataclass(eq=False)
class Node:
    """Graph vertex with optional label, weight and opaque payload.

    Equality and hashing are by identity: two nodes with the same label are
    still two different members of a graph.
    """

    label: Optional[str] = None
    weight: Optional[float] = None
    payload: Any = None
    _in_edges: list["Edge"] = field(default_factory=list, init=False, repr=False)
    _out_edges: list["Edge"] = field(default_factory=list, init=False, repr=False)

    @property
    def in_edges(self) -> tuple["Edge", ...]:
        return tuple(self._in_edges)

    @property
    def out_edges(self) -> tuple["Edge", ...]:
        return tuple(self._out_edges)

    @property
    def in_degree(self) -> int:
        return len(self._in_edges)

    @property
    def out_degree(self) -> int:
        return len(self._out_edges)

    @property
    def degree(self) -> int:
        return len(self._in_edges) + len(self._out_edges)


class Edge:
    """Directed edge between two distinct nodes.

    The endpoints are validated on construction and on every reassignment.
    An edge that currently belongs to a graph cannot be re-pointed; delete it
    from the graph first.
    """

    def __init__(
        self,
        source: Node,
        target: Node,
        label: Optional[str] = None,
        weight: Optional[float] = None,
    ):
        self._source = source
        self._target = target
        self.label = label
        self.weight = weight
        self._attached = False
        self._validate()

    def _validate(self) -> None:
        if self._source is None:
            raise MissingEndpointError("Source node is None")
        if self._target is None:
            raise MissingEndpointError("Target node is None")
        if self._source is self._target:
            raise SelfLoopError("Cannot connect a node with itself.")

    def _set_endpoint(self, attr: str, node: Node) -> None:
        if self._attached:
            raise GraphError("Cannot change the endpoints of an edge that belongs to a graph.")
        previous = getattr(self, attr)
        setattr(self, attr, node)
        try:
            self._validate()
        except GraphError:
            setattr(self, attr, previous)
            raise

    @property
    def source(self) -> Node:
        return self._source

    @source.setter
    def source(self, node: Node) -> None:
        self._set_endpoint("_source", node)

    @property
    def target(self) -> Node:
        return self._target

    @target.setter
    def target(self, node: Node) -> None:
        self._set_endpoint("_target", node)

    @property
    def attached(self) -> bool:
        return self._attached

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self._source.label!r} -> {self._target.label!r} label={self.label!r}>"


# ======================================================================
# Observer interface
# ======================================================================

@runtime_checkable
class GraphListener(Protocol):
    """Receives membership changes of a Graph.

    Presentation layers register one of these instead of the graph carrying
    its own notification machinery.
    """

    def node_added(self, node: Node) -> None: ...
    def node_removed(self, node: Node) -> None: ...
    def edge_added(self, edge: Edge) -> None: ...
    def edge_removed(self, edge: Edge) -> None: ...


# ======================================================================
# Container
# ======================================================================

N = TypeVar("N", bound=Node)


class Graph(Generic[N]):
    """Ordered collection of nodes and directed edges.

    Invariants:
      - no edge connects a node with itself
      - at most one edge per ordered (source, target) pair
      - iteration order of nodes and edges is insertion order
    """

    edge_type: type[Edge] = Edge

    def __init__(self) -> None:
        self._nodes: dict[N, None] = {}
        self._edges: dict[Edge, None] = {}
        self._pairs: dict[tuple[N, N], Edge] = {}
        self._listeners: list[GraphListener] = []

    # -- listeners ------------------------------------------------------

    def add_listener(self, listener: GraphListener) -> None:
        self._listeners.append(listener)

    def remove_listener(self, listener: GraphListener) -> None:
        self._listeners = [x for x in self._listeners if x is not listener]

    def _notify(self, event: str, item: Any) -> None:
        for listener in list(self._listeners):
            getattr(listener, event)(item)

    # -- read surface ---------------------------------------------------

    @property
    def nodes(self) -> tuple[N, ...]:
        return tuple(self._nodes)

    @property
    def edges(self) -> tuple[Edge, ...]:
        return tuple(self._edges)

    def node_count(self) -> int:
        return len(self._nodes)

    def edge_count(self) -> int:
        return len(self._edges)

    def get_node(self, idx: int) -> N:
        return self.nodes[idx]

    def has_node(self, node: Node) -> bool:
        return node in self._nodes

    def has_edge(self, source: Node, target: Node) -> bool:
        return (source, target) in self._pairs

    def find_edge(self, source: Node, target: Node) -> Optional[Edge]:
        return self._pairs.get((source, target))

    def __iter__(self) -> Iterator[N]:
        return iter(self.nodes)

    def topology(self) -> tuple[int, list[tuple[int, int]]]:
        """Node count and edges as (source_index, target_index) pairs."""
        index = {node: i for i, node in enumerate(self._nodes)}
        return len(index), [(index[e.source], index[e.target]) for e in self._edges]

    # -- mutation -------------------------------------------------------

    def add_node(self, node: N) -> N:
        if node not in self._nodes:
            self._nodes[node] = None
            self._notify("node_added", node)
        return node

    def remove_node(self, node: N) -> list[Edge]:
        """Remove a node and every edge that starts or ends at it.

        Returns the removed edges.
        """
        touching = [e for e in self._edges if e.source is node or e.target is node]
        for e in touching:
            self.delete_edge(e)
        if node in self._nodes:
            del self._nodes[node]
            self._notify("node_removed", node)
        return touching

    def connect(
        self,
        source: N,
        target: N,
        label: Optional[str] = None,
        weight: Optional[float] = None,
    ) -> Edge:
        """Create an edge of ``edge_type`` between two nodes and add it."""
        edge = self.edge_type(source, target, label=label, weight=weight)
        self.add_edge(edge)
        return edge

    def add_edge(self, edge: Edge) -> None:
        """Add an existing edge, inserting either endpoint if it is not a member yet."""
        key = (edge.source, edge.target)
        if key in self._pairs or edge in self._edges:
            raise EdgeAlreadyExistsError("Edge already exists")
        if edge.attached:
            raise GraphError("Edge already belongs to another graph")
        self.add_node(edge.source)
        self.add_node(edge.target)
        self._edges[edge] = None
        self._pairs[key] = edge
        edge.source._out_edges.append(edge)
        edge.target._in_edges.append(edge)
        edge._attached = True
        self._notify("edge_added", edge)

    def disconnect(self, source: N, target: N) -> list[Edge]:
        """Remove every edge going from ``source`` to ``target``."""
        matching = [e for e in self._edges if e.source is source and e.target is target]
        for e in matching:
            self.delete_edge(e)
        return matching

    def delete_edge(self, edge: Edge) -> None:
        if edge not in self._edges:
            return
        edge.source._out_edges[:] = [e for e in edge.source._out_edges if e is not edge]
        edge.target._in_edges[:] = [e for e in edge.target._in_edges if e is not edge]
        del self._edges[edge]
        self._pairs.pop((edge.source, edge.target), None)
        edge._attached = False
        self._notify("edge_removed", edge)

    def reset(self) -> None:
        """Remove all edges and nodes."""
        for e in list(self._edges):
            self.delete_edge(e)
        for n in list(self._nodes):
            del self._nodes[n]
            self._notify("node_removed", n)

    def __repr__(self) -> str:
        return f"<{type(self).__name__} nodes={self.node_count()} edges={self.edge_count()}>"
