"""molgraph.graph: generic directed graph container and TGF serialization.

Usage::

    from molgraph.graph import Graph, Node, TGFCodec

    g = Graph()
    a, b = Node("a"), Node("b")
    g.connect(a, b, label="a->b")

    codec = TGFCodec()
    codec.write(g, "graph.tgf")
    g2 = codec.read("graph.tgf")
    for diag in codec.diagnostics:
        print(diag.line_number, diag.reason)
"""

from molgraph.graph.base import Edge, Graph, GraphListener, Node
from molgraph.graph.tgf import TGFCodec, TGFDiagnostic

__all__ = [
    "Edge",
    "Graph",
    "GraphListener",
    "Node",
    "TGFCodec",
    "TGFDiagnostic",
]
