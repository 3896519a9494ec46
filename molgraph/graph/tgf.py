"""Trivial Graph Format (TGF) reader and writer.

Layout of a TGF file::

    0<TAB>first node
    1<TAB>second node
    #
    0<TAB>1<TAB>edge label

Reading is line-tolerant: a malformed node or edge line is skipped and
recorded as a TGFDiagnostic, and only a file that yields no nodes at all is
rejected.
"""

from __future__ import annotations

import io
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Iterable, Optional, TextIO, Union

from molgraph.core.logging_utils import get_logger
from molgraph.exceptions import GraphError, TGFFormatError
from molgraph.graph.base import Graph, Node

logger = get_logger(__name__)

Source = Union[str, Path, TextIO, Iterable[str]]


@dataclass(frozen=True)
class TGFDiagnostic:
    """A skipped input line and the reason it was skipped."""

    line_number: int
    line: str
    reason: str


class TGFCodec:
    """Read and write a Graph in trivial graph format.

    Node ids in written files are assigned from zero in the graph's node
    order, so writing the same graph twice gives identical output.
    """

    def __init__(self, graph_factory: Callable[[], Graph] = Graph):
        self._graph_factory = graph_factory
        self.diagnostics: list[TGFDiagnostic] = []

    # -- writing --------------------------------------------------------

    def write(self, graph: Graph, sink: Union[str, Path, TextIO]) -> None:
        if isinstance(sink, (str, Path)):
            with open(sink, "w", encoding="utf-8") as f:
                self._write(graph, f)
        else:
            self._write(graph, sink)

    @staticmethod
    def _write(graph: Graph, out: TextIO) -> None:
        ids: dict[Node, int] = {}
        for i, node in enumerate(graph.nodes):
            ids[node] = i
            out.write(f"{i}\t{node.label or ''}\n")
        out.write("#\n")
        for edge in graph.edges:
            out.write(f"{ids[edge.source]}\t{ids[edge.target]}\t{edge.label or ''}\n")

    def dumps(self, graph: Graph) -> str:
        buf = io.StringIO()
        self._write(graph, buf)
        return buf.getvalue()

    # -- reading --------------------------------------------------------

    def read(self, source: Source, graph: Optional[Graph] = None) -> Graph:
        """Read a TGF source into ``graph`` (reset first) or into a new graph.

        Raises TGFFormatError if the source cannot be opened or no node was read.
        """
        if graph is None:
            graph = self._graph_factory()
        graph.reset()
        self.diagnostics = []

        if isinstance(source, (str, Path)):
            path = Path(source)
            try:
                with open(path, "r", encoding="utf-8", errors="replace") as f:
                    self._read_lines(f, graph)
            except OSError as e:
                raise TGFFormatError(f"Cannot read TGF file {path}: {e}") from e
        else:
            self._read_lines(source, graph)

        if graph.node_count() == 0:
            raise TGFFormatError("No nodes were read from TGF input.")
        logger.debug(
            "Read TGF graph nodes=%d edges=%d skipped=%d",
            graph.node_count(), graph.edge_count(), len(self.diagnostics),
        )
        return graph

    def loads(self, text: str, graph: Optional[Graph] = None) -> Graph:
        return self.read(io.StringIO(text), graph=graph)

    def _read_lines(self, lines: Iterable[str], graph: Graph) -> None:
        reading_nodes = True
        id_to_node: dict[int, Node] = {}
        for line_number, raw in enumerate(lines, start=1):
            line = raw.rstrip("\r\n")
            if line.startswith("#"):
                reading_nodes = False
                continue
            if not line.strip():
                continue
            if reading_nodes:
                self._read_node(line_number, line, graph, id_to_node)
            else:
                self._read_edge(line_number, line, graph, id_to_node)

    def _read_node(self, line_number: int, line: str, graph: Graph, id_to_node: dict[int, Node]) -> None:
        fields = line.split("\t")
        try:
            node_id = int(fields[0])
        except ValueError:
            self._skip(line_number, line, f"invalid node id {fields[0]!r}")
            return
        if node_id in id_to_node:
            self._skip(line_number, line, f"duplicate ID {node_id}")
            return
        node = Node(label="".join(fields[1:]))
        id_to_node[node_id] = node
        graph.add_node(node)

    def _read_edge(self, line_number: int, line: str, graph: Graph, id_to_node: dict[int, Node]) -> None:
        fields = line.split("\t")
        if len(fields) < 2:
            self._skip(line_number, line, "edge line does not specify source and target nodes")
            return
        try:
            source_id = int(fields[0])
            target_id = int(fields[1])
        except ValueError:
            self._skip(line_number, line, f"invalid node ids {fields[0]!r}, {fields[1]!r}")
            return
        if source_id not in id_to_node:
            self._skip(line_number, line, f"source node with ID {source_id} does not exist")
            return
        if target_id not in id_to_node:
            self._skip(line_number, line, f"target node with ID {target_id} does not exist")
            return
        if source_id == target_id:
            self._skip(line_number, line, f"self loop on node with ID {source_id} is not allowed")
            return
        try:
            graph.connect(id_to_node[source_id], id_to_node[target_id], label="".join(fields[2:]))
        except GraphError as e:
            self._skip(line_number, line, str(e))

    def _skip(self, line_number: int, line: str, reason: str) -> None:
        logger.warning("Skipping TGF line %d (%s): %r", line_number, reason, line)
        self.diagnostics.append(TGFDiagnostic(line_number=line_number, line=line, reason=reason))
