"""
Custom exceptions for molgraph.

All exceptions inherit from MolgraphError for easy catching.
"""


class MolgraphError(Exception):
    """Base exception for molgraph errors."""

    pass


class GraphError(MolgraphError):
    """Raised when a graph operation would violate a container invariant."""

    pass


class EdgeAlreadyExistsError(GraphError):
    """Raised when an edge with the same (source, target) pair is already present."""

    pass


class SelfLoopError(GraphError):
    """Raised when an edge would connect a node with itself."""

    pass


class MissingEndpointError(GraphError):
    """Raised when an edge is built without a source or target node."""

    pass


class TGFFormatError(MolgraphError):
    """Raised when a TGF source cannot be read into a graph at all."""

    pass


class PDBParseError(MolgraphError):
    """Raised when a PDB file cannot be turned into a molecular model."""

    pass


class ParseCancelledError(MolgraphError):
    """Raised when a progress callback asks a running parse to stop."""

    pass
