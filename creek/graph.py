"""
creek.graph
===========

The contracts the solver consumes.  Nothing here is instantiated by the
solver itself: callers bring their own node, graph and fact types and the
solver only talks to them through these capabilities.

Node identity
    Any hashable value with ``==``.  Identifiers are handed back to the
    graph verbatim; the solver never looks inside them.

Graph
    ``lookup(id)``, ``predecessors(id)``, ``successors(id)``, ``entry()``
    and ``exit()``.  The graph is treated as immutable for the duration of
    a ``solve`` call.

Fact
    Any value with ``==``.  Equality is the convergence test, no ordering
    is ever consulted.
"""

from __future__ import annotations

import enum
from typing import (
    Any,
    Callable,
    Hashable,
    Iterable,
    List,
    Protocol,
    runtime_checkable,
)

# trans(node, fact) -> fact
TransFn = Callable[[Any, Any], Any]
# join([fact, ...]) -> fact
JoinFn = Callable[[List[Any]], Any]


class Direction(enum.Enum):
    """Direction of dataflow propagation."""
    FORWARD = "forward"
    BACKWARD = "backward"

    @property
    def root_name(self) -> str:
        """Name of the graph method yielding the traversal root."""
        return "entry" if self is Direction.FORWARD else "exit"


@runtime_checkable
class Node(Protocol):
    """A graph node, distinguished by its ``id``."""

    @property
    def id(self) -> Hashable:
        ...


@runtime_checkable
class Graph(Protocol):
    """A directed graph with a unique entry and a unique exit node.

    Ids passed to :meth:`lookup`, :meth:`predecessors` and
    :meth:`successors` only ever come from :meth:`entry`, :meth:`exit`, or
    an earlier adjacency enumeration on the same graph.
    """

    def lookup(self, node_id: Hashable) -> Any:
        """Return the node identified by *node_id*."""
        ...

    def predecessors(self, node_id: Hashable) -> Iterable[Hashable]:
        """Ids of the nodes with an edge into *node_id*."""
        ...

    def successors(self, node_id: Hashable) -> Iterable[Hashable]:
        """Ids of the nodes *node_id* has an edge to."""
        ...

    def entry(self) -> Hashable:
        ...

    def exit(self) -> Hashable:
        ...
