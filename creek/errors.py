"""
creek.errors
============

Exceptions raised by creek.

::

    CreekError (base)
    ├── MalformedGraphError      - adjacency id that the graph cannot look up
    ├── FixpointNotReachedError  - ``max_iterations`` exceeded
    └── BlockSyntaxError         - invalid block notation

The solver itself defines no recoverable errors: exceptions raised by a
caller's graph, ``trans`` or ``join`` propagate unchanged.  The classes
below only appear when the caller opts into a guard (``validate=True``,
``max_iterations=...``) or uses the block notation parser.
"""

from __future__ import annotations

from typing import Any, Hashable, Optional


class CreekError(Exception):
    """Base exception for all creek errors."""


class MalformedGraphError(CreekError):
    """A graph handed out an id it cannot resolve.

    Attributes
    ----------
    node_id : hashable or None
        The node whose adjacency produced the bad id, or ``None`` when the
        bad id is the entry/exit node itself.
    missing_id : hashable
        The id that could not be looked up.
    """

    def __init__(
        self,
        missing_id: Hashable,
        node_id: Optional[Hashable] = None,
        cause: Optional[BaseException] = None,
    ) -> None:
        if node_id is None:
            message = f"root node {missing_id!r} is not in the graph"
        else:
            message = (
                f"node {node_id!r} refers to {missing_id!r}, "
                f"which is not in the graph"
            )
        super().__init__(message)
        self.node_id = node_id
        self.missing_id = missing_id
        self.cause = cause


class FixpointNotReachedError(CreekError):
    """The worklist was still non-empty after ``max_iterations`` evaluations.

    Usually a sign of a non-monotonic ``trans``/``join`` or of a lattice
    with infinite ascending chains.
    """

    def __init__(self, iterations: int, pending: int) -> None:
        super().__init__(
            f"no fixpoint after {iterations} node evaluations "
            f"({pending} node(s) still pending)"
        )
        self.iterations = iterations
        self.pending = pending


class BlockSyntaxError(CreekError):
    """Invalid block notation.

    ``line`` and ``column`` are 1-based; both are 0 when the error is not
    tied to a position (e.g. a reference to an undefined block).
    """

    def __init__(
        self,
        message: str,
        line: int = 0,
        column: int = 0,
        cause: Optional[Any] = None,
    ) -> None:
        super().__init__(message)
        self.line = line
        self.column = column
        self.cause = cause

    def __str__(self) -> str:
        msg = super().__str__()
        if self.line:
            return f"{self.line}:{self.column}: {msg}"
        return msg
