"""
creek.result
============

Result types returned by :meth:`creek.analyzer.Analyzer.solve`.

    NodeInfo        - the ``before``/``after`` facts of one node
    DataflowResult  - read-only mapping from node id to :class:`NodeInfo`
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Dict, Generic, Hashable, Iterator, TypeVar

from .graph import Direction

F = TypeVar("F")


@dataclass(frozen=True)
class NodeInfo(Generic[F]):
    """The facts holding at the entry (``before``) and exit (``after``)
    points of a node."""
    before: F
    after: F


class DataflowResult(Mapping):
    """Mapping from node id to :class:`NodeInfo` at the fixpoint.

    Holds exactly one entry per node reachable from the traversal root.
    Compares equal to any mapping with the same items, so a plain ``dict``
    of expected :class:`NodeInfo` values can be used in assertions.

    Attributes
    ----------
    direction : Direction
        Direction of the analysis that produced the result.
    iterations : int
        Number of node evaluations performed by the worklist.
    elapsed_seconds : float
        Wall-clock time of the solve.
    """

    def __init__(
        self,
        infos: Dict[Hashable, NodeInfo],
        direction: Direction,
        iterations: int = 0,
        elapsed_seconds: float = 0.0,
    ) -> None:
        self._infos = dict(infos)
        self.direction = direction
        self.iterations = iterations
        self.elapsed_seconds = elapsed_seconds

    def __getitem__(self, node_id: Hashable) -> NodeInfo:
        return self._infos[node_id]

    def __iter__(self) -> Iterator[Hashable]:
        return iter(self._infos)

    def __len__(self) -> int:
        return len(self._infos)

    def before(self, node_id: Hashable) -> Any:
        """Fact holding immediately before *node_id*."""
        return self._infos[node_id].before

    def after(self, node_id: Hashable) -> Any:
        """Fact holding immediately after *node_id*."""
        return self._infos[node_id].after

    def to_dict(self) -> Dict[Hashable, NodeInfo]:
        return dict(self._infos)

    def __repr__(self) -> str:
        return (
            f"DataflowResult(direction={self.direction.value!r}, "
            f"nodes={len(self._infos)}, iterations={self.iterations})"
        )
