"""
creek.analyzer
==============

The worklist fixpoint solver.

A dataflow problem is given by

1.  a **direction**: forward (facts flow along edges, from the entry) or
    backward (facts flow against edges, from the exit);
2.  a **top** fact, the identity of ``join``;
3.  a **transfer function** ``trans(node, fact) -> fact`` computing a node's
    after-fact from its before-fact (forward) or its before-fact from its
    after-fact (backward);
4.  a **join** ``join([fact, ...]) -> fact`` combining the facts of a node's
    predecessors (forward) or successors (backward).

:meth:`Analyzer.solve` iterates until no node's ``(before, after)`` pair
changes and returns a :class:`~creek.result.DataflowResult` with one
:class:`~creek.result.NodeInfo` per node reachable from the root.

Termination
-----------
Guaranteed only for a lattice of finite height and monotonic ``trans`` and
``join``.  Neither property is checked; pass ``max_iterations`` to turn
divergence into :class:`~creek.errors.FixpointNotReachedError`.

Usage example
-------------
::

    from creek import Analyzer

    def trans(node, fact):
        return fact | {node.id}

    def join(facts):
        return frozenset().union(*facts)

    analyzer = Analyzer.new_forwards(frozenset(), trans, join)
    result = analyzer.solve(graph)
    for node_id, info in result.items():
        print(node_id, sorted(info.before), sorted(info.after))
"""

from __future__ import annotations

import copy
import enum
import logging
import time
from collections import deque
from dataclasses import dataclass
from typing import Any, Callable, Deque, Dict, Hashable, Iterable, List, Optional, Set

from .checks import validate_graph
from .errors import FixpointNotReachedError
from .graph import Direction, Graph, JoinFn, TransFn
from .result import DataflowResult, NodeInfo

_log = logging.getLogger(__name__)


class WorklistOrder(enum.Enum):
    """Order in which pending nodes are taken off the worklist.

    Any order reaches the same fixpoint; only the number of evaluations
    differs.
    """
    FIFO = "fifo"
    LIFO = "lifo"


class _Unset:
    def __repr__(self) -> str:
        return "<unset>"


_UNSET: Any = _Unset()


@dataclass(frozen=True)
class _Sides:
    """Direction-dependent view of a graph.

    ``joins`` feed a node's join, ``nexts`` are re-queued when the node
    changes.  ``joined_is_before`` tells which half of :class:`NodeInfo`
    the join produces.
    """
    root: Callable[[Graph], Hashable]
    joins: Callable[[Graph, Hashable], Iterable[Hashable]]
    nexts: Callable[[Graph, Hashable], Iterable[Hashable]]
    joined_is_before: bool

    def join_fact(self, info: NodeInfo) -> Any:
        # forward joins predecessors' after-facts, backward joins
        # successors' before-facts
        return info.after if self.joined_is_before else info.before

    def make_info(self, joined: Any, transd: Any) -> NodeInfo:
        if self.joined_is_before:
            return NodeInfo(before=joined, after=transd)
        return NodeInfo(before=transd, after=joined)


_SIDES: Dict[Direction, _Sides] = {
    Direction.FORWARD: _Sides(
        root=lambda g: g.entry(),
        joins=lambda g, n: g.predecessors(n),
        nexts=lambda g, n: g.successors(n),
        joined_is_before=True,
    ),
    Direction.BACKWARD: _Sides(
        root=lambda g: g.exit(),
        joins=lambda g, n: g.successors(n),
        nexts=lambda g, n: g.predecessors(n),
        joined_is_before=False,
    ),
}


class Analyzer:
    """Fixpoint engine for one dataflow problem.

    Usually built with :meth:`new_forwards` or :meth:`new_backwards`.  The
    analyzer keeps no per-run state, so it can solve any number of graphs.

    Parameters
    ----------
    direction : Direction
        Forward or backward.
    top : fact
        Identity of *join*: ``join([top, f]) == f`` for every fact ``f``.
        Used for nodes with no neighbours on the join side and for
        neighbours that have not been visited yet.
    trans : callable(node, fact) -> fact
        The transfer function.  Receives the node returned by
        ``graph.lookup`` and a private copy of the input fact.
    join : callable(list of facts) -> fact
        Never called with an empty list.
    boundary : fact, optional
        Extra fact joined into the root's input (the classical entry fact
        of a forward problem, or exit fact of a backward one).  When
        omitted, the root is treated like every other node.
    order : WorklistOrder
        Worklist pop order.
    clone : callable(fact) -> fact
        Fact duplication.  Defaults to ``copy.deepcopy``; pass an identity
        function for immutable facts such as ``frozenset``.
    max_iterations : int, optional
        Upper bound on node evaluations.  ``None`` (default) means
        unbounded.
    validate : bool
        Run :func:`~creek.checks.validate_graph` before solving.
    """

    def __init__(
        self,
        direction: Direction,
        top: Any,
        trans: TransFn,
        join: JoinFn,
        *,
        boundary: Any = _UNSET,
        order: WorklistOrder = WorklistOrder.FIFO,
        clone: Callable[[Any], Any] = copy.deepcopy,
        max_iterations: Optional[int] = None,
        validate: bool = False,
    ) -> None:
        self.direction = Direction(direction)
        self.top = top
        self.trans = trans
        self.join = join
        self.boundary = boundary
        self.order = WorklistOrder(order)
        self.clone = clone
        self.max_iterations = max_iterations
        self.validate = validate
        self._sides = _SIDES[self.direction]

    @classmethod
    def new_forwards(cls, top: Any, trans: TransFn, join: JoinFn, **options: Any) -> "Analyzer":
        """Create a forward analyzer: ``after = trans(node, before)`` and
        ``before = join(after of predecessors)``."""
        return cls(Direction.FORWARD, top, trans, join, **options)

    @classmethod
    def new_backwards(cls, top: Any, trans: TransFn, join: JoinFn, **options: Any) -> "Analyzer":
        """Create a backward analyzer: ``before = trans(node, after)`` and
        ``after = join(before of successors)``."""
        return cls(Direction.BACKWARD, top, trans, join, **options)

    @property
    def has_boundary(self) -> bool:
        return self.boundary is not _UNSET

    def solve(self, graph: Graph) -> DataflowResult:
        """Run the analysis on *graph* to fixpoint.

        Returns
        -------
        DataflowResult
            ``NodeInfo`` for every node reachable from the root.

        Raises
        ------
        MalformedGraphError
            Only with ``validate=True``.
        FixpointNotReachedError
            Only with ``max_iterations`` set.
        """
        t0 = time.monotonic()
        if self.validate:
            validate_graph(graph, self.direction)

        sides = self._sides
        root = sides.root(graph)
        _log.debug("Solving %s problem from %s node %r",
                   self.direction.value, self.direction.root_name, root)

        infos: Dict[Hashable, NodeInfo] = {}
        worklist: Deque[Hashable] = deque([root])
        pending: Set[Hashable] = {root}
        lifo = self.order is WorklistOrder.LIFO
        iterations = 0

        while worklist:
            if self.max_iterations is not None and iterations >= self.max_iterations:
                raise FixpointNotReachedError(iterations, len(worklist))
            node_id = worklist.pop() if lifo else worklist.popleft()
            pending.discard(node_id)
            iterations += 1

            info = self.evaluate(graph, node_id, infos, root=root)
            if node_id in infos and infos[node_id] == info:
                continue
            infos[node_id] = info

            for nxt in sides.nexts(graph, node_id):
                if nxt not in pending:
                    pending.add(nxt)
                    worklist.append(nxt)

        elapsed = time.monotonic() - t0
        _log.debug("Fixpoint after %d evaluations over %d nodes in %.4fs",
                   iterations, len(infos), elapsed)
        return DataflowResult(
            infos,
            direction=self.direction,
            iterations=iterations,
            elapsed_seconds=elapsed,
        )

    def evaluate(
        self,
        graph: Graph,
        node_id: Hashable,
        infos: Dict[Hashable, NodeInfo],
        *,
        root: Any = _UNSET,
    ) -> NodeInfo:
        """Compute a node's ``NodeInfo`` from the facts recorded in *infos*.

        One step of the worklist: join the neighbours' facts (``top`` for
        unrecorded neighbours, ``top`` alone when there are none), then
        apply ``trans``.  *infos* is not modified.
        """
        sides = self._sides
        if root is _UNSET:
            root = sides.root(graph)

        inputs: List[Any] = []
        if self.has_boundary and node_id == root:
            inputs.append(self.clone(self.boundary))
        for other in sides.joins(graph, node_id):
            recorded = infos.get(other)
            if recorded is None:
                inputs.append(self.clone(self.top))
            else:
                inputs.append(self.clone(sides.join_fact(recorded)))

        joined = self.join(inputs) if inputs else self.clone(self.top)
        transd = self.trans(graph.lookup(node_id), self.clone(joined))
        return sides.make_info(joined, transd)

    def __repr__(self) -> str:
        return (
            f"Analyzer(direction={self.direction.value!r}, "
            f"order={self.order.value!r}, top={self.top!r})"
        )


# ===========================================================================
# CONVENIENCE FUNCTIONS
# ===========================================================================

def solve_forwards(graph: Graph, top: Any, trans: TransFn, join: JoinFn, **options: Any) -> DataflowResult:
    """Build a forward :class:`Analyzer` and solve *graph* with it.

    Keyword options are those of :class:`Analyzer`.
    """
    return Analyzer.new_forwards(top, trans, join, **options).solve(graph)


def solve_backwards(graph: Graph, top: Any, trans: TransFn, join: JoinFn, **options: Any) -> DataflowResult:
    """Build a backward :class:`Analyzer` and solve *graph* with it."""
    return Analyzer.new_backwards(top, trans, join, **options).solve(graph)
