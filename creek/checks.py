"""
creek.checks
============

Development and debugging utilities.  None of these are called on the
solver's hot path except :func:`validate_graph`, and only when an analyzer
is built with ``validate=True``.

    validate_graph        - fail-fast walk over the reachable part of a graph
    check_join_identity   - ``join([top, f]) == f`` and ``join([f]) == f``
    check_monotonicity    - ``a ⊑ b  ⇒  trans(n, a) ⊑ trans(n, b)`` on samples
    is_fixpoint           - one more round over a result changes nothing

The law checks can only detect violations on the samples they are given;
they cannot prove a lattice or transfer function correct.
"""

from __future__ import annotations

from collections import deque
from typing import (
    TYPE_CHECKING,
    Any,
    Callable,
    Hashable,
    Iterable,
    List,
    Mapping,
    Sequence,
    Set,
)

from .errors import MalformedGraphError
from .graph import Direction, Graph, JoinFn, TransFn
from .result import NodeInfo

if TYPE_CHECKING:
    from .analyzer import Analyzer


def _neighbours(graph: Graph, node_id: Hashable) -> List[Hashable]:
    return list(graph.predecessors(node_id)) + list(graph.successors(node_id))


def validate_graph(graph: Graph, direction: Direction = Direction.FORWARD) -> Set[Hashable]:
    """Check that every id reachable from the traversal root resolves.

    Walks from ``graph.entry()`` (forward) or ``graph.exit()`` (backward)
    along the propagation side, and checks every id produced by either
    adjacency of a visited node with ``graph.lookup``.

    Returns
    -------
    set
        The ids reachable from the root in *direction*.

    Raises
    ------
    MalformedGraphError
        For the first id that ``lookup`` cannot resolve.
    """
    direction = Direction(direction)
    root = graph.entry() if direction is Direction.FORWARD else graph.exit()
    nexts = graph.successors if direction is Direction.FORWARD else graph.predecessors

    _resolve(graph, root, None)
    seen: Set[Hashable] = {root}
    queue = deque([root])
    while queue:
        node_id = queue.popleft()
        for other in _neighbours(graph, node_id):
            _resolve(graph, other, node_id)
        for other in nexts(node_id):
            if other not in seen:
                seen.add(other)
                queue.append(other)
    return seen


def _resolve(graph: Graph, node_id: Hashable, referrer: Any) -> None:
    try:
        graph.lookup(node_id)
    except LookupError as exc:
        raise MalformedGraphError(node_id, referrer, cause=exc) from exc


def check_join_identity(top: Any, join: JoinFn, samples: Iterable[Any]) -> bool:
    """Return ``True`` iff ``top`` behaves as join's identity on *samples*."""
    for f in samples:
        if join([top, f]) != f or join([f, top]) != f:
            return False
        if join([f]) != f:
            return False
    return True


def check_monotonicity(
    trans: TransFn,
    node: Any,
    samples: Sequence[Any],
    leq: Callable[[Any, Any], bool],
) -> bool:
    """Check that ``trans(node, ·)`` is monotone on the given samples.

    For every pair ``(a, b)`` in *samples* where ``leq(a, b)``, verifies
    that ``leq(trans(node, a), trans(node, b))``.

    Parameters
    ----------
    trans : callable
    node : object
        The node handed to *trans*.
    samples : sequence
        Sample facts.
    leq : callable(a, b) -> bool
        The lattice order.  The solver never needs one, so it is supplied
        here explicitly.
    """
    for a in samples:
        for b in samples:
            if leq(a, b) and not leq(trans(node, a), trans(node, b)):
                return False
    return True


def is_fixpoint(
    analyzer: Analyzer,
    graph: Graph,
    result: Mapping[Hashable, NodeInfo],
) -> bool:
    """Re-evaluate every node of *result* once and report stability.

    Uses the analyzer's own ``top``/``trans``/``join`` and the recorded
    neighbour facts, i.e. exactly one more worklist round with every node
    pending.  A result returned by :meth:`Analyzer.solve` always passes.
    """
    infos = dict(result)
    for node_id, info in infos.items():
        if analyzer.evaluate(graph, node_id, infos) != info:
            return False
    return True
