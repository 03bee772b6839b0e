"""
creek.analyses
==============

Ready-to-use analyses over :class:`creek.cfg.NodeGraph`.  All of them use
``frozenset`` facts with ``join = union`` and ``top = frozenset()``.

    LiveVariables          - backward; variables that may be read later
    PossiblyUninitialized  - forward; declared variables not yet assigned
    ReachingDefinitions    - forward; ``(variable, block id)`` definitions

Each class exposes ``transfer`` and ``join`` so they can also be handed to
a custom :class:`~creek.analyzer.Analyzer`.
"""

from __future__ import annotations

from typing import Any, FrozenSet, List, Set, Tuple

from .analyzer import Analyzer
from .cfg import Block, BlockId, ConstAssign, Declare, NodeGraph, VarAssign
from .graph import Direction
from .result import DataflowResult


def _keep(fact: FrozenSet) -> FrozenSet:
    return fact  # frozensets are immutable


class _SetAnalysis:
    """Powerset analysis with ``join = union``."""

    direction: Direction = Direction.FORWARD
    top: FrozenSet = frozenset()

    def transfer(self, block: Block, fact: FrozenSet) -> FrozenSet:
        raise NotImplementedError

    @staticmethod
    def join(facts: List[FrozenSet]) -> FrozenSet:
        return frozenset().union(*facts)

    def analyzer(self, **options: Any) -> Analyzer:
        """Build an :class:`Analyzer` for this analysis.

        Keyword options are passed through to :class:`Analyzer`.
        """
        options.setdefault("clone", _keep)
        return Analyzer(self.direction, self.top, self.transfer, self.join, **options)

    def run(self, graph: NodeGraph, **options: Any) -> DataflowResult:
        """Execute the analysis on *graph*."""
        return self.analyzer(**options).solve(graph)


class LiveVariables(_SetAnalysis):
    """Live variables (backward, may).

    A variable is *live* at a point if its current value may be read
    before being overwritten::

        before(b) = use(b) ∪ (after(b) - def(b))
        after(b)  = ∪ before(s) for s in succs(b)
    """

    direction = Direction.BACKWARD

    def transfer(self, block: Block, live_out: FrozenSet[str]) -> FrozenSet[str]:
        live: Set[str] = set(live_out)
        for stmt in reversed(block.stmts):
            if isinstance(stmt, (ConstAssign, VarAssign)):
                live.discard(stmt.var)
            if isinstance(stmt, VarAssign):
                live.add(stmt.source)
        return frozenset(live)


class PossiblyUninitialized(_SetAnalysis):
    """Definite assignment, phrased as the variables that are *possibly
    unassigned* (forward, may)::

        after(b)  = gen(b) ∪ (before(b) - kill(b))
        before(b) = ∪ after(p) for p in preds(b)

    where ``gen`` are the variables declared in ``b`` and ``kill`` those
    assigned in ``b``.  Statements are applied in order, so a variable
    declared and then assigned in the same block ends up initialised.
    """

    def transfer(self, block: Block, uninit_in: FrozenSet[str]) -> FrozenSet[str]:
        uninit: Set[str] = set(uninit_in)
        for stmt in block.stmts:
            if isinstance(stmt, Declare):
                uninit.add(stmt.var)
            else:
                uninit.discard(stmt.var)
        return frozenset(uninit)

    def uninitialized_reads(self, graph: NodeGraph, result: DataflowResult) -> List[Tuple[BlockId, str]]:
        """Return ``(block id, variable)`` for every ``x = y`` whose ``y``
        may be unassigned at that statement."""
        reads: List[Tuple[BlockId, str]] = []
        for block_id, info in result.items():
            uninit = set(info.before)
            for stmt in graph.lookup(block_id).stmts:
                if isinstance(stmt, VarAssign) and stmt.source in uninit:
                    reads.append((block_id, stmt.source))
                if isinstance(stmt, Declare):
                    uninit.add(stmt.var)
                else:
                    uninit.discard(stmt.var)
        return reads


Definition = Tuple[str, BlockId]


class ReachingDefinitions(_SetAnalysis):
    """Reaching definitions (forward, may).

    A *definition* is a ``(variable, block id)`` pair; a block generates at
    most one definition per variable, its last assignment.
    """

    def transfer(self, block: Block, defs_in: FrozenSet[Definition]) -> FrozenSet[Definition]:
        defs: Set[Definition] = set(defs_in)
        for stmt in block.stmts:
            if isinstance(stmt, (ConstAssign, VarAssign)):
                defs = {d for d in defs if d[0] != stmt.var}
                defs.add((stmt.var, block.id))
        return frozenset(defs)

    @staticmethod
    def definitions_of(result: DataflowResult, block_id: BlockId, var: str) -> FrozenSet[BlockId]:
        """Blocks whose definition of *var* reaches the start of *block_id*."""
        return frozenset(b for v, b in result.before(block_id) if v == var)
