"""
creek.cfg
=========

A small control-flow graph that satisfies the :class:`creek.graph.Graph`
contract.  A :class:`NodeGraph` is a set of :class:`Block` s, each holding a
straight-line list of statements:

* ``Declare(var)``          - ``var a``
* ``ConstAssign(var, n)``   - ``a = 1``
* ``VarAssign(var, src)``   - ``a = b``

It is what the bundled analyses (:mod:`creek.analyses`) run on and what the
block notation (:mod:`creek.blocklang`) parses into; any other graph type
implementing the contract works with the solver just as well.

Typical usage::

    from creek.cfg import Block, ConstAssign, NodeGraph, VarAssign

    graph = NodeGraph(Block(1, [ConstAssign("a", 0)]))
    graph.insert_exit(Block(2, [VarAssign("b", "a")]))
    graph.connect(1, 2)
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import (
    Any,
    Dict,
    Hashable,
    Iterable,
    Iterator,
    List,
    Mapping,
    Optional,
    Sequence,
    Tuple,
    Union,
)

BlockId = int
Variable = str


# ---------------------------------------------------------------------------
# Statements
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Declare:
    """``var x``: introduces *var* without a value."""
    var: Variable

    def __str__(self) -> str:
        return f"var {self.var}"


@dataclass(frozen=True)
class ConstAssign:
    """``x = 5``"""
    var: Variable
    value: int

    def __str__(self) -> str:
        return f"{self.var} = {self.value}"


@dataclass(frozen=True)
class VarAssign:
    """``x = a``"""
    var: Variable
    source: Variable

    def __str__(self) -> str:
        return f"{self.var} = {self.source}"


Statement = Union[Declare, ConstAssign, VarAssign]


# ---------------------------------------------------------------------------
# Block
# ---------------------------------------------------------------------------

@dataclass
class Block:
    """A basic block.

    ``preds`` and ``succs`` are kept symmetric by :meth:`NodeGraph.connect`;
    blocks built by hand must keep them consistent themselves.
    """
    id: BlockId
    stmts: List[Statement] = field(default_factory=list)
    preds: List[BlockId] = field(default_factory=list)
    succs: List[BlockId] = field(default_factory=list)

    def label(self) -> str:
        return "\n".join(str(s) for s in self.stmts)


# ---------------------------------------------------------------------------
# NodeGraph
# ---------------------------------------------------------------------------

class NodeGraph:
    """A control-flow graph of :class:`Block` s with one entry and one exit.

    The first block becomes both entry and exit; :meth:`insert_entry` and
    :meth:`insert_exit` move those roles.
    """

    def __init__(self, block: Block) -> None:
        self.blocks: Dict[BlockId, Block] = {}
        self.block_ids: List[BlockId] = []
        self._entry = block.id
        self._exit = block.id
        self.insert(block)

    @classmethod
    def from_edges(
        cls,
        edges: Iterable[Tuple[BlockId, BlockId]],
        *,
        entry: BlockId,
        exit: BlockId,
        nodes: Iterable[BlockId] = (),
        stmts: Optional[Mapping[BlockId, Sequence[Statement]]] = None,
    ) -> "NodeGraph":
        """Build a graph from an edge list.

        Blocks are created for *entry*, *exit*, every id in *nodes* and
        every edge endpoint, with statements taken from *stmts*.
        """
        stmts = stmts or {}
        edges = list(edges)
        order: List[BlockId] = []
        for bid in [entry, *nodes, *(b for e in edges for b in e), exit]:
            if bid not in order:
                order.append(bid)

        graph = cls(Block(entry, list(stmts.get(entry, ()))))
        for bid in order[1:]:
            graph.insert(Block(bid, list(stmts.get(bid, ()))))
        graph.mark_exit(exit)
        for src, dst in edges:
            graph.connect(src, dst)
        return graph

    # ----- construction -----------------------------------------------------

    def insert(self, block: Block) -> None:
        """Insert a block.  Raises ``ValueError`` on a duplicate id."""
        if block.id in self.blocks:
            raise ValueError(f"duplicate block id {block.id!r}")
        self.blocks[block.id] = block
        self.block_ids.append(block.id)

    def insert_entry(self, block: Block) -> None:
        """Insert a block and make it the entry."""
        self.insert(block)
        self._entry = block.id

    def insert_exit(self, block: Block) -> None:
        """Insert a block and make it the exit."""
        self.insert(block)
        self._exit = block.id

    def mark_entry(self, node_id: BlockId) -> None:
        """Make an already inserted block the entry."""
        if node_id not in self.blocks:
            raise KeyError(node_id)
        self._entry = node_id

    def mark_exit(self, node_id: BlockId) -> None:
        """Make an already inserted block the exit."""
        if node_id not in self.blocks:
            raise KeyError(node_id)
        self._exit = node_id

    def connect(self, src: BlockId, dst: BlockId) -> None:
        """Add the edge ``src -> dst`` (idempotent)."""
        s = self.blocks[src]
        d = self.blocks[dst]
        if dst not in s.succs:
            s.succs.append(dst)
        if src not in d.preds:
            d.preds.append(src)

    # ----- Graph contract ---------------------------------------------------

    def lookup(self, node_id: Hashable) -> Block:
        return self.blocks[node_id]

    def predecessors(self, node_id: Hashable) -> List[BlockId]:
        return self.blocks[node_id].preds

    def successors(self, node_id: Hashable) -> List[BlockId]:
        return self.blocks[node_id].succs

    def entry(self) -> BlockId:
        return self._entry

    def exit(self) -> BlockId:
        return self._exit

    # ----- queries ----------------------------------------------------------

    def node_ids(self) -> List[BlockId]:
        """All block ids in insertion order."""
        return list(self.block_ids)

    def edges(self) -> List[Tuple[BlockId, BlockId]]:
        return [(b, s) for b in self.block_ids for s in self.blocks[b].succs]

    def reversed(self) -> "NodeGraph":
        """Return a copy with every edge flipped and entry/exit swapped."""
        def flipped(bid: BlockId) -> Block:
            b = self.blocks[bid]
            return Block(bid, list(b.stmts), preds=list(b.succs), succs=list(b.preds))

        graph = NodeGraph(flipped(self._exit))
        for bid in self.block_ids:
            if bid != self._exit:
                graph.insert(flipped(bid))
        graph.mark_entry(self._exit)
        graph.mark_exit(self._entry)
        return graph

    def __contains__(self, node_id: object) -> bool:
        return node_id in self.blocks

    def __iter__(self) -> Iterator[Block]:
        return (self.blocks[b] for b in self.block_ids)

    def __len__(self) -> int:
        return len(self.block_ids)

    # ----- serialisation helpers --------------------------------------------

    def to_dot(self, title: Optional[str] = None, result: Optional[Mapping[Any, Any]] = None) -> str:
        """Return a Graphviz DOT representation of this graph.

        When *result* (a solver result) is given, each block is annotated
        with its ``before``/``after`` facts.
        """
        lines = ["digraph CFG {"]
        if title:
            lines.append(f'  label="{_dot_escape(title)}";')
        lines.append("  node [shape=box, fontname=monospace, fontsize=10];")
        for bid in self.block_ids:
            text = f"B{bid}"
            body = self.blocks[bid].label()
            if body:
                text += "\n" + body
            if result is not None and bid in result:
                info = result[bid]
                text += f"\nbefore: {_fmt_fact(info.before)}\nafter: {_fmt_fact(info.after)}"
            color = ""
            if bid == self._entry:
                color = ', style=filled, fillcolor="#ccffcc"'
            elif bid == self._exit:
                color = ', style=filled, fillcolor="#ffcccc"'
            lines.append(f'  B{bid} [label="{_dot_escape(text)}"{color}];')
        for src, dst in self.edges():
            lines.append(f"  B{src} -> B{dst};")
        lines.append("}")
        return "\n".join(lines)

    def __repr__(self) -> str:
        return (
            f"NodeGraph(blocks={len(self.block_ids)}, entry={self._entry!r}, "
            f"exit={self._exit!r})"
        )


def _fmt_fact(fact: Any) -> str:
    if isinstance(fact, (set, frozenset)):
        return "{" + ", ".join(sorted(str(f) for f in fact)) + "}"
    return str(fact)


def _dot_escape(text: str) -> str:
    return text.replace("\\", "\\\\").replace('"', '\\"').replace("\n", "\\n")
