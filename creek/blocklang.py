"""
creek.blocklang
===============

A text notation for :class:`creek.cfg.NodeGraph` s, handy for tests and for
documenting an analysis next to the graph it runs on.

::

    # one diamond
    entry block 1 -> 2, 3 {
        a = 0
        b = 1
    }
    block 2 -> 4 { c = b }
    block 3 -> 4 { c = a }
    exit block 4 { d = a }

Rules
-----
* A block is ``[entry] [exit] block <id> [-> <id>, ...] { <stmt>* }``.
* Statements are ``var x``, ``x = 5`` or ``x = y``, separated by newlines
  or ``;``.
* Only successors are written; predecessors are derived.
* Without an ``entry`` marker the first block is the entry; without an
  ``exit`` marker the last block is the exit.
* ``#`` starts a comment that runs to the end of the line.

Public API
----------
    BLOCK_GRAMMAR   - the Parsimonious PEG grammar
    parse_blocks    - text  -> NodeGraph
    load_blocks     - file  -> NodeGraph
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Tuple, Union

from parsimonious.exceptions import IncompleteParseError, ParseError, VisitationError
from parsimonious.grammar import Grammar
from parsimonious.nodes import NodeVisitor

from .cfg import Block, BlockId, ConstAssign, Declare, NodeGraph, Statement, VarAssign
from .errors import BlockSyntaxError

_log = logging.getLogger(__name__)


# ═══════════════════════════════════════════════════════════════════
#  GRAMMAR (Parsimonious PEG)
# ═══════════════════════════════════════════════════════════════════

BLOCK_GRAMMAR = Grammar(r'''
    graph       = _ block*

    block       = role* "block" __ block_id _ targets? "{" _ stmt* "}" _
    role        = ("entry" / "exit") __
    targets     = "->" _ block_id more_ids* _
    more_ids    = _ "," _ block_id

    stmt        = statement _ (";" _)?
    statement   = declare / assign
    declare     = "var" __ name
    assign      = name _ "=" _ value
    value       = number / name

    block_id    = ~r"-?[0-9]+"
    number      = ~r"-?[0-9]+"
    name        = ~r"[A-Za-z_][A-Za-z0-9_]*"

    __          = ~r"\s+"
    _           = meta*
    meta        = ~r"\s+" / ~r"#[^\n]*"
''')


@dataclass
class _BlockDecl:
    id: BlockId
    roles: Tuple[str, ...] = ()
    targets: List[BlockId] = field(default_factory=list)
    stmts: List[Statement] = field(default_factory=list)


# ═══════════════════════════════════════════════════════════════════
#  VISITOR (Parse Tree → block declarations)
# ═══════════════════════════════════════════════════════════════════

def _many(visited):
    # an unmatched `*` or `?` visits to the bare node rather than to []
    return visited if isinstance(visited, list) else []


class _BlockBuilder(NodeVisitor):
    """Transforms the Parsimonious parse tree into :class:`_BlockDecl` s."""

    def generic_visit(self, node, visited_children):
        return visited_children or node

    def visit_graph(self, node, visited_children):
        _, blocks = visited_children
        return _many(blocks)

    def visit_block(self, node, visited_children):
        roles, _, _, block_id, _, targets, _, _, stmts, _, _ = visited_children
        return _BlockDecl(
            id=block_id,
            roles=tuple(_many(roles)),
            targets=_many(targets)[0] if _many(targets) else [],
            stmts=_many(stmts),
        )

    def visit_role(self, node, visited_children):
        return node.text.strip()

    def visit_targets(self, node, visited_children):
        _, _, first, rest, _ = visited_children
        return [first, *_many(rest)]

    def visit_more_ids(self, node, visited_children):
        return visited_children[-1]

    def visit_stmt(self, node, visited_children):
        return visited_children[0]

    def visit_statement(self, node, visited_children):
        return visited_children[0]

    def visit_declare(self, node, visited_children):
        _, _, name = visited_children
        return Declare(name)

    def visit_assign(self, node, visited_children):
        var, _, _, _, value = visited_children
        if isinstance(value, int):
            return ConstAssign(var, value)
        return VarAssign(var, value)

    def visit_value(self, node, visited_children):
        return visited_children[0]

    def visit_block_id(self, node, visited_children):
        return int(node.text)

    def visit_number(self, node, visited_children):
        return int(node.text)

    def visit_name(self, node, visited_children):
        return node.text


# ═══════════════════════════════════════════════════════════════════
#  PUBLIC API
# ═══════════════════════════════════════════════════════════════════

def parse_blocks(text: str) -> NodeGraph:
    """Parse block notation into a :class:`NodeGraph`.

    Raises
    ------
    BlockSyntaxError
        On a syntax error, an empty graph, a duplicate block id, an edge to
        an undefined block, or more than one entry/exit marker.
    """
    try:
        tree = BLOCK_GRAMMAR.parse(text)
    except ParseError as exc:
        raise _syntax_error(text, exc) from exc
    try:
        decls: List[_BlockDecl] = _BlockBuilder().visit(tree)
    except VisitationError as exc:
        raise BlockSyntaxError(str(exc), cause=exc) from exc

    graph = _build_graph(decls)
    _log.debug("Parsed %d blocks (entry=%r, exit=%r)",
               len(graph), graph.entry(), graph.exit())
    return graph


def load_blocks(path: Union[str, Path]) -> NodeGraph:
    """Read and parse a block notation file."""
    return parse_blocks(Path(path).read_text(encoding="utf-8"))


def _syntax_error(text: str, exc: ParseError) -> BlockSyntaxError:
    if isinstance(exc, IncompleteParseError):
        # `block*` stops in front of a broken block; re-match that block
        # alone to find the statement that actually failed
        try:
            BLOCK_GRAMMAR["block"].match(text, pos=exc.pos)
        except ParseError as deeper:
            exc = deeper
    excerpt = text[exc.pos:exc.pos + 20].split("\n", 1)[0]
    return BlockSyntaxError(
        f"unexpected input {excerpt!r}",
        line=exc.line(),
        column=exc.column(),
        cause=exc,
    )


def _build_graph(decls: List[_BlockDecl]) -> NodeGraph:
    if not decls:
        raise BlockSyntaxError("no blocks defined")

    graph = NodeGraph(Block(decls[0].id, decls[0].stmts))
    for decl in decls[1:]:
        if decl.id in graph:
            raise BlockSyntaxError(f"duplicate block id {decl.id}")
        graph.insert(Block(decl.id, decl.stmts))

    for decl in decls:
        for target in decl.targets:
            if target not in graph:
                raise BlockSyntaxError(
                    f"block {decl.id} jumps to undefined block {target}"
                )
            graph.connect(decl.id, target)

    graph.mark_entry(_single_role(decls, "entry", default=decls[0].id))
    graph.mark_exit(_single_role(decls, "exit", default=decls[-1].id))
    return graph


def _single_role(decls: List[_BlockDecl], role: str, default: BlockId) -> BlockId:
    marked = [d.id for d in decls if role in d.roles]
    if len(marked) > 1:
        raise BlockSyntaxError(
            f"more than one {role} block: {', '.join(str(m) for m in marked)}"
        )
    return marked[0] if marked else default
