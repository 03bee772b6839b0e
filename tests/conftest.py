# tests/conftest.py
"""
Shared helpers for the creek test-suite.

``DictGraph`` is a deliberately minimal caller graph (string ids, no
statements) so the solver is exercised through the contract alone, not
through :class:`creek.cfg.NodeGraph`.
"""

from collections import defaultdict
from dataclasses import dataclass

import pytest


@dataclass(frozen=True)
class Item:
    id: str


class DictGraph:
    """Graph built from an edge list; every endpoint becomes a node."""

    def __init__(self, edges, entry, exit, nodes=()):
        self._entry = entry
        self._exit = exit
        self._preds = defaultdict(list)
        self._succs = defaultdict(list)
        self.nodes = {entry, exit, *nodes}
        for src, dst in edges:
            self._succs[src].append(dst)
            self._preds[dst].append(src)
            self.nodes.update((src, dst))

    def lookup(self, node_id):
        if node_id not in self.nodes:
            raise KeyError(node_id)
        return Item(node_id)

    def predecessors(self, node_id):
        return list(self._preds[node_id])

    def successors(self, node_id):
        return list(self._succs[node_id])

    def entry(self):
        return self._entry

    def exit(self):
        return self._exit


def make_graph(edges, entry, exit, nodes=()):
    return DictGraph(edges, entry, exit, nodes)


def add_self(node, fact):
    """trans(n, f) = f ∪ {n.id}"""
    return fact | {node.id}


def union(facts):
    return frozenset().union(*facts)


def s(*items):
    return frozenset(items)


@pytest.fixture
def chain():
    return make_graph([("A", "B"), ("B", "C")], "A", "C")


@pytest.fixture
def diamond():
    return make_graph([("A", "B"), ("A", "C"), ("B", "D"), ("C", "D")], "A", "D")


@pytest.fixture
def loop():
    return make_graph([("A", "B"), ("B", "B"), ("B", "C")], "A", "C")
