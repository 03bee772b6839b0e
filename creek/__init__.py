"""
creek: Generic Iterative Dataflow Analysis
==========================================

A worklist fixpoint solver for classical dataflow problems (liveness,
reaching definitions, available expressions, ...) over any caller-defined
control-flow graph and fact lattice.

Modules
-------
graph
    The contracts the solver consumes: ``Graph`` protocol, ``Direction``.
analyzer
    ``Analyzer`` (``new_forwards`` / ``new_backwards`` / ``solve``).
result
    ``NodeInfo`` and the ``DataflowResult`` mapping.
errors
    ``CreekError`` and its subclasses.
checks
    Graph validation and lattice-law checks for development.
cfg
    A small block-based control-flow graph implementing the contract.
analyses
    Liveness, possibly-uninitialised variables, reaching definitions.
blocklang
    Text notation for ``cfg.NodeGraph``, parsed with ``parsimonious``.

Quick start
-----------
>>> from creek import Analyzer, NodeGraph
>>> graph = NodeGraph.from_edges([("A", "B"), ("B", "C")], entry="A", exit="C")
>>> analyzer = Analyzer.new_forwards(
...     frozenset(), lambda node, f: f | {node.id}, lambda fs: frozenset().union(*fs))
>>> sorted(analyzer.solve(graph).after("C"))
['A', 'B', 'C']
"""

from __future__ import annotations

import importlib
import logging
import sys
from typing import TYPE_CHECKING, List

# ---------------------------------------------------------------------------
# Package metadata
# ---------------------------------------------------------------------------

__version__ = "0.2.0"
__author__ = "creek contributors"
__license__ = "MIT"
__all__: List[str] = []          # populated incrementally below

_log = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Internal registry: (module_name, list_of_names_to_import)
#
# Every module is imported eagerly; a failure is fatal.
# ---------------------------------------------------------------------------

_MODULES = {
    "graph": [
        "Direction",
        "Graph",
        "Node",
    ],
    "errors": [
        "CreekError",
        "MalformedGraphError",
        "FixpointNotReachedError",
        "BlockSyntaxError",
    ],
    "result": [
        "NodeInfo",
        "DataflowResult",
    ],
    "analyzer": [
        "Analyzer",
        "WorklistOrder",
        "solve_forwards",
        "solve_backwards",
    ],
    "checks": [
        "validate_graph",
        "check_join_identity",
        "check_monotonicity",
        "is_fixpoint",
    ],
    "cfg": [
        "Block",
        "NodeGraph",
        "Declare",
        "ConstAssign",
        "VarAssign",
    ],
    "analyses": [
        "LiveVariables",
        "PossiblyUninitialized",
        "ReachingDefinitions",
    ],
    "blocklang": [
        "parse_blocks",
        "load_blocks",
    ],
}

# ---------------------------------------------------------------------------
# Import helper
# ---------------------------------------------------------------------------

def _import_names(module_rel_name: str, names: List[str]) -> None:
    """Import *names* from a submodule and bind them in the package namespace.

    Parameters
    ----------
    module_rel_name:
        Module name relative to this package (e.g. ``"analyzer"``).
    names:
        Public symbols to re-export.
    """
    fq_name = f"{__name__}.{module_rel_name}"
    try:
        mod = importlib.import_module(fq_name)
    except ImportError as exc:
        raise ImportError(
            f"creek: required submodule '{module_rel_name}' "
            f"failed to import: {exc}"
        ) from exc

    current_module = sys.modules[__name__]
    for name in names:
        obj = getattr(mod, name, None)
        if obj is None:
            raise AttributeError(f"creek.{module_rel_name} does not export '{name}'")
        setattr(current_module, name, obj)
        __all__.append(name)

    setattr(current_module, module_rel_name, mod)
    if module_rel_name not in __all__:
        __all__.append(module_rel_name)
    _log.debug("Loaded creek.%s (%d names)", module_rel_name, len(names))

# ---------------------------------------------------------------------------
# Eagerly import everything at package load time
# ---------------------------------------------------------------------------

for _mod, _names in _MODULES.items():
    _import_names(_mod, _names)

del _mod, _names

# ---------------------------------------------------------------------------
# Package-level utilities
# ---------------------------------------------------------------------------

def list_submodules() -> List[str]:
    """Return the names of all submodules in the package."""
    return sorted(_MODULES)


def package_info() -> dict:
    """Return a dict of metadata about the loaded package."""
    loaded = []
    missing = []
    for mod_name in list_submodules():
        fq = f"{__name__}.{mod_name}"
        if fq in sys.modules:
            loaded.append(mod_name)
        else:
            missing.append(mod_name)

    return {
        "package": __name__,
        "version": __version__,
        "python": sys.version,
        "loaded_submodules": loaded,
        "missing_submodules": missing,
        "all_exports": list(__all__),
    }


__all__ += ["list_submodules", "package_info", "__version__"]

# ---------------------------------------------------------------------------
# TYPE_CHECKING block
# ---------------------------------------------------------------------------

if TYPE_CHECKING:
    from .graph import (
        Direction as Direction,
        Graph as Graph,
        Node as Node,
    )
    from .errors import (
        CreekError as CreekError,
        MalformedGraphError as MalformedGraphError,
        FixpointNotReachedError as FixpointNotReachedError,
        BlockSyntaxError as BlockSyntaxError,
    )
    from .result import (
        NodeInfo as NodeInfo,
        DataflowResult as DataflowResult,
    )
    from .analyzer import (
        Analyzer as Analyzer,
        WorklistOrder as WorklistOrder,
        solve_forwards as solve_forwards,
        solve_backwards as solve_backwards,
    )
    from .checks import (
        validate_graph as validate_graph,
        check_join_identity as check_join_identity,
        check_monotonicity as check_monotonicity,
        is_fixpoint as is_fixpoint,
    )
    from .cfg import (
        Block as Block,
        NodeGraph as NodeGraph,
        Declare as Declare,
        ConstAssign as ConstAssign,
        VarAssign as VarAssign,
    )
    from .analyses import (
        LiveVariables as LiveVariables,
        PossiblyUninitialized as PossiblyUninitialized,
        ReachingDefinitions as ReachingDefinitions,
    )
    from .blocklang import (
        parse_blocks as parse_blocks,
        load_blocks as load_blocks,
    )
