#!/usr/bin/env python3
"""
Tree helpers built on Bio.Phylo.

All functions that modify topology work on a deep copy so that the aligned
tree held by an analysis is never mutated by a resampling iteration.
"""

import copy
import logging
from typing import Iterable, List

from Bio.Phylo.BaseTree import Tree

from .constants import ULTRAMETRIC_TOLERANCE

logger = logging.getLogger(__name__)


def is_tree(obj) -> bool:
    """Return True for a single Bio.Phylo tree."""
    return isinstance(obj, Tree)


def is_tree_collection(obj) -> bool:
    """Return True for a non-empty list or tuple made only of Bio.Phylo trees."""
    return (isinstance(obj, (list, tuple)) and len(obj) > 0
            and all(isinstance(t, Tree) for t in obj))


def tip_labels(tree: Tree) -> List[str]:
    """Tip names in tree (depth-first) order."""
    return [terminal.name for terminal in tree.get_terminals()]


def drop_tip(tree: Tree, name: str) -> Tree:
    """
    Return a copy of ``tree`` without the tip ``name``.

    Internal nodes left with a single child are collapsed into that child and
    their branch length is added to it, so no unary nodes remain.

    Raises:
        ValueError: If no tip carries that name.
    """
    pruned = copy.deepcopy(tree)
    for terminal in pruned.get_terminals():
        if terminal.name == name:
            pruned.prune(terminal)
            return pruned
    raise ValueError(f"Tip not found in tree: {name}")


def keep_tips(tree: Tree, names: Iterable[str]) -> Tree:
    """Return a copy of ``tree`` restricted to the tips in ``names``."""
    keep = set(names)
    pruned = copy.deepcopy(tree)
    dropped = [t for t in pruned.get_terminals() if t.name not in keep]
    for terminal in dropped:
        pruned.prune(terminal)
    if dropped:
        logger.debug(f"Pruned {len(dropped)} tips, {len(pruned.get_terminals())} remain")
    return pruned


def tip_depths(tree: Tree) -> List[float]:
    """Root-to-tip path lengths; missing branch lengths count as zero."""
    depths = tree.depths()
    return [depths[terminal] for terminal in tree.get_terminals()]


def is_ultrametric(tree: Tree, tol: float = ULTRAMETRIC_TOLERANCE) -> bool:
    """
    Test whether all tips are equidistant from the root.

    Uses the relative range of root-to-tip depths, (max - min) / max.
    A tree without branch lengths is not ultrametric.
    """
    depths = tip_depths(tree)
    deepest = max(depths)
    if deepest <= 0:
        return False
    return (deepest - min(depths)) / deepest <= tol

