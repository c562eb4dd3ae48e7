#!/usr/bin/env python3
"""
Alignment of trait tables with phylogenies.

DataTreeMatcher reduces a trait table and one or more trees to the species
they share, so that the analyses only ever see identifier-consistent inputs.
"""

import logging
from typing import Iterable, List, Sequence, Union

import pandas as pd
from Bio.Phylo.BaseTree import Tree

from .models import AlignedDataset, RegressionSpec
from ..core.exceptions import ConstructionError
from ..core.tree_utils import is_tree, is_tree_collection, keep_tips, tip_labels

logger = logging.getLogger(__name__)


def _preview(names: Sequence[str], limit: int = 10) -> str:
    shown = ", ".join(str(n) for n in names[:limit])
    if len(names) > limit:
        shown += f", ... ({len(names) - limit} more)"
    return shown


class DataTreeMatcher:
    """
    Matches a trait table to a tree or a collection of trees.

    Rows with missing values in the formula columns are dropped first. Tips
    absent from the table are pruned from every tree and rows absent from any
    tree are dropped from the table. The returned table is ordered by the tip
    order of the (first) tree.
    """

    def match(self, fields: Union[RegressionSpec, Iterable[str]], data: pd.DataFrame,
              phy: Union[Tree, Sequence[Tree]]) -> AlignedDataset:
        """
        Align ``data`` and ``phy``.

        Args:
            fields: RegressionSpec or the column names used by the model
            data: Trait table indexed by species name
            phy: A single tree or a list/tuple of trees

        Returns:
            AlignedDataset with a single ``tree`` or a tuple of ``trees``

        Raises:
            ConstructionError: If columns are missing or no species are shared
        """
        columns = list(fields.fields if isinstance(fields, RegressionSpec) else fields)
        if not isinstance(data, pd.DataFrame):
            raise ConstructionError("data must be a pandas DataFrame")
        missing = [c for c in columns if c not in data.columns]
        if missing:
            raise ConstructionError(f"Columns not found in data: {missing}", context={'missing': missing})

        if is_tree(phy):
            trees: List[Tree] = [phy]
        elif is_tree_collection(phy):
            trees = list(phy)
        else:
            raise ConstructionError("phy must be a Bio.Phylo tree or a list of trees")

        complete = data.dropna(subset=columns)
        n_incomplete = len(data) - len(complete)
        if n_incomplete:
            logger.warning(f"{n_incomplete} species with missing values in {columns} were removed")

        shared = set(complete.index)
        for tree in trees:
            shared &= set(tip_labels(tree))
        if not shared:
            raise ConstructionError("No species are shared between data and phylogeny")

        dropped_rows = [sp for sp in complete.index if sp not in shared]
        if dropped_rows:
            logger.warning(f"Species in data but not in the phylogeny were dropped: {_preview(dropped_rows)}")

        matched_trees = []
        for position, tree in enumerate(trees):
            dropped_tips = [sp for sp in tip_labels(tree) if sp not in shared]
            if dropped_tips:
                logger.warning(f"Tips without data were pruned from tree {position}: {_preview(dropped_tips)}")
                tree = keep_tips(tree, shared)
            matched_trees.append(tree)

        order = tip_labels(matched_trees[0])
        matched = complete.loc[order]
        logger.debug(f"Matched {len(matched)} species across {len(matched_trees)} tree(s)")

        if is_tree(phy):
            return AlignedDataset(matched, tree=matched_trees[0])
        return AlignedDataset(matched, trees=tuple(matched_trees))
