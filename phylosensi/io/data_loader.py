#!/usr/bin/env python3
"""
Input loading for the command line.

Reads trait tables with pandas and trees with Bio.Phylo.
"""

import logging
from pathlib import Path
from typing import List, Optional, Union

import pandas as pd
from Bio import Phylo
from Bio.Phylo.BaseTree import Tree

from ..core.constants import DEFAULT_TREE_FORMAT
from ..core.exceptions import ConstructionError

logger = logging.getLogger(__name__)

TREE_FORMATS = ("newick", "nexus", "phyloxml", "nexml")


def load_trait_table(path: Union[str, Path], species_column: Optional[str] = None) -> pd.DataFrame:
    """
    Load a trait table indexed by species name.

    Args:
        path: CSV or TSV file (``.tsv``/``.tab`` are read tab-separated)
        species_column: Column holding species names (default: first column)

    Returns:
        DataFrame indexed by species

    Raises:
        ConstructionError: If the file is missing or has no such column
    """
    path = Path(path)
    if not path.exists():
        raise ConstructionError(f"Trait table not found: {path}")

    sep = "\t" if path.suffix.lower() in (".tsv", ".tab") else ","
    if species_column is None:
        table = pd.read_csv(path, sep=sep, index_col=0)
    else:
        table = pd.read_csv(path, sep=sep)
        if species_column not in table.columns:
            raise ConstructionError(f"Species column '{species_column}' not found in {path}")
        table = table.set_index(species_column)

    table.index = table.index.astype(str)
    logger.info(f"Loaded {len(table)} species and {len(table.columns)} traits from {path}")
    return table


def load_trees(path: Union[str, Path], tree_format: str = DEFAULT_TREE_FORMAT) -> List[Tree]:
    """
    Load every tree in a file.

    Raises:
        ConstructionError: If the file is missing, the format is unknown or
            the file holds no tree
    """
    path = Path(path)
    if not path.exists():
        raise ConstructionError(f"Tree file not found: {path}")
    if tree_format not in TREE_FORMATS:
        raise ConstructionError(f"Unsupported tree format '{tree_format}'. Valid options: {', '.join(TREE_FORMATS)}")

    trees = list(Phylo.parse(str(path), tree_format))
    if not trees:
        raise ConstructionError(f"No trees found in {path}")

    logger.info(f"Loaded {len(trees)} tree(s) from {path}")
    return trees
