"""
Pytest configuration and shared fixtures.

This module contains shared test fixtures and configuration
for the phylosensi test suite.
"""

import logging
from io import StringIO
from typing import List

import numpy as np
import pandas as pd
import pytest
from Bio import Phylo

from stub_fitters import OLSFitter

# Configure logging for tests
logging.basicConfig(level=logging.DEBUG)


def random_newick(names: List[str], rng: np.random.Generator) -> str:
    """Random bifurcating Newick tree over ``names`` with random branch lengths."""
    def build(labels):
        if len(labels) == 1:
            return f"{labels[0]}:{rng.uniform(0.1, 1.0):.4f}"
        split = int(rng.integers(1, len(labels)))
        return f"({build(labels[:split])},{build(labels[split:])}):{rng.uniform(0.1, 1.0):.4f}"

    labels = [str(name) for name in rng.permutation(names)]
    split = int(rng.integers(1, len(labels)))
    return f"({build(labels[:split])},{build(labels[split:])});"


def parse_tree(newick: str, name: str = None):
    tree = Phylo.read(StringIO(newick), "newick")
    if name is not None:
        tree.name = name
    return tree


@pytest.fixture
def temp_dir(tmp_path):
    """Temporary directory for each test."""
    return tmp_path


@pytest.fixture(scope="session")
def species_names():
    """Thirty species identifiers."""
    return [f"sp{i:02d}" for i in range(1, 31)]


@pytest.fixture
def trait_data(species_names):
    """
    Trait table for 30 species: continuous response y, predictor x and a
    binary response z. sp05 is a gross outlier with high leverage.
    """
    rng = np.random.default_rng(2024)
    x = rng.normal(0.0, 1.0, len(species_names))
    x[4] = 3.0
    y = 1.0 + 2.0 * x + rng.normal(0.0, 0.5, len(species_names))
    y[4] += 10.0
    z = (y > np.median(y)).astype(int)
    return pd.DataFrame({'y': y, 'x': x, 'z': z}, index=pd.Index(species_names, name='species'))


@pytest.fixture
def phylogeny(species_names):
    """A random non-ultrametric tree over the 30 species."""
    rng = np.random.default_rng(7)
    return parse_tree(random_newick(species_names, rng), name="phylogeny")


@pytest.fixture
def tree_collection(species_names):
    """150 random trees over the 30 species, named tree0 ... tree149."""
    rng = np.random.default_rng(11)
    return [parse_tree(random_newick(species_names, rng), name=f"tree{i}") for i in range(150)]


@pytest.fixture
def small_tree():
    """Four-tip tree with known branch lengths."""
    return parse_tree("((a:1,b:2):3,(c:1,d:1):1);")


@pytest.fixture
def ultrametric_tree():
    """Four-tip ultrametric tree."""
    return parse_tree("((a:1,b:1):1,(c:1.5,d:1.5):0.5);")


@pytest.fixture
def small_data():
    """Trait table matching the four-tip trees."""
    return pd.DataFrame({'y': [1.0, 2.2, 2.9, 4.1], 'x': [1.0, 2.0, 3.0, 4.0]},
                        index=pd.Index(['a', 'b', 'c', 'd'], name='species'))


@pytest.fixture
def ols_fitter():
    """Least-squares fitter that ignores the phylogeny."""
    return OLSFitter()


@pytest.fixture
def progress_stream():
    """Text stream for capturing progress output."""
    return StringIO()
