"""
Tests for DataTreeMatcher.
"""

import logging

import numpy as np
import pandas as pd
import pytest

from phylosensi.analysis.matching import DataTreeMatcher
from phylosensi.analysis.models import RegressionSpec
from phylosensi.core.exceptions import ConstructionError
from phylosensi.core.tree_utils import drop_tip, tip_labels


@pytest.fixture
def matcher():
    return DataTreeMatcher()


class TestDataTreeMatcher:
    """Test alignment of trait tables and trees."""

    def test_complete_match(self, matcher, trait_data, phylogeny):
        dataset = matcher.match(["y", "x"], trait_data, phylogeny)
        assert len(dataset) == 30
        assert list(dataset.data.index) == tip_labels(phylogeny)

    def test_accepts_regression_spec(self, matcher, trait_data, phylogeny):
        dataset = matcher.match(RegressionSpec.from_formula("y ~ x"), trait_data, phylogeny)
        assert len(dataset) == 30

    def test_extra_rows_are_dropped(self, matcher, trait_data, phylogeny, caplog):
        extra = pd.DataFrame({'y': [0.0], 'x': [0.0], 'z': [0]}, index=['stray'])
        data = pd.concat([trait_data, extra])
        with caplog.at_level(logging.WARNING):
            dataset = matcher.match(["y", "x"], data, phylogeny)
        assert 'stray' not in dataset.data.index
        assert "stray" in caplog.text

    def test_extra_tips_are_pruned(self, matcher, trait_data, phylogeny, caplog):
        data = trait_data.drop(index=['sp01', 'sp02'])
        with caplog.at_level(logging.WARNING):
            dataset = matcher.match(["y", "x"], data, phylogeny)
        assert len(dataset) == 28
        assert set(tip_labels(dataset.tree)) == set(data.index)
        assert len(tip_labels(phylogeny)) == 30
        assert "sp01" in caplog.text

    def test_missing_values_are_dropped(self, matcher, trait_data, phylogeny):
        data = trait_data.copy()
        data.loc['sp03', 'x'] = np.nan
        dataset = matcher.match(["y", "x"], data, phylogeny)
        assert 'sp03' not in dataset.data.index
        assert 'sp03' not in tip_labels(dataset.tree)

    def test_missing_values_outside_formula_are_kept(self, matcher, trait_data, phylogeny):
        data = trait_data.astype({'z': float})
        data.loc['sp03', 'z'] = np.nan
        dataset = matcher.match(["y", "x"], data, phylogeny)
        assert 'sp03' in dataset.data.index

    def test_collection_uses_shared_species(self, matcher, trait_data, tree_collection):
        trees = [tree_collection[0], drop_tip(tree_collection[1], 'sp07')]
        dataset = matcher.match(["y", "x"], trait_data, trees)
        assert dataset.is_collection
        assert len(dataset) == 29
        for tree in dataset.trees:
            assert set(tip_labels(tree)) == set(dataset.data.index)

    def test_missing_column(self, matcher, trait_data, phylogeny):
        with pytest.raises(ConstructionError) as exc_info:
            matcher.match(["y", "mass"], trait_data, phylogeny)
        assert exc_info.value.context['missing'] == ["mass"]

    def test_no_shared_species(self, matcher, trait_data, small_tree):
        with pytest.raises(ConstructionError):
            matcher.match(["y", "x"], trait_data, small_tree)

    def test_invalid_phylogeny(self, matcher, trait_data):
        with pytest.raises(ConstructionError):
            matcher.match(["y", "x"], trait_data, "((a,b),c);")

    def test_invalid_data(self, matcher, phylogeny):
        with pytest.raises(ConstructionError):
            matcher.match(["y", "x"], {'y': [1]}, phylogeny)
