"""
Tests for the result objects.
"""

import dataclasses

import pytest

from phylosensi.analysis.influence import influence_analysis
from phylosensi.analysis.results import render_errors
from phylosensi.analysis.uncertainty import tree_uncertainty_analysis
from phylosensi.core.constants import NO_ERRORS_MESSAGE
from phylosensi.core.exceptions import FittingError
from stub_fitters import OLSFitter


@pytest.fixture
def influence_result(trait_data, phylogeny):
    return influence_analysis("y ~ x", trait_data, phylogeny, OLSFitter(fail_without={'sp10'}), track=False)


@pytest.fixture
def tree_result(trait_data, tree_collection):
    return tree_uncertainty_analysis("z ~ x", trait_data, tree_collection, OLSFitter(tree_effect=0.01),
                                     n_tree=8, seed=3, track=False)


class TestRenderErrors:
    """Test the explicit error list."""

    def test_no_errors(self):
        assert render_errors({}) == NO_ERRORS_MESSAGE == "No errors found."

    def test_keys_in_order(self):
        log = {'sp02': FittingError("x"), 'sp01': FittingError("y")}
        assert render_errors(log) == ['sp02', 'sp01']


class TestInfluenceResult:
    """Test InfluenceResult accessors."""

    def test_errors(self, influence_result):
        assert influence_result.errors == ['sp10']

    def test_to_frame(self, influence_result):
        frame = influence_result.to_frame()
        assert frame.index.name == 'species'
        assert 'sp10' not in frame.index
        assert len(frame) == 29

    def test_estimates_are_copies(self, influence_result):
        table = influence_result.sensi_estimates
        table['estimate'] = 0.0
        assert (influence_result.sensi_estimates['estimate'] != 0.0).any()

    def test_data_is_a_copy(self, influence_result):
        data = influence_result.data
        data['x'] = 0.0
        assert (influence_result.data['x'] != 0.0).any()

    def test_error_log_is_read_only(self, influence_result):
        with pytest.raises(TypeError):
            influence_result.error_log['sp11'] = FittingError("late")

    def test_result_is_frozen(self, influence_result):
        with pytest.raises(dataclasses.FrozenInstanceError):
            influence_result.cutoff = 3.0

    def test_call_is_read_only(self, influence_result):
        with pytest.raises(TypeError):
            influence_result.call['cutoff'] = 3.0


class TestTreeUncertaintyResult:
    """Test TreeUncertaintyResult accessors."""

    def test_counts(self, tree_result):
        assert tree_result.n_tree == 8
        assert tree_result.n_success == 8
        assert not tree_result.underpowered
        assert tree_result.errors == NO_ERRORS_MESSAGE

    def test_to_frame(self, tree_result):
        frame = tree_result.to_frame()
        assert frame.index.name == 'tree'
        assert list(frame.index) == list(tree_result.tree_indices)

    def test_tree_indices_are_a_tuple(self, tree_result):
        assert isinstance(tree_result.tree_indices, tuple)

    def test_call(self, tree_result):
        assert tree_result.call['n_tree'] == 8
        assert tree_result.call['seed'] == 3
        assert tree_result.call['model'] == "logistic_MPLE"
