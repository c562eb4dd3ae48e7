"""
Tests for the data model: evolutionary models, regression specs, fit
records and aligned datasets.
"""

import pandas as pd
import pytest

from phylosensi.analysis.models import (
    AlignedDataset, EvolutionaryModel, FitResult, InfluentialSpecies, IterationRecord, RegressionSpec
)
from phylosensi.core.exceptions import ConstructionError, FittingError
from phylosensi.core.tree_utils import drop_tip


class TestEvolutionaryModel:
    """Test the EvolutionaryModel enumeration."""

    def test_parse_by_tag(self):
        assert EvolutionaryModel.parse("lambda") is EvolutionaryModel.LAMBDA
        assert EvolutionaryModel.parse("OUfixedRoot") is EvolutionaryModel.OU_FIXED_ROOT
        assert EvolutionaryModel.parse(EvolutionaryModel.BM) is EvolutionaryModel.BM

    def test_parse_unknown(self):
        with pytest.raises(ConstructionError) as exc_info:
            EvolutionaryModel.parse("brownian")
        assert "brownian" in str(exc_info.value)
        assert exc_info.value.context['model'] == "brownian"

    def test_parse_is_case_sensitive(self):
        with pytest.raises(ConstructionError):
            EvolutionaryModel.parse("Lambda")

    def test_optpar_applicability(self):
        """BM and trend have no optimized phylogenetic parameter."""
        assert not EvolutionaryModel.BM.has_optpar
        assert not EvolutionaryModel.TREND.has_optpar
        for model in ("OUfixedRoot", "OUrandomRoot", "lambda", "kappa", "delta", "EB"):
            assert EvolutionaryModel.parse(model).has_optpar

    def test_linearity(self):
        assert EvolutionaryModel.LAMBDA.is_linear
        assert not EvolutionaryModel.LOGISTIC_MPLE.is_linear


class TestRegressionSpec:
    """Test formula parsing and spec validation."""

    def test_from_formula(self):
        spec = RegressionSpec.from_formula("y ~ x", model="kappa")
        assert spec.response == "y"
        assert spec.predictor == "x"
        assert spec.model is EvolutionaryModel.KAPPA
        assert spec.formula == "y ~ x"
        assert spec.fields == ("y", "x")

    def test_whitespace_is_ignored(self):
        spec = RegressionSpec.from_formula("  body_mass~range_size ")
        assert spec.formula == "body_mass ~ range_size"

    @pytest.mark.parametrize("formula", ["y x", "y ~ x ~ w", " ~ x", "y ~ ", "y ~ x + w", "y ~ x * w", "y ~ x:w"])
    def test_malformed_formula(self, formula):
        with pytest.raises(ConstructionError):
            RegressionSpec.from_formula(formula)

    def test_non_string_formula(self):
        with pytest.raises(ConstructionError):
            RegressionSpec.from_formula(None)

    def test_response_equals_predictor(self):
        with pytest.raises(ConstructionError):
            RegressionSpec.from_formula("y ~ y")

    def test_unknown_model(self):
        with pytest.raises(ConstructionError):
            RegressionSpec("y", "x", model="OU")

    def test_options_are_read_only(self):
        spec = RegressionSpec.from_formula("y ~ x", btol=10)
        assert spec.options['btol'] == 10
        with pytest.raises(TypeError):
            spec.options['btol'] = 20

    def test_with_options_returns_new_spec(self):
        spec = RegressionSpec.from_formula("y ~ x", btol=10)
        updated = spec.with_options(btol=20, method="ML")
        assert updated.options == {'btol': 20, 'method': "ML"}
        assert spec.options == {'btol': 10}
        assert updated.model is spec.model


class TestRecords:
    """Test FitResult, IterationRecord and InfluentialSpecies."""

    def test_fit_result_defaults(self):
        fit = FitResult(intercept=1.0, estimate=2.0, pval_intercept=0.1, pval_estimate=0.01, aic=10.0)
        assert fit.optpar is None
        assert fit.se_estimate is None
        assert fit.as_dict()['estimate'] == 2.0

    def test_iteration_record_success(self):
        fit = FitResult(1.0, 2.0, 0.1, 0.01, 10.0)
        record = IterationRecord(key="sp01", result=fit)
        assert record.succeeded

    def test_iteration_record_failure(self):
        record = IterationRecord(key=3, error=FittingError("failed"))
        assert not record.succeeded
        assert record.result is None

    def test_influential_species_as_dict(self):
        influential = InfluentialSpecies(estimate=("sp05", "sp02"), intercept=("sp05",))
        assert influential.as_dict() == {'influ_sp_estimate': ["sp05", "sp02"],
                                         'influ_sp_intercept': ["sp05"]}


class TestAlignedDataset:
    """Test the identifier invariant of AlignedDataset."""

    def test_single_tree(self, small_data, small_tree):
        dataset = AlignedDataset(small_data, tree=small_tree)
        assert len(dataset) == 4
        assert not dataset.is_collection
        assert dataset.species == ['a', 'b', 'c', 'd']
        assert "4 species" in repr(dataset)

    def test_tree_collection(self, small_data, small_tree, ultrametric_tree):
        dataset = AlignedDataset(small_data, trees=[small_tree, ultrametric_tree])
        assert dataset.is_collection
        assert len(dataset.all_trees) == 2

    def test_needs_exactly_one_tree_argument(self, small_data, small_tree):
        with pytest.raises(ConstructionError):
            AlignedDataset(small_data)
        with pytest.raises(ConstructionError):
            AlignedDataset(small_data, tree=small_tree, trees=(small_tree,))

    def test_row_count_mismatch(self, small_data, small_tree):
        with pytest.raises(ConstructionError):
            AlignedDataset(small_data, tree=drop_tip(small_tree, 'a'))

    def test_label_mismatch(self, small_data, small_tree):
        renamed = small_data.rename(index={'a': 'z'})
        with pytest.raises(ConstructionError):
            AlignedDataset(renamed, tree=small_tree)

    def test_duplicate_species(self, small_tree):
        data = pd.DataFrame({'y': [1, 2, 3, 4], 'x': [1, 2, 3, 4]}, index=['a', 'a', 'c', 'd'])
        with pytest.raises(ConstructionError) as exc_info:
            AlignedDataset(data, tree=small_tree)
        assert exc_info.value.context['duplicates'] == ['a']

    def test_mismatch_in_second_tree(self, small_data, small_tree):
        with pytest.raises(ConstructionError) as exc_info:
            AlignedDataset(small_data, trees=(small_tree, drop_tip(small_tree, 'd')))
        assert exc_info.value.context['tree_index'] == 1
