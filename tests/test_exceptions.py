"""
Tests for the exception hierarchy.
"""

import warnings

from phylosensi.core.exceptions import (
    ConfigurationError, ConstructionError, EmptyResultError, FittingError, SensiError,
    UnderpoweredAggregationWarning
)


class TestSensiError:
    """Test the base SensiError exception."""

    def test_basic_error_creation(self):
        error = SensiError("Test error message")
        assert str(error) == "Test error message"
        assert error.message == "Test error message"
        assert error.context == {}

    def test_error_with_context(self):
        context = {'species': 'sp01'}
        error = SensiError("Test error with context", context=context)
        assert error.context == context
        error.context['tree'] = 3
        assert 'tree' not in context

    def test_error_repr(self):
        repr_str = repr(ConstructionError("bad input", context={'key': 'value'}))
        assert "ConstructionError" in repr_str
        assert "bad input" in repr_str

    def test_hierarchy(self):
        for cls in (ConstructionError, FittingError, EmptyResultError, ConfigurationError):
            assert issubclass(cls, SensiError)
        assert issubclass(UnderpoweredAggregationWarning, UserWarning)


class TestSpecificErrors:
    """Test the extra fields of specific errors."""

    def test_fitting_error_key(self):
        error = FittingError("no convergence", key='sp04')
        assert error.key == 'sp04'
        assert error.context['key'] == 'sp04'

    def test_fitting_error_without_key(self):
        assert 'key' not in FittingError("no convergence").context

    def test_empty_result_error(self):
        error = EmptyResultError("nothing left", n_success=1)
        assert error.n_success == 1
        assert error.context['n_success'] == 1

    def test_warning_can_be_filtered(self):
        with warnings.catch_warnings(record=True) as caught:
            warnings.simplefilter("always")
            warnings.warn("one fit", UnderpoweredAggregationWarning)
        assert caught[0].category is UnderpoweredAggregationWarning
