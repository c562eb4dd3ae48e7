#!/usr/bin/env python3
"""
Exception hierarchy for phylosensi.

Construction and empty-result errors are fatal and always reach the caller.
Fitting errors are raised by model fitters and absorbed per iteration into
the error log of a sensitivity analysis.
"""

from typing import Any, Dict, Optional


class SensiError(Exception):
    """Base class for all phylosensi errors."""

    def __init__(self, message: str, context: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.context = dict(context) if context else {}

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.message!r}, context={self.context!r})"


class ConstructionError(SensiError):
    """Invalid inputs detected before any resampling iteration runs."""


class FittingError(SensiError):
    """A single model fit failed (non-convergence or internal fitter error)."""

    def __init__(self, message: str, key: Any = None, context: Optional[Dict[str, Any]] = None):
        super().__init__(message, context=context)
        self.key = key
        if key is not None:
            self.context['key'] = key


class EmptyResultError(SensiError):
    """Too few successful iterations to compute the requested statistics."""

    def __init__(self, message: str, n_success: int = 0, context: Optional[Dict[str, Any]] = None):
        super().__init__(message, context=context)
        self.n_success = n_success
        self.context['n_success'] = n_success


class ConfigurationError(SensiError):
    """Configuration file could not be read or failed validation."""


class UnderpoweredAggregationWarning(UserWarning):
    """Fewer than two successful tree fits; spread and interval are undefined."""


class FailedFitsWarning(UserWarning):
    """Some refits failed; their keys and errors are in the result's error log."""
