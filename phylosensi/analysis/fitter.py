#!/usr/bin/env python3
"""
Model fitter interface.

phylosensi does not fit phylogenetic regressions itself. Analyses receive a
ModelFitter and call it once for the full dataset and once per resampling
iteration. attempt_fit turns each call into an IterationRecord so that the
resampling loops branch on the outcome instead of catching exceptions.
"""

import importlib
import logging
from abc import ABC, abstractmethod
from typing import Any, Callable, Union

import pandas as pd
from Bio.Phylo.BaseTree import Tree

from .models import FitResult, IterationRecord, RegressionSpec
from ..core.exceptions import ConfigurationError, FittingError

logger = logging.getLogger(__name__)


class ModelFitter(ABC):
    """
    Abstract base class for phylogenetic regression fitters.

    Implementations wrap an actual regression routine (PGLS, phylogenetic
    logistic regression, ...) and must support every EvolutionaryModel tag
    they are used with. Non-convergence must be reported by raising
    FittingError (or returning one), never by returning default values.
    """

    @abstractmethod
    def fit(self, spec: RegressionSpec, data: pd.DataFrame, tree: Tree) -> FitResult:
        """
        Fit ``spec`` to ``data`` on ``tree``.

        Args:
            spec: Formula, evolutionary model and extra options
            data: Trait table indexed by species, rows matching the tree tips
            tree: Phylogeny for this fit

        Returns:
            FitResult with coefficients and diagnostics

        Raises:
            FittingError: If the model cannot be fitted
        """
        pass


FitterLike = Union[ModelFitter, Callable[[RegressionSpec, pd.DataFrame, Tree], FitResult]]


def call_fitter(fitter: FitterLike, spec: RegressionSpec, data: pd.DataFrame, tree: Tree) -> FitResult:
    """Invoke a ModelFitter or a plain ``fit(spec, data, tree)`` callable."""
    if isinstance(fitter, ModelFitter) or hasattr(fitter, 'fit'):
        outcome = fitter.fit(spec, data, tree)
    else:
        outcome = fitter(spec, data, tree)

    if isinstance(outcome, FittingError):
        raise outcome
    if not isinstance(outcome, FitResult):
        raise FittingError(f"Fitter returned {type(outcome).__name__}, expected FitResult")
    return outcome


def attempt_fit(fitter: FitterLike, spec: RegressionSpec, data: pd.DataFrame,
                tree: Tree, key: Any) -> IterationRecord:
    """
    Run one fit and capture its outcome.

    Any exception raised by the fitter is stored in the returned record; it
    does not propagate.

    Args:
        fitter: Model fitter to call
        spec: Regression specification
        data: Trait table for this iteration
        tree: Tree for this iteration
        key: Iteration key (removed species or tree index)

    Returns:
        IterationRecord holding either the FitResult or the error
    """
    try:
        result = call_fitter(fitter, spec, data, tree)
    except Exception as e:
        logger.debug(f"Fit failed for {key!r}: {e}")
        return IterationRecord(key=key, error=e)
    return IterationRecord(key=key, result=result)


def load_fitter(path: str, **kwargs) -> FitterLike:
    """
    Resolve a fitter from a ``"package.module:Name"`` path.

    ``Name`` may be a ModelFitter subclass (instantiated with ``kwargs``), a
    module-level fitter object, or a function. A function is used directly as
    a ``fit(spec, data, tree)`` callable unless ``kwargs`` are given, in which
    case it is treated as a factory and called with them.

    Raises:
        ConfigurationError: If the path cannot be imported or resolved.
    """
    module_name, sep, attr = path.partition(":")
    if not sep or not module_name or not attr:
        raise ConfigurationError(f"Fitter path must look like 'package.module:Name', got '{path}'")

    try:
        module = importlib.import_module(module_name)
    except ImportError as e:
        raise ConfigurationError(f"Cannot import fitter module '{module_name}': {e}")

    try:
        target = getattr(module, attr)
    except AttributeError:
        raise ConfigurationError(f"Module '{module_name}' has no attribute '{attr}'")

    if isinstance(target, type):
        fitter = target(**kwargs)
    elif isinstance(target, ModelFitter) or hasattr(target, 'fit'):
        fitter = target
    elif callable(target):
        fitter = target(**kwargs) if kwargs else target
    else:
        raise ConfigurationError(f"'{path}' is not a fitter")

    logger.debug(f"Loaded fitter {path}")
    return fitter
