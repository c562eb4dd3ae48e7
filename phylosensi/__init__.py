#!/usr/bin/env python3
"""
phylosensi: sensitivity analysis for phylogenetic regression.

Quantifies how much intercept, slope, phylogenetic signal and fit
statistics change when single species are removed (influence analysis) or
when alternative trees are substituted (tree uncertainty analysis).
"""

from .core.constants import VERSION
from .core.exceptions import (
    SensiError, ConstructionError, FittingError, EmptyResultError,
    ConfigurationError, UnderpoweredAggregationWarning, FailedFitsWarning
)
from .analysis import (
    EvolutionaryModel, RegressionSpec, FitResult, AlignedDataset,
    ModelFitter, DataTreeMatcher, ResamplingEngine,
    InfluenceScorer, UncertaintyAggregator,
    influence_analysis, tree_uncertainty_analysis,
    InfluenceResult, TreeUncertaintyResult
)

__version__ = VERSION

__all__ = [
    '__version__',
    'SensiError',
    'ConstructionError',
    'FittingError',
    'EmptyResultError',
    'ConfigurationError',
    'UnderpoweredAggregationWarning',
    'FailedFitsWarning',
    'EvolutionaryModel',
    'RegressionSpec',
    'FitResult',
    'AlignedDataset',
    'ModelFitter',
    'DataTreeMatcher',
    'ResamplingEngine',
    'InfluenceScorer',
    'UncertaintyAggregator',
    'influence_analysis',
    'tree_uncertainty_analysis',
    'InfluenceResult',
    'TreeUncertaintyResult'
]
