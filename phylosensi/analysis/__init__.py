#!/usr/bin/env python3
"""
Sensitivity analyses for phylogenetic regression.

This package contains:
- The data model and the model fitter interface
- Data/tree matching
- The resampling engine (species deletion and tree substitution)
- Influence scoring and tree-uncertainty aggregation
"""

from .models import (
    EvolutionaryModel, RegressionSpec, FitResult, IterationRecord,
    AlignedDataset, InfluentialSpecies
)
from .fitter import ModelFitter, attempt_fit, call_fitter, load_fitter
from .matching import DataTreeMatcher
from .resampling import ResamplingEngine, standardize_differences
from .influence import InfluenceScorer, influence_analysis
from .uncertainty import UncertaintyAggregator, tree_uncertainty_analysis
from .results import InfluenceResult, TreeUncertaintyResult

__all__ = [
    'EvolutionaryModel',
    'RegressionSpec',
    'FitResult',
    'IterationRecord',
    'AlignedDataset',
    'InfluentialSpecies',
    'ModelFitter',
    'attempt_fit',
    'call_fitter',
    'load_fitter',
    'DataTreeMatcher',
    'ResamplingEngine',
    'standardize_differences',
    'InfluenceScorer',
    'influence_analysis',
    'UncertaintyAggregator',
    'tree_uncertainty_analysis',
    'InfluenceResult',
    'TreeUncertaintyResult'
]
