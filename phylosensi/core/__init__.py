#!/usr/bin/env python3
"""
Core utilities for phylosensi.

This package contains the pieces shared by every analysis:
- Default constants
- Exception hierarchy
- Progress observer
- Tree helpers
"""

from .constants import VERSION, NO_ERRORS_MESSAGE
from .exceptions import (
    SensiError, ConstructionError, FittingError, EmptyResultError,
    ConfigurationError, UnderpoweredAggregationWarning, FailedFitsWarning
)
from .progress_logger import ProgressLogger
from .tree_utils import drop_tip, keep_tips, is_ultrametric, tip_labels

__all__ = [
    'VERSION',
    'NO_ERRORS_MESSAGE',
    'SensiError',
    'ConstructionError',
    'FittingError',
    'EmptyResultError',
    'ConfigurationError',
    'UnderpoweredAggregationWarning',
    'FailedFitsWarning',
    'ProgressLogger',
    'drop_tip',
    'keep_tips',
    'is_ultrametric',
    'tip_labels'
]
