#!/usr/bin/env python3
"""
Result objects returned by the sensitivity analyses.

Both result types are read-only: tables are handed out as copies and the
error log is exposed through a read-only mapping. ``errors`` always carries
an explicit value, either the failed iteration keys or the
"No errors found." marker.
"""

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, List, Mapping, Tuple, Union

import pandas as pd

from .models import AlignedDataset, FitResult, InfluentialSpecies, RegressionSpec
from ..core.constants import NO_ERRORS_MESSAGE


def render_errors(error_log: Mapping[Any, BaseException]) -> Union[List[Any], str]:
    """Failed iteration keys in iteration order, or the no-errors marker."""
    if not error_log:
        return NO_ERRORS_MESSAGE
    return list(error_log)


def _freeze(error_log: Mapping[Any, BaseException]) -> Mapping[Any, BaseException]:
    return MappingProxyType(dict(error_log))


@dataclass(frozen=True, eq=False)
class InfluenceResult:
    """
    Outcome of a leave-one-species-out influence analysis.

    Attributes:
        spec: Regression specification used for every fit
        call: Parameters the analysis was called with
        cutoff: Standardized-difference threshold for influential species
        full_model_estimates: Fit on the full matched dataset
        influential_species: Species above the cutoff, most influential first
        dataset: The matched data and tree
        error_log: Removed species whose refit failed, mapped to the error
    """
    spec: RegressionSpec
    call: Mapping[str, Any]
    cutoff: float
    full_model_estimates: FitResult
    influential_species: InfluentialSpecies
    table: pd.DataFrame = field(repr=False)
    dataset: AlignedDataset = field(repr=False)
    error_log: Mapping[Any, BaseException] = field(default_factory=dict)

    def __post_init__(self):
        object.__setattr__(self, 'call', MappingProxyType(dict(self.call)))
        object.__setattr__(self, 'error_log', _freeze(self.error_log))

    @property
    def formula(self) -> str:
        return self.spec.formula

    @property
    def sensi_estimates(self) -> pd.DataFrame:
        """One row per successful deletion, in deletion order."""
        return self.table.copy()

    @property
    def data(self) -> pd.DataFrame:
        return self.dataset.data.copy()

    @property
    def errors(self) -> Union[List[Any], str]:
        return render_errors(self.error_log)

    @property
    def n_species(self) -> int:
        return len(self.dataset)

    def to_frame(self) -> pd.DataFrame:
        """Estimates table indexed by removed species."""
        return self.table.set_index('species')


@dataclass(frozen=True, eq=False)
class TreeUncertaintyResult:
    """
    Outcome of a tree-uncertainty analysis.

    Attributes:
        spec: Regression specification used for every fit
        call: Parameters the analysis was called with
        n_tree: Number of trees requested
        tree_indices: Drawn tree positions (0-based), in fitting order
        n_obs: Number of species after matching data and trees
        all_stats: min/max/mean/sd_tree/CI_low/CI_high per parameter
        stats: Rounded mean and confidence interval of the coefficients
        dataset: The matched data and trees
        error_log: Tree positions whose fit failed, mapped to the error
    """
    spec: RegressionSpec
    call: Mapping[str, Any]
    n_tree: int
    tree_indices: Tuple[int, ...]
    n_obs: int
    table: pd.DataFrame = field(repr=False)
    all_stats: pd.DataFrame = field(repr=False)
    stats: pd.DataFrame = field(repr=False)
    dataset: AlignedDataset = field(repr=False)
    error_log: Mapping[Any, BaseException] = field(default_factory=dict)

    def __post_init__(self):
        object.__setattr__(self, 'call', MappingProxyType(dict(self.call)))
        object.__setattr__(self, 'tree_indices', tuple(self.tree_indices))
        object.__setattr__(self, 'error_log', _freeze(self.error_log))

    @property
    def formula(self) -> str:
        return self.spec.formula

    @property
    def sensi_estimates(self) -> pd.DataFrame:
        """One row per successful tree fit, in fitting order."""
        return self.table.copy()

    @property
    def data(self) -> pd.DataFrame:
        return self.dataset.data.copy()

    @property
    def errors(self) -> Union[List[Any], str]:
        return render_errors(self.error_log)

    @property
    def n_success(self) -> int:
        return len(self.table)

    @property
    def underpowered(self) -> bool:
        """True when fewer than two fits succeeded and spread is undefined."""
        return self.n_success < 2

    def to_frame(self) -> pd.DataFrame:
        """Estimates table indexed by tree position."""
        return self.table.set_index('tree')
