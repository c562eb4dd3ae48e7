#!/usr/bin/env python3
"""
Phylogenetic uncertainty for phylogenetic logistic regression.

tree_uncertainty_analysis refits the model on trees drawn at random from a
collection and summarizes how much each parameter varies with tree choice.
"""

import logging
import warnings
from typing import Optional, Union

import numpy as np
import pandas as pd
from scipy import stats

from .fitter import FitterLike
from .matching import DataTreeMatcher
from .models import EvolutionaryModel, RegressionSpec
from .resampling import RandomSource, ResamplingEngine
from .results import TreeUncertaintyResult
from ..core.constants import CI_LEVEL, DEFAULT_BTOL, DEFAULT_N_TREE, STATS_DIGITS
from ..core.exceptions import ConstructionError, EmptyResultError, UnderpoweredAggregationWarning
from ..core.progress_logger import ProgressLogger
from ..core.tree_utils import is_tree_collection

logger = logging.getLogger(__name__)

# Bookkeeping columns of the estimates table that are not model parameters
NON_PARAMETER_COLUMNS = ('tree', 'n')

COEFFICIENT_ROWS = ['intercept', 'se_intercept', 'pval_intercept',
                    'estimate', 'se_estimate', 'pval_estimate']

STAT_COLUMNS = ['min', 'max', 'mean', 'sd_tree', 'CI_low', 'CI_high']


class UncertaintyAggregator:
    """
    Per-parameter spread of estimates across tree fits.

    The confidence interval is mean -/+ t(df = k - 1) * sd / sqrt(k), where k
    is the number of successful fits.
    """

    def __init__(self, level: float = CI_LEVEL):
        if not 0 < level < 1:
            raise ValueError(f"Confidence level must be in (0, 1), got {level}")
        self.level = level

    def critical_value(self, n_success: int) -> float:
        return float(stats.t.ppf(1 - (1 - self.level) / 2, df=n_success - 1))

    def aggregate(self, table: pd.DataFrame) -> pd.DataFrame:
        """
        Summarize every parameter column of a tree-substitution table.

        Returns:
            DataFrame indexed by parameter with min, max, mean, sd_tree,
            CI_low and CI_high (nullable Float64)

        Raises:
            EmptyResultError: If ``table`` has no rows
        """
        n_success = len(table)
        if n_success == 0:
            raise EmptyResultError("Every tree fit failed; nothing to summarize", n_success=0)

        parameters = [c for c in table.columns if c not in NON_PARAMETER_COLUMNS]
        values = table[parameters].astype('Float64')

        summary = pd.DataFrame(index=pd.Index(parameters, name='parameter'), columns=STAT_COLUMNS)
        summary['min'] = values.min()
        summary['max'] = values.max()
        summary['mean'] = values.mean()

        if n_success < 2:
            warnings.warn(
                "Only one tree fit succeeded; sd_tree and the confidence interval are undefined",
                UnderpoweredAggregationWarning, stacklevel=2
            )
            summary['sd_tree'] = pd.NA
            summary['CI_low'] = pd.NA
            summary['CI_high'] = pd.NA
        else:
            sd = values.std(ddof=1)
            half_width = self.critical_value(n_success) * sd / np.sqrt(n_success)
            summary['sd_tree'] = sd
            summary['CI_low'] = summary['mean'] - half_width
            summary['CI_high'] = summary['mean'] + half_width

        return summary.astype('Float64')

    @staticmethod
    def headline(all_stats: pd.DataFrame, digits: int = STATS_DIGITS) -> pd.DataFrame:
        """Mean and interval of the coefficient rows, rounded."""
        rows = [r for r in COEFFICIENT_ROWS if r in all_stats.index]
        return all_stats.loc[rows, ['mean', 'CI_low', 'CI_high']].round(digits)


def _logistic_spec(formula: Union[str, RegressionSpec], btol: float, options) -> RegressionSpec:
    if isinstance(formula, RegressionSpec):
        if formula.model is not EvolutionaryModel.LOGISTIC_MPLE:
            raise ConstructionError(
                f"Tree uncertainty analysis fits '{EvolutionaryModel.LOGISTIC_MPLE.value}', "
                f"got '{formula.model.value}'"
            )
        return formula.with_options(btol=btol, **options)
    return RegressionSpec.from_formula(formula, model=EvolutionaryModel.LOGISTIC_MPLE, btol=btol, **options)


def tree_uncertainty_analysis(formula: Union[str, RegressionSpec], data: pd.DataFrame, phy, fitter: FitterLike,
                              n_tree: int = DEFAULT_N_TREE, btol: float = DEFAULT_BTOL, track: bool = True,
                              seed: Optional[int] = None, rng: RandomSource = None, progress=None,
                              matcher: Optional[DataTreeMatcher] = None,
                              **fitter_options) -> TreeUncertaintyResult:
    """
    Refit a phylogenetic logistic regression over randomly drawn trees.

    Args:
        formula: ``"response ~ predictor"`` or a logistic RegressionSpec
        data: Trait table indexed by species name
        phy: List or tuple of Bio.Phylo trees
        fitter: Phylogenetic logistic regression fitter
        n_tree: Number of trees to draw without replacement
        btol: Bound on the linear predictor search space, passed to the fitter
        track: Show console progress when no ``progress`` observer is given
        seed: Seed for the tree draw (ignored when ``rng`` is given)
        rng: numpy Generator for the tree draw
        progress: Progress observer
        matcher: Data/tree matcher (defaults to DataTreeMatcher)
        **fitter_options: Extra options stored on the spec for the fitter

    Returns:
        TreeUncertaintyResult

    Raises:
        ConstructionError: For invalid inputs, detected before any refit
        EmptyResultError: If every tree fit fails
    """
    if not isinstance(data, pd.DataFrame):
        raise ConstructionError("data must be a pandas DataFrame")
    if not is_tree_collection(phy):
        raise ConstructionError("phy must be a list or tuple of Bio.Phylo trees")
    if isinstance(n_tree, bool) or not isinstance(n_tree, (int, np.integer)):
        raise ConstructionError(f"n_tree must be an integer, got {n_tree!r}")
    if n_tree > len(phy):
        raise ConstructionError(
            "n_tree must be smaller than (or equal to) the number of trees in the collection",
            context={'n_tree': n_tree, 'available': len(phy)}
        )

    spec = _logistic_spec(formula, btol, fitter_options)
    dataset = (matcher or DataTreeMatcher()).match(spec, data, phy)
    if progress is None and track:
        progress = ProgressLogger()

    engine = ResamplingEngine(fitter, progress=progress)
    table, errors, drawn = engine.run_tree_substitutions(
        dataset, spec, int(n_tree), rng=rng if rng is not None else seed
    )

    aggregator = UncertaintyAggregator()
    all_stats = aggregator.aggregate(table)
    logger.info(f"Summarized {len(table)} of {n_tree} tree fits")

    call = {
        'formula': spec.formula,
        'model': spec.model.value,
        'n_tree': int(n_tree),
        'btol': btol,
        'seed': seed,
        'track': track,
        'options': dict(spec.options),
    }
    return TreeUncertaintyResult(
        spec=spec,
        call=call,
        n_tree=int(n_tree),
        tree_indices=drawn,
        n_obs=len(dataset),
        table=table,
        all_stats=all_stats,
        stats=aggregator.headline(all_stats),
        dataset=dataset,
        error_log=errors,
    )
