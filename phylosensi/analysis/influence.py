#!/usr/bin/env python3
"""
Influential species detection for phylogenetic linear regression.

influence_analysis removes one species at a time, refits the model and
flags species whose removal moves the intercept or the slope by more than
``cutoff`` standardized differences.
"""

import logging
import numbers
import warnings
from typing import Optional, Tuple, Union

import pandas as pd

from .fitter import FitterLike, call_fitter
from .matching import DataTreeMatcher
from .models import EvolutionaryModel, InfluentialSpecies, RegressionSpec
from .resampling import ResamplingEngine
from .results import InfluenceResult
from ..core.constants import DEFAULT_CUTOFF, DEFAULT_MODEL
from ..core.exceptions import ConstructionError, FailedFitsWarning
from ..core.progress_logger import ProgressLogger
from ..core.tree_utils import is_tree, is_ultrametric

logger = logging.getLogger(__name__)


class InfluenceScorer:
    """
    Ranks species by absolute standardized difference and applies the cutoff.

    Intercept and slope are ranked independently; the two lists can differ in
    membership and order.
    """

    def __init__(self, cutoff: float = DEFAULT_CUTOFF):
        self.cutoff = cutoff

    def rank(self, table: pd.DataFrame, column: str) -> Tuple[str, ...]:
        """Species with |column| > cutoff, largest first (ties keep deletion order)."""
        magnitude = table[column].astype(float).abs()
        order = magnitude.sort_values(ascending=False, kind='mergesort').index
        ranked = table.loc[order]
        above = magnitude.loc[order] > self.cutoff
        return tuple(ranked.loc[above, 'species'])

    def score(self, table: pd.DataFrame) -> InfluentialSpecies:
        return InfluentialSpecies(
            estimate=self.rank(table, 'sDIFestimate'),
            intercept=self.rank(table, 'sDIFintercept'),
        )


def _linear_spec(formula: Union[str, RegressionSpec], model, options) -> RegressionSpec:
    if isinstance(formula, RegressionSpec):
        spec = formula.with_options(**options) if options else formula
    else:
        spec = RegressionSpec.from_formula(formula, model=model, **options)
    if not spec.model.is_linear:
        raise ConstructionError(
            f"Influence analysis needs a linear model, got '{spec.model.value}'",
            context={'model': spec.model.value}
        )
    return spec


def influence_analysis(formula: Union[str, RegressionSpec], data: pd.DataFrame, phy, fitter: FitterLike,
                       model: Union[str, EvolutionaryModel] = DEFAULT_MODEL, cutoff: float = DEFAULT_CUTOFF,
                       track: bool = True, progress=None, matcher: Optional[DataTreeMatcher] = None,
                       **fitter_options) -> InfluenceResult:
    """
    Leave-one-out deletion analysis and influential species detection.

    Args:
        formula: ``"response ~ predictor"`` or a RegressionSpec (``model`` is
            then ignored)
        data: Trait table indexed by species name
        phy: Bio.Phylo tree matching ``data``
        fitter: Phylogenetic linear regression fitter
        model: Evolutionary model (BM, OUfixedRoot, OUrandomRoot, lambda,
            kappa, delta, EB or trend)
        cutoff: Standardized difference above which a species is influential
        track: Show console progress when no ``progress`` observer is given
        progress: Progress observer
        matcher: Data/tree matcher (defaults to DataTreeMatcher)
        **fitter_options: Extra options stored on the spec for the fitter

    Returns:
        InfluenceResult

    Raises:
        ConstructionError: For invalid inputs, detected before any refit
        EmptyResultError: If too few deletions succeed to standardize
        FittingError: If the full model itself cannot be fitted
    """
    if not isinstance(data, pd.DataFrame):
        raise ConstructionError("data must be a pandas DataFrame")
    if not is_tree(phy):
        raise ConstructionError("phy must be a single Bio.Phylo tree")
    if not isinstance(cutoff, numbers.Real) or cutoff < 0:
        raise ConstructionError(f"cutoff must be a non-negative number, got {cutoff!r}")

    spec = _linear_spec(formula, model, fitter_options)
    if spec.model is EvolutionaryModel.TREND and is_ultrametric(phy):
        raise ConstructionError("Trend is unidentifiable for ultrametric trees")

    dataset = (matcher or DataTreeMatcher()).match(spec, data, phy)
    if progress is None and track:
        progress = ProgressLogger()

    full_model = call_fitter(fitter, spec, dataset.data, dataset.tree)
    logger.debug(f"Full model: intercept={full_model.intercept}, estimate={full_model.estimate}")

    engine = ResamplingEngine(fitter, progress=progress)
    table, errors = engine.run_deletions(dataset, spec, full_model)
    if errors:
        warnings.warn(
            f"{len(errors)} of {len(dataset.species)} species deletions failed to fit "
            f"({', '.join(map(str, errors))}); see the error log",
            FailedFitsWarning, stacklevel=2
        )
    influential = InfluenceScorer(cutoff).score(table)

    logger.info(
        f"Influential species: {len(influential.estimate)} on slope, "
        f"{len(influential.intercept)} on intercept (cutoff {cutoff})"
    )

    call = {
        'formula': spec.formula,
        'model': spec.model.value,
        'cutoff': cutoff,
        'track': track,
        'options': dict(spec.options),
    }
    return InfluenceResult(
        spec=spec,
        call=call,
        cutoff=cutoff,
        full_model_estimates=full_model,
        influential_species=influential,
        table=table,
        dataset=dataset,
        error_log=errors,
    )
