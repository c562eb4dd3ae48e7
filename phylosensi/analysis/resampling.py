#!/usr/bin/env python3
"""
Resampling engine for phylogenetic sensitivity analyses.

Two loops refit the same regression on perturbed inputs:

- deletion mode removes one species at a time from the trait table and the
  tree (leave-one-out influence analysis);
- tree-substitution mode refits on trees drawn without replacement from a
  collection of candidate trees (topological uncertainty analysis).

A failed fit never stops a loop; it is recorded in the error log under the
iteration key and the loop moves on. Each loop writes into a slot list sized
to the number of iterations and compacts the successful rows afterwards, so
the estimates table keeps iteration order.
"""

import logging
from typing import Any, Dict, List, Optional, Tuple, Union

import numpy as np
import pandas as pd

from .fitter import FitterLike, attempt_fit
from .models import AlignedDataset, FitResult, RegressionSpec
from ..core.constants import PERCENT_DIGITS
from ..core.exceptions import ConstructionError, EmptyResultError
from ..core.tree_utils import drop_tip, tip_labels

logger = logging.getLogger(__name__)

DELETION_COLUMNS = [
    'species', 'intercept', 'DIFintercept', 'intercept_perc', 'pval_intercept',
    'estimate', 'DIFestimate', 'estimate_perc', 'pval_estimate', 'AIC', 'optpar',
]

TREE_COLUMNS = [
    'tree', 'intercept', 'se_intercept', 'pval_intercept',
    'estimate', 'se_estimate', 'pval_estimate', 'aic', 'optpar', 'n',
]

# raw difference column -> standardized difference column
STANDARDIZED_COLUMNS = {
    'DIFintercept': 'sDIFintercept',
    'DIFestimate': 'sDIFestimate',
}

ErrorLog = Dict[Any, BaseException]
RandomSource = Union[None, int, np.random.Generator]


def percent_change(difference: float, reference: float) -> float:
    """|difference / reference| as a percentage, rounded to one decimal."""
    with np.errstate(divide='ignore', invalid='ignore'):
        ratio = np.abs(np.float64(difference) / np.float64(reference))
    return round(float(ratio * 100), PERCENT_DIGITS)


def _optional(value) -> Any:
    return pd.NA if value is None else value


def deletion_row(species: str, fit: FitResult, reference: FitResult, has_optpar: bool) -> Dict[str, Any]:
    """Estimates of one deletion fit and their differences from the reference fit."""
    dif_intercept = fit.intercept - reference.intercept
    dif_estimate = fit.estimate - reference.estimate
    return {
        'species': species,
        'intercept': fit.intercept,
        'DIFintercept': dif_intercept,
        'intercept_perc': percent_change(dif_intercept, reference.intercept),
        'pval_intercept': fit.pval_intercept,
        'estimate': fit.estimate,
        'DIFestimate': dif_estimate,
        'estimate_perc': percent_change(dif_estimate, reference.estimate),
        'pval_estimate': fit.pval_estimate,
        'AIC': fit.aic,
        'optpar': _optional(fit.optpar) if has_optpar else pd.NA,
    }


def tree_row(tree_index: int, fit: FitResult) -> Dict[str, Any]:
    """Estimates of one tree-substitution fit."""
    return {
        'tree': tree_index,
        'intercept': fit.intercept,
        'se_intercept': _optional(fit.se_intercept),
        'pval_intercept': fit.pval_intercept,
        'estimate': fit.estimate,
        'se_estimate': _optional(fit.se_estimate),
        'pval_estimate': fit.pval_estimate,
        'aic': fit.aic,
        'optpar': _optional(fit.optpar),
        'n': _optional(fit.n),
    }


def standardize_differences(table: pd.DataFrame) -> pd.DataFrame:
    """
    Add sDIFintercept and sDIFestimate columns in place.

    Each raw difference is divided by the sample standard deviation of its
    column over all rows of ``table``.

    Raises:
        EmptyResultError: If there are fewer than two rows or a standard
            deviation is zero or not finite.
    """
    n_rows = len(table)
    if n_rows == 0:
        raise EmptyResultError("Every deletion failed to fit; no estimates to standardize", n_success=0)
    if n_rows < 2:
        raise EmptyResultError(
            "At least two successful deletions are needed to standardize differences",
            n_success=n_rows
        )

    for raw, standardized in STANDARDIZED_COLUMNS.items():
        sd = table[raw].astype(float).std(ddof=1)
        if not np.isfinite(sd) or sd == 0:
            raise EmptyResultError(
                f"Standard deviation of {raw} is {sd}; standardized differences are undefined",
                n_success=n_rows, context={'column': raw}
            )
        table[standardized] = table[raw].astype(float) / sd
    return table


def _frame(rows: List[Dict[str, Any]], columns: List[str], nullable: Dict[str, str]) -> pd.DataFrame:
    table = pd.DataFrame(rows, columns=columns)
    for column, dtype in nullable.items():
        table[column] = pd.array(list(table[column]), dtype=dtype)
    return table.reset_index(drop=True)


class ResamplingEngine:
    """
    Runs the deletion and tree-substitution refit loops.

    Args:
        fitter: ModelFitter (or ``fit(spec, data, tree)`` callable)
        progress: Optional observer with ``progress`` and ``complete`` methods
    """

    def __init__(self, fitter: FitterLike, progress=None):
        self.fitter = fitter
        self.progress = progress

    def _report(self, message: str, current: int, total: int):
        if self.progress is not None:
            self.progress.progress(message, current, total)

    def _finish(self, message: str, n_success: int):
        if self.progress is not None:
            self.progress.complete(message, count=n_success, item_type="successful fits")

    def run_deletions(self, dataset: AlignedDataset, spec: RegressionSpec,
                      reference: FitResult) -> Tuple[pd.DataFrame, ErrorLog]:
        """
        Refit ``spec`` once per species with that species removed.

        Species are visited in tip order of the aligned tree. Each iteration
        builds its own reduced table and pruned tree.

        Args:
            dataset: Aligned data with a single tree
            spec: Regression specification shared by every fit
            reference: Fit on the full dataset

        Returns:
            Tuple of (estimates table with standardized differences, error log)

        Raises:
            ConstructionError: If ``dataset`` holds a tree collection
            EmptyResultError: If standardization is impossible
        """
        if dataset.is_collection:
            raise ConstructionError("Deletion analysis needs a single tree, not a tree collection")

        species = dataset.species
        total = len(species)
        has_optpar = spec.model.has_optpar
        slots: List[Optional[Dict[str, Any]]] = [None] * total
        errors: ErrorLog = {}

        logger.info(f"Deletion analysis: refitting {spec.formula} ({spec.model.value}) on {total} reduced datasets")

        for i, name in enumerate(species):
            crop_data = dataset.data.drop(index=name)
            crop_tree = drop_tip(dataset.tree, name)
            record = attempt_fit(self.fitter, spec, crop_data, crop_tree, key=name)

            if record.succeeded:
                slots[i] = deletion_row(name, record.result, reference, has_optpar)
            else:
                errors[name] = record.error

            self._report("Deleting species", i + 1, total)

        rows = [row for row in slots if row is not None]
        self._finish("Deletion analysis finished", len(rows))
        if errors:
            logger.debug(f"{len(errors)} of {total} species deletions failed to fit: {list(errors)}")

        table = _frame(rows, DELETION_COLUMNS, {'optpar': 'Float64'})
        standardize_differences(table)
        return table, errors

    def run_tree_substitutions(self, dataset: AlignedDataset, spec: RegressionSpec, n_tree: int,
                               rng: RandomSource = None) -> Tuple[pd.DataFrame, ErrorLog, List[int]]:
        """
        Refit ``spec`` on ``n_tree`` trees drawn without replacement.

        Before each fit the trait table is reordered to the tip order of the
        drawn tree.

        Args:
            dataset: Aligned data with a tree collection
            spec: Regression specification shared by every fit
            n_tree: Number of trees to draw
            rng: numpy Generator or seed used to draw the tree indices

        Returns:
            Tuple of (estimates table, error log, drawn tree indices)

        Raises:
            ConstructionError: If ``dataset`` holds a single tree or
                ``n_tree`` is out of range
        """
        if not dataset.is_collection:
            raise ConstructionError("Tree-substitution analysis needs a collection of trees")
        available = len(dataset.trees)
        if n_tree < 1 or n_tree > available:
            raise ConstructionError(
                f"n_tree must be between 1 and the number of trees ({available}), got {n_tree}",
                context={'n_tree': n_tree, 'available': available}
            )

        generator = np.random.default_rng(rng)
        drawn = [int(j) for j in generator.choice(available, size=n_tree, replace=False)]
        slots: List[Optional[Dict[str, Any]]] = [None] * n_tree
        errors: ErrorLog = {}

        logger.info(f"Tree uncertainty analysis: refitting {spec.formula} on {n_tree} of {available} trees")

        for i, j in enumerate(drawn):
            tree = dataset.trees[j]
            ordered = dataset.data.loc[tip_labels(tree)]
            record = attempt_fit(self.fitter, spec, ordered, tree, key=j)

            if record.succeeded:
                slots[i] = tree_row(j, record.result)
            else:
                errors[j] = record.error

            self._report("Fitting trees", i + 1, n_tree)

        rows = [row for row in slots if row is not None]
        self._finish("Tree uncertainty analysis finished", len(rows))
        if errors:
            logger.warning(f"{len(errors)} of {n_tree} tree fits failed: trees {list(errors)}")

        table = _frame(rows, TREE_COLUMNS, {
            'se_intercept': 'Float64',
            'se_estimate': 'Float64',
            'optpar': 'Float64',
            'n': 'Int64',
        })
        return table, errors, drawn
