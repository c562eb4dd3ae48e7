#!/usr/bin/env python3
"""
Text summaries of sensitivity analysis results.
"""

import logging
from typing import List

import pandas as pd

from ..analysis.results import InfluenceResult, TreeUncertaintyResult
from ..core.constants import VERSION

logger = logging.getLogger(__name__)


class ReportGenerator:
    """
    Builds plain-text summaries for influence and tree-uncertainty results.
    """

    def __init__(self, version: str = VERSION, float_digits: int = 4):
        """
        Initialize the report generator.

        Args:
            version: phylosensi version string shown in headers
            float_digits: Decimals used for floating point columns
        """
        self.version = version
        self.float_digits = float_digits

    def _table(self, frame: pd.DataFrame) -> str:
        if frame.empty:
            return "  (none)"
        text = frame.to_string(float_format=lambda v: f"{v:.{self.float_digits}f}")
        return "\n".join("  " + line for line in text.splitlines())

    def _header(self, title: str, result) -> List[str]:
        lines = [f"{title} (phylosensi v{self.version})", "=" * (len(title) + len(self.version) + 15), ""]
        lines.append(f"Formula: {result.formula}")
        lines.append(f"Model: {result.spec.model.value}")
        for key, value in result.spec.options.items():
            lines.append(f"Option {key}: {value}")
        return lines

    def _errors(self, result) -> List[str]:
        errors = result.errors
        if isinstance(errors, str):
            return [f"Errors: {errors}"]
        lines = [f"Errors ({len(errors)}):"]
        for key in errors:
            lines.append(f"  {key}: {result.error_log[key]}")
        return lines

    def influence_summary(self, result: InfluenceResult) -> str:
        """Summary of an influence analysis."""
        lines = self._header("Influential species detection", result)
        n_fits = len(result.table)
        n_failed = len(result.error_log)
        lines.append(f"Cutoff: {result.cutoff}")
        lines.append(f"Species deletions: {n_fits + n_failed} ({n_fits} successful, {n_failed} failed)")
        lines.append("")

        full = result.full_model_estimates
        lines.append("Full model estimates:")
        full_frame = pd.DataFrame(
            {'Estimate': [full.intercept, full.estimate],
             'p-value': [full.pval_intercept, full.pval_estimate]},
            index=['intercept', 'estimate']
        )
        lines.append(self._table(full_frame))
        lines.append(f"  AIC: {full.aic}")
        lines.append(f"  optpar: {full.optpar if result.spec.model.has_optpar else 'NA'}")
        lines.append("")

        table = result.to_frame()
        for param, label in (('estimate', 'slope (estimate)'), ('intercept', 'intercept')):
            names = list(getattr(result.influential_species, param))
            lines.append(f"Influential species for the {label}: {len(names)}")
            columns = [f"sDIF{param}", f"DIF{param}", f"{param}_perc", param, f"pval_{param}"]
            lines.append(self._table(table.loc[names, columns]))
            lines.append("")

        lines.extend(self._errors(result))
        return "\n".join(lines)

    def tree_uncertainty_summary(self, result: TreeUncertaintyResult) -> str:
        """Summary of a tree-uncertainty analysis."""
        lines = self._header("Phylogenetic uncertainty", result)
        lines.append(f"Trees requested: {result.n_tree} ({result.n_success} successful fits)")
        lines.append(f"Species after matching: {result.n_obs}")
        lines.append("")

        if result.underpowered:
            lines.append("Fewer than two successful fits: sd_tree and the confidence interval are undefined.")
            lines.append("")

        lines.append("Mean estimates and 95% confidence intervals across trees:")
        lines.append(self._table(result.stats))
        lines.append("")
        lines.append("All statistics:")
        lines.append(self._table(result.all_stats))
        lines.append("")

        lines.extend(self._errors(result))
        return "\n".join(lines)

    def summary(self, result) -> str:
        """Dispatch on the result type."""
        if isinstance(result, InfluenceResult):
            return self.influence_summary(result)
        if isinstance(result, TreeUncertaintyResult):
            return self.tree_uncertainty_summary(result)
        raise TypeError(f"No summary available for {type(result).__name__}")


def summarize_influence(result: InfluenceResult) -> str:
    return ReportGenerator().influence_summary(result)


def summarize_tree_uncertainty(result: TreeUncertaintyResult) -> str:
    return ReportGenerator().tree_uncertainty_summary(result)
