#!/usr/bin/env python3
"""
Plot management module for phylosensi visualizations.

This module centralizes all matplotlib imports and provides diagnostic
figures for influence and tree-uncertainty results.
"""

import logging
from pathlib import Path
from typing import Optional, Tuple, Union

import numpy as np

# Centralized matplotlib imports
try:
    import matplotlib.pyplot as plt
    HAS_MATPLOTLIB = True
except ImportError:
    HAS_MATPLOTLIB = False
    plt = None

from ..analysis.results import InfluenceResult, TreeUncertaintyResult
from ..core.constants import DEFAULT_DPI, DEFAULT_FIGSIZE

logger = logging.getLogger(__name__)

PARAMETERS = ('estimate', 'intercept')


class PlotManager:
    """
    Manages all plotting operations for phylosensi.

    Every plotting method returns the matplotlib Figure, or None when
    matplotlib is not installed. Figures are saved when an output path is
    given.
    """

    def __init__(self, style: str = "default", dpi: int = DEFAULT_DPI,
                 figsize: Tuple[float, float] = DEFAULT_FIGSIZE):
        """
        Initialize the plot manager.

        Args:
            style: Matplotlib style to use
            dpi: Resolution for saved plots
            figsize: Default figure size (width, height)
        """
        self.style = style
        self.dpi = dpi
        self.figsize = figsize

        if not HAS_MATPLOTLIB:
            logger.error("Matplotlib not available. Install phylosensi[visualization] for plotting support.")
            return

        try:
            plt.style.use(style)
        except OSError:
            logger.warning(f"Style '{style}' not available, using default")
            plt.style.use('default')

    def _save(self, fig, output_path: Optional[Union[str, Path]], format: str):
        if output_path is None:
            return
        fig.tight_layout()
        fig.savefig(str(output_path), dpi=self.dpi, format=format, bbox_inches='tight')
        logger.info(f"Saved plot: {output_path}")

    def influence_plot(self, result: InfluenceResult, param: str = "estimate",
                       output_path: Optional[Union[str, Path]] = None, format: str = "png"):
        """
        Diagnostic figure for an influence analysis.

        Three panels: refitted values of ``param`` against the full-model
        value, the distribution of standardized differences with the cutoff
        marked, and percent change per removed species with influential
        species highlighted.

        Args:
            result: InfluenceResult to plot
            param: 'estimate' (slope) or 'intercept'
            output_path: Where to save the figure (optional)
            format: Output format (png, pdf, svg)

        Returns:
            matplotlib Figure, or None if matplotlib is unavailable
        """
        if not HAS_MATPLOTLIB:
            logger.error("Matplotlib not available for plotting")
            return None
        if param not in PARAMETERS:
            raise ValueError(f"param must be one of {PARAMETERS}, got '{param}'")

        table = result.sensi_estimates
        influential = set(getattr(result.influential_species, param))
        full_value = getattr(result.full_model_estimates, param)
        sdif = table[f"sDIF{param}"].astype(float).to_numpy()
        perc = table[f"{param}_perc"].astype(float).to_numpy()
        colors = ['red' if name in influential else 'grey' for name in table['species']]

        fig, (ax1, ax2, ax3) = plt.subplots(1, 3, figsize=self.figsize)

        ax1.hist(table[param].astype(float), bins=min(len(table), 20), alpha=0.7, edgecolor='black')
        ax1.axvline(full_value, color='red', linestyle='--', label='Full model')
        ax1.set_xlabel(param)
        ax1.set_ylabel("Frequency")
        ax1.set_title(f"Refitted {param}")
        ax1.legend()
        ax1.grid(True, alpha=0.3)

        ax2.hist(sdif, bins=min(len(table), 20), alpha=0.7, edgecolor='black')
        ax2.axvline(result.cutoff, color='red', linestyle='--')
        ax2.axvline(-result.cutoff, color='red', linestyle='--')
        ax2.set_xlabel(f"Standardized difference ({param})")
        ax2.set_title(f"Cutoff = {result.cutoff}")
        ax2.grid(True, alpha=0.3)

        positions = np.arange(len(table))
        ax3.bar(positions, perc, color=colors)
        ax3.set_xticks(positions)
        ax3.set_xticklabels(table['species'], rotation=90, fontsize=6)
        ax3.set_ylabel("Change (%)")
        ax3.set_title(f"Percent change in {param}")
        ax3.grid(True, alpha=0.3, axis='y')

        fig.suptitle(f"Influential species: {result.formula}", fontsize=12, fontweight='bold')
        self._save(fig, output_path, format)
        return fig

    def tree_uncertainty_plot(self, result: TreeUncertaintyResult,
                              output_path: Optional[Union[str, Path]] = None, format: str = "png"):
        """
        Distribution of slope and intercept across trees, with the mean and
        the confidence interval marked when defined.

        Returns:
            matplotlib Figure, or None if matplotlib is unavailable
        """
        if not HAS_MATPLOTLIB:
            logger.error("Matplotlib not available for plotting")
            return None

        table = result.sensi_estimates
        fig, axes = plt.subplots(1, 2, figsize=self.figsize)

        for ax, param in zip(axes, PARAMETERS):
            values = table[param].astype(float)
            ax.hist(values, bins=max(1, min(len(values), 20)), alpha=0.7, edgecolor='black')

            row = result.all_stats.loc[param]
            ax.axvline(float(row['mean']), color='red', linestyle='-', label='Mean')
            if not result.underpowered:
                ax.axvline(float(row['CI_low']), color='red', linestyle='--', label='95% CI')
                ax.axvline(float(row['CI_high']), color='red', linestyle='--')

            ax.set_xlabel(param)
            ax.set_ylabel("Number of trees")
            ax.set_title(f"{param} across {result.n_success} trees")
            ax.legend()
            ax.grid(True, alpha=0.3)

        fig.suptitle(f"Phylogenetic uncertainty: {result.formula}", fontsize=12, fontweight='bold')
        self._save(fig, output_path, format)
        return fig

    def plot(self, result, output_path: Optional[Union[str, Path]] = None, format: str = "png"):
        """Default figure for either result type."""
        if isinstance(result, InfluenceResult):
            return self.influence_plot(result, output_path=output_path, format=format)
        return self.tree_uncertainty_plot(result, output_path=output_path, format=format)

    @staticmethod
    def close(fig):
        if HAS_MATPLOTLIB and fig is not None:
            plt.close(fig)
