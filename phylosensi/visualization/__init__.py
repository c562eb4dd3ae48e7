"""
Visualization for phylosensi results.
"""

from .plot_manager import HAS_MATPLOTLIB, PlotManager

__all__ = ['PlotManager', 'HAS_MATPLOTLIB']
