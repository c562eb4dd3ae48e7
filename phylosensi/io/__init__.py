"""
Input loading and text reports for phylosensi.
"""

from .data_loader import load_trait_table, load_trees
from .report_generator import ReportGenerator, summarize_influence, summarize_tree_uncertainty

__all__ = [
    'load_trait_table', 'load_trees',
    'ReportGenerator', 'summarize_influence', 'summarize_tree_uncertainty',
]
