#!/usr/bin/env python3
"""
Default values shared across phylosensi.
"""

VERSION = "0.3.0"

# Influence analysis
DEFAULT_MODEL = "lambda"
DEFAULT_CUTOFF = 2.0

# Tree-uncertainty analysis
DEFAULT_N_TREE = 2
DEFAULT_BTOL = 50

# Summary statistics
CI_LEVEL = 0.95
STATS_DIGITS = 3
PERCENT_DIGITS = 1

# Relative tolerance on root-to-tip depths, same default as ape::is.ultrametric
ULTRAMETRIC_TOLERANCE = 1.4901161193847656e-08

NO_ERRORS_MESSAGE = "No errors found."

DEFAULT_TREE_FORMAT = "newick"

# Plots
DEFAULT_DPI = 150
DEFAULT_FIGSIZE = (12, 4)
