#!/usr/bin/env python3
"""
Command-line entry point for phylosensi.

Runs an influence or tree-uncertainty analysis on a trait table and a tree
file with a user-supplied model fitter, then prints a text summary.
"""

import argparse
import logging
import sys
import warnings
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from .analysis.fitter import load_fitter
from .analysis.influence import influence_analysis
from .analysis.uncertainty import tree_uncertainty_analysis
from .config_loader import create_example_config, load_configuration
from .core.constants import (
    DEFAULT_BTOL, DEFAULT_CUTOFF, DEFAULT_DPI, DEFAULT_FIGSIZE, DEFAULT_MODEL, DEFAULT_N_TREE,
    DEFAULT_TREE_FORMAT, VERSION
)
from .core.exceptions import ConfigurationError, ConstructionError, EmptyResultError, FittingError
from .io.data_loader import TREE_FORMATS, load_trait_table, load_trees
from .io.report_generator import ReportGenerator

logger = logging.getLogger(__name__)


def setup_argument_parser() -> argparse.ArgumentParser:
    """Set up and configure the command-line argument parser."""
    parser = argparse.ArgumentParser(
        prog="phylosensi",
        description=f"phylosensi v{VERSION}: Sensitivity analysis for phylogenetic regression.",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {VERSION}")
    subparsers = parser.add_subparsers(dest="command", required=True)

    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("data", nargs='?', help="Trait table (CSV/TSV). Can be specified in config file.")
    common.add_argument("tree", nargs='?', help="Tree file. Can be specified in config file.")
    common.add_argument("--formula", help="Regression formula, e.g. 'y ~ x'.")
    common.add_argument("--fitter", help="Model fitter as 'package.module:Name'.")
    common.add_argument("--species-column", help="Column holding species names (default: first column).")
    common.add_argument("--tree-format", choices=TREE_FORMATS,
                        help=f"Tree file format (default: {DEFAULT_TREE_FORMAT}).")
    common.add_argument("--config", help="YAML or TOML configuration file. Command-line options take precedence.")
    common.add_argument("--no-track", action="store_true", help="Do not show progress while refitting.")
    common.add_argument("--plot", help="Save a diagnostic plot to this file (requires matplotlib).")
    common.add_argument("--debug", action="store_true", help="Enable debug logging.")

    influence = subparsers.add_parser("influence", parents=[common],
                                      help="Leave-one-species-out influence analysis.")
    influence.add_argument("--model", help=f"Evolutionary model (default: {DEFAULT_MODEL}).")
    influence.add_argument("--cutoff", type=float,
                           help=f"Standardized difference cutoff (default: {DEFAULT_CUTOFF}).")

    tree = subparsers.add_parser("tree", parents=[common],
                                 help="Phylogenetic uncertainty across a tree collection.")
    tree.add_argument("--n-tree", type=int, help=f"Number of trees to draw (default: {DEFAULT_N_TREE}).")
    tree.add_argument("--btol", type=float, help=f"Linear predictor bound (default: {DEFAULT_BTOL}).")
    tree.add_argument("--seed", type=int, help="Random seed for the tree draw.")

    example = subparsers.add_parser("example-config", help="Write an example YAML or TOML configuration.")
    example.add_argument("output_file", help="Output file (.yaml, .yml or .toml).")

    return parser


def configure_logging(debug: bool = False) -> None:
    """Set up logging configuration."""
    logging.basicConfig(level=logging.INFO, format='%(message)s')
    if debug:
        logging.getLogger("phylosensi").setLevel(logging.DEBUG)
        logger.debug("Debug logging enabled")


def resolve_settings(args: argparse.Namespace) -> Dict[str, Any]:
    """
    Merge command-line options over an optional configuration file.

    Raises:
        ConfigurationError: If required settings are missing, the
            configuration file is invalid or its analysis mode differs from
            the subcommand
    """
    settings: Dict[str, Any] = {
        'data': None, 'tree': None, 'formula': None, 'fitter': None, 'fitter_options': {},
        'species_column': None, 'tree_format': DEFAULT_TREE_FORMAT, 'track': True,
        'plot': None, 'plot_format': None, 'dpi': DEFAULT_DPI, 'figsize': DEFAULT_FIGSIZE,
        'model': DEFAULT_MODEL, 'cutoff': DEFAULT_CUTOFF,
        'n_tree': DEFAULT_N_TREE, 'btol': DEFAULT_BTOL, 'seed': None,
    }

    if args.config:
        config = load_configuration(args.config)
        if config.analysis.mode != args.command:
            raise ConfigurationError(
                f"{args.config} configures a '{config.analysis.mode}' analysis but "
                f"'{args.command}' was requested",
                context={'mode': config.analysis.mode, 'command': args.command}
            )
        settings.update({
            'data': config.input.data_file,
            'tree': config.input.tree_file,
            'species_column': config.input.species_column,
            'tree_format': config.input.tree_format,
            'fitter': config.fitter.path,
            'fitter_options': dict(config.fitter.options),
            'dpi': config.visualization.dpi,
            'figsize': tuple(config.visualization.figsize),
        })
        settings.update(config.analysis_kwargs())
        if config.visualization.enable:
            settings['plot'] = config.visualization.output_file
            settings['plot_format'] = config.visualization.format

    overrides = {
        'data': args.data,
        'tree': args.tree,
        'formula': args.formula,
        'fitter': args.fitter,
        'species_column': args.species_column,
        'tree_format': args.tree_format,
        'plot': args.plot,
        'model': getattr(args, 'model', None),
        'cutoff': getattr(args, 'cutoff', None),
        'n_tree': getattr(args, 'n_tree', None),
        'btol': getattr(args, 'btol', None),
        'seed': getattr(args, 'seed', None),
    }
    settings.update({key: value for key, value in overrides.items() if value is not None})
    if args.plot:
        settings['plot_format'] = None
    if args.no_track:
        settings['track'] = False

    missing = [name for name in ('data', 'tree', 'formula', 'fitter') if not settings[name]]
    if missing:
        raise ConfigurationError(
            f"Missing required settings: {', '.join(missing)} (give them on the command line or in --config)",
            context={'missing': missing}
        )
    return settings


def run_analysis(command: str, settings: Dict[str, Any]):
    """Load inputs and the fitter, then run the requested analysis."""
    data = load_trait_table(settings['data'], species_column=settings['species_column'])
    trees = load_trees(settings['tree'], tree_format=settings['tree_format'])
    fitter = load_fitter(settings['fitter'], **settings['fitter_options'])

    if command == "influence":
        if len(trees) > 1:
            logger.warning(f"{settings['tree']} holds {len(trees)} trees; using the first one")
        return influence_analysis(
            settings['formula'], data, trees[0], fitter,
            model=settings['model'], cutoff=settings['cutoff'], track=settings['track']
        )

    return tree_uncertainty_analysis(
        settings['formula'], data, trees, fitter,
        n_tree=settings['n_tree'], btol=settings['btol'], seed=settings['seed'], track=settings['track']
    )


def save_plot(result, output_path, format: Optional[str] = None,
              dpi: int = DEFAULT_DPI, figsize: Tuple[float, float] = DEFAULT_FIGSIZE) -> None:
    """Save the default figure for ``result``; the format falls back to the file suffix."""
    from .visualization.plot_manager import PlotManager

    manager = PlotManager(dpi=dpi, figsize=figsize)
    path = Path(output_path)
    fig = manager.plot(result, output_path=path, format=format or path.suffix.lstrip('.') or 'png')
    manager.close(fig)


def main(argv: Optional[List[str]] = None) -> None:
    """Main entry point for phylosensi."""
    parser = setup_argument_parser()
    args = parser.parse_args(argv)

    configure_logging(getattr(args, 'debug', False))

    if args.command == "example-config":
        try:
            create_example_config(args.output_file)
        except OSError as e:
            logger.error(f"Failed to create example configuration: {e}")
            sys.exit(1)
        print(f"✓ Example configuration created: {args.output_file}")
        return

    try:
        settings = resolve_settings(args)
        logger.info(f"phylosensi v{VERSION}: {args.command} analysis of {settings['formula']}")
        with warnings.catch_warnings(record=True) as caught:
            warnings.simplefilter("always")
            result = run_analysis(args.command, settings)
        for warning in caught:
            logger.warning(str(warning.message))
    except (ConfigurationError, ConstructionError, EmptyResultError, FittingError) as e:
        logger.error(f"phylosensi analysis failed: {e}")
        if args.debug:
            logger.debug(f"Error context: {e.context}")
        sys.exit(1)

    print(ReportGenerator().summary(result))

    if settings['plot']:
        save_plot(result, settings['plot'], format=settings['plot_format'],
                  dpi=settings['dpi'], figsize=settings['figsize'])


if __name__ == "__main__":
    main()
