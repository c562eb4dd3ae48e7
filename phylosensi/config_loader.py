#!/usr/bin/env python3
"""
Configuration loader for phylosensi supporting YAML and TOML formats.

This module provides utilities to load and validate configuration files
using the Pydantic models defined in config_models.py.
"""

import logging
from pathlib import Path
from typing import Any, Dict, Union

import toml
import yaml
from pydantic import ValidationError

from .config_models import SensiConfig
from .core.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

EXAMPLE_CONFIG: Dict[str, Any] = {
    'input': {
        'data_file': 'traits.csv',
        'tree_file': 'trees.nwk',
        'species_column': 'species',
        'tree_format': 'newick',
    },
    'analysis': {
        'mode': 'influence',
        'formula': 'body_mass ~ range_size',
        'model': 'lambda',
        'cutoff': 2.0,
        'n_tree': 100,
        'btol': 50,
        'seed': 42,
        'track': True,
    },
    'fitter': {
        'path': 'my_package.fitters:PGLSFitter',
        'options': {},
    },
    'visualization': {
        'enable': False,
        'output_file': 'phylosensi_plot.png',
        'format': 'png',
        'dpi': 150,
    },
}


def detect_config_format(config_path: Path) -> str:
    """Detect configuration file format based on extension."""
    suffix = config_path.suffix.lower()
    if suffix in ['.yaml', '.yml']:
        return 'yaml'
    elif suffix == '.toml':
        return 'toml'
    raise ConfigurationError(
        f"Unsupported configuration format '{suffix}' for {config_path}. Use .yaml, .yml or .toml",
        context={'path': str(config_path)}
    )


def load_yaml_config(config_path: Path) -> Dict[str, Any]:
    """Load YAML configuration file."""
    try:
        with open(config_path, 'r') as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        error_msg = f"Error parsing YAML configuration in {config_path}:"
        error_msg += f"\n  → {e}"
        error_msg += "\n  → Make sure the file uses proper YAML syntax (check indentation, colons, etc.)"
        raise ConfigurationError(error_msg)
    except OSError as e:
        raise ConfigurationError(f"Error loading YAML configuration from {config_path}: {e}")

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigurationError(f"YAML configuration in {config_path} must be a mapping")
    return data


def load_toml_config(config_path: Path) -> Dict[str, Any]:
    """Load TOML configuration file."""
    try:
        with open(config_path, 'r') as f:
            return toml.load(f)
    except toml.TomlDecodeError as e:
        raise ConfigurationError(f"Error parsing TOML configuration in {config_path}: {e}")
    except OSError as e:
        raise ConfigurationError(f"Error loading TOML configuration from {config_path}: {e}")


def load_configuration(config_path: Union[str, Path]) -> SensiConfig:
    """Load and validate configuration from file."""
    config_path = Path(config_path)

    if not config_path.exists():
        raise ConfigurationError(f"Configuration file not found: {config_path}")

    format_type = detect_config_format(config_path)
    logger.info(f"Loading {format_type.upper()} configuration from: {config_path}")

    if format_type == 'yaml':
        data = load_yaml_config(config_path)
    else:
        data = load_toml_config(config_path)

    try:
        config = SensiConfig(**data)
    except ValidationError as e:
        error_msg = f"Configuration validation failed for {config_path} ({format_type.upper()} format)"
        for error in e.errors():
            location = ".".join(str(part) for part in error['loc']) or "config"
            error_msg += f"\n  → {location}: {error['msg']}"
        error_msg += "\n  → Use 'phylosensi example-config' to generate a template"
        raise ConfigurationError(error_msg, context={'path': str(config_path)})

    logger.info("Configuration loaded and validated successfully")
    return config


def create_example_yaml_config(output_path: Union[str, Path]) -> None:
    """Create an example YAML configuration file."""
    with open(output_path, 'w') as f:
        yaml.dump(EXAMPLE_CONFIG, f, default_flow_style=False, sort_keys=False, indent=2)

    logger.info(f"Example YAML configuration created: {output_path}")


def create_example_toml_config(output_path: Union[str, Path]) -> None:
    """Create an example TOML configuration file."""
    with open(output_path, 'w') as f:
        toml.dump(EXAMPLE_CONFIG, f)

    logger.info(f"Example TOML configuration created: {output_path}")


def create_example_config(output_path: Union[str, Path]) -> None:
    """Create an example configuration, TOML for ``.toml`` paths and YAML otherwise."""
    if Path(output_path).suffix.lower() == '.toml':
        create_example_toml_config(output_path)
    else:
        create_example_yaml_config(output_path)
