#!/usr/bin/env python3
"""
Configuration models for phylosensi using Pydantic for validation.

This module defines the structure and validation rules for phylosensi
configuration files, supporting both YAML and TOML formats.
"""

from pathlib import Path
from typing import Any, Dict, Literal, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from .analysis.models import EvolutionaryModel, RegressionSpec
from .core.constants import (
    DEFAULT_BTOL, DEFAULT_CUTOFF, DEFAULT_DPI, DEFAULT_FIGSIZE, DEFAULT_MODEL, DEFAULT_N_TREE,
    DEFAULT_TREE_FORMAT
)
from .core.exceptions import ConstructionError


class InputConfig(BaseModel):
    """Input file settings."""

    model_config = ConfigDict(extra='forbid')

    data_file: Path = Field(..., description="Trait table (CSV or TSV), one row per species")
    tree_file: Path = Field(..., description="Tree file; tree mode reads every tree it holds")
    species_column: Optional[str] = Field(
        default=None, description="Column with species names (default: first column)"
    )
    tree_format: Literal["newick", "nexus", "phyloxml", "nexml"] = Field(
        default=DEFAULT_TREE_FORMAT, description="Format of the tree file"
    )

    @field_validator('data_file', 'tree_file')
    @classmethod
    def validate_file_exists(cls, v):
        """Validate that input files exist."""
        if not Path(v).exists():
            raise ValueError(f"Input file not found: {v}")
        return v


class AnalysisSettings(BaseModel):
    """Sensitivity analysis settings."""

    model_config = ConfigDict(extra='forbid')

    mode: Literal["influence", "tree"] = Field(
        default="influence", description="Species deletion (influence) or tree uncertainty (tree)"
    )
    formula: str = Field(..., description="Regression formula, 'response ~ predictor'")
    model: str = Field(
        default=DEFAULT_MODEL, description="Evolutionary model for influence analysis"
    )
    cutoff: float = Field(
        default=DEFAULT_CUTOFF, ge=0, description="Standardized difference cutoff"
    )
    n_tree: int = Field(
        default=DEFAULT_N_TREE, ge=1, description="Number of trees drawn in tree mode"
    )
    btol: float = Field(
        default=DEFAULT_BTOL, gt=0, description="Linear predictor bound for logistic fits"
    )
    seed: Optional[int] = Field(
        default=None, description="Random seed for the tree draw"
    )
    track: bool = Field(
        default=True, description="Show progress while refitting"
    )

    @field_validator('formula')
    @classmethod
    def validate_formula(cls, v):
        try:
            RegressionSpec.from_formula(v)
        except ConstructionError as e:
            raise ValueError(e.message)
        return v

    @field_validator('model')
    @classmethod
    def validate_model(cls, v):
        try:
            return EvolutionaryModel.parse(v).value
        except ConstructionError as e:
            raise ValueError(e.message)


class FitterConfig(BaseModel):
    """Model fitter to load."""

    model_config = ConfigDict(extra='forbid')

    path: str = Field(..., description="Fitter as 'package.module:Name'")
    options: Dict[str, Any] = Field(
        default_factory=dict, description="Keyword arguments for the fitter class or factory"
    )

    @field_validator('path')
    @classmethod
    def validate_path(cls, v):
        module_name, sep, attr = v.partition(":")
        if not sep or not module_name or not attr:
            raise ValueError(f"Fitter path must look like 'package.module:Name', got '{v}'")
        return v


class VisualizationConfig(BaseModel):
    """Visualization configuration settings."""

    model_config = ConfigDict(extra='forbid')

    enable: bool = Field(default=False, description="Save a diagnostic plot")
    output_file: Path = Field(
        default=Path("phylosensi_plot.png"), description="Where the plot is saved"
    )
    format: Literal["png", "pdf", "svg"] = Field(default="png", description="Plot file format")
    dpi: int = Field(default=DEFAULT_DPI, ge=50, le=1200, description="Resolution of saved plots")
    figsize: Tuple[float, float] = Field(default=DEFAULT_FIGSIZE, description="Figure size (width, height)")


class SensiConfig(BaseModel):
    """Main phylosensi configuration model."""

    model_config = ConfigDict(
        extra='forbid',  # Don't allow extra fields
        validate_assignment=True,  # Validate on assignment
    )

    input: InputConfig
    analysis: AnalysisSettings
    fitter: FitterConfig
    visualization: VisualizationConfig = Field(default_factory=VisualizationConfig)

    @model_validator(mode='after')
    def validate_mode_model(self):
        """Influence analysis needs a linear model."""
        if self.analysis.mode == "influence" and self.analysis.model == EvolutionaryModel.LOGISTIC_MPLE.value:
            raise ValueError("Influence analysis needs a linear model, not logistic_MPLE")
        return self

    def analysis_kwargs(self) -> Dict[str, Any]:
        """Keyword arguments for influence_analysis or tree_uncertainty_analysis."""
        kwargs: Dict[str, Any] = {
            'formula': self.analysis.formula,
            'track': self.analysis.track,
        }
        if self.analysis.mode == "influence":
            kwargs['model'] = self.analysis.model
            kwargs['cutoff'] = self.analysis.cutoff
        else:
            kwargs['n_tree'] = self.analysis.n_tree
            kwargs['btol'] = self.analysis.btol
            kwargs['seed'] = self.analysis.seed
        return kwargs
