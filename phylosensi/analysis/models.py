#!/usr/bin/env python3
"""
Data model for phylogenetic sensitivity analyses.

Defines the regression specification handed to model fitters, the per-fit
result record, the per-iteration outcome record and the aligned
(trait table, tree) input shared read-only by every iteration.
"""

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional, Tuple, Union

import pandas as pd
from Bio.Phylo.BaseTree import Tree

from ..core.exceptions import ConstructionError
from ..core.tree_utils import tip_labels


class EvolutionaryModel(str, Enum):
    """Evolutionary models understood by the model fitters."""

    BM = "BM"
    OU_FIXED_ROOT = "OUfixedRoot"
    OU_RANDOM_ROOT = "OUrandomRoot"
    LAMBDA = "lambda"
    KAPPA = "kappa"
    DELTA = "delta"
    EB = "EB"
    TREND = "trend"
    LOGISTIC_MPLE = "logistic_MPLE"

    @classmethod
    def parse(cls, value: Union[str, "EvolutionaryModel"]) -> "EvolutionaryModel":
        """Look up a model by its tag, raising ConstructionError if unknown."""
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            valid = ", ".join(m.value for m in cls)
            raise ConstructionError(f"Unknown evolutionary model '{value}'. Valid options: {valid}",
                                    context={'model': value}) from None

    @property
    def is_linear(self) -> bool:
        return self is not EvolutionaryModel.LOGISTIC_MPLE

    @property
    def has_optpar(self) -> bool:
        """Whether fits under this model report an optimized phylogenetic parameter."""
        return self not in (EvolutionaryModel.BM, EvolutionaryModel.TREND)


@dataclass(frozen=True)
class RegressionSpec:
    """
    A single-predictor regression: ``response ~ predictor`` under ``model``.

    Attributes:
        response: Column name of the response trait
        predictor: Column name of the single predictor trait
        model: Evolutionary model used by the fitter
        options: Extra fitter options, passed through untouched
    """
    response: str
    predictor: str
    model: EvolutionaryModel = EvolutionaryModel.LAMBDA
    options: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        for name in (self.response, self.predictor):
            if not isinstance(name, str) or not name.strip():
                raise ConstructionError(f"Invalid formula term: {name!r}")
        if self.response == self.predictor:
            raise ConstructionError("Response and predictor must be different columns")
        object.__setattr__(self, 'model', EvolutionaryModel.parse(self.model))
        object.__setattr__(self, 'options', MappingProxyType(dict(self.options)))

    @classmethod
    def from_formula(cls, formula: str, model: Union[str, EvolutionaryModel] = EvolutionaryModel.LAMBDA,
                     **options) -> "RegressionSpec":
        """
        Build a spec from a ``"y ~ x"`` formula string.

        Only one predictor is supported; ``+``, ``*`` and ``:`` terms are rejected.
        """
        if not isinstance(formula, str) or formula.count("~") != 1:
            raise ConstructionError(f"Formula must have the form 'response ~ predictor': {formula!r}")
        lhs, rhs = (side.strip() for side in formula.split("~"))
        if not lhs or not rhs:
            raise ConstructionError(f"Formula has an empty side: {formula!r}")
        if any(op in rhs for op in ("+", "*", ":")):
            raise ConstructionError(f"Only single-predictor formulas are supported: {formula!r}")
        return cls(response=lhs, predictor=rhs, model=model, options=options)

    @property
    def formula(self) -> str:
        return f"{self.response} ~ {self.predictor}"

    @property
    def fields(self) -> Tuple[str, str]:
        return (self.response, self.predictor)

    def with_options(self, **options) -> "RegressionSpec":
        merged = dict(self.options)
        merged.update(options)
        return RegressionSpec(self.response, self.predictor, self.model, merged)


@dataclass(frozen=True)
class FitResult:
    """
    Outputs of one model fit.

    Attributes:
        intercept: Fitted intercept
        estimate: Fitted slope of the predictor
        pval_intercept: p-value of the intercept
        pval_estimate: p-value of the slope
        aic: Akaike information criterion of the fit
        optpar: Optimized phylogenetic parameter, None when the model has none
        n: Number of observations used in the fit
        se_intercept: Standard error of the intercept, if reported
        se_estimate: Standard error of the slope, if reported
    """
    intercept: float
    estimate: float
    pval_intercept: float
    pval_estimate: float
    aic: float
    optpar: Optional[float] = None
    n: Optional[int] = None
    se_intercept: Optional[float] = None
    se_estimate: Optional[float] = None

    def as_dict(self) -> Dict[str, Any]:
        return {
            'intercept': self.intercept,
            'estimate': self.estimate,
            'pval_intercept': self.pval_intercept,
            'pval_estimate': self.pval_estimate,
            'aic': self.aic,
            'optpar': self.optpar,
            'n': self.n,
            'se_intercept': self.se_intercept,
            'se_estimate': self.se_estimate,
        }


@dataclass(frozen=True)
class IterationRecord:
    """
    Outcome of one resampling iteration.

    Exactly one of ``result`` and ``error`` is set.
    """
    key: Any
    result: Optional[FitResult] = None
    error: Optional[BaseException] = None

    @property
    def succeeded(self) -> bool:
        return self.error is None


class AlignedDataset:
    """
    A trait table and the tree(s) whose tips it matches one-to-one.

    Holds either a single tree (``tree``) or a tuple of candidate trees
    (``trees``). Row order of ``data`` need not follow tip order, but the set
    of species must be identical to the tip set of every tree.
    """

    def __init__(self, data: pd.DataFrame, tree: Optional[Tree] = None,
                 trees: Optional[Tuple[Tree, ...]] = None):
        if (tree is None) == (trees is None):
            raise ConstructionError("AlignedDataset needs exactly one of 'tree' or 'trees'")
        if not isinstance(data, pd.DataFrame):
            raise ConstructionError("data must be a pandas DataFrame")
        if not data.index.is_unique:
            duplicated = sorted(set(data.index[data.index.duplicated()]))
            raise ConstructionError(f"Duplicate species in data: {duplicated}",
                                    context={'duplicates': duplicated})

        self.data = data
        self.tree = tree
        self.trees = tuple(trees) if trees is not None else None

        species = set(data.index)
        for position, candidate in enumerate(self.all_trees):
            labels = tip_labels(candidate)
            if len(labels) != len(data) or set(labels) != species:
                raise ConstructionError(
                    f"Tree {position} tips do not match the data rows "
                    f"({len(labels)} tips, {len(data)} rows)",
                    context={'tree_index': position}
                )

    @property
    def all_trees(self) -> Tuple[Tree, ...]:
        return (self.tree,) if self.tree is not None else self.trees

    @property
    def species(self) -> list:
        """Species in tip order of the (first) tree."""
        return tip_labels(self.all_trees[0])

    @property
    def is_collection(self) -> bool:
        return self.trees is not None

    def __len__(self) -> int:
        return len(self.data)

    def __repr__(self) -> str:
        kind = f"{len(self.trees)} trees" if self.is_collection else "1 tree"
        return f"AlignedDataset({len(self.data)} species, {kind})"


@dataclass(frozen=True)
class InfluentialSpecies:
    """Species whose removal shifts the slope or the intercept beyond the cutoff."""
    estimate: Tuple[str, ...] = ()
    intercept: Tuple[str, ...] = ()

    def as_dict(self) -> Dict[str, list]:
        return {'influ_sp_estimate': list(self.estimate),
                'influ_sp_intercept': list(self.intercept)}
