"""
Explicit predictor specification and design-matrix construction.

Predictors are listed as (name, extraction function) pairs rather than parsed
from a formula string: the term order, the column each term reads, and any
transformation are all visible at the call site.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Sequence

import numpy as np
import pandas as pd

from config.generation_params import LABEL_LEVELS, POSITIVE_LABEL
from config.model_params import INTERCEPT_TERM


@dataclass(frozen=True)
class Predictor:
    """One model term: a name and a function pulling its values from a dataset."""

    name: str
    extract: Callable[[pd.DataFrame], pd.Series]

    def values(self, df: pd.DataFrame) -> np.ndarray:
        return np.asarray(self.extract(df), dtype=float)


def column(name: str) -> Predictor:
    """Predictor that reads a dataset column unchanged."""
    return Predictor(name=name, extract=lambda df: df[name])


# outcome ~ size + shape_indicator + coating_indicator
DEFAULT_PREDICTORS: tuple[Predictor, ...] = (
    column("size"),
    column("shape_indicator"),
    column("coating_indicator"),
)


def term_names(predictors: Sequence[Predictor]) -> tuple[str, ...]:
    """Model terms in design-matrix order, intercept first."""
    return (INTERCEPT_TERM, *(p.name for p in predictors))


def build_design_matrix(
    df: pd.DataFrame,
    predictors: Sequence[Predictor] = DEFAULT_PREDICTORS,
) -> tuple[np.ndarray, tuple[str, ...]]:
    """
    Build the (n, 1 + k) design matrix with a leading intercept column.

    Args:
        df: Dataset with every column the predictors read.
        predictors: Ordered predictor specification.

    Returns:
        Tuple of (X, terms).
    """
    n = len(df)
    columns = [np.ones(n)] + [p.values(df) for p in predictors]
    X = np.column_stack(columns)
    return X, term_names(predictors)


def encode_outcome(
    df: pd.DataFrame,
    column_name: str = "label",
    positive: str = POSITIVE_LABEL,
    levels: Sequence[str] = LABEL_LEVELS,
) -> np.ndarray:
    """
    Return a float 0/1 vector, 1 where ``df[column_name] == positive``.

    Raises:
        ValueError: The column holds values outside ``levels`` (including
            missing values), e.g. a 0/1 integer coding.
    """
    outcome = df[column_name]
    unexpected = outcome[~outcome.isin(levels)]
    if len(unexpected):
        raise ValueError(
            f"Outcome column '{column_name}' must contain only {list(levels)}; "
            f"found {sorted(map(str, unexpected.unique()))}"
        )
    return (outcome == positive).to_numpy(dtype=float)
