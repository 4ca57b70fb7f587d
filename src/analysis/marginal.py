"""
Marginal (group-conditional) predicted probabilities.

For each group of a partition of the dataset the model-implied average
probability of the positive label is reported with a delta-method standard
error and a Wald interval.  Each row keeps its observed covariates; there is
no resampling, so a fixed model and grouping always give the same table.

Delta method, for a group with design rows xᵢ and linear predictors ηᵢ:

    average_predictor:  g = σ'(η̄) · x̄        (linearize at the group mean)
    per_row:            g = mean(σ'(ηᵢ) · xᵢ)  (exact Jacobian of the mean)

    SE = sqrt(gᵀ Σ g),  Σ = coefficient covariance
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Mapping, Protocol

import numpy as np
import pandas as pd

from config.model_params import CONFIDENCE_LEVEL, DEFAULT_LINEARIZATION, LINEARIZATIONS

from src.modeling.errors import InvalidGrouping
from src.modeling.logit import FittedModel, sigmoid
from src.modeling.predictors import build_design_matrix

from .config import DEFAULT_GROUP_KEYS, DEFAULT_QUANTILE_BINS, DEFAULT_QUANTILE_COLUMN
from .intervals import ProbabilityInterval, wald_interval


# ---------------------------------------------------------------------------
# Grouping policies
# ---------------------------------------------------------------------------

class GroupingPolicy(Protocol):
    name: str

    def assign(self, df: pd.DataFrame) -> pd.Series:
        """Group label per row, positionally aligned with ``df``."""
        ...


def _require_columns(df: pd.DataFrame, keys) -> None:
    missing = [k for k in keys if k not in df.columns]
    if missing:
        raise InvalidGrouping(
            f"Grouping keys not in dataset: {missing} "
            f"(available: {list(df.columns)})"
        )


@dataclass(frozen=True)
class OverallGrouping:
    """No conditioning: every row in one group."""
    name: str = "overall"

    def assign(self, df: pd.DataFrame) -> pd.Series:
        return pd.Series(["overall"] * len(df), dtype=object)


@dataclass(frozen=True)
class AttributeGrouping:
    """Cross-classification of discrete columns, e.g. shape × coating."""
    keys: tuple[str, ...] = DEFAULT_GROUP_KEYS
    name: str = field(default="", compare=False)

    def __post_init__(self):
        if not self.name:
            object.__setattr__(self, "name", "by_" + "_".join(self.keys))

    def assign(self, df: pd.DataFrame) -> pd.Series:
        if not self.keys:
            raise InvalidGrouping("AttributeGrouping needs at least one key")
        _require_columns(df, self.keys)

        frame = df[list(self.keys)].reset_index(drop=True)
        labels = None
        for key in self.keys:
            part = key + "=" + frame[key].astype(str)
            labels = part if labels is None else labels + ", " + part

        # groups order by the key values themselves, not by label text
        cells = frame.assign(_label=labels).drop_duplicates(subset=list(self.keys))
        order = cells.sort_values(list(self.keys))["_label"].drop_duplicates()
        return pd.Series(pd.Categorical(labels, categories=list(order), ordered=True))


@dataclass(frozen=True)
class QuantileGrouping:
    """Equal-count quantile bins of a continuous column."""
    column: str = DEFAULT_QUANTILE_COLUMN
    n_bins: int = DEFAULT_QUANTILE_BINS
    name: str = field(default="", compare=False)

    def __post_init__(self):
        if not self.name:
            object.__setattr__(self, "name", f"{self.column}_quantiles")

    def assign(self, df: pd.DataFrame) -> pd.Series:
        _require_columns(df, [self.column])
        if self.n_bins < 1:
            raise InvalidGrouping(f"n_bins must be >= 1, got {self.n_bins}")

        bin_labels = [f"{self.column} Q{i}" for i in range(1, self.n_bins + 1)]
        try:
            binned = pd.qcut(
                df[self.column].reset_index(drop=True), q=self.n_bins, labels=bin_labels
            )
        except ValueError as exc:
            # qcut refuses duplicate edges (e.g. a near-constant column)
            raise InvalidGrouping(
                f"Cannot form {self.n_bins} quantile bins of '{self.column}': {exc}"
            ) from exc
        return binned


# ---------------------------------------------------------------------------
# Records
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class GroupPrediction:
    """One row of the prediction table."""
    group: str
    n_obs: int
    probability: float
    std_error: float
    lower: float
    upper: float
    confidence: float


PREDICTION_COLUMNS = ["group", "n_obs", "probability", "std_error", "lower", "upper"]


# ---------------------------------------------------------------------------
# Marginal predictions
# ---------------------------------------------------------------------------

def _gradient(
    X: np.ndarray,
    beta: np.ndarray,
    p: np.ndarray,
    linearization: str,
) -> np.ndarray:
    if linearization == "average_predictor":
        x_bar = X.mean(axis=0)
        s = float(sigmoid(x_bar @ beta))
        return s * (1.0 - s) * x_bar
    return (p * (1.0 - p)) @ X / len(p)


def marginal_predictions(
    model: FittedModel,
    df: pd.DataFrame,
    grouping: GroupingPolicy = OverallGrouping(),
    confidence: float = CONFIDENCE_LEVEL,
    linearization: str = DEFAULT_LINEARIZATION,
) -> list[GroupPrediction]:
    """
    Average predicted probability per group with delta-method uncertainty.

    Args:
        model: Fitted logit model.
        df: Rows to average over (usually the training dataset).
        grouping: Partition policy; OverallGrouping for no conditioning.
        confidence: Confidence level for the Wald interval.
        linearization: "average_predictor" or "per_row" (see module docstring).

    Returns:
        One GroupPrediction per non-empty group, in the grouping's order.
        Bounds are clamped to [0, 1].

    Raises:
        InvalidGrouping: Grouping keys are not columns of ``df``.
        UndefinedInterval: A group's standard error is not finite.
    """
    if linearization not in LINEARIZATIONS:
        raise ValueError(
            f"linearization must be one of {LINEARIZATIONS}, got {linearization!r}"
        )

    labels = grouping.assign(df).reset_index(drop=True)
    X, _ = build_design_matrix(df, model.predictors)
    beta = model.coefficients
    p = sigmoid(X @ beta)

    records: list[GroupPrediction] = []
    for label, members in labels.groupby(labels, sort=True, observed=True):
        pos = members.index.to_numpy()
        X_g, p_g = X[pos], p[pos]

        g = _gradient(X_g, beta, p_g, linearization)
        variance = float(g @ model.covariance @ g)
        se = float(np.sqrt(variance)) if variance >= 0 else float("nan")

        probability = float(p_g.mean())
        lower, upper = wald_interval(probability, se, confidence, term=str(label))
        records.append(GroupPrediction(
            group=str(label),
            n_obs=int(len(pos)),
            probability=probability,
            std_error=se,
            lower=max(0.0, lower),
            upper=min(1.0, upper),
            confidence=confidence,
        ))

    return records


def prediction_table(
    model: FittedModel,
    df: pd.DataFrame,
    grouping: GroupingPolicy = OverallGrouping(),
    confidence: float = CONFIDENCE_LEVEL,
    linearization: str = DEFAULT_LINEARIZATION,
) -> pd.DataFrame:
    """Prediction table with fixed columns PREDICTION_COLUMNS."""
    rows = [
        asdict(r)
        for r in marginal_predictions(model, df, grouping, confidence, linearization)
    ]
    return pd.DataFrame(rows, columns=PREDICTION_COLUMNS + ["confidence"])[PREDICTION_COLUMNS]


# ---------------------------------------------------------------------------
# Reference-profile prediction
# ---------------------------------------------------------------------------

def profile_prediction(
    model: FittedModel,
    profile: Mapping[str, float],
    confidence: float = CONFIDENCE_LEVEL,
) -> ProbabilityInterval:
    """
    Predicted probability at one covariate profile.

    The interval is formed on the linear predictor (SE = sqrt(xᵀΣx)) and
    transformed through the sigmoid, so it stays inside (0, 1).

    Args:
        model: Fitted logit model.
        profile: Predictor name → value on the predictor scale (after any
            transformation the predictor applies); must cover every model
            predictor.
        confidence: Confidence level.

    Raises:
        InvalidGrouping: A predictor is missing from ``profile``.
    """
    names = [p.name for p in model.predictors]
    missing = [n for n in names if n not in profile]
    if missing:
        raise InvalidGrouping(f"Profile is missing predictors: {missing}")

    # profile values are already on the predictor scale; extractors are not rerun
    x = np.array([1.0, *(float(profile[n]) for n in names)])
    eta = float(x @ model.coefficients)
    variance = float(x @ model.covariance @ x)
    se = float(np.sqrt(variance)) if variance >= 0 else float("nan")

    label = ", ".join(f"{n}={profile[n]:g}" for n in names)
    lower, upper = wald_interval(eta, se, confidence, term=label)
    return ProbabilityInterval(
        term=label,
        probability=float(sigmoid(eta)),
        lower=float(sigmoid(lower)),
        upper=float(sigmoid(upper)),
        confidence=confidence,
    )
