"""
Wald confidence intervals for fitted logit coefficients.

Intervals are built on the log-odds scale (estimate ± z·SE) and mapped to
other scales by monotone transforms: exp() for odds ratios, the sigmoid for
the intercept-only probability.  A monotone increasing map keeps the lower
log-odds bound as the lower bound on the new scale.
"""

from __future__ import annotations

import math
from dataclasses import asdict, dataclass

import numpy as np
import pandas as pd
from scipy import stats

from config.model_params import CONFIDENCE_LEVEL, INTERCEPT_TERM
from src.modeling.errors import UndefinedInterval
from src.modeling.logit import FittedModel, sigmoid


# ---------------------------------------------------------------------------
# Records
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class CoefficientInterval:
    """One row of the coefficient table (log-odds scale)."""
    term: str
    estimate: float
    std_error: float
    lower: float
    upper: float
    z_value: float
    p_value: float
    confidence: float


@dataclass(frozen=True)
class ProbabilityInterval:
    """A probability with bounds obtained through the sigmoid."""
    term: str
    probability: float
    lower: float
    upper: float
    confidence: float


COEFFICIENT_COLUMNS = ["term", "estimate", "std_error", "lower", "upper", "z_value", "p_value"]
ODDS_RATIO_COLUMNS = ["term", "odds_ratio", "lower", "upper"]


# ---------------------------------------------------------------------------
# Wald interval (shared utility)
# ---------------------------------------------------------------------------

def z_critical(confidence: float = CONFIDENCE_LEVEL) -> float:
    """Two-sided standard-normal critical value Φ⁻¹((1 + confidence) / 2)."""
    if not 0.0 < confidence < 1.0:
        raise ValueError(f"confidence must lie in (0, 1), got {confidence}")
    return float(stats.norm.ppf((1 + confidence) / 2))


def wald_interval(
    estimate: float,
    std_error: float,
    confidence: float = CONFIDENCE_LEVEL,
    term: str = "estimate",
) -> tuple[float, float]:
    """
    Two-sided Wald interval estimate ± z·SE.

    Args:
        estimate: Point estimate.
        std_error: Standard error of the estimate.
        confidence: Confidence level in (0, 1).
        term: Name used in the error message.

    Returns:
        Tuple of (lower_bound, upper_bound).

    Raises:
        UndefinedInterval: ``std_error`` or ``estimate`` is NaN or infinite,
            or ``std_error`` is negative.
    """
    if not (math.isfinite(std_error) and math.isfinite(estimate)) or std_error < 0:
        raise UndefinedInterval(term, std_error)
    z = z_critical(confidence)
    return (estimate - z * std_error, estimate + z * std_error)


# ---------------------------------------------------------------------------
# Coefficient table
# ---------------------------------------------------------------------------

def coefficient_intervals(
    model: FittedModel,
    confidence: float = CONFIDENCE_LEVEL,
) -> list[CoefficientInterval]:
    """
    Wald interval, z-statistic and two-sided p-value for every term.

    Returns records in design-matrix order (intercept first).
    """
    records: list[CoefficientInterval] = []
    for term, estimate, se in zip(model.terms, model.coefficients, model.standard_errors):
        estimate, se = float(estimate), float(se)
        lower, upper = wald_interval(estimate, se, confidence, term=term)
        z_value = estimate / se
        p_value = float(2 * stats.norm.sf(abs(z_value)))
        records.append(CoefficientInterval(
            term=term,
            estimate=estimate,
            std_error=se,
            lower=lower,
            upper=upper,
            z_value=z_value,
            p_value=p_value,
            confidence=confidence,
        ))
    return records


def coefficient_table(
    model: FittedModel,
    confidence: float = CONFIDENCE_LEVEL,
) -> pd.DataFrame:
    """Coefficient table with fixed columns COEFFICIENT_COLUMNS."""
    rows = [asdict(r) for r in coefficient_intervals(model, confidence)]
    return pd.DataFrame(rows)[COEFFICIENT_COLUMNS]


def odds_ratio_table(
    model: FittedModel,
    confidence: float = CONFIDENCE_LEVEL,
) -> pd.DataFrame:
    """Exponentiated coefficients and bounds (odds-ratio scale)."""
    records = [
        {
            "term": r.term,
            "odds_ratio": float(np.exp(r.estimate)),
            "lower": float(np.exp(r.lower)),
            "upper": float(np.exp(r.upper)),
        }
        for r in coefficient_intervals(model, confidence)
    ]
    return pd.DataFrame(records, columns=ODDS_RATIO_COLUMNS)


# ---------------------------------------------------------------------------
# Intercept-only probability
# ---------------------------------------------------------------------------

def intercept_probability(
    model: FittedModel,
    confidence: float = CONFIDENCE_LEVEL,
) -> ProbabilityInterval:
    """
    Predicted probability at all predictors = 0, with its interval.

    The log-odds Wald interval of the intercept is pushed through the
    sigmoid, so the bounds stay inside (0, 1) and keep their order.
    """
    idx = model.terms.index(INTERCEPT_TERM)
    estimate = float(model.coefficients[idx])
    se = float(model.standard_errors[idx])
    lower, upper = wald_interval(estimate, se, confidence, term=INTERCEPT_TERM)
    return ProbabilityInterval(
        term=INTERCEPT_TERM,
        probability=float(sigmoid(estimate)),
        lower=float(sigmoid(lower)),
        upper=float(sigmoid(upper)),
        confidence=confidence,
    )
