"""
Analysis package: inference on a fitted logit model.

Public API surface:

    Intervals:
        z_critical, wald_interval, coefficient_intervals, coefficient_table,
        odds_ratio_table, intercept_probability,
        CoefficientInterval, ProbabilityInterval

    Marginal predictions:
        OverallGrouping, AttributeGrouping, QuantileGrouping,
        marginal_predictions, prediction_table, profile_prediction,
        GroupPrediction

    Validation:
        recovery_table, simulate_coverage

    Runner:
        run_full_analysis
"""

from .intervals import (
    CoefficientInterval,
    ProbabilityInterval,
    coefficient_intervals,
    coefficient_table,
    intercept_probability,
    odds_ratio_table,
    wald_interval,
    z_critical,
)
from .marginal import (
    AttributeGrouping,
    GroupPrediction,
    OverallGrouping,
    QuantileGrouping,
    marginal_predictions,
    prediction_table,
    profile_prediction,
)
from .runner import run_full_analysis
from .validation import recovery_table, simulate_coverage

__all__ = [
    # intervals
    "z_critical",
    "wald_interval",
    "coefficient_intervals",
    "coefficient_table",
    "odds_ratio_table",
    "intercept_probability",
    "CoefficientInterval",
    "ProbabilityInterval",
    # marginal predictions
    "OverallGrouping",
    "AttributeGrouping",
    "QuantileGrouping",
    "marginal_predictions",
    "prediction_table",
    "profile_prediction",
    "GroupPrediction",
    # validation
    "recovery_table",
    "simulate_coverage",
    # runner
    "run_full_analysis",
]
