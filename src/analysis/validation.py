"""
Fit validation: coefficient recovery against the reporting target and
repeated-sampling interval coverage.

simulate_coverage() reruns synthesize → fit → interval over consecutive seeds.
Trials whose fit fails (NonConvergence / SingularDesign) are counted and
skipped rather than aborting the simulation.
"""

from __future__ import annotations

import logging

import pandas as pd

from config.generation_params import DEFAULT_N_ITEMS, TRUE_COEFFICIENTS
from src.modeling.errors import NonConvergence, SingularDesign, UndefinedInterval
from src.modeling.logit import FittedModel, fit_logit
from src.synthesis.generator import make_rng, synthesize_dataset

from .config import (
    COVERAGE_BASE_SEED,
    COVERAGE_CONFIDENCE,
    COVERAGE_TRIALS,
    RECOVERY_TOLERANCE,
    REPORTING_TARGET,
)
from .intervals import coefficient_intervals

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Recovery
# ---------------------------------------------------------------------------

def recovery_table(
    model: FittedModel,
    target: dict[str, float] = REPORTING_TARGET,
    tolerance: float = RECOVERY_TOLERANCE,
) -> pd.DataFrame:
    """
    Compare fitted coefficients with a target vector.

    Args:
        model: Fitted logit model.
        target: Term → expected value; terms absent from the model are skipped.
        tolerance: Allowed absolute error.

    Returns:
        DataFrame with columns term, target, estimate, error, within_tolerance.
    """
    records: list[dict] = []
    for term in model.terms:
        if term not in target:
            continue
        estimate = model.coefficient(term)
        error = estimate - target[term]
        records.append({
            "term": term,
            "target": target[term],
            "estimate": estimate,
            "error": error,
            "within_tolerance": bool(abs(error) <= tolerance),
        })
    return pd.DataFrame(
        records, columns=["term", "target", "estimate", "error", "within_tolerance"]
    )


# ---------------------------------------------------------------------------
# Coverage
# ---------------------------------------------------------------------------

def simulate_coverage(
    n_trials: int = COVERAGE_TRIALS,
    n: int = DEFAULT_N_ITEMS,
    base_seed: int = COVERAGE_BASE_SEED,
    confidence: float = COVERAGE_CONFIDENCE,
    truth: dict[str, float] = TRUE_COEFFICIENTS,
) -> dict:
    """
    Estimate per-term Wald interval coverage by repeated simulation.

    Each trial t uses seed ``base_seed + t`` with the generating coefficients
    ``truth`` and records whether each term's interval contains its true
    value.

    Returns:
        Dict with 'coverage' (DataFrame: term, coverage, mean_estimate,
        mean_bias, n_trials), 'n_completed', and 'n_skipped'.
    """
    hits: dict[str, int] = {t: 0 for t in truth}
    sums: dict[str, float] = {t: 0.0 for t in truth}
    n_completed = 0
    n_skipped = 0

    for trial in range(n_trials):
        seed = base_seed + trial
        df = synthesize_dataset(n, make_rng(seed), coefficients=truth)
        try:
            model = fit_logit(df)
            intervals = coefficient_intervals(model, confidence)
        except (NonConvergence, SingularDesign, UndefinedInterval) as exc:
            logger.warning("Coverage trial seed=%d skipped: %s", seed, exc)
            n_skipped += 1
            continue

        n_completed += 1
        for rec in intervals:
            if rec.term not in truth:
                continue
            sums[rec.term] += rec.estimate
            if rec.lower <= truth[rec.term] <= rec.upper:
                hits[rec.term] += 1

    records: list[dict] = []
    for term, true_value in truth.items():
        mean_estimate = sums[term] / n_completed if n_completed else float("nan")
        records.append({
            "term": term,
            "coverage": hits[term] / n_completed if n_completed else float("nan"),
            "mean_estimate": mean_estimate,
            "mean_bias": mean_estimate - true_value,
            "n_trials": n_completed,
        })

    logger.info(
        "Coverage simulation: %d completed, %d skipped (n=%d, confidence=%.2f)",
        n_completed, n_skipped, n, confidence,
    )
    return {
        "coverage": pd.DataFrame(records),
        "n_completed": n_completed,
        "n_skipped": n_skipped,
    }
