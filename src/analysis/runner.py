"""
Pipeline runner: synthesize, fit, and summarize in one call.

Runs the four stages in order (synthesis → fit → coefficient intervals →
marginal predictions), checks the fit against the reporting target, prints a
summary, and exports the coefficient and prediction tables to RESULTS_DIR.

Usage (from project root):
    python -m src.analysis.runner --n 1000 --seed 123

Or programmatically:
    from src.analysis.runner import run_full_analysis
    results = run_full_analysis(n=1000, seed=123, output_dir=None)
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Sequence

import numpy as np
import pandas as pd

from config.generation_params import DEFAULT_N_ITEMS, DEFAULT_SEED, POSITIVE_LABEL
from config.model_params import CONFIDENCE_LEVEL
from src.logging_config import setup_logging
from src.modeling.errors import ModelingError
from src.modeling.logit import fit_logit
from src.synthesis.generator import generate_dataset

from .config import (
    AVERAGE_PROBABILITY_RANGE,
    COEFFICIENTS_FILENAME,
    ODDS_RATIOS_FILENAME,
    RESULTS_DIR,
    SUMMARY_FILENAME,
)
from .intervals import coefficient_table, intercept_probability, odds_ratio_table
from .marginal import (
    AttributeGrouping,
    GroupingPolicy,
    OverallGrouping,
    QuantileGrouping,
    prediction_table,
)
from .validation import recovery_table


DEFAULT_GROUPINGS: tuple[GroupingPolicy, ...] = (
    OverallGrouping(),
    AttributeGrouping(),
    QuantileGrouping(),
)


# ---------------------------------------------------------------------------
# Export helpers
# ---------------------------------------------------------------------------

def _json_default(obj):
    """JSON serializer for numpy scalars/arrays and DataFrames."""
    if isinstance(obj, np.integer):
        return int(obj)
    if isinstance(obj, np.floating):
        return float(obj)
    if isinstance(obj, np.bool_):
        return bool(obj)
    if isinstance(obj, np.ndarray):
        return obj.tolist()
    if isinstance(obj, pd.DataFrame):
        return obj.to_dict(orient="records")
    raise TypeError(f"Object of type {type(obj)} is not JSON serializable")


def _export(results: dict, output_dir: Path) -> None:
    output_dir.mkdir(parents=True, exist_ok=True)

    results["coefficients"].to_csv(output_dir / COEFFICIENTS_FILENAME, index=False)
    results["odds_ratios"].to_csv(output_dir / ODDS_RATIOS_FILENAME, index=False)
    for name, table in results["predictions"].items():
        table.to_csv(output_dir / f"predictions_{name}.csv", index=False)

    out_path = output_dir / SUMMARY_FILENAME
    with out_path.open("w", encoding="utf-8") as fh:
        json.dump(results["summary"], fh, indent=2, default=_json_default)

    print(f"\nExported results to {output_dir}")


# ---------------------------------------------------------------------------
# Master runner
# ---------------------------------------------------------------------------

def run_full_analysis(
    n: int = DEFAULT_N_ITEMS,
    seed: int = DEFAULT_SEED,
    output_dir: Path | None = RESULTS_DIR,
    groupings: Sequence[GroupingPolicy] = DEFAULT_GROUPINGS,
    confidence: float = CONFIDENCE_LEVEL,
) -> dict:
    """
    Execute the full pipeline and (optionally) export all tables.

    Args:
        n: Number of synthetic items.
        seed: Seed for the synthesis random handle.
        output_dir: Directory for exported files; None skips export.
        groupings: Grouping policies for the prediction tables.
        confidence: Confidence level for every interval.

    Returns:
        Dict with keys: dataset, model, coefficients, odds_ratios,
        intercept_probability, predictions (policy name → DataFrame),
        recovery, summary.

    Raises:
        ModelingError: Any of the four recoverable pipeline failures.
    """
    sep = "=" * 70
    print(f"\n{sep}")
    print(f"LOGIT INFERENCE PIPELINE  (n={n}, seed={seed})")
    print(sep)

    # ── Synthesis ──
    dataset = generate_dataset(n=n, seed=seed)
    positive_rate = float((dataset["label"] == POSITIVE_LABEL).mean())
    print(f"Synthesized {len(dataset)} items; observed '{POSITIVE_LABEL}' rate {positive_rate:.3f}")

    # ── Fit ──
    model = fit_logit(dataset)
    print(f"Fit converged in {model.n_iter} iterations "
          f"(logLik={model.log_likelihood:.3f}, AIC={model.aic:.3f})")

    # ── Intervals ──
    coefficients = coefficient_table(model, confidence)
    odds_ratios = odds_ratio_table(model, confidence)
    baseline = intercept_probability(model, confidence)

    print(f"\n{sep}")
    print(f"COEFFICIENTS  ({confidence:.0%} Wald intervals, log-odds)")
    print(sep)
    for row in coefficients.itertuples(index=False):
        print(f"  {row.term:<20} {row.estimate:+.3f}  [{row.lower:+.3f}, {row.upper:+.3f}]  "
              f"p={row.p_value:.4f}")
    print(f"  Intercept-only probability: {baseline.probability:.3f} "
          f"[{baseline.lower:.3f}, {baseline.upper:.3f}]")

    # ── Marginal predictions ──
    print(f"\n{sep}")
    print("MARGINAL PREDICTIONS")
    print(sep)
    predictions: dict[str, pd.DataFrame] = {}
    for grouping in groupings:
        table = prediction_table(model, dataset, grouping, confidence)
        predictions[grouping.name] = table
        print(f"  [{grouping.name}]")
        for row in table.itertuples(index=False):
            print(f"    {row.group:<42} {row.probability:.3f}  "
                  f"[{row.lower:.3f}, {row.upper:.3f}]  n={row.n_obs}")

    # ── Recovery check ──
    recovery = recovery_table(model)
    n_recovered = int(recovery["within_tolerance"].sum())
    print(f"\nRecovered {n_recovered}/{len(recovery)} coefficients within tolerance")

    lo, hi = AVERAGE_PROBABILITY_RANGE
    overall = prediction_table(model, dataset, OverallGrouping(), confidence)
    average_probability = float(overall["probability"].iloc[0])

    summary = {
        "n_items": n,
        "seed": seed,
        "confidence": confidence,
        "observed_positive_rate": round(positive_rate, 4),
        "average_predicted_probability": round(average_probability, 4),
        "average_probability_in_range": bool(lo <= average_probability <= hi),
        "fit": {
            "converged": model.converged,
            "n_iter": model.n_iter,
            "log_likelihood": model.log_likelihood,
            "deviance": model.deviance,
            "aic": model.aic,
        },
        "coefficients": coefficients,
        "odds_ratios": odds_ratios,
        "intercept_probability": {
            "probability": baseline.probability,
            "lower": baseline.lower,
            "upper": baseline.upper,
        },
        "predictions": predictions,
        "recovery": recovery,
    }

    results = {
        "dataset": dataset,
        "model": model,
        "coefficients": coefficients,
        "odds_ratios": odds_ratios,
        "intercept_probability": baseline,
        "predictions": predictions,
        "recovery": recovery,
        "summary": summary,
    }

    if output_dir is not None:
        _export(results, output_dir)

    return results


# ---------------------------------------------------------------------------
# CLI entry point
# ---------------------------------------------------------------------------

def build_arg_parser() -> argparse.ArgumentParser:
    """CLI parser: item count, seed, confidence, and output location."""
    parser = argparse.ArgumentParser(
        description="Synthesize items, fit a logit model, and report intervals."
    )
    parser.add_argument("--n", type=int, default=DEFAULT_N_ITEMS, help="Number of items.")
    parser.add_argument("--seed", type=int, default=DEFAULT_SEED, help="Synthesis seed.")
    parser.add_argument("--confidence", type=float, default=CONFIDENCE_LEVEL)
    parser.add_argument("--output-dir", type=Path, default=RESULTS_DIR)
    parser.add_argument("--no-export", action="store_true", help="Print only; write no files.")
    parser.add_argument("--verbose", action="store_true", help="Log IRLS iterations.")
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """Run the pipeline from the command line; returns a process exit code."""
    args = build_arg_parser().parse_args(argv)
    setup_logging(logging.DEBUG if args.verbose else logging.WARNING)

    try:
        run_full_analysis(
            n=args.n,
            seed=args.seed,
            output_dir=None if args.no_export else args.output_dir,
            confidence=args.confidence,
        )
    except ModelingError as exc:
        print(f"ERROR: {type(exc).__name__}: {exc}")
        return 1
    except ValueError as exc:
        print(f"ERROR: {exc}")
        return 2
    return 0


if __name__ == "__main__":
    sys.exit(main())
