"""
Synthetic item generator.

Produces N items with a continuous size, two binary indicators, the latent
probability implied by the generation-truth coefficients, and a two-level
label drawn from that probability.

Randomness comes only from the ``numpy.random.Generator`` passed in; the same
(n, seed) pair always yields a bit-identical frame.  Draws happen in a fixed
order (size, shape, coating, label) so that changing one distribution never
reshuffles the others for rows already drawn.
"""

from __future__ import annotations

import numpy as np
import pandas as pd
from scipy.special import expit

from config.generation_params import (
    COATING_PROBABILITY,
    DATASET_COLUMNS,
    DEFAULT_N_ITEMS,
    DEFAULT_SEED,
    LABEL_LEVELS,
    SHAPE_PROBABILITY,
    SIZE_BOUNDS,
    TRUE_COEFFICIENTS,
)


def make_rng(seed: int | None = DEFAULT_SEED) -> np.random.Generator:
    """Explicit random handle (PCG64) for one synthesis call."""
    return np.random.default_rng(seed)


def latent_probability(
    size: np.ndarray,
    shape_indicator: np.ndarray,
    coating_indicator: np.ndarray,
    coefficients: dict[str, float] = TRUE_COEFFICIENTS,
) -> np.ndarray:
    """sigmoid(b0 + b1·size + b2·shape + b3·coating) under ``coefficients``."""
    eta = (
        coefficients["(Intercept)"]
        + coefficients["size"] * size
        + coefficients["shape_indicator"] * shape_indicator
        + coefficients["coating_indicator"] * coating_indicator
    )
    return expit(eta)


def synthesize_dataset(
    n: int,
    rng: np.random.Generator,
    coefficients: dict[str, float] = TRUE_COEFFICIENTS,
) -> pd.DataFrame:
    """
    Draw ``n`` items from the generating process.

    Args:
        n: Number of items (>= 1).
        rng: Random handle; consumed in place, so pass a fresh one per dataset.
        coefficients: Log-odds coefficients used to derive the latent probability.

    Returns:
        DataFrame with columns DATASET_COLUMNS, one row per item, in draw order.
        ``label`` is an ordered Categorical over LABEL_LEVELS.
    """
    if n < 1:
        raise ValueError(f"n must be a positive item count, got {n}")

    low, high = SIZE_BOUNDS
    size = rng.uniform(low, high, size=n)
    shape_indicator = rng.binomial(1, SHAPE_PROBABILITY, size=n)
    coating_indicator = rng.binomial(1, COATING_PROBABILITY, size=n)

    p = latent_probability(size, shape_indicator, coating_indicator, coefficients)
    outcome = rng.binomial(1, p)

    df = pd.DataFrame({
        "item_id": np.arange(1, n + 1),
        "size": size,
        "shape_indicator": shape_indicator.astype(np.int64),
        "coating_indicator": coating_indicator.astype(np.int64),
        "latent_probability": p,
        "label": pd.Categorical.from_codes(
            outcome, categories=list(LABEL_LEVELS), ordered=True
        ),
    })
    return df[DATASET_COLUMNS]


def generate_dataset(n: int = DEFAULT_N_ITEMS, seed: int = DEFAULT_SEED) -> pd.DataFrame:
    """Synthesize ``n`` items from a fresh handle seeded with ``seed``."""
    return synthesize_dataset(n, make_rng(seed))
