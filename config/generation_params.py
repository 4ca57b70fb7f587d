"""
Synthetic data generation parameters.

This is the AUTHORITATIVE source for the generating process used by
src/synthesis/generator.py.  The coefficients below define the ground truth
the synthesizer draws labels from; the values the analysis layer checks a fit
against live separately in src/analysis/config.py (REPORTING_TARGET).

Generating process (one row per item):
    size              ~ Uniform[SIZE_BOUNDS]
    shape_indicator   ~ Bernoulli(SHAPE_PROBABILITY)
    coating_indicator ~ Bernoulli(COATING_PROBABILITY)
    latent_probability = sigmoid(b0 + b1·size + b2·shape + b3·coating)
    label             ~ Bernoulli(latent_probability) → LABEL_LEVELS
"""

from __future__ import annotations

# ---------------------------------------------------------------------------
# Run defaults
# ---------------------------------------------------------------------------

DEFAULT_N_ITEMS: int = 1000
DEFAULT_SEED: int = 123

# ---------------------------------------------------------------------------
# Attribute distributions
# ---------------------------------------------------------------------------

SIZE_BOUNDS: tuple[float, float] = (0.5, 1.5)   # continuous uniform, inclusive low
SHAPE_PROBABILITY: float = 0.5
COATING_PROBABILITY: float = 0.4

# ---------------------------------------------------------------------------
# Generation truth (log-odds scale)
# ---------------------------------------------------------------------------

# Term order matches the fitter's design matrix: intercept first.
TRUE_COEFFICIENTS: dict[str, float] = {
    "(Intercept)":       -1.25,
    "size":               0.48,
    "shape_indicator":    0.67,
    "coating_indicator": -0.32,
}

# ---------------------------------------------------------------------------
# Label encoding
# ---------------------------------------------------------------------------

# Ordered (negative, positive); the fitter models P(label == POSITIVE_LABEL).
LABEL_LEVELS: tuple[str, str] = ("no", "yes")
POSITIVE_LABEL: str = LABEL_LEVELS[1]

# Column order of a synthesized dataset
DATASET_COLUMNS: list[str] = [
    "item_id",
    "size",
    "shape_indicator",
    "coating_indicator",
    "latent_probability",
    "label",
]
