"""
Model fitting and inference constants.

This is the AUTHORITATIVE source for fitter and interval parameters.
src/modeling and src/analysis import from here; do not maintain parallel
copies.

Design rationale:
- MAX_ITER = 25 and TOLERANCE = 1e-8 follow the usual GLM defaults; a
  well-posed logit fit on a few thousand rows converges in 4–6 IRLS steps.
- PROBABILITY_EPSILON keeps fitted probabilities away from exactly 0 or 1
  so that IRLS weights stay positive and log(0) never occurs.
"""

from __future__ import annotations

# ---------------------------------------------------------------------------
# IRLS / Newton–Raphson
# ---------------------------------------------------------------------------

MAX_ITER: int = 25
TOLERANCE: float = 1e-8              # max |Δβ| between iterations
PROBABILITY_EPSILON: float = 1e-10   # clamp fitted p to [ε, 1 - ε]

# ---------------------------------------------------------------------------
# Inference
# ---------------------------------------------------------------------------

CONFIDENCE_LEVEL: float = 0.95

INTERCEPT_TERM: str = "(Intercept)"

# Delta-method linearization points for marginal predictions
LINEARIZATIONS: tuple[str, ...] = ("average_predictor", "per_row")
DEFAULT_LINEARIZATION: str = "average_predictor"
