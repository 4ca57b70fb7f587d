"""
Shared pytest fixtures for the synthesis, fitting and analysis tests.

Dataset fixtures are session-scoped: synthesis is deterministic and the
pipeline never mutates its inputs, so one copy per (n, seed) is enough.
Tests that need to alter a frame take a .copy() first.
"""

from __future__ import annotations

import numpy as np
import pytest

from src.modeling.logit import FittedModel, fit_logit
from src.modeling.predictors import DEFAULT_PREDICTORS
from src.synthesis.generator import generate_dataset


# ---------------------------------------------------------------------------
# Scenario constants
# ---------------------------------------------------------------------------

SCENARIO_N = 1000
SCENARIO_SEED = 123

# Large enough that every coefficient SE is below ~0.07
LARGE_N = 20_000
LARGE_SEED = 7


# ---------------------------------------------------------------------------
# Dataset and model fixtures
# ---------------------------------------------------------------------------

@pytest.fixture(scope="session")
def scenario_df():
    """N=1000, seed=123 synthetic dataset."""
    return generate_dataset(n=SCENARIO_N, seed=SCENARIO_SEED)


@pytest.fixture(scope="session")
def scenario_model(scenario_df):
    """Logit fit on the scenario dataset."""
    return fit_logit(scenario_df)


@pytest.fixture(scope="session")
def large_df():
    return generate_dataset(n=LARGE_N, seed=LARGE_SEED)


@pytest.fixture(scope="session")
def large_model(large_df):
    return fit_logit(large_df)


# ---------------------------------------------------------------------------
# Hand-built model helper
# ---------------------------------------------------------------------------

def make_model(
    coefficients=(-1.0, 0.5, 0.5, -0.5),
    covariance=None,
) -> FittedModel:
    """Build a FittedModel directly, bypassing the fitter."""
    coefficients = np.asarray(coefficients, dtype=float)
    if covariance is None:
        covariance = np.eye(len(coefficients)) * 0.01
    return FittedModel(
        terms=("(Intercept)", "size", "shape_indicator", "coating_indicator"),
        coefficients=coefficients,
        covariance=np.asarray(covariance, dtype=float),
        converged=True,
        n_iter=1,
        n_obs=100,
        log_likelihood=-50.0,
        predictors=DEFAULT_PREDICTORS,
    )


@pytest.fixture
def model_factory():
    """Factory fixture around make_model for tests that need custom covariance."""
    return make_model
