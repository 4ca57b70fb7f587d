"""
Binomial regression with a logit link, fitted by iteratively reweighted
least squares (Newton–Raphson on the binomial log-likelihood).

The fitted model is a value: coefficients, covariance and fit statistics are
copied out of the working arrays and frozen, and no reference to the training
frame is kept.  Fitting is invariant to row order.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Sequence

import numpy as np
import pandas as pd
from scipy.special import expit

from config.model_params import MAX_ITER, PROBABILITY_EPSILON, TOLERANCE

from .errors import NonConvergence, SingularDesign
from .predictors import (
    DEFAULT_PREDICTORS,
    Predictor,
    build_design_matrix,
    encode_outcome,
)

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Link helpers
# ---------------------------------------------------------------------------

def sigmoid(z):
    """Inverse logit; saturates to 0 or 1 without overflow."""
    return expit(np.asarray(z, dtype=float))


def logit(p):
    """Log-odds log(p / (1 - p))."""
    p = np.asarray(p, dtype=float)
    return np.log(p) - np.log1p(-p)


def _clamp(p: np.ndarray) -> np.ndarray:
    return np.clip(p, PROBABILITY_EPSILON, 1.0 - PROBABILITY_EPSILON)


def _frozen(arr: np.ndarray) -> np.ndarray:
    out = np.array(arr, dtype=float, copy=True)
    out.setflags(write=False)
    return out


# ---------------------------------------------------------------------------
# Fitted model
# ---------------------------------------------------------------------------

@dataclass(frozen=True, eq=False)
class FittedModel:
    """Result of a logit fit.  Coefficients are on the log-odds scale."""

    terms: tuple[str, ...]
    coefficients: np.ndarray
    covariance: np.ndarray
    converged: bool
    n_iter: int
    n_obs: int
    log_likelihood: float
    predictors: tuple[Predictor, ...] = field(repr=False)

    @property
    def standard_errors(self) -> np.ndarray:
        """sqrt(diag(cov)); NaN where the diagonal is not positive."""
        diag = np.diag(self.covariance)
        with np.errstate(invalid="ignore"):
            return np.where(diag > 0, np.sqrt(np.abs(diag)), np.nan)

    @property
    def deviance(self) -> float:
        return -2.0 * self.log_likelihood

    @property
    def aic(self) -> float:
        return self.deviance + 2.0 * len(self.terms)

    def coefficient(self, term: str) -> float:
        return float(self.coefficients[self.terms.index(term)])

    def as_dict(self) -> dict[str, float]:
        """Term → estimate, in design-matrix order."""
        return {t: float(b) for t, b in zip(self.terms, self.coefficients)}


# ---------------------------------------------------------------------------
# IRLS fit
# ---------------------------------------------------------------------------

def _check_rank(X: np.ndarray, terms: tuple[str, ...]) -> None:
    n_rows, n_terms = X.shape
    if n_rows < n_terms:
        raise SingularDesign(
            f"Design has {n_rows} rows for {n_terms} terms", terms=terms, rank=n_rows
        )
    rank = int(np.linalg.matrix_rank(X))
    if rank < n_terms:
        # Name the columns that are constant; collinear sets are reported by rank only
        constant = [
            t for t, col in zip(terms[1:], X[:, 1:].T) if np.ptp(col) == 0
        ]
        detail = f"; constant predictors: {constant}" if constant else ""
        raise SingularDesign(
            f"Design matrix rank {rank} < {n_terms} terms{detail}",
            terms=terms,
            rank=rank,
        )


def _log_likelihood(y: np.ndarray, p: np.ndarray) -> float:
    p = _clamp(p)
    return float(np.sum(y * np.log(p) + (1.0 - y) * np.log1p(-p)))


def fit_logit(
    df: pd.DataFrame,
    predictors: Sequence[Predictor] = DEFAULT_PREDICTORS,
    *,
    outcome: str = "label",
    max_iter: int = MAX_ITER,
    tol: float = TOLERANCE,
) -> FittedModel:
    """
    Maximum-likelihood fit of P(outcome = positive) = sigmoid(Xβ).

    Starts from β = 0 and iterates the weighted least-squares update

        β ← (XᵀWX)⁻¹ XᵀW z,   W = diag(p(1-p)),   z = Xβ + (y - p) / w

    until max |Δβ| < ``tol``.  Fitted probabilities are clamped to
    [ε, 1 - ε] before weights are formed.

    Args:
        df: Dataset carrying the outcome and every predictor column.
        predictors: Ordered predictor specification (intercept is implicit).
        outcome: Two-level categorical outcome column.
        max_iter: Iteration budget.
        tol: Convergence tolerance on the coefficient change.

    Returns:
        FittedModel with inverse-Fisher-information covariance.

    Raises:
        SingularDesign: Design matrix or weighted information is rank-deficient.
        NonConvergence: ``max_iter`` reached without meeting ``tol``.
        ValueError: The outcome column holds values other than the label levels.
    """
    predictors = tuple(predictors)
    X, terms = build_design_matrix(df, predictors)
    y = encode_outcome(df, outcome)
    _check_rank(X, terms)

    beta = np.zeros(X.shape[1])
    change = np.inf
    converged = False
    n_iter = 0

    for step in range(1, max_iter + 1):
        eta = X @ beta
        p = _clamp(sigmoid(eta))
        w = p * (1.0 - p)
        z = eta + (y - p) / w
        info = X.T @ (X * w[:, None])
        try:
            new_beta = np.linalg.solve(info, X.T @ (w * z))
        except np.linalg.LinAlgError as exc:
            raise SingularDesign(
                f"Weighted information matrix is singular at iteration {step}",
                terms=terms,
            ) from exc

        change = float(np.max(np.abs(new_beta - beta)))
        beta = new_beta
        n_iter = step
        logger.debug("IRLS step=%d max|Δβ|=%.3e", step, change)

        if change < tol:
            converged = True
            break

    if not converged:
        raise NonConvergence(n_iter=n_iter, last_change=change, tol=tol)

    p = _clamp(sigmoid(X @ beta))
    w = p * (1.0 - p)
    info = X.T @ (X * w[:, None])
    try:
        covariance = np.linalg.inv(info)
    except np.linalg.LinAlgError as exc:
        raise SingularDesign(
            "Fisher information is singular at the estimate", terms=terms
        ) from exc

    ll = _log_likelihood(y, p)
    logger.info(
        "Logit fit converged in %d iterations (n=%d, logLik=%.3f)",
        n_iter, len(y), ll,
    )

    return FittedModel(
        terms=terms,
        coefficients=_frozen(beta),
        covariance=_frozen(covariance),
        converged=True,
        n_iter=n_iter,
        n_obs=len(y),
        log_likelihood=ll,
        predictors=predictors,
    )


# ---------------------------------------------------------------------------
# Prediction
# ---------------------------------------------------------------------------

def predict_linear(model: FittedModel, df: pd.DataFrame) -> np.ndarray:
    """Per-row linear predictor Xβ (log-odds)."""
    X, _ = build_design_matrix(df, model.predictors)
    return X @ model.coefficients


def predict_proba(model: FittedModel, df: pd.DataFrame) -> np.ndarray:
    """Per-row P(label = positive)."""
    return sigmoid(predict_linear(model, df))
