"""
Error taxonomy for the fitting and inference layers.

Each failure mode is a distinct, recoverable outcome: callers may retry with a
different seed, item count, or grouping.  Nothing in the core retries on its
own.

    NonConvergence    : IRLS exhausted its iteration budget
    SingularDesign    : design matrix (or weighted information) not full rank
    UndefinedInterval : standard error is not finite, no Wald bound exists
    InvalidGrouping   : requested grouping key is not part of the dataset
"""

from __future__ import annotations


class ModelingError(Exception):
    """Base class for all recoverable pipeline failures."""


class NonConvergence(ModelingError):
    """Raised when the fitter reaches ``max_iter`` without meeting ``tol``."""

    def __init__(self, n_iter: int, last_change: float, tol: float):
        self.n_iter = n_iter
        self.last_change = last_change
        self.tol = tol
        super().__init__(
            f"IRLS did not converge after {n_iter} iterations "
            f"(last max |Δβ| = {last_change:.3g}, tolerance {tol:.1g})"
        )


class SingularDesign(ModelingError):
    """Raised when the design matrix is rank-deficient."""

    def __init__(self, message: str, terms: tuple[str, ...] = (), rank: int | None = None):
        self.terms = terms
        self.rank = rank
        super().__init__(message)


class UndefinedInterval(ModelingError):
    """Raised when a Wald interval is requested for a non-finite or negative standard error."""

    def __init__(self, term: str, std_error: float):
        self.term = term
        self.std_error = std_error
        super().__init__(
            f"Interval undefined for '{term}': standard error is {std_error}"
        )


class InvalidGrouping(ModelingError):
    """Raised when a grouping key or reference profile does not match the dataset."""
