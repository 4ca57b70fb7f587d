"""
Modeling package: logit-link binomial regression.

Public API surface:

    Predictors:
        Predictor, DEFAULT_PREDICTORS, build_design_matrix, encode_outcome

    Fitting:
        fit_logit, FittedModel, predict_linear, predict_proba,
        sigmoid, logit

    Errors:
        ModelingError, NonConvergence, SingularDesign,
        UndefinedInterval, InvalidGrouping
"""

from .errors import (
    InvalidGrouping,
    ModelingError,
    NonConvergence,
    SingularDesign,
    UndefinedInterval,
)
from .logit import (
    FittedModel,
    fit_logit,
    logit,
    predict_linear,
    predict_proba,
    sigmoid,
)
from .predictors import (
    DEFAULT_PREDICTORS,
    Predictor,
    build_design_matrix,
    column,
    encode_outcome,
    term_names,
)

__all__ = [
    # predictors
    "Predictor",
    "DEFAULT_PREDICTORS",
    "build_design_matrix",
    "column",
    "encode_outcome",
    "term_names",
    # fitting
    "FittedModel",
    "fit_logit",
    "logit",
    "predict_linear",
    "predict_proba",
    "sigmoid",
    # errors
    "ModelingError",
    "NonConvergence",
    "SingularDesign",
    "UndefinedInterval",
    "InvalidGrouping",
]
