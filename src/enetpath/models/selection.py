# ============================================
# enetpath - src/enetpath/models/selection.py
# Lambda selection from cross-validated errors
# ============================================

import numpy as np
from enum import Enum
from typing import Optional, Sequence

from .base.path_types import CVResult, RegularizationPath, SelectionOutcome
from ..utils.exceptions import InvalidParameterError
from ..utils.logger import get_logger
from ..utils.validators import validate_choice

logger = get_logger('models.selection')


class SelectionRule(Enum):
    """Rules for picking a lambda from a cross-validation curve"""
    MIN = "min"        # lowest mean held-out error
    ONE_SE = "1se"     # most regularized within one standard error of the minimum

    @classmethod
    def parse(cls, value) -> 'SelectionRule':
        if isinstance(value, cls):
            return value
        rule = validate_choice(str(value).lower(), "selection_rule", [member.value for member in cls])
        return cls(rule)


def _path_index(path: RegularizationPath, lambda_value: float) -> int:
    matches = np.flatnonzero(np.isclose(path.lambdas, lambda_value, rtol=1e-12, atol=0.0))
    if matches.size == 0:
        raise InvalidParameterError(
            f"lambda={lambda_value:.6g} is not on the supplied path",
            parameter_name="path",
            provided_value=lambda_value
        )
    return int(matches[0])


def select_lambda(cv_results: Sequence[CVResult], path: Optional[RegularizationPath] = None,
                  alpha: Optional[float] = None) -> SelectionOutcome:
    """
    Pick lambda by the minimum-error and one-standard-error rules

    Ties in mean error go to the larger lambda. The one-standard-error
    lambda is the largest lambda whose mean error is within one standard
    error of the minimum, so it is never smaller than the minimum-error
    lambda.

    Args:
        cv_results: Per-lambda cross-validation records
        path: Full-data path on the same lambdas; supplies coefficients
        alpha: Mixing parameter to record (taken from ``path`` when given)

    Returns:
        SelectionOutcome

    Raises:
        InvalidParameterError: On empty input or when every error is NaN
    """
    cv_results = list(cv_results)
    if not cv_results:
        raise InvalidParameterError("No cross-validation results to select from",
                                    parameter_name="cv_results")

    lambdas = np.array([r.lambda_value for r in cv_results], dtype=np.float64)
    errors = np.array([r.mean_error for r in cv_results], dtype=np.float64)
    std_errors = np.array([r.std_error for r in cv_results], dtype=np.float64)

    valid = np.isfinite(errors)
    if not valid.any():
        raise InvalidParameterError("Every cross-validated error is NaN",
                                    parameter_name="cv_results")

    # visit larger lambdas first so ties resolve toward more regularization
    order = np.argsort(-lambdas, kind='stable')
    masked = np.where(valid, errors, np.inf)

    index_min = int(order[np.argmin(masked[order])])
    se_min = std_errors[index_min] if np.isfinite(std_errors[index_min]) else 0.0
    threshold = errors[index_min] + se_min
    index_1se = int(order[np.flatnonzero(masked[order] <= threshold)[0]])

    if path is not None:
        alpha = path.alpha
        coefficients_min = path.coefficients_at(_path_index(path, lambdas[index_min]))
        coefficients_1se = path.coefficients_at(_path_index(path, lambdas[index_1se]))
    else:
        coefficients_min = coefficients_1se = None

    outcome = SelectionOutcome(
        alpha=float('nan') if alpha is None else float(alpha),
        lambda_min=float(lambdas[index_min]),
        lambda_1se=float(lambdas[index_1se]),
        index_min=index_min,
        index_1se=index_1se,
        error_min=float(errors[index_min]),
        error_1se=float(errors[index_1se]),
        std_error_min=float(std_errors[index_min]),
        n_nonzero_min=int(cv_results[index_min].n_nonzero),
        n_nonzero_1se=int(cv_results[index_1se].n_nonzero),
        coefficients_min=coefficients_min,
        coefficients_1se=coefficients_1se
    )

    logger.debug(f"Selected lambda_min={outcome.lambda_min:.6g} (error {outcome.error_min:.6g}), "
                 f"lambda_1se={outcome.lambda_1se:.6g}")
    return outcome
