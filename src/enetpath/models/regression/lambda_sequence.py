# ============================================
# enetpath - src/enetpath/models/regression/lambda_sequence.py
# Geometric penalty sequences for regularization paths
# ============================================

import numpy as np
from typing import Any, Optional

from ...features.transformers.scalers import standardize
from ...utils.config_loader import get_solver_settings
from ...utils.exceptions import InvalidParameterError
from ...utils.logger import get_logger
from ...utils.validators import validate_alpha, validate_numeric_range, validate_positive_int

logger = get_logger('models.regression.lambda_sequence')

# Smallest mixing value used in the lambda_max formula. Ridge (alpha=0) has
# no finite lambda_max; it uses 10 * lambda_max(alpha=0.01), which is this floor.
ALPHA_FLOOR = 1e-3

# Relative inflation so the first path point is exactly zero after rounding
LAMBDA_MAX_INFLATION = 1e-10

# lambda_max used when the response is uncorrelated with every feature
ZERO_SIGNAL_LAMBDA_MAX = 1e-10


def default_lambda_min_ratio(n_samples: int, n_features: int) -> float:
    """1e-4 when there are more rows than columns, else 1e-2"""
    return 1e-4 if n_samples > n_features else 1e-2


def compute_lambda_max(X_std: np.ndarray, y_centered: np.ndarray, alpha: float) -> float:
    """
    Smallest lambda at which every coefficient is zero

    Args:
        X_std: Standardized design matrix
        y_centered: Response with its mean removed (original units)
        alpha: Mixing parameter in [0, 1]

    Returns:
        lambda_max on the response's original scale, inflated by a relative
        1e-10
    """
    alpha = validate_alpha(alpha)
    n_samples = X_std.shape[0]
    alpha_eff = max(alpha, ALPHA_FLOOR)

    correlation = np.abs(X_std.T @ y_centered).max() if X_std.shape[1] else 0.0
    lambda_max = float(correlation) / (n_samples * alpha_eff)

    if not lambda_max > ZERO_SIGNAL_LAMBDA_MAX:
        logger.debug("Response carries no linear signal; using a tiny lambda_max")
        return ZERO_SIGNAL_LAMBDA_MAX

    return lambda_max * (1.0 + LAMBDA_MAX_INFLATION)


def generate_lambda_sequence(X_std: np.ndarray, y_centered: np.ndarray, alpha: float,
                             n_lambda: Optional[int] = None,
                             lambda_min_ratio: Optional[float] = None) -> np.ndarray:
    """
    Geometric sequence from lambda_max down to lambda_max * lambda_min_ratio

    Args:
        X_std: Standardized design matrix
        y_centered: Centered response (original units)
        alpha: Mixing parameter in [0, 1]
        n_lambda: Number of lambdas (default from configuration, 100)
        lambda_min_ratio: Ratio of smallest to largest lambda; defaults to
            1e-4 when rows > columns and 1e-2 otherwise

    Returns:
        Strictly decreasing array of lambdas
    """
    settings = get_solver_settings()
    if n_lambda is None:
        n_lambda = settings.n_lambda
    if lambda_min_ratio is None:
        lambda_min_ratio = settings.lambda_min_ratio

    n_lambda = validate_positive_int(n_lambda, "n_lambda")
    X_std = np.asarray(X_std, dtype=np.float64)
    y_centered = np.asarray(y_centered, dtype=np.float64)
    if X_std.ndim != 2 or y_centered.shape != (X_std.shape[0],):
        raise InvalidParameterError(
            f"Incompatible shapes for lambda sequence: X {X_std.shape}, y {y_centered.shape}",
            parameter_name="X_std"
        )

    if lambda_min_ratio is None:
        lambda_min_ratio = default_lambda_min_ratio(*X_std.shape)
    lambda_min_ratio = validate_numeric_range(lambda_min_ratio, "lambda_min_ratio", 0.0, 1.0,
                                              min_inclusive=False, max_inclusive=False)

    lambda_max = compute_lambda_max(X_std, y_centered, alpha)
    if n_lambda == 1:
        return np.array([lambda_max])

    lambdas = np.geomspace(lambda_max, lambda_max * lambda_min_ratio, n_lambda)
    logger.debug(f"Lambda sequence for alpha={alpha:.4g}: {lambdas[0]:.6g} -> {lambdas[-1]:.6g} "
                 f"({n_lambda} values)")
    return lambdas


def lambda_sequence_for_data(X: Any, y: Any, alpha: float, n_lambda: Optional[int] = None,
                             lambda_min_ratio: Optional[float] = None) -> np.ndarray:
    """
    Lambda sequence for raw (unstandardized) data

    Standardizes the full dataset quietly and delegates to
    ``generate_lambda_sequence``.
    """
    X_std, y_std, state = standardize(X, y, warn=False)
    return generate_lambda_sequence(X_std, y_std * state.y_scale, alpha,
                                    n_lambda=n_lambda, lambda_min_ratio=lambda_min_ratio)
