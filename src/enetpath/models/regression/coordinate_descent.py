# ============================================
# enetpath - src/enetpath/models/regression/coordinate_descent.py
# Cyclical coordinate descent along an elastic-net regularization path
# ============================================

import numpy as np
from dataclasses import dataclass, replace
from typing import Any, List, Optional

from ..base.path_types import RegularizationPath
from ...features.transformers.scalers import Standardizer
from ...utils.config_loader import get_solver_settings
from ...utils.exceptions import ConvergenceFailure, NumericalError
from ...utils.logger import get_logger
from ...utils.timing import Timer
from ...utils.validators import (
    prepare_training_data,
    validate_alpha,
    validate_lambda_sequence,
    validate_numeric_range,
    validate_positive_int
)
from .lambda_sequence import generate_lambda_sequence

logger = get_logger('models.regression.coordinate_descent')

# A coefficient that stayed at zero this many sweeps in a row is skipped...
ACTIVE_SET_PATIENCE = 3
# ...except on every n-th sweep, which visits every feature
FULL_SWEEP_EVERY = 10


def soft_threshold(value, threshold):
    """sign(value) * max(|value| - threshold, 0)"""
    return np.sign(value) * np.maximum(np.abs(value) - threshold, 0.0)


@dataclass
class StandardizedPath:
    """Raw solver output on the standardized scale"""
    coefs: np.ndarray
    n_iter: np.ndarray
    r_squared: np.ndarray
    failures: List[ConvergenceFailure]


def _descend(x_gram, y_gram, beta, l1_penalty, l2_penalty, updatable, tol, max_iter):
    """
    Coordinate descent at a single lambda, starting from ``beta`` (modified
    in place)

    Returns:
        Tuple of (sweeps used, converged flag, max change of the last sweep)
    """
    n_features = beta.shape[0]
    zero_streak = np.zeros(n_features, dtype=np.int64)
    force_full = True
    max_change = 0.0

    for sweep in range(1, max_iter + 1):
        full_sweep = force_full or sweep % FULL_SWEEP_EVERY == 0
        max_change = 0.0

        for j in updatable:
            if not full_sweep and zero_streak[j] >= ACTIVE_SET_PATIENCE:
                continue

            old = beta[j]
            # partial-residual correlation x_j'(y - X beta + x_j beta_j) / n
            z_j = y_gram[j] - x_gram[j] @ beta + x_gram[j, j] * old
            new = soft_threshold(z_j, l1_penalty) / (x_gram[j, j] + l2_penalty)
            beta[j] = new

            change = abs(new - old)
            if change > max_change:
                max_change = change
            zero_streak[j] = zero_streak[j] + 1 if new == 0.0 else 0

        if not np.all(np.isfinite(beta)):
            return sweep, False, np.inf

        if max_change <= tol * np.max(np.abs(beta)):
            if full_sweep:
                return sweep, True, max_change
            # active set settled; confirm with a sweep over every feature
            force_full = True
        else:
            force_full = False

    return max_iter, False, max_change


def coordinate_descent_path(X_std: np.ndarray, y_std: np.ndarray, alpha: float,
                            lambdas: np.ndarray, y_scale: float = 1.0,
                            degenerate: Optional[np.ndarray] = None,
                            tol: float = 1e-7, max_iter: int = 100000,
                            fold: Optional[int] = None,
                            beta_init: Optional[np.ndarray] = None) -> StandardizedPath:
    """
    Fit the elastic-net path on standardized data with warm starts

    Minimizes, for each lambda (largest first)::

        1/(2n) ||y_std - X_std b||^2 + (lambda * alpha / y_scale) ||b||_1
            + lambda * (1 - alpha) / 2 ||b||^2

    which is the original-units elastic-net objective rescaled by the
    response's standard deviation ``y_scale``.

    Args:
        X_std: Standardized design matrix
        y_std: Standardized response
        alpha: Mixing parameter in [0, 1]
        lambdas: Decreasing lambda sequence, original response units
        y_scale: Standard deviation used to standardize the response
        degenerate: Mask of features that are never updated
        tol: Relative convergence tolerance on the max coefficient change
        max_iter: Sweep cap per lambda
        fold: Cross-validation fold, for error reporting
        beta_init: Starting coefficients for the first lambda

    Returns:
        StandardizedPath with one row per lambda

    Raises:
        NumericalError: If a coefficient becomes non-finite
    """
    n_samples, n_features = X_std.shape
    n_lambda = lambdas.shape[0]

    x_gram = (X_std.T @ X_std) / n_samples
    y_gram = (X_std.T @ y_std) / n_samples
    y_sq = float(y_std @ y_std) / n_samples

    if degenerate is None:
        degenerate = np.zeros(n_features, dtype=bool)
    updatable = np.flatnonzero(~np.asarray(degenerate, dtype=bool))

    beta = np.zeros(n_features) if beta_init is None else np.array(beta_init, dtype=np.float64)
    beta[~np.isin(np.arange(n_features), updatable)] = 0.0

    coefs = np.zeros((n_lambda, n_features))
    n_iter = np.zeros(n_lambda, dtype=np.int64)
    r_squared = np.zeros(n_lambda)
    failures: List[ConvergenceFailure] = []

    for k, lambda_value in enumerate(lambdas):
        l1_penalty = lambda_value * alpha / y_scale
        l2_penalty = lambda_value * (1.0 - alpha)

        sweeps, converged, max_change = _descend(
            x_gram, y_gram, beta, l1_penalty, l2_penalty, updatable, tol, max_iter
        )

        if not np.all(np.isfinite(beta)):
            raise NumericalError(
                "Non-finite coefficient during coordinate descent",
                alpha=alpha, lambda_value=float(lambda_value), fold=fold
            )

        if not converged:
            failure = ConvergenceFailure(
                f"Coordinate descent did not converge in {sweeps} sweeps",
                alpha=alpha, lambda_value=float(lambda_value), fold=fold,
                n_iter=sweeps, max_change=float(max_change)
            )
            failures.append(failure)
            logger.warning(failure.message)

        coefs[k] = beta
        n_iter[k] = sweeps
        if y_sq > 0:
            rss = y_sq - 2.0 * (y_gram @ beta) + beta @ x_gram @ beta
            r_squared[k] = 1.0 - max(rss, 0.0) / y_sq

    return StandardizedPath(coefs=coefs, n_iter=n_iter, r_squared=r_squared, failures=failures)


def fit_path(X: Any, y: Any, alpha: float, lambda_sequence: Optional[Any] = None,
             tol: Optional[float] = None, max_iter: Optional[int] = None,
             n_lambda: Optional[int] = None, lambda_min_ratio: Optional[float] = None,
             fold: Optional[int] = None, strict: bool = False,
             warn: bool = True) -> RegularizationPath:
    """
    Fit an elastic-net regularization path

    Args:
        X: Design matrix (array or DataFrame)
        y: Response vector
        alpha: Mixing parameter, 0 is ridge and 1 is lasso
        lambda_sequence: Penalties to fit; generated from the data when None.
            A supplied sequence is sorted in decreasing order.
        tol: Convergence tolerance (default from configuration)
        max_iter: Sweep cap per lambda (default from configuration)
        n_lambda: Length of a generated sequence
        lambda_min_ratio: Ratio of smallest to largest generated lambda
        fold: Cross-validation fold this fit belongs to, for reporting
        strict: Raise DegenerateFeature instead of warning
        warn: Emit DegenerateFeature warnings; degenerate columns are zeroed either way

    Returns:
        RegularizationPath on the original scale

    Raises:
        NumericalError: Non-finite input or coefficients
        DataValidationError: Malformed X or y
        InvalidParameterError: Bad alpha, options or lambda sequence
    """
    settings = get_solver_settings()
    tol = validate_numeric_range(settings.tol if tol is None else tol, "tol",
                                 min_value=0.0, min_inclusive=False)
    max_iter = validate_positive_int(settings.max_iter if max_iter is None else max_iter, "max_iter")
    alpha = validate_alpha(alpha)

    try:
        X_arr, y_arr, feature_names = prepare_training_data(X, y)
    except NumericalError as e:
        raise e.with_fold(fold)

    if lambda_sequence is not None:
        lambdas = validate_lambda_sequence(lambda_sequence)

    X_std, y_std, state = Standardizer(strict=strict, warn=warn).fit_transform(X_arr, y_arr)

    if lambda_sequence is None:
        lambdas = generate_lambda_sequence(X_std, y_std * state.y_scale, alpha,
                                           n_lambda=n_lambda, lambda_min_ratio=lambda_min_ratio)

    with Timer(f"fit_path(alpha={alpha:.4g})", auto_log=False) as timer:
        raw = coordinate_descent_path(
            X_std, y_std, alpha, lambdas,
            y_scale=state.y_scale,
            degenerate=state.degenerate,
            tol=tol,
            max_iter=max_iter,
            fold=fold
        )

    intercepts = np.empty(len(lambdas))
    coefs = np.empty_like(raw.coefs)
    for k in range(len(lambdas)):
        intercepts[k], coefs[k] = state.to_original(raw.coefs[k])

    if not (np.all(np.isfinite(coefs)) and np.all(np.isfinite(intercepts))):
        raise NumericalError("Non-finite coefficient after rescaling", alpha=alpha, fold=fold)

    if feature_names is not None:
        state = replace(state, feature_names=feature_names)

    path = RegularizationPath(
        alpha=alpha,
        lambdas=lambdas,
        intercepts=intercepts,
        coefs=coefs,
        n_iter=raw.n_iter,
        r_squared=raw.r_squared,
        standardization=state,
        feature_names=feature_names,
        failures=raw.failures
    )

    log = logger.debug if fold is not None else logger.info
    log(f"Fitted path alpha={alpha:.4g} ({len(path)} lambdas, "
        f"{int(path.n_active[-1])}/{path.n_features} active at the end, "
        f"{len(path.failures)} convergence failures) in {timer.result.duration_str}")

    return path
