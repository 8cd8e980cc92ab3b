# ============================================
# enetpath - src/enetpath/evaluation/validation/cross_validation.py
# K-fold cross-validation of elastic-net regularization paths
# ============================================

import numpy as np
from typing import Any, List, Optional, Tuple
from sklearn.model_selection import KFold

from ...models.base.path_types import CVResult, CrossValidationResult, FoldAssignment
from ...models.regression.coordinate_descent import fit_path
from ...models.regression.lambda_sequence import lambda_sequence_for_data
from ...models.selection import select_lambda
from ...utils.config_loader import get_solver_settings
from ...utils.exceptions import ConvergenceFailure, InvalidParameterError
from ...utils.helpers import resolve_n_jobs, run_tasks
from ...utils.logger import get_logger
from ...utils.timing import Timer
from ...utils.validators import prepare_training_data, validate_alpha, validate_lambda_sequence

logger = get_logger('evaluation.validation.cross_validation')


def make_fold_assignment(n_samples: int, k: int, seed: Optional[int] = None) -> FoldAssignment:
    """
    Shuffled k-fold partition of ``n_samples`` rows

    Args:
        n_samples: Number of rows
        k: Number of folds, 2 <= k <= n_samples (k == n_samples is leave-one-out)
        seed: Random seed; the same seed always gives the same partition

    Returns:
        FoldAssignment
    """
    if isinstance(k, bool) or not isinstance(k, (int, np.integer)) or not 2 <= k <= n_samples:
        raise InvalidParameterError(
            f"Number of folds must be an integer in [2, {n_samples}], got {k!r}",
            parameter_name="k",
            provided_value=k
        )

    splitter = KFold(n_splits=int(k), shuffle=True, random_state=seed)
    folds = tuple(test for _, test in splitter.split(np.zeros((n_samples, 1))))
    return FoldAssignment(folds=folds, n_samples=n_samples, seed=seed)


def _held_out_errors(path, X_test: np.ndarray, y_test: np.ndarray) -> np.ndarray:
    """Mean squared error on held-out rows for every lambda of a path"""
    predictions = path.intercepts[None, :] + X_test @ path.coefs.T
    return np.mean((y_test[:, None] - predictions) ** 2, axis=0)


def cross_validate(X: Any, y: Any, alpha: float, k: Optional[int] = None,
                   seed: Optional[int] = None, lambda_sequence: Optional[Any] = None,
                   n_jobs: Optional[int] = None, tol: Optional[float] = None,
                   max_iter: Optional[int] = None, n_lambda: Optional[int] = None,
                   lambda_min_ratio: Optional[float] = None,
                   folds: Optional[FoldAssignment] = None) -> CrossValidationResult:
    """
    Cross-validate an elastic-net path at one mixing value

    The lambda sequence is generated once from the full data (unless
    given) and shared by every fold. Each fold standardizes its own
    training rows. Per lambda the mean of the fold MSEs and its standard
    error (sample std / sqrt(k)) are reported.

    Args:
        X: Design matrix
        y: Response vector
        alpha: Mixing parameter in [0, 1]
        k: Number of folds (default from configuration, 10)
        seed: Shuffling seed (default from configuration)
        lambda_sequence: Penalties to evaluate
        n_jobs: Worker threads for the folds; 1 runs them sequentially
        tol: Solver tolerance
        max_iter: Solver sweep cap
        n_lambda: Length of a generated lambda sequence
        lambda_min_ratio: Ratio of smallest to largest generated lambda
        folds: Precomputed fold assignment (overrides k and seed)

    Returns:
        CrossValidationResult, which unpacks as (cv_results, selection)

    Raises:
        NumericalError: If any fold produces non-finite values, tagged with the fold
        InvalidParameterError: For bad alpha or k
    """
    settings = get_solver_settings()
    alpha = validate_alpha(alpha)
    X_arr, y_arr, _ = prepare_training_data(X, y)
    n_samples = X_arr.shape[0]

    if folds is None:
        folds = make_fold_assignment(n_samples, settings.n_folds if k is None else k,
                                     settings.seed if seed is None else seed)
    elif folds.n_samples != n_samples:
        raise InvalidParameterError(
            f"Fold assignment covers {folds.n_samples} rows, data has {n_samples}",
            parameter_name="folds"
        )

    if lambda_sequence is None:
        lambdas = lambda_sequence_for_data(X_arr, y_arr, alpha, n_lambda=n_lambda,
                                           lambda_min_ratio=lambda_min_ratio)
    else:
        lambdas = validate_lambda_sequence(lambda_sequence)

    solver_options = {'tol': tol, 'max_iter': max_iter}

    # Degenerate columns are reported once, by the full-data fit

    def _run_fold(fold: int) -> Tuple[np.ndarray, List[ConvergenceFailure]]:
        train, test = folds.train_indices(fold), folds.test_indices(fold)
        fold_path = fit_path(X_arr[train], y_arr[train], alpha, lambdas, fold=fold, warn=False,
                            **solver_options)
        errors = _held_out_errors(fold_path, X_arr[test], y_arr[test])
        logger.debug(f"alpha={alpha:.4g} fold {fold}: min held-out MSE {errors.min():.6g}")
        return errors, fold_path.failures

    workers = resolve_n_jobs(settings.n_jobs if n_jobs is None else n_jobs)

    with Timer(f"cross_validate(alpha={alpha:.4g})", auto_log=False) as timer:
        outcomes = run_tasks(_run_fold, list(range(folds.k)), max_workers=workers)

        for outcome in outcomes:
            if outcome.error is not None:
                raise outcome.error

        path = fit_path(X, y_arr, alpha, lambdas, **solver_options)

    fold_errors = np.vstack([outcome.value[0] for outcome in outcomes])
    failures = [failure for outcome in outcomes for failure in outcome.value[1]]

    mean_errors = fold_errors.mean(axis=0)
    std_errors = fold_errors.std(axis=0, ddof=1) / np.sqrt(folds.k)
    n_active = path.n_active

    cv_results = [
        CVResult(
            lambda_value=float(lambdas[i]),
            mean_error=float(mean_errors[i]),
            std_error=float(std_errors[i]),
            n_nonzero=int(n_active[i])
        )
        for i in range(len(lambdas))
    ]
    selection = select_lambda(cv_results, path)

    if failures:
        logger.warning(f"alpha={alpha:.4g}: {len(failures)} fold fit(s) hit the sweep cap")

    logger.info(
        f"Cross-validated alpha={alpha:.4g} over {folds.k} folds in {timer.result.duration_str}: "
        f"lambda_min={selection.lambda_min:.6g} (MSE {selection.error_min:.6g}), "
        f"lambda_1se={selection.lambda_1se:.6g}"
    )

    return CrossValidationResult(
        alpha=alpha,
        cv_results=cv_results,
        selection=selection,
        path=path,
        fold_errors=fold_errors,
        folds=folds,
        failures=failures
    )
