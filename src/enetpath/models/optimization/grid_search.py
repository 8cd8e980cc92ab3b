# ============================================
# enetpath - src/enetpath/models/optimization/grid_search.py
# Grid search over the elastic-net mixing parameter
# ============================================

import threading
import numpy as np
from typing import Any, Dict, List, Optional

from ..base.path_types import CrossValidationResult, GridSearchResult
from ..regression.lambda_sequence import lambda_sequence_for_data
from ...evaluation.validation.cross_validation import cross_validate, make_fold_assignment
from ...utils.config_loader import get_solver_settings
from ...utils.exceptions import EnetPathError, GridSearchError, InvalidParameterError, log_exception
from ...utils.helpers import resolve_n_jobs, run_tasks
from ...utils.logger import get_logger
from ...utils.timing import Timer
from ...utils.validators import prepare_training_data, validate_alpha, validate_positive_int

logger = get_logger('models.optimization.grid_search')


def default_alpha_grid(size: Optional[int] = None) -> List[float]:
    """Evenly spaced mixing values over [0, 1] (11 by default)"""
    settings = get_solver_settings()
    if size is None:
        if settings.alpha_grid:
            return [validate_alpha(a) for a in settings.alpha_grid]
        size = settings.alpha_grid_size
    size = validate_positive_int(size, "alpha_grid_size", min_value=2)
    return [float(a) for a in np.linspace(0.0, 1.0, size)]


def _pick_best(results: Dict[float, CrossValidationResult]) -> float:
    """Lowest lambda_min error; exact ties go to the larger alpha"""
    return min(results, key=lambda alpha: (results[alpha].selection.error_min, -alpha))


def grid_search(X: Any, y: Any, alpha_grid: Optional[List[float]] = None,
                k: Optional[int] = None, seed: Optional[int] = None,
                n_jobs: Optional[int] = None,
                cancel_event: Optional[threading.Event] = None,
                tol: Optional[float] = None, max_iter: Optional[int] = None,
                n_lambda: Optional[int] = None,
                lambda_min_ratio: Optional[float] = None) -> GridSearchResult:
    """
    Cross-validate every alpha of a grid and pick the best (alpha, lambda)

    Lambda sequences for all alphas and the fold assignment are fixed
    before any alpha runs, so every alpha is scored on the same folds.
    A package error in one alpha is recorded in ``errors`` and the other
    alphas carry on.

    Args:
        X: Design matrix
        y: Response vector
        alpha_grid: Mixing values to try (default: 11 values over [0, 1])
        k: Number of folds
        seed: Fold shuffling seed
        n_jobs: Worker threads across alphas; folds then run sequentially
        cancel_event: Set to stop before the next alpha starts
        tol: Solver tolerance
        max_iter: Solver sweep cap
        n_lambda: Length of each lambda sequence
        lambda_min_ratio: Ratio of smallest to largest lambda

    Returns:
        GridSearchResult, which unpacks as (best_alpha, selection)

    Raises:
        GridSearchError: If every alpha failed
    """
    settings = get_solver_settings()
    alphas = default_alpha_grid() if alpha_grid is None else [validate_alpha(a) for a in alpha_grid]
    if not alphas:
        raise InvalidParameterError("alpha_grid is empty", parameter_name="alpha_grid")
    alphas = sorted(set(alphas))

    X_arr, y_arr, feature_names = prepare_training_data(X, y)
    X_fit = X if feature_names is not None else X_arr
    folds = make_fold_assignment(X_arr.shape[0], settings.n_folds if k is None else k,
                                 settings.seed if seed is None else seed)

    lambda_sequences = {
        alpha: lambda_sequence_for_data(X_arr, y_arr, alpha, n_lambda=n_lambda,
                                        lambda_min_ratio=lambda_min_ratio)
        for alpha in alphas
    }

    workers = resolve_n_jobs(settings.n_jobs if n_jobs is None else n_jobs)

    def _run_alpha(alpha: float) -> CrossValidationResult:
        return cross_validate(
            X_fit, y_arr, alpha,
            folds=folds,
            lambda_sequence=lambda_sequences[alpha],
            n_jobs=1,
            tol=tol,
            max_iter=max_iter
        )

    with Timer(f"grid_search({len(alphas)} alphas)", auto_log=False) as timer:
        outcomes = run_tasks(_run_alpha, alphas, max_workers=workers, cancel_event=cancel_event)

    results: Dict[float, CrossValidationResult] = {}
    errors: Dict[float, EnetPathError] = {}
    cancelled = False

    for outcome in outcomes:
        if outcome.skipped:
            cancelled = True
        elif outcome.error is not None:
            outcome.error.add_context(alpha=outcome.item)
            errors[outcome.item] = outcome.error
            log_exception(outcome.error, logger)
        else:
            results[outcome.item] = outcome.value

    if not results:
        if cancelled:
            logger.info("Grid search cancelled before any alpha completed")
            return GridSearchResult(best_alpha=None, selection=None, errors=errors, cancelled=True)
        raise GridSearchError(
            f"All {len(alphas)} alphas failed: "
            + "; ".join(f"alpha={a:.4g}: {e.message}" for a, e in errors.items()),
            errors=errors
        )

    best_alpha = _pick_best(results)
    selection = results[best_alpha].selection

    logger.info(
        f"Grid search over {len(alphas)} alphas finished in {timer.result.duration_str}: "
        f"best alpha={best_alpha:.4g}, lambda_min={selection.lambda_min:.6g} "
        f"(MSE {selection.error_min:.6g}), {len(errors)} failed"
        + (", cancelled" if cancelled else "")
    )

    return GridSearchResult(
        best_alpha=best_alpha,
        selection=selection,
        results=results,
        errors=errors,
        cancelled=cancelled
    )
