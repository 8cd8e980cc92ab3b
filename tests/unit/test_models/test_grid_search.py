"""
tests/unit/test_models/test_grid_search.py

Unit tests for the grid search over the mixing parameter: best-alpha
choice, shared folds, failure isolation and cancellation.

Author: enetpath Team
"""

import threading
import numpy as np
import pytest

from enetpath.models.optimization import grid_search as grid_search_module
from enetpath.models.optimization.grid_search import _pick_best, default_alpha_grid, grid_search
from enetpath.utils.exceptions import GridSearchError, InvalidParameterError, NumericalError

real_cross_validate = grid_search_module.cross_validate

# ============================================
# TEST ALPHA GRID
# ============================================

class TestAlphaGrid:
    """Test the default grid"""

    def test_default_grid(self):
        grid = default_alpha_grid()

        assert len(grid) == 11
        assert grid[0] == 0.0 and grid[-1] == 1.0
        np.testing.assert_allclose(np.diff(grid), 0.1)

    def test_custom_size(self):
        assert default_alpha_grid(3) == [0.0, 0.5, 1.0]
        with pytest.raises(InvalidParameterError):
            default_alpha_grid(1)

# ============================================
# TEST GRID SEARCH
# ============================================

class TestGridSearch:
    """Test the search on real data"""

    def test_best_alpha_has_lowest_error(self, linear_data, fast_solver):
        X, y = linear_data
        result = grid_search(X, y, alpha_grid=[0.0, 0.5, 1.0], k=5, seed=0, **fast_solver)
        best_alpha, selection = result

        errors = {alpha: r.selection.error_min for alpha, r in result.results.items()}
        assert sorted(result.results) == [0.0, 0.5, 1.0]
        assert errors[best_alpha] == min(errors.values())
        assert selection is result.results[best_alpha].selection
        assert not result.cancelled and not result.errors
        assert list(result.to_frame()['alpha']) == [0.0, 0.5, 1.0]

    def test_all_alphas_share_folds(self, linear_data, fast_solver):
        X, y = linear_data
        result = grid_search(X, y, alpha_grid=[0.2, 0.9], k=4, seed=5, **fast_solver)
        first, second = (result.results[a].folds for a in (0.2, 0.9))

        for a, b in zip(first.folds, second.folds):
            np.testing.assert_array_equal(a, b)

    def test_duplicates_removed_and_sorted(self, linear_data, fast_solver):
        X, y = linear_data
        result = grid_search(X, y, alpha_grid=[1.0, 0.5, 1.0], k=3, seed=0, **fast_solver)

        assert list(result.results) == [0.5, 1.0]

    def test_threaded_matches_sequential(self, linear_data, fast_solver):
        X, y = linear_data
        sequential = grid_search(X, y, alpha_grid=[0.3, 0.6, 1.0], k=3, seed=1, n_jobs=1, **fast_solver)
        threaded = grid_search(X, y, alpha_grid=[0.3, 0.6, 1.0], k=3, seed=1, n_jobs=3, **fast_solver)

        assert sequential.best_alpha == threaded.best_alpha
        for alpha in (0.3, 0.6, 1.0):
            np.testing.assert_array_equal(sequential.results[alpha].fold_errors,
                                          threaded.results[alpha].fold_errors)

    def test_invalid_grid(self, linear_data):
        X, y = linear_data
        with pytest.raises(InvalidParameterError):
            grid_search(X, y, alpha_grid=[])
        with pytest.raises(InvalidParameterError):
            grid_search(X, y, alpha_grid=[0.5, 2.0])

# ============================================
# TEST TIE BREAKING
# ============================================

class TestPickBest:
    """Exact ties go to the larger alpha"""

    class _Stub:
        def __init__(self, error):
            self.selection = type('Selection', (), {'error_min': error})()

    def test_tie_goes_to_larger_alpha(self):
        results = {0.2: self._Stub(1.0), 0.8: self._Stub(1.0), 0.5: self._Stub(2.0)}
        assert _pick_best(results) == 0.8

    def test_lowest_error_wins(self):
        results = {0.2: self._Stub(0.5), 0.8: self._Stub(1.0)}
        assert _pick_best(results) == 0.2

# ============================================
# TEST FAILURES AND CANCELLATION
# ============================================

class TestGridSearchFailures:
    """Per-alpha errors are isolated; cancellation keeps finished work"""

    def test_failing_alpha_is_isolated(self, linear_data, fast_solver, monkeypatch):
        X, y = linear_data

        def flaky_cross_validate(X, y, alpha, **kwargs):
            if alpha == 0.5:
                raise NumericalError("synthetic failure", alpha=alpha, fold=1)
            return real_cross_validate(X, y, alpha, **kwargs)

        monkeypatch.setattr(grid_search_module, 'cross_validate', flaky_cross_validate)
        result = grid_search(X, y, alpha_grid=[0.0, 0.5, 1.0], k=3, seed=0, **fast_solver)

        assert sorted(result.results) == [0.0, 1.0]
        assert list(result.errors) == [0.5]
        assert result.errors[0.5].fold == 1
        assert result.errors[0.5].context['alpha'] == 0.5
        assert result.best_alpha in (0.0, 1.0)

    def test_every_alpha_failing_raises(self, linear_data, monkeypatch):
        X, y = linear_data

        def failing_cross_validate(X, y, alpha, **kwargs):
            raise NumericalError("synthetic failure", alpha=alpha)

        monkeypatch.setattr(grid_search_module, 'cross_validate', failing_cross_validate)

        with pytest.raises(GridSearchError) as exc_info:
            grid_search(X, y, alpha_grid=[0.2, 0.4], k=3, seed=0, n_lambda=5)
        assert exc_info.value.context['failed_alphas'] == [0.2, 0.4]
        assert set(exc_info.value.errors) == {0.2, 0.4}

    def test_cancellation_keeps_completed_alphas(self, linear_data, fast_solver, monkeypatch):
        X, y = linear_data
        cancel = threading.Event()

        def cancelling_cross_validate(X, y, alpha, **kwargs):
            result = real_cross_validate(X, y, alpha, **kwargs)
            cancel.set()
            return result

        monkeypatch.setattr(grid_search_module, 'cross_validate', cancelling_cross_validate)
        result = grid_search(X, y, alpha_grid=[0.1, 0.5, 0.9], k=3, seed=0, n_jobs=1,
                             cancel_event=cancel, **fast_solver)

        assert result.cancelled
        assert list(result.results) == [0.1]
        assert result.best_alpha == 0.1

    def test_cancelled_before_start(self, linear_data, fast_solver):
        X, y = linear_data
        cancel = threading.Event()
        cancel.set()

        result = grid_search(X, y, alpha_grid=[0.5, 1.0], k=3, seed=0, n_jobs=1,
                             cancel_event=cancel, **fast_solver)
        best_alpha, selection = result

        assert result.cancelled
        assert best_alpha is None and selection is None
        assert result.results == {}
