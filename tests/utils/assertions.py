"""
tests/utils/assertions.py

Custom assertion utilities for enetpath tests: structural checks on
regularization paths, cross-validation curves and selections.

Author: enetpath Team
"""

import numpy as np

# ============================================
# PATH ASSERTIONS
# ============================================

class PathAssertions:
    """Assertions on RegularizationPath objects"""

    @staticmethod
    def assert_strictly_decreasing(values, message: str = "") -> None:
        diffs = np.diff(np.asarray(values, dtype=float))
        assert np.all(diffs < 0), f"Sequence is not strictly decreasing. {message}"

    @staticmethod
    def assert_valid_path(path, n_features: int, message: str = "") -> None:
        assert len(path) >= 1, f"Empty path. {message}"
        assert path.coefs.shape == (len(path), n_features), (
            f"Coefficient matrix has shape {path.coefs.shape}, expected ({len(path)}, {n_features}). {message}"
        )
        PathAssertions.assert_strictly_decreasing(path.lambdas, message)
        assert np.all(np.isfinite(path.coefs)), f"Non-finite coefficients on path. {message}"
        assert np.all(np.isfinite(path.intercepts)), f"Non-finite intercepts on path. {message}"

    @staticmethod
    def assert_non_decreasing_active(path, message: str = "") -> None:
        active = np.asarray(path.n_active)
        assert np.all(np.diff(active) >= 0), f"Active count decreased along path: {active}. {message}"

# ============================================
# CROSS-VALIDATION ASSERTIONS
# ============================================

class SelectionAssertions:
    """Assertions on cross-validation results and selections"""

    @staticmethod
    def assert_valid_selection(selection, message: str = "") -> None:
        assert selection.lambda_1se >= selection.lambda_min, (
            f"lambda_1se={selection.lambda_1se} < lambda_min={selection.lambda_min}. {message}"
        )
        assert selection.index_1se <= selection.index_min, message
        assert np.isfinite(selection.error_min), message
        assert selection.error_1se <= selection.error_min + selection.std_error_min + 1e-12, message

    @staticmethod
    def assert_valid_cv_curve(cv_results, n_lambda: int, message: str = "") -> None:
        assert len(cv_results) == n_lambda, f"Expected {n_lambda} CV records. {message}"
        for record in cv_results:
            assert record.mean_error >= 0, message
            assert record.std_error >= 0, message
            assert np.isfinite(record.mean_error), message
