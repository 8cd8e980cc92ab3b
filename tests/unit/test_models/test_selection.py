"""
tests/unit/test_models/test_selection.py

Unit tests for minimum-error and one-standard-error lambda selection.

Author: enetpath Team
"""

import numpy as np
import pytest

from enetpath.models.base.path_types import CVResult
from enetpath.models.regression.coordinate_descent import fit_path
from enetpath.models.selection import SelectionRule, select_lambda
from enetpath.utils.exceptions import InvalidParameterError
from tests.utils.assertions import SelectionAssertions


def make_curve(lambdas, errors, std_errors=None, n_nonzero=None):
    std_errors = std_errors if std_errors is not None else [0.1] * len(lambdas)
    n_nonzero = n_nonzero if n_nonzero is not None else list(range(len(lambdas)))
    return [CVResult(lam, err, se, nz) for lam, err, se, nz in zip(lambdas, errors, std_errors, n_nonzero)]

# ============================================
# TEST SELECTION RULES
# ============================================

class TestSelectLambda:
    """Test the selection rules on hand-made curves"""

    def test_minimum_and_one_standard_error(self):
        curve = make_curve([1.0, 0.5, 0.25, 0.1], [2.0, 1.15, 1.0, 1.3], std_errors=[0.2, 0.1, 0.2, 0.1])
        selection = select_lambda(curve, alpha=0.5)

        assert selection.lambda_min == 0.25
        assert selection.index_min == 2
        assert selection.lambda_1se == 0.5
        assert selection.error_1se == 1.15
        assert selection.std_error_min == 0.2
        assert selection.n_nonzero_min == 2
        assert selection.alpha == 0.5
        SelectionAssertions.assert_valid_selection(selection)

    def test_ties_go_to_larger_lambda(self):
        curve = make_curve([1.0, 0.5, 0.25], [1.5, 1.0, 1.0], std_errors=[0.0, 0.0, 0.0])
        selection = select_lambda(curve)

        assert selection.lambda_min == 0.5
        assert selection.lambda_1se == 0.5

    def test_ordering_of_input_does_not_matter(self):
        curve = make_curve([0.1, 1.0, 0.5], [1.0, 2.0, 1.0], std_errors=[0.0, 0.0, 0.0])
        selection = select_lambda(curve)

        assert selection.lambda_min == 0.5
        assert selection.index_min == 2

    def test_one_se_equals_min_when_curve_is_sharp(self):
        curve = make_curve([1.0, 0.5, 0.25], [3.0, 1.0, 2.0], std_errors=[0.01, 0.01, 0.01])
        selection = select_lambda(curve)

        assert selection.lambda_1se == selection.lambda_min == 0.5

    def test_nan_errors_are_skipped(self):
        curve = make_curve([1.0, 0.5, 0.25], [np.nan, 1.2, 1.1], std_errors=[np.nan, 0.05, 0.05])
        selection = select_lambda(curve)

        assert selection.lambda_min == 0.25
        assert selection.lambda_1se == 0.25

    def test_alpha_defaults_to_nan_without_path(self):
        selection = select_lambda(make_curve([1.0, 0.5], [1.0, 2.0]))
        assert np.isnan(selection.alpha)
        assert selection.coefficients_min is None

    def test_empty_and_all_nan_rejected(self):
        with pytest.raises(InvalidParameterError):
            select_lambda([])
        with pytest.raises(InvalidParameterError):
            select_lambda(make_curve([1.0, 0.5], [np.nan, np.nan]))

# ============================================
# TEST SELECTION WITH A PATH
# ============================================

class TestSelectWithPath:
    """Coefficients come from the supplied full-data path"""

    def test_coefficients_taken_from_path(self, linear_data, fast_solver):
        X, y = linear_data
        path = fit_path(X, y, alpha=1.0, **fast_solver)
        errors = np.linspace(5.0, 1.0, len(path))
        curve = make_curve(path.lambdas, errors, n_nonzero=path.n_active)

        selection = select_lambda(curve, path=path)

        assert selection.alpha == 1.0
        np.testing.assert_array_equal(selection.coefficients_min.coef, path.coefs[-1])
        assert selection.coefficients_for('1se') is selection.coefficients_1se

    def test_lambda_missing_from_path(self, linear_data, fast_solver):
        X, y = linear_data
        path = fit_path(X, y, alpha=1.0, **fast_solver)

        with pytest.raises(InvalidParameterError):
            select_lambda(make_curve([123.0], [1.0]), path=path)

# ============================================
# TEST SELECTION RULE ENUM
# ============================================

class TestSelectionRule:
    """Test rule parsing"""

    @pytest.mark.parametrize("value,expected", [
        ("min", SelectionRule.MIN),
        ("1SE", SelectionRule.ONE_SE),
        (SelectionRule.ONE_SE, SelectionRule.ONE_SE),
    ])
    def test_parse(self, value, expected):
        assert SelectionRule.parse(value) is expected

    def test_unknown_rule(self):
        with pytest.raises(InvalidParameterError) as exc_info:
            SelectionRule.parse("median")

        assert exc_info.value.context["parameter_name"] == "selection_rule"
        assert "'1se'" in str(exc_info.value)
