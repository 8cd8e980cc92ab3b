"""
tests/unit/test_utils/test_exceptions.py

Unit tests for the enetpath exception hierarchy: error codes, fit
coordinates in messages, serialization and the registry.

Author: enetpath Team
"""

import json
import pytest

from enetpath.utils.exceptions import (
    EnetPathError,
    DataError,
    DataValidationError,
    DegenerateFeature,
    ModelError,
    ConvergenceFailure,
    NumericalError,
    GridSearchError,
    PredictionError,
    SchemaMismatch,
    InvalidParameterError,
    EXCEPTION_REGISTRY,
    describe_coordinates,
    get_exception_class,
    log_exception,
)

# ============================================
# TEST HIERARCHY
# ============================================

class TestExceptionHierarchy:
    """Test class relationships and generated codes"""

    def test_error_codes_follow_class_names(self):
        assert DataValidationError("x").error_code == "DATA_VALIDATION_ERROR"
        assert ConvergenceFailure("x").error_code == "CONVERGENCE_FAILURE"
        assert InvalidParameterError("x").error_code == "INVALID_PARAMETER_ERROR"
        assert EnetPathError("x").error_code == "ENET_PATH_ERROR"

    def test_subclass_relationships(self):
        assert issubclass(DataValidationError, DataError)
        assert issubclass(ConvergenceFailure, ModelError)
        assert issubclass(NumericalError, ModelError)
        assert issubclass(GridSearchError, ModelError)
        assert issubclass(SchemaMismatch, PredictionError)
        for cls in (DataError, ModelError, PredictionError, InvalidParameterError):
            assert issubclass(cls, EnetPathError)

    def test_degenerate_feature_is_a_warning(self):
        assert issubclass(DegenerateFeature, UserWarning)
        assert issubclass(DegenerateFeature, EnetPathError)

        with pytest.warns(DegenerateFeature):
            import warnings
            warnings.warn(DegenerateFeature("constant column", feature_indices=[2]))

    def test_severity_defaults(self):
        assert ConvergenceFailure("x").severity == "warning"
        assert NumericalError("x").severity == "error"
        assert DegenerateFeature("x").severity == "warning"

# ============================================
# TEST FIT COORDINATES
# ============================================

class TestFitCoordinates:
    """Errors concerning a fit carry alpha, lambda and fold"""

    def test_numerical_error_names_coordinates(self):
        error = NumericalError("Non-finite coefficient", alpha=0.5, lambda_value=0.01, fold=2)

        assert "alpha=0.5" in str(error)
        assert "lambda=0.01" in str(error)
        assert "fold=2" in str(error)
        assert error.context['alpha'] == 0.5
        assert error.context['fold'] == 2

    def test_convergence_failure_context(self):
        failure = ConvergenceFailure("Hit sweep cap", alpha=1.0, lambda_value=0.1,
                                     n_iter=50, max_change=1e-3)

        assert failure.n_iter == 50
        assert failure.context['max_change'] == 1e-3
        assert failure.fold is None
        assert "full data" not in str(failure)

    def test_with_fold_tags_existing_error(self):
        error = NumericalError("bad", alpha=0.3)
        tagged = error.with_fold(4)

        assert tagged is error
        assert error.fold == 4
        assert error.context['fold'] == 4
        assert "fold=4" in str(error)
        assert "alpha=0.3" in str(error)

    def test_describe_coordinates_without_values(self):
        assert describe_coordinates() == "full data"

# ============================================
# TEST SERIALIZATION AND REGISTRY
# ============================================

class TestSerialization:
    """Test dict/JSON conversion and helpers"""

    def test_to_dict_contains_core_fields(self):
        error = SchemaMismatch("3 vs 4", expected_features=3, received_features=4)
        payload = error.to_dict()

        assert payload['error_code'] == "SCHEMA_MISMATCH"
        assert payload['context']['expected_features'] == 3
        assert payload['context']['received_features'] == 4
        assert payload['suggestions']

    def test_to_json_round_trips(self):
        error = DataValidationError("bad shape", validation_errors=["X must be 2-D"])
        data = json.loads(error.to_json())

        assert data['context']['validation_errors'] == ["X must be 2-D"]

    def test_add_context_and_suggestion(self):
        error = InvalidParameterError("bad alpha", parameter_name="alpha", provided_value=2.0)
        error.add_context(source="test")
        error.add_suggestion("Use a value in [0, 1]")

        assert error.context['source'] == "test"
        assert error.context['provided_value'] == 2.0
        assert "Use a value in [0, 1]" in error.suggestions

    def test_grid_search_error_lists_failed_alphas(self):
        error = GridSearchError("all failed", errors={0.5: NumericalError("a"), 0.1: NumericalError("b")})
        assert error.context['failed_alphas'] == [0.1, 0.5]

    def test_registry_lookup(self):
        assert get_exception_class("SCHEMA_MISMATCH") is SchemaMismatch
        assert get_exception_class("NOT_A_CODE") is EnetPathError
        for code, cls in EXCEPTION_REGISTRY.items():
            assert cls("x").error_code == code

    def test_log_exception_accepts_any_exception(self):
        log_exception(ConvergenceFailure("warn only", alpha=1.0))
        log_exception(NumericalError("logged at error"))
        log_exception(ValueError("plain error"))
