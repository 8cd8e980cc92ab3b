# ============================================
# enetpath - src/enetpath/utils/validators.py
# Input and parameter validation for fitting and prediction
# ============================================

import numbers
import numpy as np
import pandas as pd
from typing import Any, List, Optional, Sequence, Tuple

from .exceptions import (
    DataValidationError,
    InvalidParameterError,
    NumericalError
)
from .logger import get_logger

logger = get_logger('validators')

# ============================================
# Base Validation Framework
# ============================================

class ValidationResult:
    """Container for validation results"""

    def __init__(self, is_valid: bool = True, errors: Optional[List[str]] = None,
                 warnings: Optional[List[str]] = None):
        self.is_valid = is_valid
        self.errors = errors or []
        self.warnings = warnings or []

    def add_error(self, error: str):
        """Add an error message"""
        self.errors.append(error)
        self.is_valid = False

    def add_warning(self, warning: str):
        """Add a warning message"""
        self.warnings.append(warning)

    def merge(self, other: 'ValidationResult'):
        """Merge another validation result"""
        self.errors.extend(other.errors)
        self.warnings.extend(other.warnings)
        if not other.is_valid:
            self.is_valid = False

    def raise_if_invalid(self):
        """Raise exception if validation failed"""
        if not self.is_valid:
            error_msg = "; ".join(self.errors)
            raise DataValidationError(
                f"Validation failed: {error_msg}",
                validation_errors=self.errors
            )

    def __str__(self) -> str:
        status = "VALID" if self.is_valid else "INVALID"
        parts = [f"Validation: {status}"]

        if self.errors:
            parts.append(f"Errors: {', '.join(self.errors)}")
        if self.warnings:
            parts.append(f"Warnings: {', '.join(self.warnings)}")

        return " | ".join(parts)

# ============================================
# Array Validators
# ============================================

def _to_float_array(data: Any, name: str) -> np.ndarray:
    try:
        return np.array(data, dtype=np.float64, copy=True)
    except (TypeError, ValueError) as e:
        raise DataValidationError(
            f"{name} must be numeric: {e}",
            validation_errors=[f"{name} contains non-numeric values"],
            cause=e
        )


def as_design_matrix(X: Any, min_rows: int = 1) -> Tuple[np.ndarray, Optional[List[str]]]:
    """
    Convert a design matrix to a float64 array

    Args:
        X: 2-D array-like or DataFrame (column names become feature names)
        min_rows: Minimum number of rows required

    Returns:
        Tuple of (array copy, feature names or None)
    """
    feature_names = None
    if isinstance(X, pd.DataFrame):
        feature_names = [str(col) for col in X.columns]
        non_numeric = [str(col) for col, dtype in X.dtypes.items()
                       if not (pd.api.types.is_numeric_dtype(dtype) or pd.api.types.is_bool_dtype(dtype))]
        if non_numeric:
            raise DataValidationError(
                f"Design matrix has non-numeric columns: {non_numeric}",
                validation_errors=[f"Column '{col}' is not numeric" for col in non_numeric]
            )

    array = _to_float_array(X, "X")

    result = ValidationResult()
    if array.ndim != 2:
        result.add_error(f"X must be 2-dimensional, got {array.ndim} dimension(s)")
    elif array.shape[1] < 1:
        result.add_error("X must have at least one feature column")
    elif array.shape[0] < min_rows:
        result.add_error(f"X must have at least {min_rows} rows, got {array.shape[0]}")
    result.raise_if_invalid()

    if not np.all(np.isfinite(array)):
        bad_cols = np.where(~np.all(np.isfinite(array), axis=0))[0].tolist()
        raise NumericalError(f"X contains NaN or infinite values in columns {bad_cols}")

    return array, feature_names


def as_response_vector(y: Any, n_rows: Optional[int] = None) -> np.ndarray:
    """
    Convert a response to a 1-D float64 array

    Args:
        y: 1-D array-like, Series, or single-column 2-D array
        n_rows: Expected length (rows of the design matrix)
    """
    array = _to_float_array(y, "y")
    if array.ndim == 2 and array.shape[1] == 1:
        array = array.ravel()

    result = ValidationResult()
    if array.ndim != 1:
        result.add_error(f"y must be 1-dimensional, got shape {array.shape}")
    elif n_rows is not None and array.shape[0] != n_rows:
        result.add_error(f"y has {array.shape[0]} values but X has {n_rows} rows")
    result.raise_if_invalid()

    if not np.all(np.isfinite(array)):
        raise NumericalError("y contains NaN or infinite values")

    return array


def prepare_training_data(X: Any, y: Any, min_rows: int = 2) -> Tuple[np.ndarray, np.ndarray, Optional[List[str]]]:
    """
    Validate a training pair

    Returns:
        Tuple of (X array, y array, feature names or None)
    """
    X_arr, feature_names = as_design_matrix(X, min_rows=min_rows)
    y_arr = as_response_vector(y, n_rows=X_arr.shape[0])
    return X_arr, y_arr, feature_names

# ============================================
# Parameter Validators
# ============================================

def validate_numeric_range(value: Any, parameter_name: str,
                           min_value: Optional[float] = None, max_value: Optional[float] = None,
                           min_inclusive: bool = True, max_inclusive: bool = True) -> float:
    """
    Check that a scalar parameter lies in a range

    Raises:
        InvalidParameterError: If the value is not a finite number in range
    """
    if isinstance(value, bool) or not isinstance(value, numbers.Real) or not np.isfinite(value):
        raise InvalidParameterError(
            f"{parameter_name} must be a finite number, got {value!r}",
            parameter_name=parameter_name,
            provided_value=value
        )

    too_low = min_value is not None and (value < min_value if min_inclusive else value <= min_value)
    too_high = max_value is not None and (value > max_value if max_inclusive else value >= max_value)
    if too_low or too_high:
        lo = ('[' if min_inclusive else '(') + (str(min_value) if min_value is not None else '-inf')
        hi = (str(max_value) if max_value is not None else 'inf') + (']' if max_inclusive else ')')
        raise InvalidParameterError(
            f"{parameter_name} must be in {lo}, {hi}, got {value}",
            parameter_name=parameter_name,
            provided_value=value
        )

    return float(value)


def validate_positive_int(value: Any, parameter_name: str, min_value: int = 1) -> int:
    """Check that a parameter is an integer >= min_value"""
    if isinstance(value, bool) or not isinstance(value, numbers.Integral) or value < min_value:
        raise InvalidParameterError(
            f"{parameter_name} must be an integer >= {min_value}, got {value!r}",
            parameter_name=parameter_name,
            provided_value=value
        )
    return int(value)


def validate_choice(value: Any, parameter_name: str, choices: Sequence[Any]) -> Any:
    if value not in choices:
        raise InvalidParameterError(
            f"{parameter_name} must be one of {list(choices)}, got {value!r}",
            parameter_name=parameter_name,
            provided_value=value
        )
    return value


def validate_alpha(alpha: Any) -> float:
    """Mixing parameter: 0 is ridge, 1 is lasso"""
    return validate_numeric_range(alpha, "alpha", 0.0, 1.0)


def validate_lambda_sequence(lambda_sequence: Any) -> np.ndarray:
    """
    Validate a user-supplied lambda sequence and sort it descending

    Raises:
        InvalidParameterError: If empty, non-finite, negative or duplicated
    """
    try:
        lambdas = np.asarray(lambda_sequence, dtype=np.float64).ravel()
    except (TypeError, ValueError) as e:
        raise InvalidParameterError(
            f"lambda_sequence must be numeric: {e}",
            parameter_name="lambda_sequence",
            cause=e
        )

    if lambdas.size == 0:
        raise InvalidParameterError("lambda_sequence is empty", parameter_name="lambda_sequence")
    if not np.all(np.isfinite(lambdas)):
        raise InvalidParameterError("lambda_sequence contains non-finite values",
                                    parameter_name="lambda_sequence")
    if np.any(lambdas < 0):
        raise InvalidParameterError("lambda_sequence contains negative values",
                                    parameter_name="lambda_sequence",
                                    provided_value=lambdas[lambdas < 0].tolist())

    lambdas = np.sort(lambdas)[::-1].copy()
    if np.any(np.diff(lambdas) == 0):
        raise InvalidParameterError("lambda_sequence contains duplicate values",
                                    parameter_name="lambda_sequence")
    return lambdas
