# ============================================
# enetpath - src/enetpath/models/prediction.py
# Predictions from a fitted coefficient vector
# ============================================

import numpy as np
import pandas as pd
from typing import Any

from .base.path_types import CoefficientVector
from ..utils.exceptions import DataValidationError, NumericalError, SchemaMismatch
from ..utils.logger import get_logger

logger = get_logger('models.prediction')


def _check_schema(coefficients: CoefficientVector, X_new: Any, n_columns: int):
    expected = coefficients.n_features

    if n_columns != expected:
        raise SchemaMismatch(
            f"Expected {expected} feature columns, got {n_columns}",
            expected_features=expected,
            received_features=n_columns
        )

    if isinstance(X_new, pd.DataFrame) and coefficients.feature_names is not None:
        received = [str(col) for col in X_new.columns]
        if received != list(coefficients.feature_names):
            missing = [name for name in coefficients.feature_names if name not in received]
            raise SchemaMismatch(
                f"Column names differ from training features (missing: {missing})",
                expected_features=expected,
                received_features=n_columns,
                context={'expected_columns': list(coefficients.feature_names),
                         'received_columns': received}
            )


def predict(coefficients: CoefficientVector, X_new: Any) -> np.ndarray:
    """
    intercept + X_new @ coef for every row

    Args:
        coefficients: Fitted coefficients on the original scale
        X_new: 2-D matrix or DataFrame, or a 1-D vector holding one row

    Returns:
        1-D array with one prediction per row

    Raises:
        SchemaMismatch: If the columns do not match the coefficients
    """
    if isinstance(X_new, pd.Series):
        X_new = X_new.to_frame().T

    try:
        X_arr = np.asarray(X_new, dtype=np.float64)
    except (TypeError, ValueError) as e:
        raise DataValidationError(f"Prediction input must be numeric: {e}", cause=e)

    if X_arr.ndim == 1:
        X_arr = X_arr.reshape(1, -1)
    if X_arr.ndim != 2:
        raise DataValidationError(f"Prediction input must be 1-D or 2-D, got {X_arr.ndim} dimensions")

    _check_schema(coefficients, X_new, X_arr.shape[1])

    if not np.all(np.isfinite(X_arr)):
        raise NumericalError("Prediction input contains NaN or infinite values")

    predictions = coefficients.intercept + X_arr @ coefficients.coef
    logger.debug(f"Predicted {predictions.shape[0]} rows")
    return predictions
