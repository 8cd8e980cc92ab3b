# ============================================
# enetpath - src/enetpath/features/transformers/scalers.py
# Standardization of the design matrix and response for path fitting
# ============================================

import warnings
import numpy as np
from typing import Any, Optional, Tuple
from sklearn.base import BaseEstimator
from sklearn.utils.validation import check_is_fitted

from ...models.base.path_types import StandardizationState
from ...utils.exceptions import DegenerateFeature, SchemaMismatch
from ...utils.logger import get_logger
from ...utils.validators import as_design_matrix, as_response_vector, validate_numeric_range

logger = get_logger('features.transformers.scalers')


class Standardizer(BaseEstimator):
    """
    Center and scale features (and the response) to zero mean and unit
    population standard deviation

    Features whose standard deviation is at most
    ``degenerate_tol * max(1, |mean|)`` are flagged as degenerate: their
    scale is set to 1, their standardized column is all zeros and a
    ``DegenerateFeature`` warning is emitted (raised when ``strict``).
    Columns are never dropped and inputs are never modified.
    """

    def __init__(self, degenerate_tol: float = 1e-10, strict: bool = False, warn: bool = True):
        """
        Initialize Standardizer

        Args:
            degenerate_tol: Relative scale threshold for zero-variance features
            strict: Raise DegenerateFeature instead of warning
            warn: Emit the DegenerateFeature warning (ignored when strict)
        """
        self.degenerate_tol = degenerate_tol
        self.strict = strict
        self.warn = warn

    def fit(self, X: Any, y: Any = None) -> 'Standardizer':
        """
        Compute feature (and optionally response) statistics

        Args:
            X: Design matrix
            y: Optional response vector

        Returns:
            Self
        """
        validate_numeric_range(self.degenerate_tol, "degenerate_tol", min_value=0.0)
        X_arr, feature_names = as_design_matrix(X)

        x_mean = X_arr.mean(axis=0)
        x_std = X_arr.std(axis=0)
        degenerate = x_std <= self.degenerate_tol * np.maximum(1.0, np.abs(x_mean))
        x_scale = np.where(degenerate, 1.0, x_std)

        if y is not None:
            y_arr = as_response_vector(y, n_rows=X_arr.shape[0])
            y_mean = float(y_arr.mean())
            y_std = float(y_arr.std())
            if y_std <= self.degenerate_tol * max(1.0, abs(y_mean)):
                if self.warn:
                    logger.warning("Response has zero variance; every coefficient will stay at zero")
                y_std = 1.0
        else:
            y_mean, y_std = 0.0, 1.0

        self.state_ = StandardizationState(
            x_mean=x_mean,
            x_scale=x_scale,
            y_mean=y_mean,
            y_scale=y_std,
            degenerate=degenerate,
            feature_names=feature_names
        )
        self.n_features_in_ = X_arr.shape[1]

        if degenerate.any():
            self._signal_degenerate(degenerate, feature_names)

        return self

    def _signal_degenerate(self, degenerate: np.ndarray, feature_names):
        indices = np.flatnonzero(degenerate).tolist()
        names = [feature_names[j] for j in indices] if feature_names else []
        label = names or indices
        condition = DegenerateFeature(
            f"{len(indices)} zero-variance feature(s) will keep a zero coefficient: {label}",
            feature_indices=indices,
            feature_names=names
        )

        if self.strict:
            raise condition

        if self.warn:
            logger.warning(condition.message)
            warnings.warn(condition, stacklevel=3)

    def transform(self, X: Any, y: Any = None):
        """
        Standardize X (and y when given) with the fitted statistics

        Returns:
            Standardized X, or a tuple (X, y) when y is given
        """
        check_is_fitted(self, 'state_')
        X_arr, _ = as_design_matrix(X)
        state = self.state_

        if X_arr.shape[1] != state.n_features:
            raise SchemaMismatch(
                f"Standardizer was fitted on {state.n_features} features, got {X_arr.shape[1]}",
                expected_features=state.n_features,
                received_features=X_arr.shape[1]
            )

        X_std = (X_arr - state.x_mean) / state.x_scale
        X_std[:, state.degenerate] = 0.0

        if y is None:
            return X_std

        y_arr = as_response_vector(y, n_rows=X_arr.shape[0])
        return X_std, (y_arr - state.y_mean) / state.y_scale

    def fit_transform(self, X: Any, y: Any) -> Tuple[np.ndarray, np.ndarray, StandardizationState]:
        """
        Fit on (X, y) and return standardized copies plus the state

        Returns:
            Tuple of (standardized X, standardized y, StandardizationState)
        """
        self.fit(X, y)
        X_std, y_std = self.transform(X, y)
        return X_std, y_std, self.state_


def standardize(X: Any, y: Any, strict: bool = False, warn: bool = True,
                degenerate_tol: Optional[float] = None):
    """Convenience wrapper around ``Standardizer.fit_transform``"""
    kwargs = {} if degenerate_tol is None else {'degenerate_tol': degenerate_tol}
    return Standardizer(strict=strict, warn=warn, **kwargs).fit_transform(X, y)
