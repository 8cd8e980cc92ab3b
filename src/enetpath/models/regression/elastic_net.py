# ============================================
# enetpath - src/enetpath/models/regression/elastic_net.py
# scikit-learn style estimator over the cross-validated elastic-net path
# ============================================

import threading
import numpy as np
import pandas as pd
from typing import Any, Dict, List, Optional
from sklearn.base import BaseEstimator, RegressorMixin
from sklearn.utils.validation import check_is_fitted

from ..base.path_types import CoefficientVector
from ..optimization.grid_search import grid_search
from ..prediction import predict as predict_with
from ..selection import SelectionRule
from ...utils.exceptions import ModelError
from ...utils.logger import get_logger
from ...utils.timing import time_it

logger = get_logger('models.regression.elastic_net')

# ============================================
# Elastic Net Path Regressor
# ============================================

class ElasticNetPathRegressor(RegressorMixin, BaseEstimator):
    """
    Elastic-net regression tuned by cross-validation along the full path

    Features:
    - Coordinate-descent path over a geometric lambda sequence per alpha
    - k-fold cross-validation with shared folds across alphas
    - Minimum-error or one-standard-error lambda selection
    - Coefficient table for downstream inspection
    """

    def __init__(self,
                 alpha_grid: Optional[List[float]] = None,
                 n_folds: Optional[int] = None,
                 seed: Optional[int] = None,
                 n_jobs: Optional[int] = None,
                 selection_rule: str = 'min',
                 tol: Optional[float] = None,
                 max_iter: Optional[int] = None,
                 n_lambda: Optional[int] = None,
                 lambda_min_ratio: Optional[float] = None):
        """
        Initialize ElasticNetPathRegressor

        Args:
            alpha_grid: Mixing values to search (default: 11 values over [0, 1])
            n_folds: Cross-validation folds (default from configuration)
            seed: Fold shuffling seed (default from configuration)
            n_jobs: Worker threads across alphas
            selection_rule: 'min' or '1se'
            tol: Solver tolerance
            max_iter: Solver sweep cap per lambda
            n_lambda: Lambdas per path
            lambda_min_ratio: Ratio of smallest to largest lambda
        """
        self.alpha_grid = alpha_grid
        self.n_folds = n_folds
        self.seed = seed
        self.n_jobs = n_jobs
        self.selection_rule = selection_rule
        self.tol = tol
        self.max_iter = max_iter
        self.n_lambda = n_lambda
        self.lambda_min_ratio = lambda_min_ratio

    @time_it("elastic_net_path_fit")
    def fit(self, X: Any, y: Any, cancel_event: Optional[threading.Event] = None):
        """
        Run the grid search and keep the selected model

        Args:
            X: Design matrix (DataFrame column names become feature names)
            y: Response vector
            cancel_event: Optional event that stops the search between alphas

        Returns:
            Self
        """
        rule = SelectionRule.parse(self.selection_rule)

        result = grid_search(
            X, y,
            alpha_grid=self.alpha_grid,
            k=self.n_folds,
            seed=self.seed,
            n_jobs=self.n_jobs,
            cancel_event=cancel_event,
            tol=self.tol,
            max_iter=self.max_iter,
            n_lambda=self.n_lambda,
            lambda_min_ratio=self.lambda_min_ratio
        )

        if result.best_alpha is None:
            raise ModelError("Grid search was cancelled before any alpha completed")

        best = result.best_result
        selection = result.selection
        coefficients = selection.coefficients_for(rule.value)

        self.grid_result_ = result
        self.cv_results_ = best
        self.path_ = best.path
        self.alpha_ = result.best_alpha
        self.lambda_ = selection.lambda_for(rule.value)
        self.coefficients_ = coefficients
        self.coef_ = np.array(coefficients.coef)
        self.intercept_ = coefficients.intercept
        self.n_features_in_ = coefficients.n_features
        if coefficients.feature_names is not None:
            self.feature_names_in_ = np.array(coefficients.feature_names, dtype=object)

        logger.info(f"Elastic net ({self._get_regularization_type()}): alpha={self.alpha_:.4g}, "
                    f"lambda={self.lambda_:.6g} [{rule.value}], "
                    f"{coefficients.n_nonzero}/{coefficients.n_features} features selected")
        return self

    def predict(self, X: Any) -> np.ndarray:
        check_is_fitted(self, 'coefficients_')
        return predict_with(self.coefficients_, X)

    def _feature_labels(self) -> List[str]:
        if self.coefficients_.feature_names is not None:
            return list(self.coefficients_.feature_names)
        return [f"x{j}" for j in range(self.coefficients_.n_features)]

    def _get_regularization_type(self) -> str:
        """Describe the effective penalty from the selected alpha"""
        if self.alpha_ == 0.0:
            return "Pure Ridge (L2)"
        elif self.alpha_ == 1.0:
            return "Pure Lasso (L1)"
        elif self.alpha_ < 0.3:
            return "Ridge-dominated Elastic Net"
        elif self.alpha_ > 0.7:
            return "Lasso-dominated Elastic Net"
        return "Balanced Elastic Net"

    def get_coefficients(self) -> pd.DataFrame:
        """
        Get model coefficients of the selected model

        Returns:
            DataFrame with one row per feature plus the intercept, sorted by
            absolute coefficient
        """
        check_is_fitted(self, 'coefficients_')

        coef = self.coef_
        coef_df = pd.DataFrame({
            'feature': self._feature_labels(),
            'coefficient': coef,
            'abs_coefficient': np.abs(coef),
            'selected': coef != 0.0,
            'importance_rank': np.argsort(np.argsort(-np.abs(coef), kind='stable'), kind='stable') + 1
        })

        intercept_row = pd.DataFrame({
            'feature': ['intercept'],
            'coefficient': [self.intercept_],
            'abs_coefficient': [abs(self.intercept_)],
            'selected': [True],
            'importance_rank': [0]
        })
        coef_df = pd.concat([intercept_row, coef_df], ignore_index=True)

        return coef_df.sort_values('abs_coefficient', ascending=False, kind='stable').reset_index(drop=True)

    def get_selected_features(self) -> List[Any]:
        """Features with a non-zero coefficient in the selected model"""
        check_is_fitted(self, 'coefficients_')
        return self.coefficients_.active_features

    def coefficients_at(self, rule: str) -> CoefficientVector:
        """Coefficients of the best alpha under either selection rule"""
        check_is_fitted(self, 'coefficients_')
        return self.grid_result_.selection.coefficients_for(SelectionRule.parse(rule).value)

    def get_regularization_summary(self) -> Dict[str, Any]:
        """Selected hyperparameters, sparsity and search diagnostics"""
        check_is_fitted(self, 'coefficients_')

        selection = self.grid_result_.selection
        n_features = self.coefficients_.n_features
        n_selected = self.coefficients_.n_nonzero

        return {
            'hyperparameters': {
                'alpha': float(self.alpha_),
                'lambda': float(self.lambda_),
                'lambda_min': selection.lambda_min,
                'lambda_1se': selection.lambda_1se,
                'selection_rule': SelectionRule.parse(self.selection_rule).value
            },
            'regularization_type': self._get_regularization_type(),
            'n_features_total': n_features,
            'n_features_selected': n_selected,
            'sparsity_ratio': float((n_features - n_selected) / n_features),
            'cv_error_min': selection.error_min,
            'n_alphas_tested': len(self.grid_result_.results) + len(self.grid_result_.errors),
            'n_alphas_failed': len(self.grid_result_.errors),
            'n_convergence_failures': len(self.cv_results_.failures) + len(self.path_.failures)
        }

# ============================================
# Factory Functions
# ============================================

def create_elastic_net_regressor(**kwargs) -> ElasticNetPathRegressor:
    """Create an ElasticNetPathRegressor searching the default alpha grid"""
    return ElasticNetPathRegressor(**kwargs)


def create_lasso_path_regressor(**kwargs) -> ElasticNetPathRegressor:
    """Lasso (alpha=1) path with cross-validated lambda"""
    kwargs['alpha_grid'] = [1.0]
    return ElasticNetPathRegressor(**kwargs)


def create_ridge_path_regressor(**kwargs) -> ElasticNetPathRegressor:
    """Ridge (alpha=0) path with cross-validated lambda"""
    kwargs['alpha_grid'] = [0.0]
    return ElasticNetPathRegressor(**kwargs)
