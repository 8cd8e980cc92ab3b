# ============================================
# enetpath - src/enetpath/models/base/path_types.py
# Records produced by path fitting, cross-validation and selection
# ============================================

import numpy as np
import pandas as pd
from typing import Any, Dict, Iterator, List, NamedTuple, Optional, Sequence, Tuple
from dataclasses import dataclass, field

from ...utils.exceptions import (
    ConvergenceFailure,
    DataValidationError,
    EnetPathError,
    InvalidParameterError
)


def _readonly(values: Any, dtype=np.float64) -> np.ndarray:
    array = np.array(values, dtype=dtype, copy=True)
    array.setflags(write=False)
    return array


def _feature_labels(feature_names: Optional[Sequence[str]], n_features: int) -> List[str]:
    if feature_names is not None:
        return list(feature_names)
    return [f"x{j}" for j in range(n_features)]

# ============================================
# Standardization
# ============================================

@dataclass(frozen=True, eq=False)
class StandardizationState:
    """
    Per-feature centering/scaling plus the response's, as computed on the
    rows a path was fitted on

    Degenerate (zero-variance) features carry scale 1 and are flagged in
    ``degenerate``; their standardized coefficient is always zero.
    """
    x_mean: np.ndarray
    x_scale: np.ndarray
    y_mean: float
    y_scale: float
    degenerate: np.ndarray
    feature_names: Optional[Tuple[str, ...]] = None

    def __post_init__(self):
        object.__setattr__(self, 'x_mean', _readonly(self.x_mean))
        object.__setattr__(self, 'x_scale', _readonly(self.x_scale))
        object.__setattr__(self, 'degenerate', _readonly(self.degenerate, dtype=bool))
        object.__setattr__(self, 'y_mean', float(self.y_mean))
        object.__setattr__(self, 'y_scale', float(self.y_scale))
        if self.feature_names is not None:
            object.__setattr__(self, 'feature_names', tuple(self.feature_names))

        if not (self.x_mean.shape == self.x_scale.shape == self.degenerate.shape):
            raise DataValidationError("Standardization arrays must have one entry per feature")

    @property
    def n_features(self) -> int:
        return int(self.x_mean.shape[0])

    @property
    def degenerate_indices(self) -> List[int]:
        return np.flatnonzero(self.degenerate).tolist()

    def to_original(self, standardized_coef: np.ndarray) -> Tuple[float, np.ndarray]:
        """
        Map standardized coefficients back to the original feature and
        response scale

        Args:
            standardized_coef: Coefficients fitted on standardized X and y

        Returns:
            Tuple of (intercept, coefficient array)
        """
        coef = self.y_scale * np.asarray(standardized_coef, dtype=np.float64) / self.x_scale
        coef = np.where(self.degenerate, 0.0, coef)
        intercept = self.y_mean - float(np.dot(self.x_mean, coef))
        return intercept, coef

# ============================================
# Coefficients and Paths
# ============================================

@dataclass(frozen=True, eq=False)
class CoefficientVector:
    """Intercept plus one weight per feature, on the original scale"""
    intercept: float
    coef: np.ndarray
    feature_names: Optional[Tuple[str, ...]] = None

    def __post_init__(self):
        coef = _readonly(np.ravel(self.coef))
        object.__setattr__(self, 'coef', coef)
        object.__setattr__(self, 'intercept', float(self.intercept))
        if self.feature_names is not None:
            names = tuple(str(name) for name in self.feature_names)
            if len(names) != coef.shape[0]:
                raise DataValidationError(
                    f"Got {len(names)} feature names for {coef.shape[0]} coefficients"
                )
            object.__setattr__(self, 'feature_names', names)

    @property
    def n_features(self) -> int:
        return int(self.coef.shape[0])

    @property
    def n_nonzero(self) -> int:
        return int(np.count_nonzero(self.coef))

    @property
    def active_features(self) -> List[Any]:
        """Names (or indices, when unnamed) of the non-zero coefficients"""
        indices = np.flatnonzero(self.coef).tolist()
        if self.feature_names is None:
            return indices
        return [self.feature_names[j] for j in indices]

    def to_series(self, include_intercept: bool = True) -> pd.Series:
        labels = _feature_labels(self.feature_names, self.n_features)
        series = pd.Series(self.coef, index=labels, name='coefficient')
        if include_intercept:
            series = pd.concat([pd.Series({'intercept': self.intercept}, name='coefficient'), series])
        return series

    def to_dict(self) -> Dict[str, Any]:
        return {
            'intercept': self.intercept,
            'coefficients': dict(zip(_feature_labels(self.feature_names, self.n_features),
                                     self.coef.tolist()))
        }

    def __repr__(self) -> str:
        return (f"CoefficientVector(intercept={self.intercept:.6g}, "
                f"n_features={self.n_features}, n_nonzero={self.n_nonzero})")


class PathStep(NamedTuple):
    """One point of a regularization path"""
    lambda_value: float
    coefficients: CoefficientVector
    n_active: int


@dataclass(eq=False)
class RegularizationPath:
    """
    Fitted coefficients across a decreasing lambda sequence

    Rows of ``coefs`` line up with ``lambdas``, largest lambda first. The
    path also keeps the solver's iteration counts, the training R^2 at each
    lambda and every convergence failure met along the way.
    """
    alpha: float
    lambdas: np.ndarray
    intercepts: np.ndarray
    coefs: np.ndarray
    n_iter: np.ndarray
    r_squared: np.ndarray
    standardization: Optional[StandardizationState] = None
    feature_names: Optional[Tuple[str, ...]] = None
    failures: List[ConvergenceFailure] = field(default_factory=list)

    def __post_init__(self):
        self.alpha = float(self.alpha)
        self.lambdas = _readonly(self.lambdas)
        self.intercepts = _readonly(self.intercepts)
        self.coefs = _readonly(np.atleast_2d(self.coefs))
        self.n_iter = _readonly(self.n_iter, dtype=np.int64)
        self.r_squared = _readonly(self.r_squared)
        if self.feature_names is not None:
            self.feature_names = tuple(self.feature_names)

        n_lambda = self.lambdas.shape[0]
        if self.lambdas.ndim != 1 or n_lambda == 0:
            raise InvalidParameterError("A path needs a non-empty 1-D lambda sequence",
                                        parameter_name="lambdas")
        if np.any(np.diff(self.lambdas) >= 0):
            raise InvalidParameterError("Path lambdas must be strictly decreasing",
                                        parameter_name="lambdas")
        if (self.coefs.shape[0] != n_lambda or self.intercepts.shape != (n_lambda,)
                or self.n_iter.shape != (n_lambda,) or self.r_squared.shape != (n_lambda,)):
            raise DataValidationError(
                f"Path arrays do not line up with {n_lambda} lambdas "
                f"(coefs {self.coefs.shape}, intercepts {self.intercepts.shape})"
            )

    @property
    def n_features(self) -> int:
        return int(self.coefs.shape[1])

    @property
    def n_active(self) -> np.ndarray:
        return np.count_nonzero(self.coefs, axis=1)

    @property
    def converged(self) -> bool:
        return not self.failures

    def __len__(self) -> int:
        return int(self.lambdas.shape[0])

    def __getitem__(self, index: int) -> PathStep:
        if not isinstance(index, (int, np.integer)):
            raise TypeError(f"Path indices must be integers, not {type(index).__name__}")
        coefficients = self.coefficients_at(index)
        return PathStep(float(self.lambdas[index]), coefficients, coefficients.n_nonzero)

    def __iter__(self) -> Iterator[PathStep]:
        for index in range(len(self)):
            yield self[index]

    def coefficients_at(self, index: int) -> CoefficientVector:
        return CoefficientVector(
            intercept=self.intercepts[index],
            coef=self.coefs[index],
            feature_names=self.feature_names
        )

    def raise_for_convergence(self):
        """Raise the first recorded ConvergenceFailure, if any"""
        if self.failures:
            failure = self.failures[0]
            failure.add_context(n_failures=len(self.failures))
            raise failure

    def to_frame(self) -> pd.DataFrame:
        """One row per lambda: coefficients plus path diagnostics"""
        frame = pd.DataFrame(self.coefs, columns=_feature_labels(self.feature_names, self.n_features))
        frame.insert(0, 'intercept', self.intercepts)
        frame.insert(0, 'lambda', self.lambdas)
        frame['n_active'] = self.n_active
        frame['n_iter'] = self.n_iter
        frame['r_squared'] = self.r_squared
        return frame

    def __repr__(self) -> str:
        return (f"RegularizationPath(alpha={self.alpha:.4g}, n_lambda={len(self)}, "
                f"n_features={self.n_features}, failures={len(self.failures)})")

# ============================================
# Cross-Validation Records
# ============================================

@dataclass(frozen=True, eq=False)
class FoldAssignment:
    """Partition of row indices into k disjoint held-out groups"""
    folds: Tuple[np.ndarray, ...]
    n_samples: int
    seed: Optional[int] = None

    def __post_init__(self):
        folds = tuple(_readonly(np.sort(np.asarray(fold)), dtype=np.int64) for fold in self.folds)
        object.__setattr__(self, 'folds', folds)

        if len(folds) < 2:
            raise InvalidParameterError("A fold assignment needs at least 2 folds",
                                        parameter_name="k", provided_value=len(folds))
        if any(fold.size == 0 for fold in folds):
            raise DataValidationError("Every fold must hold at least one row")

        combined = np.sort(np.concatenate(folds))
        if combined.size != self.n_samples or not np.array_equal(combined, np.arange(self.n_samples)):
            raise DataValidationError(
                f"Folds must partition rows 0..{self.n_samples - 1} exactly once"
            )

    @property
    def k(self) -> int:
        return len(self.folds)

    @property
    def fold_sizes(self) -> List[int]:
        return [int(fold.size) for fold in self.folds]

    def test_indices(self, fold: int) -> np.ndarray:
        return self.folds[fold]

    def train_indices(self, fold: int) -> np.ndarray:
        mask = np.ones(self.n_samples, dtype=bool)
        mask[self.folds[fold]] = False
        return np.flatnonzero(mask)

    def splits(self) -> Iterator[Tuple[int, np.ndarray, np.ndarray]]:
        """Yield (fold, train indices, test indices)"""
        for fold in range(self.k):
            yield fold, self.train_indices(fold), self.test_indices(fold)


@dataclass(frozen=True)
class CVResult:
    """Cross-validated error at one lambda"""
    lambda_value: float
    mean_error: float
    std_error: float
    n_nonzero: int


@dataclass(frozen=True)
class SelectionOutcome:
    """Lambdas chosen by the minimum-error and one-standard-error rules"""
    alpha: float
    lambda_min: float
    lambda_1se: float
    index_min: int
    index_1se: int
    error_min: float
    error_1se: float
    std_error_min: float
    n_nonzero_min: int
    n_nonzero_1se: int
    coefficients_min: Optional[CoefficientVector] = None
    coefficients_1se: Optional[CoefficientVector] = None

    def lambda_for(self, rule: str = 'min') -> float:
        return self.lambda_min if rule == 'min' else self.lambda_1se

    def coefficients_for(self, rule: str = 'min') -> Optional[CoefficientVector]:
        return self.coefficients_min if rule == 'min' else self.coefficients_1se

    def to_dict(self) -> Dict[str, Any]:
        return {
            'alpha': self.alpha,
            'lambda_min': self.lambda_min,
            'lambda_1se': self.lambda_1se,
            'index_min': self.index_min,
            'index_1se': self.index_1se,
            'error_min': self.error_min,
            'error_1se': self.error_1se,
            'std_error_min': self.std_error_min,
            'n_nonzero_min': self.n_nonzero_min,
            'n_nonzero_1se': self.n_nonzero_1se,
            'coefficients_min': self.coefficients_min.to_dict() if self.coefficients_min else None,
            'coefficients_1se': self.coefficients_1se.to_dict() if self.coefficients_1se else None,
        }


@dataclass(eq=False)
class CrossValidationResult:
    """
    Everything one ``cross_validate`` call produced

    Unpacks as ``(cv_results, selection)``.
    """
    alpha: float
    cv_results: List[CVResult]
    selection: SelectionOutcome
    path: RegularizationPath
    fold_errors: np.ndarray
    folds: FoldAssignment
    failures: List[ConvergenceFailure] = field(default_factory=list)

    def __iter__(self):
        yield self.cv_results
        yield self.selection

    @property
    def lambdas(self) -> np.ndarray:
        return np.array([r.lambda_value for r in self.cv_results])

    @property
    def mean_errors(self) -> np.ndarray:
        return np.array([r.mean_error for r in self.cv_results])

    @property
    def std_errors(self) -> np.ndarray:
        return np.array([r.std_error for r in self.cv_results])

    def to_frame(self) -> pd.DataFrame:
        return pd.DataFrame({
            'lambda': self.lambdas,
            'mean_error': self.mean_errors,
            'std_error': self.std_errors,
            'n_nonzero': [r.n_nonzero for r in self.cv_results],
        })


@dataclass(eq=False)
class GridSearchResult:
    """
    Outcome of a grid search over the mixing parameter

    Unpacks as ``(best_alpha, selection)``; both are None when the search
    was cancelled before any alpha completed.
    """
    best_alpha: Optional[float]
    selection: Optional[SelectionOutcome]
    results: Dict[float, CrossValidationResult] = field(default_factory=dict)
    errors: Dict[float, EnetPathError] = field(default_factory=dict)
    cancelled: bool = False

    def __iter__(self):
        yield self.best_alpha
        yield self.selection

    @property
    def best_result(self) -> Optional[CrossValidationResult]:
        if self.best_alpha is None:
            return None
        return self.results[self.best_alpha]

    def to_frame(self) -> pd.DataFrame:
        """One row per completed alpha"""
        rows = []
        for alpha in sorted(self.results):
            selection = self.results[alpha].selection
            rows.append({
                'alpha': alpha,
                'lambda_min': selection.lambda_min,
                'error_min': selection.error_min,
                'lambda_1se': selection.lambda_1se,
                'error_1se': selection.error_1se,
                'n_nonzero_min': selection.n_nonzero_min,
                'n_nonzero_1se': selection.n_nonzero_1se,
            })
        return pd.DataFrame(rows, columns=['alpha', 'lambda_min', 'error_min', 'lambda_1se',
                                           'error_1se', 'n_nonzero_min', 'n_nonzero_1se'])
