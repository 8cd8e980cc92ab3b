"""
enetpath: elastic-net regularization paths fitted by coordinate descent,
with k-fold cross-validated lambda selection and a grid search over the
L1/L2 mixing parameter.
"""

__version__ = "1.0.0"

from .utils.exceptions import (
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
    ConfigurationError,
    InvalidParameterError,
)
from .models.base.path_types import (
    StandardizationState,
    CoefficientVector,
    PathStep,
    RegularizationPath,
    FoldAssignment,
    CVResult,
    SelectionOutcome,
    CrossValidationResult,
    GridSearchResult,
)
from .features.transformers.scalers import Standardizer
from .models.regression.lambda_sequence import compute_lambda_max, generate_lambda_sequence
from .models.regression.coordinate_descent import soft_threshold, fit_path
from .models.selection import SelectionRule, select_lambda
from .models.prediction import predict
from .evaluation.validation.cross_validation import make_fold_assignment, cross_validate
from .models.optimization.grid_search import grid_search
from .models.regression.elastic_net import ElasticNetPathRegressor

__all__ = [
    # operations
    'fit_path', 'cross_validate', 'grid_search', 'predict', 'select_lambda',
    'make_fold_assignment', 'generate_lambda_sequence', 'compute_lambda_max',
    'soft_threshold', 'Standardizer', 'ElasticNetPathRegressor', 'SelectionRule',
    # data model
    'StandardizationState', 'CoefficientVector', 'PathStep', 'RegularizationPath',
    'FoldAssignment', 'CVResult', 'SelectionOutcome', 'CrossValidationResult',
    'GridSearchResult',
    # errors
    'EnetPathError', 'DataError', 'DataValidationError', 'DegenerateFeature',
    'ModelError', 'ConvergenceFailure', 'NumericalError', 'GridSearchError',
    'PredictionError', 'SchemaMismatch', 'ConfigurationError', 'InvalidParameterError',
]
