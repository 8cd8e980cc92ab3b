# ============================================
# enetpath - src/enetpath/utils/exceptions.py
# Exception hierarchy for path fitting, cross-validation and prediction
# ============================================

import re
import json
import traceback
from typing import Any, Dict, List, Optional
from datetime import datetime, timezone


class EnetPathError(Exception):
    """
    Base exception class for all enetpath exceptions

    Features:
    - Error codes for programmatic handling
    - Context information (alpha, lambda, fold coordinates) for debugging
    - Severity levels for appropriate responses
    - User-friendly messages and suggested fixes
    """

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
        severity: str = "error",
        user_message: Optional[str] = None,
        suggestions: Optional[List[str]] = None,
        cause: Optional[Exception] = None
    ):
        """
        Initialize base exception

        Args:
            message: Technical error message for logs
            error_code: Unique error code for programmatic handling
            context: Additional context information
            severity: Error severity (debug, info, warning, error, critical)
            user_message: User-friendly message
            suggestions: List of suggested solutions
            cause: Original exception that caused this error
        """
        super().__init__(message)

        self.message = message
        self.error_code = error_code or self._generate_error_code()
        self.context = dict(context or {})
        self.severity = severity
        self.user_message = user_message or self._generate_user_message()
        self.suggestions = list(suggestions or [])
        self.cause = cause
        self.timestamp = datetime.now(timezone.utc)

        self.context.update({
            'exception_type': self.__class__.__name__,
            'timestamp': self.timestamp.isoformat(),
            'severity': self.severity
        })

    def _generate_error_code(self) -> str:
        """Generate error code based on class name"""
        class_name = self.__class__.__name__
        # CamelCase -> UPPER_SNAKE_CASE
        error_code = re.sub('(.)([A-Z][a-z]+)', r'\1_\2', class_name)
        error_code = re.sub('([a-z0-9])([A-Z])', r'\1_\2', error_code).upper()
        return error_code.replace('_EXCEPTION', '_ERROR')

    def _generate_user_message(self) -> str:
        return "An error occurred while fitting the model."

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for JSON serialization"""
        return {
            'error_code': self.error_code,
            'message': self.message,
            'user_message': self.user_message,
            'severity': self.severity,
            'context': self.context,
            'suggestions': self.suggestions,
            'timestamp': self.timestamp.isoformat(),
            'traceback': traceback.format_exc() if self.severity in ['error', 'critical'] else None
        }

    def to_json(self) -> str:
        """Convert exception to JSON string"""
        return json.dumps(self.to_dict(), default=str, indent=2)

    def add_context(self, **kwargs):
        """Add additional context to the exception"""
        self.context.update(kwargs)

    def add_suggestion(self, suggestion: str):
        """Add a suggestion for resolving the error"""
        self.suggestions.append(suggestion)


def describe_coordinates(alpha: Optional[float] = None,
                         lambda_value: Optional[float] = None,
                         fold: Optional[int] = None) -> str:
    """Render (alpha, lambda, fold) coordinates for error messages"""
    parts = []
    if alpha is not None:
        parts.append(f"alpha={alpha:.4g}")
    if lambda_value is not None:
        parts.append(f"lambda={lambda_value:.6g}")
    if fold is not None:
        parts.append(f"fold={fold}")
    return ", ".join(parts) if parts else "full data"


class _FitCoordinatesMixin:
    """Stores the (alpha, lambda, fold) coordinates of a failed fit"""

    def _set_coordinates(self, base_message, alpha, lambda_value, fold):
        self.base_message = base_message
        self.alpha = alpha
        self.lambda_value = lambda_value
        self.fold = fold
        self.context.update({
            'alpha': alpha,
            'lambda_value': lambda_value,
            'fold': fold
        })

    def with_fold(self, fold: Optional[int]):
        """Tag the error with the cross-validation fold it came from"""
        self.fold = fold
        self.context['fold'] = fold
        self.message = f"{self.base_message} ({describe_coordinates(self.alpha, self.lambda_value, fold)})"
        self.args = (self.message,)
        return self

# ============================================
# Data-related Exceptions
# ============================================

class DataError(EnetPathError):
    """Base class for data-related errors"""

    def __init__(self, message: str, **kwargs):
        kwargs.setdefault('severity', "error")
        super().__init__(message, **kwargs)


class DataValidationError(DataError):
    """Raised when a design matrix or response fails validation"""

    def __init__(self, message: str, validation_errors: Optional[List[str]] = None, **kwargs):
        context = kwargs.pop('context', None) or {}
        if validation_errors:
            context['validation_errors'] = validation_errors

        super().__init__(
            message,
            context=context,
            user_message="The input data cannot be used for fitting.",
            suggestions=[
                "Check that X is a 2-D numeric matrix",
                "Check that y has one value per row of X",
                "Encode categorical columns numerically before fitting"
            ],
            **kwargs
        )


class DegenerateFeature(DataError, UserWarning):
    """
    Zero-variance feature detected by the Standardizer.

    Signalled through ``warnings.warn`` so the fit carries on; raised only
    when the Standardizer runs in strict mode.
    """

    def __init__(self, message: str, feature_indices: Optional[List[int]] = None,
                 feature_names: Optional[List[str]] = None, **kwargs):
        context = kwargs.pop('context', None) or {}
        self.feature_indices = list(feature_indices or [])
        self.feature_names = list(feature_names or [])
        context['feature_indices'] = self.feature_indices
        if self.feature_names:
            context['feature_names'] = self.feature_names

        super().__init__(
            message,
            context=context,
            severity="warning",
            user_message="Some features are constant and will keep a zero coefficient.",
            suggestions=[
                "Remove constant columns before fitting",
                "Check the dummy-encoding step for empty categories"
            ],
            **kwargs
        )

# ============================================
# Model-related Exceptions
# ============================================

class ModelError(EnetPathError):
    """Base class for model fitting errors"""

    def __init__(self, message: str, **kwargs):
        kwargs.setdefault('severity', "error")
        super().__init__(message, **kwargs)


class ConvergenceFailure(_FitCoordinatesMixin, ModelError):
    """Coordinate descent hit its sweep cap before meeting the tolerance"""

    def __init__(self, message: str, alpha: Optional[float] = None,
                 lambda_value: Optional[float] = None, fold: Optional[int] = None,
                 n_iter: Optional[int] = None, max_change: Optional[float] = None, **kwargs):
        context = kwargs.pop('context', None) or {}
        if n_iter is not None:
            context['n_iter'] = n_iter
        if max_change is not None:
            context['max_change'] = max_change
        self.n_iter = n_iter
        self.max_change = max_change

        super().__init__(
            f"{message} ({describe_coordinates(alpha, lambda_value, fold)})",
            context=context,
            severity="warning",
            user_message="The solver did not fully converge for one penalty value.",
            suggestions=[
                "Increase max_iter",
                "Loosen the convergence tolerance",
                "Check for highly collinear features"
            ],
            **kwargs
        )
        self._set_coordinates(message, alpha, lambda_value, fold)


class NumericalError(_FitCoordinatesMixin, ModelError):
    """Non-finite value in the inputs or produced during fitting"""

    def __init__(self, message: str, alpha: Optional[float] = None,
                 lambda_value: Optional[float] = None, fold: Optional[int] = None, **kwargs):
        super().__init__(
            f"{message} ({describe_coordinates(alpha, lambda_value, fold)})",
            user_message="The fit produced or received non-finite values.",
            suggestions=[
                "Remove NaN or infinite values from X and y",
                "Rescale features with extreme magnitudes"
            ],
            **kwargs
        )
        self._set_coordinates(message, alpha, lambda_value, fold)


class GridSearchError(ModelError):
    """Raised when no alpha in a grid search produced a usable result"""

    def __init__(self, message: str, errors: Optional[Dict[float, Exception]] = None, **kwargs):
        context = kwargs.pop('context', None) or {}
        self.errors = dict(errors or {})
        context['failed_alphas'] = sorted(self.errors)

        super().__init__(
            message,
            context=context,
            user_message="Every mixing parameter in the grid failed to fit.",
            suggestions=["Inspect the per-alpha errors", "Check the input data for extreme values"],
            **kwargs
        )

# ============================================
# Prediction Exceptions
# ============================================

class PredictionError(EnetPathError):
    """Base class for prediction errors"""

    def __init__(self, message: str, **kwargs):
        kwargs.setdefault('severity', "error")
        super().__init__(message, **kwargs)


class SchemaMismatch(PredictionError):
    """Prediction input does not match the training column schema"""

    def __init__(self, message: str, expected_features: Optional[int] = None,
                 received_features: Optional[int] = None, **kwargs):
        context = kwargs.pop('context', None) or {}
        if expected_features is not None:
            context['expected_features'] = expected_features
        if received_features is not None:
            context['received_features'] = received_features
        self.expected_features = expected_features
        self.received_features = received_features

        super().__init__(
            message,
            context=context,
            user_message="Prediction input has a different column layout than the training data.",
            suggestions=["Apply the same encoding and column order used for training"],
            **kwargs
        )

# ============================================
# Configuration / Parameter Exceptions
# ============================================

class ConfigurationError(EnetPathError):
    """Raised when configuration is invalid or missing"""

    def __init__(self, message: str, config_name: Optional[str] = None, **kwargs):
        context = kwargs.pop('context', None) or {}
        if config_name:
            context['config_name'] = config_name

        super().__init__(
            message,
            context=context,
            severity="critical",
            user_message="Configuration error.",
            suggestions=["Check solver_config.yaml", "Verify ENETPATH_* environment variables"],
            **kwargs
        )


class InvalidParameterError(EnetPathError):
    """Raised when invalid parameters are provided"""

    def __init__(self, message: str, parameter_name: Optional[str] = None, provided_value: Any = None, **kwargs):
        context = kwargs.pop('context', None) or {}
        if parameter_name:
            context['parameter_name'] = parameter_name
        if provided_value is not None:
            context['provided_value'] = provided_value
        kwargs.setdefault('severity', "warning")

        super().__init__(
            message,
            context=context,
            user_message="Invalid input parameters. Please check your inputs and try again.",
            suggestions=["Check parameter values", "Use default values if unsure"],
            **kwargs
        )

# ============================================
# Utility Functions
# ============================================

def log_exception(exception: Exception, logger=None):
    """Log exception with appropriate level and context"""
    from .logger import get_logger

    if logger is None:
        logger = get_logger('exceptions')

    if isinstance(exception, EnetPathError):
        level_map = {
            'debug': logger.debug,
            'info': logger.info,
            'warning': logger.warning,
            'error': logger.error,
            'critical': logger.critical
        }

        log_func = level_map.get(exception.severity, logger.error)
        log_func(
            f"[{exception.error_code}] {exception.message}",
            extra={'error_context': exception.context},
            exc_info=exception if exception.severity in ['error', 'critical'] else None
        )
    else:
        logger.error(f"Unexpected exception: {str(exception)}", exc_info=exception)

# ============================================
# Exception Registry
# ============================================

EXCEPTION_REGISTRY = {
    'DATA_VALIDATION_ERROR': DataValidationError,
    'DEGENERATE_FEATURE': DegenerateFeature,
    'CONVERGENCE_FAILURE': ConvergenceFailure,
    'NUMERICAL_ERROR': NumericalError,
    'GRID_SEARCH_ERROR': GridSearchError,
    'SCHEMA_MISMATCH': SchemaMismatch,
    'CONFIGURATION_ERROR': ConfigurationError,
    'INVALID_PARAMETER_ERROR': InvalidParameterError,
}


def get_exception_class(error_code: str) -> type:
    """Get exception class by error code"""
    return EXCEPTION_REGISTRY.get(error_code, EnetPathError)
