"""
Shared infrastructure: exceptions, logging, configuration, timing,
task fan-out and input validation.
"""

from .exceptions import (
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
    log_exception,
)
from .logger import get_logger, set_log_level
from .config_loader import get_solver_settings, SolverSettings
from .timing import Timer, time_it

__all__ = [
    'EnetPathError', 'DataError', 'DataValidationError', 'DegenerateFeature',
    'ModelError', 'ConvergenceFailure', 'NumericalError', 'GridSearchError',
    'PredictionError', 'SchemaMismatch', 'ConfigurationError', 'InvalidParameterError',
    'log_exception', 'get_logger', 'set_log_level', 'get_solver_settings',
    'SolverSettings', 'Timer', 'time_it',
]
