# ============================================
# enetpath - src/enetpath/utils/timing.py
# Timing utilities for path fits, cross-validation and grid searches
# ============================================

import time
import functools
from datetime import datetime
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Optional

from .logger import get_logger
from .exceptions import EnetPathError

logger = get_logger('timing')


def format_duration(seconds: float) -> str:
    """
    Format duration in human-readable format

    Args:
        seconds: Duration in seconds

    Returns:
        Formatted duration string
    """
    if seconds < 1:
        return f"{seconds*1000:.0f}ms"
    elif seconds < 60:
        return f"{seconds:.1f}s"
    elif seconds < 3600:
        return f"{seconds / 60:.1f}m"
    return f"{seconds / 3600:.1f}h"


@dataclass
class TimingResult:
    """Container for timing measurement results"""
    operation_name: str
    start_time: float
    end_time: float
    duration: float
    metadata: Dict[str, Any] = field(default_factory=dict)

    @property
    def duration_ms(self) -> float:
        return self.duration * 1000

    @property
    def duration_str(self) -> str:
        return format_duration(self.duration)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'operation_name': self.operation_name,
            'duration': self.duration,
            'duration_ms': self.duration_ms,
            'duration_str': self.duration_str,
            'metadata': self.metadata,
            'timestamp': datetime.now().isoformat()
        }


class Timer:
    """
    High-precision timer for measuring operation performance

    Can be used as context manager or through ``time_it``
    """

    def __init__(self, operation_name: str, auto_log: bool = True,
                 log_level: str = 'info', metadata: Optional[Dict[str, Any]] = None):
        """
        Initialize timer

        Args:
            operation_name: Name of the operation being timed
            auto_log: Whether to automatically log timing results
            log_level: Log level for timing messages
            metadata: Additional metadata to include
        """
        self.operation_name = operation_name
        self.auto_log = auto_log
        self.log_level = log_level.lower()
        self.metadata = metadata or {}

        self.start_time: Optional[float] = None
        self.end_time: Optional[float] = None
        self.result: Optional[TimingResult] = None

    def start(self) -> 'Timer':
        self.start_time = time.perf_counter()
        return self

    def stop(self) -> TimingResult:
        """Stop timing and return result"""
        if self.start_time is None:
            raise EnetPathError("Timer not started")

        self.end_time = time.perf_counter()
        self.result = TimingResult(
            operation_name=self.operation_name,
            start_time=self.start_time,
            end_time=self.end_time,
            duration=self.end_time - self.start_time,
            metadata=self.metadata
        )

        if self.auto_log:
            self._log_result()

        return self.result

    def _log_result(self):
        message = f"Operation '{self.operation_name}' completed in {self.result.duration_str}"

        log_func = getattr(logger, self.log_level, logger.info)
        log_func(message, extra={
            'operation_name': self.operation_name,
            'duration': self.result.duration,
            'performance_metric': True,
            **self.metadata
        })

    def __enter__(self) -> 'Timer':
        return self.start()

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.stop()

        if exc_type is not None:
            logger.debug(
                f"Operation '{self.operation_name}' failed after {self.result.duration_str}: "
                f"{exc_type.__name__}: {exc_val}"
            )


def time_it(operation_name: Optional[str] = None, auto_log: bool = True,
            log_level: str = 'info'):
    """
    Decorator to time function execution

    Args:
        operation_name: Custom operation name (defaults to function name)
        auto_log: Whether to automatically log timing results
        log_level: Log level for timing messages
    """
    def decorator(func: Callable) -> Callable:
        name = operation_name or f"{func.__module__}.{func.__name__}"

        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            with Timer(name, auto_log, log_level):
                return func(*args, **kwargs)

        return wrapper

    return decorator
