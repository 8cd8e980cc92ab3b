# ============================================
# enetpath - src/enetpath/utils/logger.py
# Logging system with context tagging and optional JSON output
# ============================================

import os
import sys
import json
import logging
import logging.config
import traceback
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from .config_loader import get_config

ROOT_LOGGER_NAME = "enetpath"

# Attributes every LogRecord carries; anything else came in through ``extra``
_RESERVED_RECORD_ATTRS = frozenset((
    'name', 'msg', 'args', 'levelname', 'levelno', 'pathname', 'filename',
    'module', 'lineno', 'funcName', 'created', 'msecs', 'relativeCreated',
    'thread', 'threadName', 'processName', 'process', 'getMessage', 'exc_info',
    'exc_text', 'stack_info', 'taskName', 'message', 'asctime'
))


class ContextFilter(logging.Filter):
    """Add contextual information to log records"""

    def filter(self, record):
        if not hasattr(record, 'component'):
            # enetpath.models.selection -> models
            name_parts = record.name.split('.')
            record.component = name_parts[1] if len(name_parts) >= 2 else 'core'

        return True


class JSONFormatter(logging.Formatter):
    """JSON formatter for structured logging"""

    def format(self, record):
        log_entry = {
            'timestamp': datetime.now(timezone.utc).isoformat(),
            'level': record.levelname,
            'logger': record.name,
            'message': record.getMessage(),
            'module': record.module,
            'function': record.funcName,
            'line': record.lineno,
        }

        if record.exc_info:
            log_entry['exception'] = {
                'type': record.exc_info[0].__name__,
                'message': str(record.exc_info[1]),
                'traceback': traceback.format_exception(*record.exc_info)
            }

        for key, value in record.__dict__.items():
            if key not in _RESERVED_RECORD_ATTRS:
                log_entry[key] = value

        return json.dumps(log_entry, default=str)


class EnetPathLogger:
    """
    Logging system for enetpath

    Configures the ``enetpath`` logger namespace once:
    - a ``logging.yaml`` dictConfig when the config directory provides one
    - otherwise a console handler, plain text or JSON
      (``ENETPATH_LOG_FORMAT=json``)
    - context-aware records (component tag)
    """

    def __init__(self):
        self.context_filter = ContextFilter()
        self._loggers: Dict[str, logging.Logger] = {}
        self._setup_logging()

    def _setup_logging(self):
        """Setup logging configuration"""
        try:
            logging_config = get_config('logging')
            if logging_config.get('handlers'):
                self._setup_from_config(logging_config)
            else:
                self._setup_default_logging(logging_config.get('level', 'INFO'))
        except (ValueError, TypeError, AttributeError, ImportError) as e:
            print(f"Warning: Failed to apply logging config, using defaults: {e}", file=sys.stderr)
            self._setup_default_logging()

    def _setup_from_config(self, config: Dict[str, Any]):
        """Setup logging from configuration file"""
        config = dict(config)
        config.setdefault('version', 1)
        config.setdefault('disable_existing_loggers', False)
        config.pop('level', None)
        logging.config.dictConfig(config)

        package_logger = logging.getLogger(ROOT_LOGGER_NAME)
        for handler in package_logger.handlers + logging.getLogger().handlers:
            handler.addFilter(self.context_filter)

    def _setup_default_logging(self, level: str = 'INFO'):
        """Attach a console handler to the package logger"""
        package_logger = logging.getLogger(ROOT_LOGGER_NAME)
        package_logger.handlers.clear()

        console_handler = logging.StreamHandler(sys.stdout)
        if os.getenv('ENETPATH_LOG_FORMAT', 'text').lower() == 'json':
            console_handler.setFormatter(JSONFormatter())
        else:
            console_handler.setFormatter(logging.Formatter(
                '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
                datefmt='%Y-%m-%d %H:%M:%S'
            ))
        console_handler.addFilter(self.context_filter)

        package_logger.setLevel(getattr(logging, str(level).upper(), logging.INFO))
        package_logger.addHandler(console_handler)
        package_logger.propagate = False

    def get_logger(self, name: str) -> logging.Logger:
        """
        Get a logger for a specific component

        Args:
            name: Logger name (e.g., 'models.selection', 'cli')

        Returns:
            Configured logger instance
        """
        if name in self._loggers:
            return self._loggers[name]

        full_name = name if name.startswith(ROOT_LOGGER_NAME) else f"{ROOT_LOGGER_NAME}.{name}"
        logger = logging.getLogger(full_name)
        self._loggers[name] = logger
        return logger

    def set_level(self, level: str):
        """Change the level of the whole package namespace"""
        logging.getLogger(ROOT_LOGGER_NAME).setLevel(getattr(logging, level.upper(), logging.INFO))


# Global logger instance
logger_system = EnetPathLogger()


def get_logger(name: str) -> logging.Logger:
    """Get a logger for a specific component"""
    return logger_system.get_logger(name)


def set_log_level(level: str):
    """Set the level for every enetpath logger"""
    logger_system.set_level(level)

