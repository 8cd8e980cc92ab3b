# ============================================
# enetpath - src/enetpath/utils/config_loader.py
# Configuration management for solver and logging settings
# ============================================

import os
import json
import logging
from pathlib import Path
from datetime import datetime
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Union

import yaml
from dotenv import load_dotenv

# Load environment variables
load_dotenv()

CONFIG_FILES = ("solver_config.yaml", "logging.yaml")


@dataclass
class ConfigMetadata:
    """Where a configuration came from"""
    config_name: str
    file_path: Optional[Path]
    last_modified: Optional[datetime]
    environment: str = "development"


class ConfigValidationError(Exception):
    """Raised when a configuration file cannot be parsed"""
    pass


@dataclass
class SolverSettings:
    """Defaults used by the path solver, cross-validation and grid search"""
    tol: float = 1e-7
    max_iter: int = 100000
    n_lambda: int = 100
    lambda_min_ratio: Optional[float] = None
    n_folds: int = 10
    seed: int = 42
    n_jobs: int = 1
    alpha_grid_size: int = 11
    selection_rule: str = "min"
    alpha_grid: List[float] = field(default_factory=list)


def deep_merge_dicts(dict1: Dict[str, Any], dict2: Dict[str, Any]) -> Dict[str, Any]:
    """Deep merge two dictionaries; values of dict2 win"""
    result = dict1.copy()

    for key, value in dict2.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = deep_merge_dicts(result[key], value)
        else:
            result[key] = value

    return result


class ConfigLoader:
    """
    Configuration management for enetpath

    Features:
    - In-code defaults, overridden by YAML files in the config directory
    - ``${VAR_NAME}`` / ``${VAR_NAME:default}`` environment substitution
    - Dot-path access and runtime overrides
    """

    def __init__(self, config_dir: Optional[Union[str, Path]] = None):
        """
        Initialize ConfigLoader

        Args:
            config_dir: Path to configuration directory. If None, taken from
                ``ENETPATH_CONFIG_DIR`` or ``<project root>/config``.
        """
        self.project_root = self._find_project_root()
        env_dir = os.getenv("ENETPATH_CONFIG_DIR")
        if config_dir is not None:
            self.config_dir = Path(config_dir)
        elif env_dir:
            self.config_dir = Path(env_dir)
        else:
            self.config_dir = self.project_root / "config"
        self.environment = os.getenv("ENVIRONMENT", "development")

        self.configs: Dict[str, Dict[str, Any]] = {}
        self.metadata: Dict[str, ConfigMetadata] = {}

        self.logger = logging.getLogger(__name__)

        self._load_all_configs()

    def _find_project_root(self) -> Path:
        """Find project root directory by looking for key files"""
        current = Path(__file__).resolve()
        markers = ['pyproject.toml', 'setup.py', '.git', 'requirements.txt']

        for parent in current.parents:
            if any((parent / marker).exists() for marker in markers):
                return parent

        return current.parents[3]

    def _load_all_configs(self):
        """Load all configuration files, falling back to defaults"""
        for config_file in CONFIG_FILES:
            config_name = config_file.replace('.yaml', '')
            defaults = self._get_defaults(config_name)
            try:
                self._load_config_file(config_file, config_name, defaults)
            except FileNotFoundError:
                self.configs[config_name] = self._process_environment_variables(defaults)
                self.metadata[config_name] = ConfigMetadata(
                    config_name=config_name,
                    file_path=None,
                    last_modified=None,
                    environment=self.environment
                )

    def _load_config_file(self, filename: str, config_name: str, defaults: Dict[str, Any]):
        """Load a single configuration file on top of its defaults"""
        config_path = self.config_dir / filename

        if not config_path.exists():
            raise FileNotFoundError(f"Config file not found: {config_path}")

        try:
            with open(config_path, 'r', encoding='utf-8') as f:
                config_data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigValidationError(f"Invalid YAML in {filename}: {e}")

        if not isinstance(config_data, dict):
            raise ConfigValidationError(f"Top-level YAML must be a mapping: {config_path}")

        self.configs[config_name] = self._process_environment_variables(
            deep_merge_dicts(defaults, config_data)
        )

        stat = config_path.stat()
        self.metadata[config_name] = ConfigMetadata(
            config_name=config_name,
            file_path=config_path,
            last_modified=datetime.fromtimestamp(stat.st_mtime),
            environment=self.environment
        )

        self.logger.debug(f"Loaded configuration: {config_name}")

    def _process_environment_variables(self, config_data: Dict[str, Any]) -> Dict[str, Any]:
        """
        Process environment variable substitutions in config

        Supports formats:
        - ${VAR_NAME}
        - ${VAR_NAME:default_value}
        """
        def process_value(value):
            if isinstance(value, str):
                if value.startswith('${') and value.endswith('}'):
                    env_spec = value[2:-1]

                    if ':' in env_spec:
                        var_name, default_value = env_spec.split(':', 1)
                        return _coerce_scalar(os.getenv(var_name, default_value))
                    return _coerce_scalar(os.getenv(env_spec, value))

                return value
            elif isinstance(value, dict):
                return {k: process_value(v) for k, v in value.items()}
            elif isinstance(value, list):
                return [process_value(item) for item in value]
            return value

        return process_value(config_data)

    def get_config(self, config_name: str) -> Dict[str, Any]:
        """
        Get complete configuration by name

        Args:
            config_name: Name of configuration (without .yaml extension)

        Returns:
            Copy of the configuration dictionary (empty if unknown)
        """
        if config_name not in self.configs:
            self.logger.warning(f"Configuration '{config_name}' not found")
            return {}

        return json.loads(json.dumps(self.configs[config_name]))

    def get(self, config_name: str, key_path: str, default: Any = None) -> Any:
        """
        Get specific configuration value using dot notation

        Args:
            config_name: Name of configuration
            key_path: Dot-separated path to key (e.g., 'path.n_lambda')
            default: Default value if key not found
        """
        current = self.configs.get(config_name, {})

        try:
            for key in key_path.split('.'):
                current = current[key]
            return current
        except (KeyError, TypeError):
            return default

    def set(self, config_name: str, key_path: str, value: Any):
        """Set configuration value (runtime only, not persisted)"""
        if config_name not in self.configs:
            self.configs[config_name] = {}

        keys = key_path.split('.')
        current = self.configs[config_name]

        for key in keys[:-1]:
            if key not in current:
                current[key] = {}
            current = current[key]

        current[keys[-1]] = value
        self.logger.debug(f"Set config {config_name}.{key_path} = {value}")

    def reload_config(self, config_dir: Optional[Union[str, Path]] = None):
        """Reload configuration files, optionally from a new directory"""
        if config_dir is not None:
            self.config_dir = Path(config_dir)
        self.configs.clear()
        self.metadata.clear()
        self._load_all_configs()
        self.logger.info(f"Reloaded configuration from {self.config_dir}")

    def get_metadata(self, config_name: str) -> Optional[ConfigMetadata]:
        return self.metadata.get(config_name)

    def list_configs(self) -> List[str]:
        return list(self.configs.keys())

    def export_config(self, config_name: str, format: str = 'yaml') -> str:
        """
        Export configuration in specified format

        Args:
            config_name: Name of configuration to export
            format: Export format ('yaml', 'json')
        """
        config = self.get_config(config_name)

        if format.lower() == 'json':
            return json.dumps(config, indent=2, default=str)
        elif format.lower() == 'yaml':
            return yaml.dump(config, default_flow_style=False, indent=2, sort_keys=False)
        raise ValueError(f"Unsupported export format: {format}")

    def write_defaults(self, overwrite: bool = False) -> List[Path]:
        """Write the default configuration files into the config directory"""
        self.config_dir.mkdir(parents=True, exist_ok=True)
        written = []
        for config_file in CONFIG_FILES:
            config_path = self.config_dir / config_file
            if config_path.exists() and not overwrite:
                continue
            with open(config_path, 'w', encoding='utf-8') as f:
                yaml.dump(self._get_defaults(config_file.replace('.yaml', '')), f,
                          default_flow_style=False, indent=2, sort_keys=False)
            written.append(config_path)
        return written

    def _get_defaults(self, config_name: str) -> Dict[str, Any]:
        if config_name == 'solver_config':
            return self._get_solver_config_defaults()
        if config_name == 'logging':
            return self._get_logging_config_defaults()
        return {}

    # Default configuration templates
    def _get_solver_config_defaults(self) -> Dict[str, Any]:
        return {
            'coordinate_descent': {
                'tol': 1e-7,
                'max_iter': 100000
            },
            'path': {
                'n_lambda': 100,
                'lambda_min_ratio': None
            },
            'cross_validation': {
                'n_folds': 10,
                'seed': 42,
                'n_jobs': 1
            },
            'grid_search': {
                'alpha_grid_size': 11,
                'alpha_grid': [],
                'selection_rule': 'min'
            }
        }

    def _get_logging_config_defaults(self) -> Dict[str, Any]:
        return {'level': '${ENETPATH_LOG_LEVEL:INFO}'}


def _coerce_scalar(value: Any) -> Any:
    """Turn substituted environment strings into numbers where possible"""
    if not isinstance(value, str):
        return value
    try:
        return yaml.safe_load(value)
    except yaml.YAMLError:
        return value


# Global configuration instance
config = ConfigLoader()


def get_config(config_name: str) -> Dict[str, Any]:
    """Get complete configuration by name"""
    return config.get_config(config_name)


def get(config_name: str, key_path: str, default: Any = None) -> Any:
    """Get specific configuration value using dot notation"""
    return config.get(config_name, key_path, default)


def reload_configs(config_dir: Optional[Union[str, Path]] = None):
    """Reload all configurations from disk"""
    config.reload_config(config_dir)


def get_solver_settings() -> SolverSettings:
    """Build solver defaults from the loaded configuration"""
    try:
        return SolverSettings(
            tol=float(get('solver_config', 'coordinate_descent.tol', 1e-7)),
            max_iter=int(get('solver_config', 'coordinate_descent.max_iter', 100000)),
            n_lambda=int(get('solver_config', 'path.n_lambda', 100)),
            lambda_min_ratio=_optional_float(get('solver_config', 'path.lambda_min_ratio')),
            n_folds=int(get('solver_config', 'cross_validation.n_folds', 10)),
            seed=int(get('solver_config', 'cross_validation.seed', 42)),
            n_jobs=int(get('solver_config', 'cross_validation.n_jobs', 1)),
            alpha_grid_size=int(get('solver_config', 'grid_search.alpha_grid_size', 11)),
            selection_rule=str(get('solver_config', 'grid_search.selection_rule', 'min')),
            alpha_grid=[float(a) for a in (get('solver_config', 'grid_search.alpha_grid') or [])]
        )
    except (TypeError, ValueError) as e:
        from .exceptions import ConfigurationError
        raise ConfigurationError(f"Invalid solver configuration: {e}",
                                 config_name='solver_config', cause=e)


def _optional_float(value: Any) -> Optional[float]:
    return None if value is None else float(value)
