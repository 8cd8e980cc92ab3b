"""
conftest.py

Pytest configuration and fixtures for enetpath tests.
Provides shared regression datasets, solver settings and helper fixtures
for clean, reproducible testing across all test modules.

Author: enetpath Team
"""

import sys
import warnings
import pytest
import numpy as np
import pandas as pd
from pathlib import Path

# Add project root and src to Python path for imports
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))
sys.path.insert(0, str(project_root / "src"))

from tests.utils.data_factories import RegressionDataFactory

# ============================================
# PYTEST CONFIGURATION
# ============================================

def pytest_configure(config):
    """Configure pytest settings and markers"""
    config.addinivalue_line("markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')")
    config.addinivalue_line("markers", "integration: marks tests as integration tests")
    config.addinivalue_line("markers", "unit: marks tests as unit tests")

def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on their location"""
    for item in items:
        if "integration" in str(item.fspath):
            item.add_marker(pytest.mark.integration)
        elif "unit" in str(item.fspath):
            item.add_marker(pytest.mark.unit)

# ============================================
# DATA FIXTURES
# ============================================

@pytest.fixture
def linear_data():
    """Five features, known sparse coefficients, mild noise"""
    return RegressionDataFactory.create_linear_data(
        n_samples=120,
        coef=[3.0, -2.0, 0.0, 0.0, 1.5],
        noise=0.5,
        intercept=4.0,
        seed=42
    )

@pytest.fixture
def single_signal_data():
    """Three features, 100 rows, only the first one drives the response"""
    return RegressionDataFactory.create_single_signal_data(n_samples=100, seed=7)

@pytest.fixture
def housing_frame():
    """Named-column design matrix and target, like a dummy-encoded housing table"""
    return RegressionDataFactory.create_housing_like_data(n_samples=150, seed=3)

@pytest.fixture
def fast_solver():
    """Solver options that keep paths short in tests"""
    return {'n_lambda': 30}

@pytest.fixture
def no_degenerate_warnings():
    """Silence DegenerateFeature warnings for tests that do not check them"""
    from enetpath.utils.exceptions import DegenerateFeature

    with warnings.catch_warnings():
        warnings.simplefilter("ignore", DegenerateFeature)
        yield
