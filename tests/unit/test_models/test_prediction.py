"""
tests/unit/test_models/test_prediction.py

Unit tests for predictions from coefficient vectors.

Author: enetpath Team
"""

import numpy as np
import pandas as pd
import pytest

from enetpath.models.base.path_types import CoefficientVector
from enetpath.models.prediction import predict
from enetpath.utils.exceptions import DataValidationError, NumericalError, SchemaMismatch


@pytest.fixture
def named_vector():
    return CoefficientVector(intercept=1.0, coef=[2.0, 0.0, -1.0], feature_names=['a', 'b', 'c'])

# ============================================
# TEST PREDICT
# ============================================

class TestPredict:
    """Test linear predictions and schema checks"""

    def test_matrix_input(self, named_vector):
        X = np.array([[1.0, 5.0, 1.0], [0.0, 0.0, 0.0]])
        np.testing.assert_allclose(predict(named_vector, X), [2.0, 1.0])

    def test_single_row_vector(self, named_vector):
        result = predict(named_vector, [1.0, 1.0, 1.0])
        assert result.shape == (1,)
        assert result[0] == pytest.approx(2.0)

    def test_series_input(self, named_vector):
        row = pd.Series({'a': 2.0, 'b': 9.0, 'c': 1.0})
        assert predict(named_vector, row)[0] == pytest.approx(4.0)

    def test_dataframe_with_matching_columns(self, named_vector):
        frame = pd.DataFrame({'a': [1.0, 2.0], 'b': [0.0, 0.0], 'c': [3.0, 0.0]})
        np.testing.assert_allclose(predict(named_vector, frame), [0.0, 5.0])

    def test_wrong_column_count(self, named_vector):
        with pytest.raises(SchemaMismatch) as exc_info:
            predict(named_vector, np.ones((2, 4)))
        assert exc_info.value.context['expected_features'] == 3
        assert exc_info.value.context['received_features'] == 4

    def test_wrong_column_names(self, named_vector):
        frame = pd.DataFrame({'a': [1.0], 'b': [0.0], 'z': [3.0]})

        with pytest.raises(SchemaMismatch) as exc_info:
            predict(named_vector, frame)
        assert exc_info.value.context['received_columns'] == ['a', 'b', 'z']

    def test_reordered_columns_rejected(self, named_vector):
        frame = pd.DataFrame({'c': [1.0], 'b': [0.0], 'a': [3.0]})

        with pytest.raises(SchemaMismatch):
            predict(named_vector, frame)

    def test_schema_checked_before_values(self, named_vector):
        with pytest.raises(SchemaMismatch):
            predict(named_vector, np.full((1, 2), np.nan))

    def test_non_finite_values(self, named_vector):
        with pytest.raises(NumericalError):
            predict(named_vector, [[1.0, np.inf, 0.0]])

    def test_non_numeric_values(self, named_vector):
        with pytest.raises(DataValidationError):
            predict(named_vector, [['x', 'y', 'z']])

    def test_unnamed_vector_accepts_any_frame(self):
        vector = CoefficientVector(intercept=0.0, coef=[1.0, 1.0])
        frame = pd.DataFrame({'p': [1.0], 'q': [2.0]})

        assert predict(vector, frame)[0] == pytest.approx(3.0)
