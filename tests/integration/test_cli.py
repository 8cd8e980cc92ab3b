"""
tests/integration/test_cli.py

Integration tests for the enetpath command line entry point.

Author: enetpath Team
"""

import json
import pytest
import yaml

from enetpath.cli import build_parser, load_dataset, main
from enetpath.utils import config_loader
from enetpath.utils.config_loader import ConfigLoader
from enetpath.utils.exceptions import DataValidationError


@pytest.fixture
def housing_csv(tmp_path, housing_frame):
    frame, price = housing_frame
    data = frame.assign(price=price)
    path = tmp_path / "housing.csv"
    data.to_csv(path, index=False)
    return path


@pytest.fixture
def isolated_config(monkeypatch):
    """Swap the global configuration so --config-dir cannot leak into other tests"""
    monkeypatch.setattr(config_loader, 'config', ConfigLoader())

# ============================================
# TEST ARGUMENT PARSING
# ============================================

class TestParser:
    """Test command line options"""

    def test_alphas_parsed(self):
        args = build_parser().parse_args(['--data', 'x.csv', '--target', 'y', '--alphas', '0, 0.5,1'])
        assert args.alphas == [0.0, 0.5, 1.0]
        assert args.rule is None

    def test_bad_alphas_exit(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args(['--data', 'x.csv', '--target', 'y', '--alphas', 'a,b'])

# ============================================
# TEST DATASET LOADING
# ============================================

class TestLoadDataset:
    """Test CSV loading and column checks"""

    def test_splits_target(self, housing_csv):
        X, y = load_dataset(str(housing_csv), 'price')

        assert 'price' not in X.columns
        assert y.name == 'price'
        assert X.shape[1] == 5

    def test_missing_file(self, tmp_path):
        with pytest.raises(DataValidationError):
            load_dataset(str(tmp_path / "missing.csv"), 'price')

    def test_missing_target(self, housing_csv):
        with pytest.raises(DataValidationError):
            load_dataset(str(housing_csv), 'value')

    def test_non_numeric_columns(self, tmp_path, housing_frame):
        frame, price = housing_frame
        path = tmp_path / "with_city.csv"
        frame.assign(city='springfield', price=price).to_csv(path, index=False)

        with pytest.raises(DataValidationError):
            load_dataset(str(path), 'price')
        X, _ = load_dataset(str(path), 'price', drop_non_numeric=True)
        assert 'city' not in X.columns

# ============================================
# TEST MAIN
# ============================================

class TestMain:
    """Run the full command"""

    def test_successful_run_writes_json(self, housing_csv, tmp_path, capsys, isolated_config):
        output = tmp_path / "selection.json"
        code = main(['--data', str(housing_csv), '--target', 'price', '--alphas', '0.5,1',
                     '--folds', '3', '--seed', '0', '--output', str(output)])

        assert code == 0
        assert "lambda_min" in capsys.readouterr().out

        payload = json.loads(output.read_text(encoding='utf-8'))
        assert payload['best_alpha'] in (0.5, 1.0)
        assert payload['selection_rule'] == 'min'
        assert set(payload['selection']['coefficients_min']['coefficients']) == {
            'sqft', 'bedrooms', 'age', 'garage', 'noise_feature'
        }

    def test_one_se_rule(self, housing_csv, capsys, isolated_config):
        code = main(['--data', str(housing_csv), '--target', 'price', '--alphas', '1',
                     '--folds', '3', '--rule', '1se'])

        assert code == 0
        assert "coefficients (1se)" in capsys.readouterr().out

    def test_config_dir_changes_defaults(self, housing_csv, tmp_path, capsys, isolated_config):
        config_dir = tmp_path / "cfg"
        config_dir.mkdir()
        (config_dir / "solver_config.yaml").write_text(yaml.dump({
            'path': {'n_lambda': 8},
            'grid_search': {'selection_rule': '1se'}
        }))
        output = tmp_path / "out.json"

        code = main(['--data', str(housing_csv), '--target', 'price', '--alphas', '1',
                     '--folds', '3', '--config-dir', str(config_dir), '--output', str(output)])

        assert code == 0
        assert json.loads(output.read_text(encoding='utf-8'))['selection_rule'] == '1se'
        assert config_loader.config.get('solver_config', 'path.n_lambda') == 8

    def test_errors_return_exit_code(self, housing_csv, capsys, isolated_config):
        code = main(['--data', str(housing_csv), '--target', 'missing', '--alphas', '1'])

        assert code == 1
        assert "Error:" in capsys.readouterr().err

    def test_invalid_alpha_returns_exit_code(self, housing_csv, isolated_config):
        assert main(['--data', str(housing_csv), '--target', 'price', '--alphas', '1.5']) == 1
