# ============================================
# enetpath - src/enetpath/cli.py
# Command line entry point: cross-validated elastic net on a CSV file
# ============================================

import sys
import json
import argparse
from pathlib import Path
from typing import List, Optional

import pandas as pd

from .models.optimization.grid_search import grid_search
from .models.selection import SelectionRule
from .utils.config_loader import get_solver_settings, reload_configs
from .utils.exceptions import DataValidationError, EnetPathError, log_exception
from .utils.logger import get_logger, set_log_level

logger = get_logger('cli')


def _parse_alphas(value: str) -> List[float]:
    try:
        return [float(part) for part in value.split(',') if part.strip()]
    except ValueError:
        raise argparse.ArgumentTypeError(f"Alphas must be comma-separated numbers, got {value!r}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='enetpath',
        description='Fit a cross-validated elastic-net path to a CSV dataset'
    )
    parser.add_argument('--data', required=True, help='Path to the CSV file')
    parser.add_argument('--target', required=True, help='Name of the response column')
    parser.add_argument('--alphas', type=_parse_alphas, default=None,
                        help='Comma-separated mixing values (default: 11 values over [0, 1])')
    parser.add_argument('--folds', type=int, default=None, help='Number of cross-validation folds')
    parser.add_argument('--seed', type=int, default=None, help='Fold shuffling seed')
    parser.add_argument('--n-jobs', type=int, default=None, help='Worker threads across alphas')
    parser.add_argument('--rule', choices=[rule.value for rule in SelectionRule], default=None,
                        help='Lambda selection rule for the reported coefficients (default from configuration)')
    parser.add_argument('--output', default=None, help='Write the selection as JSON to this path')
    parser.add_argument('--config-dir', default=None, help='Directory holding solver_config.yaml')
    parser.add_argument('--log-level', default=None,
                        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'],
                        help='Logging level')
    parser.add_argument('--drop-non-numeric', action='store_true',
                        help='Drop non-numeric feature columns instead of failing')
    return parser


def load_dataset(path: str, target: str, drop_non_numeric: bool = False):
    """
    Read a CSV and split it into numeric features and the response

    Returns:
        Tuple of (features DataFrame, response Series)
    """
    try:
        frame = pd.read_csv(path)
    except (OSError, pd.errors.ParserError, pd.errors.EmptyDataError) as e:
        raise DataValidationError(f"Could not read {path}: {e}", cause=e)

    if target not in frame.columns:
        raise DataValidationError(f"Target column '{target}' not found in {path}",
                                  validation_errors=[f"Missing column: {target}"])

    y = frame[target]
    if not pd.api.types.is_numeric_dtype(y):
        raise DataValidationError(f"Target column '{target}' is not numeric")

    X = frame.drop(columns=[target])
    non_numeric = [col for col in X.columns if not pd.api.types.is_numeric_dtype(X[col])]
    if non_numeric:
        if not drop_non_numeric:
            raise DataValidationError(
                f"Non-numeric feature columns: {non_numeric}. Encode them or pass --drop-non-numeric",
                validation_errors=[f"Column '{col}' is not numeric" for col in non_numeric]
            )
        logger.warning(f"Dropping non-numeric columns: {non_numeric}")
        X = X.drop(columns=non_numeric)

    if X.shape[1] == 0:
        raise DataValidationError("No numeric feature columns left")

    return X, y


def _format_report(result, rule: str) -> str:
    selection = result.selection
    coefficients = selection.coefficients_for(rule)
    lines = [
        f"alpha       : {result.best_alpha:.4g}",
        f"lambda_min  : {selection.lambda_min:.6g}  (CV MSE {selection.error_min:.6g}, "
        f"{selection.n_nonzero_min} non-zero)",
        f"lambda_1se  : {selection.lambda_1se:.6g}  (CV MSE {selection.error_1se:.6g}, "
        f"{selection.n_nonzero_1se} non-zero)",
        f"coefficients ({rule}):",
    ]
    lines.extend(f"  {name:<24} {value: .6g}" for name, value in coefficients.to_series().items())
    if result.errors:
        lines.append(f"failed alphas: {sorted(result.errors)}")
    return "\n".join(lines)


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    if args.config_dir:
        reload_configs(args.config_dir)
    if args.log_level:
        set_log_level(args.log_level)

    try:
        rule = SelectionRule.parse(args.rule or get_solver_settings().selection_rule).value
        X, y = load_dataset(args.data, args.target, args.drop_non_numeric)
        result = grid_search(X, y, alpha_grid=args.alphas, k=args.folds,
                             seed=args.seed, n_jobs=args.n_jobs)

        print(_format_report(result, rule))

        if args.output:
            payload = {
                'best_alpha': result.best_alpha,
                'selection_rule': rule,
                'selection': result.selection.to_dict(),
                'failed_alphas': {str(alpha): error.message for alpha, error in result.errors.items()},
            }
            Path(args.output).write_text(json.dumps(payload, indent=2, default=str), encoding='utf-8')
            logger.info(f"Selection written to {args.output}")

    except EnetPathError as e:
        log_exception(e, logger)
        print(f"Error: {e.message}", file=sys.stderr)
        return 1

    return 0


if __name__ == '__main__':
    sys.exit(main())
