"""Path solver, selection, grid search and prediction."""
