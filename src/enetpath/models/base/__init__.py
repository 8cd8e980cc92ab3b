"""Records shared by the path solver and cross-validation."""
