"""Input transformations applied before path fitting."""
