"""Scaling transformers."""
