"""Elastic-net path regression."""
