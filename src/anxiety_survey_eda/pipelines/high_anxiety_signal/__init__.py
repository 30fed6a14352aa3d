"""Mutual information, permutation test and tree diagnostic within the 8-10 subgroup."""

from .pipeline import create_pipeline

__all__ = ["create_pipeline"]
