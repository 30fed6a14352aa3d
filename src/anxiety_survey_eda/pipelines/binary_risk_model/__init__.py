"""Logistic model of high anxiety (level 8-10) vs. low/moderate (1-7)."""

from .pipeline import create_pipeline

__all__ = ["create_pipeline"]
