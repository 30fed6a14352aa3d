"""Each predictor against the anxiety level, plot form chosen by variable type."""

from .pipeline import create_pipeline

__all__ = ["create_pipeline"]
