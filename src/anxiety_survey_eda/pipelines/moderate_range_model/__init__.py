"""Linear model of the anxiety level within the 1-7 range."""

from .pipeline import create_pipeline

__all__ = ["create_pipeline"]
