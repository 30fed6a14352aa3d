"""Load, validate and encode the raw survey table."""

from .pipeline import create_pipeline

__all__ = ["create_pipeline"]
