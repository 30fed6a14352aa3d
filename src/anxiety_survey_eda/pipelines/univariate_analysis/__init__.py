"""Single-variable summaries: frequency tables, numeric statistics and plot data."""

from .pipeline import create_pipeline

__all__ = ["create_pipeline"]
