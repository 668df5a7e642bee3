"""TTB alcohol label verification service."""

__version__ = "1.0.0"
