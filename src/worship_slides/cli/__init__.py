"""Command-line interface for the worship slides catalogue."""

from .main import cli

__all__ = ["cli"]
