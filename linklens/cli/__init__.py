"""Command-line interface."""

from linklens.cli.main import cli


__all__ = ["cli"]
