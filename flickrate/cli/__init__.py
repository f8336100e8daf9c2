"""Command line interface."""

from flickrate.cli.main import cli


__all__ = ["cli"]
