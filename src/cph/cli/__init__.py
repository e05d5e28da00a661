"""Command-line interface for cph."""

from cph.cli.app import app, main

__all__ = ["app", "main"]
