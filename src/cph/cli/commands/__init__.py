"""Subcommands of the cph CLI."""
