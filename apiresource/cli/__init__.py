"""Command line interface for apiresource."""

from apiresource.cli.commands import cli, main

__all__ = ["cli", "main"]
