"""Command-line interface for the retreat ledger."""

from retiros.cli.commands import build_parser, parse_args, run_command

__all__ = ["build_parser", "parse_args", "run_command"]
