"""Cairn CLI: Typer-based command-line interface.

Provides the ``cairn`` command with one subcommand per repository
operation. Output uses Rich; user-facing failures are printed and the
process exits cleanly.
"""
