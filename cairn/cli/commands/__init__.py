"""Subcommand implementations registered by ``cairn.cli.app``."""
