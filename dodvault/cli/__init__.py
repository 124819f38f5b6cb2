"""
cli — command-line interface for dodvault.

Entry points
────────────
  python -m dodvault   (via dodvault/__main__.py)
  dodvault             (via pyproject.toml [project.scripts])

Subcommands: gui | list | show | save
"""

from dodvault.cli.main import build_parser, cmd_list, cmd_save, cmd_show, main

__all__ = ["build_parser", "cmd_list", "cmd_save", "cmd_show", "main"]
