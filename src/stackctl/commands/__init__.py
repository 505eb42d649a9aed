"""Subcommand modules for stackctl.

Provides register_commands() which uses deferred imports to keep
``stackctl --help`` fast.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import click


def register_commands(cli: click.Group) -> None:
    """Register all command groups on the root CLI group."""
    from stackctl.commands.app import app_group
    from stackctl.commands.project import project

    cli.add_command(project)
    cli.add_command(app_group)
