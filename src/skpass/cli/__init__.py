"""
SKPass CLI -- password-store commands without pass.

The main Click group is defined here and the command modules
register themselves onto it.

Entry point: skpass.cli:main
"""

from __future__ import annotations

import logging
from pathlib import Path

import click

from .. import __version__


@click.group()
@click.version_option(version=__version__, prog_name="skpass")
@click.option(
    "--config", "config_path", type=click.Path(path_type=Path), default=None,
    help="Config file (default: $SKPASS_HOME/config.yaml).",
)
@click.option("--store", type=click.Path(path_type=Path), default=None, help="Password store directory.")
@click.option("-v", "--verbose", is_flag=True, help="Log every gpg and git call.")
@click.pass_context
def main(ctx, config_path, store, verbose):
    """SKPass -- gpg-encrypted password store with an optional git mirror."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config_path
    ctx.obj["store"] = store


from .entries import register_entry_commands
from .git_cmd import register_git_commands

register_entry_commands(main)
register_git_commands(main)
