"""Git commands: init, pull, push."""

from __future__ import annotations

import click

from ._common import console, finish, open_store


def register_git_commands(main: click.Group) -> None:
    """Register the git command group."""

    @main.group()
    def git():
        """Keep the store's git mirror in step."""

    @git.command("init")
    @click.pass_context
    def git_init(ctx):
        """Create a git repository in the store."""
        store, sink = open_store(ctx)
        store.git.init()
        finish(store, sink)
        console.print(f"  [green]Git repository ready in[/] {store.root}")

    @git.command("pull")
    @click.pass_context
    def git_pull(ctx):
        """Pull remote changes into the store."""
        store, sink = open_store(ctx)
        store.git.pull()
        finish(store, sink)

    @git.command("push")
    @click.pass_context
    def git_push(ctx):
        """Push local commits."""
        store, sink = open_store(ctx)
        store.git.push()
        finish(store, sink)
