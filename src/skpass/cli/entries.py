"""Entry commands: show, insert, rm, init, reencrypt, keys."""

from __future__ import annotations

import sys
from typing import Optional

import click
from rich.table import Table

from ..gpg import list_keys
from ..models import UserInfo
from ._common import console, finish, open_store


def _select_users(known: list[UserInfo], requested: tuple[str, ...]) -> list[UserInfo]:
    """Match requested key ids against the keyring.

    A request matches a key by long id or by fingerprint suffix.
    Unknown ids are still declared, just without a secret key.
    """
    selected = []
    for key in requested:
        wanted = key.upper()
        match = next(
            (
                u for u in known
                if u.key_id.upper() == wanted
                or (u.fingerprint and u.fingerprint.upper().endswith(wanted))
            ),
            None,
        )
        if match is None:
            selected.append(UserInfo(key_id=key, enabled=True))
        else:
            selected.append(match.model_copy(update={"enabled": True}))
    return selected


def register_entry_commands(main: click.Group) -> None:
    """Register the entry commands on the main group."""

    @main.command("show")
    @click.argument("path")
    @click.pass_context
    def show(ctx, path):
        """Decrypt and print an entry."""
        store, sink = open_store(ctx)
        if not store.entry_file(path).exists():
            console.print(f"[bold red]{path} is not in the password store.[/]")
            sys.exit(1)
        store.show(path)
        finish(store, sink)

    @main.command("insert")
    @click.argument("path")
    @click.option("--value", default=None, help="Secret to store (prompted if omitted).")
    @click.option("-f", "--force", is_flag=True, help="Overwrite an existing entry.")
    @click.pass_context
    def insert(ctx, path, value: Optional[str], force):
        """Encrypt a new secret into the store."""
        store, sink = open_store(ctx)
        exists = store.entry_file(path).exists()
        if exists and not force:
            console.print(f"[bold red]{path} already exists.[/] Use --force to overwrite.")
            sys.exit(1)

        if value is None:
            if sys.stdin.isatty():
                value = click.prompt(
                    f"Password for {path}", hide_input=True, confirmation_prompt=True,
                )
            else:
                value = click.get_text_stream("stdin").read()
        if not value.endswith("\n"):
            value += "\n"

        if not store.insert(path, value, overwrite=exists):
            sys.exit(1)
        finish(store, sink)
        console.print(f"  [green]Saved[/] {path}")

    @main.command("rm")
    @click.argument("path")
    @click.option("-r", "--recursive", is_flag=True, help="Remove a whole folder.")
    @click.pass_context
    def rm(ctx, path, recursive):
        """Remove an entry or folder."""
        store, sink = open_store(ctx)
        if not store.remove(path, is_dir=recursive):
            sys.exit(1)
        finish(store, sink)
        console.print(f"  [green]Removed[/] {path}")

    @main.command("init")
    @click.argument("keys", nargs=-1, required=True)
    @click.option("-p", "--path", "subfolder", default="", help="Folder to initialise.")
    @click.pass_context
    def init(ctx, keys, subfolder):
        """Declare the recipients of the store (or a folder) and re-encrypt."""
        store, sink = open_store(ctx)
        known = list_keys(store.executor, store.config.gpg_executable)
        users = _select_users(known, keys)
        if not store.init(subfolder, users):
            store.executor.wait()
            sys.exit(1)
        finish(store, sink)
        console.print(f"  [green]Password store initialised for[/] {', '.join(keys)}")

    @main.command("reencrypt")
    @click.argument("path", default="")
    @click.pass_context
    def reencrypt(ctx, path):
        """Re-encrypt entries whose recipients drifted from .gpg-id."""
        store, sink = open_store(ctx)
        report = store.reencrypt_path(path)
        console.print(
            f"  checked [bold]{report.checked}[/], "
            f"re-encrypted [bold]{len(report.reencrypted)}[/], "
            f"skipped [bold]{len(report.skipped)}[/]"
        )
        for name in report.skipped:
            console.print(f"    [yellow]could not decrypt[/] {name}")
        if report.aborted:
            sys.exit(1)
        finish(store, sink)

    @main.command("keys")
    @click.pass_context
    def keys(ctx):
        """List keys usable as recipients."""
        store, _ = open_store(ctx)
        users = list_keys(store.executor, store.config.gpg_executable)
        if not users:
            console.print("[yellow]No keys found.[/]")
            return

        table = Table(title="GPG keys")
        table.add_column("Key ID", style="cyan")
        table.add_column("Name")
        table.add_column("Secret")
        for user in users:
            table.add_row(user.key_id, user.name, "[green]yes[/]" if user.have_secret else "no")
        console.print(table)
