"""Shared pieces for the CLI command modules.

Provides the Rich console, a console notification sink and the
store factory every command uses.
"""

from __future__ import annotations

import sys

import click
from rich.console import Console
from rich.panel import Panel

from ..config import load_config
from ..executor import ProcessExecutor
from ..models import Operation, PassConfig, ProcessResult
from ..notify import NotificationSink, RecordingSink
from ..store import PassStore

console = Console()


class ConsoleSink(NotificationSink):
    """Prints store events to the terminal."""

    def status(self, message: str, timeout_ms: int = 2000) -> None:
        console.print(f"  [dim]{message}[/]")

    def critical(self, title: str, message: str) -> None:
        console.print(Panel(message, title=title, border_style="red"))

    def process_finished(self, result: ProcessResult) -> None:
        if result.tag == Operation.SHOW and result.ok:
            click.echo(result.stdout, nl=False)
        elif not result.ok:
            label = result.tag.value if result.tag else result.program
            console.print(f"[red]{label} failed[/] ({result.exit_code}) {result.stderr.strip()}")


def get_config(ctx: click.Context) -> PassConfig:
    config = load_config(ctx.obj.get("config_path"))
    if ctx.obj.get("store"):
        config.store_path = ctx.obj["store"].expanduser()
    return config


def open_store(ctx: click.Context) -> tuple[PassStore, RecordingSink]:
    """Build a store wired to the console.

    Returns:
        The store and the recording sink, so callers can check for errors.
    """
    config = get_config(ctx)
    sink = RecordingSink(forward=ConsoleSink())
    executor = ProcessExecutor(listener=sink.process_finished, timeout=config.process_timeout)
    return PassStore(config, executor, sink=sink), sink


def finish(store: PassStore, sink: RecordingSink) -> None:
    """Wait for background processes and exit 1 if anything failed."""
    store.executor.wait()
    if sink.criticals or any(not r.ok for r in sink.results):
        sys.exit(1)
