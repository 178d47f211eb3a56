"""
Git mirror -- thin wrappers that keep the store's git repo in step.

Every call runs inside the store directory. Async calls are tagged
so a listener can tell a finished pull from a finished push.
"""

from __future__ import annotations

import logging
from pathlib import Path

from .executor import ProcessExecutor
from .models import Operation, PassConfig, ProcessResult

logger = logging.getLogger("skpass.git")


class GitMirror:
    """Git operations on the password store."""

    def __init__(self, config: PassConfig, executor: ProcessExecutor):
        self.config = config
        self.executor = executor

    @property
    def git(self) -> str:
        return self.config.git_executable

    @property
    def cwd(self) -> Path:
        return self.config.store_path

    def _async(self, tag: Operation, args: list[str]) -> None:
        self.executor.run_async(tag, self.cwd, self.git, args)

    def init(self) -> None:
        """Turn the store into a git repository."""
        self.config.store_path.mkdir(parents=True, exist_ok=True)
        self._async(Operation.INIT, ["init", str(self.config.store_path)])

    def pull(self) -> None:
        self._async(Operation.PULL, ["pull"])

    def pull_blocking(self) -> ProcessResult:
        """Pull and wait, so the caller sees the updated tree."""
        result = self.executor.run_blocking(self.git, ["pull"], cwd=self.cwd)
        if not result.ok:
            logger.warning("git pull failed: %s", result.stderr.strip())
        return result

    def push(self) -> None:
        self._async(Operation.PUSH, ["push"])

    def add(self, path: Path, blocking: bool = False) -> None:
        if blocking:
            self.executor.run_blocking(self.git, ["add", str(path)], cwd=self.cwd)
        else:
            self._async(Operation.ADD, ["add", str(path)])

    def rm(self, path: Path, recursive: bool = False) -> None:
        self._async(Operation.RM, ["rm", "-rf" if recursive else "-f", str(path)])

    def commit(self, path: Path, message: str, blocking: bool = False) -> None:
        """Commit exactly one path; other staged changes stay staged.

        Args:
            path: File or directory to commit.
            message: Commit message.
            blocking: Wait for git to finish.
        """
        args = ["commit", "-m", message, "--", str(path)]
        if blocking:
            self.executor.run_blocking(self.git, args, cwd=self.cwd)
        else:
            self._async(Operation.COMMIT, args)
