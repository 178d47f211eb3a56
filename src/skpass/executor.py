"""
Process executor -- runs gpg and git on behalf of the store.

Two modes:

    run_blocking  ->  caller waits, gets a ProcessResult back
    run_async     ->  queued onto one worker thread, result handed
                      to the listener callback when the process exits

Queued jobs run one at a time in submission order, so an insert
followed by its git add and git commit always lands in that order.
"""

from __future__ import annotations

import logging
import queue
import subprocess
import threading
from pathlib import Path
from typing import Callable, Optional

from .models import Operation, ProcessResult

logger = logging.getLogger("skpass.executor")

Listener = Callable[[ProcessResult], None]


class ProcessExecutor:
    """Runs external programs in blocking or fire-and-forget mode.

    Args:
        listener: Called with each finished async ProcessResult.
        timeout: Seconds before a process is killed. None waits forever.
    """

    def __init__(
        self,
        listener: Optional[Listener] = None,
        timeout: Optional[float] = None,
    ):
        self.listener = listener
        self.timeout = timeout
        self._queue: queue.Queue = queue.Queue()
        self._worker: Optional[threading.Thread] = None
        self._lock = threading.Lock()

    def run_blocking(
        self,
        program: str,
        args: list[str],
        stdin: Optional[str] = None,
        cwd: Optional[Path] = None,
    ) -> ProcessResult:
        """Run a program and wait for it to exit.

        Args:
            program: Executable name or path.
            args: Arguments, without the program itself.
            stdin: Text fed to the process input channel.
            cwd: Working directory.

        Returns:
            ProcessResult with exit code and captured output.
        """
        return self._run(None, program, args, stdin, cwd, True, True)

    def run_async(
        self,
        tag: Operation,
        cwd: Optional[Path],
        program: str,
        args: list[str],
        stdin: Optional[str] = None,
        read_stdout: bool = True,
        read_stderr: bool = True,
    ) -> None:
        """Queue a program run; the result goes to the listener.

        Args:
            tag: Operation identifier attached to the result.
            cwd: Working directory.
            program: Executable name or path.
            args: Arguments, without the program itself.
            stdin: Text fed to the process input channel.
            read_stdout: Capture stdout (otherwise discarded).
            read_stderr: Capture stderr (otherwise discarded).
        """
        self._queue.put((tag, program, list(args), stdin, cwd, read_stdout, read_stderr))
        self._ensure_worker()

    def wait(self) -> None:
        """Block until every queued job has finished.

        Called from a listener (i.e. on the worker itself) this returns
        at once, since the job being delivered can never finish first.
        """
        if threading.current_thread() is self._worker:
            return
        self._queue.join()

    def _ensure_worker(self) -> None:
        with self._lock:
            if self._worker is None or not self._worker.is_alive():
                self._worker = threading.Thread(
                    target=self._drain, name="skpass-executor", daemon=True,
                )
                self._worker.start()

    def _drain(self) -> None:
        while True:
            job = self._queue.get()
            try:
                result = self._run(*job)
                if self.listener is not None:
                    self.listener(result)
            except Exception as exc:
                logger.error("Listener failed for %s: %s", job[0], exc)
            finally:
                self._queue.task_done()

    def _run(
        self,
        tag: Optional[Operation],
        program: str,
        args: list[str],
        stdin: Optional[str],
        cwd: Optional[Path],
        read_stdout: bool,
        read_stderr: bool,
    ) -> ProcessResult:
        logger.debug("%s %s", program, " ".join(args))
        result = ProcessResult(tag=tag, program=program, args=list(args))
        try:
            proc = subprocess.run(
                [program, *args],
                input=stdin,
                stdout=subprocess.PIPE if read_stdout else subprocess.DEVNULL,
                stderr=subprocess.PIPE if read_stderr else subprocess.DEVNULL,
                encoding="utf-8",
                errors="surrogateescape",
                cwd=str(cwd) if cwd else None,
                timeout=self.timeout,
                check=False,
            )
        except (OSError, ValueError, subprocess.TimeoutExpired) as exc:
            logger.error("Could not run %s: %s", program, exc)
            result.exit_code = -1
            result.stderr = str(exc)
            return result

        result.exit_code = proc.returncode
        result.stdout = proc.stdout or ""
        result.stderr = proc.stderr or ""
        if proc.returncode != 0:
            logger.error(
                "%s exited with %d: %s", program, proc.returncode, result.stderr.strip(),
            )
        return result
