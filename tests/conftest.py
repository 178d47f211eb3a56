"""Shared test fixtures for skpass.

FakeExecutor stands in for gpg and git. An "encrypted" file is a
JSON envelope holding its recipients and plaintext, which is enough
for the store to list recipients, decrypt and re-encrypt.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Optional

import pytest

from skpass.models import PassConfig, ProcessResult
from skpass.notify import RecordingSink
from skpass.store import PassStore

K1 = "AAAAAAAAAAAAAAA1"
K2 = "BBBBBBBBBBBBBBB2"
K3 = "CCCCCCCCCCCCCCC3"


def write_envelope(path: Path, recipients: list[str], plaintext: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps({"recipients": recipients, "plaintext": plaintext}))


def read_envelope(path: Path) -> dict:
    return json.loads(path.read_text())


class FakeExecutor:
    """Scripted gpg/git that records every call."""

    def __init__(self, listener=None, timeout=None, secret_keys=(K1,)):
        self.listener = listener
        self.timeout = timeout
        self.secret_keys = set(secret_keys)
        self.calls: list[dict] = []
        self.waits = 0

    def run_blocking(self, program, args, stdin=None, cwd=None) -> ProcessResult:
        return self._dispatch(None, program, list(args), stdin, cwd, "blocking")

    def run_async(self, tag, cwd, program, args, stdin=None, read_stdout=True, read_stderr=True):
        result = self._dispatch(tag, program, list(args), stdin, cwd, "async")
        if self.listener is not None:
            self.listener(result)

    def wait(self) -> None:
        self.waits += 1

    # -- inspection helpers -------------------------------------------

    def gpg_calls(self, flag: Optional[str] = None) -> list[dict]:
        return [
            c for c in self.calls
            if c["program"] == "gpg" and (flag is None or flag in c["args"])
        ]

    def git_calls(self, sub: Optional[str] = None) -> list[dict]:
        return [
            c for c in self.calls
            if c["program"] == "git" and (sub is None or c["args"][0] == sub)
        ]

    # -- simulation ----------------------------------------------------

    def _dispatch(self, tag, program, args, stdin, cwd, mode) -> ProcessResult:
        self.calls.append(
            {"mode": mode, "tag": tag, "program": program, "args": args, "stdin": stdin}
        )
        result = ProcessResult(tag=tag, program=program, args=args)
        if program == "gpg":
            self._gpg(args, stdin, result)
        return result

    def _gpg(self, args: list[str], stdin, result: ProcessResult) -> None:
        if "-eq" in args:
            out = Path(args[args.index("--output") + 1])
            if out.exists() and "--yes" not in args:
                result.exit_code = 2
                result.stderr = f"gpg: {out}: file exists"
                return
            recipients = [args[i + 1] for i, a in enumerate(args) if a == "-r"]
            write_envelope(out, recipients, stdin or "")
        elif "--list-only" in args:
            env = read_envelope(Path(args[-1]))
            lines = ["gpg: armor header: Version: fake"]
            for key in env["recipients"]:
                lines.append(f"gpg: public key is {key}")
                lines.append(f"gpg: encrypted with 2048-bit RSA key, ID {key}, created 2020-01-01")
            result.exit_code = 2
            result.stderr = "\n".join(lines) + "\n"
        elif "-d" in args:
            env = read_envelope(Path(args[-1]))
            if self.secret_keys & set(env["recipients"]):
                result.stdout = env["plaintext"]
            else:
                result.exit_code = 2
                result.stderr = "gpg: decryption failed: No secret key"


@pytest.fixture
def store_root(tmp_path: Path) -> Path:
    root = tmp_path / "password-store"
    root.mkdir()
    return root


@pytest.fixture
def config(store_root: Path) -> PassConfig:
    return PassConfig(store_path=store_root)


@pytest.fixture
def executor() -> FakeExecutor:
    return FakeExecutor()


@pytest.fixture
def sink() -> RecordingSink:
    return RecordingSink()


@pytest.fixture
def store(config: PassConfig, executor: FakeExecutor, sink: RecordingSink) -> PassStore:
    return PassStore(config, executor, sink=sink)


@pytest.fixture
def git_store(store: PassStore) -> PassStore:
    store.config.use_git = True
    return store


def declare(directory: Path, *keys: str) -> Path:
    directory.mkdir(parents=True, exist_ok=True)
    gpg_id = directory / ".gpg-id"
    gpg_id.write_text("".join(k + "\n" for k in keys), encoding="utf-8")
    return gpg_id


