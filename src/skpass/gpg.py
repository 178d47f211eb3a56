"""
GPG command lines and output parsing.

Nothing here touches a private key or an encrypted envelope directly.
We build argument lists for the gpg binary and read back its textual
diagnostics.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable

from .executor import ProcessExecutor
from .models import KEY_ID_LENGTH, UserInfo

logger = logging.getLogger("skpass.gpg")


def decrypt_args(path: Path) -> list[str]:
    """Arguments that decrypt path to stdout."""
    return [
        "-d", "--quiet", "--yes", "--no-encrypt-to",
        "--batch", "--use-agent", str(path),
    ]


def encrypt_args(path: Path, recipients: Iterable[str], overwrite: bool) -> list[str]:
    """Arguments that encrypt stdin to path for every recipient.

    Args:
        path: Output file.
        recipients: Key ids, one -r flag each.
        overwrite: Pass --yes so gpg replaces an existing file.
    """
    args = ["--batch", "-eq", "--output", str(path)]
    for recipient in recipients:
        args += ["-r", recipient]
    if overwrite:
        args.append("--yes")
    args.append("-")
    return args


def list_only_args(path: Path) -> list[str]:
    """Arguments that print the recipients of path without decrypting."""
    return [
        "-v", "--no-secmem-warning", "--no-permission-warning",
        "--list-only", "--keyid-format=long", str(path),
    ]


def parse_recipient_key_ids(output: str) -> list[str]:
    """Extract key ids from gpg --list-only diagnostics.

    A line contributes a key when it has more than four whitespace
    separated fields and the fifth one is exactly 16 characters, e.g.
    ``gpg: public key is 0123456789ABCDEF``. Everything else is ignored.

    Args:
        output: Combined stdout and stderr of gpg.

    Returns:
        Key ids in the order gpg reported them.
    """
    keys = []
    for line in output.splitlines():
        fields = line.split()
        if len(fields) > 4 and len(fields[4]) == KEY_ID_LENGTH:
            keys.append(fields[4])
    return keys


def _parse_colons(output: str) -> list[UserInfo]:
    users: list[UserInfo] = []
    current = None
    for line in output.splitlines():
        fields = line.split(":")
        record = fields[0]
        if record in ("pub", "sec") and len(fields) > 4:
            current = UserInfo(key_id=fields[4])
            users.append(current)
        elif current is None or len(fields) <= 9:
            continue
        elif record == "fpr" and current.fingerprint is None:
            current.fingerprint = fields[9]
        elif record == "uid" and not current.name:
            current.name = fields[9]
    return users


def list_keys(executor: ProcessExecutor, gpg: str = "gpg") -> list[UserInfo]:
    """List public keys, marking the ones with a local secret key.

    Args:
        executor: Executor used for the blocking gpg calls.
        gpg: gpg executable.

    Returns:
        One UserInfo per public key, have_secret filled in.
    """
    public = executor.run_blocking(
        gpg, ["--list-keys", "--with-colons", "--keyid-format=long"],
    )
    if not public.ok:
        logger.error("Listing public keys failed: %s", public.stderr.strip())
        return []

    secret = executor.run_blocking(
        gpg, ["--list-secret-keys", "--with-colons", "--keyid-format=long"],
    )
    secret_ids = {u.key_id for u in _parse_colons(secret.stdout)} if secret.ok else set()

    users = _parse_colons(public.stdout)
    for user in users:
        user.have_secret = user.key_id in secret_ids
    logger.debug("Found %d keys (%d secret)", len(users), len(secret_ids))
    return users
