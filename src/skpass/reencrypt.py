"""
Re-encryption -- reconcile encrypted files with their declared recipients.

For every *.gpg file under a folder:

    declared  = sorted(.gpg-id keys)
    actual    = sorted(keys gpg --list-only reports)
    declared == actual  ->  leave it alone
    otherwise           ->  decrypt, re-encrypt for declared, commit

Files are handled strictly one after another with blocking calls,
because every commit has to name exactly its own file. A file that
cannot be decrypted is skipped; a file with no declared recipients
stops the whole pass.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import TYPE_CHECKING, Iterator

from .errors import MissingRecipients
from .gpg import decrypt_args, encrypt_args, list_only_args, parse_recipient_key_ids
from .models import ReencryptReport
from .notify import DECRYPT_FAILED

if TYPE_CHECKING:
    from .store import PassStore

logger = logging.getLogger("skpass.reencrypt")


def iter_encrypted_files(root: Path) -> Iterator[Path]:
    """Yield every *.gpg file under root in a stable order.

    Files of a directory come before its subdirectories; both are
    sorted by name.
    """
    for dirpath, dirnames, filenames in os.walk(root):
        dirnames.sort()
        for name in sorted(filenames):
            if name.endswith(".gpg"):
                yield Path(dirpath) / name


class Reencryptor:
    """Runs reconciliation passes for one store."""

    def __init__(self, store: "PassStore"):
        self.store = store
        self.config = store.config
        self.executor = store.executor
        self.sink = store.sink
        self.resolver = store.resolver

    def _gpg(self, args: list[str], stdin=None):
        return self.executor.run_blocking(
            self.config.gpg_executable, args, stdin=stdin, cwd=self.config.store_path,
        )

    def actual_recipients(self, file: Path) -> list[str]:
        """Sorted key ids file is currently encrypted to."""
        result = self._gpg(list_only_args(file))
        return sorted(parse_recipient_key_ids(result.stdout + result.stderr))

    def reencrypt_path(self, root: Path) -> ReencryptReport:
        """Run one reconciliation pass rooted at a folder.

        Args:
            root: Absolute folder inside the store.

        Returns:
            ReencryptReport describing what happened.
        """
        report = ReencryptReport(root=root)
        self.sink.status(f"Re-encrypting from folder {root}", 3000)
        self.sink.start_reencrypt()
        try:
            # Background inserts and commits must land before we look.
            self.executor.wait()
            if self.config.auto_pull:
                self.sink.status("Updating password-store", 2000)
                self.store.git.pull_blocking()

            self._walk(root, report)

            if self.config.auto_push and not report.aborted:
                self.sink.status("Updating password-store", 2000)
                self.store.git.push()
        finally:
            self.sink.end_reencrypt()

        logger.info(
            "Re-encryption of %s: %d checked, %d re-encrypted, %d skipped%s",
            root, report.checked, len(report.reencrypted), len(report.skipped),
            " (aborted)" if report.aborted else "",
        )
        return report

    def _walk(self, root: Path, report: ReencryptReport) -> None:
        current_dir = None
        declared: list[str] = []

        for file in iter_encrypted_files(root):
            report.checked += 1
            if file.parent != current_dir:
                declared = sorted(self.resolver.resolve(file))
                current_dir = file.parent

            if self.actual_recipients(file) == declared:
                report.unchanged += 1
                continue

            name = self.store.entry_name(file)
            logger.info("Re-encrypting %s for %s", name, ", ".join(declared))
            if not self._reencrypt_file(file, name, report):
                report.aborted = True
                return

    def _reencrypt_file(self, file: Path, name: str, report: ReencryptReport) -> bool:
        """Decrypt and re-encrypt one file. Returns False to abort the pass."""
        self.sink.last_decrypt(DECRYPT_FAILED)
        plaintext = self._gpg(decrypt_args(file)).stdout
        self.sink.last_decrypt(plaintext)

        if not plaintext or plaintext == DECRYPT_FAILED:
            logger.warning("Decrypt error on re-encrypt of %s, skipping", name)
            report.skipped.append(name)
            return True

        if not plaintext.endswith("\n"):
            plaintext += "\n"
            self.sink.last_decrypt(plaintext)

        recipients = self.resolver.resolve(file)
        if not recipients:
            error = MissingRecipients()
            self.store.report(error)
            return False

        result = self._gpg(
            ["--yes", *encrypt_args(file, recipients, overwrite=False)], stdin=plaintext,
        )
        if not result.ok:
            logger.error("Re-encrypting %s failed: %s", name, result.stderr.strip())
            report.skipped.append(name)
            return True

        if self.config.commits_enabled:
            self.store.git.add(file, blocking=True)
            self.store.git_commit(file, self.store.commit_message("Edit", name), blocking=True)

        report.reencrypted.append(name)
        return True
