"""
Store operations -- show, insert, remove and init of password entries.

Entries are addressed by their logical path inside the store
("web/github", no leading slash, no .gpg suffix). Each operation
composes gpg calls with optional git staging and a single-path
commit.

User-facing failures are reported to the notification sink as a
(title, message) pair and the operation returns False; nothing is
retried.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from .errors import (
    DeclarationWriteFailed,
    EntryWriteFailed,
    MissingRecipients,
    NoSecretKey,
    PassError,
    RemoveFailed,
)
from .executor import ProcessExecutor
from .git import GitMirror
from .gpg import decrypt_args, encrypt_args
from .models import Operation, PassConfig, ReencryptReport, UserInfo
from .notify import LoggingSink, NotificationSink
from .recipients import GPG_ID, GpgIdResolver

logger = logging.getLogger("skpass.store")

ENTRY_SUFFIX = ".gpg"


def remove_dir(path: Path) -> bool:
    """Delete a directory tree, stopping at the first failure.

    Subdirectories are handled before files. Whatever was removed
    before the failure stays removed.

    Args:
        path: Directory to delete.

    Returns:
        True if the whole tree is gone.
    """
    if not path.exists():
        return True

    entries = sorted(
        path.iterdir(),
        key=lambda p: (not (p.is_dir() and not p.is_symlink()), p.name),
    )
    for entry in entries:
        if entry.is_dir() and not entry.is_symlink():
            ok = remove_dir(entry)
        else:
            try:
                entry.unlink()
                ok = True
            except OSError as exc:
                logger.error("Cannot remove %s: %s", entry, exc)
                ok = False
        if not ok:
            return False

    try:
        path.rmdir()
    except OSError as exc:
        logger.error("Cannot remove %s: %s", path, exc)
        return False
    return True


class PassStore:
    """Password store driven through external gpg and git processes.

    Args:
        config: Store configuration.
        executor: Runs gpg and git.
        sink: Receives status lines and critical errors.
        resolver: Declared recipients lookup. Defaults to .gpg-id files.
    """

    def __init__(
        self,
        config: PassConfig,
        executor: ProcessExecutor,
        sink: Optional[NotificationSink] = None,
        resolver: Optional[GpgIdResolver] = None,
    ):
        self.config = config
        self.executor = executor
        self.sink = sink or LoggingSink()
        self.resolver = resolver or GpgIdResolver(config.store_path)
        self.git = GitMirror(config, executor)

    # ------------------------------------------------------------------
    # Paths
    # ------------------------------------------------------------------

    @property
    def root(self) -> Path:
        return self.config.store_path

    def entry_file(self, path: str) -> Path:
        """Encrypted file backing a logical entry."""
        return self.root / f"{path.strip('/')}{ENTRY_SUFFIX}"

    def entry_dir(self, path: str) -> Path:
        return self.root / path.strip("/")

    def entry_name(self, file: Path) -> str:
        """Logical entry path for a file or directory in the store."""
        name = Path(file).relative_to(self.root).as_posix()
        if name.endswith(ENTRY_SUFFIX):
            name = name[: -len(ENTRY_SUFFIX)]
        return name

    def commit_message(self, action: str, name: str) -> str:
        return f"{action} for {name} using {self.config.commit_signature}."

    def report(self, error: PassError) -> None:
        """Hand a user-facing error to the sink."""
        logger.warning("%s: %s", error.title, error.message)
        self.sink.critical(error.title, error.message)

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    def show(self, path: str) -> None:
        """Decrypt an entry in the background; result tagged SHOW."""
        self.executor.run_async(
            Operation.SHOW, self.root, self.config.gpg_executable,
            decrypt_args(self.entry_file(path)),
        )

    def show_blocking(self, path: str) -> int:
        """Decrypt an entry and wait.

        The plaintext is published through the sink's last_decrypt hook.

        Returns:
            gpg's exit code.
        """
        result = self.executor.run_blocking(
            self.config.gpg_executable, decrypt_args(self.entry_file(path)), cwd=self.root,
        )
        self.sink.last_decrypt(result.stdout)
        return result.exit_code

    def insert(self, path: str, plaintext: str, overwrite: bool = False) -> bool:
        """Encrypt plaintext into an entry for its declared recipients.

        Args:
            path: Logical entry path.
            plaintext: Secret content, fed to gpg on stdin.
            overwrite: Replace an existing (already tracked) entry.

        Returns:
            False if no recipients are declared or the entry folder
            cannot be created, True once queued.
        """
        file = self.entry_file(path)
        recipients = self.resolver.resolve(file)
        if not recipients:
            self.report(MissingRecipients())
            return False

        try:
            file.parent.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            logger.error("Cannot create folder for %s: %s", path, exc)
            self.report(EntryWriteFailed(path))
            return False

        self.executor.run_async(
            Operation.INSERT, self.root, self.config.gpg_executable,
            encrypt_args(file, recipients, overwrite), stdin=plaintext,
        )
        logger.info("Encrypting %s for %d recipient(s)", path, len(recipients))

        if self.config.commits_enabled:
            if not overwrite:
                self.git.add(file)
            action = "Edit" if overwrite else "Add"
            self.git_commit(file, self.commit_message(action, self.entry_name(file)))
        return True

    def remove(self, path: str, is_dir: bool = False) -> bool:
        """Delete an entry or a whole folder.

        With git enabled the removal goes through ``git rm`` and is
        committed. Otherwise files are deleted from disk; a folder
        is walked recursively and the first failure stops the walk.

        Returns:
            False if a filesystem removal failed.
        """
        target = self.entry_dir(path) if is_dir else self.entry_file(path)
        name = self.entry_name(target)

        if self.config.use_git:
            self.git.rm(target, recursive=is_dir)
            self.git_commit(target, self.commit_message("Remove", name))
            return True

        if is_dir:
            ok = remove_dir(target)
        else:
            try:
                target.unlink()
                ok = True
            except OSError as exc:
                logger.error("Cannot remove %s: %s", target, exc)
                ok = False

        if not ok:
            self.report(RemoveFailed(name))
            return False
        logger.info("Removed %s", name)
        return True

    def init(self, path: str, users: list[UserInfo]) -> bool:
        """Declare the recipients of a folder and re-encrypt beneath it.

        The .gpg-id file is written before the secret key check and is
        left in place when that check fails, so the selection can be
        corrected and init run again.

        Args:
            path: Logical folder path ("" for the store root).
            users: Candidate recipients; enabled ones are declared.

        Returns:
            True if the declaration was accepted and the pass completed.
        """
        directory = self.entry_dir(path)
        gpg_id = directory / GPG_ID
        add_file = self.config.add_gpg_id and not gpg_id.is_file()

        secret_selected = False
        try:
            directory.mkdir(parents=True, exist_ok=True)
            with open(gpg_id, "w", encoding="utf-8") as fh:
                for user in users:
                    if user.enabled:
                        fh.write(user.key_id + "\n")
                        secret_selected |= user.have_secret
        except OSError as exc:
            logger.error("Cannot write %s: %s", gpg_id, exc)
            self.report(DeclarationWriteFailed())
            return False

        if not secret_selected:
            self.report(NoSecretKey())
            return False

        if self.config.commits_enabled and self.config.git_executable:
            if add_file:
                self.git.add(gpg_id, blocking=True)
            name = gpg_id.relative_to(self.root).as_posix()
            self.git_commit(
                gpg_id, f"Added {name} using {self.config.commit_signature}.", blocking=True,
            )

        report = self.reencrypt_path(path)
        return not report.aborted

    def git_commit(self, path: Path, message: str, blocking: bool = False) -> None:
        """Commit exactly one path with the given message."""
        self.git.commit(path, message, blocking=blocking)

    def reencrypt_path(self, path: str = "") -> ReencryptReport:
        """Bring every entry under a folder in line with its .gpg-id."""
        from .reencrypt import Reencryptor

        return Reencryptor(self).reencrypt_path(self.entry_dir(path))
