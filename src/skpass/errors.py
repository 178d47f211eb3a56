"""
User-facing store errors.

Each error carries a short title and a longer message so the caller
can show it as a dialog or a console panel.
"""

from __future__ import annotations

from typing import Optional


class PassError(Exception):
    """Base class for errors reported to the user as (title, message)."""

    title = "Error"

    def __init__(self, message: str, title: Optional[str] = None):
        super().__init__(message)
        self.message = message
        if title is not None:
            self.title = title


class MissingRecipients(PassError):
    """Raised when no usable .gpg-id declaration covers an entry."""

    title = "Can not edit"

    def __init__(self) -> None:
        super().__init__(
            "Could not read encryption key to use, .gpg-id file missing or invalid."
        )


class NoSecretKey(PassError):
    """Raised when none of the selected recipients has a local secret key."""

    title = "Check selected users!"

    def __init__(self) -> None:
        super().__init__(
            "None of the selected keys have a secret key available.\n"
            "You will not be able to decrypt any newly added passwords!"
        )


class DeclarationWriteFailed(PassError):
    """Raised when a .gpg-id file cannot be opened for writing."""

    title = "Cannot update"

    def __init__(self) -> None:
        super().__init__("Failed to open .gpg-id for writing.")


class EntryWriteFailed(PassError):
    """Raised when the folder for a new entry cannot be created."""

    title = "Can not edit"

    def __init__(self, path: str):
        super().__init__(f"Failed to create the folder for {path}.")
        self.path = path


class RemoveFailed(PassError):
    """Raised when deleting an entry from disk fails part way."""

    title = "Can not remove"

    def __init__(self, path: str):
        super().__init__(f"Failed to remove {path}.")
        self.path = path
