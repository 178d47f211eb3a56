"""
Recipient resolution -- which keys a store entry must be encrypted to.

Each directory may carry a .gpg-id file listing key ids, one per line.
An entry inherits the declaration of the nearest enclosing directory,
up to and including the store root.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

logger = logging.getLogger("skpass.recipients")

GPG_ID = ".gpg-id"


def read_gpg_id(gpg_id: Path) -> list[str]:
    """Read key ids from a declaration file.

    Blank lines and '#' comments are ignored.

    Args:
        gpg_id: Path to a .gpg-id file.

    Returns:
        Key ids in file order, or [] if the file is unreadable.
    """
    try:
        text = gpg_id.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        logger.warning("Cannot read %s: %s", gpg_id, exc)
        return []

    keys = []
    for line in text.splitlines():
        line = line.strip()
        if line and not line.startswith("#"):
            keys.append(line)
    return keys


def find_gpg_id(path: Path, store_root: Path) -> Optional[Path]:
    """Locate the declaration file governing a path.

    Args:
        path: An entry file (or directory) inside the store.
        store_root: Top of the password store.

    Returns:
        Path to the nearest .gpg-id, or None.
    """
    root = store_root.resolve()
    current = path.resolve()
    if not current.is_dir():
        current = current.parent

    if current != root and root not in current.parents:
        logger.debug("%s is outside the store %s", path, root)
        return None

    while True:
        candidate = current / GPG_ID
        if candidate.is_file():
            return candidate
        if current == root:
            return None
        current = current.parent


class GpgIdResolver:
    """Resolves the declared RecipientSet for paths inside one store."""

    def __init__(self, store_root: Path):
        self.store_root = Path(store_root).expanduser()

    def resolve(self, path: Path) -> list[str]:
        """Return the key ids declared for path, or [] if none apply."""
        gpg_id = find_gpg_id(Path(path), self.store_root)
        if gpg_id is None:
            return []
        return read_gpg_id(gpg_id)
