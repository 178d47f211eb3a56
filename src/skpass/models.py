"""
Pydantic models for the password store: configuration, candidate
recipients, process results and reconciliation reports.
"""

from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field, field_validator

DEFAULT_STORE = "~/.password-store"
KEY_ID_LENGTH = 16


class Operation(str, Enum):
    """Tags identifying fire-and-forget process results."""

    INIT = "init"
    PULL = "pull"
    PUSH = "push"
    COMMIT = "commit"
    ADD = "add"
    RM = "rm"
    SHOW = "show"
    INSERT = "insert"


class PassConfig(BaseModel):
    """Everything the store needs to know about its environment."""

    store_path: Path = Field(default=Path(DEFAULT_STORE), validate_default=True)
    gpg_executable: str = "gpg"
    git_executable: str = "git"
    use_git: bool = False
    use_webdav: bool = False
    auto_pull: bool = False
    auto_push: bool = False
    add_gpg_id: bool = True
    commit_signature: str = "QtPass"
    process_timeout: Optional[float] = Field(
        default=None, description="Seconds before an external process is killed"
    )

    @field_validator("store_path")
    @classmethod
    def _expand_store(cls, value: Path) -> Path:
        return Path(value).expanduser()

    @property
    def commits_enabled(self) -> bool:
        """Whether store changes are mirrored into git.

        A WebDAV-synced store does its own transport, so git is skipped.
        """
        return self.use_git and not self.use_webdav


class UserInfo(BaseModel):
    """A candidate recipient for a .gpg-id declaration."""

    key_id: str
    name: str = ""
    fingerprint: Optional[str] = None
    enabled: bool = False
    have_secret: bool = False


class ProcessResult(BaseModel):
    """Outcome of one external process run."""

    tag: Optional[Operation] = None
    program: str
    args: list[str] = Field(default_factory=list)
    exit_code: int = 0
    stdout: str = ""
    stderr: str = ""

    @property
    def ok(self) -> bool:
        return self.exit_code == 0


class ReencryptReport(BaseModel):
    """Summary of one reconciliation pass."""

    root: Path
    checked: int = 0
    unchanged: int = 0
    reencrypted: list[str] = Field(default_factory=list)
    skipped: list[str] = Field(default_factory=list)
    aborted: bool = False
