"""Exception hierarchy for the scaffolding pipeline."""

from __future__ import annotations


class ScaffoldError(Exception):
    """Base class for errors raised by forgekit."""


class OperationCancelled(ScaffoldError):
    """The user aborted an interactive prompt."""

    def __init__(self, message: str = "Operation cancelled") -> None:
        super().__init__(message)


class DirectoryNotEmptyError(ScaffoldError, FileExistsError):
    """The target directory has content and overwriting was not confirmed."""


class RenderCollisionError(ScaffoldError, FileExistsError):
    """Two templates rendered to the same destination path."""
