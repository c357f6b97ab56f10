"""
forgekit.traverse - Directory Traversal
=======================================

Visitor-based walks over a directory tree. Both walks list entries in sorted
order, skip ``.git`` at every level and never hand the root itself to the
directory visitor.

Symbolic links are reported to the file visitor (``lstat`` semantics), so a
link pointing back up the tree cannot produce a cycle.

Usage Example
-------------
>>> post_order(root, lambda d: d.rmdir(), lambda f: f.unlink())
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import TYPE_CHECKING


if TYPE_CHECKING:
    from collections.abc import Callable

    Visitor = Callable[[Path], object]


SKIPPED_NAMES = frozenset({".git"})


def _entries(directory: Path) -> list[os.DirEntry[str]]:
    # os.scandir raises immediately for a missing root, before any visit
    with os.scandir(directory) as it:
        return sorted(
            (entry for entry in it if entry.name not in SKIPPED_NAMES),
            key=lambda entry: entry.name,
        )


def pre_order(root: Path, dir_visitor: Visitor, file_visitor: Visitor) -> None:
    """
    Visit every descendant of ``root``, directories before their children.

    The directory visitor may delete the directory it is handed; the walk
    does not descend into a directory that no longer exists.

    Raises
    ------
    FileNotFoundError
        If ``root`` does not exist.
    NotADirectoryError
        If ``root`` is a file.
    """
    for entry in _entries(Path(root)):
        path = Path(entry.path)
        if entry.is_dir(follow_symlinks=False):
            dir_visitor(path)
            if path.exists():
                pre_order(path, dir_visitor, file_visitor)
            continue
        file_visitor(path)


def post_order(root: Path, dir_visitor: Visitor, file_visitor: Visitor) -> None:
    """
    Visit every descendant of ``root``, directories after their children.

    This is the order required for recursive deletion: by the time a
    directory reaches ``dir_visitor`` all of its contents have been visited.

    Raises
    ------
    FileNotFoundError
        If ``root`` does not exist.
    NotADirectoryError
        If ``root`` is a file.
    """
    for entry in _entries(Path(root)):
        path = Path(entry.path)
        if entry.is_dir(follow_symlinks=False):
            post_order(path, dir_visitor, file_visitor)
            dir_visitor(path)
            continue
        file_visitor(path)
