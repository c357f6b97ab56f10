"""
forgekit.copier - Template and Project File Copying
===================================================

Two related copy modes live here:

1. ``copy_template`` copies a template tree into the project. It is
   load-bearing for the rest of the pipeline, so errors propagate.
2. ``copy_project_files`` copies the scaffolder's own source files into the
   project. It is a convenience step: failures are reported and swallowed.

While copying a template the following name rules apply:

- ``_name`` files and directories are written as ``.name``
- ``package.json`` / ``extensions.json`` landing on an existing file are
  deep-merged instead of overwriting it
- ``_gitignore`` landing on an existing ``.gitignore`` is appended
- ``name.data.py`` is not copied; it registers a callback that supplies
  render data for ``name`` (see ``CallbackRegistry``)
- ``node_modules`` directories are skipped
"""

from __future__ import annotations

import importlib.util
import shutil
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Any

from rich.console import Console

from forgekit.conventions import data_target, dotfile_name
from forgekit.manifest import (
    MANIFEST_NAME,
    deep_merge,
    merge_into_file,
    read_manifest,
    write_manifest,
)


if TYPE_CHECKING:
    from collections.abc import Callable

    DataStore = dict[Path, dict[str, Any]]
    DataCallback = Callable[[DataStore], None]


console = Console()

EXTENSIONS_NAME = "extensions.json"
GITIGNORE_NAME = ".gitignore"

# Never copied when the scaffolder copies its own source tree
EXCLUDED_NAMES = frozenset({"node_modules", MANIFEST_NAME, ".git"})


# =============================================================================
# Callback Registry
# =============================================================================


@dataclass
class CallbackRegistry:
    """
    Ordered callbacks collected while copying a template.

    Each callback receives the shared data store, a mapping of destination
    file path to render data, and may read or replace its own entry. They
    run once each, in registration order, before any rendering happens.
    """

    callbacks: list[DataCallback] = field(default_factory=list)

    def register(self, callback: DataCallback) -> None:
        self.callbacks.append(callback)

    def run(self, store: DataStore | None = None) -> DataStore:
        store = {} if store is None else store
        for callback in self.callbacks:
            callback(store)
        return store

    def __len__(self) -> int:
        return len(self.callbacks)


def load_data_module(path: Path) -> Callable[..., dict[str, Any]]:
    """
    Import a ``.data.py`` file and return its ``get_data`` function.

    Raises
    ------
    AttributeError
        If the module does not define ``get_data``.
    """
    spec = importlib.util.spec_from_file_location(
        path.name.replace(".", "_"), path
    )
    if spec is None or spec.loader is None:
        msg = f"Cannot load data module {path}"
        raise ImportError(msg)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module.get_data


def data_callback(source: Path, dest: Path) -> DataCallback:
    """Callback storing ``get_data(old_data=...)`` under ``dest``."""

    def callback(store: DataStore) -> None:
        get_data = load_data_module(source)
        store[dest] = get_data(old_data=store.get(dest, {}))

    return callback


# =============================================================================
# Template -> Project Copy
# =============================================================================


def _copy_file(src: Path, dest: Path, callbacks: CallbackRegistry) -> None:
    if src.name == MANIFEST_NAME and dest.exists():
        merge_into_file(dest, read_manifest(src))
        return

    if src.name == EXTENSIONS_NAME and dest.exists():
        write_manifest(dest, deep_merge(read_manifest(dest), read_manifest(src)))
        return

    if dest.name == GITIGNORE_NAME and dest.exists():
        existing = dest.read_text(encoding="utf-8")
        dest.write_text(
            existing + "\n" + src.read_text(encoding="utf-8"), encoding="utf-8"
        )
        return

    target_name = data_target(dest.name)
    if target_name is not None:
        callbacks.register(data_callback(src, dest.with_name(target_name)))
        return

    shutil.copy(src, dest)


def copy_template(src: Path, dest: Path, callbacks: CallbackRegistry) -> None:
    """
    Recursively copy the template tree ``src`` into ``dest``.

    Parameters
    ----------
    src : Path
        Template directory (or a single template file).
    dest : Path
        Destination path. Intermediate directories are created.
    callbacks : CallbackRegistry
        Registry receiving a callback for every ``.data.py`` file.

    Raises
    ------
    OSError
        Any file-system failure; the template copy is not best-effort.
    """
    src = Path(src)
    dest = Path(dest)

    if src.is_dir():
        if src.name == "node_modules":
            return
        dest.mkdir(parents=True, exist_ok=True)
        for child in sorted(src.iterdir()):
            copy_template(child, dest / dotfile_name(child.name), callbacks)
        return

    _copy_file(src, dest, callbacks)


# =============================================================================
# Project Self-Copy
# =============================================================================


def copy_project_files(
    source_dir: Path,
    target_dir: Path,
    exclude: str | None = None,
    *,
    verbose: bool = True,
) -> bool:
    """
    Copy the scaffolder's own files into ``target_dir``, best-effort.

    Parameters
    ----------
    source_dir : Path
        Directory whose entries are copied.
    target_dir : Path
        Destination, created if missing.
    exclude : str | None
        Extra top-level entry to skip. Pass the target's first path
        component when the target is nested under ``source_dir`` so the
        copy cannot recurse into itself.
    verbose : bool, default=True
        Print the outcome.

    Returns
    -------
    bool
        True if everything was copied, False if an error was swallowed.
    """
    excluded = set(EXCLUDED_NAMES)
    if exclude:
        excluded.add(exclude)

    try:
        target_dir.mkdir(parents=True, exist_ok=True)
        for child in sorted(source_dir.iterdir()):
            if child.name in excluded:
                continue
            if child.is_dir():
                shutil.copytree(
                    child,
                    target_dir / child.name,
                    ignore=shutil.ignore_patterns("node_modules", ".git"),
                    dirs_exist_ok=True,
                )
            else:
                shutil.copy(child, target_dir / child.name)
    except OSError as e:
        if verbose:
            console.print(f"  [yellow]Warning:[/] failed to copy project files: {e}")
        return False

    if verbose:
        console.print(f"  Copied project files to {target_dir}")
    return True
