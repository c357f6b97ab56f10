"""
forgekit.manifest - Package Manifest Merging
============================================

Helpers for the project's ``package.json``: a deep merge with the template
merge rules, dependency sorting for reproducible output, and the generated
fields every new project receives.

Merge Rules
-----------
For each key of the override:

- both values are mappings  -> merged recursively
- both values are sequences -> concatenated, duplicates dropped
- anything else             -> the override wins

Example
-------
>>> deep_merge({"scripts": {"dev": "vite"}}, {"scripts": {"build": "vite build"}})
{'scripts': {'dev': 'vite', 'build': 'vite build'}}
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import TYPE_CHECKING, Any


if TYPE_CHECKING:
    from forgekit.models import ScaffoldConfig


MANIFEST_NAME = "package.json"

# Manifest keys holding a dependency-name -> version mapping
DEPENDENCY_FIELDS: tuple[str, ...] = (
    "dependencies",
    "devDependencies",
    "peerDependencies",
    "optionalDependencies",
)

INIT_HELPER = "./bin/init-github.sh"


# =============================================================================
# Merging
# =============================================================================

def _merge_sequences(base: list[Any], extra: list[Any]) -> list[Any]:
    merged = list(base)
    for item in extra:
        # membership test instead of a set: items may be unhashable dicts
        if item not in merged:
            merged.append(item)
    return merged


def deep_merge(target: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """
    Merge ``override`` into ``target`` in place and return ``target``.

    Parameters
    ----------
    target : dict
        Base manifest. Mutated.
    override : dict
        Values to merge on top.

    Returns
    -------
    dict
        The merged ``target``.

    Raises
    ------
    TypeError
        If either argument is not a mapping.
    """
    if not isinstance(target, dict) or not isinstance(override, dict):
        msg = (
            "deep_merge expects two mappings, got "
            f"{type(target).__name__} and {type(override).__name__}"
        )
        raise TypeError(msg)

    for key, new_value in override.items():
        old_value = target.get(key)
        if isinstance(old_value, list) and isinstance(new_value, list):
            target[key] = _merge_sequences(old_value, new_value)
        elif isinstance(old_value, dict) and isinstance(new_value, dict):
            target[key] = deep_merge(old_value, new_value)
        else:
            target[key] = new_value
    return target


def sort_dependencies(manifest: dict[str, Any]) -> dict[str, Any]:
    """
    Return a copy of ``manifest`` with dependency mappings key-sorted.

    Top-level key order is preserved; only the contents of the
    ``DEPENDENCY_FIELDS`` mappings are reordered.

    Examples
    --------
    >>> sort_dependencies({"dependencies": {"vue": "^3", "axios": "^1"}})
    {'dependencies': {'axios': '^1', 'vue': '^3'}}
    """
    result = dict(manifest)
    for field in DEPENDENCY_FIELDS:
        deps = manifest.get(field)
        if isinstance(deps, dict):
            result[field] = {name: deps[name] for name in sorted(deps)}
    return result


# =============================================================================
# Manifest I/O
# =============================================================================

def read_manifest(path: Path) -> dict[str, Any]:
    with Path(path).open(encoding="utf-8") as f:
        return json.load(f)


def write_manifest(path: Path, manifest: dict[str, Any]) -> None:
    """Write ``manifest`` as two-space indented JSON with a trailing newline."""
    Path(path).write_text(
        json.dumps(manifest, indent=2, ensure_ascii=False) + "\n",
        encoding="utf-8",
    )


def merge_into_file(path: Path, override: dict[str, Any]) -> dict[str, Any]:
    """Deep-merge ``override`` into the manifest at ``path``, sort and save."""
    merged = sort_dependencies(deep_merge(read_manifest(path), override))
    write_manifest(path, merged)
    return merged


# =============================================================================
# Generated Fields
# =============================================================================

def initial_manifest(config: ScaffoldConfig) -> dict[str, Any]:
    """The minimal manifest written before the template is copied."""
    return {"name": config.manifest_name, "version": "0.0.0"}


def generated_fields(config: ScaffoldConfig) -> dict[str, Any]:
    """
    Fields merged over the template manifest at the end of the copy.

    Returns
    -------
    dict
        ``name``, ``private`` and the ``git``/``set-g``/``add-g`` scripts.
        The scripts call the repository-initialization helper and point the
        ``origin`` remote at ``github.com:<user>/<name>.git``.
    """
    user = config.github_user
    name = config.manifest_name
    remote = f"git@github.com:{user}/{name}.git"
    return {
        "name": name,
        "private": config.github_scope.is_private,
        "scripts": {
            "git": f"{INIT_HELPER} {config.github_scope.value} {user}",
            "set-g": f"git remote set-url origin {remote}",
            "add-g": f"git remote add origin {remote}",
        },
    }
