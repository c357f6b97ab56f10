"""
forgekit.generator - Project Materialization Pipeline
=====================================================

This module contains the orchestrator that turns a ``ScaffoldConfig`` into a
project directory on disk.

Architecture
------------
The generator is a strictly linear pipeline. Each step completes before the
next one starts and no step is retried:

    1. Prepare the target directory (create, or empty when confirmed)
    2. Write the initial manifest
    3. Copy the template tree
    4. Copy the scaffolder's own files (or just ``bin/``)
    5. Merge the generated fields into the manifest
    6. Run the template callbacks
    7. Render templates
    8. Remove stray variant files
    9. Print the next-step commands

Prompting happens before step 1, in the CLI.

There is no rollback. If a step fails the exception propagates and the
partially populated directory is left for the user to inspect.

Usage Example
-------------
>>> from forgekit.generator import create_project
>>> from forgekit.models import FeatureFlags, ScaffoldConfig
>>>
>>> config = ScaffoldConfig(target_dir="my-app", flags=FeatureFlags(typescript=True))
>>> result = create_project(config, verbose=False)
>>> result.manifest["scripts"]["git"]
'./bin/init-github.sh private xnscu'

See Also
--------
- copier.py: Template copy and self-copy
- renderer.py: Rendering pass
- manifest.py: Manifest merging
"""

from __future__ import annotations

import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from rich.console import Console
from rich.panel import Panel

from forgekit.copier import CallbackRegistry, copy_project_files, copy_template
from forgekit.errors import DirectoryNotEmptyError
from forgekit.manifest import (
    MANIFEST_NAME,
    generated_fields,
    initial_manifest,
    merge_into_file,
    write_manifest,
)
from forgekit.models import ScaffoldConfig, ToolSettings
from forgekit.renderer import RenderContext, cleanup_stray_files, render_templates
from forgekit.traverse import post_order


# =============================================================================
# Module-Level Configuration
# =============================================================================

console = Console()


# =============================================================================
# Result Data Classes
# =============================================================================


@dataclass
class GenerationResult:
    """
    Outcome of one scaffolding run.

    Attributes
    ----------
    success : bool
        Whether every pipeline step completed.

    project_path : Path
        Absolute path of the project directory.

    manifest : dict
        The manifest as written to disk.

    files_rendered : list[Path]
        Destinations produced by the rendering pass.

    files_removed : list[Path]
        Stray variant files deleted by the cleanup pass.

    warnings : list[str]
        Non-fatal problems, such as a failed self-copy.

    instructions : list[str]
        Next-step commands shown to the user.
    """

    success: bool
    project_path: Path
    manifest: dict[str, Any] = field(default_factory=dict)
    files_rendered: list[Path] = field(default_factory=list)
    files_removed: list[Path] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    instructions: list[str] = field(default_factory=list)


# =============================================================================
# Directory Preparation
# =============================================================================


def can_skip_emptying(directory: Path) -> bool:
    """
    True when ``directory`` can be used as-is.

    That is the case when it doesn't exist, is empty, or only holds a
    ``.git`` directory.
    """
    if not directory.exists():
        return True
    names = [p.name for p in directory.iterdir()]
    return not names or names == [".git"]


def empty_dir(directory: Path) -> None:
    """Remove everything inside ``directory`` except ``.git``."""
    if not directory.exists():
        return
    post_order(directory, lambda d: d.rmdir(), lambda f: f.unlink())


def prepare_directory(config: ScaffoldConfig) -> Path:
    """
    Create the target directory, emptying it first when confirmed.

    Raises
    ------
    DirectoryNotEmptyError
        If the directory has content and overwriting wasn't confirmed.
        Nothing is modified in that case.
    """
    root = config.project_dir

    if not can_skip_emptying(root):
        if not config.force:
            msg = f"Target directory '{config.target_dir}' is not empty."
            raise DirectoryNotEmptyError(msg)
        empty_dir(root)
    elif not root.exists():
        root.mkdir(parents=True)

    return root


# =============================================================================
# Package Manager Commands
# =============================================================================


def detect_package_manager(user_agent: str | None = None) -> str:
    """
    Guess the package manager that launched us. Preference: pnpm > yarn > npm.
    """
    if user_agent is None:
        user_agent = os.environ.get("npm_config_user_agent", "")
    if re.search("pnpm", user_agent):
        return "pnpm"
    if re.search("yarn", user_agent):
        return "yarn"
    return "npm"


def get_command(package_manager: str, script_name: str, args: str | None = None) -> str:
    """
    Format the shell command running ``script_name`` with ``package_manager``.

    Examples
    --------
    >>> get_command("npm", "dev")
    'npm run dev'
    >>> get_command("yarn", "install")
    'yarn'
    >>> get_command("pnpm", "lint", "--fix")
    'pnpm lint --fix'
    """
    if script_name == "install":
        return "yarn" if package_manager == "yarn" else f"{package_manager} install"

    if package_manager == "npm":
        command = f"npm run {script_name}"
        return f"{command} -- {args}" if args else command

    command = f"{package_manager} {script_name}"
    return f"{command} {args}" if args else command


def completion_instructions(
    config: ScaffoldConfig, package_manager: str | None = None
) -> list[str]:
    """Commands the user should run next, in order."""
    package_manager = package_manager or detect_package_manager()
    steps: list[str] = []

    cwd = config.output_dir.resolve()
    if config.project_dir != cwd:
        cd_target = os.path.relpath(config.project_dir, cwd)
        if " " in cd_target:
            cd_target = f'"{cd_target}"'
        steps.append(f"cd {cd_target}")

    steps.extend(
        get_command(package_manager, script) for script in ("git", "install", "dev")
    )
    return steps


# =============================================================================
# Self-Copy
# =============================================================================


def nested_exclusion(source_root: Path, target: Path) -> str | None:
    """
    First path component of ``target`` under ``source_root``, if nested.

    Copying a directory into one of its own descendants would recurse
    forever, so that component must be excluded.
    """
    try:
        relative = target.resolve().relative_to(source_root.resolve())
    except ValueError:
        return None
    return relative.parts[0] if relative.parts else None


def copy_source_files(
    config: ScaffoldConfig, settings: ToolSettings, *, verbose: bool = True
) -> bool:
    """
    Copy the scaffolder's own files into the project.

    From the original scaffolder checkout the whole source root is copied,
    so the new project is itself a working scaffolder. From any other
    source tree only ``bin/`` is copied.
    """
    root = config.project_dir

    if settings.is_origin:
        exclude = nested_exclusion(settings.source_root, root)
        return copy_project_files(settings.source_root, root, exclude, verbose=verbose)

    if verbose:
        console.print("  [dim]Generated scaffolder: copying bin/ only[/]")
    if settings.bin_dir.is_dir():
        return copy_project_files(settings.bin_dir, root / "bin", verbose=verbose)
    return True


# =============================================================================
# Main Generation Function
# =============================================================================


def _step(verbose: bool, message: str) -> None:
    if verbose:
        console.print(f"[bold]{message}[/]")


def create_project(
    config: ScaffoldConfig,
    settings: ToolSettings | None = None,
    *,
    verbose: bool = True,
) -> GenerationResult:
    """
    Materialize a new project from the template tree.

    Parameters
    ----------
    config : ScaffoldConfig
        The user's choices (already prompted for).

    settings : ToolSettings | None
        Where the template tree and env defaults live. Defaults to the
        skeleton shipped with forgekit.

    verbose : bool, default=True
        If True, display progress information to the console.

    Returns
    -------
    GenerationResult
        Result object with the written manifest and touched files.

    Raises
    ------
    DirectoryNotEmptyError
        If the target has content and ``config.force`` is False.
    RenderCollisionError
        If two templates render to the same path.
    OSError
        Any file-system failure during copy, manifest write or rendering.
    """
    settings = settings or ToolSettings()
    root = prepare_directory(config)
    result = GenerationResult(success=False, project_path=root)

    if verbose:
        console.print(f"\nScaffolding project in [cyan]{root}[/]...\n")

    manifest_path = root / MANIFEST_NAME
    write_manifest(manifest_path, initial_manifest(config))

    _step(verbose, "📁 Copying template...")
    callbacks = CallbackRegistry()
    copy_template(settings.template_root, root, callbacks)

    if not copy_source_files(config, settings, verbose=verbose):
        result.warnings.append("Copying the scaffolder's own files failed")

    _step(verbose, "📦 Writing package manifest...")
    result.manifest = merge_into_file(manifest_path, generated_fields(config))

    store = callbacks.run()

    _step(verbose, "📝 Rendering templates...")
    context = RenderContext(
        env_defaults=settings.load_env_defaults(),
        store=store,
        flags=config.flags.to_context(),
        target_dir=config.target_dir,
        create_name=config.create_name,
    )
    result.files_rendered = render_templates(root, context, verbose=verbose)

    result.files_removed = cleanup_stray_files(
        root, settings.stray_suffixes, verbose=verbose
    )

    result.instructions = completion_instructions(config)
    result.success = True

    if verbose:
        commands = "\n".join(f"  [bold green]{step}[/]" for step in result.instructions)
        console.print()
        console.print(
            Panel(
                f"[bold green]Done.[/] Now run:\n\n{commands}",
                title="[bold green]Success[/]",
                border_style="green",
            )
        )

    return result
