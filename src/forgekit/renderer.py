"""
forgekit.renderer - Placeholder Rendering
=========================================

Renders every template file in a materialized project in one pre-order
pass, then removes stray variant files.

Template Context
----------------
Each template is rendered against the union of, in increasing precedence:

    1. env defaults       - key/value pairs from the scaffolder's env file
    2. callback data      - whatever ``.data.py`` callbacks stored for the
                            destination file
    3. command-line flags - ``FeatureFlags.to_context()`` (``TYPESCRIPT``,
                            ``NODE_ENV``, ...)
    4. ``TARGET_DIR``     - target directory as given by the user
       ``CREATE_NAME``    - project name without its ``create-`` prefix

Variables missing from the context render as empty strings.

Usage Example
-------------
>>> context = RenderContext(flags={"TYPESCRIPT": True}, target_dir="my-app")
>>> render_templates(Path("my-app"), context)
[PosixPath('my-app/README.md')]
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from jinja2 import Environment, select_autoescape
from rich.console import Console

from forgekit.conventions import is_template, rendered_name
from forgekit.errors import RenderCollisionError
from forgekit.traverse import pre_order


console = Console()


# =============================================================================
# Template Engine Setup
# =============================================================================


def create_jinja_env() -> Environment:
    """
    Create the Jinja2 environment used for every template.

    Autoescaping is disabled because the output is source code and config
    files, not HTML. Undefined variables render as empty strings.
    """
    return Environment(
        autoescape=select_autoescape([]),
        trim_blocks=True,
        lstrip_blocks=True,
        keep_trailing_newline=True,
    )


# =============================================================================
# Render Context
# =============================================================================


@dataclass
class RenderContext:
    """
    Inputs for the rendering pass.

    Attributes
    ----------
    env_defaults : dict[str, str]
        Lowest-precedence defaults from the env file.
    store : dict[Path, dict[str, Any]]
        Per-destination data produced by the template callbacks.
    flags : dict[str, bool | str]
        Normalised command-line flags.
    target_dir : str
        ``TARGET_DIR`` variable.
    create_name : str
        ``CREATE_NAME`` variable.
    """

    env_defaults: dict[str, str] = field(default_factory=dict)
    store: dict[Path, dict[str, Any]] = field(default_factory=dict)
    flags: dict[str, bool | str] = field(default_factory=dict)
    target_dir: str = ""
    create_name: str = ""

    def for_destination(self, dest: Path) -> dict[str, Any]:
        """Assemble the variables visible to the template rendering ``dest``."""
        return {
            **self.env_defaults,
            **self.store.get(dest, {}),
            **self.flags,
            "TARGET_DIR": self.target_dir,
            "CREATE_NAME": self.create_name,
        }


def render_text(
    text: str,
    variables: dict[str, Any],
    env: Environment | None = None,
) -> str:
    """Render template ``text`` against ``variables``."""
    env = env or create_jinja_env()
    return env.from_string(text).render(**variables)


# =============================================================================
# Rendering Pass
# =============================================================================


def render_templates(
    root: Path,
    context: RenderContext,
    *,
    env: Environment | None = None,
    verbose: bool = False,
) -> list[Path]:
    """
    Render every template under ``root`` and replace it with its output.

    Each ``name.j2`` (or ``name.jinja``) file is rendered to ``name`` in the
    same directory and the template file is deleted.

    Parameters
    ----------
    root : Path
        Project directory.
    context : RenderContext
        Variables for the pass.
    env : Environment | None
        Jinja2 environment; a fresh one is created when omitted.
    verbose : bool, default=False
        Print each rendered path.

    Returns
    -------
    list[Path]
        Destination paths, in traversal order.

    Raises
    ------
    RenderCollisionError
        If two templates render to the same destination.
    """
    env = env or create_jinja_env()
    rendered: list[Path] = []
    seen: set[Path] = set()

    def visit_file(path: Path) -> None:
        if not is_template(path.name):
            return

        dest = path.with_name(rendered_name(path.name))
        if dest in seen:
            msg = f"Templates collide on {dest}; rename one of them."
            raise RenderCollisionError(msg)
        seen.add(dest)

        template = path.read_text(encoding="utf-8")
        content = render_text(template, context.for_destination(dest), env)
        dest.write_text(content, encoding="utf-8")
        path.unlink()
        rendered.append(dest)

        if verbose:
            console.print(f"  Rendered {dest.relative_to(root)}")

    pre_order(root, lambda _: None, visit_file)
    return rendered


# =============================================================================
# Cleanup
# =============================================================================


def cleanup_stray_files(
    root: Path,
    suffixes: tuple[str, ...],
    *,
    verbose: bool = False,
) -> list[Path]:
    """
    Delete every file under ``root`` ending in one of ``suffixes``.

    Templates keep a variant-only file (for example ``index.ts`` beside
    ``index.js``) physically separate so the rest of the tree can be shared.
    The leftovers are removed after rendering regardless of flags.
    """
    removed: list[Path] = []

    def visit_file(path: Path) -> None:
        if path.name.endswith(suffixes):
            path.unlink()
            removed.append(path)
            if verbose:
                console.print(f"  Removed {path.relative_to(root)}")

    if suffixes:
        pre_order(root, lambda _: None, visit_file)
    return removed
