"""
forgekit.cli - Command Line Interface
=====================================

This module provides the command-line interface for forgekit using Typer,
with questionary for interactive prompts and rich for output.

Architecture
------------
    app (main entry point)
    └── new      - Scaffold a new project

``new`` is both interactive (prompts for anything not given) and scriptable
(``--yes`` accepts every default). Unknown ``--flags`` are not an error:
they are passed through to the templates as variables.

Usage Examples
--------------
Interactive mode:
    $ forgekit new

Non-interactive mode:
    $ forgekit new my-app --typescript --scope public --yes

Custom template variables:
    $ forgekit new my-app --with-storybook --api-url=https://example.com -y
"""

from __future__ import annotations

from pathlib import Path
from typing import Annotated, Any

import questionary
import typer
from pydantic import ValidationError
from rich import print as rprint
from rich.console import Console
from rich.panel import Panel
from rich.text import Text

from forgekit import __version__
from forgekit.errors import DirectoryNotEmptyError, OperationCancelled
from forgekit.generator import can_skip_emptying, create_project
from forgekit.models import (
    DEFAULT_GITHUB_USER,
    DEFAULT_PROJECT_NAME,
    FeatureFlags,
    GitHubScope,
    ScaffoldConfig,
    ToolSettings,
    is_valid_package_name,
    to_valid_package_name,
)


# =============================================================================
# CLI Application Setup
# =============================================================================

app = typer.Typer(
    name="forgekit",
    help="Scaffold a new create-* project from a template tree.",
    no_args_is_help=True,
    rich_markup_mode="rich",
    add_completion=False,
)

console = Console()


# =============================================================================
# Banner & Version
# =============================================================================


def print_banner() -> None:
    """Print the start-of-run banner, coloured on truecolor terminals."""
    if console.is_terminal and console.color_system == "truecolor":
        title = Text.assemble(("forge", "bold #42d392"), ("kit", "bold #647eff"))
    else:
        title = Text("forgekit", style="bold")
    console.print()
    console.print(Panel(Text.assemble(title, f" v{__version__}"), expand=False))


def version_callback(value: bool) -> None:
    if value:
        console.print(f"[bold green]forgekit[/] version [cyan]{__version__}[/]")
        raise typer.Exit()


# =============================================================================
# Interactive Prompts
# =============================================================================


def _answer(question: questionary.Question) -> Any:
    result = question.ask()
    if result is None:
        raise OperationCancelled()
    return result


def prompt_project_name() -> str:
    name = _answer(questionary.text("Project name:", default=DEFAULT_PROJECT_NAME))
    return name.strip() or DEFAULT_PROJECT_NAME


def prompt_overwrite(target_dir: str) -> bool:
    """
    Ask whether a non-empty target may be emptied.

    Raises
    ------
    OperationCancelled
        If the user declines; there is nothing sensible left to do.
    """
    where = "Current directory" if target_dir == "." else f'Target directory "{target_dir}"'
    confirmed = _answer(
        questionary.confirm(
            f"{where} is not empty. Remove existing files and continue?",
            default=True,
        )
    )
    if not confirmed:
        raise OperationCancelled()
    return True


def prompt_package_name(project_name: str) -> str:
    """Ask for a valid package name, re-prompting until one is given."""
    return _answer(
        questionary.text(
            "Package name:",
            default=to_valid_package_name(project_name),
            validate=lambda v: is_valid_package_name(v) or "Invalid package.json name",
        )
    )


def prompt_github_user() -> str:
    return _answer(questionary.text("GitHub user:", default=DEFAULT_GITHUB_USER))


def prompt_github_scope() -> GitHubScope:
    return _answer(
        questionary.select(
            "GitHub scope:",
            choices=[
                questionary.Choice(title=scope.value, value=scope)
                for scope in GitHubScope
            ],
            default=GitHubScope.PRIVATE,
        )
    )


# =============================================================================
# Passthrough Arguments
# =============================================================================


def parse_arguments(args: list[str]) -> tuple[list[str], dict[str, bool | str]]:
    """
    Split the arguments Typer did not recognise into positionals and flags.

    ``--name`` is True, ``--no-name`` is False and ``--name=value`` keeps the
    string value. Flags may appear before or after the positional target, so
    a value must be attached with ``=``: ``--name value`` is a boolean flag
    followed by a positional.

    Returns
    -------
    tuple[list[str], dict[str, bool | str]]
        Positional arguments in order, and flag names (dashes stripped,
        otherwise as typed) mapped to their values.

    Raises
    ------
    typer.BadParameter
        For single-dash options, which have no passthrough meaning.

    Examples
    --------
    >>> parse_arguments(["--with-storybook", "my-app", "--api-url=/api"])
    (['my-app'], {'with-storybook': True, 'api-url': '/api'})
    """
    positionals: list[str] = []
    flags: dict[str, bool | str] = {}
    for arg in args:
        if arg == "--":
            continue
        if arg.startswith("--"):
            key, sep, value = arg[2:].partition("=")
            if sep:
                flags[key] = value
            elif key.startswith("no-"):
                flags[key[3:]] = False
            else:
                flags[key] = True
        elif arg.startswith("-") and arg != "-":
            raise typer.BadParameter(f"Unknown option {arg!r}")
        else:
            positionals.append(arg)
    return positionals, flags


# =============================================================================
# Main Application Callback
# =============================================================================


@app.callback()
def main(
    version: Annotated[
        bool | None,
        typer.Option(
            "--version",
            "-V",
            help="Show version and exit.",
            callback=version_callback,
            is_eager=True,
        ),
    ] = None,
) -> None:
    """
    [bold]forgekit[/] - template-driven project scaffolder.

    [bold]Quick Start:[/]

        forgekit new my-app
    """


# =============================================================================
# New Command
# =============================================================================


# TARGET_DIR is read from ctx.args rather than declared as an argument:
# with ignore_unknown_options Click would bind an unknown flag to it.
@app.command(
    context_settings={"allow_extra_args": True, "ignore_unknown_options": True},
    options_metavar="[TARGET_DIR] [OPTIONS]",
)
def new(
    ctx: typer.Context,
    typescript: Annotated[
        bool, typer.Option("--typescript", "--ts", help="Add TypeScript")
    ] = False,
    jsx: Annotated[bool, typer.Option("--jsx", help="Add JSX support")] = False,
    router: Annotated[
        bool, typer.Option("--router", "--vue-router", help="Add a router")
    ] = False,
    pinia: Annotated[bool, typer.Option("--pinia", help="Add Pinia state management")] = False,
    with_tests: Annotated[
        bool, typer.Option("--with-tests", "--tests", help="Add unit and e2e tests")
    ] = False,
    vitest: Annotated[bool, typer.Option("--vitest", help="Add Vitest")] = False,
    cypress: Annotated[bool, typer.Option("--cypress", help="Add Cypress")] = False,
    playwright: Annotated[bool, typer.Option("--playwright", help="Add Playwright")] = False,
    eslint: Annotated[bool, typer.Option("--eslint", help="Add ESLint")] = False,
    eslint_with_prettier: Annotated[
        bool,
        typer.Option("--eslint-with-prettier", help="Add ESLint with Prettier"),
    ] = False,
    prod: Annotated[
        bool, typer.Option("--prod", help="Render with NODE_ENV=production")
    ] = False,
    default: Annotated[
        bool, typer.Option("--default", help="Accept every default (same as --yes)")
    ] = False,
    force: Annotated[
        bool, typer.Option("--force", help="Empty a non-empty target without asking")
    ] = False,
    github_user: Annotated[
        str | None, typer.Option("--github-user", "-u", help="GitHub account name")
    ] = None,
    scope: Annotated[
        GitHubScope | None,
        typer.Option("--scope", "-s", help="Repository visibility"),
    ] = None,
    config_file: Annotated[
        Path | None,
        typer.Option(
            "--config",
            "-c",
            help="TOML file overriding template locations",
            exists=True,
            dir_okay=False,
        ),
    ] = None,
    output_dir: Annotated[
        Path | None,
        typer.Option(
            "--output",
            "-o",
            help="Directory to resolve the target against (default: current directory)",
        ),
    ] = None,
    yes: Annotated[
        bool, typer.Option("--yes", "-y", help="Skip all prompts, use defaults")
    ] = False,
) -> None:
    """
    Scaffold a new project.

    Copies the template, writes [cyan]package.json[/], renders [cyan]*.j2[/]
    templates and prints the commands to run next. TARGET_DIR is prompted
    for when omitted. Unknown [cyan]--flag[/] and [cyan]--flag=value[/]
    options may appear anywhere and become template variables.

    [bold]Examples:[/]

        forgekit new my-app
        forgekit new create-widget --ts --scope public --yes
    """
    positionals, passthrough = parse_arguments(ctx.args)
    if len(positionals) > 1:
        msg = (
            f"Unexpected argument {positionals[1]!r}; "
            "attach flag values with '=' (--name=value)"
        )
        raise typer.BadParameter(msg)

    flags = FeatureFlags.from_mapping(
        {
            "default": default,
            "typescript": typescript,
            "jsx": jsx,
            "router": router,
            "pinia": pinia,
            "with_tests": with_tests,
            "vitest": vitest,
            "cypress": cypress,
            "playwright": playwright,
            "eslint": eslint,
            "eslint_with_prettier": eslint_with_prettier,
            "prod": prod,
            "force": force,
            **passthrough,
        }
    )
    skip_prompts = yes or flags.default
    cwd = output_dir or Path.cwd()
    target_dir = positionals[0] if positionals else None
    default_name = None if target_dir else DEFAULT_PROJECT_NAME

    print_banner()

    try:
        if target_dir is None:
            target_dir = DEFAULT_PROJECT_NAME if skip_prompts else prompt_project_name()

        root = (cwd / target_dir).resolve()
        overwrite = False
        if not skip_prompts and not flags.force and not can_skip_emptying(root):
            overwrite = prompt_overwrite(target_dir)

        package_name = None
        if not skip_prompts and not is_valid_package_name(root.name):
            package_name = prompt_package_name(root.name)

        if github_user is None:
            github_user = DEFAULT_GITHUB_USER if skip_prompts else prompt_github_user()

        if scope is None:
            scope = GitHubScope.PRIVATE if skip_prompts else prompt_github_scope()

    except OperationCancelled as e:
        rprint(f"[red]✖[/] {e}")
        raise typer.Exit(1)

    try:
        config = ScaffoldConfig(
            target_dir=target_dir,
            package_name=package_name,
            github_user=github_user,
            github_scope=scope,
            flags=flags,
            overwrite=overwrite,
            output_dir=cwd,
            default_name=default_name,
        )
        settings = ToolSettings.from_toml(config_file) if config_file else ToolSettings()
    except (ValidationError, ValueError) as e:
        rprint(f"[red]Error:[/] {e}")
        raise typer.Exit(1)

    try:
        create_project(config, settings)
    except DirectoryNotEmptyError as e:
        rprint(f"[red]✖[/] {e} Use --force to remove existing files.")
        raise typer.Exit(1)
    except Exception as e:
        rprint(f"[red]Error:[/] {e}")
        raise typer.Exit(1)
