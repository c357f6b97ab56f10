"""
Tests for forgekit.cli
======================

This module contains tests for the command-line interface.
Tests use Typer's CliRunner for testing CLI commands.

Test Organization
-----------------
- TestVersionCommand: Tests for --version flag
- TestHelpOutput: Tests for help text
- TestParseArguments: Tests for passthrough argument parsing
- TestNewCommand: Non-interactive runs of the new command
- TestPrompts: Interactive runs with questionary patched out
"""

import json
from pathlib import Path
from unittest.mock import patch

import pytest
import typer
from typer.testing import CliRunner

from forgekit import __version__
from forgekit.cli import app, parse_arguments
from forgekit.models import GitHubScope


# =============================================================================
# Fixtures
# =============================================================================

@pytest.fixture
def runner() -> CliRunner:
    """Create a CLI test runner."""
    return CliRunner()


@pytest.fixture
def config_file(source_root: Path, write_file) -> Path:
    """A config file pointing forgekit at the miniature source tree."""
    write_file(
        source_root / "template" / "flags.txt.j2",
        "{{ WITH_STORYBOOK }} {{ API_URL }} {{ TS }}\n",
    )
    return write_file(
        source_root.parent / "forgekit.toml",
        '[tool.forgekit]\nsource_root = "source"\n',
    )


def read_manifest(project: Path) -> dict:
    return json.loads((project / "package.json").read_text())


# =============================================================================
# Version Command Tests
# =============================================================================

class TestVersionCommand:
    """Tests for the --version flag."""

    def test_version_flag(self, runner: CliRunner) -> None:
        result = runner.invoke(app, ["--version"])

        assert result.exit_code == 0
        assert __version__ in result.stdout

    def test_version_short_flag(self, runner: CliRunner) -> None:
        result = runner.invoke(app, ["-V"])

        assert result.exit_code == 0
        assert __version__ in result.stdout


# =============================================================================
# Help Output Tests
# =============================================================================

class TestHelpOutput:
    """Tests for help text."""

    def test_main_help(self, runner: CliRunner) -> None:
        result = runner.invoke(app, ["--help"])

        assert result.exit_code == 0
        assert "forgekit" in result.stdout.lower()
        assert "new" in result.stdout

    def test_new_help(self, runner: CliRunner) -> None:
        result = runner.invoke(app, ["new", "--help"])

        assert result.exit_code == 0
        assert "--typescript" in result.stdout
        assert "--force" in result.stdout


# =============================================================================
# Passthrough Flag Tests
# =============================================================================

class TestParseArguments:
    """Tests for parse_arguments."""

    def test_boolean_flags(self) -> None:
        assert parse_arguments(["--with-storybook", "--no-lint"]) == (
            [],
            {"with-storybook": True, "lint": False},
        )

    def test_valued_flag(self) -> None:
        assert parse_arguments(["--api-url=https://example.com"]) == (
            [],
            {"api-url": "https://example.com"},
        )

    def test_flags_around_positional(self) -> None:
        assert parse_arguments(["--with-storybook", "my-app", "--no-lint"]) == (
            ["my-app"],
            {"with-storybook": True, "lint": False},
        )

    def test_value_needs_equals(self) -> None:
        """A separated value is read as a positional, not as the flag's value."""
        assert parse_arguments(["--api-url", "https://x"]) == (
            ["https://x"],
            {"api-url": True},
        )

    def test_empty(self) -> None:
        assert parse_arguments([]) == ([], {})

    def test_short_option_rejected(self) -> None:
        with pytest.raises(typer.BadParameter):
            parse_arguments(["-x"])


# =============================================================================
# New Command Tests
# =============================================================================

class TestNewCommand:
    """Tests for the new command with prompts skipped."""

    def test_new_with_defaults(self, runner: CliRunner, work_dir: Path) -> None:
        result = runner.invoke(app, ["new", "my-app", "--ts", "--yes", "-o", str(work_dir)])

        assert result.exit_code == 0, result.stdout
        project = work_dir / "my-app"
        manifest = read_manifest(project)
        assert manifest["name"] == "my-app"
        assert manifest["scripts"]["git"] == "./bin/init-github.sh private xnscu"
        assert not list(project.rglob("*.ts"))
        assert "Done." in result.stdout

    def test_new_without_target_uses_default_name(
        self, runner: CliRunner, work_dir: Path
    ) -> None:
        result = runner.invoke(app, ["new", "--default", "-o", str(work_dir)])

        assert result.exit_code == 0, result.stdout
        assert read_manifest(work_dir / "create-xx")["name"] == "create-xx"

    def test_new_public_scope_and_user(self, runner: CliRunner, work_dir: Path) -> None:
        result = runner.invoke(
            app,
            ["new", "my-app", "-s", "public", "-u", "octocat", "-y", "-o", str(work_dir)],
        )

        assert result.exit_code == 0, result.stdout
        manifest = read_manifest(work_dir / "my-app")
        assert manifest["private"] is False
        assert manifest["scripts"]["git"] == "./bin/init-github.sh public octocat"
        assert manifest["scripts"]["add-g"] == (
            "git remote add origin git@github.com:octocat/my-app.git"
        )

    def test_new_invalid_scope(self, runner: CliRunner, work_dir: Path) -> None:
        result = runner.invoke(app, ["new", "my-app", "-s", "internal", "-y", "-o", str(work_dir)])

        assert result.exit_code != 0
        assert not (work_dir / "my-app").exists()

    def test_new_existing_directory(self, runner: CliRunner, work_dir: Path) -> None:
        """Without --force a populated target is left exactly as it was."""
        project = work_dir / "my-app"
        project.mkdir()
        (project / "keep.txt").write_text("precious")

        result = runner.invoke(app, ["new", "my-app", "-y", "-o", str(work_dir)])

        assert result.exit_code == 1
        assert "--force" in result.stdout
        assert [p.name for p in project.iterdir()] == ["keep.txt"]
        assert (project / "keep.txt").read_text() == "precious"

    def test_new_existing_directory_forced(
        self, runner: CliRunner, work_dir: Path
    ) -> None:
        project = work_dir / "my-app"
        project.mkdir()
        (project / "stale.txt").write_text("x")

        result = runner.invoke(app, ["new", "my-app", "-y", "--force", "-o", str(work_dir)])

        assert result.exit_code == 0, result.stdout
        assert not (project / "stale.txt").exists()
        assert (project / "package.json").exists()

    def test_new_with_config_and_extra_flags(
        self, runner: CliRunner, work_dir: Path, config_file: Path
    ) -> None:
        """Unknown flags reach the templates as UPPER_SNAKE variables."""
        result = runner.invoke(
            app,
            [
                "new",
                "my-app",
                "--with-storybook",
                "--api-url=https://example.com",
                "--ts",
                "-y",
                "-c",
                str(config_file),
                "-o",
                str(work_dir),
            ],
        )

        assert result.exit_code == 0, result.stdout
        project = work_dir / "my-app"
        assert (project / "flags.txt").read_text() == "True https://example.com True\n"
        assert (project / "README.md").read_text().startswith("# my-app\nfrom callback\n")

    def test_new_flag_before_target(
        self, runner: CliRunner, work_dir: Path, config_file: Path
    ) -> None:
        """An unknown flag ahead of the target is not taken as the target."""
        result = runner.invoke(
            app,
            [
                "new",
                "--with-storybook",
                "my-app",
                "-y",
                "-c",
                str(config_file),
                "-o",
                str(work_dir),
            ],
        )

        assert result.exit_code == 0, result.stdout
        assert [p.name for p in work_dir.iterdir()] == ["my-app"]
        assert (work_dir / "my-app" / "flags.txt").read_text().startswith("True ")

    def test_new_flag_without_target(
        self, runner: CliRunner, work_dir: Path, config_file: Path
    ) -> None:
        result = runner.invoke(
            app,
            ["new", "--with-storybook", "-y", "-c", str(config_file), "-o", str(work_dir)],
        )

        assert result.exit_code == 0, result.stdout
        assert not (work_dir / "--with-storybook").exists()
        assert (work_dir / "create-xx" / "flags.txt").read_text().startswith("True ")

    def test_new_separated_flag_value_rejected(
        self, runner: CliRunner, work_dir: Path
    ) -> None:
        result = runner.invoke(
            app,
            ["new", "my-app", "--api-url", "https://x", "-y", "-o", str(work_dir)],
        )

        assert result.exit_code == 2
        assert list(work_dir.iterdir()) == []

    def test_new_blank_github_user(self, runner: CliRunner, work_dir: Path) -> None:
        result = runner.invoke(
            app, ["new", "my-app", "-u", "   ", "-y", "-o", str(work_dir)]
        )

        assert result.exit_code == 1
        assert not (work_dir / "my-app").exists()

    def test_new_invalid_config(
        self, runner: CliRunner, work_dir: Path, write_file
    ) -> None:
        config = write_file(work_dir / "broken.toml", "source_root = \n")

        result = runner.invoke(app, ["new", "my-app", "-y", "-c", str(config), "-o", str(work_dir)])

        assert result.exit_code == 1
        assert "Error" in result.stdout
        assert not (work_dir / "my-app").exists()

    def test_new_stray_positional(self, runner: CliRunner, work_dir: Path) -> None:
        result = runner.invoke(app, ["new", "my-app", "extra", "-y", "-o", str(work_dir)])

        assert result.exit_code != 0
        assert not (work_dir / "my-app").exists()


# =============================================================================
# Interactive Prompt Tests
# =============================================================================

class TestPrompts:
    """Tests for the interactive flow, with questionary patched out."""

    def test_answers_flow_into_manifest(self, runner: CliRunner, work_dir: Path) -> None:
        with (
            patch("forgekit.cli.questionary.text") as text,
            patch("forgekit.cli.questionary.select") as select,
        ):
            text.return_value.ask.side_effect = ["widget", "octocat"]
            select.return_value.ask.return_value = GitHubScope.PUBLIC

            result = runner.invoke(app, ["new", "-o", str(work_dir)])

        assert result.exit_code == 0, result.stdout
        manifest = read_manifest(work_dir / "widget")
        assert manifest["name"] == "widget"
        assert manifest["scripts"]["git"] == "./bin/init-github.sh public octocat"
        # a prompted name without the prefix falls back to the offered default
        assert "npm create xx@latest" in (work_dir / "widget" / "README.md").read_text()

    def test_invalid_directory_name_prompts_for_package_name(
        self, runner: CliRunner, work_dir: Path
    ) -> None:
        with patch("forgekit.cli.questionary.text") as text:
            text.return_value.ask.return_value = "my-widget"

            result = runner.invoke(
                app, ["new", "My Widget", "-u", "octocat", "-s", "private", "-o", str(work_dir)]
            )

        assert result.exit_code == 0, result.stdout
        assert text.call_args.kwargs["default"] == "my-widget"
        assert read_manifest(work_dir / "My Widget")["name"] == "my-widget"

    def test_cancelled_prompt(self, runner: CliRunner, work_dir: Path) -> None:
        with patch("forgekit.cli.questionary.text") as text:
            text.return_value.ask.return_value = None

            result = runner.invoke(app, ["new", "-o", str(work_dir)])

        assert result.exit_code == 1
        assert "cancelled" in result.stdout
        assert list(work_dir.iterdir()) == []

    def test_declined_overwrite(self, runner: CliRunner, work_dir: Path) -> None:
        project = work_dir / "my-app"
        project.mkdir()
        (project / "keep.txt").write_text("precious")

        with patch("forgekit.cli.questionary.confirm") as confirm:
            confirm.return_value.ask.return_value = False

            result = runner.invoke(app, ["new", "my-app", "-o", str(work_dir)])

        assert result.exit_code == 1
        assert (project / "keep.txt").read_text() == "precious"

    def test_confirmed_overwrite(self, runner: CliRunner, work_dir: Path) -> None:
        project = work_dir / "my-app"
        project.mkdir()
        (project / "stale.txt").write_text("x")

        with patch("forgekit.cli.questionary.confirm") as confirm:
            confirm.return_value.ask.return_value = True

            result = runner.invoke(
                app, ["new", "my-app", "-u", "octocat", "-s", "private", "-o", str(work_dir)]
            )

        assert result.exit_code == 0, result.stdout
        assert not (project / "stale.txt").exists()
