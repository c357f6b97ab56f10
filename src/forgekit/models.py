"""
forgekit.models - Pydantic Models for Scaffolding Configuration
===============================================================

All user choices and tool settings are validated pydantic models. Dynamic
command-line flags are mapped onto an explicit ``FeatureFlags`` model with a
documented set of recognised options and a passthrough bag for anything else.

Architecture Notes
------------------
The models are organized in a hierarchy:

    ScaffoldConfig (one run)
    ├── GitHubScope (enum)
    └── FeatureFlags
        ├── typescript, jsx, router, ... : bool
        └── extra: dict[str, bool | str]

    ToolSettings (where templates live)
    ├── source_root: Path
    ├── template_dir: Path
    └── env_file: Path

Usage Example
-------------
>>> from forgekit.models import FeatureFlags, ScaffoldConfig
>>> config = ScaffoldConfig(target_dir="create-widget", flags=FeatureFlags(typescript=True))
>>> config.create_name
'widget'
>>> config.flags.to_context()["NODE_ENV"]
'development'
"""

from __future__ import annotations

import json
import re
from enum import Enum
from pathlib import Path
from typing import Any

from dotenv import dotenv_values
from pydantic import BaseModel, Field, field_validator


# =============================================================================
# Constants
# =============================================================================

DEFAULT_PROJECT_NAME = "create-xx"
DEFAULT_GITHUB_USER = "xnscu"
CREATE_PREFIX = "create-"

PACKAGE_NAME_PATTERN = re.compile(
    r"^(?:@[a-z0-9-*~][a-z0-9-*._~]*/)?[a-z0-9-~][a-z0-9-._~]*$"
)

SKELETON_DIR = Path(__file__).parent / "skeleton"


# =============================================================================
# Package Name Helpers
# =============================================================================

def is_valid_package_name(name: str) -> bool:
    """
    Check ``name`` against the package.json naming rules.

    Examples
    --------
    >>> is_valid_package_name("@acme/my-app")
    True
    >>> is_valid_package_name("My App")
    False
    """
    return PACKAGE_NAME_PATTERN.match(name) is not None


def to_valid_package_name(name: str) -> str:
    """
    Coerce an arbitrary directory name into a valid package name.

    Examples
    --------
    >>> to_valid_package_name("  My Cool_App! ")
    'my-cool-app-'
    """
    name = name.strip().lower()
    name = re.sub(r"\s+", "-", name)
    name = re.sub(r"^[._]", "", name)
    return re.sub(r"[^a-z0-9-~]+", "-", name)


# =============================================================================
# Enumerations
# =============================================================================

class GitHubScope(str, Enum):
    """
    Repository visibility chosen for the new project.

    The scope is passed to the repository-initialization helper and also
    decides the manifest's ``private`` flag.
    """

    PRIVATE = "private"
    PUBLIC = "public"

    @property
    def is_private(self) -> bool:
        return self is GitHubScope.PRIVATE


# =============================================================================
# Feature Flags
# =============================================================================

# Short spellings accepted on the command line.
FLAG_ALIASES: dict[str, str] = {
    "ts": "typescript",
    "tests": "with_tests",
    "vue_router": "router",
}


def normalize_flag_key(key: str) -> str:
    """``--eslint-with-prettier`` -> ``eslint_with_prettier``."""
    return key.lstrip("-").replace("-", "_").lower()


class FeatureFlags(BaseModel):
    """
    Feature flags selected on the command line.

    Every flag becomes a template variable in UPPER_SNAKE form, so templates
    can write ``{% if TYPESCRIPT %}``. Unrecognised flags are kept in
    ``extra`` and exposed the same way.

    Attributes
    ----------
    default : bool
        Accept defaults for every optional feature.
    typescript, jsx, router, pinia : bool
        Application features.
    with_tests, vitest, cypress, playwright : bool
        Testing features.
    eslint, eslint_with_prettier : bool
        Linting features.
    prod : bool
        Render templates for production (``NODE_ENV=production``).
    force : bool
        Overwrite a non-empty target directory without asking.
    extra : dict[str, bool | str]
        Passthrough bag for flags this version does not know about.
    """

    default: bool = False
    typescript: bool = False
    jsx: bool = False
    router: bool = False
    pinia: bool = False
    with_tests: bool = False
    vitest: bool = False
    cypress: bool = False
    playwright: bool = False
    eslint: bool = False
    eslint_with_prettier: bool = False
    prod: bool = False
    force: bool = False
    extra: dict[str, bool | str] = Field(default_factory=dict)

    @classmethod
    def from_mapping(cls, values: dict[str, Any]) -> FeatureFlags:
        """
        Build flags from loosely spelled keys, resolving aliases.

        Keys that are not recognised options land in ``extra``.

        Examples
        --------
        >>> FeatureFlags.from_mapping({"ts": True, "my-flag": "x"}).extra
        {'my_flag': 'x'}
        """
        known: dict[str, Any] = {}
        extra: dict[str, bool | str] = {}
        for raw_key, value in values.items():
            key = normalize_flag_key(raw_key)
            key = FLAG_ALIASES.get(key, key)
            if key in cls.model_fields and key != "extra":
                known[key] = bool(value)
            else:
                extra[key] = value
        return cls(**known, extra=extra)

    @property
    def node_env(self) -> str:
        return "production" if self.prod else "development"

    def to_context(self) -> dict[str, bool | str]:
        """Flags as template variables, plus the derived ``NODE_ENV``."""
        context: dict[str, bool | str] = {}
        for name, value in self.model_dump(exclude={"extra"}).items():
            context[name.upper()] = value
        for alias, name in FLAG_ALIASES.items():
            context[alias.upper()] = context[name.upper()]
        for name, value in self.extra.items():
            context[normalize_flag_key(name).upper()] = value
        context["NODE_ENV"] = self.node_env
        return context


# =============================================================================
# Run Configuration
# =============================================================================

class ScaffoldConfig(BaseModel):
    """
    Everything one scaffolding run needs to know about the user's choices.

    Attributes
    ----------
    target_dir : str
        Directory to create, relative to ``output_dir``.
    package_name : str | None
        Explicit manifest name. When unset the directory name is used,
        coerced into a valid package name if necessary.
    github_user : str
        Account the generated git scripts point at.
    github_scope : GitHubScope
        Repository visibility; private scopes mark the manifest private.
    flags : FeatureFlags
        Normalised command-line flags.
    overwrite : bool
        Whether emptying a non-empty target was confirmed.
    output_dir : Path
        Working directory the target is resolved against.
    default_name : str | None
        Name offered when the project name was asked for (``create-xx``).
        Unset when the target came from the command line, in which case the
        target itself is the default.
    """

    target_dir: str = DEFAULT_PROJECT_NAME
    package_name: str | None = None
    github_user: str = Field(default=DEFAULT_GITHUB_USER, min_length=1)
    github_scope: GitHubScope = GitHubScope.PRIVATE
    flags: FeatureFlags = Field(default_factory=FeatureFlags)
    overwrite: bool = False
    output_dir: Path = Field(default_factory=Path.cwd)
    default_name: str | None = None

    @field_validator("target_dir")
    @classmethod
    def validate_target_dir(cls, v: str) -> str:
        return v.strip() or DEFAULT_PROJECT_NAME

    @field_validator("package_name")
    @classmethod
    def validate_package_name(cls, v: str | None) -> str | None:
        if v is None:
            return None
        v = v.strip()
        if not is_valid_package_name(v):
            msg = f"Invalid package.json name: {v!r}"
            raise ValueError(msg)
        return v

    @field_validator("github_user", mode="before")
    @classmethod
    def validate_github_user(cls, v: Any) -> Any:
        # strip before min_length sees the value
        return v.strip() if isinstance(v, str) else v

    @property
    def project_dir(self) -> Path:
        """Absolute path of the directory being materialized."""
        return (self.output_dir / self.target_dir).resolve()

    @property
    def project_name(self) -> str:
        """Base name of the project directory."""
        return self.project_dir.name

    @property
    def manifest_name(self) -> str:
        """The ``name`` written to the manifest."""
        if self.package_name:
            return self.package_name
        if is_valid_package_name(self.project_name):
            return self.project_name
        return to_valid_package_name(self.project_name)

    @property
    def create_name(self) -> str:
        """
        Short name with the ``create-`` prefix stripped.

        When the project name does not carry the prefix the default name
        is tried instead. Empty when neither does.
        """
        for name in (self.project_name, self.default_name or self.target_dir):
            if name.startswith(CREATE_PREFIX):
                return name[len(CREATE_PREFIX):]
        return ""

    @property
    def force(self) -> bool:
        return self.overwrite or self.flags.force


# =============================================================================
# Tool Settings
# =============================================================================

class ToolSettings(BaseModel):
    """
    Where the scaffolder finds its own files.

    Attributes
    ----------
    source_root : Path
        Root of the scaffolder's source tree. Holds ``package.json``,
        ``bin/``, the env-defaults file and the template tree.
    template_dir : Path | None
        Template tree. Defaults to ``source_root / "template"``.
    env_file : Path | None
        Env-style file providing default template variables. Defaults to
        ``source_root / "defaults.env"``.
    stray_suffixes : tuple[str, ...]
        Extensions removed from the output after rendering.
    origin_name : str
        Manifest name of the original scaffolder checkout. When the source
        root carries this name the whole source tree is copied into new
        projects; otherwise only ``bin/`` is.
    """

    source_root: Path = Field(default_factory=lambda: SKELETON_DIR)
    template_dir: Path | None = None
    env_file: Path | None = None
    stray_suffixes: tuple[str, ...] = (".ts",)
    origin_name: str = DEFAULT_PROJECT_NAME

    @property
    def template_root(self) -> Path:
        return self.template_dir or self.source_root / "template"

    @property
    def env_path(self) -> Path:
        return self.env_file or self.source_root / "defaults.env"

    @property
    def bin_dir(self) -> Path:
        return self.source_root / "bin"

    def load_env_defaults(self) -> dict[str, str]:
        """
        Parse the env-defaults file. A missing file yields no defaults.

        Keys declared without a value map to an empty string. Values are
        taken literally: ``${VAR}`` references are not expanded.
        """
        if not self.env_path.is_file():
            return {}
        values = dotenv_values(self.env_path, interpolate=False)
        return {key: value or "" for key, value in values.items()}

    def source_manifest_name(self) -> str | None:
        """``name`` from the source root's manifest, if it has one."""
        manifest_path = self.source_root / "package.json"
        if not manifest_path.is_file():
            return None
        with manifest_path.open(encoding="utf-8") as f:
            return json.load(f).get("name")

    @property
    def is_origin(self) -> bool:
        """True when running from the original scaffolder source tree."""
        return self.source_manifest_name() == self.origin_name

    @classmethod
    def from_toml(cls, path: Path) -> ToolSettings:
        """
        Load settings from a TOML file.

        Relative paths are resolved against the file's directory. Settings
        may sit at the top level or under a ``[tool.forgekit]`` table.

        Raises
        ------
        FileNotFoundError
            If the config file doesn't exist.
        ValidationError
            If the config file has invalid values.
        """
        import tomli

        with open(path, "rb") as f:
            data = tomli.load(f)

        data = data.get("tool", {}).get("forgekit", data)
        base = Path(path).resolve().parent
        for key in ("source_root", "template_dir", "env_file"):
            if data.get(key) is not None:
                data[key] = base / data[key]
        if "stray_suffixes" in data:
            data["stray_suffixes"] = tuple(data["stray_suffixes"])

        return cls(**data)
