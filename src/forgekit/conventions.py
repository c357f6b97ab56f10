"""
forgekit.conventions - File-Name Conventions
============================================

Template trees encode intent in file names. This module keeps every such
convention in one declarative table so it can be tested without touching
the file system.

Conventions
-----------
=========  ==================  =========================================
Kind       Pattern             Transformation
=========  ==================  =========================================
DOTFILE    ``_name``           ``.name`` (dunder names are left alone)
DATA       ``name.data.py``    registers render data for ``name``
TEMPLATE   ``name.j2``         rendered to ``name``
TEMPLATE   ``name.jinja``      rendered to ``name``
=========  ==================  =========================================

Examples
--------
>>> dotfile_name("_gitignore")
'.gitignore'
>>> rendered_name(".env.j2")
'.env'
>>> data_target("main.js.data.py")
'main.js'
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum


class RuleKind(str, Enum):
    """What a matching name means to the pipeline."""

    DOTFILE = "dotfile"
    DATA = "data"
    TEMPLATE = "template"


@dataclass(frozen=True)
class NameRule:
    """A single ``pattern -> replacement`` rule applied to a bare file name."""

    kind: RuleKind
    pattern: str
    replacement: str

    def matches(self, name: str) -> bool:
        return re.search(self.pattern, name) is not None

    def apply(self, name: str) -> str:
        return re.sub(self.pattern, self.replacement, name, count=1)


NAME_RULES: tuple[NameRule, ...] = (
    NameRule(RuleKind.DOTFILE, r"^_(?!_)", "."),
    NameRule(RuleKind.DATA, r"\.data\.py$", ""),
    NameRule(RuleKind.TEMPLATE, r"\.j2$", ""),
    NameRule(RuleKind.TEMPLATE, r"\.jinja$", ""),
)


def find_rule(name: str, kind: RuleKind) -> NameRule | None:
    """Return the first rule of ``kind`` matching ``name``, if any."""
    for rule in NAME_RULES:
        if rule.kind is kind and rule.matches(name):
            return rule
    return None


def _transform(name: str, kind: RuleKind) -> str | None:
    rule = find_rule(name, kind)
    return rule.apply(name) if rule is not None else None


def dotfile_name(name: str) -> str:
    """Translate a reserved-prefix name into its real dotted form."""
    return _transform(name, RuleKind.DOTFILE) or name


def is_template(name: str) -> bool:
    """True when ``name`` carries a render-me suffix."""
    return find_rule(name, RuleKind.TEMPLATE) is not None


def rendered_name(name: str) -> str:
    """Strip the template suffix; names without one are returned unchanged."""
    return _transform(name, RuleKind.TEMPLATE) or name


def data_target(name: str) -> str | None:
    """Name of the file a ``.data.py`` module supplies data for, else None."""
    return _transform(name, RuleKind.DATA)
