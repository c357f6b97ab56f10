"""
forgekit - Template-Driven Project Scaffolder
=============================================

A CLI tool that materializes new ``create-*`` starter projects from a static
template tree: it copies the template, merges the package manifest, renders
Jinja2 placeholders and prints the next steps.

Quick Start
-----------
```bash
# Create a new project interactively
forgekit new my-app

# Or non-interactively with feature flags
forgekit new my-app --typescript --yes
```

Example
-------
>>> from forgekit import ScaffoldConfig, create_project
>>> config = ScaffoldConfig(target_dir="my-app")
>>> result = create_project(config)
>>> result.manifest["name"]
'my-app'

Architecture
------------
The package is organized into these main modules:

- ``cli``: Typer-based command line interface and questionary prompts
- ``generator``: The materialization pipeline (orchestrator)
- ``traverse``: Pre-order and post-order directory traversal
- ``conventions``: File-name conventions (dotfile prefix, template suffixes)
- ``copier``: Template tree copy and project self-copy
- ``manifest``: Manifest deep merge and dependency sorting
- ``renderer``: Placeholder rendering pass and stray-file cleanup
- ``models``: Pydantic models for configuration

License
-------
MIT License - see LICENSE file for details.
"""

# =============================================================================
# Package Metadata
# =============================================================================
__version__ = "0.1.0"
__author__ = "Technical-1"
__license__ = "MIT"

# =============================================================================
# Public API Exports
# =============================================================================

from forgekit.generator import GenerationResult, create_project
from forgekit.models import FeatureFlags, GitHubScope, ScaffoldConfig, ToolSettings


__all__ = [
    "FeatureFlags",
    "GenerationResult",
    "GitHubScope",
    "ScaffoldConfig",
    "ToolSettings",
    "__author__",
    "__version__",
    "create_project",
]
