"""
pytest configuration and shared fixtures for forgekit tests.

Fixtures
--------
source_root : Path
    A miniature scaffolder source tree (manifest, bin/, env file, template).

settings : ToolSettings
    Tool settings pointing at ``source_root``.

work_dir : Path
    An empty directory the projects are created in.
"""

import json
from pathlib import Path

import pytest

from forgekit.models import ToolSettings


def write(path: Path, content: str) -> Path:
    """Write ``content`` to ``path``, creating parent directories."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
    return path


@pytest.fixture
def source_root(tmp_path: Path) -> Path:
    """
    Build a small scaffolder source tree.

    Layout::

        source/
        ├── package.json          (name: create-demo)
        ├── defaults.env
        ├── bin/init-github.sh
        └── template/
            ├── package.json
            ├── _gitignore
            ├── _env.j2
            ├── README.md.j2
            ├── README.md.data.py
            └── scripts/
                ├── setup.js
                └── setup.ts
    """
    root = tmp_path / "source"
    write(root / "package.json", json.dumps({"name": "create-demo", "version": "1.0.0"}))
    write(root / "defaults.env", 'AUTHOR=tester\nGREETING="hello"\n')
    write(root / "bin" / "init-github.sh", "#!/bin/sh\necho init\n")

    template = root / "template"
    write(
        template / "package.json",
        json.dumps(
            {
                "name": "template",
                "version": "0.0.0",
                "scripts": {"dev": "vite"},
                "dependencies": {"vue": "^3.4.0", "axios": "^1.6.0"},
                "devDependencies": {"vite": "^5.0.0", "@vitejs/plugin-vue": "^5.0.0"},
            }
        ),
    )
    write(template / "_gitignore", "node_modules\n")
    write(template / "_env.j2", "NODE_ENV={{ NODE_ENV }}\nAUTHOR={{ AUTHOR }}\n")
    write(
        template / "README.md.j2",
        "# {{ TARGET_DIR }}\n{{ DESCRIPTION }}\n"
        "{% if TYPESCRIPT %}typescript{% endif %}\n",
    )
    write(
        template / "README.md.data.py",
        "def get_data(old_data):\n"
        "    return {**old_data, 'DESCRIPTION': 'from callback'}\n",
    )
    write(template / "scripts" / "setup.js", "export default {}\n")
    write(template / "scripts" / "setup.ts", "export default {}\n")
    return root


@pytest.fixture
def settings(source_root: Path) -> ToolSettings:
    """Tool settings for the miniature source tree."""
    return ToolSettings(source_root=source_root)


@pytest.fixture
def work_dir(tmp_path: Path) -> Path:
    """Directory in which test projects are created."""
    directory = tmp_path / "work"
    directory.mkdir()
    return directory


# =============================================================================
# pytest Configuration
# =============================================================================

def pytest_configure(config: pytest.Config) -> None:
    """Register custom markers used in the test suite."""
    config.addinivalue_line(
        "markers", "integration: marks end-to-end tests touching the shipped skeleton"
    )


@pytest.fixture
def write_file():
    """The ``write(path, content)`` helper, for tests building their own trees."""
    return write
