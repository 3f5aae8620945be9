from __future__ import annotations

from pathlib import Path

import pytest

from tests._fixtures.project_builder import ProjectBuilder


@pytest.fixture
def project_builder(tmp_path: Path) -> ProjectBuilder:
    """Provide a reusable project builder rooted at the pytest tmp_path."""
    return ProjectBuilder(tmp_path)


@pytest.fixture
def sample_project(project_builder: ProjectBuilder) -> ProjectBuilder:
    """`src` with two code files, `vendor` with one, and a `.git` directory."""
    project_builder.write(
        {
            "src/a.py": "print('a')\n",
            "src/b.rs": "fn main() {}\n",
            "vendor/c.js": "console.log('c');\n",
            ".git/config": "[core]\n",
        }
    )
    return project_builder
