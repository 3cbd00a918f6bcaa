"""Role template discovery.

A role template is a markdown file named after the role. Templates bundled
with the package can be overridden (or extended) by files in the crew home's
agents/templates directory.
"""

from __future__ import annotations

from pathlib import Path

from crew.config import PACKAGE_TEMPLATES_DIR, get_templates_dir
from crew.errors import TemplateNotFoundError


def _search_dirs(home: str | Path | None = None) -> list[Path]:
    # User templates first so they shadow bundled ones
    return [get_templates_dir(home), PACKAGE_TEMPLATES_DIR]


def available_roles(home: str | Path | None = None) -> list[str]:
    """Sorted names of every role with a template."""
    roles: set[str] = set()
    for directory in _search_dirs(home):
        if directory.is_dir():
            roles.update(p.stem for p in directory.glob("*.md"))
    return sorted(roles)


def find_template(role: str, home: str | Path | None = None) -> Path:
    """
    Locate the template file for a role.

    Raises:
        TemplateNotFoundError: If no directory has a template for the role.
    """
    for directory in _search_dirs(home):
        candidate = directory / f"{role}.md"
        if candidate.is_file():
            return candidate
    raise TemplateNotFoundError(role, available_roles(home))


def load_template(role: str, home: str | Path | None = None) -> str:
    return find_template(role, home).read_text()
