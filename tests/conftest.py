"""Shared test fixtures for the dromedary test suite.

``site`` lays out a small blog on tmp_path: four dated posts over three days,
a standalone page and two redirect markers. Only ``defaultTags.html`` is
overridden; every other template comes from the built-in defaults.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from dromedary.config import Settings
from dromedary.server import build_state

if TYPE_CHECKING:
    from pathlib import Path

    from dromedary.state import AppState

SITE_FILES: dict[str, str] = {
    "templates/defaultTags.html": "@@SiteTitle=Test Blog\n@@BodyClass=page\n",
    "posts/about.md": "@@Title=About\n\nAbout this site.\n",
    "posts/2014/3/17/birthday.md": (
        "@@Title=Birthday\n"
        "@@Date=2014-03-17 10:30 PM\n"
        "\n"
        "It was my birthday.[^1]\n"
        "\n"
        "[^1]: Really.\n"
    ),
    "posts/2014/3/17/cake.md": (
        "@@Title=Cake\n@@Date=2014-03-17 8:00 AM\n\nThere was cake.\n"
    ),
    "posts/2014/3/10/spring.md": (
        "@@Title=Spring\n"
        "@@Date=2014-03-10 9:00 AM\n"
        "\n"
        "Spring has sprung.[^1]\n"
        "\n"
        "[^1]: Finally.\n"
    ),
    "posts/2013/12/25/christmas.md": (
        "@@Title=Christmas\n@@Date=2013-12-25 7:00 AM\n\nPresents.\n"
    ),
    "posts/old-name.redirect": "301\n/about\n",
    "posts/2014/3/11/moved.redirect": "302\nhttps://example.com/moved\n",
}


def write_files(root: Path, files: dict[str, str]) -> None:
    for relative, content in files.items():
        path = root / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")


@pytest.fixture()
def site(tmp_path: Path) -> Path:
    """A temporary site root holding ``posts/`` and ``templates/``."""
    write_files(tmp_path, SITE_FILES)
    return tmp_path


@pytest.fixture()
def settings(site: Path) -> Settings:
    return Settings(
        content={
            "posts_root": str(site / "posts"),
            "templates_root": str(site / "templates"),
        },
        feed={"site_url": "https://blog.example.com"},
    )


@pytest.fixture()
def app_state(settings: Settings) -> AppState:
    """Fully wired AppState over the temporary site."""
    return build_state(settings)
