from __future__ import annotations

import datetime as dt
from pathlib import Path
from typing import Optional

import pytest

from mdsite.config import SiteConfig
from mdsite.context import BuildContext
from mdsite.gitinfo import CommitInfo
from mdsite.render import load_template


class FakeRepository:
    """Stands in for git: answers last-commit lookups from a fixed table."""

    def __init__(self, commits: Optional[dict[Path, CommitInfo]] = None):
        self.commits = {Path(path).resolve(): info for path, info in (commits or {}).items()}

    def add(self, path: Path, when: str, author: str = "Git Author", commit_hash: str = "0123456789abcdef") -> None:
        self.commits[Path(path).resolve()] = CommitInfo(
            hash=commit_hash,
            modified=dt.datetime.fromisoformat(when),
            author=author,
        )

    def last_commit(self, path: Path) -> Optional[CommitInfo]:
        path = Path(path).resolve()
        return self.commits.get(path)


def write(path: Path, text: str) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    return path


def post(title: str = "", date: str = "", tags: str = "", body: str = "Some words here.", **extra: str) -> str:
    lines = []
    if title:
        lines.append(f"Title: {title}")
    if date:
        lines.append(f"Date: {date}")
    if tags:
        lines.append(f"Tags: {tags}")
    for key, value in extra.items():
        lines.append(f"{key}: {value}")
    header = "<!--\n" + "\n".join(lines) + "\n-->\n" if lines else ""
    return f"{header}{body}\n"


@pytest.fixture
def repository() -> FakeRepository:
    return FakeRepository()


@pytest.fixture
def site_config(tmp_path: Path):
    def factory(**overrides) -> SiteConfig:
        values = {
            "input_dir": tmp_path / "content",
            "output_dir": tmp_path / "site",
            "site_title": "My Site",
            "site_url": "https://example.org",
            "default_author": "Jane Doe",
            "use_git": False,
        }
        values.update(overrides)
        return SiteConfig(**values)

    return factory


@pytest.fixture
def make_context(site_config, repository):
    def factory(**overrides) -> BuildContext:
        config = site_config(**overrides)
        config.input_dir.mkdir(parents=True, exist_ok=True)
        config.output_dir.mkdir(parents=True, exist_ok=True)
        return BuildContext(
            config=config,
            input_root=config.input_dir.resolve(),
            output_root=config.output_dir.resolve(),
            page_template=load_template("page.html"),
            landing_template=load_template("landing.html"),
            repository=repository,
        )

    return factory
