from __future__ import annotations

import datetime as dt
import logging
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)

FIELD_SEP = "\x1f"
LOG_FORMAT = FIELD_SEP.join(["%H", "%cI", "%an"])


@dataclass(frozen=True)
class CommitInfo:
    hash: str
    modified: dt.datetime
    author: str

    @property
    def short_hash(self) -> str:
        return self.hash[:8]

    @property
    def date(self) -> str:
        return self.modified.strftime("%Y-%m-%d")

    @property
    def timestamp(self) -> str:
        return self.modified.strftime("%Y-%m-%d %H:%M:%S")


def commit_url(web_url: str, commit_hash: str) -> str:
    if not web_url or not commit_hash:
        return ""
    if not web_url.endswith("/"):
        web_url += "/"
    return web_url + commit_hash


def _git(args: list[str], cwd: Path) -> str:
    result = subprocess.run(
        ["git", *args],
        cwd=cwd,
        capture_output=True,
        text=True,
        check=True,
    )
    return result.stdout.strip()


class GitRepository:
    """Last-commit lookups for files inside one git work tree."""

    def __init__(self, root: Path):
        self.root = root
        self._cache: dict[Path, Optional[CommitInfo]] = {}

    @classmethod
    def open(cls, path: Path) -> Optional["GitRepository"]:
        try:
            top = _git(["rev-parse", "--show-toplevel"], Path(path))
        except (OSError, subprocess.CalledProcessError) as exc:
            logger.debug("No git repository at %s: %s", path, exc)
            return None
        return cls(Path(top).resolve())

    def last_commit(self, path: Path) -> Optional[CommitInfo]:
        path = Path(path).resolve()
        if path in self._cache:
            return self._cache[path]
        info = self._lookup(path)
        self._cache[path] = info
        return info

    def _lookup(self, path: Path) -> Optional[CommitInfo]:
        try:
            rel = path.relative_to(self.root).as_posix()
        except ValueError:
            logger.debug("%s is outside the repository at %s", path, self.root)
            return None
        try:
            output = _git(["log", "-1", f"--format={LOG_FORMAT}", "--", rel], self.root)
        except (OSError, subprocess.CalledProcessError) as exc:
            logger.debug("git log failed for %s: %s", rel, exc)
            return None
        if not output:
            logger.debug("No git history for %s", rel)
            return None
        commit_hash, committed, author = output.split(FIELD_SEP, 2)
        try:
            modified = dt.datetime.fromisoformat(committed)
        except ValueError:
            logger.debug("Unparsable commit date %r for %s", committed, rel)
            return None
        logger.debug("Last commit for %s: %s %s", rel, commit_hash[:8], committed)
        return CommitInfo(hash=commit_hash, modified=modified, author=author)
