from __future__ import annotations

import datetime as dt
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from .gitinfo import CommitInfo
from .utils import as_utc, parse_date


@dataclass(frozen=True)
class BlogPost:
    title: str
    # file name inside the post's own output directory
    link: str
    # path from the output root, forward slashes
    url_path: str
    description: str = ""
    date: str = ""
    author: str = ""
    tags: tuple[str, ...] = ()
    content: str = ""
    read_time: int = 1
    image: str = ""
    source: Optional[Path] = None
    commit: Optional[CommitInfo] = None
    commit_url: str = ""

    @property
    def sort_date(self) -> dt.datetime:
        if self.commit is not None:
            return as_utc(self.commit.modified)
        parsed = parse_date(self.date)
        if parsed is None:
            return dt.datetime.min
        return as_utc(parsed)


@dataclass
class TagInfo:
    """Posts sharing one tag page; tags that slugify alike share the page."""

    slug: str
    names: list[str] = field(default_factory=list)
    posts: list[BlogPost] = field(default_factory=list)

    @property
    def name(self) -> str:
        return " / ".join(self.names)

    @property
    def count(self) -> int:
        return len(self.posts)


@dataclass(frozen=True)
class Directory:
    name: str
    link: str
