"""Relative path bookkeeping for generated pages.

Every page links the shared stylesheet and script through a relative prefix,
so the prefix has to be recomputed for each output directory. Sections such as
``blog`` keep their assets next to the section directory instead of at the
output root and use fixed prefixes instead of the generic depth.
"""
from __future__ import annotations

import enum
import logging
import posixpath
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Optional, Sequence

logger = logging.getLogger(__name__)

ABSOLUTE_PREFIXES = ("http://", "https://")


@dataclass(frozen=True)
class SectionRule:
    name: str
    root_hops: int = 1
    category_hops: int = 2


DEFAULT_SECTIONS: tuple[SectionRule, ...] = (SectionRule("blog"),)


class PositionKind(enum.Enum):
    NOT_BLOG = "not-blog"
    BLOG_ROOT = "blog-root"
    BLOG_CATEGORY = "blog-category"
    BLOG_NESTED = "blog-nested"


@dataclass(frozen=True)
class Position:
    kind: PositionKind
    section: Optional[SectionRule] = None
    # output-root segments up to and including the section directory
    base: Optional[tuple[str, ...]] = ()
    # segments below the section directory
    trail: tuple[str, ...] = ()

    @property
    def in_section(self) -> bool:
        return self.kind is not PositionKind.NOT_BLOG

    @property
    def category(self) -> Optional[str]:
        if self.kind is PositionKind.BLOG_CATEGORY:
            return self.trail[0]
        return None

    @property
    def section_path(self) -> Optional[str]:
        """Section directory below the output root, None outside a section or above the root."""
        if not self.in_section or self.base is None:
            return None
        return "/".join(self.base)

    def fixed_hops(self) -> Optional[int]:
        if self.section is None:
            return None
        if self.kind is PositionKind.BLOG_ROOT:
            return self.section.root_hops
        if self.kind is PositionKind.BLOG_CATEGORY:
            return self.section.category_hops
        return len(self.trail)


NOT_BLOG = Position(PositionKind.NOT_BLOG)


@dataclass(frozen=True)
class PathConfig:
    prefix: str
    css_path: str
    js_path: str
    back_url: str
    hops: int


def _split(path: str) -> list[str]:
    return [part for part in path.replace("\\", "/").split("/") if part and part != "."]


def path_depth(input_dir: Path | str, input_root: Path | str) -> int:
    """Number of directory levels between ``input_root`` and ``input_dir``."""
    try:
        current = Path(input_dir).resolve()
        root = Path(input_root).resolve()
    except (OSError, RuntimeError) as exc:
        logger.warning("Cannot resolve %s against %s (%s), using depth 0", input_dir, input_root, exc)
        return 0
    if current == root:
        return 0
    try:
        return len(current.relative_to(root).parts)
    except ValueError:
        pass

    root_str = "/".join(_split(str(root)))
    current_str = "/".join(_split(str(current)))
    if current_str == root_str:
        return 0
    if current_str.startswith(root_str + "/"):
        return len(_split(current_str[len(root_str) + 1 :]))

    logger.warning("%s is not below %s, using depth 0", input_dir, input_root)
    return 0


def classify_position(
    parts: Iterable[str],
    sections: Sequence[SectionRule] = DEFAULT_SECTIONS,
    prefix: Iterable[str] = (),
) -> Position:
    """Classify an output directory, given as segments below the output root.

    ``prefix`` holds the segments of the output root itself, so an output
    root such as ``dist/blog`` is the blog root. ``base`` stays relative to
    the output root; a section directory above it leaves ``base`` as None.
    """
    prefix = tuple(_split("/".join(prefix)))
    segments = prefix + tuple(_split("/".join(parts)))
    rules = {rule.name: rule for rule in sections}
    for index, segment in enumerate(segments):
        rule = rules.get(segment)
        if rule is None:
            continue
        base = segments[len(prefix) : index + 1] if index + 1 >= len(prefix) else None
        trail = segments[index + 1 :]
        if not trail:
            kind = PositionKind.BLOG_ROOT
        elif len(trail) == 1:
            kind = PositionKind.BLOG_CATEGORY
        else:
            kind = PositionKind.BLOG_NESTED
        return Position(kind, rule, base, trail)
    return NOT_BLOG


def prefix_asset(path: str, hops: int) -> str:
    if path.startswith(ABSOLUTE_PREFIXES):
        return path
    return "../" * max(hops, 0) + path.lstrip("/")


def back_url(depth: int) -> str:
    if depth <= 0:
        return ""
    if depth == 1:
        return "../index.html"
    return "../" * depth + "index.html"


def resolve_asset_paths(css_path: str, js_path: str, position: Position, depth: int) -> PathConfig:
    hops = position.fixed_hops()
    if hops is None:
        hops = max(depth, 0)
        back = back_url(depth)
    else:
        back = "../index.html"
    return PathConfig(
        prefix="../" * hops,
        css_path=prefix_asset(css_path, hops),
        js_path=prefix_asset(js_path, hops),
        back_url=back,
        hops=hops,
    )


def relative_href(from_dir: str, target: str) -> str:
    """Forward-slash href from a site-relative directory to a site-relative target."""
    from_dir = "/".join(_split(from_dir)) or "."
    target_parts = _split(target)
    if not target_parts:
        return posixpath.relpath(".", from_dir) + "/"
    return posixpath.relpath("/".join(target_parts), from_dir)
