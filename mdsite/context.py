from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Protocol

from .config import SiteConfig
from .gitinfo import CommitInfo
from .paths import PathConfig, Position, classify_position, path_depth, relative_href, resolve_asset_paths

logger = logging.getLogger(__name__)

TAGS_DIR = "tags"


class CommitLookup(Protocol):
    def last_commit(self, path: Path) -> Optional[CommitInfo]: ...


def output_prefix(output_dir: Path) -> tuple[str, ...]:
    """Segments of the output directory as the user gave it, relative to the working directory."""
    output_dir = Path(output_dir)
    if output_dir.is_absolute():
        cwd = Path.cwd()
        if not output_dir.is_relative_to(cwd):
            return (output_dir.name,)
        output_dir = output_dir.relative_to(cwd)
    return tuple(part for part in output_dir.parts if part not in (".", ".."))


def tags_dir_name(section_dir: Path) -> str:
    """Directory name for a section's tag pages that no source directory uses."""
    name = TAGS_DIR
    suffix = 2
    while (section_dir / name).is_dir():
        name = f"{TAGS_DIR}-{suffix}"
        suffix += 1
    return name


@dataclass
class BuildContext:
    """Read-only state shared by every directory frame of one build."""

    config: SiteConfig
    input_root: Path
    output_root: Path
    page_template: str
    landing_template: str
    repository: Optional[CommitLookup] = None
    # segments of the output root itself, classified with the segments below it
    output_prefix: tuple[str, ...] = ()

    def last_commit(self, path: Path) -> Optional[CommitInfo]:
        if self.repository is None:
            return None
        return self.repository.last_commit(path)


@dataclass(frozen=True)
class Frame:
    input_dir: Path
    output_dir: Path
    # segments below the input root, mirrored below the output root
    parts: tuple[str, ...]
    depth: int
    position: Position
    paths: PathConfig
    # tag page directory of the enclosing section, below the output root
    tags_path: Optional[str] = None

    @classmethod
    def enter(cls, ctx: BuildContext, input_dir: Path) -> "Frame":
        try:
            parts = Path(input_dir).relative_to(ctx.input_root).parts
        except ValueError:
            logger.warning("%s is not below %s, treating it as the root", input_dir, ctx.input_root)
            parts = ()
        depth = path_depth(input_dir, ctx.input_root)
        position = classify_position(parts, ctx.config.sections, ctx.output_prefix)
        paths = resolve_asset_paths(ctx.config.css_path, ctx.config.js_path, position, depth)
        tags_path = None
        if position.section_path is not None:
            section_dir = ctx.input_root.joinpath(*position.base)
            tags_path = "/".join(position.base + (tags_dir_name(section_dir),))
        return cls(
            input_dir=Path(input_dir),
            output_dir=ctx.output_root.joinpath(*parts),
            parts=tuple(parts),
            depth=depth,
            position=position,
            paths=paths,
            tags_path=tags_path,
        )

    @property
    def name(self) -> str:
        return self.parts[-1] if self.parts else ""

    @property
    def rel_dir(self) -> str:
        return "/".join(self.parts)

    def url_path(self, filename: str) -> str:
        return "/".join(self.parts + (filename,))

    def href(self, target: str) -> str:
        """Relative href from this directory to a path below the output root."""
        return relative_href(self.rel_dir, target)
