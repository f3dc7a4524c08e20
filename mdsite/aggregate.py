"""Per-directory artifacts built from the posts a directory frame collected.

Posts bubble up the recursion as return values; each directory decides what
to emit from its own complete list, so tag pages at a section root always
see every post below it.
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Sequence

from .content import folder_title, slugify
from .context import TAGS_DIR, BuildContext, Frame
from .errors import BuildError
from .feeds import FEED_FILE, build_feed, build_search_index
from .models import BlogPost, Directory, TagInfo
from .pages import render_index, render_tag_page, render_tags_index
from .paths import PositionKind
from .utils import write_text

logger = logging.getLogger(__name__)

INDEX_TITLE_FILE = "index_title.txt"


def sort_posts(posts: Sequence[BlogPost]) -> list[BlogPost]:
    """Newest first; undated posts last; ties ordered by title, then path."""
    ordered = sorted(posts, key=lambda post: (post.title, post.url_path))
    return sorted(ordered, key=lambda post: post.sort_date, reverse=True)


def collect_tags(posts: Sequence[BlogPost]) -> dict[str, TagInfo]:
    """Group posts by tag page slug; tags such as ``C`` and ``C#`` share one page."""
    tags: dict[str, TagInfo] = {}
    for post in sort_posts(posts):
        for name in post.tags:
            slug = slugify(name)
            tag = tags.setdefault(slug, TagInfo(slug))
            if name not in tag.names:
                tag.names.append(name)
            if not tag.posts or tag.posts[-1] is not post:
                tag.posts.append(post)
    for tag in tags.values():
        tag.names.sort(key=lambda name: (name.lower(), name))
        if len(tag.names) > 1:
            logger.warning("Tags %s share the tag page %s.html", ", ".join(repr(name) for name in tag.names), tag.slug)
    return {slug: tags[slug] for slug in sorted(tags, key=lambda slug: (tags[slug].name.lower(), slug))}


def should_emit_index(
    frame: Frame,
    posts: Sequence[BlogPost],
    directories: Sequence[Directory],
    has_landing: bool,
    has_own_index: bool,
    generate_list: bool,
) -> bool:
    if has_landing:
        return False
    if not posts and not directories:
        return False
    section_level = frame.position.kind in (PositionKind.BLOG_ROOT, PositionKind.BLOG_CATEGORY)
    return generate_list or not has_own_index or section_level


def read_index_title(input_dir: Path) -> str:
    path = input_dir / INDEX_TITLE_FILE
    if not path.is_file():
        return ""
    try:
        return path.read_text(encoding="utf-8").strip()
    except (OSError, UnicodeDecodeError) as exc:
        logger.warning("Cannot read %s: %s", path, exc)
        return ""


def index_title(ctx: BuildContext, frame: Frame) -> str:
    return folder_title(frame.name, ctx.config.site_title, read_index_title(frame.input_dir))


def emit_index(
    ctx: BuildContext,
    frame: Frame,
    posts: Sequence[BlogPost],
    directories: Sequence[Directory],
    intro_html: str = "",
) -> Path:
    title = index_title(ctx, frame)
    directories = sorted(directories, key=lambda directory: directory.name)
    path = frame.output_dir / "index.html"
    write_text(path, render_index(ctx, frame, title, posts, directories, intro_html))
    build_search_index(frame.output_dir, posts, frame.rel_dir)
    logger.info("Generated index: %s (%d posts, %d directories)", path, len(posts), len(directories))
    return path


def emit_tag_pages(ctx: BuildContext, frame: Frame, posts: Sequence[BlogPost]) -> int:
    """Write one page per tag plus the tag overview below the section root."""
    tags = collect_tags(posts)
    if not tags or frame.tags_path is None:
        return 0
    if frame.tags_path != frame.url_path(TAGS_DIR):
        logger.warning(
            "%s already has a %s directory, writing tag pages to %s",
            frame.input_dir,
            TAGS_DIR,
            frame.tags_path,
        )
    tags_frame = Frame.enter(ctx, ctx.input_root / frame.tags_path)
    written = 0
    for tag in tags.values():
        path = tags_frame.output_dir / f"{tag.slug}.html"
        try:
            write_text(path, render_tag_page(ctx, tags_frame, tag))
        except (OSError, BuildError) as exc:
            logger.warning("Skipping tag page for %r: %s", tag.name, exc)
            continue
        written += 1
    try:
        write_text(tags_frame.output_dir / "index.html", render_tags_index(ctx, tags_frame, list(tags.values())))
    except (OSError, BuildError) as exc:
        logger.warning("Skipping tag overview in %s: %s", tags_frame.output_dir, exc)
    logger.info("Generated %d tag pages in %s", written, tags_frame.output_dir)
    return written


def feed_title(ctx: BuildContext, frame: Frame) -> str:
    category = frame.position.category
    if category:
        return f"{ctx.config.site_title} - {category}"
    return ctx.config.site_title


def emit_feed(ctx: BuildContext, frame: Frame, posts: Sequence[BlogPost]) -> bool:
    if not ctx.config.site_url:
        logger.warning("No site URL configured, skipping feed for %s", frame.output_dir)
        return False
    try:
        path = build_feed(frame.output_dir, frame.url_path(FEED_FILE), posts, ctx.config, feed_title(ctx, frame))
    except (OSError, BuildError) as exc:
        logger.warning("Skipping feed for %s: %s", frame.output_dir, exc)
        return False
    logger.info("Generated feed: %s (%d items)", path, len(posts))
    return True


def emit(
    ctx: BuildContext,
    frame: Frame,
    posts: Sequence[BlogPost],
    directories: Sequence[Directory],
    listing: bool,
    intro_html: str = "",
) -> None:
    """Emit the directory's listing, tag pages and feed, as its position allows."""
    posts = sort_posts(posts)
    if listing:
        emit_index(ctx, frame, posts, directories, intro_html)
    if not posts:
        return
    kind = frame.position.kind
    if kind is PositionKind.BLOG_ROOT:
        emit_tag_pages(ctx, frame, posts)
    if ctx.config.enable_rss and kind in (PositionKind.BLOG_ROOT, PositionKind.BLOG_CATEGORY):
        emit_feed(ctx, frame, posts)
