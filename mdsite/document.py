from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Sequence

from .content import (
    FrontMatter,
    extract_landing_links,
    extract_landing_sections,
    extract_plain_text,
    normalize_tags,
    output_stem,
    parse_front_matter,
    read_time,
)
from .context import BuildContext, Frame
from .errors import BuildError
from .gitinfo import commit_url
from .models import BlogPost
from .pages import render_landing, render_page
from .render import render_markdown
from .utils import write_text

logger = logging.getLogger(__name__)

SOURCE_SUFFIXES = (".md", ".markdown")
INDEX_NAMES = ("index.md", "index.markdown")


@dataclass(frozen=True)
class SourceDocument:
    path: Path
    meta: FrontMatter
    body: str

    @property
    def is_index(self) -> bool:
        return self.path.name in INDEX_NAMES

    @property
    def is_landing(self) -> bool:
        return self.meta.is_landing


@dataclass(frozen=True)
class DocumentResult:
    source: Path
    output_path: Path
    meta: FrontMatter
    body_html: str
    post: BlogPost


def is_source_file(path: Path) -> bool:
    return path.suffix.lower() in SOURCE_SUFFIXES


def read_document(path: Path) -> SourceDocument:
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise BuildError(f"Cannot read {path}: {exc}") from exc
    meta, body = parse_front_matter(text)
    return SourceDocument(path=path, meta=meta, body=body)


def build_document(
    ctx: BuildContext, frame: Frame, document: SourceDocument, write: bool = True
) -> DocumentResult:
    """Render one source document into its directory's output and describe it as a post.

    Title, author and date are resolved once here (front matter, then the
    last commit, then the configured default) and written back into the
    returned metadata, so the page, listings and feeds all show the same
    values.
    """
    if document.is_landing:
        raise BuildError(f"{document.path} is a landing page and has no post record")
    source = document.path
    meta = document.meta
    commit = ctx.last_commit(source)
    stem = output_stem(source.name)

    title = meta.title or stem
    author = meta.author or (commit.author if commit else "") or ctx.config.default_author
    date = meta.date or (commit.date if commit else "")
    resolved = meta.resolved(title=title, author=author, date=date)

    body_html = render_markdown(document.body, source.parent, ctx.input_root)
    plain_text = extract_plain_text(document.body)
    minutes = read_time(plain_text)
    tags = normalize_tags(meta.tags)

    filename = f"{stem}.html"
    output_path = frame.output_dir / filename
    url_path = frame.url_path(filename)
    if write:
        page = render_page(ctx, frame, resolved, body_html, tags, minutes, url_path, commit)
        write_text(output_path, page)
        logger.debug("Wrote %s", output_path)

    post = BlogPost(
        title=title,
        link=filename,
        url_path=url_path,
        description=meta.description,
        date=date,
        author=author,
        tags=tags,
        content=plain_text,
        read_time=minutes,
        image=meta.image,
        source=source,
        commit=commit,
        commit_url=commit_url(ctx.config.git_web_url, commit.hash) if commit else "",
    )
    return DocumentResult(source=source, output_path=output_path, meta=resolved, body_html=body_html, post=post)


def build_landing(
    ctx: BuildContext, frame: Frame, document: SourceDocument, posts: Sequence[BlogPost]
) -> Path:
    recent = list(posts[: ctx.config.recent_posts])
    sections = extract_landing_sections(document.body)
    links = extract_landing_links(document.body)
    page = render_landing(ctx, frame, document.meta, sections, links, recent)
    output_path = frame.output_dir / "index.html"
    write_text(output_path, page)
    logger.info("Generated landing page: %s", output_path)
    return output_path


def find_index(documents: Sequence[SourceDocument]) -> Optional[SourceDocument]:
    for name in INDEX_NAMES:
        for document in documents:
            if document.path.name == name:
                return document
    return None
