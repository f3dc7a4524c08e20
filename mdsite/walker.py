from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Optional

from .aggregate import emit, should_emit_index, sort_posts
from .assets import copy_static
from .config import SiteConfig
from .context import BuildContext, CommitLookup, Frame, output_prefix
from .document import build_document, build_landing, find_index, is_source_file, read_document
from .errors import BuildError
from .gitinfo import GitRepository
from .models import BlogPost, Directory
from .render import load_template
from .sitemap import build_sitemap, write_robots
from .utils import clean_output_dir

logger = logging.getLogger(__name__)

PAGE_TEMPLATE = "page.html"
LANDING_TEMPLATE = "landing.html"


@dataclass(frozen=True)
class BuildReport:
    output_dir: Path
    posts: int
    pages: int
    static_files: int = 0
    sitemap: bool = False


def _scan(input_dir: Path) -> list[Path]:
    try:
        entries = sorted(input_dir.iterdir(), key=lambda entry: entry.name)
    except OSError as exc:
        raise BuildError(f"Cannot read directory {input_dir}: {exc}") from exc
    return [entry for entry in entries if not entry.name.startswith(".")]


@dataclass
class WalkResult:
    # newest first
    posts: list[BlogPost]
    # whether this build wrote the directory's index.html
    has_index: bool = False
    # page path below the output root -> source document
    sources: dict[str, Path] = field(default_factory=dict)


def walk_directory(ctx: BuildContext, input_dir: Path) -> WalkResult:
    """Build one directory and everything below it."""
    frame = Frame.enter(ctx, input_dir)
    logger.debug(
        "Entering %s (depth %d, %s, prefix %r)",
        input_dir,
        frame.depth,
        frame.position.kind.value,
        frame.paths.prefix,
    )
    entries = _scan(input_dir)
    documents = [read_document(entry) for entry in entries if entry.is_file() and is_source_file(entry)]
    index_doc = find_index(documents)

    posts: list[BlogPost] = []
    directories: list[Directory] = []
    sources: dict[str, Path] = {}
    if ctx.config.recursive:
        for entry in entries:
            if not entry.is_dir() or entry.resolve() == ctx.output_root:
                continue
            child = walk_directory(ctx, entry)
            posts.extend(child.posts)
            sources.update(child.sources)
            if child.has_index:
                directories.append(Directory(entry.name, f"{entry.name}/index.html"))

    for document in documents:
        if document.is_index:
            if document is not index_doc:
                logger.warning("Ignoring %s, %s is the directory index", document.path, index_doc.path.name)
            continue
        if document.is_landing:
            logger.warning("Landing template is only used by index files, rendering %s as a page", document.path)
            document = replace(document, meta=document.meta.resolved(template=""))
        post = build_document(ctx, frame, document).post
        posts.append(post)
        sources[post.url_path] = document.path

    posts = sort_posts(posts)
    has_landing = index_doc is not None and index_doc.is_landing
    listing = should_emit_index(
        frame,
        posts,
        directories,
        has_landing=has_landing,
        has_own_index=index_doc is not None,
        generate_list=ctx.config.generate_list,
    )

    intro_html = ""
    if has_landing:
        build_landing(ctx, frame, index_doc, posts)
    elif index_doc is not None:
        result = build_document(ctx, frame, index_doc, write=not listing)
        if listing:
            intro_html = result.body_html
    if index_doc is not None:
        sources[frame.url_path("index.html")] = index_doc.path

    emit(ctx, frame, posts, directories, listing=listing, intro_html=intro_html)
    return WalkResult(posts=posts, has_index=listing or index_doc is not None, sources=sources)


def open_repository(config: SiteConfig, repository: Optional[CommitLookup]) -> Optional[CommitLookup]:
    if repository is not None or not config.use_git:
        return repository
    repository = GitRepository.open(config.input_dir)
    if repository is None:
        logger.info("No git repository found, dates and authors come from front matter only")
    return repository


def build_site(config: SiteConfig, repository: Optional[CommitLookup] = None) -> BuildReport:
    input_dir = config.input_dir
    output_dir = config.output_dir
    if not input_dir.is_dir():
        raise BuildError(f"Input directory not found: {input_dir}")
    if config.clean:
        clean_output_dir(output_dir, Path.cwd())
    try:
        output_dir.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise BuildError(f"Cannot create output directory {output_dir}: {exc}") from exc

    ctx = BuildContext(
        config=config,
        input_root=input_dir.resolve(),
        output_root=output_dir.resolve(),
        page_template=load_template(PAGE_TEMPLATE, config.template_file),
        landing_template=load_template(LANDING_TEMPLATE),
        repository=open_repository(config, repository),
        output_prefix=output_prefix(output_dir),
    )
    result = walk_directory(ctx, ctx.input_root)

    static_files = 0
    if config.static_dir:
        static_files = copy_static(Path(config.static_dir), ctx.output_root, minify=config.minify)
        logger.info("Copied %d static files from %s", static_files, config.static_dir)

    if config.enable_robots:
        write_robots(ctx.output_root, config.site_url)

    sitemap = False
    if config.enable_sitemap:
        if config.site_url:
            build_sitemap(
                ctx.output_root,
                config.site_url,
                config.section_names(),
                result.sources,
                ctx.repository,
                ctx.output_prefix,
            )
            sitemap = True
        else:
            logger.warning("No site URL configured, skipping sitemap")

    pages = sum(1 for _ in ctx.output_root.rglob("*.html"))
    return BuildReport(
        output_dir=output_dir,
        posts=len(result.posts),
        pages=pages,
        static_files=static_files,
        sitemap=sitemap,
    )
