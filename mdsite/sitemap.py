from __future__ import annotations

import html
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Mapping, Optional, Sequence

from .context import CommitLookup
from .errors import BuildError
from .render import load_template, render_template
from .utils import join_url, write_text

logger = logging.getLogger(__name__)

SITEMAP_FILE = "sitemap.xml"
SITEMAP_NS = "http://www.sitemaps.org/schemas/sitemap/0.9"
ROBOTS_TEMPLATE = "robots.txt"


@dataclass(frozen=True)
class SitemapEntry:
    loc: str
    changefreq: str
    priority: str
    lastmod: str = ""

    def to_xml(self) -> str:
        lines = ["<url>", f"<loc>{html.escape(self.loc)}</loc>"]
        if self.lastmod:
            lines.append(f"<lastmod>{self.lastmod}</lastmod>")
        lines.append(f"<changefreq>{self.changefreq}</changefreq>")
        lines.append(f"<priority>{self.priority}</priority>")
        lines.append("</url>")
        return "\n".join(lines)


def classify_page(web_path: str, section_names: Iterable[str], prefix: Sequence[str] = ()) -> tuple[str, str]:
    """Change frequency and priority for a page path below the output root."""
    parts = web_path.split("/")
    if web_path == "index.html":
        return "weekly", "1.0"
    if parts[-1] == "index.html":
        return "weekly", "0.8"
    if set(tuple(prefix) + tuple(parts[:-1])) & set(section_names):
        return "monthly", "0.7"
    return "monthly", "0.5"


def build_sitemap(
    output_dir: Path,
    site_url: str,
    section_names: Iterable[str],
    sources: Optional[Mapping[str, Path]] = None,
    repository: Optional[CommitLookup] = None,
    prefix: Sequence[str] = (),
) -> Path:
    """Write ``sitemap.xml`` listing every HTML file already in the output tree.

    ``sources`` maps page paths below the output root to the documents they
    were built from; those pages get their ``lastmod`` from git.
    """
    section_names = set(section_names)
    sources = sources or {}
    prefix = tuple(prefix)
    entries = []
    try:
        pages = sorted(path for path in output_dir.rglob("*.html") if path.is_file())
    except OSError as exc:
        raise BuildError(f"Cannot scan {output_dir}: {exc}") from exc
    for page in pages:
        web_path = page.relative_to(output_dir).as_posix()
        changefreq, priority = classify_page(web_path, section_names, prefix)
        lastmod = ""
        source = sources.get(web_path)
        if repository is not None and source is not None:
            commit = repository.last_commit(source)
            if commit is not None:
                lastmod = commit.modified.isoformat()
        entries.append(SitemapEntry(join_url(site_url, web_path), changefreq, priority, lastmod))

    sitemap = "\n".join(
        [
            '<?xml version="1.0" encoding="UTF-8"?>',
            f'<urlset xmlns="{SITEMAP_NS}">',
            "\n".join(entry.to_xml() for entry in entries),
            "</urlset>",
        ]
    )
    path = output_dir / SITEMAP_FILE
    write_text(path, sitemap)
    logger.info("Generated sitemap: %s (%d URLs)", path, len(entries))
    return path


def write_robots(output_dir: Path, site_url: str) -> Path:
    sitemap_line = f"Sitemap: {join_url(site_url, SITEMAP_FILE)}" if site_url else ""
    text = render_template(load_template(ROBOTS_TEMPLATE), sitemap=sitemap_line)
    path = output_dir / "robots.txt"
    write_text(path, text.rstrip() + "\n")
    logger.info("Generated robots.txt: %s", path)
    return path
