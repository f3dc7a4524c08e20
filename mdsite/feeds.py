from __future__ import annotations

import html
import json
from pathlib import Path
from typing import Sequence

from .config import SiteConfig
from .models import BlogPost
from .paths import relative_href
from .utils import as_utc, join_url, parse_date, rfc822_date, write_text

FEED_FILE = "feed.xml"
SEARCH_INDEX_FILE = "search-index.json"
DEFAULT_DOMAIN = "example.com"


def site_domain(site_url: str) -> str:
    url = site_url.strip()
    for scheme in ("http://", "https://"):
        if url.startswith(scheme):
            url = url[len(scheme) :]
    url = url.split("/", 1)[0]
    return url or DEFAULT_DOMAIN


def format_author_email(name: str, site_url: str, email: str = "") -> str:
    """RSS 2.0 author field, ``email (Display Name)``."""
    if not name:
        return ""
    if not email:
        email = f"{name.replace(' ', '.').lower()}@{site_domain(site_url)}"
    return f"{email} ({name})"


def build_search_index(output_dir: Path, posts: Sequence[BlogPost], from_dir: str) -> Path:
    index = []
    for post in posts:
        index.append(
            {
                "title": post.title,
                "link": relative_href(from_dir, post.url_path),
                "description": post.description,
                "content": post.content,
                "date": post.date,
            }
        )
    path = output_dir / SEARCH_INDEX_FILE
    write_text(path, json.dumps(index, indent=2, ensure_ascii=True))
    return path


def _item(post: BlogPost, config: SiteConfig) -> str:
    link = join_url(config.site_url, post.url_path)
    lines = [
        "<item>",
        f"<title>{html.escape(post.title)}</title>",
        f"<link>{html.escape(link)}</link>",
        f"<description>{html.escape(post.description)}</description>",
    ]
    published = parse_date(post.date)
    if published is not None:
        lines.append(f"<pubDate>{rfc822_date(published)}</pubDate>")
    author = post.author or config.default_author
    if author:
        email = config.author_email if author == config.default_author else ""
        lines.append(f"<author>{html.escape(format_author_email(author, config.site_url, email))}</author>")
    lines.append(f'<guid isPermaLink="true">{html.escape(link)}</guid>')
    lines.append("</item>")
    return "\n".join(lines)


def build_feed(output_dir: Path, feed_path: str, posts: Sequence[BlogPost], config: SiteConfig, title: str) -> Path:
    """Write an RSS 2.0 feed for ``posts``, which are expected newest first.

    ``feed_path`` is the feed's own path below the output root, used for the
    ``atom:link rel="self"`` reference.
    """
    site_url = config.site_url.rstrip("/")
    dates = [parsed for parsed in (parse_date(post.date) for post in posts) if parsed is not None]
    channel = [
        f"<title>{html.escape(title)}</title>",
        f"<link>{html.escape(site_url)}/</link>",
        f"<description>{html.escape(f'Blog posts from {title}')}</description>",
        "<language>en-us</language>",
    ]
    if dates:
        channel.append(f"<lastBuildDate>{rfc822_date(max(dates, key=as_utc))}</lastBuildDate>")
    self_url = html.escape(join_url(site_url, feed_path))
    channel.append(f'<atom:link href="{self_url}" rel="self" type="application/rss+xml" />')
    channel.extend(_item(post, config) for post in posts)
    rss = "\n".join(
        [
            '<?xml version="1.0" encoding="UTF-8"?>',
            '<rss version="2.0" xmlns:atom="http://www.w3.org/2005/Atom">',
            "<channel>",
            "\n".join(channel),
            "</channel>",
            "</rss>",
        ]
    )
    path = output_dir / FEED_FILE
    write_text(path, rss)
    return path
