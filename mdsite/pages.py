from __future__ import annotations

import datetime as dt
import html
from typing import Optional, Sequence

from .content import FrontMatter, LandingLink, LandingSection, parse_settings, read_time_label, slugify
from .context import BuildContext, Frame
from .gitinfo import CommitInfo, commit_url
from .models import BlogPost, Directory, TagInfo
from .render import fill_template, render_markdown
from .utils import join_url


def page_url(ctx: BuildContext, url_path: str) -> str:
    if ctx.config.site_url:
        return join_url(ctx.config.site_url, url_path)
    return url_path


def page_context(
    ctx: BuildContext,
    frame: Frame,
    title: str,
    content: str,
    description: str = "",
    author: str = "",
    date: str = "",
    url: str = "",
    image: str = "",
    settings: frozenset[str] = frozenset(),
    extra_head: str = "",
) -> dict[str, str]:
    back = frame.paths.back_url
    back_link = f'<a class="back-link" href="{back}">&larr; Back</a>' if back else ""
    body_class = " ".join(f"setting-{flag}" for flag in sorted(settings))
    return {
        "title": html.escape(title),
        "site_name": html.escape(ctx.config.site_title),
        "description": html.escape(description),
        "author": html.escape(author),
        "date": html.escape(date),
        "url": html.escape(url),
        "image": html.escape(image),
        "css_path": frame.paths.css_path,
        "js_path": frame.paths.js_path,
        "root": frame.href(""),
        "back_link": back_link,
        "theme": html.escape(ctx.config.default_theme),
        "body_class": body_class,
        "year": str(dt.date.today().year),
        "extra_head": extra_head,
        "content": content,
    }


def tag_href(frame: Frame, tag: str) -> Optional[str]:
    """Link to a tag page, which only exists inside a section."""
    if frame.tags_path is None:
        return None
    return frame.href(f"{frame.tags_path}/{slugify(tag)}.html")


def build_tag_chips(frame: Frame, tags: Sequence[str]) -> str:
    chips = []
    for tag in tags:
        href = tag_href(frame, tag)
        if href:
            chips.append(f'<a class="chip" href="{href}">{html.escape(tag)}</a>')
        else:
            chips.append(f'<span class="chip">{html.escape(tag)}</span>')
    return " ".join(chips)


def build_commit_info(ctx: BuildContext, commit: Optional[CommitInfo]) -> str:
    if commit is None or not ctx.config.show_commit_info:
        return ""
    url = commit_url(ctx.config.git_web_url, commit.hash)
    ref = f'<a href="{url}">{commit.short_hash}</a>' if url else f"<code>{commit.short_hash}</code>"
    return (
        '<p class="commit-info">'
        f'Last updated <time datetime="{commit.modified.isoformat()}">{commit.timestamp}</time>'
        f" by {html.escape(commit.author)} in {ref}"
        "</p>"
    )


def build_post_meta(date: str, author: str, minutes: int, tags_html: str) -> str:
    parts = []
    if date:
        parts.append(f'<span class="post-date">{html.escape(date)}</span>')
    if author:
        parts.append(f'<span class="post-author">{html.escape(author)}</span>')
    parts.append(f'<span class="post-read-time">{read_time_label(minutes)}</span>')
    meta = f'<div class="post-meta-left">{"".join(parts)}</div>'
    if tags_html:
        meta += f'<div class="post-tags">{tags_html}</div>'
    return f'<div class="post-meta">{meta}</div>'


def render_page(
    ctx: BuildContext,
    frame: Frame,
    meta: FrontMatter,
    body_html: str,
    tags: Sequence[str],
    minutes: int,
    url_path: str,
    commit: Optional[CommitInfo] = None,
) -> str:
    content = (
        '<article class="post">'
        f'<h1 class="post-title">{html.escape(meta.title)}</h1>'
        f"{build_post_meta(meta.date, meta.author, minutes, build_tag_chips(frame, tags))}"
        f'<div class="post-body">{body_html}</div>'
        f"{build_commit_info(ctx, commit)}"
        "</article>"
    )
    return fill_template(
        ctx.page_template,
        "page",
        **page_context(
            ctx,
            frame,
            title=meta.title,
            content=content,
            description=meta.description,
            author=meta.author,
            date=meta.date,
            url=page_url(ctx, url_path),
            image=meta.image,
            settings=parse_settings(meta.settings),
        ),
    )


def build_post_cards(frame: Frame, posts: Sequence[BlogPost]) -> str:
    cards = []
    for post in posts:
        url = frame.href(post.url_path)
        title = html.escape(post.title)
        description = f'<p class="post-summary">{html.escape(post.description)}</p>' if post.description else ""
        cards.append(
            '<article class="post-card">'
            f"{build_post_meta(post.date, post.author, post.read_time, build_tag_chips(frame, post.tags))}"
            f'<h2 class="post-title"><a href="{url}">{title}</a></h2>'
            f"{description}"
            "</article>"
        )
    return "\n".join(cards)


def build_directory_list(directories: Sequence[Directory]) -> str:
    if not directories:
        return ""
    items = "".join(
        f'<li><a href="{directory.link}">{html.escape(directory.name)}</a></li>' for directory in directories
    )
    return f'<section class="directories"><h2>Sections</h2><ul class="directory-list">{items}</ul></section>'


def render_index(
    ctx: BuildContext,
    frame: Frame,
    title: str,
    posts: Sequence[BlogPost],
    directories: Sequence[Directory],
    intro_html: str = "",
) -> str:
    intro = f'<div class="index-intro">{intro_html}</div>' if intro_html else ""
    post_list = ""
    if posts:
        post_list = (
            '<section class="posts">'
            '<input id="search-input" class="search-input" type="search" placeholder="Search posts..." />'
            f'<div id="search-results" class="post-grid">{build_post_cards(frame, posts)}</div>'
            "</section>"
        )
    content = (
        '<div class="section-head">'
        f"<h1>{html.escape(title)}</h1>"
        "</div>"
        f"{intro}{build_directory_list(directories)}{post_list}"
    )
    return fill_template(
        ctx.page_template,
        "index",
        **page_context(ctx, frame, title=title, content=content, url=page_url(ctx, frame.url_path("index.html"))),
    )


def render_tag_page(ctx: BuildContext, frame: Frame, tag: TagInfo) -> str:
    content = (
        '<div class="section-head">'
        f"<h1>{html.escape(tag.name)}</h1>"
        f"<p>{tag.count} post{'s' if tag.count != 1 else ''} tagged with this tag.</p>"
        "</div>"
        f'<div class="post-grid">{build_post_cards(frame, tag.posts)}</div>'
    )
    url = page_url(ctx, frame.url_path(f"{tag.slug}.html"))
    return fill_template(
        ctx.page_template,
        "tag",
        **page_context(ctx, frame, title=tag.name, content=content, url=url),
    )


def render_tags_index(ctx: BuildContext, frame: Frame, tags: Sequence[TagInfo]) -> str:
    items = []
    for tag in tags:
        items.append(
            f'<li><a href="{tag.slug}.html">{html.escape(tag.name)}</a>'
            f'<span class="count">{tag.count}</span></li>'
        )
    content = (
        '<div class="section-head"><h1>Tags</h1></div>'
        f'<ul class="tag-list">{"".join(items)}</ul>'
    )
    return fill_template(
        ctx.page_template,
        "tags",
        **page_context(
            ctx,
            frame,
            title="Tags",
            content=content,
            url=page_url(ctx, frame.url_path("index.html")),
        ),
    )


def build_landing_sections(frame: Frame, ctx: BuildContext, sections: Sequence[LandingSection]) -> str:
    blocks = []
    for section in sections:
        body = render_markdown(section.body, frame.input_dir, ctx.input_root)
        blocks.append(
            '<section class="terminal-section">'
            f'<div class="terminal-command"><span class="prompt">$</span> {html.escape(section.command)}</div>'
            f'<div class="terminal-output">{body}</div>'
            "</section>"
        )
    return "\n".join(blocks)


def build_landing_links(links: Sequence[LandingLink]) -> str:
    if not links:
        return ""
    items = []
    for link in links:
        attrs = ' target="_blank" rel="noopener"' if link.external else ""
        kind = "external" if link.external else "internal"
        items.append(
            f'<li class="link-{kind}"><a href="{html.escape(link.url)}"{attrs}>{html.escape(link.name)}</a></li>'
        )
    return f'<nav class="landing-links"><ul>{"".join(items)}</ul></nav>'


def build_recent_posts(frame: Frame, posts: Sequence[BlogPost]) -> str:
    if not posts:
        return ""
    items = []
    for post in posts:
        date = f'<span class="post-date">{html.escape(post.date)}</span>' if post.date else ""
        items.append(f'<li><a href="{frame.href(post.url_path)}">{html.escape(post.title)}</a>{date}</li>')
    return f'<section class="recent-posts"><h2>Recent posts</h2><ul>{"".join(items)}</ul></section>'


def render_landing(
    ctx: BuildContext,
    frame: Frame,
    meta: FrontMatter,
    sections: Sequence[LandingSection],
    links: Sequence[LandingLink],
    recent: Sequence[BlogPost],
) -> str:
    title = meta.title or "Home"
    context = page_context(
        ctx,
        frame,
        title=title,
        content=build_landing_sections(frame, ctx, sections),
        description=meta.description,
        url=page_url(ctx, frame.url_path("index.html")),
        image=meta.image,
        settings=parse_settings(meta.settings),
    )
    context["links"] = build_landing_links(links)
    context["recent_posts"] = build_recent_posts(frame, recent)
    return fill_template(ctx.landing_template, "landing", **context)
