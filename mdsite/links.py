from __future__ import annotations

import logging
import os
import posixpath
import xml.etree.ElementTree as etree
from dataclasses import dataclass
from pathlib import Path
from urllib.parse import unquote, urlsplit, urlunsplit

from markdown.extensions import Extension
from markdown.inlinepatterns import InlineProcessor
from markdown.treeprocessors import Treeprocessor

from .content import output_stem

logger = logging.getLogger(__name__)

RE_WIKI_LINK = r"\[\[(?P<target>[^\[\]]+?)\]\]"
SOURCE_SUFFIXES = (".md", ".markdown")


@dataclass(frozen=True)
class WikiLink:
    href: str
    text: str
    resolved: bool = True


def _relative_parts(path: str, root: str) -> list[str] | None:
    rel = os.path.relpath(path, root)
    parts = [part for part in rel.replace(os.sep, "/").split("/") if part and part != "."]
    if parts and parts[0] == "..":
        return None
    return parts


def _page_name(name: str) -> str:
    if name.endswith(SOURCE_SUFFIXES):
        name = output_stem(name)
    return name.replace(" ", "-") + ".html"


def rewrite_link(reference: str, source_dir: Path | str, input_root: Path | str) -> WikiLink:
    """Turn a ``[[target#anchor|label]]`` reference into an href relative to the referencing page.

    ``target/`` points at a directory listing, anything else at a page. A
    leading ``/`` makes the target relative to the input root. The output tree
    mirrors the input tree, so the href is the relative path between the two
    source directories.
    """
    target, _, label = reference.partition("|")
    target = target.strip()
    text = label.strip() or target
    target, _, anchor = target.partition("#")
    fragment = f"#{anchor}" if anchor else ""
    if not target and fragment:
        return WikiLink(href=fragment, text=text)

    is_dir = target.endswith("/") and len(target) > 1
    normalized = target.rstrip("/") if is_dir else target
    if not normalized.strip():
        return WikiLink(href=reference, text=text, resolved=False)

    root = os.path.abspath(input_root)
    source = os.path.abspath(source_dir)
    source_parts = _relative_parts(source, root)

    if normalized.startswith("/"):
        target_parts = [part for part in normalized.split("/") if part and part != "."]
        target_parts = _relative_parts(os.path.join(root, *target_parts), root) if target_parts else []
    else:
        target_parts = _relative_parts(os.path.normpath(os.path.join(source, normalized)), root)

    if source_parts is None or target_parts is None:
        logger.warning("Cannot resolve link [[%s]] from %s", reference, source_dir)
        return WikiLink(href=normalized.lstrip("/") + fragment, text=text, resolved=False)

    from_dir = "/".join(source_parts) or "."
    if is_dir:
        to_dir = "/".join(target_parts) or "."
        filename = "index.html"
    else:
        if not target_parts:
            logger.warning("Link [[%s]] in %s does not name a page", reference, source_dir)
            return WikiLink(href=normalized + fragment, text=text, resolved=False)
        to_dir = "/".join(target_parts[:-1]) or "."
        filename = _page_name(target_parts[-1])

    rel_dir = posixpath.relpath(to_dir, from_dir)
    href = filename if rel_dir == "." else f"{rel_dir}/{filename}"
    return WikiLink(href=href + fragment, text=text)


def rewrite_source_href(href: str) -> str:
    """Point a relative link at a Markdown source to the page generated from it."""
    parts = urlsplit(href)
    if parts.scheme or parts.netloc or not parts.path.endswith(SOURCE_SUFFIXES):
        return href
    directory, _, name = unquote(parts.path).rpartition("/")
    path = f"{directory}/{_page_name(name)}" if directory else _page_name(name)
    return urlunsplit(("", "", path, parts.query, parts.fragment))


class WikiLinkProcessor(InlineProcessor):
    def __init__(self, pattern, md, source_dir: Path, input_root: Path):
        super().__init__(pattern, md)
        self.source_dir = source_dir
        self.input_root = input_root

    def handleMatch(self, m, data):
        link = rewrite_link(m.group("target"), self.source_dir, self.input_root)
        el = etree.Element("a")
        el.set("href", link.href)
        if not link.resolved:
            el.set("class", "wiki-link-unresolved")
        el.text = link.text
        return el, m.start(0), m.end(0)


class SourceLinkProcessor(Treeprocessor):
    def run(self, root):
        for el in root.iter("a"):
            href = el.get("href")
            if href:
                el.set("href", rewrite_source_href(href))


class WikiLinkExtension(Extension):
    def __init__(self, source_dir: Path, input_root: Path, **kwargs):
        super().__init__(**kwargs)
        self.source_dir = source_dir
        self.input_root = input_root

    def extendMarkdown(self, md):
        md.inlinePatterns.register(
            WikiLinkProcessor(RE_WIKI_LINK, md, self.source_dir, self.input_root),
            "wiki_link",
            175,
        )


class SourceLinkExtension(Extension):
    def extendMarkdown(self, md):
        # after the inline treeprocessor, which creates the <a> elements
        md.treeprocessors.register(SourceLinkProcessor(md), "source_link", 15)
