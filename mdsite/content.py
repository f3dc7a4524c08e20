from __future__ import annotations

import re
from dataclasses import dataclass, field, replace
from typing import Optional

WORDS_PER_MINUTE = 200

FRONT_MATTER_OPEN = "<!--"
FRONT_MATTER_CLOSE = "-->"
SECTION_RE = re.compile(r"<!--\s*Section:\s*(.+?)\s*-->")
LINKS_MARKER = "<!-- Links -->"
MD_LINK_RE = re.compile(r"\[([^\]]+)\]\(([^)]+)\)")

CODE_BLOCK_RE = re.compile(r"```[^`]*```", re.DOTALL)
INLINE_CODE_RE = re.compile(r"`[^`]+`")
IMAGE_RE = re.compile(r"!\[[^\]]*\]\([^)]+\)")
HTML_COMMENT_RE = re.compile(r"<!--[\s\S]*?-->")
HTML_TAG_RE = re.compile(r"<[^>]+>")
SPACE_RE = re.compile(r"\s+")

KNOWN_KEYS = {
    "Title": "title",
    "Author": "author",
    "Description": "description",
    "Date": "date",
    "Image": "image",
    "Tags": "tags",
    "Template": "template",
    "Settings": "settings",
}


@dataclass(frozen=True)
class FrontMatter:
    title: str = ""
    author: str = ""
    description: str = ""
    date: str = ""
    image: str = ""
    tags: str = ""
    template: str = ""
    settings: str = ""
    extra: dict[str, str] = field(default_factory=dict)

    @classmethod
    def from_mapping(cls, meta: dict[str, str]) -> "FrontMatter":
        known = {}
        extra = {}
        for key, value in meta.items():
            if key in KNOWN_KEYS:
                known[KNOWN_KEYS[key]] = value
            else:
                extra[key] = value
        return cls(**known, extra=extra)

    @property
    def is_landing(self) -> bool:
        return self.template == "landing"

    def resolved(self, **values: str) -> "FrontMatter":
        return replace(self, **values)


@dataclass(frozen=True)
class LandingSection:
    command: str
    body: str


@dataclass(frozen=True)
class LandingLink:
    name: str
    url: str

    @property
    def external(self) -> bool:
        return self.url.startswith(("http://", "https://"))


def parse_front_matter(text: str) -> tuple[FrontMatter, str]:
    clean_text = text.lstrip("\ufeff")
    if not clean_text.startswith(FRONT_MATTER_OPEN):
        return FrontMatter(), clean_text
    end = clean_text.find(FRONT_MATTER_CLOSE)
    if end == -1:
        return FrontMatter(), clean_text

    meta: dict[str, str] = {}
    for line in clean_text[len(FRONT_MATTER_OPEN) : end].splitlines():
        line = line.strip()
        if not line or ":" not in line:
            continue
        key, value = line.split(":", 1)
        meta[key.strip()] = value.strip()
    body = clean_text[end + len(FRONT_MATTER_CLOSE) :]
    return FrontMatter.from_mapping(meta), body


def parse_list(value: str) -> list[str]:
    value = value.strip()
    if value.startswith("[") and value.endswith("]"):
        inner = value[1:-1]
        items = [item.strip().strip("'\"") for item in inner.split(",")]
    else:
        items = [item.strip() for item in value.split(",")]
    return [item for item in items if item]


def normalize_tags(value: str) -> tuple[str, ...]:
    seen: dict[str, None] = {}
    for tag in parse_list(value or ""):
        seen.setdefault(tag, None)
    return tuple(seen)


def parse_settings(value: str) -> frozenset[str]:
    return frozenset(item.lower() for item in parse_list(value or ""))


def slugify(text: str) -> str:
    text = text.lower()
    text = re.sub(r"[^\w]+", "-", text, flags=re.UNICODE)
    text = text.strip("-_").replace("_", "-")
    return text or "tag"


def output_stem(filename: str) -> str:
    stem = filename.rsplit(".", 1)[0] if "." in filename else filename
    return stem.replace(" ", "-")


def extract_plain_text(body: str) -> str:
    text = CODE_BLOCK_RE.sub(" ", body)
    text = INLINE_CODE_RE.sub(" ", text)
    text = IMAGE_RE.sub(" ", text)
    text = MD_LINK_RE.sub(r"\1", text)
    text = HTML_COMMENT_RE.sub(" ", text)
    text = HTML_TAG_RE.sub(" ", text)
    for char in ("#", ">", "|"):
        text = text.replace(char, " ")
    for char in ("*", "_", "~"):
        text = text.replace(char, "")
    text = SPACE_RE.sub(" ", text).strip()
    return "".join(ch for ch in text if ch.isprintable() or ch.isspace())


def read_time(plain_text: str) -> int:
    return max(1, len(plain_text.split()) // WORDS_PER_MINUTE)


def read_time_label(minutes: int) -> str:
    return f"~{minutes} min read"


def extract_landing_sections(body: str) -> list[LandingSection]:
    """Split a landing page body on its ``<!-- Section: command -->`` markers."""
    matches = list(SECTION_RE.finditer(body))
    sections = []
    for i, match in enumerate(matches):
        start = match.end()
        if i + 1 < len(matches):
            end = matches[i + 1].start()
        else:
            links_at = body.find(LINKS_MARKER, start)
            end = links_at if links_at != -1 else len(body)
        section_body = body[start:end].strip()
        if section_body:
            sections.append(LandingSection(match.group(1), section_body))
    return sections


def extract_landing_links(body: str) -> list[LandingLink]:
    marker = body.find(LINKS_MARKER)
    if marker == -1:
        return []
    tail = body[marker + len(LINKS_MARKER) :]
    return [LandingLink(name, url) for name, url in MD_LINK_RE.findall(tail)]


def folder_title(name: str, default: str, custom: Optional[str] = None) -> str:
    if custom and custom.strip():
        return custom.strip()
    if not name or name == ".":
        return default
    return name
