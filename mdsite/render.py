from __future__ import annotations

import re
from pathlib import Path
from typing import Optional

import markdown
import nh3

from .errors import BuildError
from .links import SourceLinkExtension, WikiLinkExtension

TEMPLATES_DIR = Path(__file__).parent / "templates"
PLACEHOLDER_RE = re.compile(r"\{\{\s*([a-z_]+)\s*\}\}")
LATE_KEYS = ("content",)
MARKDOWN_EXTENSIONS = ["fenced_code", "tables", "toc", "codehilite"]
EXTENSION_CONFIGS = {
    "codehilite": {"guess_lang": False, "linenums": False, "css_class": "codehilite"},
    "toc": {"toc_depth": "2-4"},
}


def _safe_attributes() -> dict[str, set[str]]:
    """nh3's user-content policy plus the attributes the markdown extensions emit."""
    attributes = {tag: set(attrs) for tag, attrs in nh3.ALLOWED_ATTRIBUTES.items()}
    for tag in ("pre", "code", "span", "div"):
        attributes.setdefault(tag, set()).update({"class", "style"})
    for tag in ("h1", "h2", "h3", "h4", "h5", "h6"):
        attributes.setdefault(tag, set()).add("id")
    for tag in ("th", "td"):
        attributes.setdefault(tag, set()).add("style")
    attributes.setdefault("a", set()).add("class")
    attributes["div"].add("data-lang")
    return attributes


SAFE_TAGS = set(nh3.ALLOWED_TAGS)
SAFE_ATTRIBUTES = _safe_attributes()


def sanitize_html(fragment: str) -> str:
    return nh3.clean(fragment, tags=SAFE_TAGS, attributes=SAFE_ATTRIBUTES, link_rel=None)


def render_markdown(body: str, source_dir: Optional[Path] = None, input_root: Optional[Path] = None) -> str:
    extensions: list = list(MARKDOWN_EXTENSIONS) + [SourceLinkExtension()]
    if source_dir is not None and input_root is not None:
        extensions.append(WikiLinkExtension(source_dir=source_dir, input_root=input_root))
    md = markdown.Markdown(extensions=extensions, extension_configs=EXTENSION_CONFIGS)
    try:
        rendered = md.convert(body)
    except Exception as exc:
        raise BuildError(f"Markdown rendering failed: {exc}") from exc
    return sanitize_html(rendered)


def render_template(template: str, **context: str) -> str:
    output = template
    for key, value in context.items():
        if key in LATE_KEYS:
            continue
        output = output.replace(f"{{{{{key}}}}}", value)
    for key in LATE_KEYS:
        if key in context:
            output = output.replace(f"{{{{{key}}}}}", context[key])
    return output


def fill_template(template: str, name: str, **context: str) -> str:
    missing = sorted(set(PLACEHOLDER_RE.findall(template)) - context.keys())
    if missing:
        raise BuildError(f"Template {name} uses unknown fields: {', '.join(missing)}")
    return render_template(template, **context)


def read_template(path: Path) -> str:
    try:
        return path.read_text(encoding="utf-8")
    except OSError as exc:
        raise BuildError(f"Cannot read template {path}: {exc}") from exc


def load_template(name: str, override: str = "") -> str:
    if override:
        return read_template(Path(override))
    return read_template(TEMPLATES_DIR / name)
