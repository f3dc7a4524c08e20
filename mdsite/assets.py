from __future__ import annotations

import logging
import shutil
from pathlib import Path

import csscompressor
import rjsmin

from .errors import BuildError

logger = logging.getLogger(__name__)


def minify_css(text: str) -> str:
    return csscompressor.compress(text)


def minify_js(text: str) -> str:
    return rjsmin.jsmin(text)


MINIFIERS = {".css": minify_css, ".js": minify_js}


def _minify_file(source: Path, dest: Path) -> None:
    minifier = MINIFIERS[source.suffix.lower()]
    original = source.read_text(encoding="utf-8")
    minified = minifier(original)
    dest.parent.mkdir(parents=True, exist_ok=True)
    dest.write_text(minified, encoding="utf-8")
    if original:
        savings = (len(original) - len(minified)) / len(original) * 100
        logger.debug("Minified %s -> %s (%.1f%% reduction)", source, dest, savings)


def copy_static(static_dir: Path, output_dir: Path, minify: bool = True) -> int:
    """Copy static assets into the output root, minifying CSS and JS on the way."""
    if not static_dir.is_dir():
        raise BuildError(f"Static directory not found: {static_dir}")
    copied = 0
    try:
        for item in sorted(static_dir.rglob("*")):
            if item.is_dir():
                continue
            dest = output_dir / item.relative_to(static_dir)
            if minify and item.suffix.lower() in MINIFIERS:
                _minify_file(item, dest)
            else:
                dest.parent.mkdir(parents=True, exist_ok=True)
                shutil.copy2(item, dest)
            copied += 1
    except OSError as exc:
        raise BuildError(f"Cannot copy static assets from {static_dir}: {exc}") from exc
    return copied
