from __future__ import annotations

import argparse
import json
import tomllib
from dataclasses import dataclass, field
from pathlib import Path

import yaml

from .errors import ConfigError
from .paths import DEFAULT_SECTIONS, SectionRule
from .utils import parse_bool, parse_int

RECENT_POSTS = 5


def _load_mapping(path: Path, text: str) -> object:
    suffix = path.suffix.lower()
    if suffix == ".toml":
        try:
            return tomllib.loads(text)
        except tomllib.TOMLDecodeError as exc:
            raise ConfigError(f"Invalid TOML in config file {path}: {exc}") from exc
    if suffix in {".yml", ".yaml"}:
        try:
            data = yaml.safe_load(text)
        except yaml.YAMLError as exc:
            raise ConfigError(f"Invalid YAML in config file {path}: {exc}") from exc
        return {} if data is None else data
    try:
        return json.loads(text)
    except json.JSONDecodeError as exc:
        raise ConfigError(f"Invalid JSON in config file {path}: {exc}") from exc


def load_config(path: Path) -> dict:
    """Read a TOML, YAML or JSON site config. A missing file means no overrides."""
    if not path.exists():
        return {}
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigError(f"Cannot read config file {path}: {exc}") from exc
    data = _load_mapping(path, text)
    if not isinstance(data, dict):
        raise ConfigError(f"Config file must contain a mapping: {path}")
    return data


def parse_sections(value: object) -> tuple[SectionRule, ...]:
    """Section rules from config: a list of names or of ``{name, root_hops, category_hops}`` tables."""
    if value is None or value == "":
        return DEFAULT_SECTIONS
    if isinstance(value, str):
        value = [item.strip() for item in value.split(",") if item.strip()]
    if not isinstance(value, list):
        raise ConfigError(f"sections must be a list, got {type(value).__name__}")
    rules = []
    for item in value:
        if isinstance(item, str):
            rules.append(SectionRule(item))
        elif isinstance(item, dict) and item.get("name"):
            rules.append(
                SectionRule(
                    str(item["name"]),
                    root_hops=parse_int(item.get("root_hops"), 1),
                    category_hops=parse_int(item.get("category_hops"), 2),
                )
            )
        else:
            raise ConfigError(f"Invalid section entry: {item!r}")
    return tuple(rules)


@dataclass
class SiteConfig:
    input_dir: Path
    output_dir: Path
    template_file: str = ""
    static_dir: str = ""
    css_path: str = "css/style.css"
    js_path: str = "js/script.js"
    site_title: str = "My Site"
    site_url: str = ""
    default_author: str = ""
    author_email: str = ""
    generate_list: bool = False
    recursive: bool = True
    enable_rss: bool = True
    enable_sitemap: bool = True
    enable_robots: bool = True
    minify: bool = True
    show_commit_info: bool = False
    git_web_url: str = ""
    default_theme: str = "nord"
    use_git: bool = True
    clean: bool = False
    recent_posts: int = RECENT_POSTS
    sections: tuple[SectionRule, ...] = field(default=DEFAULT_SECTIONS)

    @classmethod
    def from_args(cls, args: argparse.Namespace, sections: object = None) -> "SiteConfig":
        return cls(
            input_dir=Path(args.input),
            output_dir=Path(args.output),
            template_file=args.template or "",
            static_dir=args.static or "",
            css_path=args.css,
            js_path=args.js,
            site_title=args.site_title,
            site_url=(args.site_url or "").strip(),
            default_author=args.author,
            author_email=(args.author_email or "").strip(),
            generate_list=parse_bool(args.generate_list),
            recursive=parse_bool(args.recursive),
            enable_rss=parse_bool(args.enable_rss),
            enable_sitemap=parse_bool(args.enable_sitemap),
            enable_robots=parse_bool(args.enable_robots),
            minify=parse_bool(args.minify),
            show_commit_info=parse_bool(args.show_commit_info),
            git_web_url=args.git_web_url or "",
            default_theme=args.theme,
            use_git=parse_bool(args.use_git),
            clean=parse_bool(args.clean),
            recent_posts=max(0, args.recent_posts),
            sections=parse_sections(sections),
        )

    def section_names(self) -> set[str]:
        return {rule.name for rule in self.sections}
