from __future__ import annotations

import argparse
import logging
import shutil
import sys
import time
from pathlib import Path
from typing import Optional

from .config import RECENT_POSTS, SiteConfig, load_config
from .errors import MdsiteError
from .render import TEMPLATES_DIR
from .utils import parse_bool, parse_int
from .walker import PAGE_TEMPLATE, build_site

DEFAULT_TEMPLATE_PATH = "templates/default.html"

logger = logging.getLogger("mdsite")


def create_template(path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    shutil.copyfile(TEMPLATES_DIR / PAGE_TEMPLATE, path)


def build_parser(config: dict, config_path: str) -> argparse.ArgumentParser:
    def cfg_value(key: str, default: object) -> object:
        value = config.get(key)
        return default if value is None else value

    def cfg_str(key: str, default: str) -> str:
        return str(cfg_value(key, default))

    def cfg_bool(key: str, default: bool) -> bool:
        return parse_bool(cfg_value(key, default))

    def cfg_int(key: str, default: int) -> int:
        return parse_int(cfg_value(key, default), default)

    parser = argparse.ArgumentParser(description="Convert a tree of Markdown documents into a static site.")
    parser.add_argument("--config", default=config_path, help="Path to site config file (TOML/YAML/JSON).")
    parser.add_argument("--input", default=cfg_str("input", "content"), help="Directory containing Markdown files.")
    parser.add_argument("--output", default=cfg_str("output", "output"), help="Directory to save HTML files.")
    parser.add_argument("--template", default=cfg_str("template", ""), help="Custom page template file.")
    parser.add_argument("--static", default=cfg_str("static", ""), help="Directory with CSS, JS and other assets.")
    parser.add_argument(
        "--css",
        default=cfg_str("css", "css/style.css"),
        help="Stylesheet path relative to the site root; a leading '/' is allowed.",
    )
    parser.add_argument(
        "--js",
        default=cfg_str("js", "js/script.js"),
        help="Script path relative to the site root; a leading '/' is allowed.",
    )
    parser.add_argument("--title", dest="site_title", default=cfg_str("site_title", "My Site"), help="Site title.")
    parser.add_argument(
        "--site-url",
        default=cfg_str("site_url", ""),
        help="Public site URL used for feeds, sitemap and robots.txt.",
    )
    parser.add_argument("--author", default=cfg_str("author", ""), help="Default author name.")
    parser.add_argument(
        "--author-email",
        default=cfg_str("author_email", ""),
        help="Email of the default author in feeds (synthesized from the name otherwise).",
    )
    parser.add_argument(
        "--generate-list",
        action=argparse.BooleanOptionalAction,
        default=cfg_bool("generate_list", False),
        help="Generate a listing index.html even where the directory has its own index.md.",
    )
    parser.add_argument(
        "--recursive",
        action=argparse.BooleanOptionalAction,
        default=cfg_bool("recursive", True),
        help="Process subdirectories recursively.",
    )
    parser.add_argument(
        "--enable-rss",
        action=argparse.BooleanOptionalAction,
        default=cfg_bool("enable_rss", True),
        help="Generate feed.xml for the blog and its categories.",
    )
    parser.add_argument(
        "--enable-sitemap",
        action=argparse.BooleanOptionalAction,
        default=cfg_bool("enable_sitemap", True),
        help="Generate sitemap.xml.",
    )
    parser.add_argument(
        "--enable-robots",
        action=argparse.BooleanOptionalAction,
        default=cfg_bool("enable_robots", True),
        help="Generate robots.txt.",
    )
    parser.add_argument(
        "--minify",
        action=argparse.BooleanOptionalAction,
        default=cfg_bool("minify", True),
        help="Minify CSS and JS while copying static assets.",
    )
    parser.add_argument(
        "--show-commit-info",
        action=argparse.BooleanOptionalAction,
        default=cfg_bool("show_commit_info", False),
        help="Show the last commit of each document on its page.",
    )
    parser.add_argument(
        "--git-web-url",
        default=cfg_str("git_web_url", ""),
        help="Base URL for commit links, e.g. https://github.com/user/repo/commit/",
    )
    parser.add_argument("--theme", default=cfg_str("theme", "nord"), help="Default color theme.")
    parser.add_argument(
        "--use-git",
        action=argparse.BooleanOptionalAction,
        default=cfg_bool("use_git", True),
        help="Read dates and authors from git history.",
    )
    parser.add_argument(
        "--clean",
        action=argparse.BooleanOptionalAction,
        default=cfg_bool("clean", False),
        help="Clean output directory before build.",
    )
    parser.add_argument(
        "--recent-posts",
        default=cfg_int("recent_posts", RECENT_POSTS),
        type=int,
        help="Number of recent posts on landing pages.",
    )
    parser.add_argument(
        "--create-template",
        nargs="?",
        const=DEFAULT_TEMPLATE_PATH,
        default=None,
        metavar="PATH",
        help=f"Write the default page template (to {DEFAULT_TEMPLATE_PATH} by default) and exit.",
    )
    parser.add_argument("--debug", action="store_true", help="Enable debug logging.")
    return parser


def main(argv: Optional[list[str]] = None) -> None:
    pre_parser = argparse.ArgumentParser(add_help=False)
    pre_parser.add_argument(
        "--config",
        default="site.toml",
        help="Path to site config file (TOML/YAML/JSON).",
    )
    pre_args, _ = pre_parser.parse_known_args(argv)
    try:
        config = load_config(Path(pre_args.config))
    except MdsiteError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        sys.exit(1)

    args = build_parser(config, pre_args.config).parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.debug else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if args.create_template:
        try:
            create_template(Path(args.create_template))
        except OSError as exc:
            print(f"Error: cannot create template: {exc}", file=sys.stderr)
            sys.exit(1)
        print(f"Template created at {args.create_template}")
        return

    start = time.perf_counter()
    try:
        site_config = SiteConfig.from_args(args, config.get("sections"))
        report = build_site(site_config)
    except MdsiteError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        sys.exit(1)
    elapsed = time.perf_counter() - start
    logger.debug("Built %d pages from %d posts", report.pages, report.posts)
    print(f"Build completed in {elapsed:.2f}s.")
    print(f"Site generated in: {report.output_dir}")
