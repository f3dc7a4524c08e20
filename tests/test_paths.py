import posixpath

import pytest

from mdsite.paths import (
    DEFAULT_SECTIONS,
    NOT_BLOG,
    PositionKind,
    SectionRule,
    back_url,
    classify_position,
    path_depth,
    prefix_asset,
    relative_href,
    resolve_asset_paths,
)


def test_path_depth_counts_segments(tmp_path):
    nested = tmp_path / "a" / "b" / "c"
    nested.mkdir(parents=True)
    assert path_depth(nested, tmp_path) == 3
    assert path_depth(tmp_path, tmp_path) == 0


def test_path_depth_accepts_strings_and_missing_dirs(tmp_path):
    assert path_depth(str(tmp_path / "x" / "y"), str(tmp_path)) == 2


def test_path_depth_falls_back_to_zero_when_unrelated(tmp_path, caplog):
    (tmp_path / "one").mkdir()
    (tmp_path / "two").mkdir()
    assert path_depth(tmp_path / "one", tmp_path / "two") == 0
    assert "not below" in caplog.text


def test_generic_depth_scenario():
    position = classify_position(["a", "b", "c"])
    assert position is NOT_BLOG
    config = resolve_asset_paths("css/style.css", "js/script.js", position, 3)
    assert config.prefix == "../../../"
    assert config.css_path == "../../../css/style.css"
    assert config.js_path == "../../../js/script.js"
    assert config.back_url == "../../../index.html"


@pytest.mark.parametrize("depth", range(0, 6))
def test_generic_prefix_resolves_to_site_root(depth):
    parts = [f"d{i}" for i in range(depth)]
    config = resolve_asset_paths("/css/style.css", "js/script.js", classify_position(parts), depth)
    assert config.css_path == "../" * depth + "css/style.css"
    page_dir = "/".join(parts) or "."
    assert posixpath.normpath(posixpath.join(page_dir, config.css_path)) == "css/style.css"


def test_blog_root():
    position = classify_position(["blog"])
    assert position.kind is PositionKind.BLOG_ROOT
    config = resolve_asset_paths("css/style.css", "js/script.js", position, 1)
    assert config.css_path == "../css/style.css"
    assert config.back_url == "../index.html"


@pytest.mark.parametrize(
    "parts",
    [
        ["blog", "Linux"],
        ["dist", "blog", "Linux"],
        ["nonexistent", "prefix", "blog", "Linux"],
    ],
)
def test_blog_category_is_always_two_hops(parts):
    position = classify_position(parts)
    assert position.kind is PositionKind.BLOG_CATEGORY
    assert position.category == "Linux"
    config = resolve_asset_paths("css/style.css", "js/script.js", position, len(parts))
    assert config.prefix == "../../"
    assert config.css_path == "../../css/style.css"
    assert config.back_url == "../index.html"


@pytest.mark.parametrize("trail", [["a", "b"], ["a", "b", "c"], ["x", "y", "z", "w"]])
def test_blog_nested_uses_trailing_segments(trail):
    position = classify_position(["blog", *trail])
    assert position.kind is PositionKind.BLOG_NESTED
    assert position.trail == tuple(trail)
    config = resolve_asset_paths("css/style.css", "js/script.js", position, 10)
    assert config.prefix == "../" * len(trail)
    assert config.back_url == "../index.html"


def test_section_name_must_match_a_whole_segment():
    assert classify_position(["myblog", "post"]) is NOT_BLOG
    assert classify_position(["blogs"]) is NOT_BLOG


def test_custom_section_rules():
    sections = DEFAULT_SECTIONS + (SectionRule("notes", root_hops=2, category_hops=3),)
    position = classify_position(["notes", "rust"], sections)
    assert position.kind is PositionKind.BLOG_CATEGORY
    assert position.section_path == "notes"
    assert resolve_asset_paths("a.css", "a.js", position, 2).prefix == "../../../"
    assert resolve_asset_paths("a.css", "a.js", classify_position(["notes"], sections), 1).prefix == "../../"


def test_output_root_segments_take_part_in_classification():
    root = classify_position([], prefix=["dist", "blog"])
    assert root.kind is PositionKind.BLOG_ROOT
    assert root.section_path == ""

    category = classify_position(["Linux"], prefix=["dist", "blog"])
    assert category.kind is PositionKind.BLOG_CATEGORY
    assert category.category == "Linux"
    assert category.section_path == ""

    above = classify_position([], prefix=["blog", "site"])
    assert above.kind is PositionKind.BLOG_CATEGORY
    assert above.section_path is None

    assert classify_position(["blog"], prefix=["site"]).section_path == "blog"
    assert classify_position(["docs"], prefix=["site"]).section_path is None


def test_external_assets_are_never_prefixed():
    for position, depth in [(NOT_BLOG, 4), (classify_position(["blog", "Linux"]), 2)]:
        config = resolve_asset_paths("https://cdn.example.com/a.css", "http://cdn.example.com/a.js", position, depth)
        assert config.css_path == "https://cdn.example.com/a.css"
        assert config.js_path == "http://cdn.example.com/a.js"


def test_prefix_asset_strips_leading_slash():
    assert prefix_asset("/css/style.css", 0) == "css/style.css"
    assert prefix_asset("/css/style.css", 2) == "../../css/style.css"


@pytest.mark.parametrize(
    "depth, expected",
    [(-1, ""), (0, ""), (1, "../index.html"), (2, "../../index.html"), (4, "../../../../index.html")],
)
def test_back_url(depth, expected):
    assert back_url(depth) == expected


def test_relative_href():
    assert relative_href("", "about.html") == "about.html"
    assert relative_href("a/b", "c/d.html") == "../../c/d.html"
    assert relative_href("blog", "blog/Linux/post.html") == "Linux/post.html"
    assert relative_href("a", "") == "../"
    assert relative_href("", "") == "./"
