from mdsite.content import (
    FrontMatter,
    LandingLink,
    extract_landing_links,
    extract_landing_sections,
    extract_plain_text,
    folder_title,
    normalize_tags,
    output_stem,
    parse_front_matter,
    parse_settings,
    read_time,
    read_time_label,
    slugify,
)


def test_parse_front_matter():
    text = "<!--\nTitle: Hello\nDate: 2024-01-02T10:30\nTags: a, b\nCustom: x -->\n# Body\n"
    meta, body = parse_front_matter(text)
    assert meta.title == "Hello"
    assert meta.date == "2024-01-02T10:30"
    assert meta.tags == "a, b"
    assert meta.extra == {"Custom": "x"}
    assert body == "\n# Body\n"


def test_front_matter_keys_are_case_sensitive():
    meta, _ = parse_front_matter("<!-- title: lower -->\nbody")
    assert meta.title == ""
    assert meta.extra == {"title": "lower"}


def test_missing_front_matter_keeps_body():
    meta, body = parse_front_matter("# Just text\n")
    assert meta == FrontMatter()
    assert body == "# Just text\n"


def test_unterminated_front_matter_is_ignored():
    text = "<!-- Title: Broken\n# Body\n"
    meta, body = parse_front_matter(text)
    assert meta == FrontMatter()
    assert body == text


def test_front_matter_after_bom():
    meta, _ = parse_front_matter("\ufeff<!-- Title: Bom -->\nx")
    assert meta.title == "Bom"


def test_landing_and_resolved_values():
    meta, _ = parse_front_matter("<!-- Template: landing\nTitle: Home -->")
    assert meta.is_landing
    resolved = meta.resolved(author="Someone")
    assert resolved.author == "Someone"
    assert meta.author == ""
    assert resolved.title == "Home"
    assert resolved.is_landing


def test_normalize_tags_dedupes_in_first_seen_order():
    assert normalize_tags(" linux, go ,linux,, rust ") == ("linux", "go", "rust")
    assert normalize_tags("[a, 'b']") == ("a", "b")
    assert normalize_tags("") == ()


def test_parse_settings():
    assert parse_settings("Wide, no-toc") == frozenset({"wide", "no-toc"})


def test_extract_plain_text():
    body = (
        "# Hi\n\n```py\ncode here\n```\n"
        "See [link](http://x) ![img](a.png) `inline` <b>bold</b> *em*\n"
        "<!-- hidden -->> quoted | cell\n"
    )
    assert extract_plain_text(body) == "Hi See link bold em quoted cell"


def test_read_time():
    assert read_time("") == 1
    assert read_time("word " * 199) == 1
    assert read_time("word " * 450) == 2
    assert read_time_label(3) == "~3 min read"


def test_slugify_and_output_stem():
    assert slugify("C++ Tips") == "c-tips"
    assert slugify("!!!") == "tag"
    assert output_stem("My Post.md") == "My-Post"
    assert output_stem("notes.markdown") == "notes"


def test_landing_sections_and_links():
    body = (
        "<!-- Section: whoami -->\nI write **code**.\n"
        "<!-- Section: ls projects -->\n- one\n"
        "<!-- Links -->\n- [GitHub](https://github.com/me)\n- [Blog](blog/index.html)\n"
    )
    sections = extract_landing_sections(body)
    assert [section.command for section in sections] == ["whoami", "ls projects"]
    assert sections[0].body == "I write **code**."
    assert sections[1].body == "- one"
    links = extract_landing_links(body)
    assert links == [LandingLink("GitHub", "https://github.com/me"), LandingLink("Blog", "blog/index.html")]
    assert links[0].external and not links[1].external


def test_folder_title():
    assert folder_title("", "Site") == "Site"
    assert folder_title("blog", "Site") == "blog"
    assert folder_title("blog", "Site", "  My Blog \n") == "My Blog"
