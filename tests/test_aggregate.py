import datetime as dt
import json

from conftest import write

from mdsite.aggregate import collect_tags, emit, index_title, should_emit_index, sort_posts
from mdsite.context import Frame
from mdsite.gitinfo import CommitInfo
from mdsite.models import BlogPost, Directory


def make_post(title, date="", tags=(), url_path=None, commit=None):
    link = f"{title.lower()}.html"
    return BlogPost(
        title=title,
        link=link,
        url_path=url_path or f"blog/{link}",
        date=date,
        tags=tuple(tags),
        commit=commit,
    )


def test_sort_posts_newest_first_with_undated_last():
    old = make_post("Old", "2023-01-01")
    new = make_post("New", "2024-06-01")
    undated = make_post("Undated")
    broken = make_post("Broken", "someday")
    assert [p.title for p in sort_posts([undated, old, broken, new])] == ["New", "Old", "Broken", "Undated"]


def test_sort_posts_prefers_commit_date():
    commit = CommitInfo("abc", dt.datetime(2025, 1, 1, tzinfo=dt.timezone.utc), "Git")
    committed = make_post("Committed", "2020-01-01", commit=commit)
    recent = make_post("Recent", "2024-01-01")
    assert [p.title for p in sort_posts([recent, committed])] == ["Committed", "Recent"]


def test_sort_posts_ties_are_deterministic():
    posts = [make_post("B", "2024-01-01"), make_post("A", "2024-01-01"), make_post("C", "2024-01-01")]
    assert [p.title for p in sort_posts(posts)] == ["A", "B", "C"]
    assert sort_posts(posts) == sort_posts(list(reversed(posts)))


def test_collect_tags():
    first = make_post("First", "2024-01-01", ["linux"])
    second = make_post("Second", "2024-02-01", ["linux", "go"])
    tags = collect_tags([first, second, make_post("Untagged", "2024-03-01")])
    assert list(tags) == ["go", "linux"]
    assert tags["linux"].count == 2
    assert [p.title for p in tags["linux"].posts] == ["Second", "First"]


def test_collect_tags_groups_by_slug(caplog):
    plain = make_post("Plain", "2024-01-01", ["C"])
    sharp = make_post("Sharp", "2024-02-01", ["C#", "c"])
    tags = collect_tags([plain, sharp, make_post("Linux", "2024-03-01", ["Linux", "linux"])])
    assert list(tags) == ["c", "linux"]
    assert tags["c"].names == ["C", "c", "C#"]
    assert tags["c"].name == "C / c / C#"
    assert [p.title for p in tags["c"].posts] == ["Sharp", "Plain"]
    assert tags["linux"].count == 1
    assert "share the tag page c.html" in caplog.text


def test_should_emit_index(make_context):
    ctx = make_context()
    plain = Frame.enter(ctx, ctx.input_root / "docs")
    blog = Frame.enter(ctx, ctx.input_root / "blog")
    category = Frame.enter(ctx, ctx.input_root / "blog" / "Linux")
    posts = [make_post("A")]
    dirs = [Directory("sub", "sub/index.html")]

    assert should_emit_index(plain, posts, [], False, False, False)
    assert should_emit_index(plain, [], dirs, False, False, False)
    assert not should_emit_index(plain, [], [], False, False, True)
    assert not should_emit_index(plain, posts, [], False, True, False)
    assert should_emit_index(plain, posts, [], False, True, True)
    assert should_emit_index(blog, posts, [], False, True, False)
    assert should_emit_index(category, posts, [], False, True, False)
    assert not should_emit_index(blog, posts, dirs, True, True, True)


def test_index_title_reads_custom_file(make_context):
    ctx = make_context()
    write(ctx.input_root / "blog" / "index_title.txt", "Writing\n")
    assert index_title(ctx, Frame.enter(ctx, ctx.input_root / "blog")) == "Writing"
    assert index_title(ctx, Frame.enter(ctx, ctx.input_root)) == "My Site"
    assert index_title(ctx, Frame.enter(ctx, ctx.input_root / "docs")) == "docs"


def test_emit_at_blog_root_writes_tags_and_feed(make_context):
    ctx = make_context()
    frame = Frame.enter(ctx, ctx.input_root / "blog")
    first = make_post("First", "2024-01-01", ["linux"], "blog/Linux/first.html")
    second = make_post("Second", "2024-02-01", ["linux"], "blog/Linux/second.html")

    emit(ctx, frame, [first, second], [Directory("Linux", "Linux/index.html")], listing=True)

    out = ctx.output_root / "blog"
    index_html = (out / "index.html").read_text()
    assert index_html.index("Linux/second.html") < index_html.index("Linux/first.html")
    assert 'href="../css/style.css"' in index_html

    entries = json.loads((out / "search-index.json").read_text())
    assert [entry["link"] for entry in entries] == ["Linux/second.html", "Linux/first.html"]

    tag_page = (out / "tags" / "linux.html").read_text()
    assert tag_page.index("Second") < tag_page.index("First")
    assert 'href="../Linux/second.html"' in tag_page
    assert 'href="../../css/style.css"' in tag_page
    overview = (out / "tags" / "index.html").read_text()
    assert overview.count('href="linux.html"') == 1

    feed = (out / "feed.xml").read_text()
    assert "<link>https://example.org/blog/Linux/second.html</link>" in feed
    assert "<title>My Site</title>" in feed


def test_emit_in_category_writes_titled_feed_without_tags(make_context):
    ctx = make_context()
    frame = Frame.enter(ctx, ctx.input_root / "blog" / "Linux")
    emit(ctx, frame, [make_post("Only", "2024-01-01", ["linux"], "blog/Linux/only.html")], [], listing=True)

    out = ctx.output_root / "blog" / "Linux"
    assert "<title>My Site - Linux</title>" in (out / "feed.xml").read_text()
    assert not (out / "tags").exists()
    assert not (ctx.output_root / "blog" / "tags").exists()


def test_emit_skips_feed_without_site_url(make_context, caplog):
    ctx = make_context(site_url="")
    frame = Frame.enter(ctx, ctx.input_root / "blog")
    emit(ctx, frame, [make_post("Only", "2024-01-01")], [], listing=False)
    assert not (ctx.output_root / "blog" / "feed.xml").exists()
    assert not (ctx.output_root / "blog" / "index.html").exists()
    assert "skipping feed" in caplog.text


def test_emit_nothing_for_empty_directory(make_context):
    ctx = make_context()
    frame = Frame.enter(ctx, ctx.input_root / "blog")
    listing = should_emit_index(frame, [], [], False, False, True)
    emit(ctx, frame, [], [], listing=listing)
    assert not (ctx.output_root / "blog").exists()


def test_tag_page_failure_is_not_fatal(make_context, caplog):
    ctx = make_context()
    frame = Frame.enter(ctx, ctx.input_root / "blog")
    write(ctx.output_root / "blog" / "tags" / "linux.html" / "blocker", "")
    posts = [make_post("A", "2024-01-01", ["linux", "go"])]
    emit(ctx, frame, posts, [], listing=False)
    assert "Skipping tag page for 'linux'" in caplog.text
    assert (ctx.output_root / "blog" / "tags" / "go.html").is_file()
    assert (ctx.output_root / "blog" / "feed.xml").is_file()
