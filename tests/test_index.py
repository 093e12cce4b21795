import pathlib

import pytest

from sitegen.errors import DuplicatePost
from sitegen.index import build_index, group_by_tag, neighbours, tag_slug
from sitegen.posts import Post, parse_post_filename


def make_post(name, tags=()):
    path = pathlib.Path("/posts") / name
    d, slug = parse_post_filename(path)
    return Post(
        source=path,
        date=d,
        slug=slug,
        title=slug.replace("-", " "),
        layout="post",
        body="",
        front_matter={},
        tags=tuple(tags),
    )


def test_newest_first():
    old = make_post("2019-08-19-motion.md")
    new = make_post("2022-06-21-a-quick-intro.md")
    assert build_index([old, new]) == (new, old)


def test_same_day_ordered_by_filename():
    b = make_post("2020-01-01-b.md")
    a = make_post("2020-01-01-a.md")
    c = make_post("2021-01-01-c.md")
    assert [p.slug for p in build_index([b, c, a])] == ["c", "a", "b"]


def test_duplicate_output_path():
    first = make_post("2022-06-21-intro.md")
    second = make_post("2022-06-21-Intro.markdown")
    with pytest.raises(DuplicatePost) as exc:
        build_index([first, second])
    assert exc.value.output_path == "post/2022/06/21/intro.html"
    assert {p.name for p in exc.value.sources} == {
        "2022-06-21-intro.md",
        "2022-06-21-Intro.markdown",
    }


def test_empty_index():
    assert build_index([]) == ()


def test_neighbours():
    posts = build_index(
        [make_post("2020-01-01-a.md"), make_post("2021-01-01-b.md"), make_post("2022-01-01-c.md")]
    )
    links = neighbours(posts)
    c, b, a = posts
    assert links[c.url_path] == (None, b)
    assert links[b.url_path] == (c, a)
    assert links[a.url_path] == (b, None)


def test_group_by_tag_merges_spellings():
    one = make_post("2022-01-01-one.md", ["Compose", "kotlin"])
    two = make_post("2021-01-01-two.md", ["compose"])
    groups = group_by_tag(build_index([two, one]))
    assert list(groups) == ["compose", "kotlin"]
    name, members = groups["compose"]
    assert name == "Compose"
    assert members == [one, two]


def test_non_ascii_tags_keep_their_own_group():
    post = make_post("2022-01-01-one.md", ["日本語", "Русский", "русский"])
    groups = group_by_tag(build_index([post]))
    assert set(groups) == {"日本語", "русский"}
    assert groups["русский"][0] == "Русский"


def test_tag_without_word_characters_gets_a_stable_slug():
    assert tag_slug("++").startswith("tag-")
    assert tag_slug("++") == tag_slug("++")
    assert tag_slug("++") != tag_slug("#")
    assert tag_slug("C# / .NET") == "c-net"
