import pathlib

import pytest

from sitegen.emit import RenderedPage, emit_file, emit_page, write_if_changed
from sitegen.errors import WriteError
from sitegen.posts import Post, parse_post_filename


def make_page(name="2022-06-21-a-quick-intro.md", html="<p>x</p>"):
    path = pathlib.Path("/posts") / name
    d, slug = parse_post_filename(path)
    post = Post(
        source=path, date=d, slug=slug, title="t", layout="post", body="", front_matter={}
    )
    return RenderedPage(post, html)


def test_page_path_mirrors_date_and_slug(tmp_path):
    out = emit_page(make_page(), tmp_path)
    assert out == tmp_path / "post" / "2022" / "06" / "21" / "a-quick-intro.html"
    assert out.read_text(encoding="utf-8") == "<p>x</p>"


def test_rewrite_is_skipped_when_unchanged(tmp_path, capsys):
    emit_file("index.html", "same", tmp_path)
    mtime = (tmp_path / "index.html").stat().st_mtime_ns
    emit_file("index.html", "same", tmp_path)
    assert (tmp_path / "index.html").stat().st_mtime_ns == mtime
    assert "unchanged" in capsys.readouterr().out


def test_write_if_changed_reports(tmp_path):
    target = tmp_path / "a" / "b.bin"
    assert write_if_changed(target, b"1") is True
    assert write_if_changed(target, b"1") is False
    assert write_if_changed(target, b"2") is True


def test_filesystem_failure_becomes_write_error(tmp_path):
    blocker = tmp_path / "out"
    blocker.write_text("not a directory", encoding="utf-8")
    with pytest.raises(WriteError) as exc:
        emit_page(make_page(), blocker)
    assert isinstance(exc.value.cause, OSError)
