import pytest

from sitegen.errors import UnsupportedSyntax
from sitegen.markdown_processing import (
    map_noncode,
    pad_block_html,
    render_markdown,
    render_passthrough,
)
from sitegen.utils import normalize_markdown_light


def test_heading_and_paragraph():
    html = render_markdown("### Heading\ntext")
    assert "<h3>Heading</h3>" in html
    assert "<p>text</p>" in html


def test_fence_keeps_language_hint():
    html = render_markdown("Intro\n\n```kotlin\nval x = 1\n```\n")
    assert '<code class="language-kotlin">' in html
    assert "val x = 1" in html


def test_links_images_emphasis():
    html = render_markdown("A [link](https://example.com) and *em* and ![alt](/a.png)")
    assert '<a href="https://example.com">link</a>' in html
    assert "<em>em</em>" in html
    assert 'src="/a.png"' in html
    assert 'alt="alt"' in html


def test_block_html_passes_through():
    html = render_markdown('Before\n<div class="note">**raw**</div>\nAfter')
    assert '<div class="note">**raw**</div>' in html
    assert "<p>Before</p>" in html
    assert "<p>After</p>" in html


def test_pad_block_html_skips_code_and_keeps_trailing_newline():
    md = "```\n<div>x</div>\n```\n"
    assert pad_block_html(md) == md


def test_map_noncode_leaves_fences_alone():
    md = "a\n```\nA\n```\nb\n"
    assert map_noncode(md, str.upper) == "A\n```\nA\n```\nB\n"


@pytest.mark.parametrize("markup", ["textile", "asciidoc"])
def test_unsupported_dialect(markup):
    with pytest.raises(UnsupportedSyntax) as exc:
        render_markdown("h1. Title", markup=markup)
    assert exc.value.markup == markup


def test_passthrough_escapes():
    assert render_passthrough("<b>") == '<pre class="unsupported-markup">&lt;b&gt;</pre>'


def test_hard_line_break_survives():
    html = render_markdown("line one  \nline two\n")
    assert "line one<br" in html
    assert normalize_markdown_light("a  \nb \nc\t\n") == "a  \nb\nc\n"
