from __future__ import annotations

import html
from typing import Sequence

import markdown

from .config import (
    BLOCK_HTML,
    DEFAULT_MARKDOWN_EXTENSIONS,
    FENCE,
    SUPPORTED_MARKUP,
)
from .errors import UnsupportedSyntax
from .utils import _norm_text, normalize_markdown_light


def pad_block_html(md: str) -> str:
    lines, out, in_code = md.splitlines(), [], False
    for i, line in enumerate(lines):
        if line.strip().startswith(("```", "~~~")):
            in_code = not in_code
        if (not in_code) and BLOCK_HTML.match(line):
            if out and out[-1] != "":
                out.append("")
            out.append(line)
            if i + 1 < len(lines) and lines[i + 1].strip() != "":
                out.append("")
            continue
        out.append(line)
    padded = "\n".join(out)
    if md.endswith("\n"):
        padded += "\n"
    return padded


def map_noncode(md: str, fn):
    parts, last = [], 0
    for m in FENCE.finditer(md):
        pre = md[last : m.start()]
        parts.append(fn(pre))
        parts.append(md[m.start() : m.end()])
        last = m.end()
    parts.append(fn(md[last:]))
    return "".join(parts)


def render_markdown(
    body: str,
    markup: str = "markdown",
    extensions: Sequence[str] = DEFAULT_MARKDOWN_EXTENSIONS,
) -> str:
    """
    Convert a post body to an HTML fragment.

    Fenced code keeps its language hint as `class="language-<lang>"`.
    Block-level HTML outside fences passes through untouched.
    """
    if markup.lower() not in SUPPORTED_MARKUP:
        raise UnsupportedSyntax(markup)

    text = _norm_text(body)
    text = map_noncode(text, pad_block_html)
    text = map_noncode(text, normalize_markdown_light)
    # A fresh instance per call; Markdown objects keep state between converts.
    md = markdown.Markdown(extensions=list(extensions), output_format="html")
    return md.convert(text)


def render_passthrough(body: str) -> str:
    """Fallback for bodies in a dialect we cannot render."""
    return f'<pre class="unsupported-markup">{html.escape(body)}</pre>'
