from __future__ import annotations

import pathlib
from dataclasses import dataclass

from .errors import WriteError
from .posts import Post


@dataclass(frozen=True)
class RenderedPage:
    post: Post
    html: str


def ensure_dir(p: pathlib.Path) -> None:
    try:
        p.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise WriteError(p, e) from e


def write_if_changed(path: pathlib.Path, data: bytes) -> bool:
    """
    Write `data` to `path` unless it already holds exactly those bytes.
    Returns True if the file was written. Any OSError becomes WriteError.
    """
    try:
        if path.is_file() and path.read_bytes() == data:
            return False
    except OSError as e:
        raise WriteError(path, e) from e
    ensure_dir(path.parent)
    try:
        path.write_bytes(data)
    except OSError as e:
        raise WriteError(path, e) from e
    return True


def emit_file(relpath: str, html: str, dest_root: pathlib.Path) -> pathlib.Path:
    out = dest_root / relpath
    if write_if_changed(out, html.encode("utf-8")):
        print(f"✓ wrote {relpath}")
    else:
        print(f"= {relpath} unchanged, skip")
    return out


def emit_page(page: RenderedPage, dest_root: pathlib.Path) -> pathlib.Path:
    """Write a post to post/yyyy/mm/dd/slug.html under dest_root."""
    return emit_file(page.post.url_path, page.html, dest_root)
