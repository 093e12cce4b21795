#!/usr/bin/env python3
"""
Static site builder for a personal profile page and its blog.

- Posts: posts/YYYY-MM-DD-slug.md (or .ipynb) -> post/yyyy/mm/dd/slug.html
  frontmatter: title, layout, thumbnail?, external?, external_link?,
  categories?, tags?
- Home: index.html with the profile card from site.yml and the post list
- Tags: tags/<tag>.html per tag
- Static files under static/ are copied verbatim to the output root

Build order:
- Posts are parsed and rendered on a thread pool
- The index is the join point: duplicates are rejected before anything
  is written, and prev/next links need the whole index
- Every page is composed before the first write; a failed write aborts
- Files whose bytes did not change are left untouched
"""

from __future__ import annotations

import argparse
import pathlib
import sys
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import List, Optional, Sequence

from .assets import (
    AssetRef,
    copy_assets,
    copy_static,
    resolve_thumbnail,
    rewrite_local_urls,
)
from .compose import compose_index, compose_page, compose_tag, make_environment
from .config import (
    ASSET_DIR_NAME,
    POST_SUFFIXES,
    TAG_URL_PREFIX,
    Settings,
    load_settings,
)
from .emit import RenderedPage, emit_file, emit_page, ensure_dir, write_if_changed
from .errors import SitegenError, UnsupportedSyntax
from .index import build_index, group_by_tag, neighbours
from .markdown_processing import render_markdown, render_passthrough
from .posts import Post, load_post


@dataclass(frozen=True)
class RenderedBody:
    post: Post
    html: str
    thumbnail: Optional[str]
    assets: List[AssetRef]


def discover_posts(posts_dir: pathlib.Path) -> List[pathlib.Path]:
    if not posts_dir.is_dir():
        print(f"- no {posts_dir.name}/ in {posts_dir.parent}")
        return []
    return sorted(
        p
        for p in posts_dir.iterdir()
        if p.is_file()
        and p.suffix.lower() in POST_SUFFIXES
        and not p.name.startswith((".", "_"))
    )


def render_post(post: Post, settings: Settings) -> RenderedBody:
    base_dir = post.source.parent
    body, refs = rewrite_local_urls(post.body, base_dir)
    try:
        html = render_markdown(body, post.markup, settings.markdown_extensions)
    except UnsupportedSyntax as e:
        print(f"! {post.filename}: {e}, emitting body as plain text")
        html = render_passthrough(post.body)
    thumbnail, thumb_refs = resolve_thumbnail(post.thumbnail, base_dir)
    return RenderedBody(post, html, thumbnail, refs + thumb_refs)


def build(settings: Settings) -> int:
    """Run the whole pipeline once. Returns the number of post pages."""
    paths = discover_posts(settings.posts_dir)

    with ThreadPoolExecutor(max_workers=max(1, settings.jobs)) as pool:
        posts = list(pool.map(load_post, paths))
        index = build_index(posts)
        bodies = list(pool.map(lambda p: render_post(p, settings), index))

        env = make_environment(settings)
        links = neighbours(index)

        def _compose(r: RenderedBody) -> RenderedPage:
            newer, older = links[r.post.url_path]
            html = compose_page(env, r.post, r.html, r.thumbnail, newer, older)
            return RenderedPage(r.post, html)

        pages = list(pool.map(_compose, bodies))

    thumbnails = {b.post.url_path: b.thumbnail for b in bodies if b.thumbnail}
    home = compose_index(env, list(index), thumbnails)
    tag_pages = {
        f"{TAG_URL_PREFIX}/{slug}.html": compose_tag(
            env, slug, name, members, thumbnails
        )
        for slug, (name, members) in group_by_tag(index).items()
    }

    out = settings.out_dir
    ensure_dir(out)
    generated = {p.post.url_path for p in pages} | set(tag_pages) | {"index.html"}
    copied = copy_static(settings.static_dir, out, generated)
    for b in bodies:
        copied += copy_assets(b.assets, out)
        for name, data in b.post.blobs:
            if write_if_changed(out / ASSET_DIR_NAME / name, data):
                copied += 1
    if copied:
        print(f"✓ copied {copied} static/asset files")

    for page in pages:
        emit_page(page, out)
    emit_file("index.html", home, out)
    for relpath, html in tag_pages.items():
        emit_file(relpath, html, out)

    print(f"✓ built {len(pages)} posts, {len(tag_pages)} tags into {out}")
    return len(pages)


def _parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="sitegen", description="Build the static site."
    )
    sub = parser.add_subparsers(dest="command")
    b = sub.add_parser("build", help="build the site (default)")
    for p in (parser, b):
        p.add_argument(
            "--site",
            type=pathlib.Path,
            default=argparse.SUPPRESS,
            help="site directory holding site.yml, posts/, static/ "
            "(default: current directory)",
        )
        p.add_argument(
            "--out",
            type=pathlib.Path,
            default=argparse.SUPPRESS,
            help="output directory (default: <site>/_site)",
        )
        p.add_argument(
            "--jobs",
            type=int,
            default=argparse.SUPPRESS,
            help="worker threads (default: CPU count)",
        )
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = _parser().parse_args(argv)
    site = getattr(args, "site", None) or pathlib.Path.cwd()
    try:
        settings = load_settings(
            site, getattr(args, "out", None), getattr(args, "jobs", None)
        )
        build(settings)
    except SitegenError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
