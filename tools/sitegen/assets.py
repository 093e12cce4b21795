from __future__ import annotations

import pathlib
import re
from typing import AbstractSet, List, Optional, Tuple

from .config import (
    ASSET_DIR_NAME,
    ASSET_SOURCE_DIR_CANDIDATES,
    HTML_SRC_OR_HREF,
    MD_LINK_IMG,
)
from .emit import write_if_changed
from .markdown_processing import map_noncode
from .utils import content_hash, slugify

# (source file, hashed name under /assets/)
AssetRef = Tuple[pathlib.Path, str]


def is_relative_local(url: str) -> bool:
    if not url:
        return False
    if re.match(r'^[a-zA-Z][a-zA-Z0-9+.-]*:', url):
        return False
    if url.startswith(("#", "/")):
        return False
    return True


def resolve_asset_candidate(
    base_dir: pathlib.Path, url: str
) -> Optional[pathlib.Path]:
    url = url.split("#", 1)[0].split("?", 1)[0]
    cand = (base_dir / url).resolve()
    if cand.is_file():
        return cand
    for adir in ASSET_SOURCE_DIR_CANDIDATES:
        cand2 = (base_dir / adir / url).resolve()
        if cand2.is_file():
            return cand2
    return None


def hashed_asset_name(src: pathlib.Path) -> str:
    h = content_hash(src.read_bytes())
    safe_stem = slugify(src.stem) or "asset"
    return f"{safe_stem}.{h}{src.suffix.lower()}"


def asset_url(name: str) -> str:
    return f"/{ASSET_DIR_NAME}/{name}"


def rewrite_local_urls(
    text: str, base_dir: pathlib.Path
) -> Tuple[str, List[AssetRef]]:
    """
    Point markdown/HTML references at local files to their hashed copies
    under `/assets/`. Nothing is copied here; the caller gets the list of
    files to emit. References that do not resolve are left alone.
    """
    refs: List[AssetRef] = []

    def _lookup(url: str) -> Optional[str]:
        if not is_relative_local(url):
            return None
        src = resolve_asset_candidate(base_dir, url)
        if not src or src.suffix.lower() in (".md", ".markdown", ".ipynb"):
            return None
        name = hashed_asset_name(src)
        refs.append((src, name))
        return asset_url(name)

    def _md_repl(m: re.Match) -> str:
        new = _lookup(m.group("url"))
        if new is None:
            return m.group(0)
        return f"{m.group(1)}[{m.group('alt')}]({new})"

    def _html_repl(m: re.Match) -> str:
        new = _lookup(m.group("url"))
        if new is None:
            return m.group(0)
        return f'{m.group("attr")}="{new}"'

    def _rewrite(segment: str) -> str:
        segment = MD_LINK_IMG.sub(_md_repl, segment)
        return HTML_SRC_OR_HREF.sub(_html_repl, segment)

    # code samples stay as written
    text = map_noncode(text, _rewrite)
    return text, refs


def resolve_thumbnail(
    thumbnail: Optional[str], base_dir: pathlib.Path
) -> Tuple[Optional[str], List[AssetRef]]:
    if not thumbnail:
        return None, []
    if not is_relative_local(thumbnail):
        return thumbnail, []
    src = resolve_asset_candidate(base_dir, thumbnail)
    if not src:
        print(f"- thumbnail {thumbnail} not found under {base_dir}, kept as is")
        return thumbnail, []
    name = hashed_asset_name(src)
    return asset_url(name), [(src, name)]


def copy_assets(refs: List[AssetRef], out_root: pathlib.Path) -> int:
    written = 0
    seen = set()
    for src, name in refs:
        if name in seen:
            continue
        seen.add(name)
        if write_if_changed(out_root / ASSET_DIR_NAME / name, src.read_bytes()):
            written += 1
    return written


def copy_static(
    src_dir: pathlib.Path,
    out_root: pathlib.Path,
    generated: AbstractSet[str] = frozenset(),
) -> int:
    """
    Copy the static tree verbatim into the output root. Files whose
    relative path is in `generated` would be overwritten by a built page,
    so they are skipped with a warning.
    """
    if not src_dir.is_dir():
        return 0
    written = 0
    for p in sorted(src_dir.rglob("*")):
        if not p.is_file():
            continue
        rel = p.relative_to(src_dir).as_posix()
        if rel in generated:
            print(f"! {src_dir.name}/{rel} clashes with a generated page, skipped")
            continue
        if write_if_changed(out_root / rel, p.read_bytes()):
            written += 1
    return written
