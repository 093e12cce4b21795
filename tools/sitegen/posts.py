from __future__ import annotations

import pathlib
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Dict, Optional, Tuple

import nbformat
from nbconvert import MarkdownExporter
from nbformat.reader import NotJSONError
from nbformat.validator import ValidationError, validate

from .config import (
    ASSET_DIR_NAME,
    NOTEBOOK_META_KEY,
    POST_FILENAME,
    POST_URL_PREFIX,
)
from .errors import MalformedFrontMatter
from .frontmatter import parse_front_matter, validate_front_matter
from .utils import content_hash, slugify
from .visibility import filter_and_apply_visibility


@dataclass(frozen=True)
class Post:
    source: pathlib.Path
    date: date
    slug: str
    title: str
    layout: str
    body: str
    front_matter: Dict[str, Any] = field(compare=False)
    thumbnail: Optional[str] = None
    external: bool = False
    external_link: Optional[str] = None
    category: Optional[str] = None
    tags: Tuple[str, ...] = ()
    markup: str = "markdown"
    # Rendered notebook outputs: (asset file name, bytes)
    blobs: Tuple[Tuple[str, bytes], ...] = field(default=(), compare=False)

    @property
    def filename(self) -> str:
        return self.source.name

    @property
    def url_path(self) -> str:
        d = self.date
        return (
            f"{POST_URL_PREFIX}/{d.year:04d}/{d.month:02d}/{d.day:02d}/"
            f"{self.slug}.html"
        )

    @property
    def url(self) -> str:
        return "/" + self.url_path

    @property
    def href(self) -> str:
        """Where listings should point: the external article or our page."""
        if self.external and self.external_link:
            return self.external_link
        return self.url


def parse_post_filename(path: pathlib.Path) -> Tuple[date, str]:
    m = POST_FILENAME.match(path.stem)
    if not m:
        raise MalformedFrontMatter(
            "file name must look like YYYY-MM-DD-slug", path
        )
    try:
        d = date.fromisoformat(m.group("date"))
    except ValueError as e:
        raise MalformedFrontMatter(f"bad date in file name: {e}", path) from e
    slug = slugify(m.group("slug"))
    if not slug:
        raise MalformedFrontMatter("empty slug in file name", path)
    return d, slug


def _make_post(
    path: pathlib.Path,
    fm: Dict[str, Any],
    body: str,
    blobs: Tuple[Tuple[str, bytes], ...] = (),
) -> Post:
    d, slug = parse_post_filename(path)
    return Post(
        source=path,
        date=d,
        slug=slug,
        title=fm["title"],
        layout=fm["layout"],
        body=body,
        front_matter=fm,
        thumbnail=fm.get("thumbnail") or None,
        external=bool(fm.get("external", False)),
        external_link=fm.get("external_link") or None,
        category=fm.get("categories") or None,
        tags=tuple(fm.get("tags") or ()),
        markup=str(fm.get("markup") or "markdown").lower(),
        blobs=blobs,
    )


def load_markdown_post(md: pathlib.Path) -> Post:
    # Reject a bad file name before looking at the content.
    parse_post_filename(md)
    try:
        text = md.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise MalformedFrontMatter(f"cannot read post: {e}", md) from e
    fm, body = parse_front_matter(text, source=md)
    return _make_post(md, fm, body)


def load_notebook_post(ipynb: pathlib.Path) -> Post:
    """
    Notebook posts keep their front matter in notebook metadata under
    `sitegen`. Hidden/removed cells are dropped before conversion and
    output images become hashed assets named after the post.
    """
    _, slug = parse_post_filename(ipynb)

    try:
        nb = nbformat.read(str(ipynb), as_version=4)
    except (OSError, UnicodeDecodeError, NotJSONError) as e:
        raise MalformedFrontMatter(f"cannot read notebook: {e}", ipynb) from e
    try:
        validate(nb)
    except ValidationError as e:
        raise MalformedFrontMatter(f"invalid notebook: {e.message}", ipynb) from e

    raw = nb.metadata.get(NOTEBOOK_META_KEY)
    if not isinstance(raw, dict):
        raise MalformedFrontMatter(
            f"notebook metadata has no '{NOTEBOOK_META_KEY}' mapping", ipynb
        )
    fm = validate_front_matter({str(k): v for k, v in raw.items()}, ipynb)

    filter_and_apply_visibility(nb)
    body, res = MarkdownExporter().from_notebook_node(nb)

    blobs = []
    outputs = res.get("outputs") or {}
    for name in sorted(outputs):
        data = outputs[name]
        p = pathlib.PurePosixPath(name)
        new_name = f"{slug}-{slugify(p.stem)}.{content_hash(data)}{p.suffix}"
        body = body.replace(f"({name})", f"(/{ASSET_DIR_NAME}/{new_name})")
        blobs.append((new_name, data))

    return _make_post(ipynb, fm, body, tuple(blobs))


def load_post(path: pathlib.Path) -> Post:
    if path.suffix.lower() == ".ipynb":
        return load_notebook_post(path)
    return load_markdown_post(path)
