from __future__ import annotations

import pathlib
import re
from typing import Any, Dict, List, Optional, Tuple

import yaml

from .config import LAYOUT_REQUIRED_KEYS
from .errors import MalformedFrontMatter
from .utils import _norm_text

_OPEN = "---"
_CLOSE = ("---", "...")
_TAG_SPLIT = re.compile(r"[,\s]+")


def _split_block(text: str, source: Optional[pathlib.Path]) -> Tuple[str, str]:
    lines = text.splitlines(keepends=True)
    if not lines or lines[0].rstrip() != _OPEN:
        raise MalformedFrontMatter("missing front matter block", source)
    for i in range(1, len(lines)):
        if lines[i].rstrip() in _CLOSE:
            return "".join(lines[1:i]), "".join(lines[i + 1 :])
    raise MalformedFrontMatter("unterminated front matter block", source)


def _as_text(fm: Dict[str, Any], key: str, source) -> None:
    v = fm.get(key)
    if v is None:
        return
    if isinstance(v, (dict, list)):
        raise MalformedFrontMatter(f"'{key}' must be a string", source)
    fm[key] = str(v)


def _normalize_tags(raw: Any, source) -> List[str]:
    if raw is None:
        return []
    if isinstance(raw, str):
        items = _TAG_SPLIT.split(raw)
    elif isinstance(raw, list):
        items = raw
    else:
        raise MalformedFrontMatter("'tags' must be a list of strings", source)
    tags: List[str] = []
    for t in items:
        if isinstance(t, (dict, list)):
            raise MalformedFrontMatter("'tags' must be a list of strings", source)
        t = str(t).strip()
        if t and t not in tags:
            tags.append(t)
    return tags


def validate_front_matter(
    fm: Dict[str, Any], source: Optional[pathlib.Path] = None
) -> Dict[str, Any]:
    """Check required keys and normalize the recognized ones in place."""
    for key in ("title", "layout", "thumbnail", "external_link"):
        _as_text(fm, key, source)

    for key in ("title", "layout"):
        if not (fm.get(key) or "").strip():
            raise MalformedFrontMatter(f"missing required key '{key}'", source)

    external = fm.get("external", False)
    if not isinstance(external, bool):
        raise MalformedFrontMatter("'external' must be true or false", source)

    required = list(LAYOUT_REQUIRED_KEYS.get(fm["layout"], ()))
    if external:
        required.append("external_link")
    for key in required:
        if not fm.get(key):
            raise MalformedFrontMatter(
                f"layout '{fm['layout']}' requires '{key}'", source
            )

    cats = fm.get("categories")
    if isinstance(cats, list):
        fm["categories"] = " ".join(str(c) for c in cats)
    elif cats is not None:
        _as_text(fm, "categories", source)

    if "tags" in fm:
        fm["tags"] = _normalize_tags(fm["tags"], source)
    return fm


def parse_front_matter(
    text: str, source: Optional[pathlib.Path] = None
) -> Tuple[Dict[str, Any], str]:
    """
    Split a content file into its metadata mapping and markup body.

    The block must open on the first line with `---` and close with a
    `---` or `...` line. Raises MalformedFrontMatter otherwise, or when the
    metadata lacks what its layout needs.
    """
    block, body = _split_block(_norm_text(text), source)
    try:
        fm = yaml.safe_load(block)
    except yaml.YAMLError as e:
        raise MalformedFrontMatter(f"invalid YAML: {e}", source) from e
    if fm is None:
        fm = {}
    if not isinstance(fm, dict):
        raise MalformedFrontMatter("front matter must be a mapping", source)
    fm = {str(k): v for k, v in fm.items()}
    return validate_front_matter(fm, source), body
