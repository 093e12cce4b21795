from __future__ import annotations

import re
from typing import Dict, Iterable, List, Optional, Tuple

from .errors import DuplicatePost
from .posts import Post
from .utils import content_hash, natural_key

PostIndex = Tuple[Post, ...]

_TAG_WORD_RE = re.compile(r"[^\w-]+")


def build_index(posts: Iterable[Post]) -> PostIndex:
    """
    Newest first; posts on the same day keep file name order.
    Raises DuplicatePost when two posts would be written to the same path.
    """
    seen: Dict[str, Post] = {}
    ordered = sorted(posts, key=lambda p: p.filename)
    for p in ordered:
        other = seen.get(p.url_path)
        if other is not None:
            raise DuplicatePost(p.url_path, other.source, p.source)
        seen[p.url_path] = p
    # stable sort keeps the file name order within a date
    ordered.sort(key=lambda p: p.date, reverse=True)
    return tuple(ordered)


def neighbours(
    index: PostIndex,
) -> Dict[str, Tuple[Optional[Post], Optional[Post]]]:
    """Map each post's url_path to its (newer, older) sibling."""
    out = {}
    for i, p in enumerate(index):
        newer = index[i - 1] if i > 0 else None
        older = index[i + 1] if i < len(index) - 1 else None
        out[p.url_path] = (newer, older)
    return out


def tag_slug(tag: str) -> str:
    """Lowercased, dash-joined word characters; Unicode letters survive."""
    s = re.sub(r"-{2,}", "-", _TAG_WORD_RE.sub("-", tag.lower())).strip("-_")
    return s or f"tag-{content_hash(tag.encode('utf-8'))}"


def group_by_tag(index: PostIndex) -> Dict[str, Tuple[str, List[Post]]]:
    """
    Map tag slug -> (display name, posts in index order). Tags that only
    differ in case or punctuation share a page; the first spelling seen
    in the index names it.
    """
    groups: Dict[str, Tuple[str, List[Post]]] = {}
    for p in index:
        for t in p.tags:
            name, members = groups.setdefault(tag_slug(t), (t, []))
            if p not in members:
                members.append(p)
    return {s: groups[s] for s in sorted(groups, key=natural_key)}
