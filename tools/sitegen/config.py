#!/usr/bin/env python3
from __future__ import annotations

import os
import pathlib
import re
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple

import markdown
import yaml

from .errors import InvalidConfig

# ---------- Paths

# Defaults assume the site sources sit next to tools/ at the repo root.
ROOT = pathlib.Path(__file__).resolve().parents[2]
PACKAGE_TEMPLATE_DIR = pathlib.Path(__file__).resolve().parent / "templates"
SITE_CONFIG_NAME = "site.yml"
POSTS_DIR_NAME = "posts"
STATIC_DIR_NAME = "static"
TEMPLATES_DIR_NAME = "templates"
OUT_DIR_NAME = "_site"

# ---------- Config

ASSET_DIR_NAME = "assets"
ASSET_SOURCE_DIR_CANDIDATES = ("assets", "_assets")
POST_URL_PREFIX = "post"
TAG_URL_PREFIX = "tags"
POST_SUFFIXES = (".md", ".markdown", ".ipynb")
SUPPORTED_MARKUP = ("markdown", "md")
DEFAULT_MARKDOWN_EXTENSIONS = ("fenced_code", "tables", "sane_lists")
NOTEBOOK_META_KEY = "sitegen"

# Keys every declared layout needs on top of title/layout.
LAYOUT_REQUIRED_KEYS: Dict[str, Tuple[str, ...]] = {
    "post": (),
    "external": ("external_link",),
}

# Some shared regexes

POST_FILENAME = re.compile(
    r'^(?P<date>\d{4}-\d{2}-\d{2})-(?P<slug>[^/\\]+)$'
)
MD_LINK_IMG = re.compile(
    r'(!?)\[(?P<alt>[^\]]*)\]\((?P<url>[^)\s]+)(?:\s+"[^"]*")?\)'
)
HTML_SRC_OR_HREF = re.compile(
    r'(?P<attr>\bsrc\b|\bhref\b)\s*=\s*([\'"])(?P<url>[^\'"]+)\2'
)
BLOCK_HTML = re.compile(
    r'^(<(?P<tag>(div|table|figure|video|iframe|details|summary|blockquote)\b)'
    r'[\s\S]*?>[\s\S]*?</(?P=tag)>)$',
    re.MULTILINE,
)
FENCE = re.compile(r"(^(?P<mark>```|~~~).*?$)(.*?)(^(?P=mark)$)",
                   re.MULTILINE | re.DOTALL)
SPACES_EOL = re.compile(r'[ \t]+$', re.MULTILINE)
SLUG_RE = re.compile(r"[^a-z0-9-]+")


# ---------- Site settings


@dataclass(frozen=True)
class Link:
    title: str
    url: str


@dataclass(frozen=True)
class Profile:
    name: str = ""
    photo: str = ""
    links: Tuple[Link, ...] = ()


@dataclass(frozen=True)
class Theme:
    """Style values handed to templates instead of a global stylesheet."""

    font_family: str = "Roboto, sans-serif"
    background: str = "#293241"
    text_color: str = "#ffffff"
    accent_color: str = "#ee6c4d"
    photo_size: int = 150
    narrow_width: int = 420


@dataclass(frozen=True)
class Settings:
    site_dir: pathlib.Path
    out_dir: pathlib.Path
    title: str = "Blog"
    base_url: str = ""
    profile: Profile = field(default_factory=Profile)
    theme: Theme = field(default_factory=Theme)
    markdown_extensions: Tuple[str, ...] = DEFAULT_MARKDOWN_EXTENSIONS
    jobs: int = 1

    @property
    def posts_dir(self) -> pathlib.Path:
        return self.site_dir / POSTS_DIR_NAME

    @property
    def static_dir(self) -> pathlib.Path:
        return self.site_dir / STATIC_DIR_NAME

    @property
    def templates_dir(self) -> pathlib.Path:
        return self.site_dir / TEMPLATES_DIR_NAME


def _profile_from(raw: Any) -> Profile:
    if not isinstance(raw, dict):
        return Profile()
    links = tuple(
        Link(title=str(li.get("title") or "Link"), url=str(li["url"]))
        for li in raw.get("links") or []
        if isinstance(li, dict) and li.get("url")
    )
    return Profile(
        name=str(raw.get("name") or ""),
        photo=str(raw.get("photo") or ""),
        links=links,
    )


# Characters that would let a theme value escape its CSS declaration.
_CSS_UNSAFE = re.compile(r'[<>{};\\\n\r]')


def _theme_from(raw: Any, cfg_path: pathlib.Path) -> Theme:
    """Theme values are written into the stylesheet unescaped; vet them here."""
    if raw is None:
        return Theme()
    if not isinstance(raw, dict):
        raise InvalidConfig(cfg_path, "'theme' must be a mapping")
    values: Dict[str, Any] = {}
    for name, f in Theme.__dataclass_fields__.items():
        if name not in raw:
            continue
        v = raw[name]
        if f.default.__class__ is int:
            if isinstance(v, bool) or not isinstance(v, int) or v <= 0:
                raise InvalidConfig(
                    cfg_path, f"theme.{name} must be a positive integer"
                )
        else:
            if not isinstance(v, str) or not v.strip():
                raise InvalidConfig(cfg_path, f"theme.{name} must be a string")
            if _CSS_UNSAFE.search(v):
                raise InvalidConfig(
                    cfg_path, f"theme.{name} contains characters not allowed in CSS"
                )
        values[name] = v
    return Theme(**values)


def _extensions_from(raw: Any, cfg_path: pathlib.Path) -> Tuple[str, ...]:
    if raw is None:
        return DEFAULT_MARKDOWN_EXTENSIONS
    if not isinstance(raw, list) or not all(
        isinstance(e, str) and e for e in raw
    ):
        raise InvalidConfig(
            cfg_path, "markdown_extensions must be a list of extension names"
        )
    try:
        markdown.Markdown(extensions=raw)
    except (ImportError, AttributeError, TypeError, ValueError) as e:
        raise InvalidConfig(cfg_path, f"bad markdown extension: {e}") from e
    return tuple(raw)


def _jobs_from(raw: Any, cfg_path: pathlib.Path) -> int:
    if raw is None:
        return os.cpu_count() or 1
    if isinstance(raw, bool) or not isinstance(raw, int) or raw < 1:
        raise InvalidConfig(cfg_path, "jobs must be a positive integer")
    return raw


def load_settings(
    site_dir: pathlib.Path | str = ROOT,
    out_dir: Optional[pathlib.Path | str] = None,
    jobs: Optional[int] = None,
) -> Settings:
    """
    Read `site.yml` from the site directory, if there is one.

    Missing keys keep their defaults; `out_dir` and `jobs` given here win
    over the file. Bad values raise InvalidConfig.
    """
    site_dir = pathlib.Path(site_dir).resolve()
    cfg_path = site_dir / SITE_CONFIG_NAME
    raw: Dict[str, Any] = {}
    if cfg_path.exists():
        try:
            raw = yaml.safe_load(cfg_path.read_text(encoding="utf-8")) or {}
        except (yaml.YAMLError, UnicodeDecodeError) as e:
            raise InvalidConfig(cfg_path, f"unreadable: {e}") from e
        if not isinstance(raw, dict):
            raise InvalidConfig(cfg_path, "expected a mapping at top level")

    out = pathlib.Path(out_dir) if out_dir else site_dir / (
        raw.get("out_dir") or OUT_DIR_NAME
    )

    return Settings(
        site_dir=site_dir,
        out_dir=out.resolve(),
        title=str(raw.get("title") or "Blog"),
        base_url=str(raw.get("base_url") or "").rstrip("/"),
        profile=_profile_from(raw.get("profile")),
        theme=_theme_from(raw.get("theme"), cfg_path),
        markdown_extensions=_extensions_from(
            raw.get("markdown_extensions"), cfg_path
        ),
        jobs=jobs or _jobs_from(raw.get("jobs"), cfg_path),
    )
