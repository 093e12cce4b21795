from __future__ import annotations

from typing import Any, Dict, List, Optional
from urllib.parse import quote

from jinja2 import (
    ChoiceLoader,
    Environment,
    FileSystemLoader,
    StrictUndefined,
    TemplateNotFound,
    UndefinedError,
    select_autoescape,
)

from .config import PACKAGE_TEMPLATE_DIR, TAG_URL_PREFIX, Settings
from .errors import MissingTemplateField
from .index import tag_slug
from .posts import Post


def tag_url(tag: str) -> str:
    return f"/{TAG_URL_PREFIX}/{quote(tag_slug(tag))}.html"


def make_environment(settings: Settings) -> Environment:
    """Site templates shadow the packaged ones of the same name."""
    loaders = []
    if settings.templates_dir.is_dir():
        loaders.append(FileSystemLoader(str(settings.templates_dir)))
    loaders.append(FileSystemLoader(str(PACKAGE_TEMPLATE_DIR)))
    env = Environment(
        loader=ChoiceLoader(loaders),
        undefined=StrictUndefined,
        autoescape=select_autoescape(["html"]),
        keep_trailing_newline=True,
    )
    env.globals["site"] = settings
    env.globals["tag_url"] = tag_url
    return env


def render_template(env: Environment, name: str, **context: Any) -> str:
    try:
        template = env.get_template(name)
    except TemplateNotFound as e:
        raise MissingTemplateField(name, f"no template named {e.name!r}") from e
    try:
        return template.render(**context)
    except UndefinedError as e:
        raise MissingTemplateField(name, e.message or "undefined") from e


def compose_page(
    env: Environment,
    post: Post,
    body_html: str,
    thumbnail: Optional[str] = None,
    newer: Optional[Post] = None,
    older: Optional[Post] = None,
) -> str:
    """Fill the post's layout template; the layout name picks `<layout>.html`."""
    return render_template(
        env,
        f"{post.layout}.html",
        post=post,
        body=body_html,
        thumbnail=thumbnail,
        newer=newer,
        older=older,
    )


def compose_index(
    env: Environment, posts: List[Post], thumbnails: Dict[str, str]
) -> str:
    """Home page: profile card followed by the post listing."""
    return render_template(
        env, "index.html", posts=posts, thumbnails=thumbnails
    )


def compose_tag(
    env: Environment,
    slug: str,
    name: str,
    posts: List[Post],
    thumbnails: Dict[str, str],
) -> str:
    return render_template(
        env, "tag.html", slug=slug, tag=name, posts=posts, thumbnails=thumbnails
    )
