from __future__ import annotations

import pathlib
import textwrap

import pytest


def write_post(posts_dir: pathlib.Path, name: str, front: str, body: str = "") -> pathlib.Path:
    posts_dir.mkdir(parents=True, exist_ok=True)
    path = posts_dir / name
    path.write_text(
        "---\n" + textwrap.dedent(front).strip() + "\n---\n" + body,
        encoding="utf-8",
    )
    return path


@pytest.fixture
def site(tmp_path):
    root = tmp_path / "site"
    (root / "posts").mkdir(parents=True)
    (root / "site.yml").write_text(
        textwrap.dedent(
            """
            title: Test Site
            profile:
              name: Jane Doe
              photo: /me.png
              links:
                - title: Github
                  url: https://github.com/example
            """
        ),
        encoding="utf-8",
    )
    return root
