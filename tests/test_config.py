import textwrap

import pytest

from sitegen.config import DEFAULT_MARKDOWN_EXTENSIONS, Theme, load_settings
from sitegen.errors import InvalidConfig
from sitegen.main import main


def _config(site, text):
    (site / "site.yml").write_text(textwrap.dedent(text), encoding="utf-8")


def test_defaults_without_config(tmp_path):
    settings = load_settings(tmp_path, jobs=3)
    assert settings.markdown_extensions == DEFAULT_MARKDOWN_EXTENSIONS
    assert settings.theme == Theme()
    assert settings.jobs == 3
    assert settings.out_dir == (tmp_path / "_site").resolve()


def test_extension_list_is_kept(site):
    _config(site, "markdown_extensions: [fenced_code, toc]\njobs: 2\n")
    settings = load_settings(site)
    assert settings.markdown_extensions == ("fenced_code", "toc")
    assert settings.jobs == 2


@pytest.mark.parametrize(
    "text, reason",
    [
        ("markdown_extensions: toc\n", "list of extension names"),
        ("markdown_extensions: [no_such_extension_here]\n", "bad markdown extension"),
        ("markdown_extensions: [1, 2]\n", "list of extension names"),
        ("jobs: many\n", "jobs"),
        ("jobs: 0\n", "jobs"),
        ("theme: dark\n", "'theme'"),
        ("theme:\n  photo_size: big\n", "theme.photo_size"),
        ("theme:\n  font_family: 'x; } body { display: none'\n", "theme.font_family"),
        ("theme:\n  background: '</style><script>'\n", "theme.background"),
    ],
)
def test_bad_values(site, text, reason):
    _config(site, text)
    with pytest.raises(InvalidConfig) as exc:
        load_settings(site)
    assert reason in str(exc.value)


def test_bad_config_exits_nonzero(site, capsys):
    _config(site, "markdown_extensions: toc\n")
    assert main(["build", "--site", str(site)]) == 1
    assert "markdown_extensions" in capsys.readouterr().err


def test_quoted_font_family_reaches_stylesheet(site):
    _config(
        site,
        """
        theme:
          font_family: '"Open Sans", sans-serif'
          photo_size: 120
        """,
    )
    assert main(["build", "--site", str(site)]) == 0
    home = (site / "_site" / "index.html").read_text(encoding="utf-8")
    assert 'font-family: "Open Sans", sans-serif;' in home
    assert "width: 120px;" in home
    assert "&#34;" not in home
