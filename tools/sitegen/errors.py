from __future__ import annotations

import pathlib


class SitegenError(Exception):
    """Base class for build failures reported by the CLI."""


class MalformedFrontMatter(SitegenError):
    def __init__(self, message: str, source: pathlib.Path | None = None):
        self.source = source
        if source is not None:
            message = f"{source.name}: {message}"
        super().__init__(message)


class UnsupportedSyntax(SitegenError):
    """Raised for markup dialects the renderer does not handle."""

    def __init__(self, markup: str):
        self.markup = markup
        super().__init__(f"unsupported markup dialect: {markup!r}")


class DuplicatePost(SitegenError):
    def __init__(self, output_path: str, first: pathlib.Path, second: pathlib.Path):
        self.output_path = output_path
        self.sources = (first, second)
        super().__init__(
            f"{first.name} and {second.name} both resolve to {output_path}"
        )


class MissingTemplateField(SitegenError):
    def __init__(self, template: str, field: str):
        self.template = template
        self.field = field
        super().__init__(f"template {template!r}: unresolved field {field}")


class WriteError(SitegenError):
    def __init__(self, path: pathlib.Path, cause: OSError):
        self.path = path
        self.cause = cause
        super().__init__(f"cannot write {path}: {cause.strerror or cause}")


class InvalidConfig(SitegenError):
    def __init__(self, path: pathlib.Path, reason: str):
        self.path = path
        super().__init__(f"{path}: {reason}")
