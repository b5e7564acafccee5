"""Output path templates.

A template is plain text with ``{placeholder}`` tags. The placeholders are
filled from the parts of an input path:

``path``
    The input path, verbatim.
``dir``
    Everything up to and including the last path separator (may be empty).
``file`` / ``@file``
    The final path element, raw and sanitized.
``name`` / ``@name``
    ``file`` without its extension, raw and sanitized.
``ext``
    The extension of ``file`` including the leading dot (may be empty).

Sanitized variants replace characters that are unsafe in file names, so
``{dir}.{@file}.mp3`` renders ``music/a:b.flac`` as ``music/.a-b.flac.mp3``.
"""

from __future__ import annotations

import os

from media_converter.errors import TemplateError
from media_converter.types import StrPath

START_TAG = "{"
END_TAG = "}"

PLACEHOLDERS = ("path", "dir", "file", "@file", "name", "@name", "ext")

_SANITIZE_TABLE = str.maketrans({":": "-"})


def sanitize(value: str) -> str:
    """Replace path-unsafe characters in a single path element."""
    return value.translate(_SANITIZE_TABLE)


def split_path(path: StrPath) -> dict[str, str]:
    """Decompose ``path`` into the values substituted by a template.

    Parameters
    ----------
    path : str | os.PathLike
        Input file path.

    Returns
    -------
    dict[str, str]
        Mapping of placeholder name to value.
    """
    raw = os.fspath(path)
    file = os.path.basename(raw)
    directory = raw[: len(raw) - len(file)]
    dot = file.rfind(".")
    ext = file[dot:] if dot >= 0 else ""
    name = file[: len(file) - len(ext)]
    return {
        "path": raw,
        "dir": directory,
        "file": file,
        "@file": sanitize(file),
        "name": name,
        "@name": sanitize(name),
        "ext": ext,
    }


class PathTemplate:
    """Compiled output path template.

    Instances are immutable once built and safe to share between threads.

    Parameters
    ----------
    template : str
        Template text.

    Raises
    ------
    TemplateError
        If a start tag has no matching end tag.
    """

    __slots__ = ("_source", "_texts", "_tags")

    def __init__(self, template: str) -> None:
        texts: list[str] = []
        tags: list[str] = []
        rest = template
        while True:
            start = rest.find(START_TAG)
            if start < 0:
                texts.append(rest)
                break
            texts.append(rest[:start])
            rest = rest[start + len(START_TAG) :]
            end = rest.find(END_TAG)
            if end < 0:
                raise TemplateError(
                    f"cannot find end tag {END_TAG!r} in the template {template!r} "
                    f"starting from {rest!r}"
                )
            tags.append(rest[:end])
            rest = rest[end + len(END_TAG) :]

        self._source = template
        self._texts = tuple(texts)
        self._tags = tuple(tags)

    @property
    def source(self) -> str:
        """Template text this instance was compiled from."""
        return self._source

    @property
    def placeholders(self) -> tuple[str, ...]:
        """Placeholder names in order of appearance."""
        return self._tags

    def render(self, path: StrPath) -> str:
        """Render the template for ``path``.

        Unknown placeholders render as the empty string.
        """
        values = split_path(path)
        parts = [self._texts[0]]
        for tag, text in zip(self._tags, self._texts[1:]):
            parts.append(values.get(tag, ""))
            parts.append(text)
        return "".join(parts)

    def __repr__(self) -> str:
        return f"PathTemplate({self._source!r})"
