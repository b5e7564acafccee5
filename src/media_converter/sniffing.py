"""File-type detection by extension and magic bytes."""

from __future__ import annotations

import os
from collections.abc import Iterable

from media_converter.types import StrPath

FLAC_EXTENSIONS = frozenset({".flac"})
FLAC_MAGIC = b"fLaC"

HEIF_EXTENSIONS = frozenset({".heic", ".heif"})


def has_extension(path: StrPath, extensions: Iterable[str]) -> bool:
    """Return whether ``path`` ends with one of ``extensions`` (case-insensitive)."""
    _, ext = os.path.splitext(os.fspath(path))
    return ext.lower() in {item.lower() for item in extensions}


def has_magic(path: StrPath, magic: bytes) -> bool:
    """Return whether the file at ``path`` starts with ``magic``.

    Raises
    ------
    OSError
        If the file cannot be opened or read.
    """
    with open(path, "rb") as handle:
        return handle.read(len(magic)) == magic


def is_flac(path: StrPath) -> bool:
    """Classify FLAC audio by extension, falling back to the stream marker."""
    if has_extension(path, FLAC_EXTENSIONS):
        return True
    return has_magic(path, FLAC_MAGIC)


def is_heif(path: StrPath) -> bool:
    """Classify HEIC/HEIF images by extension only."""
    return has_extension(path, HEIF_EXTENSIONS)
