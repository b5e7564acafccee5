"""Batch conversion of media files through external command-line tools."""

from __future__ import annotations

from collections.abc import Iterable
from pathlib import Path

from media_converter.application.results import BatchResult

__version__ = "0.1.0"


def convert_directory(
    root: Path,
    *,
    plugin_name: str,
    output_template: str | None = None,
    recurse: bool = True,
    plugin_modules: Iterable[str] | None = None,
) -> BatchResult:
    """Convert every stale supported file below ``root``.

    Parameters
    ----------
    root : Path
        Directory to scan.
    plugin_name : str
        Conversion plugin (``"flac"``, ``"heic"`` or a loaded plugin).
    output_template : str | None, default=None
        Output path template; the plugin's default when omitted.
    recurse : bool, default=True
        Descend into subdirectories.
    plugin_modules : Iterable[str] | None, default=None
        Extra plugin modules (import path or file path) to load.

    Returns
    -------
    BatchResult
        Counts of queued and failed units.
    """
    from .api import convert_directory as _impl

    return _impl(
        root,
        plugin_name=plugin_name,
        output_template=output_template,
        recurse=recurse,
        plugin_modules=plugin_modules,
    )


__all__ = ["BatchResult", "convert_directory"]
