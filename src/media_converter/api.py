"""Public directory conversion API (delegates to application use-cases)."""

from __future__ import annotations

from pathlib import Path
from typing import Iterable
from typing import Optional

from media_converter.application import build_batch_options
from media_converter.application.ports import FailureReporter
from media_converter.application.results import BatchResult
from media_converter.application.use_cases import convert_directory as _convert_directory


def convert_directory(
    root: Path,
    *,
    plugin_name: str,
    output_template: Optional[str] = None,
    recurse: bool = True,
    plugin_modules: Optional[Iterable[str]] = None,
    reporter: Optional[FailureReporter] = None,
) -> BatchResult:
    """Convert every stale file below ``root`` that ``plugin_name`` handles."""
    options = build_batch_options(recurse=recurse, output_template=output_template)
    return _convert_directory(
        root=root,
        plugin_name=plugin_name,
        options=options,
        plugin_modules=plugin_modules,
        reporter=reporter,
    )


def convert_flac_directory(
    root: Path,
    output_template: Optional[str] = None,
    recurse: bool = True,
) -> BatchResult:
    """Convert FLAC files below ``root`` to MP3."""
    return convert_directory(
        root, plugin_name="flac", output_template=output_template, recurse=recurse
    )


def convert_heic_directory(
    root: Path,
    output_template: Optional[str] = None,
    recurse: bool = True,
) -> BatchResult:
    """Convert HEIC/HEIF images below ``root`` to JPEG."""
    return convert_directory(
        root, plugin_name="heic", output_template=output_template, recurse=recurse
    )
