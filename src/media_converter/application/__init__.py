"""Application-layer use-cases and option objects."""

from __future__ import annotations

from collections.abc import Iterable
from pathlib import Path

from media_converter.application.options import BatchOptions
from media_converter.application.ports import FailureReporter, UnitConverter
from media_converter.application.results import BatchResult


def build_batch_options(
    *,
    recurse: bool = True,
    output_template: str | None = None,
) -> BatchOptions:
    """Build typed batch options from command/API params."""
    return BatchOptions(recurse=recurse, output_template=output_template)


def convert_directory(
    *,
    root: Path,
    plugin_name: str,
    options: BatchOptions,
    plugin_modules: Iterable[str] | None = None,
    reporter: FailureReporter | None = None,
) -> BatchResult:
    """Convert a directory tree via lazy use-case import."""
    from media_converter.application.use_cases import convert_directory as _impl

    return _impl(
        root=root,
        plugin_name=plugin_name,
        options=options,
        plugin_modules=plugin_modules,
        reporter=reporter,
    )


__all__ = [
    "BatchOptions",
    "BatchResult",
    "FailureReporter",
    "UnitConverter",
    "build_batch_options",
    "convert_directory",
]
