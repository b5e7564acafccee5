"""Plugin protocol for media conversion strategies."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from media_converter.converter.core import WorkUnit
from media_converter.infrastructure.processes import CancelToken


@runtime_checkable
class ConverterPlugin(Protocol):
    """Protocol implemented by conversion plugins.

    A plugin pairs a type predicate with a conversion strategy, plus the
    external tools that strategy needs and the output template used when the
    caller does not pass one.
    """

    name: str
    tools: tuple[str, ...]
    default_template: str

    def can_handle(self, path: str) -> bool:
        """Check whether the file at ``path`` is a supported source.

        Parameters
        ----------
        path : str
            Candidate file discovered by the walk.

        Returns
        -------
        bool
            ``True`` if the file should be converted.

        Raises
        ------
        OSError
            If the file has to be inspected and cannot be read.
        """

    def convert(self, token: CancelToken, unit: WorkUnit) -> None:
        """Convert one file.

        Parameters
        ----------
        token : CancelToken
            Cancellation handle every external process must run under.
        unit : WorkUnit
            Source and destination paths.
        """
