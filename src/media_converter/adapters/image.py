"""HEIC/HEIF to JPEG conversion through heif-convert."""

from __future__ import annotations

import logging

from media_converter.converter.core import WorkUnit, remove_partial_output
from media_converter.errors import ConversionError
from media_converter.infrastructure.processes import CancelToken

logger = logging.getLogger(__name__)

TOOLS = ("heif-convert",)

CONVERT_COMMAND = ("heif-convert", "-q", "90")


def convert_heif_to_jpeg(token: CancelToken, unit: WorkUnit) -> None:
    """Convert one HEIC/HEIF image to JPEG.

    Raises
    ------
    ConversionError
        If the converter fails or the token is cancelled. The partial
        destination is removed first.
    """
    try:
        token.run([*CONVERT_COMMAND, unit.source, unit.destination])
    except ConversionError:
        remove_partial_output(unit)
        raise
    logger.debug("converted %s -> %s", unit.source, unit.destination)
