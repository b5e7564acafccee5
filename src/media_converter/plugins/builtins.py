"""Built-in conversion plugins."""

from __future__ import annotations

from media_converter.adapters import audio, image
from media_converter.converter.core import WorkUnit
from media_converter.infrastructure.processes import CancelToken
from media_converter.sniffing import is_flac, is_heif


class FlacToMp3Plugin:
    """Convert FLAC audio to 192 kbit/s MP3 with ID3v2 tags.

    Notes
    -----
    Files are recognised by a ``.flac`` extension or, failing that, by the
    ``fLaC`` stream marker, so every candidate without the extension is
    opened once.
    """

    name = "flac"
    tools = audio.TOOLS
    default_template = "{dir}.{@file}.mp3"

    def can_handle(self, path: str) -> bool:
        return is_flac(path)

    def convert(self, token: CancelToken, unit: WorkUnit) -> None:
        audio.convert_flac_to_mp3(token, unit)


class HeicToJpegPlugin:
    """Convert HEIC/HEIF images to JPEG."""

    name = "heic"
    tools = image.TOOLS
    default_template = "{dir}{file}.jpg"

    def can_handle(self, path: str) -> bool:
        return is_heif(path)

    def convert(self, token: CancelToken, unit: WorkUnit) -> None:
        image.convert_heif_to_jpeg(token, unit)
