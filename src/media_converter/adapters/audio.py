"""FLAC to MP3 conversion through metaflac, flac and lame."""

from __future__ import annotations

import contextlib
import logging
import subprocess

from media_converter.converter.core import WorkUnit, remove_partial_output
from media_converter.errors import ConversionError, TagFormatError
from media_converter.infrastructure.processes import CancelToken
from media_converter.types import TagMap

logger = logging.getLogger(__name__)

TOOLS = ("metaflac", "flac", "lame")

TAG_EXPORT_COMMAND = ("metaflac", "--export-tags-to=-", "--no-utf8-convert")
DECODE_COMMAND = ("flac", "-c", "-d")
ENCODE_COMMAND = ("lame", "-b", "192", "-h")

# lame ID3 flag -> Vorbis comment name
TAG_FLAGS = (
    ("--tt", "TITLE"),
    ("--tn", "TRACKNUMBER"),
    ("--tg", "GENRE"),
    ("--ta", "ARTIST"),
    ("--tl", "ALBUM"),
    ("--ty", "DATE"),
)


def parse_tags(output: bytes) -> dict[str, str]:
    """Parse ``KEY=VALUE`` lines exported by metaflac.

    Keys are uppercased; a repeated key keeps its last value. Bytes that are
    not valid UTF-8 survive the round trip to the encoder's command line.

    Raises
    ------
    TagFormatError
        If a line has no ``=`` separator.
    """
    text = output.decode("utf-8", errors="surrogateescape")
    lines = text.split("\n")
    if lines[-1] == "":
        lines.pop()

    tags: dict[str, str] = {}
    for line in lines:
        key, sep, value = line.removesuffix("\r").partition("=")
        if not sep:
            raise TagFormatError("invalid variable format")
        tags[key.upper()] = value
    return tags


def encode_command(tags: TagMap, destination: str) -> list[str]:
    """Build the lame command line writing ``destination``."""
    argv = list(ENCODE_COMMAND)
    for flag, name in TAG_FLAGS:
        argv.extend((flag, tags.get(name, "")))
    argv.extend(("--add-id3v2", "-", destination))
    return argv


def convert_flac_to_mp3(token: CancelToken, unit: WorkUnit) -> None:
    """Convert one FLAC file to MP3, carrying its tags over.

    The decoder's output is piped straight into the encoder. If either stage
    fails the partially written destination is removed.

    Raises
    ------
    ConversionError
        If tag export, decoding or encoding fails or the token is cancelled.
    OSError
        If a stage cannot be started.
    """
    tags = parse_tags(token.run([*TAG_EXPORT_COMMAND, unit.source], capture=True))

    with token.child() as stages:
        decoder = stages.spawn([*DECODE_COMMAND, unit.source], stdout=subprocess.PIPE)
        try:
            encoder = stages.spawn(encode_command(tags, unit.destination), stdin=decoder.stdout)
        except BaseException:
            stages.cancel()
            with contextlib.suppress(ConversionError):
                stages.wait(decoder)
            raise
        finally:
            # The encoder owns the read end now.
            decoder.stdout.close()  # type: ignore[union-attr]

        try:
            stages.wait(decoder)
        except ConversionError:
            stages.cancel()
            with contextlib.suppress(ConversionError):
                stages.wait(encoder)
            remove_partial_output(unit)
            raise

        try:
            stages.wait(encoder)
        except ConversionError:
            remove_partial_output(unit)
            raise
    logger.debug("converted %s -> %s", unit.source, unit.destination)
