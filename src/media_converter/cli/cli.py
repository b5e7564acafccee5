#!/usr/bin/env python3
"""
media_converter.cli.cli

Typer-based CLI for batch conversion of media files.

Each command walks a directory, picks the files its plugin recognises and
converts every one whose output is missing or older than the source.

Examples
--------
Convert FLAC files below the current directory to MP3:

    convert-media flac

Convert HEIC photos in one folder only, writing JPEGs next to them:

    convert-media heic ~/Pictures --no-recurse --out "{dir}{name}.jpg"
"""

from __future__ import annotations

import logging
import sys
import traceback
from pathlib import Path

import typer

from media_converter.errors import ConversionError, PluginError

app = typer.Typer(
    name="convert-media",
    help="Batch-convert media files (FLAC → MP3, HEIC → JPEG) with external tools.",
    no_args_is_help=True,
)

ROOT_HELP = "Directory to scan."
OUT_HELP = (
    "Output path template. Placeholders: {path} {dir} {file} {@file} "
    "{name} {@name} {ext}; @ variants replace ':' with '-'."
)
RECURSE_HELP = "Whether to walk into child directories."
INTERRUPTED_EXIT_CODE = 130

LOG_FORMAT = "%(levelname)s: %(name)s: %(message)s"


def _configure_logging(debug: bool) -> None:
    """Send library logging to stderr.

    Parameters
    ----------
    debug : bool
        Log at DEBUG instead of WARNING.
    """
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.WARNING,
        format=LOG_FORMAT,
        stream=sys.stderr,
    )


def _print_conversion_error(exc: Exception, debug: bool) -> int:
    """Print a user-friendly fatal error.

    Parameters
    ----------
    exc : Exception
        Exception that aborted the run.
    debug : bool
        Whether to include traceback details.

    Returns
    -------
    int
        Process exit code.
    """
    typer.echo(f"✗ {type(exc).__name__}: {exc}", err=True)
    if debug:
        typer.echo("\nTraceback:", err=True)
        typer.echo("".join(traceback.format_exception(type(exc), exc, exc.__traceback__)), err=True)
    code = getattr(exc, "exit_code", None)
    if isinstance(code, int) and code > 0:
        return code
    return 1


def _run(
    ctx: typer.Context,
    root: Path,
    plugin_name: str,
    output_template: str | None,
    recurse: bool,
    plugin_modules: list[str] | None = None,
) -> None:
    """Run one directory conversion and map its outcome to an exit code."""
    debug: bool = bool(ctx.obj.get("debug", False))

    try:
        from media_converter.api import convert_directory

        result = convert_directory(
            root,
            plugin_name=plugin_name,
            output_template=output_template,
            recurse=recurse,
            plugin_modules=plugin_modules,
        )
    except (ConversionError, PluginError) as exc:
        raise typer.Exit(code=_print_conversion_error(exc, debug))
    except Exception as exc:
        # Unexpected crash: still show a clean message; debug prints traceback.
        raise typer.Exit(code=_print_conversion_error(exc, debug))

    if result.interrupted:
        typer.echo("Interrupted.", err=True)
        raise typer.Exit(code=INTERRUPTED_EXIT_CODE)


# -----------------------------
# Global options
# -----------------------------
@app.callback()
def _main(
    ctx: typer.Context,
    debug: bool = typer.Option(False, "--debug", help="Verbose logging and full tracebacks."),
) -> None:
    """Initialize shared CLI state.

    Parameters
    ----------
    ctx : typer.Context
        Typer context object used to store shared state.
    debug : bool, default=False
        Whether to enable debug output.
    """
    _configure_logging(debug)
    ctx.obj = {"debug": debug}


# -----------------------------
# Commands
# -----------------------------
@app.command("flac")
def flac_cmd(
    ctx: typer.Context,
    root: Path = typer.Argument(Path("."), help=ROOT_HELP),
    out: str = typer.Option("{dir}.{@file}.mp3", "--out", help=OUT_HELP),
    recurse: bool = typer.Option(True, "--recurse/--no-recurse", help=RECURSE_HELP),
) -> None:
    """Convert FLAC audio to MP3.

    Notes
    -----
    - Requires ``metaflac``, ``flac`` and ``lame`` on ``PATH``.
    - Files without a ``.flac`` extension are recognised by their stream marker.
    - Title, track number, genre, artist, album and date tags are carried over.
    """
    _run(ctx, root, "flac", out, recurse)


@app.command("heic")
def heic_cmd(
    ctx: typer.Context,
    root: Path = typer.Argument(Path("."), help=ROOT_HELP),
    out: str = typer.Option("{dir}{file}.jpg", "--out", help=OUT_HELP),
    recurse: bool = typer.Option(True, "--recurse/--no-recurse", help=RECURSE_HELP),
) -> None:
    """Convert HEIC/HEIF images to JPEG.

    Notes
    -----
    - Requires ``heif-convert`` (libheif) on ``PATH``.
    """
    _run(ctx, root, "heic", out, recurse)


@app.command("custom")
def custom_cmd(
    ctx: typer.Context,
    root: Path = typer.Argument(Path("."), help=ROOT_HELP),
    plugin_name: str = typer.Option(..., "--plugin-name", help="Plugin to convert with."),
    plugin_module: list[str] | None = typer.Option(
        None,
        "--plugin-module",
        help="Plugin module import path or file path (repeatable).",
    ),
    out: str | None = typer.Option(
        None, "--out", help=f"{OUT_HELP} Defaults to the plugin's template."
    ),
    recurse: bool = typer.Option(True, "--recurse/--no-recurse", help=RECURSE_HELP),
) -> None:
    """Convert with any registered or loaded plugin."""
    _run(ctx, root, plugin_name, out, recurse, plugin_modules=plugin_module)


@app.command("doctor")
def doctor_cmd(
    plugin_module: list[str] | None = typer.Option(
        None,
        "--plugin-module",
        help="Plugin module import path or file path (repeatable).",
    ),
) -> None:
    """Print plugins and whether the external tools they need are installed."""
    from media_converter.infrastructure.processes import which_tools
    from media_converter.plugins.registry import create_default_registry

    typer.echo(f"Python: {sys.version.split()[0]}")
    try:
        registry = create_default_registry(extra_modules=plugin_module)
    except PluginError as exc:
        raise typer.Exit(code=_print_conversion_error(exc, debug=False))

    for plugin in registry:
        typer.echo(f"{plugin.name}: default output {plugin.default_template}")
        for tool, location in which_tools(plugin.tools).items():
            typer.echo(f"  {tool}: {location or '<not found>'}")


if __name__ == "__main__":
    app()
