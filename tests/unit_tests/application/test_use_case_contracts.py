"""Unit tests for application use-case contracts."""

from __future__ import annotations

import os
import shutil
import signal
import threading
from pathlib import Path

import pytest

from media_converter.application import build_batch_options
from media_converter.application.use_cases import convert_directory
from media_converter.converter.core import WorkUnit
from media_converter.errors import (
    CancelledError,
    ConversionError,
    PluginError,
    ProcessError,
    TemplateError,
    ToolNotFoundError,
    WalkError,
)
from media_converter.infrastructure.processes import CancelToken
from media_converter.plugins.registry import PluginRegistry


class _CopyPlugin:
    """In-process plugin copying ``*.src`` files."""

    name = "copy"
    tools: tuple[str, ...] = ()
    default_template = "{dir}{name}.dst"

    def __init__(self, fail_on: tuple[str, ...] = ()) -> None:
        self.fail_on = fail_on
        self.converted: list[WorkUnit] = []
        self._lock = threading.Lock()

    def can_handle(self, path: str) -> bool:
        return path.endswith(".src")

    def convert(self, token: CancelToken, unit: WorkUnit) -> None:
        token.raise_if_cancelled()
        if os.path.basename(unit.source) in self.fail_on:
            raise ProcessError(["copy"], 2)
        shutil.copyfile(unit.source, unit.destination)
        with self._lock:
            self.converted.append(unit)


class _Reporter:
    def __init__(self) -> None:
        self.failures: list[tuple[WorkUnit, BaseException]] = []
        self._lock = threading.Lock()

    def report(self, unit: WorkUnit, error: BaseException) -> None:
        with self._lock:
            self.failures.append((unit, error))


def _registry(plugin: object) -> PluginRegistry:
    registry = PluginRegistry()
    registry.register(plugin)  # type: ignore[arg-type]
    return registry


def _populate(root: Path, names: tuple[str, ...] = ("a.src", "b.src", "c.txt")) -> None:
    for name in names:
        (root / name).write_text(name, encoding="utf-8")


def test_converts_supported_files(tmp_path: Path) -> None:
    """Convert each supported file to its templated destination."""
    _populate(tmp_path)
    plugin = _CopyPlugin()

    result = convert_directory(
        root=tmp_path,
        plugin_name="copy",
        options=build_batch_options(),
        registry=_registry(plugin),
        reporter=_Reporter(),
    )

    assert (result.queued, result.failed, result.interrupted) == (2, 0, False)
    assert result.succeeded == 2
    assert (tmp_path / "a.dst").read_text(encoding="utf-8") == "a.src"
    assert not (tmp_path / "c.dst").exists()


def test_second_run_skips_fresh_outputs(tmp_path: Path) -> None:
    """Do nothing when every output is already up to date."""
    _populate(tmp_path)
    plugin = _CopyPlugin()
    registry = _registry(plugin)
    options = build_batch_options()

    convert_directory(root=tmp_path, plugin_name="copy", options=options, registry=registry)
    again = convert_directory(
        root=tmp_path, plugin_name="copy", options=options, registry=registry
    )

    assert again.queued == 0
    assert len(plugin.converted) == 2


def test_custom_template_and_no_recurse(tmp_path: Path) -> None:
    """Honour an explicit template and stay out of subdirectories."""
    _populate(tmp_path)
    (tmp_path / "sub").mkdir()
    _populate(tmp_path / "sub", ("d.src",))

    result = convert_directory(
        root=tmp_path,
        plugin_name="copy",
        options=build_batch_options(recurse=False, output_template="{path}.copy"),
        registry=_registry(_CopyPlugin()),
    )

    assert result.queued == 2
    assert (tmp_path / "a.src.copy").exists()
    assert not (tmp_path / "sub" / "d.src.copy").exists()


def test_failures_are_reported_per_file(tmp_path: Path) -> None:
    """Report a failing file and still convert the rest."""
    _populate(tmp_path)
    reporter = _Reporter()

    result = convert_directory(
        root=tmp_path,
        plugin_name="copy",
        options=build_batch_options(),
        registry=_registry(_CopyPlugin(fail_on=("a.src",))),
        reporter=reporter,
    )

    assert (result.queued, result.failed) == (2, 1)
    [(unit, error)] = reporter.failures
    assert unit.source == str(tmp_path / "a.src")
    assert str(error) == "copy: exit status 2"
    assert (tmp_path / "b.dst").exists()


def test_invalid_root_raises(tmp_path: Path) -> None:
    """Reject a root that is not a directory."""
    with pytest.raises(ConversionError, match="Invalid batch conversion parameters"):
        convert_directory(
            root=tmp_path / "missing",
            plugin_name="copy",
            options=build_batch_options(),
            registry=_registry(_CopyPlugin()),
        )


def test_blank_template_raises(tmp_path: Path) -> None:
    """Reject a whitespace-only output template."""
    with pytest.raises(ConversionError, match="output_template cannot be blank"):
        convert_directory(
            root=tmp_path,
            plugin_name="copy",
            options=build_batch_options(output_template="  "),
            registry=_registry(_CopyPlugin()),
        )


def test_unknown_plugin_raises(tmp_path: Path) -> None:
    """Raise PluginError for a plugin that is not registered."""
    with pytest.raises(PluginError, match="Unknown plugin 'nope'"):
        convert_directory(
            root=tmp_path,
            plugin_name="nope",
            options=build_batch_options(),
            registry=_registry(_CopyPlugin()),
        )


def test_missing_tool_raises_before_walking(tmp_path: Path) -> None:
    """Abort before any conversion when a required tool is missing."""
    _populate(tmp_path)
    plugin = _CopyPlugin()
    plugin.tools = ("definitely-not-an-installed-tool",)

    with pytest.raises(ToolNotFoundError, match='"definitely-not-an-installed-tool" not found'):
        convert_directory(
            root=tmp_path,
            plugin_name="copy",
            options=build_batch_options(),
            registry=_registry(plugin),
        )
    assert plugin.converted == []


def test_malformed_template_raises(tmp_path: Path) -> None:
    """Abort before any conversion on an unbalanced template."""
    _populate(tmp_path)
    plugin = _CopyPlugin()

    with pytest.raises(TemplateError):
        convert_directory(
            root=tmp_path,
            plugin_name="copy",
            options=build_batch_options(output_template="{dir}{name.dst"),
            registry=_registry(plugin),
        )
    assert plugin.converted == []


def test_walk_error_aborts_run(tmp_path: Path) -> None:
    """Surface a filesystem error from the walk as a fatal error."""
    _populate(tmp_path)

    class _Unreadable(_CopyPlugin):
        def can_handle(self, path: str) -> bool:
            raise PermissionError(13, "Permission denied", path)

    with pytest.raises(WalkError, match="Permission denied"):
        convert_directory(
            root=tmp_path,
            plugin_name="copy",
            options=build_batch_options(),
            registry=_registry(_Unreadable()),
        )


def test_termination_signal_interrupts_run(tmp_path: Path) -> None:
    """Cancel every in-flight unit on SIGTERM and restore the handler."""
    _populate(tmp_path, tuple(f"{index}.src" for index in range(5)))
    previous = signal.getsignal(signal.SIGTERM)
    sent = threading.Event()
    lock = threading.Lock()

    class _Blocking(_CopyPlugin):
        def convert(self, token: CancelToken, unit: WorkUnit) -> None:
            with lock:
                if not sent.is_set():
                    sent.set()
                    os.kill(os.getpid(), signal.SIGTERM)
            if not token.wait_cancelled(10):
                raise AssertionError("run was not cancelled")
            raise CancelledError()

    reporter = _Reporter()
    result = convert_directory(
        root=tmp_path,
        plugin_name="copy",
        options=build_batch_options(),
        registry=_registry(_Blocking()),
        reporter=reporter,
    )

    assert result.interrupted
    assert result.queued >= 1
    assert result.failed == result.queued == len(reporter.failures)
    assert all(isinstance(error, CancelledError) for _, error in reporter.failures)
    assert signal.getsignal(signal.SIGTERM) == previous
