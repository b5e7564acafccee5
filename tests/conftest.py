"""Shared pytest configuration, marker assignment and fake media tools."""

from __future__ import annotations

import os
import stat
from pathlib import Path

import pytest


def pytest_collection_modifyitems(
    config: pytest.Config, items: list[pytest.Item]
) -> None:
    """Attach suite markers based on test file path."""
    del config
    for item in items:
        path = Path(str(item.fspath))
        parts = set(path.parts)
        if "e2e_tests" in parts:
            item.add_marker(pytest.mark.e2e)
        elif "integration_tests" in parts:
            item.add_marker(pytest.mark.integration)
        elif "unit_tests" in parts:
            item.add_marker(pytest.mark.unit)


class FakeTools:
    """Directory of ``/bin/sh`` scripts standing in for the media tools.

    Every script appends ``<name> <args>`` to :attr:`log` before running
    its body.
    """

    def __init__(self, bin_dir: Path) -> None:
        self.bin_dir = bin_dir
        self.log = bin_dir / "calls.log"

    def install(self, name: str, body: str) -> Path:
        script = self.bin_dir / name
        script.write_text(
            "#!/bin/sh\n"
            f'printf "%s\\n" "{name} $*" >> "{self.log}"\n'
            f"{body}\n",
            encoding="utf-8",
        )
        script.chmod(script.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
        return script

    def calls(self, name: str | None = None) -> list[str]:
        if not self.log.exists():
            return []
        lines = self.log.read_text(encoding="utf-8").splitlines()
        if name is None:
            return lines
        return [line for line in lines if line.split(" ", 1)[0] == name]

    def install_audio_tools(self, tags: str = "TITLE=Foo\\nARTIST=Bar\\n") -> None:
        """Install working metaflac/flac/lame fakes (lame copies stdin to its last arg)."""
        self.install("metaflac", f"printf '{tags}'")
        self.install("flac", 'cat "$3"')
        self.install("lame", 'for last; do :; done\ncat > "$last"')

    def install_heif_tool(self) -> None:
        """Install a working heif-convert fake that copies source to destination."""
        self.install("heif-convert", 'cp "$3" "$4"')


@pytest.fixture
def fake_tools(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> FakeTools:
    """Put an empty fake-tool directory first on ``PATH``."""
    bin_dir = tmp_path / "bin"
    bin_dir.mkdir()
    monkeypatch.setenv("PATH", f"{bin_dir}{os.pathsep}{os.environ.get('PATH', '')}")
    return FakeTools(bin_dir)


@pytest.fixture
def media_dir(tmp_path: Path) -> Path:
    """Empty directory to scan, separate from the fake tools."""
    root = tmp_path / "media"
    root.mkdir()
    return root
