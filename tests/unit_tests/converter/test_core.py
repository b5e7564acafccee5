"""Unit tests for work units and the freshness check."""

from __future__ import annotations

import dataclasses
import os
from pathlib import Path

import pytest

from media_converter.converter.core import WorkUnit, is_fresh, remove_partial_output

SECOND_NS = 1_000_000_000


def _touch(path: Path, mtime_ns: int) -> Path:
    path.write_bytes(b"x")
    os.utime(path, ns=(mtime_ns, mtime_ns))
    return path


def test_missing_destination_is_stale(tmp_path: Path) -> None:
    """Always convert when there is no output yet."""
    source = _touch(tmp_path / "a.flac", 100 * SECOND_NS)
    assert not is_fresh(source, tmp_path / "a.mp3")


def test_newer_destination_is_fresh(tmp_path: Path) -> None:
    """Skip outputs written after the source."""
    source = _touch(tmp_path / "a.flac", 100 * SECOND_NS)
    destination = _touch(tmp_path / "a.mp3", 200 * SECOND_NS)
    assert is_fresh(source, destination)


def test_equal_modification_time_is_fresh(tmp_path: Path) -> None:
    """Treat identical timestamps as up to date."""
    source = _touch(tmp_path / "a.flac", 100 * SECOND_NS + 5)
    destination = _touch(tmp_path / "a.mp3", 100 * SECOND_NS + 5)
    assert is_fresh(source, destination)


def test_older_destination_is_stale(tmp_path: Path) -> None:
    """Reconvert when the source changed after the output was written."""
    source = _touch(tmp_path / "a.flac", 200 * SECOND_NS)
    destination = _touch(tmp_path / "a.mp3", 100 * SECOND_NS)
    assert not is_fresh(source, destination)


def test_missing_source_raises(tmp_path: Path) -> None:
    """Propagate errors stat'ing the source."""
    with pytest.raises(FileNotFoundError):
        is_fresh(tmp_path / "gone.flac", tmp_path / "gone.mp3")


def test_work_unit_is_immutable() -> None:
    """Forbid mutating a unit after creation."""
    unit = WorkUnit(source="a.flac", destination="a.mp3")
    with pytest.raises(dataclasses.FrozenInstanceError):
        unit.source = "b.flac"  # type: ignore[misc]


def test_remove_partial_output(tmp_path: Path) -> None:
    """Delete the destination and tolerate it already being gone."""
    destination = tmp_path / "a.mp3"
    destination.write_bytes(b"partial")
    unit = WorkUnit(source=str(tmp_path / "a.flac"), destination=str(destination))
    remove_partial_output(unit)
    assert not destination.exists()
    remove_partial_output(unit)
