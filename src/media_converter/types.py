"""Shared type aliases for converter modules."""

from __future__ import annotations

import os
from collections.abc import Mapping
from typing import TypeAlias

StrPath: TypeAlias = str | os.PathLike[str]

# Uppercased tag name -> value, as exported by the tag tool.
TagMap: TypeAlias = Mapping[str, str]
