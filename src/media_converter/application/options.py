"""Typed option objects shared across conversion use-cases."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class BatchOptions:
    """Directory conversion configuration.

    ``output_template`` falls back to the plugin's default template when
    ``None``.
    """

    recurse: bool = True
    output_template: str | None = None
