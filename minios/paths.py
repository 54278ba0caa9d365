"""Splitting of slash-separated paths."""

from __future__ import annotations


def split_path(path: str) -> list[str]:
    """Return the non-empty segments of ``path`` split on ``/``."""
    return [segment for segment in path.split("/") if segment]