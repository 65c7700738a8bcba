"""Loading of ban, auxiliary and swap word lists."""

from __future__ import annotations

from collections.abc import Iterator
from os import PathLike
from typing import Union

_Path = Union[str, "PathLike[str]"]


def _read_lines(path: _Path) -> Iterator[str]:
    with open(path, encoding="utf-8", errors="replace", newline="") as handle:
        text = handle.read()
    lines = text.split("\n")
    if lines and lines[-1] == "":
        lines.pop()
    yield from lines


def load_word_list(path: _Path) -> set[str]:
    """Return the upper-cased non-blank lines of *path*; empty if unreadable."""
    try:
        lines = list(_read_lines(path))
    except OSError:
        return set()
    return {line.strip().upper() for line in lines if line.strip()}


def load_swap_list(path: _Path) -> dict[str, str]:
    """Return a mapping built from pairs of lines (from, to) in *path*.

    A pair with a blank side is skipped, a final unpaired line is ignored,
    and an unreadable file gives an empty mapping.
    """
    try:
        lines = iter(list(_read_lines(path)))
    except OSError:
        return {}
    swaps: dict[str, str] = {}
    for first in lines:
        second = next(lines, None)
        if second is None:
            break
        source, target = first.upper().strip(), second.upper().strip()
        if source and target:
            swaps[source] = target
    return swaps