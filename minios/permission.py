"""Permission bits: parsing and formatting of three-digit octal modes."""

from __future__ import annotations

from collections.abc import Sequence

_OCTAL_DIGITS = frozenset("01234567")
_SHIFTS = (2, 1, 0)


class InvalidModeError(ValueError):
    """Raised when a mode string is not three octal digits."""


def parse_mode(mode: str) -> tuple[bool, ...]:
    """Turn a mode such as ``"755"`` into nine permission flags.

    Only the first three characters are used; each must be an octal digit.
    """
    head = mode[:3]
    if len(head) < 3 or any(char not in _OCTAL_DIGITS for char in head):
        raise InvalidModeError(f"chmod: invalid mode: {mode}")
    return tuple(bool((int(char) >> shift) & 1) for char in head for shift in _SHIFTS)


def format_mode(permission: Sequence[bool]) -> str:
    """Turn nine permission flags back into a three-digit mode string."""
    if len(permission) != 9:
        raise ValueError(f"expected 9 permission flags, got {len(permission)}")
    digits = []
    for start in (0, 3, 6):
        read, write, execute = permission[start : start + 3]
        digits.append(str((bool(read) << 2) | (bool(write) << 1) | bool(execute)))
    return "".join(digits)


def permission_string(kind: str, permission: Sequence[bool]) -> str:
    """Render flags as ``ls -l`` does, e.g. ``drwxr-xr-x``."""
    if len(permission) != 9:
        raise ValueError(f"expected 9 permission flags, got {len(permission)}")
    lead = "d" if kind == "d" else "-"
    letters = "rwx" * 3
    return lead + "".join(
        letter if flag else "-" for letter, flag in zip(letters, permission)
    )