"""Reading, creating and appending to files: the cat command."""

from __future__ import annotations

import os
from collections.abc import Iterable
from typing import BinaryIO

from .accounts import User
from .directory import Directory, DirectoryTree, ShellError
from .mkdir import make_directory

_END_OF_INPUT = "\x04"


def can_access(node: Directory | None, user: User, write: bool = False) -> bool:
    """Tell whether ``user`` may read (or write) ``node``.

    Owner bits apply to the owner, group bits to members of the node's group,
    and the remaining bits to everyone else.
    """
    if node is None:
        return False
    if user.uid == node.uid:
        offset = 0
    elif user.gid == node.gid:
        offset = 3
    else:
        offset = 6
    return bool(node.permission[offset + (1 if write else 0)])


def cat_files(tree: DirectoryTree, user: User, names: Iterable[str],
              number_lines: bool = False) -> str:
    """Return the contents of the named files, one after another.

    Problems with single files are reported in the output and do not stop
    the others from being shown.
    """
    parts: list[str] = []
    for name in names:
        node = tree.find(name)
        if node is None:
            parts.append(f"cat: {name}: No such file or directory\n")
            continue
        if not can_access(node, user, write=False):
            parts.append(f"cat: {name}: Permission denied\n")
            continue
        try:
            text = tree.file_path(node.name).read_text(
                encoding="utf-8", errors="replace"
            )
        except OSError:
            parts.append(f"cat: {name}: Cannot open file\n")
            continue
        if number_lines:
            parts.extend(
                f"{number:6d}\t{line}"
                for number, line in enumerate(text.splitlines(keepends=True), 1)
            )
        else:
            parts.append(text)
    return "".join(parts)


def _write_lines(handle: BinaryIO, lines: Iterable[str]) -> int:
    for line in lines:
        if line.startswith(_END_OF_INPUT):
            break
        handle.write(line.encode("utf-8"))
    return handle.seek(0, os.SEEK_END)


def create_file(tree: DirectoryTree, user: User, name: str,
                lines: Iterable[str]) -> Directory:
    """Write ``lines`` to the file ``name``, replacing what it held.

    Input ends early at a line starting with Ctrl-D. A file that does not
    exist yet is added to the tree with mode 644. The tree is saved.
    """
    existing = tree.find(name)
    path = tree.file_path(name if existing is None else existing.name)
    try:
        with path.open("wb") as handle:
            size = _write_lines(handle, lines)
    except OSError as exc:
        raise ShellError(f"cat: {name}: Cannot create file") from exc

    if existing is None:
        node = make_directory(tree, name, "644", False, user)
        node.type = "-"
    else:
        node = existing
    node.size = size
    tree.save()
    return node


def append_file(tree: DirectoryTree, user: User, name: str,
                lines: Iterable[str]) -> Directory:
    """Append ``lines`` to the existing file ``name`` and save the tree."""
    existing = tree.find(name)
    if existing is None:
        raise ShellError(f"cat: {name}: No such file or directory")
    if not can_access(existing, user, write=True):
        raise ShellError(f"cat: {name}: Permission denied")
    path = tree.file_path(existing.name)
    try:
        with path.open("ab") as handle:
            size = _write_lines(handle, lines)
    except OSError as exc:
        raise ShellError(f"cat: {name}: Cannot open file") from exc
    existing.size = size
    tree.save()
    return existing