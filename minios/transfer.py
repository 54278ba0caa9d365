"""Copying and moving files and directories within the tree."""

from __future__ import annotations

from typing import Any

from .directory import Directory, DirectoryTree, ShellError, child_route
from .mkdir import new_node


def _attach(node: Directory, parent: Directory, name: str) -> Directory:
    parent.add_child(node)
    node.route = child_route(parent, name)
    return node


def copy_file(tree: DirectoryTree, source: Directory, destination: Directory) -> str:
    """Copy the stored contents of ``source`` to ``destination``."""
    src = tree.file_path(source.name)
    dst = tree.file_path(destination.name)
    message = f"copying from '{src}' to '{dst}'\n"
    try:
        data = src.read_bytes()
    except OSError as exc:
        raise ShellError(f"copyFile: source open failed: {exc}") from exc
    try:
        dst.write_bytes(data)
    except OSError as exc:
        raise ShellError(f"copyFile: destination open failed: {exc}") from exc
    return message


def copy_directory(tree: DirectoryTree, source: Directory, parent: Directory,
                   name: str | None = None, owner: Any = None) -> str:
    """Copy the contents of ``source`` into a new directory ``name`` under
    ``parent``, or straight into ``parent`` when ``name`` is ``None``."""
    if name is not None:
        target = _attach(new_node(name, "755", owner), parent, name)
    else:
        target = parent

    parts = []
    for child in source.children():
        if child.type == "d":
            copied = _attach(new_node(child.name, "755", owner), target, child.name)
            parts.append(copy_directory(tree, child, copied, None, owner))
        elif child.type == "-":
            copied = new_node(child.name, "644", owner)
            copied.type = "-"
            copied.size = child.size
            _attach(copied, target, child.name)
            try:
                parts.append(copy_file(tree, child, copied))
            except ShellError as exc:
                parts.append(f"{exc}\n")
    return "".join(parts)


def _replacement(source: Directory, name: str, mode: str, owner: Any) -> Directory:
    node = new_node(name, mode, owner)
    if owner is None:
        node.uid, node.gid = source.uid, source.gid
    node.permission = tuple(source.permission)
    return node


def move_file(source: Directory, destination: Directory, name: str,
              owner: Any = None) -> Directory:
    """Move the file ``source`` into ``destination`` as ``name``."""
    if source.parent is None:
        raise ShellError(f"mv: cannot move '{source.name}': no parent directory")
    moved = _replacement(source, name, "644", owner)
    moved.type = "-"
    moved.size = source.size
    _attach(moved, destination, name)
    source.parent.remove_child(source)
    return moved


def move_directory(source: Directory, destination: Directory, name: str,
                   recursive: bool = False, owner: Any = None) -> Directory:
    """Move the directory ``source`` into ``destination`` as ``name``.

    Without ``recursive`` the contents are left behind with the old node.
    """
    if source.parent is None:
        raise ShellError(f"mv: cannot move '{source.name}': no parent directory")
    moved = _replacement(source, name, "755", owner)
    _attach(moved, destination, name)
    if recursive:
        for child in source.children():
            if child.type == "d":
                move_directory(child, moved, child.name, True, owner)
            else:
                move_file(child, moved, child.name, owner)
    source.parent.remove_child(source)
    return moved