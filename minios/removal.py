"""Removing directories from the tree and their contents from disk."""

from __future__ import annotations

import os
import sys
from collections.abc import Iterable
from contextlib import suppress

from .directory import Directory, DirectoryTree, ShellError

MAX_THREADS = 50
MAX_NAME = 20


def _delete_physical(tree: DirectoryTree, node: Directory) -> str:
    path = tree.file_path(node.name)
    if node.type == "d":
        with suppress(OSError):
            os.rmdir(path)
        return ""
    with suppress(OSError):
        os.remove(path)
    return f"Deleted physical: {path}\n"


def remove_node(tree: DirectoryTree, node: Directory) -> str:
    """Delete ``node`` from disk and detach it from its parent."""
    output = _delete_physical(tree, node)
    parent = node.parent
    if parent is None:
        return output
    parent.remove_child(node)
    name = node.name[: MAX_NAME - 1]
    return output + f"rmdir: successfully removed directory '{name}'\n"


def remove_recursive(tree: DirectoryTree, node: Directory) -> str:
    """Remove ``node`` together with everything below it."""
    parts = []
    for child in node.children():
        if child.type == "d":
            parts.append(remove_recursive(tree, child))
        else:
            parts.append(_delete_physical(tree, child))
    parts.append(remove_node(tree, node))
    return "".join(parts)


def remove_directory(tree: DirectoryTree, path: str, recursive: bool = False) -> str:
    """Remove the directory at ``path`` and return what ``rmdir`` prints."""
    target = tree.find(path)
    if target is None:
        raise ShellError(f"rmdir: failed to remove '{path}': No such directory")
    if target.type != "d":
        raise ShellError(f"rmdir: failed to remove '{path}': Not a directory")
    if target is tree.root:
        raise ShellError(
            f"rmdir: failed to remove '{path}': Cannot remove root directory"
        )
    if recursive:
        return remove_recursive(tree, target)
    if target.children():
        raise ShellError(f"rmdir: failed to remove '{path}': Directory not empty")
    return remove_node(tree, target)


def remove_directories(tree: DirectoryTree, paths: Iterable[str],
                       recursive: bool = False) -> str:
    """Remove several directories, reporting failures in the output.

    The tree is saved if any path was attempted.
    """
    paths = list(paths)
    if len(paths) > MAX_THREADS:
        raise ShellError("rmdir: Too many directories")
    parts = []
    attempted = False
    for path in paths:
        if not path:
            print("rmdir: Invalid directory path", file=sys.stderr)
            continue
        attempted = True
        try:
            parts.append(remove_directory(tree, path, recursive))
        except ShellError as exc:
            parts.append(f"{exc}\n")
    if attempted:
        tree.save()
    return "".join(parts)