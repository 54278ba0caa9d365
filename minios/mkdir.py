"""Creating nodes and directories, and changing their mode."""

from __future__ import annotations

import os
from typing import Any

from .directory import Directory, DirectoryTree, ShellError, child_route
from .paths import split_path
from .permission import parse_mode

MAX_NAME = 20
DIRECTORY_SIZE = 4096


def new_node(name: str, mode: str = "755", owner: Any = None) -> Directory:
    """Create a detached directory node owned by ``owner`` (root if ``None``)."""
    permission = parse_mode(mode)
    node = Directory(
        name=name[: MAX_NAME - 1],
        type="d",
        visible=True,
        permission=permission,
        uid=owner.uid if owner is not None else 0,
        gid=owner.gid if owner is not None else 0,
        size=DIRECTORY_SIZE,
    )
    node.touch()
    return node


def make_directory(tree: DirectoryTree, path: str, mode: str = "755",
                   create_parents: bool = False, owner: Any = None) -> Directory:
    """Create the directory at ``path``, save the tree and return the new node."""
    if tree.find(path) is not None:
        raise ShellError(f"mkdir: cannot create directory '{path}': File exists")
    parse_mode(mode)

    segments = split_path(path)
    node = tree.root if path.startswith("/") else tree.current
    for index, segment in enumerate(segments):
        last = index == len(segments) - 1
        child = node.find_child(segment)
        if child is None:
            if not create_parents and not last:
                raise ShellError(f"mkdir: {path}: No such file or directory.")
            child = new_node(segment, mode, owner)
            node.add_child(child)
            child.route = child_route(node, segment)
        elif last and not create_parents:
            raise ShellError(f"mkdir: cannot create directory '{path}': File exists")
        node = child

    tree.save()
    return node


def change_mode(tree: DirectoryTree, path: str, mode: str) -> Directory:
    """Set the permission of the node at ``path``; files change on disk too."""
    node = tree.find(path)
    if node is None:
        raise ShellError(
            f"chmod: cannot access '{path}': No such file or directory"
        )
    node.permission = parse_mode(mode)
    if node.type == "-":
        try:
            os.chmod(tree.file_path(node.name), int(mode[:3], 8))
        except OSError as exc:
            raise ShellError(f"chmod failed: {exc}") from exc
    return node