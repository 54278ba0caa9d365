"""Rendering for ls, the prompt and clear."""

from __future__ import annotations

from .accounts import Accounts, User
from .directory import Directory, DirectoryTree, month_abbr
from .permission import permission_string

DEFAULT = "\x1b[0m"
BOLD = "\x1b[1m"
GREEN = "\x1b[32m"
BLUE = "\x1b[34m"
CLEAR = "\033[2J\033[H"


def _name_or_null(name: str | None) -> str:
    return "(null)" if name is None else name


def format_detail(node: Directory, name: str, accounts: Accounts | None) -> str:
    """Render one ``ls -l`` entry for ``node`` shown as ``name``."""
    user = accounts.user_name(node.uid) if accounts else None
    group = accounts.group_name(node.gid) if accounts else None
    month = month_abbr(node.month)
    text = (
        f"{permission_string(node.type, node.permission)} "
        f"{node.link_count():2d} {_name_or_null(user):<8} {_name_or_null(group):<8} "
        f"{node.size:5d} "
        f"{month + ' ' if month else ''}"
        f"{node.day:02d} {node.hour:02d}:{node.minute:02d} "
    )
    if node.type == "d":
        text += f"{BLUE}{name}\n{DEFAULT}"
    elif node.type == "-":
        text += f"{name}\n"
    return text


def list_directory(node: Directory, show_all: bool, show_details: bool,
                   accounts: Accounts | None = None) -> str:
    """Render the listing of ``node`` as ``ls`` with ``-a``/``-l`` would."""
    children = node.children()
    if not children and not show_all:
        return ""

    parts: list[str] = []
    if show_all and show_details:
        parent = node.parent if node.parent is not None else node
        parts.append(format_detail(node, ".", accounts))
        parts.append(format_detail(parent, "..", accounts))
    elif show_all:
        parts.append(f"{BLUE}{'.':<10}{'..':<10}{DEFAULT}")

    for child in children:
        if not (child.visible or show_all):
            continue
        if show_details:
            parts.append(format_detail(child, child.name, accounts))
        elif child.type == "d":
            parts.append(f"{BLUE}{child.name:<10}{DEFAULT}")
        elif child.type == "-":
            parts.append(f"{child.name:<10}")

    if not show_details:
        parts.append("\n")
    return "".join(parts)


def prompt(tree: DirectoryTree, user: User) -> str:
    """Return the shell prompt for ``user`` in the current directory."""
    return (
        f"{BOLD}{GREEN}{user.name}@1-os-linux{DEFAULT}:"
        f"{BOLD}{BLUE}{tree.current.route}{DEFAULT}#"
    )


def clear_screen() -> str:
    """Return the escape sequence that clears the terminal."""
    return CLEAR