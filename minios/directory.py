"""The directory tree: nodes, the record file and path lookup."""

from __future__ import annotations

import re
from collections.abc import Iterator
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path

from .paths import split_path
from .permission import format_mode, parse_mode

DIRECTORY_FILE = "Directory.txt"
FILES_DIR = Path("resources") / "file"

_MONTHS = ("Jan", "Feb", "Mar", "Apr", "May", "Jun",
           "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")
_FIELD_NAMES = ("name", "type", "visible", "permission", "UID", "GID",
                "size", "month", "day", "hour", "minute")
_LEADING_INT = re.compile(r"\s*([+-]?\d+)")


class ShellError(Exception):
    """Raised when a shell operation cannot be carried out."""


def _atoi(text: str) -> int:
    match = _LEADING_INT.match(text)
    return int(match.group(1)) if match else 0


def _lenient_permission(text: str) -> tuple[bool, ...]:
    # Record files are trusted: digits are decoded bitwise without validation.
    digits = (text + "\0\0\0")[:3]
    return tuple(
        bool(((ord(char) - ord("0")) >> shift) & 1)
        for char in digits
        for shift in (2, 1, 0)
    )


def month_abbr(month: int) -> str:
    """Return the three-letter name of a month, or ``""`` if out of range."""
    return _MONTHS[month - 1] if 1 <= month <= 12 else ""


def child_route(parent: "Directory", name: str) -> str:
    """Return the route of a child called ``name`` under ``parent``."""
    if parent.route == "/":
        return "/" + name
    return f"{parent.route}/{name}"


@dataclass(eq=False)
class Directory:
    """A file (type ``-``) or directory (type ``d``) in the tree."""

    name: str
    type: str = "d"
    visible: bool = True
    permission: tuple[bool, ...] = field(default_factory=lambda: parse_mode("755"))
    uid: int = 0
    gid: int = 0
    size: int = 0
    month: int = 0
    day: int = 0
    hour: int = 0
    minute: int = 0
    route: str = ""
    parent: Directory | None = field(default=None, repr=False)
    _children: list[Directory] = field(default_factory=list, init=False, repr=False)

    @property
    def is_dir(self) -> bool:
        return self.type == "d"

    def children(self) -> list[Directory]:
        """Return the children in order."""
        return list(self._children)

    def find_child(self, name: str) -> Directory | None:
        """Find a child by name, ignoring case."""
        wanted = name.casefold()
        return next((c for c in self._children if c.name.casefold() == wanted), None)

    def add_child(self, child: Directory) -> None:
        """Append ``child`` as the last child of this node."""
        child.parent = self
        self._children.append(child)

    def remove_child(self, child: Directory) -> None:
        """Detach ``child`` from this node."""
        for index, existing in enumerate(self._children):
            if existing is child:
                del self._children[index]
                child.parent = None
                return
        raise ShellError(f"'{child.name}' is not a child of '{self.name}'")

    def link_count(self) -> int:
        """Number of links as shown by ``ls -l``."""
        links = len(self._children)
        if self.type == "d":
            links += 2
        elif self.type == "-":
            links += 1
        return links

    def update_routes(self) -> None:
        """Recompute the route of this node and of everything below it."""
        if self.parent is not None and self.parent is not self:
            self.route = child_route(self.parent, self.name)
        for child in self._children:
            child.update_routes()

    def touch(self) -> None:
        """Set the stored time to now."""
        now = datetime.now()
        self.month, self.day = now.month, now.day
        self.hour, self.minute = now.hour, now.minute

    def _parent_route(self) -> str:
        if self.parent is not None:
            return self.parent.route
        if self.route == "/" or "/" not in self.route:
            return "/"
        return self.route.rsplit("/", 1)[0] or "/"

    def to_record(self) -> str:
        """Render the node as one line of the directory file."""
        fields = [
            self.name, self.type, str(int(self.visible)), format_mode(self.permission),
            str(self.uid), str(self.gid), str(self.size), str(self.month),
            str(self.day), str(self.hour), str(self.minute),
        ]
        if self.name != "/":
            fields.append(self._parent_route())
        return " ".join(fields)


def parse_record(line: str) -> tuple[Directory, str]:
    """Parse one line of the directory file.

    Returns the node, with its route filled in, and the route of its parent.
    The root record (named ``root`` with parent route ``/``) gets route ``/``.
    """
    tokens = [token for token in line.split(" ") if token]
    if len(tokens) < len(_FIELD_NAMES):
        missing = _FIELD_NAMES[len(tokens)]
        raise ShellError(f"malformed directory record: missing {missing}")
    if len(tokens) == len(_FIELD_NAMES):
        raise ShellError("malformed directory record: no route specified")
    name, kind, visible, permission = tokens[:4]
    uid, gid, size, month, day, hour, minute = (_atoi(t) for t in tokens[4:11])
    parent_route = tokens[11]
    node = Directory(
        name=name, type=kind[0], visible=bool(_atoi(visible)),
        permission=_lenient_permission(permission), uid=uid, gid=gid, size=size,
        month=month, day=day, hour=hour, minute=minute,
    )
    if name == "root" and parent_route == "/":
        node.route = "/"
    elif parent_route == "/":
        node.route = "/" + name
    else:
        node.route = f"{parent_route}/{name}"
    return node, parent_route


def _emit(siblings: list[Directory]) -> Iterator[Directory]:
    yield from siblings
    for node in reversed(siblings):
        yield from _emit(node.children())


@dataclass(eq=False)
class DirectoryTree:
    """The whole tree with its root, home and current directories."""

    root: Directory
    base: Path
    home: Directory | None = None
    current: Directory | None = None

    def __post_init__(self) -> None:
        self.base = Path(self.base)
        if self.home is None:
            self.home = self.root
        if self.current is None:
            self.current = self.root

    @classmethod
    def load(cls, base: str | Path) -> DirectoryTree:
        """Read the tree from the directory file under ``base``."""
        base = Path(base)
        path = base / DIRECTORY_FILE
        try:
            text = path.read_text(encoding="utf-8")
        except OSError as exc:
            raise ShellError(f"Failed to open {path} for reading: {exc}") from exc

        tree: DirectoryTree | None = None
        for line in text.splitlines():
            if not line:
                continue
            try:
                node, parent_route = parse_record(line)
            except ShellError:
                continue
            if node.route == "/":
                if tree is None:
                    tree = cls(root=node, base=base)
                else:
                    tree.root = tree.home = tree.current = node
                continue
            if tree is None:
                continue
            try:
                tree.attach(node, parent_route)
            except ShellError:
                continue

        if tree is None:
            raise ShellError("Directory tree root not initialized")
        return tree

    def attach(self, node: Directory, parent_route: str) -> None:
        """Add ``node`` under the directory at ``parent_route`` (exact names)."""
        parent = self.root
        for segment in split_path(parent_route):
            found = next((c for c in parent.children() if c.name == segment), None)
            if found is None:
                raise ShellError(f"directory not found: {segment}")
            parent = found
        if any(child.name == node.name for child in parent.children()):
            raise ShellError(f"directory already exists: {node.name}")
        parent.add_child(node)

    def find(self, path: str | None) -> Directory | None:
        """Resolve ``path`` against the root or the current directory."""
        if not path:
            return self.current
        node = self.root if path.startswith("/") else self.current
        for segment in split_path(path):
            if segment == "..":
                if node.parent is not None:
                    node = node.parent
            elif segment == ".":
                continue
            else:
                child = node.find_child(segment)
                if child is None:
                    return None
                node = child
        return node

    def walk(self) -> Iterator[Directory]:
        """Yield every node in the order the directory file stores them."""
        yield self.root
        yield from _emit(self.root.children())

    def save(self) -> None:
        """Write the whole tree to the directory file."""
        path = self.base / DIRECTORY_FILE
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            with path.open("w", encoding="utf-8") as handle:
                for node in self.walk():
                    handle.write(node.to_record() + "\n")
        except OSError as exc:
            raise ShellError(f"Failed to open {path} for writing: {exc}") from exc

    def file_path(self, name: str) -> Path:
        """Return where the contents of the file ``name`` are stored."""
        return self.base / FILES_DIR / name