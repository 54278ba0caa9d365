"""Users and groups: the account files, lookups, adding users and login."""

from __future__ import annotations

import re
import sys
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import TextIO

from .directory import ShellError

USER_FILE = "User.txt"
GROUP_FILE = "Group.txt"

_MAX_NAME = 20
_LEADING_INT = re.compile(r"\s*([+-]?\d+)")
_USER_FIELDS = ("name", "UID", "GID", "year", "month", "day",
                "hour", "minute", "sec", "wday")


def _atoi(text: str) -> int:
    match = _LEADING_INT.match(text)
    return int(match.group(1)) if match else 0


def _clip(text: str) -> str:
    return text[: _MAX_NAME - 1]


def _tokens(line: str) -> list[str]:
    return [token for token in line.split(" ") if token]


@dataclass
class User:
    """An account with its creation time and home directory."""

    name: str
    uid: int
    gid: int
    year: int = 0
    month: int = 0
    day: int = 0
    hour: int = 0
    minute: int = 0
    sec: int = 0
    wday: int = 0
    dir: str = ""

    def _record(self) -> str:
        return (
            f"{self.name} {self.uid} {self.gid} {self.year} {self.month} "
            f"{self.day} {self.hour} {self.minute} {self.sec} {self.wday} "
            f"{self.dir} / \n"
        )


@dataclass
class Group:
    """A group name with its id."""

    name: str
    gid: int


def parse_user_line(line: str) -> User:
    """Parse one line of the user file."""
    tokens = _tokens(line.rstrip("\n"))
    if len(tokens) < len(_USER_FIELDS):
        missing = _USER_FIELDS[len(tokens)]
        raise ShellError(f"malformed user record: missing {missing}")
    numbers = [_atoi(token) for token in tokens[1:10]]
    home = _clip(tokens[10]) if len(tokens) > 10 else ""
    return User(_clip(tokens[0]), *numbers, dir=home)


def parse_group_line(line: str) -> Group:
    """Parse one line of the group file."""
    tokens = _tokens(line.rstrip("\n"))
    if len(tokens) < 2:
        raise ShellError("malformed group record")
    return Group(_clip(tokens[0]), _atoi(tokens[1]))


def _read_lines(path: Path) -> list[str]:
    try:
        return path.read_text(encoding="utf-8").splitlines()
    except OSError as exc:
        raise ShellError(f"Unable to open {path}: {exc}") from exc


def load_users(path: str | Path) -> list[User]:
    """Read the user file.

    The first ``root`` record starts the list afresh; later ones are ignored.
    """
    users: list[User] = []
    root_seen = False
    for line in _read_lines(Path(path)):
        try:
            user = parse_user_line(line)
        except ShellError:
            continue
        if user.name == "root":
            if root_seen:
                print("Duplicate root user ignored", file=sys.stderr)
                continue
            users = [user]
            root_seen = True
        else:
            users.append(user)
    return users


def load_groups(path: str | Path) -> list[Group]:
    """Read the group file, skipping malformed lines."""
    groups = []
    for line in _read_lines(Path(path)):
        try:
            groups.append(parse_group_line(line))
        except ShellError:
            print("Failed to parse group line", file=sys.stderr)
    return groups


@dataclass
class Accounts:
    """All known users and groups."""

    users: list[User] = field(default_factory=list)
    groups: list[Group] = field(default_factory=list)
    base: Path = field(default_factory=lambda: Path("."))

    @classmethod
    def load(cls, base: str | Path) -> Accounts:
        """Load users and groups from the files under ``base``.

        A missing file is reported on stderr and treated as empty.
        """
        base = Path(base)
        loaded = []
        for loader, name in ((load_users, USER_FILE), (load_groups, GROUP_FILE)):
            try:
                loaded.append(loader(base / name))
            except ShellError as exc:
                print(f"Error: {exc}", file=sys.stderr)
                loaded.append([])
        return cls(users=loaded[0], groups=loaded[1], base=base)

    def user_name(self, uid: int) -> str | None:
        """Return the name of the first user with ``uid``."""
        return next((u.name for u in self.users if u.uid == uid), None)

    def group_name(self, gid: int) -> str | None:
        """Return the name of the first group with ``gid``."""
        return next((g.name for g in self.groups if g.gid == gid), None)

    def add_user(self, name: str, uid: int, gid: int,
                 path: str | Path | None = None) -> User:
        """Create a user stamped with the current time and append it to the file."""
        now = datetime.now()
        user = User(
            name=_clip(name), uid=uid, gid=gid, year=now.year, month=now.month,
            day=now.day, hour=now.hour, minute=now.minute, sec=now.second,
            wday=(now.weekday() + 1) % 7,
        )
        self.users.append(user)
        target = Path(path) if path is not None else self.base / USER_FILE
        try:
            with target.open("a", encoding="utf-8") as handle:
                handle.write(user._record())
        except OSError as exc:
            raise ShellError(f"Unable to open {target} for writing: {exc}") from exc
        return user

    def login(self, stdin: TextIO | None = None,
              stdout: TextIO | None = None) -> User:
        """Ask for a user name until a known one is given."""
        stdin = stdin if stdin is not None else sys.stdin
        stdout = stdout if stdout is not None else sys.stdout
        stdout.write("Users: " + "".join(f"{u.name} " for u in self.users) + "\n")
        while True:
            stdout.write("Login: ")
            stdout.flush()
            line = stdin.readline()
            if not line:
                raise ShellError("Login failed")
            name = line.rstrip("\n")
            user = next((u for u in self.users if u.name == name), None)
            if user is not None:
                return user
            stdout.write(f"'{name}' User does not exists\n")