"""The interactive shell: command dispatch and the program entry point."""

from __future__ import annotations

import argparse
import os
import re
import sys
from contextlib import suppress
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, TextIO

from .accounts import Accounts, User
from .archive import unzip_files, zip_files
from .cat import append_file, cat_files, create_file
from .directory import FILES_DIR, Directory, DirectoryTree, ShellError, child_route
from .display import clear_screen, list_directory, prompt
from .mkdir import change_mode, make_directory, new_node
from .navigation import change_directory, pwd
from .removal import remove_directories
from .transfer import copy_directory, copy_file, move_directory, move_file

_MAX_NAME = 20
_MAX_FILES = 512
_LEADING_INT = re.compile(r"\s*([+-]?\d+)")
_ZIP_USAGE = "Usage: zip [archive].zip [file1] [file2] ...\n"
_ZIP_EXAMPLE = "Example: zip archive.zip file1.txt file2.txt\n"


def _atoi(text: str) -> int:
    match = _LEADING_INT.match(text)
    return int(match.group(1)) if match else 0


@dataclass(eq=False)
class Shell:
    """A logged-in session working on one directory tree."""

    tree: DirectoryTree
    accounts: Accounts
    user: User
    stdin: TextIO | None = None
    stdout: TextIO | None = None

    def _input(self) -> TextIO:
        return self.stdin if self.stdin is not None else sys.stdin

    def _output(self) -> TextIO:
        return self.stdout if self.stdout is not None else sys.stdout

    def _handlers(self) -> dict[str, Callable[[list[str]], str]]:
        return {
            "ls": self._ls,
            "cd": self._cd,
            "mkdir": self._mkdir,
            "cat": self._cat,
            "chmod": self._chmod,
            "cp": self._cp,
            "pwd": self._pwd,
            "clear": self._clear,
            "mv": self._mv,
            "rmdir": self._rmdir,
            "adduser": self._adduser,
            "zip": self._zip,
            "unzip": self._unzip,
        }

    def execute(self, line: str) -> str:
        """Run one command line and return what it prints."""
        line = line.rstrip("\n")
        if not line or line.startswith(" "):
            return ""
        command, *args = [token for token in line.split(" ") if token]
        handler = self._handlers().get(command)
        if handler is None:
            return "Invalid command.\n"
        try:
            return handler(args)
        except (ShellError, ValueError) as exc:
            return f"{exc}\n"

    def run(self, stdin: TextIO | None = None, stdout: TextIO | None = None) -> None:
        """Read and execute commands until the input ends."""
        if stdin is not None:
            self.stdin = stdin
        if stdout is not None:
            self.stdout = stdout
        source, sink = self._input(), self._output()
        while True:
            sink.write(prompt(self.tree, self.user))
            sink.flush()
            line = source.readline()
            if not line:
                sink.write("Input error or EOF\n")
                break
            sink.write(self.execute(line))
            sink.flush()

    def _lines(self):
        return iter(self._input().readline, "")

    def _ls(self, args: list[str]) -> str:
        show_all = show_details = False
        if args and args[0].startswith("-"):
            option, args = args[0], args[1:]
            if option == "-a":
                show_all = True
            elif option == "-l":
                show_details = True
            elif option in ("-al", "-la"):
                show_all = show_details = True
            else:
                bad = next((part for part in option.split("-") if part), "(null)")
                return f"ls: invalid option -- '{bad}'\n"
        if not args:
            return list_directory(self.tree.current, show_all, show_details,
                                  self.accounts)
        parts = []
        for path in args:
            node = self.tree.find(path)
            if node is None:
                parts.append(f"ls: No such file or directory: {path}\n")
            else:
                listing = list_directory(node, show_all, show_details, self.accounts)
                parts.append(f"{node.name}:\n{listing}\n")
        return "".join(parts)

    def _cd(self, args: list[str]) -> str:
        return change_directory(self.tree, args[0] if args else None)

    def _mkdir(self, args: list[str]) -> str:
        mode = "755"
        create_parents = False
        while args and args[0].startswith("-"):
            option, args = args[0], args[1:]
            if option == "-m":
                if not args:
                    raise ShellError("mkdir: option requires an argument -- 'm'")
                mode, args = args[0][:3], args[1:]
            elif option == "-p":
                create_parents = True
        parts = []
        for path in args:
            try:
                make_directory(self.tree, path, mode, create_parents, self.user)
            except (ShellError, ValueError) as exc:
                parts.append(f"{exc}\n")
        return "".join(parts)

    def _cat(self, args: list[str]) -> str:
        if not args:
            return "cat: missing operand\n"
        number_lines = False
        if args[0] == "-n":
            number_lines, args = True, args[1:]
        files: list[str] = []
        rest = iter(args)
        redirect = None
        for token in rest:
            if token in (">", ">>"):
                redirect = token
                break
            files.append(token)
        if redirect is not None:
            target = next(rest, None)
            if target is None:
                return f"cat: missing file operand after '{redirect}'\n"
            writer = create_file if redirect == ">" else append_file
            writer(self.tree, self.user, target, self._lines())
            return ""
        return cat_files(self.tree, self.user, files, number_lines)

    def _chmod(self, args: list[str]) -> str:
        if not args:
            return "chmod: missing operand\n"
        mode, paths = args[0], args[1:]
        if not paths:
            return f"chmod: missing operand after '{mode[:4]}'\n"
        parts = []
        for path in paths:
            try:
                change_mode(self.tree, path, mode)
            except (ShellError, ValueError) as exc:
                parts.append(f"{exc}\n")
        self.tree.save()
        return "".join(parts)

    def _copy_file_into(self, source: Directory, parent: Directory, name: str) -> str:
        node = new_node(name, "644", self.user)
        node.type = "-"
        node.size = source.size
        parent.add_child(node)
        node.route = child_route(parent, name)
        try:
            return copy_file(self.tree, source, node)
        except ShellError as exc:
            return f"{exc}\n"

    def _cp(self, args: list[str]) -> str:
        recursive = False
        if args and args[0] == "-r":
            recursive, args = True, args[1:]
        if len(args) < 2:
            return "cp: missing file operand\n"
        source_path, destination_path = args[0], args[1]
        source = self.tree.find(source_path)
        destination = self.tree.find(destination_path)
        if source is None:
            return f"cp: cannot stat '{source_path}': No such file or directory\n"

        if destination is not None and destination.type == "d":
            parent, name = destination, source.name
        else:
            head, slash, tail = destination_path.rpartition("/")
            if slash:
                parent, name = self.tree.find(head), tail
            else:
                parent, name = self.tree.current, destination_path
            if parent is None or parent.type != "d":
                return f"cp: cannot create '{destination_path}': No such directory\n"

        output = ""
        if source.type == "d":
            if not recursive:
                return "cp: -r option required to copy a directory\n"
            output = copy_directory(self.tree, source, parent, name, self.user)
        elif source.type == "-":
            output = self._copy_file_into(source, parent, name)
        self.tree.save()
        return output

    def _pwd(self, args: list[str]) -> str:
        option = args[0] if args and args[0] in ("-L", "-P", "--help") else None
        return pwd(self.tree, option)

    def _clear(self, args: list[str]) -> str:
        return clear_screen()

    def _mv(self, args: list[str]) -> str:
        recursive = False
        if args and args[0] == "-r":
            recursive, args = True, args[1:]
        if len(args) < 2:
            return "mv: missing file operand\n"
        source_path, destination_path = args[0], args[1]
        source = self.tree.find(source_path)
        destination = self.tree.find(destination_path)
        if source is None:
            return f"mv: cannot stat '{source_path}': No such file or directory\n"

        if destination is not None and destination.type == "d":
            if source.type == "d" and recursive:
                move_directory(source, destination, source.name, True, self.user)
            elif source.type == "-":
                move_file(source, destination, source.name, self.user)
            else:
                return f"mv: omitting directory '{source.name}'\n"
            self.tree.save()
            return ""

        new_name = destination_path
        if source.type == "-":
            with suppress(OSError):
                os.rename(self.tree.file_path(source.name),
                          self.tree.file_path(new_name))
        if source.type in ("-", "d"):
            source.name = new_name
            source.update_routes()
        self.tree.save()
        return ""

    def _rmdir(self, args: list[str]) -> str:
        recursive = False
        if args and args[0] == "-r":
            recursive, args = True, args[1:]
        if not args:
            return "rmdir: missing operand\n"
        return remove_directories(self.tree, args, recursive)

    def _adduser(self, args: list[str]) -> str:
        uid = gid = 1000
        username = ""
        tokens = iter(args)
        for token in tokens:
            if token == "-u":
                value = next(tokens, None)
                if value is not None:
                    uid = _atoi(value)
            elif token == "-g":
                value = next(tokens, None)
                if value is not None:
                    gid = _atoi(value)
            else:
                username = token[: _MAX_NAME - 1]
        if not username:
            return "adduser: have to enter user name.\n"
        user = self.accounts.add_user(username, uid, gid)
        return (f"adduser: user '{user.name}' added successfully "
                f"(UID={user.uid}, GID={user.gid})\n")

    def _zip(self, args: list[str]) -> str:
        if not args:
            return _ZIP_USAGE
        zip_name, candidates = args[0], args[1:]
        if not candidates:
            return _ZIP_USAGE + _ZIP_EXAMPLE
        parts = []
        files = []
        for name in candidates[:_MAX_FILES]:
            node = self.tree.find(name)
            if node is None or node.type != "-":
                parts.append(f"zip: '{name}': file not found.\n")
                continue
            files.append(name)
        if not files:
            parts.append("zip: no files to compress.\n" + _ZIP_USAGE)
            return "".join(parts)

        archive_route = f"{self.tree.current.route}/{zip_name}"
        parts.append(zip_files(self.tree, zip_name, files))
        try:
            node = make_directory(self.tree, zip_name, "644", False, self.user)
        except (ShellError, ValueError) as exc:
            parts.append(f"{exc}\n")
            return "".join(parts)
        node.type = "-"
        stored = self.tree.base / FILES_DIR / archive_route.lstrip("/")
        with suppress(OSError):
            node.size = stored.stat().st_size
        self.tree.save()
        return "".join(parts)

    def _unzip(self, args: list[str]) -> str:
        if not args:
            return "unzip: enter the name of the archive to extract.\n"
        zip_name = args[0]
        node = self.tree.find(zip_name)
        if node is None or node.type != "-":
            return f"unzip: '{zip_name}': file not found.\n"
        return unzip_files(self.tree, self.user, zip_name)


def main(argv: list[str] | None = None) -> int:
    """Load the system files, log a user in and run the shell."""
    parser = argparse.ArgumentParser(prog="minios", description="A small shell.")
    parser.add_argument("--base", default="information",
                        help="directory holding the system files")
    options = parser.parse_args(argv)
    base = Path(options.base)

    accounts = Accounts.load(base)
    try:
        tree = DirectoryTree.load(base)
    except ShellError:
        print("failed to load directory tree", file=sys.stderr)
        return 1
    try:
        user = accounts.login()
    except ShellError:
        print("Login failed", file=sys.stderr)
        return 1

    home = tree.find(user.dir)
    if home is None:
        print("Invalid user directory path", file=sys.stderr)
        return 1
    tree.home = tree.current = home
    Shell(tree, accounts, user).run()
    return 0