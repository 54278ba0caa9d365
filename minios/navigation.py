"""Moving around the tree: cd and pwd."""

from __future__ import annotations

from weakref import WeakKeyDictionary

from .directory import Directory, DirectoryTree, ShellError

_previous: WeakKeyDictionary[DirectoryTree, Directory] = WeakKeyDictionary()

_HELP = (
    "pwd: pwd [-LP]\n"
    "  Print the name of the current working directory.\n\n"
    "  Options:\n"
    "    -L\t print the value of $PWD if it names the current working\n"
    "  \t directory\n"
    "    -P\t print the physical directory, without any symbolic links\n\n"
    "  By default, 'pwd' behaves as if '-L' were specified.\n\n"
    "  Exit status:\n"
    "  Returns 0 unless an invalid option is given or the current directory\n"
    "  cannot be read.\n"
)
_PATH_OPTIONS = (None, "-", "--", "-p", "-LP", "-PL")


def change_directory(tree: DirectoryTree, path: str | None = None) -> str:
    """Change the current directory and return what ``cd`` prints.

    ``None`` or ``~`` goes home, ``-`` goes back to the previous directory.
    """
    if path is None or path == "~":
        if tree.home is None:
            raise ShellError("cd: home directory is not set")
        _previous[tree] = tree.current
        tree.current = tree.home
        return ""
    if path == "-":
        previous = _previous.get(tree)
        if previous is None:
            raise ShellError("cd: there is no previous directory")
        _previous[tree] = tree.current
        tree.current = previous
        return previous.route + "\n"
    target = tree.find(path)
    if target is None:
        raise ShellError(f"cd: cannot find path '{path}'")
    if target.type != "d":
        raise ShellError(f"cd: '{path}' is not a directory")
    _previous[tree] = tree.current
    tree.current = target
    return ""


def _path_of(tree: DirectoryTree, node: Directory) -> str:
    names = []
    while node is not None and node is not tree.root:
        names.append(node.name)
        node = node.parent
    if node is tree.root:
        names.append(tree.root.name)
    return "".join(f"/{name}" for name in reversed(names)) + "\n"


def pwd(tree: DirectoryTree | None, option: str | None = None) -> str:
    """Return what ``pwd`` prints for ``option``."""
    if tree is None:
        raise ShellError("The current directory information could not be found.")
    if option in _PATH_OPTIONS:
        if tree.current is tree.root:
            return "/\n"
        return _path_of(tree, tree.current)
    if option == "--help":
        return _HELP
    raise ShellError(
        f"-bash: pwd: {option[:2]}: invalid option\npwd: usage: pwd [-LP]"
    )