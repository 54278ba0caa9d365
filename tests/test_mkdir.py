import pytest

from minios.accounts import User
from minios.directory import Directory, DirectoryTree, ShellError, child_route
from minios.mkdir import DIRECTORY_SIZE, change_mode, make_directory, new_node
from minios.permission import InvalidModeError, format_mode, parse_mode

OWNER = User("alice", 1000, 1000)


@pytest.fixture
def tree(tmp_path):
    return DirectoryTree(root=Directory("root", route="/"), base=tmp_path)


def add_file(tree, parent, name, data=b"", physical=True):
    node = new_node(name, "644", OWNER)
    node.type = "-"
    node.size = len(data)
    parent.add_child(node)
    node.route = child_route(parent, name)
    if physical:
        path = tree.file_path(name)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(data)
    return node


def test_new_node_defaults():
    node = new_node("docs", "750", OWNER)
    assert node.type == "d"
    assert node.size == DIRECTORY_SIZE == 4096
    assert node.permission == parse_mode("750")
    assert format_mode(node.permission) == "750"
    assert (node.uid, node.gid) == (OWNER.uid, OWNER.gid)
    assert node.visible is True
    assert node.parent is None


def test_new_node_clips_long_names():
    assert len(new_node("x" * 30, "755", OWNER).name) == 19


def test_new_node_invalid_mode():
    with pytest.raises(InvalidModeError):
        new_node("bad", "789", OWNER)


def test_make_absolute_directory(tree):
    node = make_directory(tree, "/a", owner=OWNER)
    assert node.route == "/a"
    assert tree.root.children() == [node]
    assert node.uid == OWNER.uid


def test_make_nested_without_parents_fails(tree):
    with pytest.raises(ShellError, match="No such file or directory"):
        make_directory(tree, "/a/b")
    assert tree.root.children() == []


def test_make_with_parents(tree):
    node = make_directory(tree, "/a/b/c", create_parents=True)
    assert node.route == "/a/b/c"
    assert tree.find("/a/b") is node.parent
    assert tree.find("/a").parent is tree.root


def test_make_existing_fails(tree):
    make_directory(tree, "/a")
    with pytest.raises(ShellError, match="File exists"):
        make_directory(tree, "/a")
    with pytest.raises(ShellError, match="File exists"):
        make_directory(tree, "/A")
    assert len(tree.root.children()) == 1


def test_make_relative_to_current(tree):
    a = make_directory(tree, "/a")
    tree.current = a
    node = make_directory(tree, "b")
    assert node.parent is a
    assert node.route == "/a/b"


def test_make_invalid_mode_creates_nothing(tree):
    with pytest.raises(InvalidModeError):
        make_directory(tree, "/a", mode="9x9")
    assert tree.find("/a") is None


def test_make_saves_tree(tree, tmp_path):
    make_directory(tree, "/a/b", mode="700", create_parents=True)
    loaded = DirectoryTree.load(tmp_path)
    node = loaded.find("/a/b")
    assert node.route == "/a/b"
    assert format_mode(node.permission) == "700"


def test_change_mode_directory(tree):
    make_directory(tree, "/a")
    node = change_mode(tree, "/a", "644")
    assert format_mode(node.permission) == "644"
    assert tree.find("/a") is node


def test_change_mode_missing(tree):
    with pytest.raises(ShellError, match="No such file or directory"):
        change_mode(tree, "/nothing", "755")


def test_change_mode_invalid(tree):
    make_directory(tree, "/a")
    with pytest.raises(InvalidModeError):
        change_mode(tree, "/a", "888")
    assert format_mode(tree.find("/a").permission) == "755"


def test_change_mode_file_without_contents(tree):
    node = add_file(tree, tree.root, "ghost.txt", physical=False)
    with pytest.raises(ShellError, match="chmod failed"):
        change_mode(tree, "/ghost.txt", "600")
    assert format_mode(node.permission) == "600"


def test_change_mode_file_with_contents(tree):
    node = add_file(tree, tree.root, "f.txt", b"data")
    assert change_mode(tree, "/f.txt", "640") is node
    assert format_mode(node.permission) == "640"