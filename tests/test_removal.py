import pytest

from minios.accounts import User
from minios.directory import Directory, DirectoryTree, ShellError, child_route
from minios.mkdir import make_directory, new_node
from minios.removal import (
    remove_directories,
    remove_directory,
    remove_node,
    remove_recursive,
)

OWNER = User("alice", 1000, 1000)


@pytest.fixture
def tree(tmp_path):
    return DirectoryTree(root=Directory("root", route="/"), base=tmp_path)


def add_file(tree, parent, name, data=b""):
    node = new_node(name, "644", OWNER)
    node.type = "-"
    node.size = len(data)
    parent.add_child(node)
    node.route = child_route(parent, name)
    path = tree.file_path(name)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(data)
    return node


def test_remove_empty_directory(tree):
    make_directory(tree, "/a")
    out = remove_directory(tree, "/a")
    assert "rmdir: successfully removed directory 'a'" in out
    assert tree.root.children() == []


def test_remove_not_empty_without_recursive(tree):
    make_directory(tree, "/a/b", create_parents=True)
    with pytest.raises(ShellError, match="Directory not empty"):
        remove_directory(tree, "/a")
    assert tree.find("/a/b") is not None


def test_remove_recursive_deletes_files(tree):
    a = make_directory(tree, "/a/b", create_parents=True).parent
    add_file(tree, a, "f.txt", b"hello")
    out = remove_directory(tree, "/a", recursive=True)
    assert "Deleted physical" in out
    assert not tree.file_path("f.txt").exists()
    assert tree.root.children() == []
    assert tree.find("/a") is None


def test_remove_recursive_reports_each_directory(tree):
    make_directory(tree, "/a/b/c", create_parents=True)
    out = remove_recursive(tree, tree.find("/a"))
    assert out.count("successfully removed directory") == 3


def test_remove_root_refused(tree):
    with pytest.raises(ShellError, match="Cannot remove root directory"):
        remove_directory(tree, "/")


def test_remove_file_refused(tree):
    add_file(tree, tree.root, "f.txt")
    with pytest.raises(ShellError, match="Not a directory"):
        remove_directory(tree, "/f.txt")


def test_remove_missing(tree):
    with pytest.raises(ShellError, match="No such directory"):
        remove_directory(tree, "/nothing")


def test_remove_node_without_parent_keeps_tree(tree):
    make_directory(tree, "/a")
    assert remove_node(tree, tree.root) == ""
    assert [c.name for c in tree.root.children()] == ["a"]


def test_remove_directories_too_many(tree):
    with pytest.raises(ShellError, match="Too many directories"):
        remove_directories(tree, [f"d{i}" for i in range(51)])


def test_remove_directories_mixed(tree, tmp_path):
    make_directory(tree, "/a")
    make_directory(tree, "/b")
    out = remove_directories(tree, ["/a", "", "/missing"])
    assert "successfully removed directory 'a'" in out
    assert "'/missing': No such directory" in out
    loaded = DirectoryTree.load(tmp_path)
    assert loaded.find("/a") is None
    assert loaded.find("/b").route == "/b"