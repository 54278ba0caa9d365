import pytest

from minios.accounts import User
from minios.directory import Directory, DirectoryTree, ShellError, child_route
from minios.mkdir import change_mode, make_directory, new_node
from minios.permission import format_mode
from minios.transfer import copy_directory, copy_file, move_directory, move_file

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


def test_copy_file_contents(tree):
    source = add_file(tree, tree.root, "a.txt", b"payload\n")
    target = add_file(tree, tree.root, "b.txt")
    message = copy_file(tree, source, target)
    assert message.startswith("copying from '")
    assert str(tree.file_path("b.txt")) in message
    assert tree.file_path("b.txt").read_bytes() == b"payload\n"


def test_copy_file_missing_source(tree):
    source = new_node("ghost.txt", "644", OWNER)
    target = new_node("out.txt", "644", OWNER)
    with pytest.raises(ShellError, match="source open failed"):
        copy_file(tree, source, target)


def test_copy_directory_structure(tree):
    src = make_directory(tree, "/src")
    make_directory(tree, "/src/sub")
    add_file(tree, src, "f.txt", b"abc")
    dst = make_directory(tree, "/dst")
    out = copy_directory(tree, src, dst, "copy", OWNER)
    assert "copying from" in out
    assert tree.find("/dst/copy/sub").route == "/dst/copy/sub"
    copied = tree.find("/dst/copy/f.txt")
    assert copied.type == "-"
    assert copied.size == len(b"abc")
    assert copied.uid == OWNER.uid
    assert tree.file_path("f.txt").read_bytes() == b"abc"
    assert [c.name for c in src.children()] == ["sub", "f.txt"]


def test_copy_directory_into_parent(tree):
    src = make_directory(tree, "/src/inner", create_parents=True).parent
    dst = make_directory(tree, "/dst")
    copy_directory(tree, src, dst, None, OWNER)
    assert [c.name for c in dst.children()] == ["inner"]
    assert tree.find("/dst/inner").parent is dst


def test_move_file(tree):
    a = make_directory(tree, "/a")
    b = make_directory(tree, "/b")
    source = add_file(tree, a, "f.txt", b"data")
    change_mode(tree, "/a/f.txt", "600")
    moved = move_file(source, b, "f.txt")
    assert tree.find("/a/f.txt") is None
    assert tree.find("/b/f.txt") is moved
    assert moved.route == "/b/f.txt"
    assert moved.permission == source.permission
    assert format_mode(moved.permission) == "600"
    assert moved.size == source.size
    assert (moved.uid, moved.gid) == (source.uid, source.gid)
    assert a.children() == []


def test_move_file_without_parent(tree):
    orphan = new_node("lost.txt", "644", OWNER)
    orphan.type = "-"
    with pytest.raises(ShellError, match="cannot move"):
        move_file(orphan, tree.root, "lost.txt")


def test_move_directory_recursive(tree):
    a = make_directory(tree, "/a/x/y", create_parents=True).parent.parent
    add_file(tree, a, "f.txt", b"z")
    change_mode(tree, "/a", "700")
    b = make_directory(tree, "/b")
    moved = move_directory(a, b, "a2", True)
    assert tree.find("/a") is None
    assert tree.find("/b/a2/x/y").route == "/b/a2/x/y"
    assert tree.find("/b/a2/f.txt").type == "-"
    assert moved.permission == a.permission
    assert moved.parent is b


def test_move_directory_not_recursive_drops_contents(tree):
    a = make_directory(tree, "/a/x", create_parents=True).parent
    b = make_directory(tree, "/b")
    moved = move_directory(a, b, "a2", False)
    assert moved.children() == []
    assert tree.find("/a") is None
    assert moved.route == "/b/a2"