"""A simple run-length archive format: zip and unzip."""

from __future__ import annotations

import struct
import sys
from collections.abc import Iterable, Iterator
from contextlib import suppress
from pathlib import Path

from .accounts import User
from .directory import FILES_DIR, DirectoryTree, ShellError
from .mkdir import make_directory

_SIZE = struct.Struct("<q")
_MAX_RUN = 255
_MAX_EXTENSION = 32
_MAX_ATTEMPTS = 1000


def rle_compress(data: bytes) -> bytes:
    """Encode ``data`` as (byte, count) pairs with counts up to 255."""
    out = bytearray()
    previous: int | None = None
    count = 0
    for byte in data:
        if byte == previous:
            count += 1
            if count == _MAX_RUN:
                out += bytes((previous, count))
                count = 0
        else:
            if previous is not None:
                out += bytes((previous, count))
            previous = byte
            count = 1
    if previous is not None:
        out += bytes((previous, count))
    return bytes(out)


def rle_decompress(data: bytes) -> bytes:
    """Expand (byte, count) pairs; a trailing odd byte is ignored."""
    pairs = iter(data)
    out = bytearray()
    for byte, count in zip(pairs, pairs):
        out += bytes((byte,)) * count
    return bytes(out)


def unique_filename(directory: str | Path, name: str) -> str:
    """Return ``name``, or ``stem(n).ext`` if ``name`` is already stored.

    Numbers are tried from 1 up to 999.
    """
    directory = Path(directory)

    def taken(candidate: str) -> bool:
        return (directory / candidate.lstrip("/")).exists()

    if not taken(name):
        return name

    stem, dot, extension = name.rpartition(".")
    if dot:
        extension = dot + extension
        if len(extension) >= _MAX_EXTENSION:
            extension = ""
    else:
        stem, extension = name, ""

    candidate = name
    for counter in range(1, _MAX_ATTEMPTS):
        candidate = f"{stem}({counter}){extension}"
        if not taken(candidate):
            break
    return candidate


def _stored_path(tree: DirectoryTree, route: str) -> Path:
    return tree.base / FILES_DIR / route.lstrip("/")


def _archive_route(tree: DirectoryTree, zip_name: str) -> str:
    return f"{tree.current.route}/{zip_name}"


def zip_files(tree: DirectoryTree, zip_name: str, names: Iterable[str]) -> str:
    """Pack the named files into ``zip_name`` in the current directory.

    Names that are not files are reported on stderr and skipped.
    """
    virtual = _archive_route(tree, zip_name)
    zip_path = _stored_path(tree, virtual)
    try:
        zip_path.parent.mkdir(parents=True, exist_ok=True)
        with zip_path.open("wb") as archive:
            for name in names:
                node = tree.find(name)
                if node is None or node.type != "-":
                    print(f"zip: file not found: {name}", file=sys.stderr)
                    continue
                source = _stored_path(tree, node.route)
                try:
                    data = source.read_bytes()
                except OSError:
                    print(f"zip: cannot open file: {source}", file=sys.stderr)
                    continue
                route = node.route.encode("utf-8")
                name_length = len(route) & 0xFF
                compressed = rle_compress(data)
                archive.write(bytes((name_length,)))
                archive.write(route[:name_length])
                archive.write(_SIZE.pack(len(data)))
                archive.write(_SIZE.pack(len(compressed)))
                archive.write(compressed)
    except OSError as exc:
        raise ShellError(f"zip: cannot create archive: {exc}") from exc
    return f"compressed: {virtual}\n"


def _entries(payload: bytes) -> Iterator[tuple[str, int, bytes]]:
    offset = 0
    while offset < len(payload):
        name_length = payload[offset]
        offset += 1
        name = payload[offset : offset + name_length]
        if len(name) != name_length:
            print("unzip: failed to read file name", file=sys.stderr)
            return
        offset += name_length
        if offset + 2 * _SIZE.size > len(payload):
            return
        (original_size,) = _SIZE.unpack_from(payload, offset)
        (compressed_size,) = _SIZE.unpack_from(payload, offset + _SIZE.size)
        offset += 2 * _SIZE.size
        compressed = payload[offset : offset + max(compressed_size, 0)]
        offset += max(compressed_size, 0)
        yield name.decode("utf-8", errors="replace"), original_size, compressed


def unzip_files(tree: DirectoryTree, user: User, zip_name: str) -> str:
    """Unpack ``zip_name`` from the current directory into the tree.

    Missing parent directories are created; a name already stored gets a
    numbered variant.
    """
    zip_path = _stored_path(tree, _archive_route(tree, zip_name))
    try:
        payload = zip_path.read_bytes()
    except OSError as exc:
        raise ShellError(f"unzip: cannot open archive: {exc}") from exc

    files_dir = tree.base / FILES_DIR
    parts = []
    for entry, original_size, compressed in _entries(payload):
        parent_route = entry.rpartition("/")[0]
        if parent_route:
            with suppress(ShellError):
                make_directory(tree, parent_route, "755", True, user)

        unique = unique_filename(files_dir, entry)
        target = files_dir / unique.lstrip("/")
        try:
            target.write_bytes(rle_decompress(compressed))
        except OSError:
            print(f"unzip: cannot create file: {unique}", file=sys.stderr)
            continue

        with suppress(ShellError):
            node = make_directory(tree, unique, "644", False, user)
            node.type = "-"
            node.size = original_size
            tree.save()
        parts.append(f"decompressed: {unique}\n")
    return "".join(parts)