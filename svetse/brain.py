"""Binary brain file: save and load a trained model."""

from __future__ import annotations

import os
import struct
import tempfile
from collections.abc import Iterator
from typing import BinaryIO, Union

from .model import Model, Node

BRAIN_COOKIE = b"SVETSE2v1"

_U32 = struct.Struct("<I")
_NODE = struct.Struct("<IIII")
_Path = Union[str, "os.PathLike[str]"]


class BrainFormatError(ValueError):
    """Raised when a brain file is malformed or truncated."""


def _encode_tree(node: Node) -> Iterator[bytes]:
    yield _NODE.pack(node.symbol, node.usage, node.count, len(node.children))
    for child in node.children:
        yield from _encode_tree(child)


def _encode_dictionary(words: list[str]) -> Iterator[bytes]:
    yield _U32.pack(len(words))
    for word in words:
        data = word.encode("utf-8", errors="surrogateescape")
        yield _U32.pack(len(data))
        yield data


def _write_model(handle: BinaryIO, model: Model) -> None:
    handle.write(BRAIN_COOKIE)
    handle.write(bytes([model.order & 0xFF]))
    for chunk in _encode_tree(model.forward):
        handle.write(chunk)
    for chunk in _encode_tree(model.backward):
        handle.write(chunk)
    for chunk in _encode_dictionary(model.dictionary):
        handle.write(chunk)


def save_brain(path: _Path, model: Model) -> None:
    """Write *model* to *path* atomically via a temporary file and rename."""
    directory = os.path.dirname(os.fspath(path)) or "."
    fd, tmp_path = tempfile.mkstemp(prefix=".brain-", suffix=".tmp", dir=directory)
    try:
        with os.fdopen(fd, "wb") as handle:
            _write_model(handle, model)
            handle.flush()
            os.fsync(handle.fileno())
        os.replace(tmp_path, path)
    except BaseException:
        try:
            os.remove(tmp_path)
        except OSError:
            pass
        raise


class _Decoder:
    def __init__(self, data: bytes) -> None:
        self._data = memoryview(data)
        self._offset = 0

    def take(self, size: int, what: str) -> bytes:
        end = self._offset + size
        if end > len(self._data):
            raise BrainFormatError(f"unexpected end of file reading {what}")
        chunk = bytes(self._data[self._offset : end])
        self._offset = end
        return chunk

    def u32(self, what: str) -> int:
        return _U32.unpack(self.take(_U32.size, what))[0]

    def node(self, what: str) -> tuple[Node, int]:
        symbol, usage, count, children = _NODE.unpack(self.take(_NODE.size, what))
        return Node(symbol=symbol, usage=usage, count=count), children

    def tree(self, what: str) -> Node:
        root, remaining = self.node(what)
        stack = [(root, remaining)]
        while stack:
            parent, remaining = stack[-1]
            if remaining == 0:
                stack.pop()
                continue
            stack[-1] = (parent, remaining - 1)
            child, grandchildren = self.node(what)
            parent.children.append(child)
            stack.append((child, grandchildren))
        return root

    def dictionary(self) -> list[str]:
        size = self.u32("dictionary")
        return [
            self.take(self.u32("dictionary"), "dictionary").decode(
                "utf-8", errors="surrogateescape"
            )
            for _ in range(size)
        ]


def load_brain(path: _Path) -> Model:
    """Read a model from *path*.

    Raises ``OSError`` if the file cannot be read and ``BrainFormatError``
    if its contents are not a valid brain.
    """
    with open(path, "rb") as handle:
        data = handle.read()

    decoder = _Decoder(data)
    cookie = decoder.take(len(BRAIN_COOKIE), "cookie")
    if cookie != BRAIN_COOKIE:
        raise BrainFormatError(f"invalid brain file: bad cookie {cookie!r}")
    order = decoder.take(1, "order")[0]

    model = Model(order)
    model.forward = decoder.tree("forward tree")
    model.backward = decoder.tree("backward tree")
    model.dictionary = decoder.dictionary()
    model.word_ids = {word: index for index, word in enumerate(model.dictionary)}
    return model