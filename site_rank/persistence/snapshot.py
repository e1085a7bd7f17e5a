# site_rank/persistence/snapshot.py
"""
Binary snapshot of a complete GraphStore, aliases included.

Layout (little-endian)::

    magic "SRGS" | u16 version | u32 node count
    node count x (u32 length, UTF-8 URL)
    node count x u32 out-degree
    u32 edge entries, then entries x (u32 src, u32 dst, u32 count)
    u32 aliases, then aliases x (u32 length, UTF-8 alias, u32 index)
"""
from __future__ import annotations

import struct
from typing import BinaryIO, List

from site_rank.graph import GraphStore
from site_rank.persistence.errors import GraphFormatError

MAGIC = b"SRGS"
VERSION = 1

_HEADER = struct.Struct("<4sHI")
_U32 = struct.Struct("<I")
_EDGE = struct.Struct("<III")


def _pack_str(value: str) -> bytes:
    data = value.encode("utf-8")
    return _U32.pack(len(data)) + data


def write_snapshot(graph: GraphStore, f: BinaryIO) -> None:
    """Serialize ``graph`` into the binary stream ``f``."""
    f.write(_HEADER.pack(MAGIC, VERSION, graph.node_count))
    for url in graph.nodes:
        f.write(_pack_str(url))
    if graph.out_degree:
        f.write(struct.pack(f"<{len(graph.out_degree)}I", *graph.out_degree))

    edges = list(graph.edges())
    f.write(_U32.pack(len(edges)))
    for edge in edges:
        f.write(_EDGE.pack(*edge))

    f.write(_U32.pack(len(graph.aliases)))
    for alias, index in graph.aliases.items():
        f.write(_pack_str(alias))
        f.write(_U32.pack(index))


class _Reader:
    """Bounds-checked cursor over a snapshot buffer."""

    def __init__(self, data: bytes) -> None:
        self.data = data
        self.pos = 0

    def unpack(self, fmt: struct.Struct) -> tuple:
        end = self.pos + fmt.size
        if end > len(self.data):
            raise GraphFormatError(f"Truncated snapshot at byte {self.pos}")
        values = fmt.unpack_from(self.data, self.pos)
        self.pos = end
        return values

    def u32(self) -> int:
        return self.unpack(_U32)[0]

    def u32_array(self, count: int) -> List[int]:
        return list(self.unpack(struct.Struct(f"<{count}I")))

    def string(self) -> str:
        length = self.u32()
        end = self.pos + length
        if end > len(self.data):
            raise GraphFormatError(f"Truncated string at byte {self.pos}")
        raw = self.data[self.pos:end]
        self.pos = end
        try:
            return raw.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise GraphFormatError(f"Invalid UTF-8 string at byte {self.pos - length}") from exc

    def at_end(self) -> bool:
        return self.pos == len(self.data)


def read_snapshot(f: BinaryIO) -> GraphStore:
    """Decode a snapshot written by :func:`write_snapshot`."""
    reader = _Reader(f.read())
    magic, version, node_count = reader.unpack(_HEADER)
    if magic != MAGIC:
        raise GraphFormatError(f"Not a graph snapshot (magic {magic!r})")
    if version != VERSION:
        raise GraphFormatError(f"Unsupported snapshot version {version}")

    nodes = [reader.string() for _ in range(node_count)]
    out_degree = reader.u32_array(node_count)

    adjacency: dict[int, dict[int, int]] = {}
    for _ in range(reader.u32()):
        src, dst, count = reader.unpack(_EDGE)
        row = adjacency.setdefault(src, {})
        if dst in row:
            raise GraphFormatError(f"Duplicate edge entry {src}->{dst}")
        row[dst] = count

    aliases: dict[str, int] = {}
    for _ in range(reader.u32()):
        alias = reader.string()
        aliases[alias] = reader.u32()

    if not reader.at_end():
        raise GraphFormatError(f"Unexpected trailing data at byte {reader.pos}")

    graph = GraphStore(nodes=nodes, out_degree=out_degree, adjacency=adjacency, aliases=aliases)
    try:
        graph.validate()
    except ValueError as exc:
        raise GraphFormatError(f"Inconsistent snapshot: {exc}") from exc
    return graph
