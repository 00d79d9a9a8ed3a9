"""
Placement metadata codec.

Wire layout, all integers unsigned 32-bit little-endian:

    record_count
    record_count × { name_len, name_bytes (UTF-8), x, y, width, height }

Records appear in table order. The layout is shared with other readers of
.atlas files and must stay byte-stable.
"""

import struct

from pydantic import ValidationError

from atlast.exceptions import CorruptArtifactError, InvalidNameError
from atlast.schema import Placement, PlacementTable, U32_MAX

_U32 = struct.Struct('<I')
_GEOMETRY = struct.Struct('<IIII')


def encode_placements(table: PlacementTable) -> bytes:
    """
    Encode a PlacementTable into the metadata payload.

    Raises:
        InvalidNameError: If a name is not valid UTF-8 (e.g. surrogate-escaped
                          file names) or too long for its length prefix
    """
    parts = [_U32.pack(len(table))]
    for placement in table.placements:
        try:
            name_bytes = placement.name.encode('utf-8')
        except UnicodeEncodeError as e:
            raise InvalidNameError(f"Placement name {placement.name!r} is not valid UTF-8") from e
        if len(name_bytes) > U32_MAX:
            raise InvalidNameError(f"Placement name is too long to encode ({len(name_bytes)} bytes)")
        parts.append(_U32.pack(len(name_bytes)))
        parts.append(name_bytes)
        parts.append(_GEOMETRY.pack(placement.x, placement.y, placement.width, placement.height))
    return b''.join(parts)


def decode_placements(data: bytes) -> PlacementTable:
    """
    Decode a metadata payload back into a PlacementTable.

    Raises:
        CorruptArtifactError: On truncation, trailing bytes, bad UTF-8 or
                              duplicate names
    """
    offset = 0

    def take(size: int, what: str) -> int:
        nonlocal offset
        if offset + size > len(data):
            raise CorruptArtifactError(
                f"Metadata truncated reading {what} at byte {offset} "
                f"(need {size}, have {len(data) - offset})"
            )
        start = offset
        offset += size
        return start

    (count,) = _U32.unpack_from(data, take(_U32.size, "record count"))

    placements = []
    for index in range(count):
        (name_len,) = _U32.unpack_from(data, take(_U32.size, f"name length of record {index}"))
        start = take(name_len, f"name of record {index}")
        try:
            name = data[start:start + name_len].decode('utf-8')
        except UnicodeDecodeError as e:
            raise CorruptArtifactError(f"Record {index} name is not valid UTF-8") from e
        x, y, width, height = _GEOMETRY.unpack_from(data, take(_GEOMETRY.size, f"geometry of record {index}"))
        placements.append(Placement(name=name, x=x, y=y, width=width, height=height))

    if offset != len(data):
        raise CorruptArtifactError(f"Metadata has {len(data) - offset} trailing bytes after {count} records")

    try:
        return PlacementTable(placements=placements)
    except ValidationError as e:
        raise CorruptArtifactError(f"Invalid placement table: {e}") from e
