"""Common helpers for tests: an in-memory .ase file builder."""

import sys
import zlib
from pathlib import Path
from typing import List, Optional, Sequence, Tuple

script_dir = Path(__file__).parent
if str(script_dir.parent) not in sys.path:
    sys.path.insert(0, str(script_dir.parent))

from ase_files import AseFormat, ChunkType, CelType, LayerFlags, LayerType
from data import (
    pad_bytes,
    write_fixed,
    write_int16,
    write_int32,
    write_string,
    write_uint8,
    write_uint16,
    write_uint32,
)


def chunk(chunk_type: int, payload: bytes) -> bytes:
    return write_uint32(AseFormat.CHUNK_HEADER_SIZE + len(payload)) + write_uint16(chunk_type) + payload


def layer_chunk(
    name: str,
    child_level: int = 0,
    layer_type: int = LayerType.NORMAL,
    flags: int = LayerFlags.VISIBLE,
    blend_mode: int = 0,
    opacity: int = 255,
    tileset_index: Optional[int] = None,
    uuid: bytes = b"",
) -> bytes:
    payload = (
        write_uint16(flags)
        + write_uint16(layer_type)
        + write_uint16(child_level)
        + write_uint16(0)
        + write_uint16(0)
        + write_uint16(blend_mode)
        + write_uint8(opacity)
        + pad_bytes(3)
        + write_string(name)
    )
    if tileset_index is not None:
        payload += write_uint32(tileset_index)
    return chunk(ChunkType.LAYER, payload + uuid)


def _cel_prefix(layer_index: int, x: int, y: int, opacity: int, cel_type: int) -> bytes:
    return (
        write_uint16(layer_index)
        + write_int16(x)
        + write_int16(y)
        + write_uint8(opacity)
        + write_uint16(cel_type)
        + write_int16(0)
        + pad_bytes(5)
    )


def raw_cel_chunk(
    layer_index: int,
    width: int,
    height: int,
    pixels: bytes,
    x: int = 0,
    y: int = 0,
    opacity: int = 255,
    compressed: bool = False,
) -> bytes:
    cel_type = CelType.COMPRESSED_IMAGE if compressed else CelType.RAW_IMAGE
    body = zlib.compress(pixels) if compressed else pixels
    payload = (
        _cel_prefix(layer_index, x, y, opacity, cel_type)
        + write_uint16(width)
        + write_uint16(height)
        + body
    )
    return chunk(ChunkType.CEL, payload)


def linked_cel_chunk(layer_index: int, frame_position: int, x: int = 0, y: int = 0) -> bytes:
    payload = _cel_prefix(layer_index, x, y, 255, CelType.LINKED) + write_uint16(frame_position)
    return chunk(ChunkType.CEL, payload)


def tilemap_cel_chunk(
    layer_index: int,
    width: int,
    height: int,
    entries: Sequence[int],
    bits_per_tile: int = 32,
    tile_id_mask: int = 0x1FFFFFFF,
    x: int = 0,
    y: int = 0,
) -> bytes:
    bytes_per_tile = bits_per_tile // 8
    raw = b"".join(entry.to_bytes(bytes_per_tile, "little") for entry in entries)
    payload = (
        _cel_prefix(layer_index, x, y, 255, CelType.COMPRESSED_TILEMAP)
        + write_uint16(width)
        + write_uint16(height)
        + write_uint16(bits_per_tile)
        + write_uint32(tile_id_mask)
        + write_uint32(0x20000000)
        + write_uint32(0x40000000)
        + write_uint32(0x80000000)
        + pad_bytes(10)
        + zlib.compress(raw)
    )
    return chunk(ChunkType.CEL, payload)


def cel_extra_chunk(x: float, y: float, width: float, height: float) -> bytes:
    payload = (
        write_uint32(1)
        + write_fixed(x)
        + write_fixed(y)
        + write_fixed(width)
        + write_fixed(height)
        + pad_bytes(16)
    )
    return chunk(ChunkType.CEL_EXTRA, payload)


def palette_chunk(
    colors: Sequence[Tuple[int, int, int, int]],
    names: Optional[List[str]] = None,
    first: int = 0,
    size: Optional[int] = None,
) -> bytes:
    """colors fill entries first..first + len(colors) - 1 of a palette of size entries."""
    if size is None:
        size = first + len(colors)
    payload = (
        write_uint32(size)
        + write_uint32(first)
        + write_uint32(first + len(colors) - 1)
        + pad_bytes(8)
    )
    for index, color in enumerate(colors):
        name = names[index] if names else None
        payload += write_uint16(1 if name else 0) + bytes(color)
        if name:
            payload += write_string(name)
    return chunk(ChunkType.PALETTE, payload)


def tags_chunk(tags: Sequence[Tuple[int, int, int, str]]) -> bytes:
    """tags holds (from, to, direction, name) tuples."""
    payload = write_uint16(len(tags)) + pad_bytes(8)
    for from_frame, to_frame, direction, name in tags:
        payload += (
            write_uint16(from_frame)
            + write_uint16(to_frame)
            + write_uint8(direction)
            + write_uint16(0)
            + pad_bytes(6)
            + pad_bytes(3)
            + pad_bytes(1)
            + write_string(name)
        )
    return chunk(ChunkType.TAGS, payload)


def slice_chunk(
    name: str,
    keys: Sequence[Tuple[int, int, int, int, int]],
    centers: Optional[Sequence[Tuple[int, int, int, int]]] = None,
    pivots: Optional[Sequence[Tuple[int, int]]] = None,
) -> bytes:
    """keys holds (frame, x, y, width, height) tuples."""
    flags = (1 if centers else 0) | (2 if pivots else 0)
    payload = write_uint32(len(keys)) + write_uint32(flags) + write_uint32(0) + write_string(name)

    for index, (frame, x, y, width, height) in enumerate(keys):
        payload += (
            write_uint32(frame)
            + write_int32(x)
            + write_int32(y)
            + write_uint32(width)
            + write_uint32(height)
        )
        if centers:
            cx, cy, cw, ch = centers[index]
            payload += write_int32(cx) + write_int32(cy) + write_uint32(cw) + write_uint32(ch)
        if pivots:
            px, py = pivots[index]
            payload += write_int32(px) + write_int32(py)

    return chunk(ChunkType.SLICE, payload)


def tileset_chunk(
    tileset_id: int,
    tile_width: int,
    tile_height: int,
    tiles: bytes,
    number_of_tiles: int,
    zero_is_empty: bool = True,
    name: str = "tiles",
) -> bytes:
    flags = 2 | (4 if zero_is_empty else 0)
    compressed = zlib.compress(tiles)
    payload = (
        write_uint32(tileset_id)
        + write_uint32(flags)
        + write_uint32(number_of_tiles)
        + write_uint16(tile_width)
        + write_uint16(tile_height)
        + write_int16(1)
        + pad_bytes(14)
        + write_string(name)
        + write_uint32(len(compressed))
        + compressed
    )
    return chunk(ChunkType.TILESET, payload)


def color_profile_chunk() -> bytes:
    payload = write_uint16(1) + write_uint16(0) + write_fixed(0.0) + pad_bytes(8)
    return chunk(ChunkType.COLOR_PROFILE, payload)


def external_files_chunk(entries: Sequence[Tuple[int, int, str]]) -> bytes:
    payload = write_uint32(len(entries)) + pad_bytes(8)
    for entry_id, file_type, filename in entries:
        payload += write_uint32(entry_id) + write_uint8(file_type) + pad_bytes(7) + write_string(filename)
    return chunk(ChunkType.EXTERNAL_FILES, payload)


def frame_block(chunks: Sequence[bytes], duration: int = 100) -> bytes:
    body = b"".join(chunks)
    size = AseFormat.FRAME_HEADER_SIZE + len(body)
    return (
        write_uint32(size)
        + write_uint16(AseFormat.FRAME_MAGIC)
        + write_uint16(min(len(chunks), 0xFFFF))
        + write_uint16(duration)
        + pad_bytes(2)
        + write_uint32(len(chunks))
        + body
    )


def build_ase(
    width: int,
    height: int,
    frames: Sequence[Sequence[bytes]],
    bits_per_pixel: int = 32,
    flags: int = 1,
    transparent_index: int = 0,
    durations: Optional[Sequence[int]] = None,
) -> bytes:
    """Assemble a complete file from per-frame chunk lists."""
    blocks = b"".join(
        frame_block(chunks, durations[index] if durations else 100)
        for index, chunks in enumerate(frames)
    )

    header = (
        write_uint16(AseFormat.HEADER_MAGIC)
        + write_uint16(len(frames))
        + write_uint16(width)
        + write_uint16(height)
        + write_uint16(bits_per_pixel)
        + write_uint32(flags)
        + write_uint16(100)
        + pad_bytes(8)
        + write_uint8(transparent_index)
        + pad_bytes(3)
        + write_uint16(0)
        + write_uint8(1)
        + write_uint8(1)
        + write_int16(0)
        + write_int16(0)
        + write_uint16(16)
        + write_uint16(16)
    )
    header += pad_bytes(AseFormat.HEADER_SIZE - 4 - len(header))

    file_size = AseFormat.HEADER_SIZE + len(blocks)
    return write_uint32(file_size) + header + blocks


def rgba_bytes(pixels: Sequence[Tuple[int, int, int, int]]) -> bytes:
    return b"".join(bytes(pixel) for pixel in pixels)
