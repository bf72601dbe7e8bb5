"""
Aseprite file parser for reading .ase/.aseprite documents.
"""

import struct
import zlib
from typing import Callable, Dict, Optional, Tuple

import numpy as np

from .constants import (
    AseFormat,
    SUPPORTED_BITS_PER_PIXEL,
    IGNORED_CHUNK_TYPES,
    BlendMode,
    CelExtraFlags,
    CelType,
    ChunkType,
    ColorProfileFlags,
    ColorProfileType,
    HeaderFlags,
    LayerFlags,
    LayerType,
    LoopDirection,
    PaletteEntryFlags,
    SliceFlags,
    TilesetFlags,
)
from .document import (
    Cel,
    ColorProfile,
    Document,
    ExternalFile,
    Frame,
    Header,
    Layer,
    LinkedCelData,
    Palette,
    RawCelData,
    Slice,
    SliceKey,
    Tag,
    TilemapCelData,
    Tileset,
)
from .errors import MalformedFormat, UnsupportedFeature
from data import (
    DEBUG,
    read_uint32,
    read_uint16,
    read_uint8,
    read_int16,
    read_int32,
    read_fixed,
    read_string,
    read_bytes,
    inflate,
)


class FrameHeader:
    """Frame header structure."""

    def __init__(self):
        self.size = 0
        self.magic = 0
        self.old_number_of_chunks = 0
        self.duration = 0
        self.new_number_of_chunks = 0

    @classmethod
    def read_from_bytes(cls, data: bytes, offset: int) -> "FrameHeader":
        """Read frame header from bytes."""
        header = cls()
        header.size = read_uint32(data, offset)
        header.magic = read_uint16(data, offset + 4)
        header.old_number_of_chunks = read_uint16(data, offset + 6)
        header.duration = read_uint16(data, offset + 8)
        header.new_number_of_chunks = read_uint32(data, offset + 12)
        return header

    @property
    def number_of_chunks(self) -> int:
        # Older files only fill the 16-bit count
        if self.new_number_of_chunks == 0:
            return self.old_number_of_chunks
        return self.new_number_of_chunks


def _enum_value(enum_cls, value: int, what: str):
    try:
        return enum_cls(value)
    except ValueError:
        raise UnsupportedFeature(f"Unsupported {what}: {value}") from None


class AseParser:
    """Parser for Aseprite sprite files."""

    def __init__(self, rawdata: bytes):
        """Initialize parser with raw file data."""
        self.rawdata = rawdata
        self.document: Optional[Document] = None
        self._last_cel: Optional[Cel] = None
        self._chunk_readers: Dict[int, Callable[[Frame, int, int], None]] = {
            ChunkType.LAYER: self._read_layer_chunk,
            ChunkType.CEL: self._read_cel_chunk,
            ChunkType.CEL_EXTRA: self._read_cel_extra_chunk,
            ChunkType.COLOR_PROFILE: self._read_color_profile_chunk,
            ChunkType.EXTERNAL_FILES: self._read_external_files_chunk,
            ChunkType.TAGS: self._read_tags_chunk,
            ChunkType.PALETTE: self._read_palette_chunk,
            ChunkType.SLICE: self._read_slice_chunk,
            ChunkType.TILESET: self._read_tileset_chunk,
        }

    def parse(self) -> Document:
        """Parse the whole file into a fully resolved Document.

        Raises:
            MalformedFormat: bad magic numbers, truncated data, bad lengths or references
            UnsupportedFeature: field values this decoder does not implement
        """
        try:
            header = self._read_header()
            self.document = Document(header)

            offset = AseFormat.HEADER_SIZE
            for _ in range(header.frames):
                frame, offset = self._read_frame(offset)
                self.document.frames.append(frame)
        except (struct.error, IndexError) as e:
            raise MalformedFormat(f"Truncated file: {e}") from e

        self._resolve_references()
        self._build_layer_hierarchy()
        self._validate_tilemaps()
        self._validate_tags()

        return self.document

    def _read_header(self) -> Header:
        data = self.rawdata
        if len(data) < AseFormat.HEADER_SIZE:
            raise MalformedFormat(
                f"File too small for header: {len(data)} < {AseFormat.HEADER_SIZE} bytes"
            )

        magic = read_uint16(data, 4)
        if magic != AseFormat.HEADER_MAGIC:
            raise MalformedFormat(f"Invalid file magic number: 0x{magic:04X}")

        header = Header()
        header.file_size = read_uint32(data, 0)
        header.frames = read_uint16(data, 6)
        header.width = read_uint16(data, 8)
        header.height = read_uint16(data, 10)
        header.bits_per_pixel = read_uint16(data, 12)
        header.flags = HeaderFlags(read_uint32(data, 14))
        header.speed = read_uint16(data, 18)
        header.transparent_index = read_uint8(data, 28)
        header.number_of_colors = (
            read_uint16(data, 32) or AseFormat.DEFAULT_NUMBER_OF_COLORS
        )
        header.pixel_width = read_uint8(data, 34)
        header.pixel_height = read_uint8(data, 35)
        header.grid_x = read_int16(data, 36)
        header.grid_y = read_int16(data, 38)
        header.grid_width = read_uint16(data, 40)
        header.grid_height = read_uint16(data, 42)

        if header.width == 0 or header.height == 0:
            raise MalformedFormat(
                f"Invalid canvas size: {header.width}x{header.height}"
            )

        if header.bits_per_pixel not in SUPPORTED_BITS_PER_PIXEL:
            raise UnsupportedFeature(
                f"Unsupported color depth: {header.bits_per_pixel} bits per pixel"
            )

        return header

    def _read_frame(self, offset: int) -> Tuple[Frame, int]:
        """Read one frame block. Returns (Frame, offset of the next frame)."""
        frame_header = FrameHeader.read_from_bytes(self.rawdata, offset)

        if frame_header.magic != AseFormat.FRAME_MAGIC:
            raise MalformedFormat(
                f"Invalid frame magic number 0x{frame_header.magic:04X} at offset {offset}"
            )

        frame = Frame(duration=frame_header.duration)
        self._last_cel = None

        pos = offset + AseFormat.FRAME_HEADER_SIZE
        for _ in range(frame_header.number_of_chunks):
            chunk_size = read_uint32(self.rawdata, pos)
            chunk_type = read_uint16(self.rawdata, pos + 4)
            chunk_end = pos + chunk_size

            if chunk_size < AseFormat.CHUNK_HEADER_SIZE or chunk_end > len(self.rawdata):
                raise MalformedFormat(
                    f"Invalid size {chunk_size} for chunk 0x{chunk_type:04X} at offset {pos}"
                )

            self._dispatch_chunk(chunk_type, frame, pos + AseFormat.CHUNK_HEADER_SIZE, chunk_end)

            # Always continue from the declared chunk size
            pos = chunk_end

        frame_end = offset + frame_header.size
        return frame, max(frame_end, pos)

    def _dispatch_chunk(self, chunk_type: int, frame: Frame, offset: int, end: int) -> None:
        reader = self._chunk_readers.get(chunk_type)

        if reader is not None:
            reader(frame, offset, end)
            return

        if chunk_type in IGNORED_CHUNK_TYPES:
            return

        frame.skipped_chunks.append(chunk_type)
        if DEBUG:
            print(f"[DEBUG] Skipped chunk 0x{chunk_type:04X} ({end - offset} bytes)")

    def _read_layer_chunk(self, frame: Frame, offset: int, end: int) -> None:
        data = self.rawdata
        layer = Layer()
        layer.flags = LayerFlags(read_uint16(data, offset))
        layer.layer_type = _enum_value(LayerType, read_uint16(data, offset + 2), "layer type")
        layer.child_level = read_uint16(data, offset + 4)
        layer.default_width = read_uint16(data, offset + 6)
        layer.default_height = read_uint16(data, offset + 8)
        layer.blend_mode = _enum_value(BlendMode, read_uint16(data, offset + 10), "blend mode")
        layer.opacity = read_uint8(data, offset + 12)

        layer.name, consumed = read_string(data, offset + 16)
        pos = offset + 16 + consumed

        if layer.layer_type == LayerType.TILEMAP:
            layer.tileset_index = read_uint32(data, pos)
            pos += 4

        if self.document.header.flags & HeaderFlags.LAYERS_HAVE_UUID:
            layer.uuid = read_bytes(data, pos, AseFormat.LAYER_UUID_SIZE)

        self.document.layers.append(layer)

    def _read_cel_chunk(self, frame: Frame, offset: int, end: int) -> None:
        data = self.rawdata
        bpp = self.document.header.bits_per_pixel

        cel = Cel()
        cel.layer_index = read_uint16(data, offset)
        cel.x = read_int16(data, offset + 2)
        cel.y = read_int16(data, offset + 4)
        cel.opacity = read_uint8(data, offset + 6)
        cel.cel_type = _enum_value(CelType, read_uint16(data, offset + 7), "cel type")
        cel.z_index = read_int16(data, offset + 9)

        pos = offset + 16

        if cel.cel_type == CelType.LINKED:
            cel.data = LinkedCelData(frame_position=read_uint16(data, pos))

        elif cel.cel_type == CelType.COMPRESSED_TILEMAP:
            tilemap = TilemapCelData()
            tilemap.width = read_uint16(data, pos)
            tilemap.height = read_uint16(data, pos + 2)
            tilemap.bits_per_tile = read_uint16(data, pos + 4)
            tilemap.tile_id_mask = read_uint32(data, pos + 6)
            tilemap.x_flip_mask = read_uint32(data, pos + 10)
            tilemap.y_flip_mask = read_uint32(data, pos + 14)
            tilemap.rotation_mask = read_uint32(data, pos + 18)

            if tilemap.bits_per_tile not in (8, 16, 32):
                raise UnsupportedFeature(
                    f"Unsupported tilemap entry size: {tilemap.bits_per_tile} bits"
                )

            expected = tilemap.width * tilemap.height * tilemap.bits_per_tile // 8
            tilemap.tiles = self._inflate(data[pos + 32 : end], expected, "tilemap")
            cel.data = tilemap

        else:
            raw = RawCelData()
            raw.width = read_uint16(data, pos)
            raw.height = read_uint16(data, pos + 2)
            raw.compressed = cel.cel_type == CelType.COMPRESSED_IMAGE

            expected = raw.width * raw.height * bpp // 8
            if raw.compressed:
                raw.pixels = self._inflate(data[pos + 4 : end], expected, "cel image")
            else:
                raw.pixels = np.frombuffer(
                    read_bytes(data, pos + 4, expected), dtype=np.uint8
                )
            cel.data = raw

        frame.cels.append(cel)
        self._last_cel = cel

    def _read_cel_extra_chunk(self, frame: Frame, offset: int, end: int) -> None:
        # Belongs to the cel read just before it in this frame
        if self._last_cel is None:
            return

        data = self.rawdata
        cel = self._last_cel
        cel.extra_flags = CelExtraFlags(read_uint32(data, offset))

        if cel.has_precise_bounds:
            cel.precise_x = read_fixed(data, offset + 4)
            cel.precise_y = read_fixed(data, offset + 8)
            cel.scaled_width = read_fixed(data, offset + 12)
            cel.scaled_height = read_fixed(data, offset + 16)

    def _read_color_profile_chunk(self, frame: Frame, offset: int, end: int) -> None:
        data = self.rawdata
        profile = ColorProfile()
        profile.profile_type = _enum_value(
            ColorProfileType, read_uint16(data, offset), "color profile type"
        )
        profile.flags = ColorProfileFlags(read_uint16(data, offset + 2))
        profile.gamma = read_fixed(data, offset + 4)

        if profile.profile_type == ColorProfileType.ICC:
            icc_length = read_uint32(data, offset + 16)
            profile.icc_data = read_bytes(data, offset + 20, icc_length)

        self.document.color_profile = profile

    def _read_external_files_chunk(self, frame: Frame, offset: int, end: int) -> None:
        data = self.rawdata
        count = read_uint32(data, offset)
        pos = offset + 12

        for _ in range(count):
            entry = ExternalFile()
            entry.entry_id = read_uint32(data, pos)
            entry.file_type = read_uint8(data, pos + 4)
            entry.filename, consumed = read_string(data, pos + 12)
            pos += 12 + consumed
            self.document.external_files.append(entry)

    def _read_tags_chunk(self, frame: Frame, offset: int, end: int) -> None:
        data = self.rawdata
        count = read_uint16(data, offset)
        pos = offset + 10

        tags = []
        for _ in range(count):
            tag = Tag()
            tag.from_frame = read_uint16(data, pos)
            tag.to_frame = read_uint16(data, pos + 2)
            tag.direction = _enum_value(LoopDirection, read_uint8(data, pos + 4), "loop direction")
            tag.repeat = read_uint16(data, pos + 5)
            tag.name, consumed = read_string(data, pos + 17)
            pos += 17 + consumed
            tags.append(tag)

        self.document.tags = tags

    def _read_palette_chunk(self, frame: Frame, offset: int, end: int) -> None:
        data = self.rawdata
        size = read_uint32(data, offset)
        first = read_uint32(data, offset + 4)
        last = read_uint32(data, offset + 8)

        if size > 0 and not (first <= last < size):
            raise MalformedFormat(
                f"Palette range [{first}, {last}] outside palette of {size} colors"
            )

        # Later palette chunks only redefine their own sub-range
        palette = self.document.palette or Palette()
        colors = np.zeros((size, 4), dtype=np.uint8)
        keep = min(size, palette.size)
        colors[:keep] = palette.colors[:keep]
        names = (palette.names + [None] * size)[:size]

        pos = offset + 20
        for index in range(first, last + 1 if size > 0 else first):
            flags = PaletteEntryFlags(read_uint16(data, pos))
            colors[index] = np.frombuffer(read_bytes(data, pos + 2, 4), dtype=np.uint8)
            pos += 6

            if flags & PaletteEntryFlags.HAS_NAME:
                names[index], consumed = read_string(data, pos)
                pos += consumed

        palette.colors = colors
        palette.names = names
        palette.first_index = first
        palette.last_index = last
        self.document.palette = palette

    def _read_slice_chunk(self, frame: Frame, offset: int, end: int) -> None:
        data = self.rawdata
        slice_ = Slice()
        number_of_keys = read_uint32(data, offset)
        slice_.flags = SliceFlags(read_uint32(data, offset + 4))
        slice_.name, consumed = read_string(data, offset + 12)
        pos = offset + 12 + consumed

        for _ in range(number_of_keys):
            key = SliceKey()
            key.frame = read_uint32(data, pos)
            key.x = read_int32(data, pos + 4)
            key.y = read_int32(data, pos + 8)
            key.width = read_uint32(data, pos + 12)
            key.height = read_uint32(data, pos + 16)
            pos += 20

            if slice_.is_nine_slice:
                key.center_x = read_int32(data, pos)
                key.center_y = read_int32(data, pos + 4)
                key.center_width = read_uint32(data, pos + 8)
                key.center_height = read_uint32(data, pos + 12)
                pos += 16

            if slice_.has_pivot:
                key.pivot_x = read_int32(data, pos)
                key.pivot_y = read_int32(data, pos + 4)
                pos += 8

            slice_.keys.append(key)

        self.document.slices.append(slice_)

    def _read_tileset_chunk(self, frame: Frame, offset: int, end: int) -> None:
        data = self.rawdata
        tileset = Tileset()
        tileset.tileset_id = read_uint32(data, offset)
        tileset.flags = TilesetFlags(read_uint32(data, offset + 4))
        tileset.number_of_tiles = read_uint32(data, offset + 8)
        tileset.tile_width = read_uint16(data, offset + 12)
        tileset.tile_height = read_uint16(data, offset + 14)
        tileset.base_index = read_int16(data, offset + 16)
        tileset.name, consumed = read_string(data, offset + 32)
        pos = offset + 32 + consumed

        if tileset.flags & TilesetFlags.EXTERNAL_FILE_LINK:
            tileset.external_file_id = read_uint32(data, pos)
            tileset.external_tileset_id = read_uint32(data, pos + 4)
            pos += 8

        if tileset.flags & TilesetFlags.TILES_INSIDE_FILE:
            compressed_length = read_uint32(data, pos)
            compressed = read_bytes(data, pos + 4, compressed_length)

            bytes_per_tile = (
                self.document.header.bytes_per_pixel
                * tileset.tile_width
                * tileset.tile_height
            )
            expected = bytes_per_tile * tileset.number_of_tiles
            pixels = self._inflate(compressed, expected, "tileset")
            tileset.tiles = pixels.reshape(tileset.number_of_tiles, bytes_per_tile)

        self.document.tilesets.append(tileset)

    def _inflate(self, compressed: bytes, expected: int, what: str) -> np.ndarray:
        try:
            raw = inflate(compressed, expected)
        except zlib.error as e:
            raise MalformedFormat(f"Corrupt {what} data: {e}") from e

        if len(raw) != expected:
            raise MalformedFormat(
                f"Decompressed {what} size mismatch: expected {expected} bytes, got {len(raw)}"
            )

        return np.frombuffer(raw, dtype=np.uint8)

    def _resolve_references(self) -> None:
        """Check cel layer indices and link every linked cel to its source cel."""
        document = self.document
        num_layers = len(document.layers)
        num_frames = len(document.frames)

        for frame_index, frame in enumerate(document.frames):
            for cel in frame.cels:
                if cel.layer_index >= num_layers:
                    raise MalformedFormat(
                        f"Frame {frame_index}: cel references layer {cel.layer_index}, "
                        f"but only {num_layers} layer(s) exist"
                    )

                if not isinstance(cel.data, LinkedCelData):
                    continue

                target = cel.data.frame_position
                if target >= num_frames:
                    raise MalformedFormat(
                        f"Frame {frame_index}: linked cel references frame {target}, "
                        f"but only {num_frames} frame(s) exist"
                    )

                for cel_index, other in enumerate(document.frames[target].cels):
                    if other.layer_index == cel.layer_index:
                        cel.data.source_cel = cel_index
                        break
                else:
                    raise MalformedFormat(
                        f"Frame {frame_index}: linked cel on layer {cel.layer_index} "
                        f"has no source cel in frame {target}"
                    )

    def _build_layer_hierarchy(self) -> None:
        """Assign parent/children from child levels.

        A layer's parent is the nearest preceding layer with a smaller child level.
        """
        layers = self.document.layers
        stack = []

        for index, layer in enumerate(layers):
            while stack and layer.child_level <= layers[stack[-1]].child_level:
                stack.pop()

            if stack:
                layer.parent = stack[-1]
                layers[stack[-1]].children.append(index)

            stack.append(index)

    def _validate_tilemaps(self) -> None:
        document = self.document

        for frame_index, frame in enumerate(document.frames):
            for cel in frame.cels:
                if not isinstance(cel.data, TilemapCelData):
                    continue

                layer = document.layers[cel.layer_index]
                if layer.layer_type != LayerType.TILEMAP:
                    raise MalformedFormat(
                        f"Frame {frame_index}: tilemap cel on non-tilemap layer '{layer.name}'"
                    )

                tileset = document.tileset_by_id(layer.tileset_index)
                if tileset is None:
                    raise MalformedFormat(
                        f"Layer '{layer.name}' references missing tileset {layer.tileset_index}"
                    )

                if tileset.tiles is None:
                    raise UnsupportedFeature(
                        f"Tileset {tileset.tileset_id} has no embedded tiles (external tilesets are not supported)"
                    )

                tile_ids, _, _, _ = cel.data.decode_tiles()
                ids = tile_ids[tile_ids != np.uint64(AseFormat.EMPTY_TILE_ID)]
                if tileset.zero_is_empty:
                    ids = ids[ids != 0]

                if ids.size > 0 and int(ids.max()) >= tileset.number_of_tiles:
                    raise MalformedFormat(
                        f"Frame {frame_index}: tile id {int(ids.max())} outside tileset "
                        f"{tileset.tileset_id} of {tileset.number_of_tiles} tile(s)"
                    )

    def _validate_tags(self) -> None:
        if not self.document.tags:
            return

        last_frame = len(self.document.frames) - 1
        for tag in self.document.tags:
            if not (tag.from_frame <= tag.to_frame <= last_frame):
                raise MalformedFormat(
                    f"Tag '{tag.name}' range [{tag.from_frame}, {tag.to_frame}] "
                    f"outside frames 0-{last_frame}"
                )
