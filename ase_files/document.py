"""
Document data structures for representing decoded Aseprite files.

Cross references (cel -> layer, layer -> parent/children, linked cel -> source
cel) are stored as indices into the document's lists and are validated once by
the parser.
"""

import numpy as np
from typing import List, Optional, Tuple, Union
from dataclasses import dataclass, field

from .constants import (
    AseFormat,
    BlendMode,
    CelExtraFlags,
    CelType,
    ColorProfileFlags,
    ColorProfileType,
    HeaderFlags,
    LayerFlags,
    LayerType,
    LoopDirection,
    SliceFlags,
    TilesetFlags,
)


@dataclass
class Header:
    """Canvas-level metadata from the 128 byte file header."""

    file_size: int = 0
    frames: int = 0
    width: int = 0
    height: int = 0
    bits_per_pixel: int = 32
    flags: HeaderFlags = HeaderFlags(0)
    speed: int = 0
    transparent_index: int = 0
    number_of_colors: int = AseFormat.DEFAULT_NUMBER_OF_COLORS
    pixel_width: int = 1
    pixel_height: int = 1
    grid_x: int = 0
    grid_y: int = 0
    grid_width: int = 0
    grid_height: int = 0

    @property
    def uses_layer_opacity(self) -> bool:
        return bool(self.flags & HeaderFlags.LAYER_OPACITY_VALID)

    @property
    def bytes_per_pixel(self) -> int:
        return self.bits_per_pixel // 8


@dataclass
class Layer:
    """A drawable or group track. parent/children are layer indices."""

    flags: LayerFlags = LayerFlags.VISIBLE
    layer_type: LayerType = LayerType.NORMAL
    child_level: int = 0
    default_width: int = 0
    default_height: int = 0
    blend_mode: BlendMode = BlendMode.NORMAL
    opacity: int = 255
    name: str = ""
    tileset_index: int = 0
    uuid: bytes = b""
    parent: Optional[int] = None
    children: List[int] = field(default_factory=list)

    @property
    def visible_flag(self) -> bool:
        return bool(self.flags & LayerFlags.VISIBLE)


@dataclass
class RawCelData:
    """Uncompressed or inflated cel pixels, bits-per-pixel sized, row major."""

    width: int = 0
    height: int = 0
    pixels: np.ndarray = field(default_factory=lambda: np.array([], dtype=np.uint8))
    compressed: bool = False


@dataclass
class LinkedCelData:
    """Cel reusing the cel of the same layer on another frame.

    source_cel is the index of that cel within frames[frame_position].cels,
    filled in by reference resolution.
    """

    frame_position: int = 0
    source_cel: Optional[int] = None


@dataclass
class TilemapCelData:
    """Grid of tile references. tiles holds the inflated little-endian entries."""

    width: int = 0
    height: int = 0
    bits_per_tile: int = 32
    tile_id_mask: int = 0x1FFFFFFF
    x_flip_mask: int = 0x20000000
    y_flip_mask: int = 0x40000000
    rotation_mask: int = 0x80000000
    tiles: np.ndarray = field(default_factory=lambda: np.array([], dtype=np.uint8))

    def decode_entries(self) -> np.ndarray:
        """Assemble the raw tile entries, one unsigned value per grid slot.

        Returns:
            uint64 array shaped (height, width)
        """
        bytes_per_tile = self.bits_per_tile // 8
        if self.width * self.height == 0:
            return np.zeros((self.height, self.width), dtype=np.uint64)

        raw = self.tiles.reshape(-1, bytes_per_tile).astype(np.uint64)
        shifts = np.arange(bytes_per_tile, dtype=np.uint64) * np.uint64(8)
        values = np.bitwise_or.reduce(raw << shifts, axis=1)
        return values.reshape(self.height, self.width)

    def decode_tiles(self) -> Tuple[np.ndarray, np.ndarray, np.ndarray, np.ndarray]:
        """Split entries into (tile_ids, x_flips, y_flips, rotations)."""
        entries = self.decode_entries()
        tile_ids = entries & np.uint64(self.tile_id_mask)
        x_flips = (entries & np.uint64(self.x_flip_mask)) != 0
        y_flips = (entries & np.uint64(self.y_flip_mask)) != 0
        rotations = (entries & np.uint64(self.rotation_mask)) != 0
        return tile_ids, x_flips, y_flips, rotations


CelData = Union[RawCelData, LinkedCelData, TilemapCelData]


@dataclass
class Cel:
    """One layer's content on one frame."""

    layer_index: int = 0
    x: int = 0
    y: int = 0
    opacity: int = 255
    cel_type: CelType = CelType.RAW_IMAGE
    z_index: int = 0
    data: Optional[CelData] = None
    extra_flags: CelExtraFlags = CelExtraFlags(0)
    precise_x: float = 0.0
    precise_y: float = 0.0
    scaled_width: float = 0.0
    scaled_height: float = 0.0

    @property
    def has_precise_bounds(self) -> bool:
        return bool(self.extra_flags & CelExtraFlags.PRECISE_BOUNDS)

    @property
    def is_linked(self) -> bool:
        return self.cel_type == CelType.LINKED


@dataclass
class Frame:
    """One tick of the timeline. Cels are kept in file order."""

    duration: int = 0
    cels: List[Cel] = field(default_factory=list)
    skipped_chunks: List[int] = field(default_factory=list)


@dataclass
class Palette:
    """Indexed color table, colors shaped (size, 4) RGBA."""

    colors: np.ndarray = field(
        default_factory=lambda: np.zeros((0, 4), dtype=np.uint8)
    )
    names: List[Optional[str]] = field(default_factory=list)
    first_index: int = 0
    last_index: int = 0

    @property
    def size(self) -> int:
        return len(self.colors)


@dataclass
class Tag:
    """Named inclusive frame range."""

    from_frame: int = 0
    to_frame: int = 0
    direction: LoopDirection = LoopDirection.FORWARD
    repeat: int = 0
    name: str = ""

    @property
    def frame_count(self) -> int:
        return self.to_frame - self.from_frame + 1


@dataclass
class SliceKey:
    """Slice settings starting at a given frame."""

    frame: int = 0
    x: int = 0
    y: int = 0
    width: int = 0
    height: int = 0
    center_x: int = 0
    center_y: int = 0
    center_width: int = 0
    center_height: int = 0
    pivot_x: int = 0
    pivot_y: int = 0


@dataclass
class Slice:
    """Named sub rectangle, keyed per frame."""

    flags: SliceFlags = SliceFlags(0)
    name: str = ""
    keys: List[SliceKey] = field(default_factory=list)

    @property
    def is_nine_slice(self) -> bool:
        return bool(self.flags & SliceFlags.NINE_SLICES)

    @property
    def has_pivot(self) -> bool:
        return bool(self.flags & SliceFlags.HAS_PIVOT)


@dataclass
class Tileset:
    """Bank of fixed size tiles. tiles is shaped (number_of_tiles, bytes_per_tile)."""

    tileset_id: int = 0
    flags: TilesetFlags = TilesetFlags(0)
    number_of_tiles: int = 0
    tile_width: int = 0
    tile_height: int = 0
    base_index: int = 1
    name: str = ""
    external_file_id: int = 0
    external_tileset_id: int = 0
    tiles: Optional[np.ndarray] = None

    @property
    def zero_is_empty(self) -> bool:
        return bool(self.flags & TilesetFlags.TILE_ID_ZERO_IS_EMPTY)

    def is_empty_tile(self, tile_id: int) -> bool:
        return (self.zero_is_empty and tile_id == 0) or tile_id == AseFormat.EMPTY_TILE_ID


@dataclass
class ColorProfile:
    profile_type: ColorProfileType = ColorProfileType.NONE
    flags: ColorProfileFlags = ColorProfileFlags(0)
    gamma: float = 0.0
    icc_data: bytes = b""


@dataclass
class ExternalFile:
    entry_id: int = 0
    file_type: int = 0
    filename: str = ""


class Document:
    """One decoded file. Owns every layer, frame, cel, tileset and slice."""

    def __init__(self, header: Optional[Header] = None):
        self.header = header if header is not None else Header()
        self.frames: List[Frame] = []
        self.layers: List[Layer] = []
        self.palette: Optional[Palette] = None
        self.tags: Optional[List[Tag]] = None
        self.slices: List[Slice] = []
        self.tilesets: List[Tileset] = []
        self.color_profile: Optional[ColorProfile] = None
        self.external_files: List[ExternalFile] = []

    @property
    def root_layers(self) -> List[int]:
        return [i for i, layer in enumerate(self.layers) if layer.parent is None]

    def is_layer_visible(self, layer_index: int) -> bool:
        """Visible only if the layer and all of its ancestors are visible."""
        index: Optional[int] = layer_index
        while index is not None:
            layer = self.layers[index]
            if not layer.visible_flag:
                return False
            index = layer.parent
        return True

    def tileset_by_id(self, tileset_id: int) -> Optional[Tileset]:
        for tileset in self.tilesets:
            if tileset.tileset_id == tileset_id:
                return tileset
        return None

    def resolve_cel(self, cel: Cel) -> Cel:
        """Return the cel providing pixel data: the link target for linked cels."""
        if isinstance(cel.data, LinkedCelData) and cel.data.source_cel is not None:
            return self.frames[cel.data.frame_position].cels[cel.data.source_cel]
        return cel

    def find_cel(self, frame_index: int, layer_name: str) -> Optional[Cel]:
        for cel in self.frames[frame_index].cels:
            if self.layers[cel.layer_index].name == layer_name:
                return cel
        return None
