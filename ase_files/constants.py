"""
Aseprite file format constants.
"""

from enum import IntEnum, IntFlag


class AseFormat:
    HEADER_MAGIC = 0xA5E0
    FRAME_MAGIC = 0xF1FA
    HEADER_SIZE = 128
    FRAME_HEADER_SIZE = 16
    CHUNK_HEADER_SIZE = 6
    LAYER_UUID_SIZE = 16
    DEFAULT_NUMBER_OF_COLORS = 256
    EMPTY_TILE_ID = 0xFFFFFFFF


SUPPORTED_BITS_PER_PIXEL = (8, 16, 32)


class ChunkType(IntEnum):
    OLD_PALETTE_0 = 0x0004
    OLD_PALETTE_1 = 0x0011
    LAYER = 0x2004
    CEL = 0x2005
    CEL_EXTRA = 0x2006
    COLOR_PROFILE = 0x2007
    EXTERNAL_FILES = 0x2008
    MASK = 0x2016
    PATH = 0x2017
    TAGS = 0x2018
    PALETTE = 0x2019
    USER_DATA = 0x2020
    SLICE = 0x2022
    TILESET = 0x2023


class HeaderFlags(IntFlag):
    LAYER_OPACITY_VALID = 1
    GROUP_OPACITY_VALID = 2
    LAYERS_HAVE_UUID = 4


class LayerFlags(IntFlag):
    VISIBLE = 1
    EDITABLE = 2
    LOCK_MOVEMENT = 4
    BACKGROUND = 8
    PREFER_LINKED_CELS = 16
    COLLAPSED = 32
    REFERENCE = 64


class LayerType(IntEnum):
    NORMAL = 0
    GROUP = 1
    TILEMAP = 2


class BlendMode(IntEnum):
    NORMAL = 0
    MULTIPLY = 1
    SCREEN = 2
    OVERLAY = 3
    DARKEN = 4
    LIGHTEN = 5
    COLOR_DODGE = 6
    COLOR_BURN = 7
    HARD_LIGHT = 8
    SOFT_LIGHT = 9
    DIFFERENCE = 10
    EXCLUSION = 11
    HUE = 12
    SATURATION = 13
    COLOR = 14
    LUMINOSITY = 15
    ADDITION = 16
    SUBTRACT = 17
    DIVIDE = 18


class CelType(IntEnum):
    RAW_IMAGE = 0
    LINKED = 1
    COMPRESSED_IMAGE = 2
    COMPRESSED_TILEMAP = 3


class CelExtraFlags(IntFlag):
    PRECISE_BOUNDS = 1


class ColorProfileType(IntEnum):
    NONE = 0
    SRGB = 1
    ICC = 2


class ColorProfileFlags(IntFlag):
    FIXED_GAMMA = 1


class PaletteEntryFlags(IntFlag):
    HAS_NAME = 1


class LoopDirection(IntEnum):
    FORWARD = 0
    REVERSE = 1
    PING_PONG = 2
    PING_PONG_REVERSE = 3


class SliceFlags(IntFlag):
    NINE_SLICES = 1
    HAS_PIVOT = 2


class TilesetFlags(IntFlag):
    EXTERNAL_FILE_LINK = 1
    TILES_INSIDE_FILE = 2
    TILE_ID_ZERO_IS_EMPTY = 4


# Old palette chunks are superseded by the palette chunk and ignored.
IGNORED_CHUNK_TYPES = (ChunkType.OLD_PALETTE_0, ChunkType.OLD_PALETTE_1)
