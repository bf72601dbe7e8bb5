"""
Aseprite files module for decoding .ase/.aseprite documents.
"""

from .ase_io import read_ase
from .ase_parser import AseParser
from .document import (
    # Document classes
    Document,
    Header,
    Layer,
    Frame,
    Cel,
    RawCelData,
    LinkedCelData,
    TilemapCelData,
    Palette,
    Tag,
    Slice,
    SliceKey,
    Tileset,
    ColorProfile,
    ExternalFile,
)
from .constants import (
    AseFormat,
    SUPPORTED_BITS_PER_PIXEL,
    ChunkType,
    HeaderFlags,
    LayerFlags,
    LayerType,
    BlendMode,
    CelType,
    CelExtraFlags,
    ColorProfileFlags,
    ColorProfileType,
    LoopDirection,
    PaletteEntryFlags,
    SliceFlags,
    TilesetFlags,
)
from .errors import AseError, MalformedFormat, UnsupportedFeature

ASE_EXTENSIONS = (".ase", ".aseprite")

__all__ = [
    # IO functions
    "read_ase",
    "AseParser",
    "ASE_EXTENSIONS",
    # Document classes
    "Document",
    "Header",
    "Layer",
    "Frame",
    "Cel",
    "RawCelData",
    "LinkedCelData",
    "TilemapCelData",
    "Palette",
    "Tag",
    "Slice",
    "SliceKey",
    "Tileset",
    "ColorProfile",
    "ExternalFile",
    # Constants
    "AseFormat",
    "SUPPORTED_BITS_PER_PIXEL",
    "ChunkType",
    "HeaderFlags",
    "LayerFlags",
    "LayerType",
    "BlendMode",
    "CelType",
    "CelExtraFlags",
    "ColorProfileFlags",
    "ColorProfileType",
    "LoopDirection",
    "PaletteEntryFlags",
    "SliceFlags",
    "TilesetFlags",
    # Errors
    "AseError",
    "MalformedFormat",
    "UnsupportedFeature",
]
