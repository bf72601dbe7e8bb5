"""
Aseprite Atlas Generators Module

This module provides functions for turning documents into atlases and frames
"""

from .atlas_generator import (
    AtlasResult,
    SliceSprites,
    SpriteFrame,
    generate_atlas,
    generate_atlas_main,
    generate_palette_texture,
    ag_process_single,
    ag_process_multiple,
)

from .frames_extractor import (
    extract_frames,
    extract_frames_main,
    fe_process_single,
    fe_process_multiple,
)

from .options import ImportOptions

from .utils import validate_ase_input, load_import_options, find_ase_files

from .constants import CONFIG_FILE, PALETTE_TEXTURE_MODES

__all__ = [
    # Atlas Generator
    "AtlasResult",
    "SliceSprites",
    "SpriteFrame",
    "generate_atlas",
    "generate_atlas_main",
    "generate_palette_texture",
    "ag_process_single",
    "ag_process_multiple",
    # Frames Extractor
    "extract_frames",
    "extract_frames_main",
    "fe_process_single",
    "fe_process_multiple",
    # Options
    "ImportOptions",
    # Utils functions
    "validate_ase_input",
    "load_import_options",
    "find_ase_files",
    # Constants
    "CONFIG_FILE",
    "PALETTE_TEXTURE_MODES",
]
