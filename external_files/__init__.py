"""
External files utility module for writing atlas images, JSON and palette files.
"""

from .files_io import write_external_files
from .images import export_frame_images, export_rgba_image
from .palette import write_palette, write_palette_texture
from .atlas_json import build_atlas_json, write_atlas_json
from .constants import ExternalFiles

__all__ = [
    "write_external_files",
    "export_frame_images",
    "export_rgba_image",
    "write_palette",
    "write_palette_texture",
    "build_atlas_json",
    "write_atlas_json",
    "ExternalFiles",
]
