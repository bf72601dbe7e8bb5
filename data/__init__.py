"""
Core configuration, constants, and utils
"""

from .config import (
    DEBUG,
    CURRENT_VERSION,
)

from .utils import (
    read_uint32,
    read_uint16,
    read_uint8,
    read_int16,
    read_int32,
    read_fixed,
    read_string,
    read_bytes,
    inflate,
    write_uint32,
    write_uint16,
    write_uint8,
    write_int16,
    write_int32,
    write_fixed,
    write_string,
    read_file_to_bytes,
    write_bytes_to_file,
    pad_bytes,
    read_json_file,
    write_json_file,
    validate_path_exists_and_is_dir,
)

from .constants import (
    SEPARATOR_LINE_LENGTH,
    RGBA_CHANNELS,
    DEFAULT_PIVOT,
    DEFAULT_PACKING_MARGIN,
)

from .geometry import Rect

__all__ = [
    # Config
    "DEBUG",
    "CURRENT_VERSION",
    # Utils
    "read_uint32",
    "read_uint16",
    "read_uint8",
    "read_int16",
    "read_int32",
    "read_fixed",
    "read_string",
    "read_bytes",
    "inflate",
    "write_uint32",
    "write_uint16",
    "write_uint8",
    "write_int16",
    "write_int32",
    "write_fixed",
    "write_string",
    "read_file_to_bytes",
    "write_bytes_to_file",
    "pad_bytes",
    "read_json_file",
    "write_json_file",
    "validate_path_exists_and_is_dir",
    # Constants
    "SEPARATOR_LINE_LENGTH",
    "RGBA_CHANNELS",
    "DEFAULT_PIVOT",
    "DEFAULT_PACKING_MARGIN",
    # Geometry
    "Rect",
]
