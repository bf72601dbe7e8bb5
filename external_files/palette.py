"""
JASC-PAL palette and palette texture writing functions.
"""

import numpy as np
from pathlib import Path
from ase_files import Palette
from data import write_bytes_to_file

from .constants import JASC_PAL_HEADER, JASC_PAL_VERSION
from .images import export_rgba_image


def write_palette(palette: Palette, output_path: Path) -> None:
    """Export palette to JASC-PAL format, alpha included.

    Args:
        palette: Document palette
        output_path: Path to output palette file
    """
    colors = np.asarray(palette.colors, dtype=np.uint8)

    lines = [JASC_PAL_HEADER, JASC_PAL_VERSION, str(len(colors))]
    for r, g, b, a in colors:
        lines.append(f"{r} {g} {b} {a}")

    content = "\n".join(lines) + "\n"
    write_bytes_to_file(output_path, content.encode("ascii"))


def write_palette_texture(texture: np.ndarray, output_path: Path) -> None:
    """Export a palette strip, one pixel per color."""
    export_rgba_image(texture, output_path)
