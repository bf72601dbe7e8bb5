"""
Frame compositor: flattens the visible cels of one frame into an RGBA image.
"""

import math
import numpy as np
from typing import Dict

from data import DEBUG, RGBA_CHANNELS
from ase_files import (
    BlendMode,
    Cel,
    Document,
    LayerType,
    RawCelData,
    TilemapCelData,
    Tileset,
)

from .blend import blend_pixels
from .image import Image


def decode_pixels(
    document: Document,
    raw: np.ndarray,
    width: int,
    height: int,
    indexed_output: bool = False,
) -> np.ndarray:
    """Convert raw cel or tile bytes into RGBA pixels.

    8bpp pixels go through the palette, or keep the raw index in the red
    channel when indexed_output is set or no palette exists. The transparent
    index always gets alpha 0.

    Returns:
        uint8 array shaped (height, width, 4)
    """
    bits_per_pixel = document.header.bits_per_pixel
    raw = np.asarray(raw, dtype=np.uint8)

    if bits_per_pixel == 32:
        return raw.reshape(height, width, RGBA_CHANNELS).copy()

    if bits_per_pixel == 16:
        gray = raw.reshape(height, width, 2)
        value, alpha = gray[..., 0], gray[..., 1]
        return np.stack([value, value, value, alpha], axis=-1)

    indices = raw.reshape(height, width)
    palette = document.palette

    if indexed_output or palette is None:
        pixels = np.zeros((height, width, RGBA_CHANNELS), dtype=np.uint8)
        pixels[..., 0] = indices
        pixels[..., 3] = 255
    else:
        # Indices past the palette end decode to transparent black
        lookup = np.zeros((256, RGBA_CHANNELS), dtype=np.uint8)
        count = min(palette.size, 256)
        lookup[:count] = palette.colors[:count]
        pixels = lookup[indices]

    pixels[indices == document.header.transparent_index, 3] = 0
    return pixels


def resample_nearest(pixels: np.ndarray, scaled_width: float, scaled_height: float) -> np.ndarray:
    """
    Nearest neighbor scale of a (h, w, 4) block to a possibly fractional size.

    The result is ceil(scaled) pixels on each axis. Destination pixel i samples
    source pixel int(i / scale), and samples that land past the source edge are dropped.
    """
    source_height, source_width = pixels.shape[:2]
    width = math.ceil(scaled_width)
    height = math.ceil(scaled_height)
    if width <= 0 or height <= 0 or source_width == 0 or source_height == 0:
        return np.zeros((max(height, 0), max(width, 0), RGBA_CHANNELS), dtype=np.uint8)

    xs = (np.arange(width) / (scaled_width / source_width)).astype(int)
    ys = (np.arange(height) / (scaled_height / source_height)).astype(int)
    xs = xs[xs < source_width]
    ys = ys[ys < source_height]
    return pixels[ys[:, None], xs[None, :]]


def blit(
    canvas: np.ndarray,
    block: np.ndarray,
    x: int,
    y: int,
    opacity: int,
    blend_mode: BlendMode = BlendMode.NORMAL,
) -> None:
    """Blend block onto canvas at (x, y), discarding pixels outside the canvas."""
    canvas_height, canvas_width = canvas.shape[:2]
    block_height, block_width = block.shape[:2]

    left = max(x, 0)
    top = max(y, 0)
    right = min(x + block_width, canvas_width)
    bottom = min(y + block_height, canvas_height)

    if left >= right or top >= bottom:
        return

    source = block[top - y : bottom - y, left - x : right - x]
    target = canvas[top:bottom, left:right]
    canvas[top:bottom, left:right] = blend_pixels(target, source, opacity, blend_mode)


def _draw_raw_cel(
    document: Document,
    canvas: np.ndarray,
    cel: Cel,
    opacity: int,
    blend_mode: BlendMode,
    indexed_output: bool,
) -> None:
    data = cel.data
    block = decode_pixels(document, data.pixels, data.width, data.height, indexed_output)

    if cel.has_precise_bounds:
        block = resample_nearest(block, cel.scaled_width, cel.scaled_height)
        x, y = int(cel.precise_x), int(cel.precise_y)
    else:
        x, y = cel.x, cel.y

    blit(canvas, block, x, y, opacity, blend_mode)


def _draw_tilemap_cel(
    document: Document,
    canvas: np.ndarray,
    cel: Cel,
    tileset: Tileset,
    opacity: int,
    blend_mode: BlendMode,
    indexed_output: bool,
) -> None:
    # Flip and rotation bits are decoded but tiles are always drawn unrotated
    tile_ids, _, _, _ = cel.data.decode_tiles()
    decoded_tiles: Dict[int, np.ndarray] = {}

    for row in range(tile_ids.shape[0]):
        for col in range(tile_ids.shape[1]):
            tile_id = int(tile_ids[row, col])
            if tileset.is_empty_tile(tile_id):
                continue

            block = decoded_tiles.get(tile_id)
            if block is None:
                block = decode_pixels(
                    document,
                    tileset.tiles[tile_id],
                    tileset.tile_width,
                    tileset.tile_height,
                    indexed_output,
                )
                decoded_tiles[tile_id] = block

            blit(
                canvas,
                block,
                cel.x + col * tileset.tile_width,
                cel.y + row * tileset.tile_height,
                opacity,
                blend_mode,
            )


def composite(document: Document, frame_index: int, indexed_output: bool = False) -> Image:
    """Flatten one frame into a canvas sized RGBA image.

    Cels are drawn in file order (bottom to top). Hidden layers, zero opacity
    cels and group layers contribute nothing.

    Args:
        document: Parsed and validated document
        frame_index: Index of the frame to flatten
        indexed_output: Keep raw palette indices in the red channel (8bpp only)

    Returns:
        Image with offset (0, 0) and the canvas dimensions
    """
    header = document.header
    image = Image.blank(header.width, header.height)
    canvas = image.pixels

    for cel in document.frames[frame_index].cels:
        layer = document.layers[cel.layer_index]

        if layer.layer_type == LayerType.GROUP:
            continue

        if not document.is_layer_visible(cel.layer_index):
            continue

        opacity = layer.opacity if header.uses_layer_opacity else cel.opacity
        if opacity == 0:
            continue

        blend_mode = BlendMode.NORMAL if header.bits_per_pixel == 8 else layer.blend_mode

        source = document.resolve_cel(cel)
        if source.is_linked:
            # Links are a single hop
            continue

        if isinstance(source.data, RawCelData):
            _draw_raw_cel(document, canvas, source, opacity, blend_mode, indexed_output)
        elif isinstance(source.data, TilemapCelData):
            tileset = document.tileset_by_id(layer.tileset_index)
            _draw_tilemap_cel(
                document, canvas, source, tileset, opacity, blend_mode, indexed_output
            )

    if DEBUG:
        print(f"[DEBUG] Composited frame {frame_index} ({header.width}x{header.height})")

    return image
