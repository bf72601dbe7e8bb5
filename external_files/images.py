"""
PNG export of atlases, frames and palette strips.
"""

import numpy as np
from pathlib import Path
from typing import Sequence
from PIL import Image


def export_rgba_image(pixels: np.ndarray, img_path: Path) -> None:
    """Save a (height, width, 4) uint8 array as an RGBA PNG."""
    img = Image.fromarray(np.ascontiguousarray(pixels, dtype=np.uint8))
    img.save(img_path, "PNG")


def export_frame_images(images: Sequence, imgs_dir: Path) -> None:
    """Export composited frames as <index>.png.

    Args:
        images: Images with a pixels array, in frame order
        imgs_dir: Output directory for PNG image files
    """
    imgs_dir.mkdir(parents=True, exist_ok=True)

    for frame_idx, image in enumerate(images):
        export_rgba_image(image.pixels, imgs_dir / f"{frame_idx}.png")

    print(f"[OK] {len(images)} frame image(s) saved to: {imgs_dir}")
