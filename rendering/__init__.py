"""
Rendering module: blend modes, RGBA images, frame compositing and dedup.
"""

from .blend import (
    blend_normal,
    blend_pixels,
    blend_multiply,
    blend_screen,
    blend_overlay,
    blend_hard_light,
    blend_soft_light,
    blend_difference,
    blend_exclusion,
    blend_hue,
    blend_saturation,
    blend_color,
    blend_luminosity,
)
from .image import Image
from .compositor import composite, decode_pixels, blit
from .dedup import strip_duplicate_images, image_hash

__all__ = [
    # Blend functions
    "blend_normal",
    "blend_pixels",
    "blend_multiply",
    "blend_screen",
    "blend_overlay",
    "blend_hard_light",
    "blend_soft_light",
    "blend_difference",
    "blend_exclusion",
    "blend_hue",
    "blend_saturation",
    "blend_color",
    "blend_luminosity",
    # Image
    "Image",
    # Compositor
    "composite",
    "decode_pixels",
    "blit",
    # Dedup
    "strip_duplicate_images",
    "image_hash",
]
