"""
Flat RGBA raster produced by compositing and consumed by the atlas packer.
"""

import numpy as np
from dataclasses import dataclass, field

from data import Rect, RGBA_CHANNELS


@dataclass
class Image:
    """RGBA8 pixels shaped (height, width, 4) placed at an offset in the canvas."""

    pixels: np.ndarray = field(
        default_factory=lambda: np.zeros((0, 0, RGBA_CHANNELS), dtype=np.uint8)
    )
    x_offset: int = 0
    y_offset: int = 0

    @classmethod
    def blank(cls, width: int, height: int, x_offset: int = 0, y_offset: int = 0) -> "Image":
        pixels = np.zeros((height, width, RGBA_CHANNELS), dtype=np.uint8)
        return cls(pixels, x_offset, y_offset)

    @property
    def width(self) -> int:
        return self.pixels.shape[1]

    @property
    def height(self) -> int:
        return self.pixels.shape[0]

    @property
    def rect(self) -> Rect:
        return Rect(self.x_offset, self.y_offset, self.width, self.height)

    def crop(self, rect: Rect) -> "Image":
        """Cut out rect, given in canvas coordinates.

        Returns self when rect already covers exactly this image. Parts of
        rect outside the image are transparent.
        """
        if rect == self.rect:
            return self

        cropped = Image.blank(max(rect.width, 0), max(rect.height, 0), rect.x, rect.y)

        left = max(rect.x, self.x_offset)
        top = max(rect.y, self.y_offset)
        right = min(rect.right, self.x_offset + self.width)
        bottom = min(rect.bottom, self.y_offset + self.height)

        if left < right and top < bottom:
            cropped.pixels[
                top - rect.y : bottom - rect.y, left - rect.x : right - rect.x
            ] = self.pixels[
                top - self.y_offset : bottom - self.y_offset,
                left - self.x_offset : right - self.x_offset,
            ]

        return cropped

    def flip_vertical(self) -> None:
        self.pixels[:] = self.pixels[::-1].copy()

    def opaque_bounds(self) -> Rect:
        """Bounding box of pixels with alpha > 0, in canvas coordinates.

        An image without any visible pixel yields a 1x1 rect at its offset.
        """
        visible = self.pixels[..., 3] > 0
        rows = np.flatnonzero(visible.any(axis=1))
        cols = np.flatnonzero(visible.any(axis=0))

        if len(rows) == 0:
            return Rect(self.x_offset, self.y_offset, 1, 1)

        return Rect(
            self.x_offset + int(cols[0]),
            self.y_offset + int(rows[0]),
            int(cols[-1] - cols[0]) + 1,
            int(rows[-1] - rows[0]) + 1,
        )

    def trim(self) -> "Image":
        return self.crop(self.opaque_bounds())

    def equals(self, other: "Image") -> bool:
        return (
            self.x_offset == other.x_offset
            and self.y_offset == other.y_offset
            and self.pixels.shape == other.pixels.shape
            and np.array_equal(self.pixels, other.pixels)
        )

    def copy(self) -> "Image":
        return Image(self.pixels.copy(), self.x_offset, self.y_offset)
