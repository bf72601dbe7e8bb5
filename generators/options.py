"""
Import options shared by the atlas and frame generators.
"""

from dataclasses import dataclass, fields
from typing import Any, Dict, Optional, Tuple

from data import DEFAULT_PACKING_MARGIN, DEFAULT_PIVOT

from .constants import PALETTE_TEXTURE_MODES


@dataclass
class ImportOptions:
    """Settings controlling how a document becomes an atlas.

    import_index keeps raw palette indices (8bpp documents only), trim crops
    transparent borders, optimize_frames drops duplicate images and
    single_frame_as_canvas uses the whole composited frame as the atlas of an
    untrimmed single frame document.
    """

    import_animation: bool = True
    import_slices: bool = True
    import_index: bool = False
    trim: bool = False
    optimize_frames: bool = False
    packing_margin: int = DEFAULT_PACKING_MARGIN
    pivot: Tuple[float, float] = DEFAULT_PIVOT
    single_frame_as_canvas: bool = True
    flip_vertical: bool = True
    palette_texture: str = "none"

    def __post_init__(self):
        for option in fields(self):
            if option.type is bool and not isinstance(getattr(self, option.name), bool):
                raise ValueError(
                    f"Option '{option.name}' must be true or false, "
                    f"got {getattr(self, option.name)!r}"
                )

        if (
            not isinstance(self.packing_margin, int)
            or isinstance(self.packing_margin, bool)
            or self.packing_margin < 0
        ):
            raise ValueError(
                f"Option 'packing_margin' must be a non-negative integer, got {self.packing_margin!r}"
            )

        try:
            pivot_x, pivot_y = self.pivot
            self.pivot = (float(pivot_x), float(pivot_y))
        except (TypeError, ValueError):
            raise ValueError(
                f"Option 'pivot' must be a pair of numbers, got {self.pivot!r}"
            ) from None

        if self.palette_texture not in PALETTE_TEXTURE_MODES:
            raise ValueError(
                f"Option 'palette_texture' must be one of {', '.join(PALETTE_TEXTURE_MODES)}, "
                f"got {self.palette_texture!r}"
            )

    @classmethod
    def from_dict(cls, config: Optional[Dict[str, Any]]) -> "ImportOptions":
        """Build options from a config.json dictionary. Unknown keys are ignored."""
        if not config:
            return cls()

        known = {option.name for option in fields(cls)}
        values = {key: value for key, value in config.items() if key in known}
        return cls(**values)

    def to_dict(self) -> Dict[str, Any]:
        values = {option.name: getattr(self, option.name) for option in fields(self)}
        values["pivot"] = list(self.pivot)
        return values
