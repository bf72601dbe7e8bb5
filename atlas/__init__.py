"""
Atlas module: rectangle packing and slice key baking.
"""

from .packer import pack, place_on_shelves
from .slices import apply_default_pivot, bake_slice_keys

__all__ = [
    # Packer
    "pack",
    "place_on_shelves",
    # Slices
    "apply_default_pivot",
    "bake_slice_keys",
]
