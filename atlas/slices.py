"""
Per-frame slice keys.
"""

from dataclasses import replace
from typing import List, Sequence, Tuple

from ase_files import Slice, SliceFlags, SliceKey


def apply_default_pivot(slice_: Slice, pivot: Tuple[float, float]) -> None:
    """Give a slice without an explicit pivot one at pivot * key size."""
    if slice_.has_pivot:
        return

    slice_.flags |= SliceFlags.HAS_PIVOT
    for key in slice_.keys:
        key.pivot_x = int(pivot[0] * key.width)
        key.pivot_y = int(pivot[1] * key.height)


def bake_slice_keys(keys: Sequence[SliceKey], total_frames: int) -> List[SliceKey]:
    """Expand keys into one key per frame.

    A key applies from its frame until the next key takes over. Frames before
    the first key get an empty key.
    """
    baked = [SliceKey(frame=index) for index in range(total_frames)]

    for key in keys:
        for index in range(key.frame, total_frames):
            baked[index] = replace(key, frame=index)

    return baked
