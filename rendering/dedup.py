"""
Exact duplicate elimination for composited images.
"""

import numpy as np
import xxhash
from typing import Dict, List, Sequence, Tuple

from .image import Image


def image_hash(image: Image) -> int:
    """64-bit hash over offset, size and pixels."""
    hash_obj = xxhash.xxh3_64()
    hash_obj.update(
        np.asarray(
            [image.x_offset, image.y_offset, image.width, image.height], dtype=np.int32
        ).tobytes()
    )
    hash_obj.update(np.ascontiguousarray(image.pixels).tobytes())
    return hash_obj.intdigest()


def strip_duplicate_images(images: Sequence[Image]) -> Tuple[List[Image], List[int]]:
    """Keep the first occurrence of every distinct image.

    Images must run in document order so later duplicates map to earlier
    representatives.

    Returns:
        Tuple of (unique images, remap) where remap[i] is the index in the
        unique list standing in for images[i]
    """
    unique: List[Image] = []
    remap: List[int] = []
    buckets: Dict[int, List[int]] = {}

    for image in images:
        candidates = buckets.setdefault(image_hash(image), [])

        for unique_index in candidates:
            if unique[unique_index].equals(image):
                remap.append(unique_index)
                break
        else:
            candidates.append(len(unique))
            remap.append(len(unique))
            unique.append(image)

    return unique, remap
