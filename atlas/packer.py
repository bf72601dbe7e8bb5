"""
Square atlas packing.

The atlas side is found by binary search; each candidate side is tried with
a next-fit decreasing-height shelf placement, which never fits worse on a
bigger square.
"""

from typing import List, Optional, Sequence, Tuple

from data import DEBUG, Rect


Size = Tuple[int, int]


def place_on_shelves(sizes: Sequence[Size], side: int, margin: int = 0) -> Optional[List[Rect]]:
    """Place every size inside a side x side square.

    Each image occupies a cell of (width + margin) x (height + margin).
    Images are laid out tallest first, left to right, opening a new shelf
    when the current one is full.

    Returns:
        Rects in input order (image sized, at the cell origin), or None if
        the images do not fit
    """
    order = sorted(range(len(sizes)), key=lambda i: (-sizes[i][1], -sizes[i][0], i))
    rects: List[Optional[Rect]] = [None] * len(sizes)

    x = y = shelf_height = 0

    for index in order:
        width, height = sizes[index]
        cell_width = width + margin
        cell_height = height + margin

        if cell_width > side or cell_height > side:
            return None

        if x + cell_width > side:
            y += shelf_height
            x = 0
            shelf_height = 0

        if y + cell_height > side:
            return None

        rects[index] = Rect(x, y, width, height)
        x += cell_width
        shelf_height = max(shelf_height, cell_height)

    return rects


def _fits(rects: Optional[List[Rect]]) -> bool:
    # A zero sized first rect counts as a failed placement
    return rects is not None and (not rects or not rects[0].is_empty())


def pack(sizes: Sequence[Size], margin: int = 0) -> Tuple[List[Rect], Size]:
    """Pack image sizes into the smallest square found by binary search.

    Args:
        sizes: (width, height) per image
        margin: Pixels kept between neighbouring images

    Returns:
        Tuple of (rects in input order, (atlas_width, atlas_height))
    """
    if not sizes:
        return [], (0, 0)

    if len(sizes) == 1:
        width, height = sizes[0]
        return [Rect(0, 0, width, height)], (width, height)

    low = 0
    high = max(
        sum(width + margin for width, _ in sizes),
        sum(height + margin for _, height in sizes),
    )
    best: Optional[List[Rect]] = None

    while high - low > 1:
        mid = (high - low) // 2 + low
        rects = place_on_shelves(sizes, mid, margin)

        if _fits(rects):
            high = mid
            best = rects
        else:
            low = mid

    if best is None:
        # Every image side by side always fits the upper bound
        best = place_on_shelves(sizes, high, margin)

    if DEBUG:
        print(f"[DEBUG] Packed {len(sizes)} image(s) into a {high}x{high} square")

    if margin >= 2:
        best = [rect.offset(margin // 2, margin // 2) for rect in best]

    atlas_width = max(rect.right for rect in best) + margin
    atlas_height = max(rect.bottom for rect in best) + margin

    return best, (atlas_width, atlas_height)
