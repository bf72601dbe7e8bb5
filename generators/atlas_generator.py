"""
Build a packed sprite atlas, slice sprites and tags from an Aseprite document.
"""

import copy
import numpy as np
from pathlib import Path
from typing import Dict, List, Optional, Tuple
from dataclasses import dataclass, field

from ase_files import (
    Document,
    LoopDirection,
    Palette,
    Slice,
    SliceFlags,
    SliceKey,
    Tag,
)
from atlas import apply_default_pivot, bake_slice_keys, pack
from data import (
    DEBUG,
    RGBA_CHANNELS,
    SEPARATOR_LINE_LENGTH,
    Rect,
    validate_path_exists_and_is_dir,
)
from external_files import write_external_files
from rendering import Image, composite, strip_duplicate_images

from .constants import ATLAS_OUTPUT_SUFFIX, DEFAULT_SPRITE_GROUP
from .options import ImportOptions
from .utils import find_ase_files, load_import_options, validate_ase_input


CropKey = Tuple[int, Rect]


@dataclass
class SpriteFrame:
    """One sprite cut out of the atlas.

    pivot is normalized to the image, border is (left, bottom, right, top).
    """

    name: str = ""
    image_index: int = 0
    rect: Rect = Rect(0, 0, 0, 0)
    pivot: Tuple[float, float] = (0.5, 0.5)
    border: Tuple[int, int, int, int] = (0, 0, 0, 0)


@dataclass
class SliceSprites:
    """Sprites of one slice and which sprite each frame shows (-1 for none)."""

    name: str = ""
    keys: List[SliceKey] = field(default_factory=list)
    sprites: List[SpriteFrame] = field(default_factory=list)
    frame_sprites: List[int] = field(default_factory=list)


@dataclass
class AtlasResult:
    images: List[Image] = field(default_factory=list)
    image_remap: List[int] = field(default_factory=list)
    rects: List[Rect] = field(default_factory=list)
    atlas_size: Tuple[int, int] = (0, 0)
    atlas_pixels: np.ndarray = field(
        default_factory=lambda: np.zeros((0, 0, RGBA_CHANNELS), dtype=np.uint8)
    )
    slices: List[SliceSprites] = field(default_factory=list)
    tags: List[Tag] = field(default_factory=list)
    frame_durations: List[int] = field(default_factory=list)
    margin: int = 0
    palette: Optional[Palette] = None
    palette_texture: Optional[np.ndarray] = None


def _key_rect(key: SliceKey) -> Rect:
    return Rect(key.x, key.y, key.width, key.height)


def _import_slices(document: Document, options: ImportOptions) -> List[Slice]:
    """Slices to cut, copied so the document keeps its own keys."""
    if options.import_slices and document.slices:
        return copy.deepcopy(document.slices)

    header = document.header
    key = SliceKey(frame=0, x=0, y=0, width=header.width, height=header.height)
    return [Slice(flags=SliceFlags(0), name="", keys=[key])]


def _canvas_rect(image: Image, canvas_height: int, flipped: bool) -> Rect:
    y = canvas_height - image.y_offset - image.height if flipped else image.y_offset
    return Rect(image.x_offset, y, image.width, image.height)


def _fits_canvas(rect: Rect, canvas_size: Tuple[int, int]) -> bool:
    return rect.x >= 0 and rect.y >= 0 and rect.right <= canvas_size[0] and rect.bottom <= canvas_size[1]


def _place_images(
    images: List[Image],
    document: Document,
    options: ImportOptions,
    total_frames: int,
) -> Tuple[List[Rect], Tuple[int, int]]:
    header = document.header
    canvas_size = (header.width, header.height)

    if not images:
        return [], canvas_size

    if len(images) >= 2:
        if not (options.import_animation and total_frames >= 2) and not options.trim:
            rects = [
                _canvas_rect(image, header.height, options.flip_vertical) for image in images
            ]
            # Slices reaching past the canvas are packed instead
            if all(_fits_canvas(rect, canvas_size) for rect in rects):
                return rects, canvas_size

        sizes = [(image.width, image.height) for image in images]
        return pack(sizes, options.packing_margin)

    image = images[0]
    rect = _canvas_rect(image, header.height, options.flip_vertical)
    if options.trim or not _fits_canvas(rect, canvas_size):
        return [Rect(0, 0, image.width, image.height)], (image.width, image.height)

    return [rect], canvas_size


def _pack_images(images: List[Image], rects: List[Rect], atlas_size: Tuple[int, int]) -> np.ndarray:
    width, height = atlas_size
    atlas = np.zeros((height, width, RGBA_CHANNELS), dtype=np.uint8)

    for image, rect in zip(images, rects):
        atlas[rect.y : rect.y + image.height, rect.x : rect.x + image.width] = image.pixels

    return atlas


def _sprite_group_name(slice_: Slice, slice_index: int, slice_count: int) -> str:
    if slice_.name:
        return slice_.name
    if slice_count == 1 and len(slice_.keys) == 1:
        return DEFAULT_SPRITE_GROUP
    return f"Slice{slice_index}"


def _nine_slice_border(slice_: Slice, key: SliceKey) -> Tuple[int, int, int, int]:
    if not slice_.is_nine_slice:
        return (0, 0, 0, 0)

    left = key.center_x
    top = key.center_y
    right = key.width - (key.center_x + key.center_width)
    bottom = key.height - (key.center_y + key.center_height)
    return (left, bottom, right, top)


def _build_slice_sprites(
    slice_: Slice,
    group_name: str,
    crop_to_image: Dict[CropKey, int],
    result: AtlasResult,
    flipped: bool,
) -> SliceSprites:
    """One sprite per distinct (image, absolute pivot, border) of the baked keys."""
    slice_sprites = SliceSprites(name=group_name, keys=slice_.keys)
    sprite_lookup: Dict[tuple, int] = {}

    for key in slice_.keys:
        crop_key = (key.frame, _key_rect(key))
        if crop_key not in crop_to_image:
            slice_sprites.frame_sprites.append(-1)
            continue

        image_index = result.image_remap[crop_to_image[crop_key]]
        pivot = (key.x + key.pivot_x, key.y + key.pivot_y)
        border = _nine_slice_border(slice_, key)
        sprite_key = (image_index, pivot, border)

        if sprite_key not in sprite_lookup:
            image = result.images[image_index]

            pivot_x = (pivot[0] - max(key.x, image.x_offset)) / image.width
            pivot_y = (pivot[1] - max(key.y, image.y_offset)) / image.height
            if flipped:
                pivot_y = 1.0 - pivot_y

            sprite_lookup[sprite_key] = len(slice_sprites.sprites)
            slice_sprites.sprites.append(
                SpriteFrame(
                    name=group_name,
                    image_index=image_index,
                    rect=result.rects[image_index],
                    pivot=(pivot_x, pivot_y),
                    border=border,
                )
            )

        slice_sprites.frame_sprites.append(sprite_lookup[sprite_key])

    if len(slice_sprites.sprites) >= 2:
        for index, sprite in enumerate(slice_sprites.sprites):
            sprite.name = f"{group_name} ({1 + index})"

    return slice_sprites


def _import_tags(document: Document, options: ImportOptions) -> List[Tag]:
    if not options.import_animation:
        return []

    if document.tags is None:
        if len(document.frames) >= 2:
            return [Tag(0, len(document.frames) - 1, LoopDirection.FORWARD, 0, "")]
        return []

    return list(document.tags)


def generate_palette_texture(palette: Palette, vertical: bool = False) -> np.ndarray:
    """Palette colors as a 1 pixel strip, shaped (1, n, 4) or (n, 1, 4)."""
    colors = np.asarray(palette.colors, dtype=np.uint8)
    if vertical:
        return colors.reshape(len(colors), 1, RGBA_CHANNELS).copy()
    return colors.reshape(1, len(colors), RGBA_CHANNELS).copy()


def generate_atlas(document: Document, options: Optional[ImportOptions] = None) -> AtlasResult:
    """Cut slices out of every frame and pack them into one atlas.

    Args:
        document: Parsed document
        options: Import options, defaults when omitted

    Returns:
        AtlasResult with images, placement, atlas pixels and sprite records
    """
    if options is None:
        options = ImportOptions()

    header = document.header
    indexed = options.import_index and header.bits_per_pixel == 8
    total_frames = len(document.frames) if options.import_animation else 1

    result = AtlasResult(margin=options.packing_margin)

    if document.palette is not None and options.palette_texture != "none":
        result.palette = document.palette
        result.palette_texture = generate_palette_texture(
            document.palette, vertical=options.palette_texture == "vertical"
        )

    slices = _import_slices(document, options)
    crop_to_image: Dict[CropKey, int] = {}

    for slice_ in slices:
        apply_default_pivot(slice_, options.pivot)
        slice_.keys = bake_slice_keys(slice_.keys, total_frames)

        for key in slice_.keys:
            rect = _key_rect(key)
            if rect.is_empty():
                continue
            crop_to_image.setdefault((key.frame, rect), len(crop_to_image))

    frame_cache: Dict[int, Image] = {}
    images: List[Image] = []

    for frame_index, rect in crop_to_image:
        if frame_index not in frame_cache:
            frame_cache[frame_index] = composite(document, frame_index, indexed)
        frame_image = frame_cache[frame_index]

        image = frame_image.crop(rect)
        if options.trim:
            image = image.trim()

        if options.flip_vertical:
            if image is frame_image:
                image = image.copy()
            image.flip_vertical()

        images.append(image)

    result.image_remap = list(range(len(images)))
    if options.optimize_frames:
        images, result.image_remap = strip_duplicate_images(images)
        if DEBUG:
            print(f"[DEBUG] {len(result.image_remap)} image(s) reduced to {len(images)}")

    result.images = images
    if not options.trim and len(document.frames) == 1 and options.single_frame_as_canvas:
        result.atlas_size = (header.width, header.height)
        result.rects = [
            _canvas_rect(image, header.height, options.flip_vertical) for image in images
        ]
        frame_image = frame_cache.get(0) or composite(document, 0, indexed)
        pixels = frame_image.pixels.copy()
        if options.flip_vertical:
            pixels = pixels[::-1].copy()
        result.atlas_pixels = pixels
    else:
        result.rects, result.atlas_size = _place_images(images, document, options, total_frames)
        result.atlas_pixels = _pack_images(images, result.rects, result.atlas_size)

    for slice_index, slice_ in enumerate(slices):
        group_name = _sprite_group_name(slice_, slice_index, len(slices))
        result.slices.append(
            _build_slice_sprites(
                slice_, group_name, crop_to_image, result, options.flip_vertical
            )
        )

    result.tags = _import_tags(document, options)
    result.frame_durations = [frame.duration for frame in document.frames[:total_frames]]

    return result


def generate_atlas_main(data) -> Path:
    """Generate and write the atlas of one document.

    Args:
        data: Tuple containing (document, options, ase_path, output_dir)
    """
    document, options, ase_path, output_dir = data

    print("[START] Generating atlas...")

    result = generate_atlas(document, options)

    print(
        f"[INFO] {len(result.images)} image(s) packed into "
        f"{result.atlas_size[0]}x{result.atlas_size[1]} atlas"
    )

    write_external_files(result, output_dir, ase_path.stem)

    print(f"\n[OK] Atlas generated successfully at: {output_dir}")
    return output_dir


def ag_process_single(ase_path: Path, output_dir: Optional[Path] = None) -> bool:
    """Process a single .ase/.aseprite file.

    Options are read from a config.json next to the file when present.

    Args:
        ase_path: Path to the document
        output_dir: Output folder, defaults to <name>_atlas beside the document

    Returns:
        True if successful, False otherwise
    """
    if not ase_path.exists():
        print(f"[ERROR] Path does not exist: {ase_path}")
        return False

    print("=" * SEPARATOR_LINE_LENGTH)
    print(f"[INFO] Processing file: {ase_path}")
    print("=" * SEPARATOR_LINE_LENGTH)
    print()

    if output_dir is None:
        output_dir = ase_path.parent / f"{ase_path.stem}{ATLAS_OUTPUT_SUFFIX}"

    try:
        options = load_import_options(ase_path.parent)
        document = validate_ase_input(ase_path)

        data = (document, options, ase_path, output_dir)
        generate_atlas_main(data)

        return True

    except Exception as e:
        print(f"[ERROR] Error during processing: {str(e)}")
        return False


def ag_process_multiple(parent_folder: Path) -> None:
    """Process every .ase/.aseprite file in a folder.

    Args:
        parent_folder: Folder containing the documents
    """
    if not validate_path_exists_and_is_dir(parent_folder, "Parent folder"):
        return

    items = find_ase_files(parent_folder)

    if not items:
        print(f"[ERROR] No Aseprite files found in: {parent_folder}")
        return

    print("=" * SEPARATOR_LINE_LENGTH)
    print(f"[INFO] Found {len(items)} item(s) to process")
    print("=" * SEPARATOR_LINE_LENGTH)
    print()

    success_count = 0
    failed_items = []

    for idx, item_path in enumerate(items):
        if idx > 0:
            print()

        if ag_process_single(item_path):
            success_count += 1
        else:
            failed_items.append(item_path.name)

    print()
    print("=" * SEPARATOR_LINE_LENGTH)
    print("[SUMMARY] PROCESSING SUMMARY")
    print("=" * SEPARATOR_LINE_LENGTH)
    print(f"[INFO] Total: {len(items)}")
    print(f"[INFO] Successful: {success_count}")
    print(f"[INFO] Failed: {len(failed_items)}")

    if failed_items:
        print("\n[ERROR] Failed items:")
        for item in failed_items:
            print(f"   • {item}")

    print("=" * SEPARATOR_LINE_LENGTH)
