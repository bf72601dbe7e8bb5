"""
Atlas metadata JSON: placement, sprites per slice and animation tags.
"""

from pathlib import Path
from typing import Any, Dict, List

from data import CURRENT_VERSION, write_json_file

from .constants import DEFAULT_ANIMATION_NAME, ExternalFiles


def _rect_to_dict(rect) -> Dict[str, int]:
    return {"x": rect.x, "y": rect.y, "width": rect.width, "height": rect.height}


def _tags_to_list(result) -> List[Dict[str, Any]]:
    tags = []

    for tag_index, tag in enumerate(result.tags):
        frames = [
            {"frame": frame_index, "duration": result.frame_durations[frame_index]}
            for frame_index in range(tag.from_frame, tag.to_frame + 1)
            if frame_index < len(result.frame_durations)
        ]
        tags.append(
            {
                "name": tag.name or f"{DEFAULT_ANIMATION_NAME} {1 + tag_index}",
                "from": tag.from_frame,
                "to": tag.to_frame,
                "direction": tag.direction.name.lower(),
                "repeat": tag.repeat,
                "frames": frames,
            }
        )

    return tags


def build_atlas_json(result, name: str) -> Dict[str, Any]:
    """Describe an AtlasResult as plain JSON data.

    Args:
        result: AtlasResult from generate_atlas
        name: Base name of the written files
    """
    width, height = result.atlas_size

    images = []
    for image, rect in zip(result.images, result.rects):
        entry = _rect_to_dict(rect)
        entry["x_offset"] = image.x_offset
        entry["y_offset"] = image.y_offset
        images.append(entry)

    slices = []
    for slice_sprites in result.slices:
        slices.append(
            {
                "name": slice_sprites.name,
                "sprites": [
                    {
                        "name": sprite.name,
                        "image": sprite.image_index,
                        "rect": _rect_to_dict(sprite.rect),
                        "pivot": list(sprite.pivot),
                        "border": list(sprite.border),
                    }
                    for sprite in slice_sprites.sprites
                ],
                "frames": list(slice_sprites.frame_sprites),
            }
        )

    return {
        "version": CURRENT_VERSION,
        "atlas": {
            "image": f"{name}{ExternalFiles.ATLAS_IMAGE_SUFFIX}",
            "width": width,
            "height": height,
            "margin": result.margin,
        },
        "images": images,
        "image_remap": list(result.image_remap),
        "slices": slices,
        "tags": _tags_to_list(result),
    }


def write_atlas_json(result, name: str, output_path: Path) -> None:
    write_json_file(output_path, build_atlas_json(result, name))
