"""Tests for the atlas pipeline, import options and written files."""

import sys
from pathlib import Path

import numpy as np
import pytest
from PIL import Image

script_dir = Path(__file__).parent
if str(script_dir.parent) not in sys.path:
    sys.path.insert(0, str(script_dir.parent))

from ase_files import LoopDirection, read_ase
from data import read_json_file, write_bytes_to_file, write_json_file
from generators import (
    ImportOptions,
    ag_process_multiple,
    ag_process_single,
    extract_frames,
    fe_process_single,
    generate_atlas,
)
from utils import (
    build_ase,
    layer_chunk,
    linked_cel_chunk,
    palette_chunk,
    raw_cel_chunk,
    rgba_bytes,
    slice_chunk,
    tags_chunk,
)

RED = (255, 0, 0, 255)
GREEN = (0, 255, 0, 255)
CLEAR = (0, 0, 0, 0)


def _two_frame_document(second=GREEN):
    frames = [
        [layer_chunk("a"), raw_cel_chunk(0, 1, 1, rgba_bytes([RED]), x=1, y=1)],
        [raw_cel_chunk(0, 1, 1, rgba_bytes([second]), x=2, y=1)],
    ]
    return read_ase(build_ase(4, 3, frames, durations=[100, 150]))


def _atlas_region(result, index):
    rect = result.rects[index]
    return result.atlas_pixels[rect.y : rect.bottom, rect.x : rect.right]


# Options


def test_options_from_dict_ignores_unknown_keys():
    options = ImportOptions.from_dict({"trim": True, "pivot": [0, 1], "unused": 3})
    assert options.trim
    assert options.pivot == (0.0, 1.0)


def test_options_reject_invalid_values():
    with pytest.raises(ValueError):
        ImportOptions.from_dict({"packing_margin": -1})
    with pytest.raises(ValueError):
        ImportOptions.from_dict({"trim": "yes"})
    with pytest.raises(ValueError):
        ImportOptions.from_dict({"palette_texture": "diagonal"})


def test_options_round_trip_dict():
    options = ImportOptions(optimize_frames=True, packing_margin=2)
    assert ImportOptions.from_dict(options.to_dict()) == options


# Pipeline


def test_single_frame_atlas_is_whole_canvas():
    frames = [[layer_chunk("a"), raw_cel_chunk(0, 1, 1, rgba_bytes([RED]), x=0, y=0)]]
    document = read_ase(build_ase(2, 2, frames))
    result = generate_atlas(document)

    assert result.atlas_size == (2, 2)
    # Flipped: the top row ends up last
    assert result.atlas_pixels[1, 0].tolist() == list(RED)
    assert result.atlas_pixels[0, 0, 3] == 0

    sprite = result.slices[0].sprites[0]
    assert result.slices[0].name == "Sprite"
    assert sprite.pivot == (0.5, 0.5)
    assert result.tags == []


def test_animated_frames_are_packed():
    result = generate_atlas(_two_frame_document())

    assert len(result.images) == 2
    assert result.frame_durations == [100, 150]
    assert len(result.tags) == 1
    assert (result.tags[0].from_frame, result.tags[0].to_frame) == (0, 1)

    for index, image in enumerate(result.images):
        assert np.array_equal(_atlas_region(result, index), image.pixels)

    assert not result.rects[0].overlaps(result.rects[1])


def test_optimize_frames_drops_duplicates():
    frames = [
        [layer_chunk("a"), raw_cel_chunk(0, 1, 1, rgba_bytes([RED]))],
        [linked_cel_chunk(0, 0)],
        [raw_cel_chunk(0, 1, 1, rgba_bytes([GREEN]))],
    ]
    document = read_ase(build_ase(2, 2, frames))
    result = generate_atlas(document, ImportOptions(optimize_frames=True))

    assert result.image_remap == [0, 0, 1]
    assert len(result.images) == 2
    assert result.slices[0].frame_sprites == [0, 0, 1]


def test_trim_packs_opaque_bounds():
    result = generate_atlas(_two_frame_document(), ImportOptions(trim=True, flip_vertical=False))

    assert [image.rect for image in result.images] == [
        (1, 1, 1, 1),
        (2, 1, 1, 1),
    ]
    assert _atlas_region(result, 1)[0, 0].tolist() == list(GREEN)


def test_static_import_uses_first_frame():
    result = generate_atlas(_two_frame_document(), ImportOptions(import_animation=False))

    assert len(result.images) == 1
    assert result.tags == []
    assert result.atlas_size == (4, 3)


def test_slices_cut_and_bake():
    frames = [
        [
            layer_chunk("a"),
            raw_cel_chunk(0, 2, 2, rgba_bytes([RED] * 4)),
            slice_chunk("body", [(0, 0, 0, 2, 2), (1, 1, 1, 2, 2)]),
        ],
        [raw_cel_chunk(0, 2, 2, rgba_bytes([GREEN] * 4), x=1, y=1)],
    ]
    document = read_ase(build_ase(4, 4, frames))
    result = generate_atlas(document, ImportOptions(flip_vertical=False))

    body = result.slices[0]
    assert body.name == "body"
    assert [key.x for key in body.keys] == [0, 1]
    assert len(body.sprites) == 2
    assert body.sprites[0].name == "body (1)"
    assert np.all(result.images[1].pixels == np.array(GREEN, dtype=np.uint8))


def _overhanging_slices_document(slices):
    frames = [
        [layer_chunk("a"), raw_cel_chunk(0, 4, 4, rgba_bytes([RED] * 16))] + slices,
        [raw_cel_chunk(0, 4, 4, rgba_bytes([GREEN] * 16))],
    ]
    return read_ase(build_ase(4, 4, frames))


@pytest.mark.parametrize("flip_vertical", [True, False])
def test_static_slices_past_canvas_are_packed(flip_vertical):
    slices = [slice_chunk("a", [(0, 0, 0, 2, 2)]), slice_chunk("b", [(0, 3, 3, 3, 3)])]
    document = _overhanging_slices_document(slices)
    result = generate_atlas(
        document, ImportOptions(import_animation=False, flip_vertical=flip_vertical)
    )

    width, height = result.atlas_size
    assert len(result.images) == 2
    for index, image in enumerate(result.images):
        rect = result.rects[index]
        assert rect.x >= 0 and rect.y >= 0
        assert rect.right <= width and rect.bottom <= height
        assert np.array_equal(_atlas_region(result, index), image.pixels)


def test_static_single_slice_past_canvas():
    document = _overhanging_slices_document([slice_chunk("b", [(0, 3, 3, 3, 3)])])
    result = generate_atlas(document, ImportOptions(import_animation=False))

    assert result.atlas_size == (3, 3)
    assert result.rects == [(0, 0, 3, 3)]
    assert np.array_equal(result.atlas_pixels, result.images[0].pixels)


def test_static_slices_inside_canvas_keep_positions():
    slices = [slice_chunk("a", [(0, 0, 0, 2, 2)]), slice_chunk("b", [(0, 2, 2, 2, 2)])]
    document = _overhanging_slices_document(slices)
    result = generate_atlas(document, ImportOptions(import_animation=False, flip_vertical=False))

    assert result.atlas_size == (4, 4)
    assert result.rects == [(0, 0, 2, 2), (2, 2, 2, 2)]


def test_nine_slice_border_and_pivot():
    frames = [
        [
            layer_chunk("a"),
            raw_cel_chunk(0, 4, 4, rgba_bytes([RED] * 16)),
            slice_chunk("panel", [(0, 0, 0, 4, 4)], centers=[(1, 1, 2, 1)], pivots=[(1, 1)]),
        ]
    ]
    result = generate_atlas(read_ase(build_ase(4, 4, frames)), ImportOptions(flip_vertical=False))
    sprite = result.slices[0].sprites[0]

    assert sprite.border == (1, 2, 1, 1)
    assert sprite.pivot == (0.25, 0.25)


def test_document_tags_are_kept():
    frames = [[layer_chunk("a"), tags_chunk([(0, 1, LoopDirection.REVERSE, "run")])], []]
    result = generate_atlas(read_ase(build_ase(2, 2, frames)))
    assert [tag.name for tag in result.tags] == ["run"]


def test_palette_texture():
    colors = [(0, 0, 0, 255), (1, 2, 3, 255), (4, 5, 6, 255)]
    frames = [[palette_chunk(colors), layer_chunk("a"), raw_cel_chunk(0, 1, 1, bytes([1]))]]
    document = read_ase(build_ase(1, 1, frames, bits_per_pixel=8))

    result = generate_atlas(document, ImportOptions(palette_texture="vertical", import_index=True))
    assert result.palette_texture.shape == (3, 1, 4)
    assert result.atlas_pixels[0, 0].tolist() == [1, 0, 0, 255]


def test_extract_frames_canvas_sized():
    images = extract_frames(_two_frame_document())
    assert [(image.width, image.height) for image in images] == [(4, 3), (4, 3)]


# Written files


def test_ag_process_single_writes_outputs(tmp_path):
    colors = [(0, 0, 0, 255), (200, 10, 10, 255)]
    frames = [
        [palette_chunk(colors), layer_chunk("a"), raw_cel_chunk(0, 1, 1, bytes([1]))],
        [raw_cel_chunk(0, 1, 1, bytes([1]), x=1)],
    ]
    ase_path = tmp_path / "hero.aseprite"
    write_bytes_to_file(ase_path, build_ase(2, 2, frames, bits_per_pixel=8))
    write_json_file(tmp_path / "config.json", {"palette_texture": "horizontal"})

    assert ag_process_single(ase_path)

    output_dir = tmp_path / "hero_atlas"
    metadata = read_json_file(output_dir / "hero_atlas.json")
    assert metadata["atlas"]["image"] == "hero_atlas.png"
    assert len(metadata["images"]) == 2
    assert metadata["tags"][0]["frames"] == [
        {"frame": 0, "duration": 100},
        {"frame": 1, "duration": 100},
    ]

    with Image.open(output_dir / "hero_atlas.png") as atlas:
        assert atlas.mode == "RGBA"
        assert atlas.size == (metadata["atlas"]["width"], metadata["atlas"]["height"])

    palette_lines = (output_dir / "hero.pal").read_text().splitlines()
    assert palette_lines[:3] == ["JASC-PAL", "0100", "2"]
    assert palette_lines[4] == "200 10 10 255"
    assert (output_dir / "hero_palette.png").exists()


def test_ag_process_single_reports_bad_file(tmp_path, capsys):
    ase_path = tmp_path / "broken.ase"
    write_bytes_to_file(ase_path, b"not an aseprite file")

    assert not ag_process_single(ase_path)
    assert "[ERROR]" in capsys.readouterr().out


def test_ag_process_multiple_summary(tmp_path, capsys):
    write_bytes_to_file(tmp_path / "a.ase", build_ase(1, 1, [[]]))
    write_bytes_to_file(tmp_path / "b.ase", b"broken")

    ag_process_multiple(tmp_path)
    out = capsys.readouterr().out

    assert "[INFO] Successful: 1" in out
    assert "b.ase" in out
    assert (tmp_path / "a_atlas" / "a_atlas.png").exists()


def test_fe_process_single_writes_frames(tmp_path):
    frames = [
        [layer_chunk("a"), raw_cel_chunk(0, 1, 1, rgba_bytes([RED]))],
        [raw_cel_chunk(0, 1, 1, rgba_bytes([GREEN]))],
    ]
    ase_path = tmp_path / "blink.ase"
    write_bytes_to_file(ase_path, build_ase(1, 1, frames))

    assert fe_process_single(ase_path)

    frames_dir = tmp_path / "blink_frames" / "frames"
    with Image.open(frames_dir / "1.png") as frame:
        assert frame.getpixel((0, 0)) == GREEN
