"""
Wrapper function for writing all external files (atlas image, JSON and palette).
"""

from pathlib import Path
from .constants import ExternalFiles
from .atlas_json import write_atlas_json
from .palette import write_palette, write_palette_texture
from .images import export_rgba_image


def write_external_files(result, output_dir: Path, name: str) -> None:
    """Write all external files for a generated atlas.

    Args:
        result: AtlasResult from generate_atlas
        output_dir: Output directory path
        name: Base name of the written files
    """

    output_dir.mkdir(parents=True, exist_ok=True)

    atlas_path = output_dir / f"{name}{ExternalFiles.ATLAS_IMAGE_SUFFIX}"
    export_rgba_image(result.atlas_pixels, atlas_path)
    print(f"[OK] Atlas image saved to: {atlas_path}")

    json_path = output_dir / f"{name}{ExternalFiles.ATLAS_JSON_SUFFIX}"
    write_atlas_json(result, name, json_path)
    print(f"[OK] Atlas JSON saved to: {json_path}")

    if result.palette is not None:
        write_palette(result.palette, output_dir / f"{name}{ExternalFiles.PALETTE_SUFFIX}")

        if result.palette_texture is not None:
            write_palette_texture(
                result.palette_texture,
                output_dir / f"{name}{ExternalFiles.PALETTE_IMAGE_SUFFIX}",
            )

        print(f"[OK] Palette saved to: {output_dir}")
