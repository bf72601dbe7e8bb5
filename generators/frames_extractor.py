"""
Composite every frame at canvas size and write them out as PNG files.
"""

from pathlib import Path
from typing import List, Optional

from ase_files import Document
from data import SEPARATOR_LINE_LENGTH, validate_path_exists_and_is_dir
from external_files import ExternalFiles, export_frame_images
from rendering import Image, composite

from .constants import FRAMES_OUTPUT_SUFFIX
from .options import ImportOptions
from .utils import find_ase_files, load_import_options, validate_ase_input


def extract_frames(document: Document, options: Optional[ImportOptions] = None) -> List[Image]:
    """Composite every frame at canvas size, top row first."""
    if options is None:
        options = ImportOptions()

    indexed = options.import_index and document.header.bits_per_pixel == 8

    return [
        composite(document, frame_index, indexed)
        for frame_index in range(len(document.frames))
    ]


def extract_frames_main(data) -> Path:
    """Write every composited frame of one document.

    Args:
        data: Tuple containing (document, options, output_dir)
    """
    document, options, output_dir = data

    print("[START] Extracting frames...")

    images = extract_frames(document, options)
    output_dir.mkdir(parents=True, exist_ok=True)
    export_frame_images(images, output_dir / ExternalFiles.FRAMES_DIR)

    print(f"\n[OK] Frames extracted successfully to: {output_dir}")
    return output_dir


def fe_process_single(ase_path: Path, output_dir: Optional[Path] = None) -> bool:
    """Process a single .ase/.aseprite file.

    Args:
        ase_path: Path to the document
        output_dir: Output folder, defaults to <name>_frames beside the document

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
        output_dir = ase_path.parent / f"{ase_path.stem}{FRAMES_OUTPUT_SUFFIX}"

    try:
        options = load_import_options(ase_path.parent)
        document = validate_ase_input(ase_path)

        extract_frames_main((document, options, output_dir))

        return True

    except Exception as e:
        print(f"[ERROR] Error during processing: {str(e)}")
        return False


def fe_process_multiple(parent_folder: Path) -> None:
    """Extract frames of every .ase/.aseprite file in a folder."""
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

        if fe_process_single(item_path):
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
