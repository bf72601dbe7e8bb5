"""
Input validation, option loading and file discovery for the generators.
"""

from pathlib import Path
from typing import List

from ase_files import ASE_EXTENSIONS, Document, read_ase
from data import read_json_file

from .constants import CONFIG_FILE
from .options import ImportOptions


def validate_ase_input(ase_path: Path) -> Document:
    """Read an .ase/.aseprite file and report what it contains.

    Raises:
        AseError: If the file is malformed or uses unsupported features
    """
    print("[VALIDATING] Reading document...\n")

    document = read_ase(ase_path)
    header = document.header

    print(
        f"[OK] Loaded document: {header.width}x{header.height}, "
        f"{header.bits_per_pixel}bpp, {len(document.frames)} frame(s), "
        f"{len(document.layers)} layer(s)\n"
    )

    return document


def load_import_options(folder: Path) -> ImportOptions:
    """Options from folder/config.json, or defaults when there is none.

    Raises:
        ValueError: If config.json holds an invalid option value
    """
    config_data = read_json_file(folder / CONFIG_FILE)

    if config_data is None:
        return ImportOptions()

    print(f"[INFO] Using options from {folder / CONFIG_FILE}")
    return ImportOptions.from_dict(config_data)


def find_ase_files(folder: Path) -> List[Path]:
    return sorted(
        path
        for path in folder.iterdir()
        if path.is_file() and path.suffix.lower() in ASE_EXTENSIONS
    )
