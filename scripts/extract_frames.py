#!/usr/bin/env python3
"""
Extract every composited frame of Aseprite file(s) as PNG images.

Usage:
    python scripts/extract_frames.py <ase_file>                # Single file
    python scripts/extract_frames.py <ase1> <ase2>             # Multiple files
    python scripts/extract_frames.py <folder>                  # All files in folder
"""

import sys
import argparse
from pathlib import Path

# Add parent directory to path for imports
script_dir = Path(__file__).parent
if str(script_dir.parent) not in sys.path:
    sys.path.insert(0, str(script_dir.parent))

from ase_files import ASE_EXTENSIONS
from generators import fe_process_single, fe_process_multiple


def main():
    parser = argparse.ArgumentParser(
        description="Extract composited frames from Aseprite file(s)"
    )
    parser.add_argument(
        "paths",
        nargs="+",
        help="Aseprite file(s) or folder containing Aseprite files",
    )

    args = parser.parse_args()

    for path_str in args.paths:
        input_path = Path(path_str).resolve()

        if not input_path.exists():
            print(f"[ERROR] Path does not exist: {input_path}")
            continue

        if input_path.is_file():
            if input_path.suffix.lower() not in ASE_EXTENSIONS:
                print(f"[ERROR] File is not an Aseprite file: {input_path}")
                continue
            fe_process_single(input_path)
        else:
            fe_process_multiple(input_path)


if __name__ == "__main__":
    main()
