#!/usr/bin/env python3
"""
Generate atlas(es) from Aseprite file(s).

Options are read from a config.json next to each file when present.

Usage:
    python scripts/generate_atlases.py <ase_file>                    # Single file
    python scripts/generate_atlases.py <ase1> <ase2> <ase3>          # Multiple files
    python scripts/generate_atlases.py <folder>                      # All files in folder
    python scripts/generate_atlases.py <ase_file> -o <output_dir>    # Custom output folder
"""

import sys
import argparse
from pathlib import Path

# Add parent directory to path for imports
script_dir = Path(__file__).parent
if str(script_dir.parent) not in sys.path:
    sys.path.insert(0, str(script_dir.parent))

from ase_files import ASE_EXTENSIONS
from generators import ag_process_single, ag_process_multiple


def main():
    parser = argparse.ArgumentParser(
        description="Generate atlas(es) from Aseprite file(s)"
    )
    parser.add_argument(
        "paths",
        nargs="+",
        help="Aseprite file(s) or folder containing Aseprite files",
    )
    parser.add_argument(
        "-o",
        "--output",
        help="Output folder (single file only, defaults to <name>_atlas)",
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
            output_dir = Path(args.output).resolve() if args.output else None
            ag_process_single(input_path, output_dir)
        else:
            ag_process_multiple(input_path)


if __name__ == "__main__":
    main()
