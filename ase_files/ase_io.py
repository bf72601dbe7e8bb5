"""
Aseprite file I/O operations for reading documents from paths or bytes.
"""

from pathlib import Path
from typing import Union

from .document import Document
from .ase_parser import AseParser
from data import read_file_to_bytes


def read_ase(ase_input: Union[Path, bytes]) -> Document:
    """
    Read an Aseprite document from file path or raw bytes.

    Args:
        ase_input: Either Path to .ase/.aseprite file or raw file bytes

    Returns:
        Document object

    Raises:
        MalformedFormat: If the file is structurally invalid
        UnsupportedFeature: If the file uses an unsupported feature
    """
    if isinstance(ase_input, (bytes, bytearray)):
        rawdata = bytes(ase_input)
    else:
        rawdata = read_file_to_bytes(ase_input)

    parser = AseParser(rawdata)
    return parser.parse()
