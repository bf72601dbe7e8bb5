import json
import struct
import zlib
from pathlib import Path
from typing import Any, Dict, Optional, Tuple


def read_uint32(data: bytes, offset: int, little_endian: bool = True) -> int:
    fmt = "<I" if little_endian else ">I"
    return struct.unpack_from(fmt, data, offset)[0]


def read_uint16(data: bytes, offset: int, little_endian: bool = True) -> int:
    fmt = "<H" if little_endian else ">H"
    return struct.unpack_from(fmt, data, offset)[0]


def read_uint8(data: bytes, offset: int) -> int:
    return struct.unpack_from("B", data, offset)[0]


def read_int16(data: bytes, offset: int, little_endian: bool = True) -> int:
    fmt = "<h" if little_endian else ">h"
    return struct.unpack_from(fmt, data, offset)[0]


def read_int32(data: bytes, offset: int, little_endian: bool = True) -> int:
    fmt = "<i" if little_endian else ">i"
    return struct.unpack_from(fmt, data, offset)[0]


def read_fixed(data: bytes, offset: int) -> float:
    """Read a signed 16.16 fixed point number."""
    return read_int32(data, offset) / 65536.0


def read_string(data: bytes, offset: int) -> Tuple[str, int]:
    """Read a WORD length-prefixed UTF-8 string.

    Returns:
        Tuple of (string, total bytes consumed including the length prefix)
    """
    length = read_uint16(data, offset)
    start = offset + 2
    raw = data[start : start + length]
    if len(raw) != length:
        raise struct.error(f"string of {length} bytes truncated at offset {start}")
    return raw.decode("utf-8", errors="replace"), 2 + length


def read_bytes(data: bytes, offset: int, length: int) -> bytes:
    raw = data[offset : offset + length]
    if len(raw) != length:
        raise struct.error(f"expected {length} bytes at offset {offset}, got {len(raw)}")
    return bytes(raw)


def inflate(compressed: bytes, expected_size: int) -> bytes:
    """Decompress a zlib stream, producing at most expected_size bytes.

    A shorter result means the stream did not hold enough data; callers
    compare the length against expected_size.
    """
    if expected_size == 0:
        return b""
    decompressor = zlib.decompressobj()
    return decompressor.decompress(compressed, expected_size)


def write_uint32(value: int, little_endian: bool = True) -> bytes:
    fmt = "<I" if little_endian else ">I"
    return struct.pack(fmt, value)


def write_uint16(value: int, little_endian: bool = True) -> bytes:
    fmt = "<H" if little_endian else ">H"
    return struct.pack(fmt, value)


def write_uint8(value: int) -> bytes:
    return struct.pack("B", value)


def write_int16(value: int, little_endian: bool = True) -> bytes:
    fmt = "<h" if little_endian else ">h"
    return struct.pack(fmt, value)


def write_int32(value: int, little_endian: bool = True) -> bytes:
    fmt = "<i" if little_endian else ">i"
    return struct.pack(fmt, value)


def write_fixed(value: float) -> bytes:
    return write_int32(int(round(value * 65536.0)))


def write_string(value: str) -> bytes:
    encoded = value.encode("utf-8")
    return write_uint16(len(encoded)) + encoded


def read_file_to_bytes(filepath: Path) -> bytes:
    with open(filepath, "rb") as f:
        return f.read()


def write_bytes_to_file(filepath: Path, data: bytes) -> None:
    with open(filepath, "wb") as f:
        f.write(data)


def pad_bytes(length: int, value: int = 0) -> bytes:
    return bytes([value] * length)


def read_json_file(filepath: Path) -> Optional[Dict[str, Any]]:
    if not filepath.exists():
        return None

    try:
        with open(filepath, "r", encoding="utf-8") as f:
            return json.load(f)
    except (json.JSONDecodeError, IOError, OSError):
        return None


def write_json_file(filepath: Path, data: Dict[str, Any], indent: int = 4) -> None:
    with open(filepath, "w", encoding="utf-8") as f:
        json.dump(data, f, indent=indent, ensure_ascii=False)


def validate_path_exists_and_is_dir(path: Path, path_description: str = "Path") -> bool:
    if not path.exists():
        print(f"[ERROR] {path_description} does not exist: {path}\n")
        return False

    if not path.is_dir():
        print(f"[ERROR] Path is not a directory: {path}\n")
        return False

    return True
