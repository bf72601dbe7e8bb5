"""Tests for the binary reader primitives and Rect."""

import struct
import sys
import zlib
from pathlib import Path

import pytest

script_dir = Path(__file__).parent
if str(script_dir.parent) not in sys.path:
    sys.path.insert(0, str(script_dir.parent))

from data import (
    Rect,
    inflate,
    read_bytes,
    read_fixed,
    read_int16,
    read_string,
    read_uint32,
    write_fixed,
    write_int16,
    write_string,
    write_uint32,
)


def test_fixed_width_integers():
    data = write_uint32(0xDEADBEEF) + write_int16(-2)
    assert read_uint32(data, 0) == 0xDEADBEEF
    assert read_int16(data, 4) == -2


def test_fixed_point():
    data = write_fixed(1.5) + write_fixed(-0.25)
    assert read_fixed(data, 0) == 1.5
    assert read_fixed(data, 4) == -0.25


def test_string_reports_bytes_consumed():
    data = b"\x00" + write_string("Capa ñ")
    text, consumed = read_string(data, 1)
    assert text == "Capa ñ"
    assert consumed == 2 + len("Capa ñ".encode("utf-8"))


def test_truncated_string_raises():
    data = struct.pack("<H", 10) + b"ab"
    with pytest.raises(struct.error):
        read_string(data, 0)


def test_read_bytes_underflow():
    with pytest.raises(struct.error):
        read_bytes(b"abc", 1, 5)


def test_inflate_limits_output():
    payload = bytes(range(64))
    compressed = zlib.compress(payload)
    assert inflate(compressed, 64) == payload
    assert inflate(compressed, 16) == payload[:16]
    assert len(inflate(zlib.compress(payload[:8]), 64)) == 8


def test_rect_overlap():
    a = Rect(0, 0, 10, 10)
    assert a.overlaps(Rect(9, 9, 5, 5))
    assert not a.overlaps(Rect(10, 0, 5, 5))
    assert a.offset(1, 2) == Rect(1, 2, 10, 10)
    assert Rect(0, 0, 0, 3).is_empty()
