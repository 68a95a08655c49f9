from __future__ import annotations

import struct
import zlib
from pathlib import Path

import pytest
from PIL import Image

from pngshrink.settings import ShrinkSettings


def gradient(size: tuple[int, int], mode: str = "RGB", alpha: int = 255) -> Image.Image:
    """A smooth, compressible test image."""
    vertical = Image.linear_gradient("L")
    r = vertical.rotate(90).resize(size)
    g = vertical.resize(size)
    b = Image.new("L", size, 128)
    im = Image.merge("RGB", (r, g, b))
    if mode == "RGBA":
        im = im.convert("RGBA")
        im.putalpha(alpha)
    elif mode != "RGB":
        im = im.convert(mode)
    return im


def write_png(path: Path, im: Image.Image, compress_level: int = 0) -> Path:
    """Save with no compression so there is always room to shrink."""
    path.parent.mkdir(parents=True, exist_ok=True)
    im.save(path, format="PNG", compress_level=compress_level)
    return path


def _chunk(kind: bytes, data: bytes) -> bytes:
    return struct.pack(">I", len(data)) + kind + data + struct.pack(">I", zlib.crc32(kind + data))


def write_png16(path: Path, size: tuple[int, int] = (32, 32), alpha: bool = False) -> Path:
    """Hand-built 16-bit-per-channel RGB (colour type 2) or RGBA (type 6) PNG."""
    w, h = size
    channels = 4 if alpha else 3
    rows = []
    for y in range(h):
        row = bytearray(b"\x00")  # filter: none
        for x in range(w):
            sample = [x * 2047 + 1, y * 2047 + 3, 0x1234]
            if alpha:
                sample.append(0xFFFF)
            row += struct.pack(">" + "H" * channels, *sample)
        rows.append(bytes(row))

    ihdr = struct.pack(">IIBBBBB", w, h, 16, 6 if alpha else 2, 0, 0, 0)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(
        b"\x89PNG\r\n\x1a\n"
        + _chunk(b"IHDR", ihdr)
        + _chunk(b"IDAT", zlib.compress(b"".join(rows), 0))
        + _chunk(b"IEND", b"")
    )
    return path


@pytest.fixture
def settings() -> ShrinkSettings:
    return ShrinkSettings(workers=2)


@pytest.fixture
def png_factory(tmp_path: Path):
    def make(name: str = "img.png", size: tuple[int, int] = (64, 32), mode: str = "RGB", alpha: int = 255) -> Path:
        return write_png(tmp_path / name, gradient(size, mode=mode, alpha=alpha))

    return make
