from __future__ import annotations

import io
import zlib
from pathlib import Path

from PIL import Image, UnidentifiedImageError

from .errors import DecodeError, EncodeError


# The only container we read and write. Re-encoding never changes format.
FORMAT = "PNG"

STRATEGY_TO_ZLIB = {
    "default": zlib.Z_DEFAULT_STRATEGY,
    "filtered": zlib.Z_FILTERED,
    "huffman": zlib.Z_HUFFMAN_ONLY,
    "rle": zlib.Z_RLE,
    "fixed": zlib.Z_FIXED,
}

# 16-bit colour and grey+alpha PNGs. 16-bit grey loads losslessly as "I;16".
WIDE_RAWMODES = {"RGB;16B", "RGBA;16B", "LA;16B"}

# No decompression-bomb limit: every local file is decoded whatever its size.
Image.MAX_IMAGE_PIXELS = None


def decode(path: Path) -> Image.Image:
    """
    Read and fully load an image.

    Opening the file is plain I/O and raises OSError as usual; anything
    Pillow objects to once it has the bytes is a DecodeError.
    """
    path = Path(path)
    try:
        im = Image.open(path)
    except (UnidentifiedImageError, Image.DecompressionBombError) as e:
        raise DecodeError(str(e)) from e

    if im.format != FORMAT:
        im.close()
        raise DecodeError(f"unsupported format {im.format!r}, expected {FORMAT}")

    # Pillow narrows these to 8 bits per channel on load; until then the
    # tile still carries the raw mode
    if any(tile[3] in WIDE_RAWMODES for tile in im.tile):
        im.close()
        raise DecodeError("16-bit truecolour not supported")

    # Pillow closes its own file handle once a single-frame image is loaded
    try:
        im.load()
    except (OSError, SyntaxError, ValueError, Image.DecompressionBombError) as e:
        im.close()
        raise DecodeError(str(e) or type(e).__name__) from e
    return im


def encode(
    im: Image.Image,
    compress_level: int = 9,
    optimize: bool = True,
    strategy: str = "default",
) -> bytes:
    """
    Encode to PNG bytes in memory.

    Pillow filters truecolor rows adaptively and leaves palette rows
    unfiltered; `strategy` selects the zlib strategy behind that.
    Palette, tRNS transparency and the bit depth of every mode decode()
    accepts come along from `im` itself.
    """
    kwargs: dict = {
        "compress_level": int(compress_level),
        "optimize": bool(optimize),
    }
    if strategy != "default":
        kwargs["compress_type"] = STRATEGY_TO_ZLIB[strategy]

    buf = io.BytesIO()
    try:
        # Important: Pillow chooses encoder by format=..., there is no filename here
        im.save(buf, format=FORMAT, **kwargs)
    except (OSError, ValueError, KeyError) as e:
        raise EncodeError(str(e) or type(e).__name__) from e
    return buf.getvalue()
