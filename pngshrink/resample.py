from __future__ import annotations

from PIL import Image, ImageFilter


# Pillow's BICUBIC kernel uses a = -0.5, i.e. Catmull-Rom.
KERNEL_TO_RESAMPLING = {
    "lanczos": Image.Resampling.LANCZOS,
    "catmull-rom": Image.Resampling.BICUBIC,
    "nearest": Image.Resampling.NEAREST,
    "linear": Image.Resampling.BILINEAR,
}

# Modes Pillow's GaussianBlur accepts.
_BLURRABLE_MODES = {"L", "LA", "RGB", "RGBA", "RGBX", "CMYK"}

# Kernel standard deviation in source pixels per output pixel.
GAUSSIAN_SIGMA = 0.5


def resize(im: Image.Image, size: tuple[int, int], kernel: str = "gaussian") -> Image.Image:
    if im.size == tuple(size):
        return im

    if kernel == "gaussian":
        return _gaussian_resize(im, size)

    try:
        resample = KERNEL_TO_RESAMPLING[kernel]
    except KeyError:
        raise ValueError(f"Unknown resampling kernel: {kernel}") from None
    return im.resize(size, resample)


def _gaussian_resize(im: Image.Image, size: tuple[int, int]) -> Image.Image:
    """
    Gaussian resampling: low-pass with a Gaussian sized to the downscale
    factor, then sample with a triangle filter.

    Pillow only resizes palette and bilevel images with nearest neighbour,
    so those skip the blur.
    """
    if im.mode in ("1", "P", "PA"):
        return im.resize(size, Image.Resampling.NEAREST)
    if im.mode not in _BLURRABLE_MODES:
        return im.resize(size, Image.Resampling.BILINEAR)

    w, h = im.size
    new_w, new_h = size
    factor = max(w / new_w, h / new_h)
    if factor > 1.0:
        im = im.filter(ImageFilter.GaussianBlur(GAUSSIAN_SIGMA * factor))
    return im.resize(size, Image.Resampling.BILINEAR)
