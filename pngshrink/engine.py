from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional

from PIL import Image

from . import codec
from .replace import safe_replace
from .resample import resize
from .results import ProcessOutcome
from .settings import ShrinkSettings


logger = logging.getLogger(__name__)

# Alpha at or above this counts as opaque (near-opaque tolerance, not 255).
OPAQUE_ALPHA = 254

# Mode an alpha-carrying image becomes once the channel is dropped.
ALPHA_TO_OPAQUE_MODE = {
    "RGBA": "RGB",
    "LA": "L",
}


def process_image(src_path: Path, s: ShrinkSettings) -> ProcessOutcome:
    """
    Shrink one file in place.

    Every variant from preprocess_alpha() is resized and encoded in memory;
    the smallest encoding (first one on a tie) goes through safe_replace once.
    Errors propagate to the caller.
    """
    src_path = Path(src_path)

    candidates: List[tuple[bytes, tuple[int, int], str]] = []

    with codec.decode(src_path) as im:
        src = im
        if plan_dimensions(im.width, im.height, s.max_width, s.max_height, allow_upscale=s.allow_upscale) != im.size:
            src = expand_color_key(im)

        for variant in preprocess_alpha(src):
            size = plan_dimensions(
                variant.width,
                variant.height,
                s.max_width,
                s.max_height,
                allow_upscale=s.allow_upscale,
            )
            out = resize(variant, size, s.filter)
            data = codec.encode(
                out,
                compress_level=s.png_compress_level,
                optimize=s.png_optimize,
                strategy=s.zlib_strategy,
            )
            logger.debug("%s: %s %dx%d -> %d bytes", src_path, out.mode, out.width, out.height, len(data))
            candidates.append((data, out.size, out.mode))

    # min() keeps the first of equal keys, so ties go to the alpha-preserving variant
    data, size, mode = min(candidates, key=lambda c: len(c[0]))

    outcome = safe_replace(data, src_path, dry_run=s.dry_run)
    return outcome.with_details(size, mode)


def plan_dimensions(
    orig_w: int,
    orig_h: int,
    max_w: Optional[int] = None,
    max_h: Optional[int] = None,
    allow_upscale: bool = False,
) -> tuple[int, int]:
    """
    Target size for an image, keeping aspect ratio.

    - no bounds: unchanged
    - one bound: that axis becomes the bound, the other scales with it
      (only downwards unless allow_upscale)
    - both bounds: scale by min(max_w/w, max_h/h, 1.0); never upscales

    Scaled axes are truncated toward zero (int() of the float product)
    and never go below 1.
    """
    for bound in (max_w, max_h):
        if bound is not None and bound < 1:
            raise ValueError(f"maximum dimension must be positive, got {bound}")

    if max_w is None and max_h is None:
        return orig_w, orig_h

    if max_w is None:
        if max_h >= orig_h and not allow_upscale:
            return orig_w, orig_h
        return max(1, int(orig_w * (max_h / orig_h))), max_h

    if max_h is None:
        if max_w >= orig_w and not allow_upscale:
            return orig_w, orig_h
        return max_w, max(1, int(orig_h * (max_w / orig_w)))

    scale = min(max_w / orig_w, max_h / orig_h, 1.0)
    if scale >= 1.0:
        return orig_w, orig_h
    return max(1, int(orig_w * scale)), max(1, int(orig_h * scale))


def preprocess_alpha(im: Image.Image) -> List[Image.Image]:
    """
    [im] if alpha is absent or actually used; [im, im_without_alpha] if
    every pixel is (near) opaque, so the caller can try both.
    """
    if not _has_alpha(im):
        return [im]

    if _min_alpha(im) < OPAQUE_ALPHA:
        return [im]

    return [im, _strip_alpha(im)]


def expand_color_key(im: Image.Image) -> Image.Image:
    """
    Turn a tRNS colour key on an 8-bit RGB or L image into a real alpha
    channel, so resampling treats keyed pixels as transparent instead of
    blending their colour into the neighbours. Other images are returned as is.
    """
    if im.info.get("transparency") is None:
        return im
    if im.mode == "RGB":
        return im.convert("RGBA")
    if im.mode == "L":
        # R == G == B, so the luma weights give back the grey value exactly
        return im.convert("RGBA").convert("LA")
    return im


def _has_alpha(im: Image.Image) -> bool:
    if im.mode in ("RGBA", "LA", "PA"):
        return True
    if im.mode == "P" and "transparency" in im.info:
        return True
    return False


def _min_alpha(im: Image.Image) -> int:
    if im.mode == "P":
        # tRNS on a palette image: look at what the pixels actually use
        alpha = im.convert("RGBA").getchannel("A")
    else:
        alpha = im.getchannel("A")
    lo, _ = alpha.getextrema()
    return lo


def _strip_alpha(im: Image.Image) -> Image.Image:
    if im.mode == "P":
        stripped = im.copy()
        stripped.info.pop("transparency", None)
        return stripped
    if im.mode == "PA":
        # index band comes back as "L"; putpalette() makes it "P" again
        stripped = im.getchannel("P")
        stripped.putpalette(im.getpalette() or [0, 0, 0])
        return stripped
    return im.convert(ALPHA_TO_OPAQUE_MODE[im.mode])
