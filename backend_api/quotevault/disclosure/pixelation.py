from __future__ import annotations

import io
import logging
import math
import os
from typing import Optional, Union

from PIL import Image, UnidentifiedImageError

from .errors import AssetNotFound, InvalidLevel
from .levels import REVEAL_THRESHOLD, clarity_for_hints, validate_clarity

logger = logging.getLogger(__name__)

MAX_BLOCK = 50
MIN_BLOCK = 2

DOWNSAMPLE = Image.Resampling.LANCZOS
UPSAMPLE = Image.Resampling.NEAREST

ImageSource = Union[bytes, bytearray, memoryview, str, os.PathLike]


# PUBLIC_INTERFACE
def block_size(clarity: float) -> int:
    """Mosaic block edge in pixels: floor(50 * (1 - clarity)), at least 2.

    The curve is linear so neighbouring hints stay visibly different.
    """
    clarity = validate_clarity(clarity)
    return max(MIN_BLOCK, math.floor(MAX_BLOCK * (1.0 - clarity)))


# PUBLIC_INTERFACE
def resolve_clarity(
    clarity: Optional[float] = None,
    hints_used: Optional[int] = None,
    base_clarity: Optional[float] = None,
) -> float:
    """Pick the clarity for a render request.

    An explicit clarity wins over a hint count. A hint count needs the
    question's base_clarity. Supplying neither is an InvalidLevel.
    """
    if clarity is not None:
        return validate_clarity(clarity)
    if hints_used is None:
        raise InvalidLevel("Either a clarity level or a hint count is required.")
    if base_clarity is None:
        raise InvalidLevel("A hint count requires the question's base clarity.")
    return clarity_for_hints(hints_used, base_clarity)


def load_source(source: ImageSource) -> bytes:
    """Return the raw bytes of an image given as bytes or a filesystem path."""
    if isinstance(source, (bytes, bytearray, memoryview)):
        return bytes(source)
    try:
        with open(source, "rb") as fh:
            return fh.read()
    except OSError as exc:
        raise AssetNotFound(f"Cannot read image {os.fspath(source)!r}: {exc}") from exc


def _working_copy(img: Image.Image) -> Image.Image:
    """Convert palette and odd modes so LANCZOS resampling applies."""
    if img.mode in ("RGB", "RGBA"):
        return img
    if "A" in img.mode or "transparency" in img.info:
        return img.convert("RGBA")
    return img.convert("RGB")


def _encode(img: Image.Image, image_format: str, quality: int) -> bytes:
    image_format = image_format.upper()
    if image_format == "JPEG" and img.mode != "RGB":
        img = img.convert("RGB")
    options = {"quality": quality} if image_format in ("JPEG", "WEBP") else {}
    buffer = io.BytesIO()
    img.save(buffer, format=image_format, **options)
    return buffer.getvalue()


# PUBLIC_INTERFACE
def pixelate(
    source: ImageSource,
    clarity: float,
    image_format: str = "JPEG",
    quality: int = 90,
) -> bytes:
    """Render a block mosaic of an image at a clarity level.

    At clarity >= 0.95 the source bytes come back untouched. Otherwise the
    image is shrunk by the block size with a stretch resample and blown back
    up with nearest-neighbour so the blocks stay square.

    Parameters:
        source: image bytes or a path to the image file.
        clarity: finite float in [0, 1].
        image_format: Pillow format name of the output.
        quality: encoder quality for lossy formats.

    Raises:
        InvalidLevel: clarity is not a finite number in [0, 1].
        AssetNotFound: the image cannot be read or decoded.
    """
    clarity = validate_clarity(clarity)
    data = load_source(source)
    if clarity >= REVEAL_THRESHOLD:
        return data

    size = block_size(clarity)
    try:
        with Image.open(io.BytesIO(data)) as img:
            img.load()
            width, height = img.size
            reduced = (
                max(1, int(width / size + 0.5)),
                max(1, int(height / size + 0.5)),
            )
            small = _working_copy(img).resize(reduced, DOWNSAMPLE)
    except (UnidentifiedImageError, Image.DecompressionBombError, OSError) as exc:
        raise AssetNotFound(f"Cannot decode image: {exc}") from exc

    mosaic = small.resize((width, height), UPSAMPLE)
    logger.debug("Pixelated %sx%s image with %spx blocks (clarity=%.3f)", width, height, size, clarity)
    return _encode(mosaic, image_format, quality)


# PUBLIC_INTERFACE
def sniff_content_type(data: bytes, default: str = "application/octet-stream") -> str:
    """Guess a MIME type from image bytes without decoding pixel data."""
    try:
        with Image.open(io.BytesIO(data)) as img:
            return Image.MIME.get(img.format or "", default)
    except (UnidentifiedImageError, Image.DecompressionBombError, OSError):
        return default
