"""Pixel codec and file persistence around PackedImage.

Byte order matches the platform bitmap layout the packed format came from:
3-byte pixels are blue, green, red; 4-byte pixels are alpha, blue, green,
red. Encoding only produces the 3-byte layout, so alpha is dropped unless
``keep_alpha`` is requested when converting to a Pillow image.
"""

import logging
from pathlib import Path
from typing import Optional, Union

import numpy as np
from PIL import Image, ImageOps

from ..core.errors import DimensionMismatchError
from ..core.packed import (
    CHANNEL_ALPHA,
    CHANNEL_BLUE,
    CHANNEL_GREEN,
    CHANNEL_RED,
    PackedImage,
)

logger = logging.getLogger(__name__)

FORMAT_JPG = "jpg"
FORMAT_PNG = "png"

_PIL_FORMATS = {FORMAT_JPG: "JPEG", "jpeg": "JPEG", FORMAT_PNG: "PNG"}


def decode_pixels(buffer: bytes, width: int, height: int, has_alpha: bool = False) -> PackedImage:
    """Pack a row-major BGR (or ABGR when ``has_alpha``) byte buffer."""
    pixel_length = 4 if has_alpha else 3
    pixels = np.frombuffer(buffer, dtype=np.uint8)
    expected = width * height * pixel_length
    if pixels.size != expected:
        raise DimensionMismatchError((expected,), (pixels.size,), "pixel buffer")

    pixels = pixels.reshape(height, width, pixel_length).astype(np.uint32)
    if has_alpha:
        alpha, blue, green, red = (pixels[..., k] for k in range(4))
    else:
        blue, green, red = (pixels[..., k] for k in range(3))
        alpha = np.full((height, width), 0xFF, dtype=np.uint32)

    packed = (alpha << 24) | (red << 16) | (green << 8) | blue
    return PackedImage.from_array(packed)


def encode_pixels(image: PackedImage) -> bytes:
    """Serialize to a row-major BGR byte buffer; alpha is not written."""
    pixels = np.stack(
        [image.channel(CHANNEL_BLUE), image.channel(CHANNEL_GREEN), image.channel(CHANNEL_RED)],
        axis=-1,
    )
    return pixels.astype(np.uint8).tobytes()


def _has_transparency(img: Image.Image) -> bool:
    return img.mode in ("RGBA", "LA", "PA") or "transparency" in img.info


def packed_from_pil(img: Image.Image) -> PackedImage:
    """Convert a Pillow image, keeping alpha when the image has any."""
    has_alpha = _has_transparency(img)
    if has_alpha:
        array = np.asarray(img.convert("RGBA"))
        buffer = array[..., [3, 2, 1, 0]].tobytes()
    else:
        array = np.asarray(img.convert("RGB"))
        buffer = array[..., ::-1].tobytes()

    logger.debug(f"Decoding {img.mode} {img.size} image (alpha={has_alpha})")
    return decode_pixels(buffer, img.width, img.height, has_alpha)


def packed_to_pil(image: PackedImage, keep_alpha: bool = False) -> Image.Image:
    """Convert to a Pillow image, RGB by default or RGBA with ``keep_alpha``."""
    if keep_alpha:
        rgba = np.stack(
            [image.channel(c) for c in (CHANNEL_RED, CHANNEL_GREEN, CHANNEL_BLUE, CHANNEL_ALPHA)],
            axis=-1,
        ).astype(np.uint8)
        return Image.fromarray(rgba)

    bgr = np.frombuffer(encode_pixels(image), dtype=np.uint8).reshape(image.height, image.width, 3)
    return Image.fromarray(np.ascontiguousarray(bgr[..., ::-1]))


def read_image(path: Union[str, Path]) -> Optional[PackedImage]:
    """Load an image file. Returns None (and logs why) when it cannot be read."""
    path = Path(path)
    try:
        with Image.open(path) as img:
            img.load()
            try:
                img = ImageOps.exif_transpose(img)
            except Exception as e:
                logger.debug(f"No EXIF orientation applied to {path}: {e}")
            image = packed_from_pil(img)
    except (OSError, ValueError) as e:
        logger.error(f"Failed to read image {path}: {e}")
        return None
    except Exception as e:
        logger.error(f"Unexpected error reading image {path}: {e}")
        return None

    logger.debug(f"Read {path}: {image.width}x{image.height}")
    return image


def write_image(
    image: PackedImage,
    path: Union[str, Path],
    fmt: str = FORMAT_PNG,
    keep_alpha: bool = False,
) -> bool:
    """Save an image file. Returns False (and logs why) on failure."""
    path = Path(path)
    pil_format = _PIL_FORMATS.get(fmt.lower())
    if pil_format is None:
        logger.error(f"Unsupported image format '{fmt}'. Supported formats: {sorted(_PIL_FORMATS)}")
        return False
    if keep_alpha and pil_format == "JPEG":
        logger.warning("JPEG cannot store alpha; writing RGB")
        keep_alpha = False

    try:
        packed_to_pil(image, keep_alpha=keep_alpha).save(path, format=pil_format)
    except (OSError, ValueError) as e:
        logger.error(f"Failed to write image {path}: {e}")
        return False
    except Exception as e:
        logger.error(f"Unexpected error writing image {path}: {e}")
        return False

    logger.debug(f"Wrote {path} as {pil_format}")
    return True
