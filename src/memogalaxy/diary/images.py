"""Photo handling for diary entries.

Photos are stored inside the entry record, so each one is re-encoded as a
JPEG at a user-chosen quality before it is attached. Quality runs from 0.1
(smallest file) to 1.0 (best picture).
"""

import io

from loguru import logger
from PIL import Image, UnidentifiedImageError

DEFAULT_IMAGE_QUALITY = 0.8
MIN_IMAGE_QUALITY = 0.1


def _flatten(img: Image.Image) -> Image.Image:
    """RGB copy of *img*; transparent areas become white."""
    if img.mode in ("RGBA", "LA", "P"):
        rgba = img.convert("RGBA")
        background = Image.new("RGB", img.size, (255, 255, 255))
        background.paste(rgba, mask=rgba.split()[-1])
        return background
    if img.mode != "RGB":
        return img.convert("RGB")
    return img


def compress_image(data: bytes, quality: float = DEFAULT_IMAGE_QUALITY) -> bytes:
    """Re-encode an image as JPEG.

    Args:
        data: Any image format Pillow can read.
        quality: 0.1 to 1.0, mapped onto Pillow's 1-100 JPEG quality.

    Returns:
        The JPEG bytes.

    Raises:
        ValueError: If *quality* is out of range or *data* is not an image.
    """
    if not MIN_IMAGE_QUALITY <= quality <= 1.0:
        raise ValueError(f"image quality must be within [{MIN_IMAGE_QUALITY}, 1.0], got {quality}")

    try:
        with Image.open(io.BytesIO(data)) as img:
            img.load()
            out = io.BytesIO()
            _flatten(img).save(out, "JPEG", quality=round(quality * 100))
    except (UnidentifiedImageError, OSError) as e:
        raise ValueError(f"Not a readable image: {e}") from e

    jpeg = out.getvalue()
    logger.debug(f"Re-encoded photo at quality {quality}: {len(data)} -> {len(jpeg)} bytes")
    return jpeg
