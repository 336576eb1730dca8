import hashlib
import io
import logging
import struct
from pathlib import Path

from PIL import Image

from clipstack.config import DATA_DIR, IMAGE_DIR

logger = logging.getLogger(__name__)


def compute_hash(data: str | bytes) -> str:
    if isinstance(data, str):
        data = data.encode("utf-8")
    return hashlib.sha256(data).hexdigest()


def truncate_text(text: str, max_len: int) -> str:
    single_line = " ".join(text.split())
    if len(single_line) <= max_len:
        return single_line
    return single_line[: max_len - 3] + "..."


def ensure_dirs() -> None:
    DATA_DIR.mkdir(parents=True, exist_ok=True)
    IMAGE_DIR.mkdir(parents=True, exist_ok=True)


def get_image_dimensions(png_bytes: bytes) -> tuple[int, int]:
    if len(png_bytes) < 24 or png_bytes[:8] != b"\x89PNG\r\n\x1a\n":
        return (0, 0)
    width = struct.unpack(">I", png_bytes[16:20])[0]
    height = struct.unpack(">I", png_bytes[20:24])[0]
    return (width, height)


def create_thumbnail(png_bytes: bytes, thumb_path: str | Path, size: tuple[int, int] = (32, 32)) -> bool:
    """Write a PNG thumbnail of an image entry for use as a menu icon.

    Args:
        png_bytes: Canonical PNG bytes of the source image
        thumb_path: Path to save the thumbnail
        size: Bounding box in pixels (width, height); aspect ratio is kept

    Returns:
        True if thumbnail was created successfully, False otherwise
    """
    try:
        with Image.open(io.BytesIO(png_bytes)) as image:
            image.thumbnail(size)
            image.save(thumb_path, format="PNG")
        return True
    except (OSError, ValueError):
        logger.debug("Could not create thumbnail at %s", thumb_path, exc_info=True)
        return False
