"""Turn raw clipboard snapshots into canonical history entries."""

import io
import logging

from PIL import Image

from clipstack.config import MAX_IMAGE_SIZE, MAX_TEXT_SIZE
from clipstack.models import ClipboardSnapshot, Entry, EntryKind, SnapshotType
from clipstack.utils import compute_hash

logger = logging.getLogger(__name__)


def normalize(snapshot: ClipboardSnapshot | None) -> Entry | None:
    """Return an entry candidate for ``snapshot``, or None if it is rejected.

    Rejection is the normal outcome for empty text, undecodable images and
    any other clipboard type; nothing is raised.
    """
    if snapshot is None or snapshot.payload is None:
        return None
    if snapshot.type_tag == SnapshotType.TEXT:
        return normalize_text(snapshot.payload)
    if snapshot.type_tag == SnapshotType.IMAGE:
        return normalize_image(snapshot.payload)
    return None


def normalize_text(payload: str | bytes) -> Entry | None:
    if isinstance(payload, bytes):
        try:
            payload = payload.decode("utf-8")
        except UnicodeDecodeError:
            return None

    text = payload.strip()
    if not text:
        return None

    if len(text.encode("utf-8")) > MAX_TEXT_SIZE:
        logger.warning("Text too large (%d characters), skipping", len(text))
        return None

    return Entry(kind=EntryKind.TEXT, text=text)


def normalize_image(payload: str | bytes) -> Entry | None:
    if not isinstance(payload, bytes) or not payload:
        return None

    if len(payload) > MAX_IMAGE_SIZE:
        logger.warning("Image too large (%d bytes), skipping", len(payload))
        return None

    png_bytes = canonical_png(payload)
    if png_bytes is None:
        return None

    return Entry(kind=EntryKind.IMAGE, image_bytes=png_bytes, image_hash=compute_hash(png_bytes))


def canonical_png(data: bytes) -> bytes | None:
    # Same pixels give the same bytes, whatever the source format or metadata.
    try:
        with Image.open(io.BytesIO(data)) as image:
            image.load()
            canonical = image.convert("RGBA")
    except (OSError, ValueError, SyntaxError, Image.DecompressionBombError):
        return None

    buffer = io.BytesIO()
    canonical.save(buffer, format="PNG")
    return buffer.getvalue()
