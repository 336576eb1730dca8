import base64
import binascii
import json
from datetime import datetime

from clipstack.models import Entry, EntryKind

FORMAT_VERSION = 1


class CodecError(ValueError):
    """Raised when a persisted history document cannot be decoded."""


def encode_entries(entries: list[Entry]) -> str:
    return json.dumps(
        {"version": FORMAT_VERSION, "items": [_entry_to_dict(e) for e in entries]},
        ensure_ascii=False,
    )


def decode_entries(raw: str | bytes) -> list[Entry]:
    try:
        document = json.loads(raw)
    except (TypeError, ValueError) as exc:
        raise CodecError(f"Invalid history document: {exc}") from exc

    if not isinstance(document, dict) or document.get("version") != FORMAT_VERSION:
        raise CodecError("Unsupported history document")

    items = document.get("items")
    if not isinstance(items, list):
        raise CodecError("History document has no item list")

    return [_dict_to_entry(item) for item in items]


def _entry_to_dict(entry: Entry) -> dict:
    image = base64.b64encode(entry.image_bytes).decode("ascii") if entry.image_bytes is not None else None
    return {
        "id": entry.id,
        "kind": entry.kind.value,
        "text": entry.text,
        "image": image,
        "image_hash": entry.image_hash,
        "created_at": entry.created_at.isoformat(),
        "pinned": entry.pinned,
    }


_ITEM_TYPES = {
    "id": (str,),
    "kind": (str,),
    "text": (str, type(None)),
    "image": (str, type(None)),
    "image_hash": (str, type(None)),
    "created_at": (str,),
    "pinned": (bool,),
}


def _dict_to_entry(item: dict) -> Entry:
    if not isinstance(item, dict):
        raise CodecError(f"Invalid history item: {item!r}")
    for name, types in _ITEM_TYPES.items():
        if name not in item and type(None) in types:
            continue
        if name not in item:
            raise CodecError(f"History item is missing {name!r}")
        if not isinstance(item[name], types):
            raise CodecError(f"History item field {name!r} has type {type(item[name]).__name__}")

    try:
        kind = EntryKind(item["kind"])
        image = item.get("image")
        entry = Entry(
            id=item["id"],
            kind=kind,
            text=item.get("text"),
            image_bytes=base64.b64decode(image, validate=True) if image is not None else None,
            image_hash=item.get("image_hash"),
            created_at=datetime.fromisoformat(item["created_at"]),
            pinned=item["pinned"],
        )
    except (ValueError, binascii.Error) as exc:
        raise CodecError(f"Invalid history item: {exc}") from exc

    if kind == EntryKind.TEXT and not entry.text:
        raise CodecError("Text item without text")
    if kind == EntryKind.IMAGE and (entry.image_bytes is None or not entry.image_hash):
        raise CodecError("Image item without image data")
    return entry
