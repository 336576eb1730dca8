import uuid
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

from clipstack.config import PREVIEW_LENGTH
from clipstack.utils import get_image_dimensions, truncate_text


class EntryKind(str, Enum):
    TEXT = "text"
    IMAGE = "image"


class SnapshotType(str, Enum):
    TEXT = "text"
    IMAGE = "image"
    OTHER = "other"


def new_entry_id() -> str:
    return uuid.uuid4().hex


@dataclass
class Entry:
    kind: EntryKind
    text: str | None = None
    image_bytes: bytes | None = None
    image_hash: str | None = None
    id: str = field(default_factory=new_entry_id)
    created_at: datetime = field(default_factory=datetime.now)
    pinned: bool = False

    @property
    def dedup_key(self) -> tuple[EntryKind, str | None]:
        if self.kind == EntryKind.IMAGE:
            return (self.kind, self.image_hash)
        return (self.kind, self.text)

    @property
    def display_title(self) -> str:
        if self.kind == EntryKind.IMAGE:
            width, height = get_image_dimensions(self.image_bytes or b"")
            return f"Image {width}x{height}"
        if not self.text:
            return "(empty)"
        return self.text.replace("\n", " ⏎ ")

    @property
    def preview(self) -> str:
        return truncate_text(self.display_title, PREVIEW_LENGTH)


@dataclass
class ClipboardSnapshot:
    """Raw clipboard content as read from the pasteboard, before normalization."""

    type_tag: SnapshotType
    payload: str | bytes | None = None


@dataclass(frozen=True)
class HistorySnapshot:
    """Read-only view of the history handed to the presentation layer."""

    items: tuple[Entry, ...]
    max_items: int
    auto_paste: bool
