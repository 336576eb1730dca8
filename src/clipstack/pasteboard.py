"""NSPasteboard-backed clipboard source and sink (macOS only)."""

import logging
import time

from AppKit import NSPasteboard, NSPasteboardTypePNG, NSPasteboardTypeString, NSPasteboardTypeTIFF
from Foundation import NSData
from Quartz import CGEventCreateKeyboardEvent, CGEventPost, CGEventSetFlags, kCGEventFlagMaskCommand, kCGHIDEventTap

from clipstack.models import ClipboardSnapshot, Entry, EntryKind, SnapshotType

logger = logging.getLogger(__name__)

KEY_CODE_V = 9  # kVK_ANSI_V
KEY_EVENT_DELAY = 0.02  # seconds between synthesized key events


class MacPasteboard:
    def __init__(self, pasteboard=None):
        self._pasteboard = pasteboard or NSPasteboard.generalPasteboard()

    def current_change_token(self) -> int:
        return self._pasteboard.changeCount()

    def read_snapshot(self) -> ClipboardSnapshot | None:
        types = self._pasteboard.types()
        if types is None:
            return None

        if NSPasteboardTypeString in types:
            text = self._pasteboard.stringForType_(NSPasteboardTypeString)
            if text:
                return ClipboardSnapshot(SnapshotType.TEXT, str(text))

        for img_type in (NSPasteboardTypePNG, NSPasteboardTypeTIFF):
            if img_type in types:
                data = self._pasteboard.dataForType_(img_type)
                if data is not None:
                    return ClipboardSnapshot(SnapshotType.IMAGE, bytes(data))

        return ClipboardSnapshot(SnapshotType.OTHER)

    def write(self, entry: Entry) -> bool:
        pb = self._pasteboard

        if entry.kind == EntryKind.TEXT and entry.text:
            pb.clearContents()
            return bool(pb.setString_forType_(entry.text, NSPasteboardTypeString))

        if entry.kind == EntryKind.IMAGE and entry.image_bytes:
            png_data = NSData.dataWithBytes_length_(entry.image_bytes, len(entry.image_bytes))
            if not png_data:
                return False
            pb.clearContents()
            pb.declareTypes_owner_([NSPasteboardTypePNG, NSPasteboardTypeTIFF], None)
            written = bool(pb.setData_forType_(png_data, NSPasteboardTypePNG))
            tiff_data = self._png_to_tiff(png_data)
            if tiff_data is not None:
                pb.setData_forType_(tiff_data, NSPasteboardTypeTIFF)
            return written

        return False

    def paste(self) -> None:
        """Synthesize Cmd+V so the frontmost application pastes."""
        events = [
            CGEventCreateKeyboardEvent(None, KEY_CODE_V, True),
            CGEventCreateKeyboardEvent(None, KEY_CODE_V, False),
        ]
        for event in events:
            if event is None:
                logger.warning("Failed to create keyboard events for auto-paste")
                return
            CGEventSetFlags(event, kCGEventFlagMaskCommand)
        for event in events:
            CGEventPost(kCGHIDEventTap, event)
            time.sleep(KEY_EVENT_DELAY)

    @staticmethod
    def _png_to_tiff(png_data):
        from AppKit import NSBitmapImageRep

        rep = NSBitmapImageRep.imageRepWithData_(png_data)
        if rep is None:
            return None
        return rep.TIFFRepresentation()
