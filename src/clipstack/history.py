"""Ordered, size-bounded, pin-aware clipboard history.

The sequence is kept in display order: pinned entries first (in the order
they were pinned), then unpinned entries, most recently recorded first.
All access is expected from a single thread (the app's main run loop).
"""

import logging
from collections.abc import Callable, Iterator
from dataclasses import replace
from datetime import datetime

from clipstack.codec import CodecError, decode_entries, encode_entries
from clipstack.config import DEFAULT_MAX_ITEMS, clamp_max_items
from clipstack.models import Entry, EntryKind, HistorySnapshot, new_entry_id
from clipstack.storage import SettingsStore

logger = logging.getLogger(__name__)

ITEMS_KEY = "history.items"
MAX_ITEMS_KEY = "history.max_items"
AUTO_PASTE_KEY = "history.auto_paste"

Observer = Callable[[], None]


class HistoryStore:
    def __init__(self, settings: SettingsStore, on_change: Observer | None = None):
        self._settings = settings
        self._items: list[Entry] = []
        self._max_items = DEFAULT_MAX_ITEMS
        self._auto_paste = False
        self._observers: list[Observer] = []
        if on_change is not None:
            self._observers.append(on_change)

    @property
    def items(self) -> list[Entry]:
        return [replace(e) for e in self._items]

    @property
    def max_items(self) -> int:
        return self._max_items

    @property
    def auto_paste(self) -> bool:
        return self._auto_paste

    @property
    def pinned_count(self) -> int:
        count = 0
        for entry in self._items:
            if not entry.pinned:
                break
            count += 1
        return count

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[Entry]:
        return iter(self.items)

    def snapshot(self) -> HistorySnapshot:
        return HistorySnapshot(
            items=tuple(replace(e) for e in self._items),
            max_items=self._max_items,
            auto_paste=self._auto_paste,
        )

    def get(self, entry_id: str) -> Entry | None:
        index = self._index_of(entry_id)
        return replace(self._items[index]) if index is not None else None

    def search(self, query: str) -> list[Entry]:
        q = query.strip().lower()
        if not q:
            return self.items
        results = []
        for entry in self._items:
            if entry.kind == EntryKind.TEXT:
                if entry.text and q in entry.text.lower():
                    results.append(replace(entry))
            elif q in "image":
                results.append(replace(entry))
        return results

    def add_observer(self, callback: Observer) -> None:
        self._observers.append(callback)

    def remove_observer(self, callback: Observer) -> None:
        if callback in self._observers:
            self._observers.remove(callback)

    # -- mutations ---------------------------------------------------------

    def record(self, candidate: Entry) -> bool:
        """Add a normalized capture to the front of the unpinned region.

        Returns False when the candidate matches the current front unpinned
        entry, True when the sequence changed.
        """
        key = candidate.dedup_key
        pinned = self.pinned_count
        if pinned < len(self._items) and self._items[pinned].dedup_key == key:
            return False

        self._items = [e for e in self._items if e.dedup_key != key]
        pinned = self.pinned_count

        entry = replace(candidate, id=new_entry_id(), created_at=datetime.now(), pinned=False)
        self._items.insert(pinned, entry)
        self._evict(keep_front=True)

        self.persist()
        self._notify()
        return True

    def toggle_pin(self, entry_id: str) -> bool | None:
        """Flip an entry's pin flag and move it to the region boundary.

        Returns the new pin state, or None if no entry has ``entry_id``.
        Pinning is refused (False) once pins would fill the whole history.
        """
        index = self._index_of(entry_id)
        if index is None:
            return None

        entry = self._items[index]
        if not entry.pinned and self.pinned_count + 1 >= self._max_items:
            logger.info("Not pinning %s: pin limit reached (%d)", entry_id, self._max_items - 1)
            return False

        del self._items[index]
        entry.pinned = not entry.pinned
        # The boundary index is the same for both directions: after the
        # remaining pins when pinning, before the remaining unpinned otherwise.
        self._items.insert(self.pinned_count, entry)

        self.persist()
        self._notify()
        return entry.pinned

    def clear(self) -> None:
        self._items = []
        self.persist()
        self._notify()

    def set_max_items(self, value: int) -> int:
        self._max_items = clamp_max_items(value)
        self._settings.set(MAX_ITEMS_KEY, str(self._max_items))
        if self._evict():
            self.persist()
        self._notify()
        return self._max_items

    def set_auto_paste(self, enabled: bool) -> None:
        self._auto_paste = bool(enabled)
        self._settings.set(AUTO_PASTE_KEY, "1" if self._auto_paste else "0")
        self._notify()

    # -- persistence -------------------------------------------------------

    def load_persisted(self) -> None:
        self._max_items = self._load_max_items()
        self._auto_paste = self._settings.get(AUTO_PASTE_KEY) == "1"

        raw = self._settings.get(ITEMS_KEY)
        if raw is None:
            self._items = []
        else:
            try:
                self._items = self._ordered(decode_entries(raw))
            except CodecError:
                logger.warning("Persisted history is unreadable, starting empty", exc_info=True)
                self._items = []
        self._evict()
        self._notify()

    def persist(self) -> bool:
        return self._settings.set(ITEMS_KEY, encode_entries(self._items))

    # -- internals ---------------------------------------------------------

    def _load_max_items(self) -> int:
        raw = self._settings.get(MAX_ITEMS_KEY)
        if raw is None:
            return DEFAULT_MAX_ITEMS
        try:
            return clamp_max_items(int(raw))
        except ValueError:
            return DEFAULT_MAX_ITEMS

    def _index_of(self, entry_id: str) -> int | None:
        for i, entry in enumerate(self._items):
            if entry.id == entry_id:
                return i
        return None

    def _evict(self, keep_front: bool = False) -> bool:
        """Drop unpinned entries from the tail until within ``max_items``.

        Pinned entries are never evicted. With ``keep_front`` the newest
        unpinned entry survives even if pins alone fill the history.
        """
        floor = self.pinned_count + (1 if keep_front else 0)
        evicted = False
        while len(self._items) > self._max_items and len(self._items) > floor:
            if self._items[-1].pinned:
                break
            self._items.pop()
            evicted = True
        if evicted:
            logger.debug("Evicted history down to %d entries", len(self._items))
        return evicted

    @staticmethod
    def _ordered(entries: list[Entry]) -> list[Entry]:
        seen = set()
        unique = []
        for entry in entries:
            if entry.dedup_key in seen:
                continue
            seen.add(entry.dedup_key)
            unique.append(entry)
        return [e for e in unique if e.pinned] + [e for e in unique if not e.pinned]

    def _notify(self) -> None:
        for callback in list(self._observers):
            try:
                callback()
            except Exception:
                logger.exception("History observer failed")
