import logging
from enum import Enum
from typing import Protocol

from clipstack.history import HistoryStore
from clipstack.hotkey import Hotkey, HotkeyRegistrar
from clipstack.models import Entry, HistorySnapshot
from clipstack.poller import ClipboardPoller, ClipboardSource

logger = logging.getLogger(__name__)


class ClipboardSink(Protocol):
    def write(self, entry: Entry) -> bool: ...

    def paste(self) -> None: ...


class EngineState(str, Enum):
    STOPPED = "stopped"
    RUNNING = "running"


class HistoryEngine:
    """Owns the history lifecycle and the activation interface used by the UI."""

    def __init__(
        self,
        store: HistoryStore,
        source: ClipboardSource,
        sink: ClipboardSink,
        poller: ClipboardPoller | None = None,
        hotkeys: HotkeyRegistrar | None = None,
        hotkey: Hotkey | None = None,
    ):
        self._store = store
        self._sink = sink
        self._poller = poller or ClipboardPoller(source, store)
        self._hotkeys = hotkeys
        self._hotkey = hotkey
        self._loaded = False
        self.state = EngineState.STOPPED

    @property
    def store(self) -> HistoryStore:
        return self._store

    @property
    def poller(self) -> ClipboardPoller:
        return self._poller

    def start(self) -> None:
        if self.state == EngineState.RUNNING:
            return
        if not self._loaded:
            self._store.load_persisted()
            self._loaded = True
        self._poller.sync_change_token()
        self._poller.start()
        if self._hotkeys is not None and self._hotkey is not None:
            try:
                self._hotkeys.register(self._hotkey)
            except Exception:
                logger.exception("Could not register hotkey %s", self._hotkey)
        self.state = EngineState.RUNNING

    def stop(self) -> None:
        if self.state == EngineState.STOPPED:
            return
        self._poller.stop()
        if self._hotkeys is not None:
            self._hotkeys.unregister()
        self.state = EngineState.STOPPED

    def select(self, entry_id: str) -> bool:
        """Put an entry back on the clipboard, pasting it if auto-paste is on."""
        entry = self._store.get(entry_id)
        if entry is None:
            return False

        try:
            if not self._sink.write(entry):
                logger.warning("Clipboard rejected entry %s", entry_id)
                return False
        except Exception:
            logger.exception("Error copying entry to clipboard")
            return False

        self._poller.sync_change_token()
        # Pinned entries keep their place; others move to the front as a fresh capture.
        if not entry.pinned:
            self._store.record(entry)

        if self._store.auto_paste:
            try:
                self._sink.paste()
            except Exception:
                logger.exception("Auto-paste failed")
        return True

    def toggle_pin(self, entry_id: str) -> bool | None:
        return self._store.toggle_pin(entry_id)

    def clear(self) -> None:
        self._store.clear()

    def set_max_items(self, value: int) -> int:
        return self._store.set_max_items(value)

    def set_auto_paste(self, enabled: bool) -> None:
        self._store.set_auto_paste(enabled)

    def search(self, query: str) -> list[Entry]:
        return self._store.search(query)

    def snapshot(self) -> HistorySnapshot:
        return self._store.snapshot()
