import logging

import rumps
from AppKit import NSAlternateKeyMask, NSEvent

from clipstack.config import IMAGE_DIR, MENU_DISPLAY_COUNT, THUMBNAIL_SIZE
from clipstack.engine import HistoryEngine
from clipstack.menu import (
    ACTION_AUTO_PASTE,
    ACTION_CLEAR,
    ACTION_MAX_ITEMS,
    ACTION_QUIT,
    ACTION_SEARCH,
    ACTION_SELECT,
    ACTION_SHOW_ALL,
    MenuItemSpec,
    compute_menu_specs,
    compute_search_specs,
)
from clipstack.models import Entry
from clipstack.utils import create_thumbnail

logger = logging.getLogger(__name__)

ENTRY_KEY_PREFIX = "clipstack_entry_"


class ClipstackApp(rumps.App):
    def __init__(self, engine: HistoryEngine):
        super().__init__("Clipstack", title="📋", quit_button=None)
        self._engine = engine
        self._entry_ids: dict[str, str] = {}
        self._callbacks = {
            ACTION_SELECT: self._on_entry_click,
            ACTION_SEARCH: self._on_search,
            ACTION_SHOW_ALL: lambda _: self._refresh_menu(),
            ACTION_AUTO_PASTE: self._on_auto_paste,
            ACTION_MAX_ITEMS: self._on_max_items,
            ACTION_CLEAR: self._on_clear,
            ACTION_QUIT: self._on_quit,
        }
        self._engine.store.add_observer(self._refresh_menu)
        self._build_menu()

    def open_search(self) -> None:
        self._on_search(None)

    def _build_menu(self) -> None:
        specs = compute_menu_specs(self._engine.snapshot(), MENU_DISPLAY_COUNT)
        self._render_menu_specs(specs)

    def _render_menu_specs(self, specs: list[MenuItemSpec | None]) -> None:
        self.menu.clear()
        self._entry_ids.clear()
        self.menu = [self._render_single_spec(spec) for spec in specs]

    def _render_single_spec(self, spec: MenuItemSpec | None) -> rumps.MenuItem | None:
        if spec is None:
            return None

        if spec.is_submenu and spec.children:
            submenu = rumps.MenuItem(spec.title)
            for child in spec.children:
                submenu.add(self._render_single_spec(child))
            return submenu

        kwargs = {"callback": self._callbacks.get(spec.action)}
        if spec.image_entry is not None:
            thumb_path = self._ensure_thumbnail(spec.image_entry)
            if thumb_path:
                kwargs.update(icon=thumb_path, dimensions=THUMBNAIL_SIZE, template=False)

        item = rumps.MenuItem(spec.title, **kwargs)
        if spec.state is not None:
            item.state = int(spec.state)

        if spec.entry_id is not None:
            key = f"{ENTRY_KEY_PREFIX}{spec.entry_id}"
            item._id = key
            self._entry_ids[key] = spec.entry_id

        return item

    def _ensure_thumbnail(self, entry: Entry) -> str | None:
        if not entry.image_hash or not entry.image_bytes:
            return None
        thumb_path = IMAGE_DIR / f"{entry.image_hash[:12]}_thumb.png"
        if thumb_path.exists() or create_thumbnail(entry.image_bytes, thumb_path, THUMBNAIL_SIZE):
            return str(thumb_path)
        return None

    def _refresh_menu(self) -> None:
        self._build_menu()

    def _on_entry_click(self, sender) -> None:
        entry_id = self._entry_ids.get(getattr(sender, "_id", ""))
        if entry_id is None:
            return

        # Option-click toggles the pin instead of copying
        if NSEvent.modifierFlags() & NSAlternateKeyMask:
            was_pinned = self._is_pinned(entry_id)
            if self._engine.toggle_pin(entry_id) is False and not was_pinned:
                rumps.notification("Clipstack", "", "Pin limit reached", sound=False)
            return

        if self._engine.select(entry_id) and not self._engine.store.auto_paste:
            rumps.notification("Clipstack", "", "Copied to clipboard", sound=False)

    def _is_pinned(self, entry_id: str) -> bool:
        entry = self._engine.store.get(entry_id)
        return entry is not None and entry.pinned

    def _on_search(self, _sender) -> None:
        response = rumps.Window(
            message="Search clipboard history:",
            title="Clipstack Search",
            default_text="",
            ok="Search",
            cancel="Cancel",
            dimensions=(300, 24),
        ).run()

        if not (response.clicked and response.text.strip()):
            return

        query = response.text.strip()
        results = self._engine.search(query)
        if not results:
            rumps.alert("Clipstack Search", f'No results for "{query}"')
            return

        self._render_menu_specs(compute_search_specs(query, results, MENU_DISPLAY_COUNT))

    def _on_auto_paste(self, sender) -> None:
        self._engine.set_auto_paste(not bool(sender.state))

    def _on_max_items(self, _sender) -> None:
        response = rumps.Window(
            message="Number of clipboard items to keep (5-500):",
            title="Clipstack",
            default_text=str(self._engine.store.max_items),
            ok="Save",
            cancel="Cancel",
            dimensions=(120, 24),
        ).run()
        if not response.clicked:
            return
        try:
            value = int(response.text.strip())
        except ValueError:
            rumps.alert("Clipstack", f"Not a number: {response.text!r}")
            return
        self._engine.set_max_items(value)

    def _on_clear(self, _sender) -> None:
        if rumps.alert("Clipstack", "Clear all clipboard history?", ok="Clear", cancel="Cancel"):
            self._engine.clear()

    def _on_quit(self, _sender) -> None:
        self._engine.stop()
        rumps.quit_application()
