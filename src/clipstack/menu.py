"""Menu structure for the status bar app, kept free of rumps so it can be tested."""

from dataclasses import dataclass

from clipstack import __version__
from clipstack.models import Entry, EntryKind, HistorySnapshot

ACTION_SELECT = "select"
ACTION_SEARCH = "search"
ACTION_SHOW_ALL = "show_all"
ACTION_AUTO_PASTE = "auto_paste"
ACTION_MAX_ITEMS = "max_items"
ACTION_CLEAR = "clear"
ACTION_QUIT = "quit"


@dataclass
class MenuItemSpec:
    """Specification for a menu item, separating logic from rumps rendering."""

    title: str
    action: str | None = None
    entry_id: str | None = None
    state: bool | None = None
    image_entry: Entry | None = None
    is_submenu: bool = False
    children: list["MenuItemSpec | None"] | None = None


def entry_spec(entry: Entry) -> MenuItemSpec:
    return MenuItemSpec(
        title=entry.preview,
        action=ACTION_SELECT,
        entry_id=entry.id,
        image_entry=entry if entry.kind == EntryKind.IMAGE else None,
    )


def compute_menu_specs(snapshot: HistorySnapshot, display_count: int) -> list[MenuItemSpec | None]:
    specs: list[MenuItemSpec | None] = [
        MenuItemSpec(f"Clipstack v{__version__} - Clipboard History"),
        None,  # separator
        MenuItemSpec("Search...", action=ACTION_SEARCH),
        None,  # separator
    ]

    pinned = [e for e in snapshot.items if e.pinned]
    recent = [e for e in snapshot.items if not e.pinned][:display_count]

    if pinned:
        specs.append(MenuItemSpec("📌 Pinned", is_submenu=True, children=[entry_spec(e) for e in pinned]))
        specs.append(None)

    if not recent and not pinned:
        specs.append(MenuItemSpec("(No clipboard history)"))
    else:
        specs.extend(entry_spec(e) for e in recent)

    specs.extend([
        None,
        MenuItemSpec("Auto-Paste", action=ACTION_AUTO_PASTE, state=snapshot.auto_paste),
        MenuItemSpec(f"Keep: {snapshot.max_items} items...", action=ACTION_MAX_ITEMS),
        MenuItemSpec("Clear History", action=ACTION_CLEAR),
        None,
        MenuItemSpec("Quit Clipstack", action=ACTION_QUIT),
    ])
    return specs


def compute_search_specs(query: str, results: list[Entry], display_count: int) -> list[MenuItemSpec | None]:
    shown = results[:display_count]
    specs: list[MenuItemSpec | None] = [
        MenuItemSpec(f'Search: "{query}" ({len(results)} results)'),
        None,
        MenuItemSpec("Show All", action=ACTION_SHOW_ALL),
        None,
    ]
    specs.extend(entry_spec(e) for e in shown)
    specs.extend([
        None,
        MenuItemSpec("Quit Clipstack", action=ACTION_QUIT),
    ])
    return specs
