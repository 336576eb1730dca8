import os
from pathlib import Path

DATA_DIR = Path(os.environ.get("CLIPSTACK_DATA_DIR", Path.home() / ".local" / "share" / "clipstack"))
DB_PATH = DATA_DIR / "clipstack.db"
IMAGE_DIR = DATA_DIR / "thumbnails"
LOG_PATH = DATA_DIR / "clipstack.log"

POLL_INTERVAL = 0.5  # seconds between clipboard checks
MIN_ITEMS = 5
MAX_ITEMS = 500
DEFAULT_MAX_ITEMS = 50
MAX_TEXT_SIZE = 1_000_000  # 1MB text limit
MAX_IMAGE_SIZE = 10_000_000  # 10MB image limit
PREVIEW_LENGTH = 60  # characters shown in menu item
DEFAULT_HOTKEY = "cmd+shift+v"


def clamp_max_items(value: int) -> int:
    return max(MIN_ITEMS, min(MAX_ITEMS, int(value)))


def _parse_menu_display_count() -> int:
    raw = os.environ.get("CLIPSTACK_MENU_DISPLAY_COUNT")
    if raw is None:
        return 10
    try:
        value = int(raw)
    except ValueError:
        return 10
    return max(5, min(50, value))


MENU_DISPLAY_COUNT = _parse_menu_display_count()
HOTKEY = os.environ.get("CLIPSTACK_HOTKEY", DEFAULT_HOTKEY)
THUMBNAIL_SIZE = (32, 32)  # pixels, for menu icon display
