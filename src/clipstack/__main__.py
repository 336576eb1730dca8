import logging
import sys

from clipstack.config import DB_PATH, HOTKEY, LOG_PATH
from clipstack.hotkey import Hotkey, parse_hotkey
from clipstack.utils import ensure_dirs

logger = logging.getLogger(__name__)


def setup_logging() -> None:
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        handlers=[
            logging.FileHandler(LOG_PATH),
            logging.StreamHandler(sys.stderr),
        ],
    )


def resolve_hotkey(spec: str) -> Hotkey | None:
    """Parse the configured hotkey, or None if it is blank or invalid."""
    if not spec.strip():
        return None
    try:
        return parse_hotkey(spec)
    except ValueError:
        logger.warning("Ignoring invalid hotkey %r", spec)
        return None


def build_app():
    from clipstack.app import ClipstackApp
    from clipstack.engine import HistoryEngine
    from clipstack.history import HistoryStore
    from clipstack.hotkey import HotkeyRegistrar
    from clipstack.pasteboard import MacPasteboard
    from clipstack.storage import SettingsStore

    pasteboard = MacPasteboard()
    store = HistoryStore(SettingsStore(DB_PATH))
    hotkeys = HotkeyRegistrar()
    engine = HistoryEngine(store, pasteboard, pasteboard, hotkeys=hotkeys, hotkey=resolve_hotkey(HOTKEY))
    engine.start()

    app = ClipstackApp(engine)
    hotkeys.on_triggered(app.open_search)
    return app


def run_app():
    """Run the Clipstack application."""
    ensure_dirs()
    setup_logging()

    app = build_app()
    app.run()


def main():
    run_app()


if __name__ == "__main__":
    main()
