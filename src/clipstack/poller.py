import logging
from collections.abc import Callable
from typing import Any, Protocol

from clipstack.config import POLL_INTERVAL
from clipstack.history import HistoryStore
from clipstack.models import ClipboardSnapshot
from clipstack.normalizer import normalize

logger = logging.getLogger(__name__)


class ClipboardSource(Protocol):
    def current_change_token(self) -> Any: ...

    def read_snapshot(self) -> ClipboardSnapshot | None: ...


class Timer(Protocol):
    def start(self) -> None: ...

    def stop(self) -> None: ...


TimerFactory = Callable[[Callable[[Any], None], float], Timer]


def rumps_timer(callback: Callable[[Any], None], interval: float) -> Timer:
    import rumps

    return rumps.Timer(callback, interval)


class ClipboardPoller:
    def __init__(
        self,
        source: ClipboardSource,
        store: HistoryStore,
        interval: float = POLL_INTERVAL,
        timer_factory: TimerFactory | None = None,
    ):
        self._source = source
        self._store = store
        self._interval = interval
        self._timer_factory = timer_factory or rumps_timer
        self._timer: Timer | None = None
        self._ticking = False
        self._last_change_token: Any = None
        self.sync_change_token()

    @property
    def running(self) -> bool:
        return self._timer is not None

    def start(self) -> None:
        if self._timer is not None:
            self._timer.stop()
        self._timer = self._timer_factory(self._on_timer, self._interval)
        self._timer.start()
        logger.info("Clipboard polling started (every %.2fs)", self._interval)

    def stop(self) -> None:
        if self._timer is None:
            return
        self._timer.stop()
        self._timer = None
        logger.info("Clipboard polling stopped")

    def tick(self) -> bool:
        if self._ticking:
            return False
        self._ticking = True
        try:
            return self._check_clipboard()
        finally:
            self._ticking = False

    def sync_change_token(self) -> None:
        """Treat the current clipboard contents as already seen.

        An unreadable token leaves the previous one in place, so the next
        successful tick sees a change.
        """
        try:
            self._last_change_token = self._source.current_change_token()
        except Exception:
            logger.exception("Error reading clipboard change token")

    def _on_timer(self, _sender) -> None:
        self.tick()

    def _check_clipboard(self) -> bool:
        try:
            current_token = self._source.current_change_token()
        except Exception:
            logger.exception("Error reading clipboard change token")
            return False
        if current_token == self._last_change_token:
            return False

        self._last_change_token = current_token

        try:
            candidate = normalize(self._source.read_snapshot())
        except Exception:
            logger.exception("Error reading clipboard")
            return False
        if candidate is None:
            return False

        return self._store.record(candidate)
