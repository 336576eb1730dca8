import io
from datetime import datetime

import pytest
from PIL import Image

from clipstack.history import HistoryStore
from clipstack.models import Entry, EntryKind
from clipstack.storage import SettingsStore
from clipstack.utils import compute_hash


@pytest.fixture
def settings():
    mgr = SettingsStore(db_path=":memory:")
    yield mgr
    mgr.close()


@pytest.fixture
def store(settings):
    return HistoryStore(settings)


@pytest.fixture
def make_png():
    """Factory fixture producing PNG bytes for a solid-colour image."""

    def _make_png(size: tuple[int, int] = (4, 3), color=(255, 0, 0, 255), fmt: str = "PNG") -> bytes:
        buffer = io.BytesIO()
        Image.new("RGBA", size, color).save(buffer, format=fmt)
        return buffer.getvalue()

    return _make_png


@pytest.fixture
def make_entry(make_png):
    """Factory fixture to create Entry candidates for testing."""

    def _make_entry(
        text: str | None = "hello world",
        kind: EntryKind = EntryKind.TEXT,
        pinned: bool = False,
        color=(255, 0, 0, 255),
    ) -> Entry:
        if kind == EntryKind.IMAGE:
            png = make_png(color=color)
            return Entry(
                kind=kind,
                image_bytes=png,
                image_hash=compute_hash(png),
                created_at=datetime.now(),
                pinned=pinned,
            )
        return Entry(kind=kind, text=text, created_at=datetime.now(), pinned=pinned)

    return _make_entry


@pytest.fixture
def record_texts(store, make_entry):
    """Record each text in order and return the store."""

    def _record(*texts: str) -> HistoryStore:
        for text in texts:
            store.record(make_entry(text))
        return store

    return _record
