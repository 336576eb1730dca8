from unittest.mock import MagicMock

from clipstack.storage import SettingsStore, log_storage_error


class TestSlots:
    def test_missing_key(self, settings):
        assert settings.get("absent") is None

    def test_set_and_get(self, settings):
        assert settings.set("history.max_items", "42") is True
        assert settings.get("history.max_items") == "42"

    def test_overwrite(self, settings):
        settings.set("k", "one")
        settings.set("k", "two")
        assert settings.get("k") == "two"
        assert settings.keys() == ["k"]

    def test_delete(self, settings):
        settings.set("k", "v")
        assert settings.delete("k") is True
        assert settings.get("k") is None

    def test_keys_sorted(self, settings):
        settings.set("b", "1")
        settings.set("a", "2")
        assert settings.keys() == ["a", "b"]

    def test_large_value(self, settings):
        value = "x" * 2_000_000
        settings.set("big", value)
        assert settings.get("big") == value


class TestFileBacked:
    def test_values_survive_reopen(self, tmp_path):
        db = tmp_path / "settings.db"
        with SettingsStore(db) as first:
            first.set("history.auto_paste", "1")
        with SettingsStore(db) as second:
            assert second.get("history.auto_paste") == "1"

    def test_init_db_idempotent(self, tmp_path):
        db = tmp_path / "settings.db"
        with SettingsStore(db) as mgr:
            mgr.init_db()
            mgr.set("k", "v")
            mgr.init_db()
            assert mgr.get("k") == "v"


class TestUnreadableDatabase:
    def test_junk_file_moved_aside(self, tmp_path):
        db = tmp_path / "clipstack.db"
        db.write_bytes(b"this is not a sqlite database, just junk bytes " * 50)
        on_error = MagicMock()

        with SettingsStore(db, on_error=on_error) as mgr:
            assert mgr.get("history.items") is None
            assert mgr.set("history.items", "{}") is True

        assert on_error.call_args_list[0][0][:2] == ("open", str(db))
        assert (tmp_path / "clipstack.db.corrupt").exists()
        with SettingsStore(db) as reopened:
            assert reopened.get("history.items") == "{}"

    def test_unusable_path_falls_back_to_memory(self, tmp_path):
        on_error = MagicMock()
        with SettingsStore(tmp_path / "missing" / "clipstack.db", on_error=on_error) as mgr:
            assert mgr.set("k", "v") is True
            assert mgr.get("k") == "v"
        assert on_error.call_count == 2
        assert {c[0][0] for c in on_error.call_args_list} == {"open"}


class TestErrorHook:
    def test_write_failure_reported(self):
        on_error = MagicMock()
        mgr = SettingsStore(":memory:", on_error=on_error)
        mgr.close()
        assert mgr.set("k", "v") is False
        on_error.assert_called_once()
        assert on_error.call_args[0][:2] == ("write", "k")

    def test_read_failure_reported(self):
        on_error = MagicMock()
        mgr = SettingsStore(":memory:", on_error=on_error)
        mgr.close()
        assert mgr.get("k") is None
        assert on_error.call_args[0][:2] == ("read", "k")

    def test_delete_failure_reported(self):
        on_error = MagicMock()
        mgr = SettingsStore(":memory:", on_error=on_error)
        mgr.close()
        assert mgr.delete("k") is False
        assert on_error.call_args[0][:2] == ("delete", "k")

    def test_default_hook_logs(self, caplog):
        log_storage_error("write", "history.items", RuntimeError("disk full"))
        assert "history.items" in caplog.text
        assert "disk full" in caplog.text
