from unittest.mock import MagicMock

import pytest

from clipstack.hotkey import MODIFIER_FLAGS, Hotkey, HotkeyRegistrar, parse_hotkey

CMD = MODIFIER_FLAGS["cmd"]
SHIFT = MODIFIER_FLAGS["shift"]
ALT = MODIFIER_FLAGS["alt"]


def key_event(characters: str, flags: int) -> MagicMock:
    event = MagicMock()
    event.charactersIgnoringModifiers.return_value = characters
    event.modifierFlags.return_value = flags
    return event


class TestParseHotkey:
    def test_default(self):
        hotkey = parse_hotkey("cmd+shift+v")
        assert hotkey == Hotkey(key="v", modifiers=frozenset({"cmd", "shift"}))

    def test_aliases_and_case(self):
        hotkey = parse_hotkey("Command + Option + K")
        assert hotkey.modifiers == frozenset({"cmd", "alt"})
        assert hotkey.key == "k"

    def test_canonical_format(self):
        assert str(parse_hotkey("shift+cmd+v")) == "shift+cmd+v"
        assert str(parse_hotkey("cmd+ctrl+option+shift+x")) == "ctrl+alt+shift+cmd+x"

    @pytest.mark.parametrize("spec", ["", "  ", "v", "cmd+", "cmd++v", "cmd+shift+enter", "hyper+v"])
    def test_invalid(self, spec):
        with pytest.raises(ValueError):
            parse_hotkey(spec)

    def test_modifier_mask(self):
        assert parse_hotkey("cmd+shift+v").modifier_mask == CMD | SHIFT


class TestMatches:
    def test_exact_match(self):
        assert parse_hotkey("cmd+shift+v").matches("v", CMD | SHIFT)

    def test_uppercase_characters(self):
        assert parse_hotkey("cmd+shift+v").matches("V", CMD | SHIFT)

    def test_extra_modifier_rejected(self):
        assert not parse_hotkey("cmd+shift+v").matches("v", CMD | SHIFT | ALT)

    def test_missing_modifier_rejected(self):
        assert not parse_hotkey("cmd+shift+v").matches("v", CMD)

    def test_device_dependent_bits_ignored(self):
        assert parse_hotkey("cmd+shift+v").matches("v", CMD | SHIFT | 0x108)

    def test_other_key_rejected(self):
        assert not parse_hotkey("cmd+shift+v").matches("c", CMD | SHIFT)

    def test_no_characters(self):
        assert not parse_hotkey("cmd+shift+v").matches(None, CMD | SHIFT)


class TestRegistrar:
    def test_handle_event_triggers_callback(self):
        registrar = HotkeyRegistrar()
        registrar._hotkey = parse_hotkey("cmd+shift+v")
        callback = MagicMock()
        registrar.on_triggered(callback)
        assert registrar.handle_event(key_event("v", CMD | SHIFT)) is True
        callback.assert_called_once()

    def test_non_matching_event(self):
        registrar = HotkeyRegistrar()
        registrar._hotkey = parse_hotkey("cmd+shift+v")
        callback = MagicMock()
        registrar.on_triggered(callback)
        assert registrar.handle_event(key_event("v", CMD)) is False
        callback.assert_not_called()

    def test_unregistered_ignores_events(self):
        registrar = HotkeyRegistrar()
        callback = MagicMock()
        registrar.on_triggered(callback)
        assert registrar.handle_event(key_event("v", CMD | SHIFT)) is False
        callback.assert_not_called()

    def test_callback_error_contained(self):
        registrar = HotkeyRegistrar()
        registrar._hotkey = parse_hotkey("cmd+shift+v")
        registrar.on_triggered(MagicMock(side_effect=RuntimeError("window failed")))
        assert registrar.handle_event(key_event("v", CMD | SHIFT)) is True

    def test_unregister_without_monitors(self):
        registrar = HotkeyRegistrar()
        registrar.unregister()
        assert registrar.hotkey is None
