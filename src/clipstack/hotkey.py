"""Global hotkey parsing and registration."""

import logging
from collections.abc import Callable
from dataclasses import dataclass

logger = logging.getLogger(__name__)

# NSEventModifierFlags bits
MODIFIER_FLAGS = {
    "shift": 1 << 17,
    "ctrl": 1 << 18,
    "alt": 1 << 19,
    "cmd": 1 << 20,
}
MODIFIER_ALIASES = {
    "command": "cmd",
    "control": "ctrl",
    "option": "alt",
    "opt": "alt",
}
MODIFIER_ORDER = ("ctrl", "alt", "shift", "cmd")
DEVICE_INDEPENDENT_MASK = 0xFFFF0000
KEY_DOWN_MASK = 1 << 10  # NSEventMaskKeyDown
ALL_MODIFIERS = sum(MODIFIER_FLAGS.values())


@dataclass(frozen=True)
class Hotkey:
    key: str
    modifiers: frozenset[str]

    @property
    def modifier_mask(self) -> int:
        mask = 0
        for name in self.modifiers:
            mask |= MODIFIER_FLAGS[name]
        return mask

    def matches(self, characters: str | None, modifier_flags: int) -> bool:
        if not characters or characters.lower() != self.key:
            return False
        relevant = modifier_flags & DEVICE_INDEPENDENT_MASK & ALL_MODIFIERS
        return relevant == self.modifier_mask

    def __str__(self) -> str:
        parts = [m for m in MODIFIER_ORDER if m in self.modifiers]
        parts.append(self.key)
        return "+".join(parts)


def parse_hotkey(spec: str) -> Hotkey:
    parts = [p.strip().lower() for p in spec.split("+")]
    if not spec.strip() or any(not p for p in parts):
        raise ValueError(f"Invalid hotkey: {spec!r}")

    *modifier_names, key = parts
    if len(key) != 1:
        raise ValueError(f"Hotkey must end with a single key: {spec!r}")

    modifiers = set()
    for name in modifier_names:
        name = MODIFIER_ALIASES.get(name, name)
        if name not in MODIFIER_FLAGS:
            raise ValueError(f"Unknown modifier {name!r} in hotkey {spec!r}")
        modifiers.add(name)
    if not modifiers:
        raise ValueError(f"Hotkey needs at least one modifier: {spec!r}")

    return Hotkey(key=key, modifiers=frozenset(modifiers))


class HotkeyRegistrar:
    """Invoke a callback when the registered hotkey is pressed anywhere.

    Uses NSEvent global and local monitors; global monitoring needs the
    Accessibility permission.
    """

    def __init__(self):
        self._hotkey: Hotkey | None = None
        self._callback: Callable[[], None] | None = None
        self._monitors: list = []

    @property
    def hotkey(self) -> Hotkey | None:
        return self._hotkey

    def on_triggered(self, callback: Callable[[], None]) -> None:
        self._callback = callback

    def register(self, hotkey: Hotkey) -> None:
        self.unregister()
        self._hotkey = hotkey
        self._install_monitors()
        logger.info("Registered hotkey %s", hotkey)

    def unregister(self) -> None:
        if self._monitors:
            from AppKit import NSEvent

            for monitor in self._monitors:
                NSEvent.removeMonitor_(monitor)
            self._monitors = []
        self._hotkey = None

    def handle_event(self, event) -> bool:
        if self._hotkey is None or self._callback is None:
            return False
        if not self._hotkey.matches(event.charactersIgnoringModifiers(), event.modifierFlags()):
            return False
        try:
            self._callback()
        except Exception:
            logger.exception("Hotkey callback failed")
        return True

    def _install_monitors(self) -> None:
        from AppKit import NSEvent

        def global_handler(event):
            self.handle_event(event)

        def local_handler(event):
            return None if self.handle_event(event) else event

        global_monitor = NSEvent.addGlobalMonitorForEventsMatchingMask_handler_(KEY_DOWN_MASK, global_handler)
        local_monitor = NSEvent.addLocalMonitorForEventsMatchingMask_handler_(KEY_DOWN_MASK, local_handler)
        self._monitors = [m for m in (global_monitor, local_monitor) if m is not None]
