"""
Key binding table for the wizard.

A ``KeyMap`` is built once at startup and handed to the controller, which passes it
down to every screen. Key names follow textual's naming (``"escape"``,
``"shift+tab"``, ``"ctrl+u"``); a binding also matches on the produced character,
so ``"/"`` works whether the host reports it as ``"slash"`` or ``"/"``.
"""

from dataclasses import dataclass

from .events import KeyPress

__all__ = ["KeyBinding", "KeyMap", "format_help"]


@dataclass(frozen=True)
class KeyBinding:
    """
    A named group of keys plus the help shown in the footer.

    Attributes:
        keys: Key names or characters that trigger the binding.
        help_key: How the keys are shown in help text.
        help_text: What the binding does.
    """

    keys: tuple[str, ...]
    help_key: str = ""
    help_text: str = ""

    def matches(self, event: KeyPress) -> bool:
        return event.matches(self.keys)

    def help(self) -> str:
        return f"{self.help_key} {self.help_text}".strip()


@dataclass(frozen=True)
class KeyMap:
    """The wizard's key bindings."""

    up: KeyBinding = KeyBinding(("up", "k"), "↑/k", "up")
    down: KeyBinding = KeyBinding(("down", "j"), "↓/j", "down")
    home: KeyBinding = KeyBinding(("home",), "home", "first")
    end: KeyBinding = KeyBinding(("end",), "end", "last")
    enter: KeyBinding = KeyBinding(("enter",), "enter", "select")
    back: KeyBinding = KeyBinding(("escape",), "esc", "back")
    quit: KeyBinding = KeyBinding(("q",), "q", "quit")
    interrupt: KeyBinding = KeyBinding(("ctrl+c",), "ctrl+c", "quit")
    search: KeyBinding = KeyBinding(("slash", "/"), "/", "search")
    clear: KeyBinding = KeyBinding(("ctrl+u",), "ctrl+u", "clear")
    next_field: KeyBinding = KeyBinding(("tab", "down"), "tab", "next field")
    prev_field: KeyBinding = KeyBinding(("shift+tab", "up"), "shift+tab", "previous field")
    backspace: KeyBinding = KeyBinding(("backspace",), "backspace", "delete")
    left: KeyBinding = KeyBinding(("left",), "←", "left")
    right: KeyBinding = KeyBinding(("right",), "→", "right")


def format_help(*items: KeyBinding | tuple[KeyBinding, str]) -> str:
    """
    Join bindings into a one-line footer.

    Each item is a binding, or a ``(binding, text)`` pair overriding its help text.

    Examples:
        >>> keymap = KeyMap()
        >>> format_help(keymap.enter, (keymap.back, "cancel"))
        'enter select • esc cancel'
    """
    parts = []
    for item in items:
        if isinstance(item, tuple):
            binding, text = item
            parts.append(f"{binding.help_key} {text}")
        else:
            parts.append(item.help())
    return " • ".join(parts)
