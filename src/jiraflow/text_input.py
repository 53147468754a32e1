"""
Single-line editable text buffer used by the ticket form and the branch search.
"""

from .events import KeyPress
from .keys import KeyMap

__all__ = ["TextField"]

CURSOR: str = "█"


class TextField:
    """
    An editable line of text with a cursor.

    Args:
        placeholder: Text shown while the field is empty and unfocused.
        char_limit: Maximum number of characters; 0 means unlimited.
        value: Initial value.
    """

    def __init__(self, placeholder: str = "", char_limit: int = 0, value: str = ""):
        self.placeholder = placeholder
        self.char_limit = char_limit
        self._value = ""
        self.cursor = 0
        self.set_value(value)

    @property
    def value(self) -> str:
        return self._value

    def set_value(self, value: str) -> None:
        if self.char_limit:
            value = value[: self.char_limit]
        self._value = value
        self.cursor = len(value)

    def clear(self) -> None:
        self.set_value("")

    def insert(self, text: str) -> None:
        if self.char_limit:
            text = text[: max(self.char_limit - len(self._value), 0)]
        if not text:
            return
        self._value = self._value[: self.cursor] + text + self._value[self.cursor :]
        self.cursor += len(text)

    def handle_key(self, event: KeyPress, keymap: KeyMap) -> bool:
        """
        Apply an editing key.

        Args:
            event: The key press.
            keymap: Key bindings used for clear, backspace and cursor movement.

        Returns:
            bool: True if the key was an editing key and was consumed.
        """
        if keymap.clear.matches(event):
            self.clear()
            return True
        if keymap.backspace.matches(event):
            if self.cursor > 0:
                self._value = self._value[: self.cursor - 1] + self._value[self.cursor :]
                self.cursor -= 1
            return True
        if event.key == "delete":
            self._value = self._value[: self.cursor] + self._value[self.cursor + 1 :]
            return True
        if keymap.left.matches(event):
            self.cursor = max(self.cursor - 1, 0)
            return True
        if keymap.right.matches(event):
            self.cursor = min(self.cursor + 1, len(self._value))
            return True
        if event.key in ("home", "ctrl+a"):
            self.cursor = 0
            return True
        if event.key in ("end", "ctrl+e"):
            self.cursor = len(self._value)
            return True
        if event.is_printable:
            self.insert(event.character or "")
            return True
        return False

    def render(self, focused: bool = False) -> str:
        if not focused:
            return self._value or self.placeholder
        return self._value[: self.cursor] + CURSOR + self._value[self.cursor :]
