"""
Input events and commands exchanged between the wizard and its host.

The host (the textual application, or a test) turns terminal input into events and
feeds them to ``WizardController.update``; the controller answers with a list of
commands the host must carry out. The only command is ``FetchTitle``, whose answer
comes back later as a ``TitleFetched`` event.
"""

from dataclasses import dataclass
from typing import Iterable, Optional, Union

__all__ = [
    "KeyPress",
    "Resize",
    "TitleFetched",
    "FetchTitle",
    "Event",
    "Command",
]


@dataclass(frozen=True)
class KeyPress:
    """
    A single key press.

    Attributes:
        key: Normalised key name, e.g. ``"enter"``, ``"ctrl+u"``, ``"a"``.
        character: The printable character produced by the key, if any.
    """

    key: str
    character: Optional[str] = None

    @property
    def is_printable(self) -> bool:
        """Whether the key produces a single printable character."""
        return (
            self.character is not None
            and len(self.character) == 1
            and self.character.isprintable()
        )

    def matches(self, names: Iterable[str]) -> bool:
        """Return True if the key name or its character is one of ``names``."""
        names = tuple(names)
        if self.key in names:
            return True
        return self.character is not None and self.character in names


@dataclass(frozen=True)
class Resize:
    """The terminal was resized."""

    width: int
    height: int


@dataclass(frozen=True)
class TitleFetched:
    """
    Result of a ticket title lookup.

    Attributes:
        ticket_id: The ticket id the lookup was requested for.
        title: The fetched title, empty on failure.
        error: Failure reason, None on success.
    """

    ticket_id: str
    title: str = ""
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass(frozen=True)
class FetchTitle:
    """Ask the host to look up the title of ``ticket_id`` without blocking."""

    ticket_id: str


Event = Union[KeyPress, Resize, TitleFetched]
Command = FetchTitle
