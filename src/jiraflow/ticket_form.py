"""
Third wizard step: the ticket id and title form.

The ticket id is validated on every change. When it becomes valid while the title
is still empty, the form asks its host to fetch the title (a ``FetchTitle``
command); the answer arrives later through ``apply_title`` and is dropped if the
ticket id has changed in the meantime.
"""

import re
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union

from loguru import logger

from .errors import InvalidTicketId
from .events import FetchTitle, KeyPress, TitleFetched
from .keys import KeyMap, format_help
from .text_input import TextField

__all__ = [
    "TICKET_PATTERN",
    "INVALID_FORMAT_MESSAGE",
    "REQUIRED_MESSAGE",
    "FormField",
    "FetchStatus",
    "TicketFormState",
    "TicketSubmitted",
    "TicketForm",
    "validate_ticket_id",
    "is_valid_ticket_id",
]

TICKET_PATTERN = re.compile(r"^[A-Z][A-Z0-9]*-[0-9]+$")
INVALID_FORMAT_MESSAGE: str = "Invalid format. Use PROJECT-123 format (e.g., JIRA-123)"
REQUIRED_MESSAGE: str = "Ticket number is required (e.g., PROJ-123)"


def validate_ticket_id(ticket_id: str) -> None:
    """
    Check that a ticket id looks like ``PROJECT-123``.

    Raises:
        InvalidTicketId: With a message suitable for display next to the field.
    """
    if not ticket_id.strip():
        raise InvalidTicketId(ticket_id, REQUIRED_MESSAGE)
    if not TICKET_PATTERN.match(ticket_id):
        raise InvalidTicketId(ticket_id, INVALID_FORMAT_MESSAGE)


def is_valid_ticket_id(ticket_id: str) -> bool:
    return bool(TICKET_PATTERN.match(ticket_id))


class FormField(Enum):
    TICKET = "ticket"
    TITLE = "title"


class FetchStatus(Enum):
    IDLE = "idle"
    FETCHING = "fetching"
    FETCHED = "fetched"
    FAILED = "failed"


@dataclass(frozen=True)
class TicketFormState:
    """Snapshot of the form values and validation."""

    ticket_id: str
    title: str
    is_ticket_valid: bool
    ticket_validation_error: str
    title_fetch_status: FetchStatus
    fetch_error: str = ""


@dataclass(frozen=True)
class TicketSubmitted:
    ticket_id: str
    title: str


class TicketForm:
    """
    Ticket id and title entry.

    Args:
        keymap: Key bindings.
        can_fetch: Whether a title lookup collaborator is available.
    """

    def __init__(self, keymap: Optional[KeyMap] = None, can_fetch: bool = False):
        self.keymap = keymap or KeyMap()
        self.can_fetch = can_fetch
        self.ticket = TextField(placeholder="PROJ-123", char_limit=50)
        self.title = TextField(placeholder="Ticket title (optional)", char_limit=200)
        self.focus = FormField.TICKET
        self.width = 80
        self.height = 24
        self.is_ticket_valid = False
        self.validation_error = ""
        self.fetch_status = FetchStatus.IDLE
        self.fetch_error = ""

    @property
    def ticket_id(self) -> str:
        return self.ticket.value

    @property
    def title_text(self) -> str:
        return self.title.value

    @property
    def is_capturing_text(self) -> bool:
        return True

    def state(self) -> TicketFormState:
        return TicketFormState(
            ticket_id=self.ticket_id,
            title=self.title_text,
            is_ticket_valid=self.is_ticket_valid,
            ticket_validation_error=self.validation_error,
            title_fetch_status=self.fetch_status,
            fetch_error=self.fetch_error,
        )

    def reset(self) -> None:
        self.ticket.clear()
        self.title.clear()
        self.focus = FormField.TICKET
        self.is_ticket_valid = False
        self.validation_error = ""
        self.fetch_status = FetchStatus.IDLE
        self.fetch_error = ""

    def resize(self, width: int, height: int) -> None:
        self.width = width
        self.height = height

    def set_ticket_id(self, ticket_id: str) -> None:
        """Pre-fill the ticket id without requesting a title lookup."""
        self.ticket.set_value(ticket_id)
        self._validate()
        self.fetch_status = FetchStatus.IDLE
        self.fetch_error = ""

    def set_title(self, title: str) -> None:
        self.title.set_value(title)

    def _validate(self) -> None:
        value = self.ticket_id
        self.is_ticket_valid = is_valid_ticket_id(value)
        if not value or self.is_ticket_valid:
            self.validation_error = ""
        else:
            self.validation_error = INVALID_FORMAT_MESSAGE

    def request_fetch(self) -> Optional[FetchTitle]:
        """
        Ask for a title lookup if the ticket id is valid and the title is empty.

        Returns:
            FetchTitle | None: The command to hand to the host, if any.
        """
        if not (self.can_fetch and self.is_ticket_valid) or self.title_text.strip():
            return None
        if self.fetch_status in (FetchStatus.FETCHING, FetchStatus.FAILED):
            return None
        self.fetch_status = FetchStatus.FETCHING
        self.fetch_error = ""
        logger.debug(f"Requesting title for {self.ticket_id}")
        return FetchTitle(self.ticket_id)

    def _on_ticket_changed(self) -> Optional[FetchTitle]:
        self._validate()
        self.fetch_status = FetchStatus.IDLE
        self.fetch_error = ""
        return self.request_fetch()

    def apply_title(self, result: TitleFetched) -> bool:
        """
        Apply a title lookup result.

        Results for a ticket id other than the current one are discarded. A
        fetched title never replaces one the user has typed.

        Returns:
            bool: True if the result was applied.
        """
        if result.ticket_id != self.ticket_id:
            logger.debug(
                f"Discarding stale title for {result.ticket_id}, ticket is now {self.ticket_id!r}"
            )
            return False
        if result.ok:
            if not self.title_text.strip():
                self.title.set_value(result.title)
            self.fetch_status = FetchStatus.FETCHED
            self.fetch_error = ""
        else:
            self.fetch_status = FetchStatus.FAILED
            self.fetch_error = result.error or "unknown error"
        return True

    def _submit(self) -> Optional[TicketSubmitted]:
        if not self.ticket_id.strip():
            self.validation_error = REQUIRED_MESSAGE
            self.focus = FormField.TICKET
            return None
        if not self.is_ticket_valid:
            self.validation_error = INVALID_FORMAT_MESSAGE
            self.focus = FormField.TICKET
            return None
        return TicketSubmitted(self.ticket_id, self.title_text.strip())

    def update(self, event: KeyPress) -> Union[TicketSubmitted, FetchTitle, None]:
        """
        Handle a key.

        Returns:
            TicketSubmitted when Enter submits a valid form, FetchTitle when the
            ticket id change calls for a title lookup, otherwise None.
        """
        keymap = self.keymap
        if keymap.enter.matches(event):
            return self._submit()
        if not event.is_printable:
            if keymap.next_field.matches(event):
                self.focus = FormField.TITLE
                return None
            if keymap.prev_field.matches(event):
                self.focus = FormField.TICKET
                return None

        if self.focus is FormField.TICKET:
            previous = self.ticket_id
            self.ticket.handle_key(event, keymap)
            if self.ticket_id != previous:
                return self._on_ticket_changed()
            return None

        self.title.handle_key(event, keymap)
        return None

    def _fetch_line(self) -> str:
        if self.fetch_status is FetchStatus.FETCHING:
            return "⏳ Fetching title from Jira..."
        if self.fetch_status is FetchStatus.FETCHED:
            return "✓ Title fetched from Jira"
        if self.fetch_status is FetchStatus.FAILED:
            return f"⚠ Could not fetch title ({self.fetch_error}). Enter the title manually."
        return ""

    def render(self, preview: str = "") -> str:
        """
        Render the form.

        Args:
            preview: The branch name the current values would produce.
        """
        ticket_focused = self.focus is FormField.TICKET
        lines = ["Enter Ticket Information", ""]
        lines.append(("> " if ticket_focused else "  ") + "Ticket number:")
        lines.append("  " + self.ticket.render(focused=ticket_focused))
        if self.validation_error:
            lines.append(f"  ✗ {self.validation_error}")
        elif self.is_ticket_valid:
            lines.append("  ✓ Valid ticket format")
        lines.append("")
        lines.append(("> " if not ticket_focused else "  ") + "Title:")
        lines.append("  " + self.title.render(focused=not ticket_focused))
        fetch_line = self._fetch_line()
        if fetch_line:
            lines.append(f"  {fetch_line}")
        if preview:
            lines.append("")
            lines.append(f"Preview: {preview}")
        return "\n".join(lines)

    def help(self) -> str:
        keymap = self.keymap
        if self.focus is FormField.TICKET:
            field_help = (keymap.next_field, "next field")
        else:
            field_help = (keymap.prev_field, "previous field")
        return format_help(
            field_help,
            (keymap.enter, "submit"),
            keymap.back,
            keymap.interrupt,
        )
