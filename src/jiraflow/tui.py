"""
Terminal application hosting the jiraflow wizard.

The textual app owns no wizard logic. It turns key presses and resizes into wizard
events, runs title lookups in a worker thread, and redraws the wizard's text after
every event.

Example:
    >>> from jiraflow.tui import JiraflowApp
    >>> outcome = JiraflowApp(wizard, fetch_title=client.fetch_ticket_title).run()
"""

from typing import Callable, Optional

from loguru import logger
from textual import events, work
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.widgets import Static

from .errors import TicketLookupError, UserCancelled
from .events import Event, FetchTitle, KeyPress, Resize, TitleFetched
from .wizard import OutcomeStatus, WizardController, WizardOutcome

__all__ = ["WizardView", "JiraflowApp"]


class WizardView(Static, can_focus=True):
    """Shows the wizard screen and forwards every key press to the app."""

    def on_key(self, event: events.Key) -> None:
        event.stop()
        event.prevent_default()
        self.app.feed(KeyPress(event.key, event.character))  # type: ignore[attr-defined]


class JiraflowApp(App[WizardOutcome]):
    """
    Runs a ``WizardController`` in the terminal.

    Args:
        wizard: The wizard to drive.
        fetch_title: Looks up a ticket title; raises ``TicketLookupError``.
            None disables lookups.
    """

    TITLE = "jiraflow"

    CSS = """
    WizardView {
        width: 100%;
        height: 100%;
        padding: 0 1;
    }
    """

    BINDINGS = [
        Binding("ctrl+c", "interrupt", "Quit", show=False, priority=True),
    ]

    def __init__(
        self,
        wizard: WizardController,
        fetch_title: Optional[Callable[[str], str]] = None,
    ):
        super().__init__()
        self.wizard = wizard
        self.fetch_title = fetch_title

    def compose(self) -> ComposeResult:
        yield WizardView("", markup=False, id="wizard")

    def on_mount(self) -> None:
        self.query_one(WizardView).focus()
        self.feed(Resize(self.size.width, self.size.height))

    def on_resize(self, event: events.Resize) -> None:
        self.feed(Resize(event.size.width, event.size.height))

    def action_interrupt(self) -> None:
        self.feed(KeyPress("ctrl+c"))

    def feed(self, event: Event) -> None:
        """Send one event to the wizard, run its commands and redraw."""
        for command in self.wizard.update(event):
            if isinstance(command, FetchTitle):
                self.fetch_in_background(command.ticket_id)
        self.query_one(WizardView).update(self.wizard.render())
        if self.wizard.done:
            self.exit(self.wizard.outcome)

    @work(thread=True)
    def fetch_in_background(self, ticket_id: str) -> None:
        """Look up a ticket title off the event loop."""
        if self.fetch_title is None:
            result = TitleFetched(ticket_id, error="title lookup is not available")
        else:
            try:
                result = TitleFetched(ticket_id, title=self.fetch_title(ticket_id))
            except TicketLookupError as exc:
                logger.warning(f"Title lookup failed: {exc}")
                result = TitleFetched(ticket_id, error=exc.user_message())
            except Exception as exc:
                logger.exception(f"Title lookup for {ticket_id} raised unexpectedly")
                result = TitleFetched(ticket_id, error=f"Title lookup failed: {exc}")
        self.call_from_thread(self.feed, result)

    def outcome(self) -> WizardOutcome:
        """Return the wizard outcome; leaving the app any other way counts as cancelled."""
        return self.return_value or WizardOutcome(
            OutcomeStatus.CANCELLED, error=UserCancelled()
        )
