"""
The wizard controller: a finite-state machine over the four input steps.

The controller owns one component per step and dispatches every event to the
component of the current state. Components report a finished step by returning a
result object from ``update``; the controller copies the value into
``WizardSelections`` and moves on. Nothing here touches the terminal: the host
feeds events in, carries out the returned commands, and draws ``render()``.

Example:
    >>> wizard = WizardController(config, repository)
    >>> commands = wizard.update(KeyPress("enter"))
    >>> wizard.state
    <WizardState.BRANCH_SELECTION: 'branch_selection'>
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional

from loguru import logger

from .branch_name import GeneratorConfig, generate, validate_ref_name
from .branch_picker import BranchPicker
from .config import EffectiveConfig
from .errors import InvalidRefName, JiraflowError, RepositoryError, UserCancelled
from .events import Command, Event, FetchTitle, KeyPress, Resize, TitleFetched
from .fuzzy import BranchCandidate
from .git_utils import parse_branch_for_ticket
from .keys import KeyMap
from .screens import CompletionScreen, ConfirmationScreen
from .ticket_form import TicketForm, TicketSubmitted
from .type_selector import TypeSelector, items_from_config

__all__ = [
    "WizardState",
    "WizardSelections",
    "OutcomeStatus",
    "WizardOutcome",
    "WizardController",
]

APP_TITLE: str = "🚀 JiraFlow - Interactive Branch Creator"

# Header and footer rows around the active screen.
_CHROME_ROWS = 7


class WizardState(Enum):
    TYPE_SELECTION = "type_selection"
    BRANCH_SELECTION = "branch_selection"
    TICKET_INPUT = "ticket_input"
    CONFIRMATION = "confirmation"
    COMPLETE = "complete"


STEP_TEXT: dict[WizardState, str] = {
    WizardState.TYPE_SELECTION: "Step 1/4: Select Branch Type",
    WizardState.BRANCH_SELECTION: "Step 2/4: Select Base Branch",
    WizardState.TICKET_INPUT: "Step 3/4: Enter Ticket Information",
    WizardState.CONFIRMATION: "Step 4/4: Confirm Branch Creation",
    WizardState.COMPLETE: "Complete!",
}

_BACK: dict[WizardState, WizardState] = {
    WizardState.BRANCH_SELECTION: WizardState.TYPE_SELECTION,
    WizardState.TICKET_INPUT: WizardState.BRANCH_SELECTION,
    WizardState.CONFIRMATION: WizardState.TICKET_INPUT,
}


@dataclass
class WizardSelections:
    """Values collected so far, each set only by the step that owns it."""

    branch_type: str = ""
    base_branch: str = ""
    ticket_id: str = ""
    ticket_title: str = ""
    final_branch_name: str = ""


class OutcomeStatus(Enum):
    CREATED = "created"
    FAILED = "failed"
    CANCELLED = "cancelled"


@dataclass(frozen=True)
class WizardOutcome:
    """
    What the wizard hands back to the process when it stops.

    Attributes:
        status: Whether the branch was created, creation failed, or the user
            cancelled.
        branch_name: The created or attempted branch name.
        base_branch: The chosen base branch.
        error: The creation error for a failed outcome, UserCancelled for a
            cancelled one.
    """

    status: OutcomeStatus
    branch_name: str = ""
    base_branch: str = ""
    error: Optional[JiraflowError] = None


class WizardController:
    """
    Drives the branch creation wizard.

    Args:
        config: The effective configuration.
        repository: Git collaborator providing ``list_local_branches()``,
            ``current_branch()`` and ``create_and_switch_branch(name, base)``.
        keymap: Key bindings; defaults to ``KeyMap()``.
        can_fetch_title: Whether the host can look up ticket titles.
        notices: Lines shown under the header, e.g. configuration warnings.
    """

    def __init__(
        self,
        config: EffectiveConfig,
        repository: Any,
        keymap: Optional[KeyMap] = None,
        can_fetch_title: bool = False,
        notices: Optional[list[str]] = None,
    ):
        self.config = config
        self.repository = repository
        self.keymap = keymap or KeyMap()
        self.generator = GeneratorConfig.from_config(config)
        self.notices = list(notices or [])
        self.width = 80
        self.height = 24

        candidates, warning = self._load_branches()
        self.type_selector = TypeSelector(
            items_from_config(config.branch_types, config.default_branch_type),
            self.keymap,
        )
        self.branch_picker = BranchPicker(candidates, self.keymap, warning=warning)
        self.ticket_form = TicketForm(self.keymap, can_fetch=can_fetch_title)
        self.confirmation = ConfirmationScreen(self.keymap)
        self.completion = CompletionScreen(self.keymap)
        self.prefill_ticket = self._find_prefill_ticket(candidates)

        self.state = WizardState.TYPE_SELECTION
        self.selections = WizardSelections()
        self.outcome: Optional[WizardOutcome] = None
        self._completion_outcome: Optional[WizardOutcome] = None
        self._apply_prefill()

    def _load_branches(self) -> tuple[list[BranchCandidate], str]:
        try:
            return self.repository.list_local_branches(), ""
        except RepositoryError as exc:
            logger.warning(f"Could not list local branches: {exc}")
            return [], f"Could not list branches: {exc.user_message()}"

    def _find_prefill_ticket(self, candidates: list[BranchCandidate]) -> Optional[str]:
        current = next((c.name for c in candidates if c.is_current), None)
        if current is None:
            try:
                current = self.repository.current_branch()
            except RepositoryError as exc:
                logger.debug(f"No current branch to take a ticket id from: {exc}")
                return None
        ticket = parse_branch_for_ticket(current)
        if ticket:
            logger.debug(f"Pre-filling ticket {ticket} from branch {current}")
        return ticket

    def _apply_prefill(self) -> None:
        if self.prefill_ticket:
            self.ticket_form.set_ticket_id(self.prefill_ticket)

    @property
    def done(self) -> bool:
        return self.outcome is not None

    @property
    def is_capturing_text(self) -> bool:
        """Whether printable keys currently go to a text field."""
        if self.state is WizardState.BRANCH_SELECTION:
            return self.branch_picker.is_capturing_text
        if self.state is WizardState.TICKET_INPUT:
            return self.ticket_form.is_capturing_text
        return False

    def update(self, event: Event) -> list[Command]:
        """
        Feed one event into the wizard.

        Args:
            event: A key press, a resize, or a title lookup result.

        Returns:
            list: Commands for the host to carry out.
        """
        if self.done:
            return []
        if isinstance(event, Resize):
            self.resize(event.width, event.height)
            return []
        if isinstance(event, TitleFetched):
            self.ticket_form.apply_title(event)
            return []
        if isinstance(event, KeyPress):
            return self._handle_key(event)
        return []

    def _handle_key(self, event: KeyPress) -> list[Command]:
        keymap = self.keymap
        if keymap.interrupt.matches(event):
            self._stop()
            return []
        typing = self.is_capturing_text and event.is_printable
        if keymap.quit.matches(event) and not typing:
            self._stop()
            return []
        searching = (
            self.state is WizardState.BRANCH_SELECTION and self.branch_picker.searching
        )
        if keymap.back.matches(event) and not searching:
            self.go_back()
            return []

        if self.state is WizardState.TYPE_SELECTION:
            selected = self.type_selector.update(event)
            if selected is not None:
                self.selections.branch_type = selected.key
                self._transition(WizardState.BRANCH_SELECTION)
        elif self.state is WizardState.BRANCH_SELECTION:
            chosen = self.branch_picker.update(event)
            if chosen is not None:
                self.selections.base_branch = chosen.name
                return self._enter_ticket_input()
        elif self.state is WizardState.TICKET_INPUT:
            result = self.ticket_form.update(event)
            if isinstance(result, FetchTitle):
                return [result]
            if isinstance(result, TicketSubmitted):
                self.selections.ticket_id = result.ticket_id
                self.selections.ticket_title = result.title
                self._enter_confirmation()
        elif self.state is WizardState.CONFIRMATION:
            if self.confirmation.update(event) is not None:
                self._create_branch()
        elif self.state is WizardState.COMPLETE:
            if self.completion.update(event) is not None:
                self._finish()
        return []

    def _transition(self, state: WizardState) -> None:
        logger.debug(f"Wizard state {self.state.value} -> {state.value}")
        self.state = state

    def _enter_ticket_input(self) -> list[Command]:
        self._transition(WizardState.TICKET_INPUT)
        command = self.ticket_form.request_fetch()
        return [command] if command else []

    def _enter_confirmation(self) -> None:
        selections = self.selections
        name = generate(
            selections.branch_type,
            selections.ticket_id,
            selections.ticket_title,
            self.generator,
        )
        selections.final_branch_name = name
        self.confirmation.show(
            type_label=self.type_selector.label_for(selections.branch_type),
            base_branch=selections.base_branch,
            ticket_id=selections.ticket_id,
            title=selections.ticket_title,
            branch_name=name,
            already_exists=name in self.branch_picker.names,
        )
        self._transition(WizardState.CONFIRMATION)

    def _create_branch(self) -> None:
        name = self.selections.final_branch_name
        base = self.selections.base_branch
        try:
            validate_ref_name(name)
        except InvalidRefName as exc:
            logger.warning(f"Refusing to create branch: {exc}")
            self.confirmation.error = exc.user_message()
            return

        try:
            self.repository.create_and_switch_branch(name, base)
        except RepositoryError as exc:
            logger.error(f"Failed to create branch {name} from {base}: {exc}")
            self.completion.show_failure(name, base, exc)
            self._completion_outcome = WizardOutcome(
                OutcomeStatus.FAILED, branch_name=name, base_branch=base, error=exc
            )
        else:
            logger.info(f"Created branch {name} from {base}")
            self.completion.show_success(name, base)
            self._completion_outcome = WizardOutcome(
                OutcomeStatus.CREATED, branch_name=name, base_branch=base
            )
        self._transition(WizardState.COMPLETE)

    def go_back(self) -> None:
        """Move one step back; leaves the wizard from the first and last step."""
        if self.state in _BACK:
            self._transition(_BACK[self.state])
        else:
            self._stop()

    def _stop(self) -> None:
        if self.state is WizardState.COMPLETE:
            self._finish()
            return
        logger.debug(f"Wizard cancelled in state {self.state.value}")
        self.outcome = WizardOutcome(
            OutcomeStatus.CANCELLED,
            base_branch=self.selections.base_branch,
            error=UserCancelled(f"cancelled at {self.state.value}"),
        )

    def _finish(self) -> None:
        self.outcome = self._completion_outcome

    def restart(self) -> None:
        """Start over from the first step with empty selections."""
        self.selections = WizardSelections()
        self.type_selector.reset()
        self.branch_picker.reset()
        self.ticket_form.reset()
        self.confirmation.clear()
        self.completion.clear()
        self.outcome = None
        self._completion_outcome = None
        self.state = WizardState.TYPE_SELECTION
        self._apply_prefill()

    def resize(self, width: int, height: int) -> None:
        self.width = width
        self.height = height
        inner_height = max(height - _CHROME_ROWS - len(self.notices), 3)
        for child in (
            self.type_selector,
            self.branch_picker,
            self.ticket_form,
            self.confirmation,
            self.completion,
        ):
            child.resize(width, inner_height)

    def _context_lines(self) -> list[str]:
        selections = self.selections
        lines = []
        if self.state in (WizardState.BRANCH_SELECTION, WizardState.TICKET_INPUT):
            label = self.type_selector.label_for(selections.branch_type)
            lines.append(f"Selected type: {label}")
        if self.state is WizardState.TICKET_INPUT:
            lines.append(f"Selected branch: {selections.base_branch}")
        return lines

    def _render_body(self) -> str:
        if self.state is WizardState.TYPE_SELECTION:
            return self.type_selector.render()
        if self.state is WizardState.BRANCH_SELECTION:
            return self.branch_picker.render()
        if self.state is WizardState.TICKET_INPUT:
            preview = ""
            if self.ticket_form.is_ticket_valid:
                preview = generate(
                    self.selections.branch_type,
                    self.ticket_form.ticket_id,
                    self.ticket_form.title_text,
                    self.generator,
                )
            return self.ticket_form.render(preview=preview)
        if self.state is WizardState.CONFIRMATION:
            return self.confirmation.render()
        return self.completion.render()

    def help(self) -> str:
        """Return the key help for the current step."""
        if self.state is WizardState.TYPE_SELECTION:
            return self.type_selector.help()
        if self.state is WizardState.BRANCH_SELECTION:
            return self.branch_picker.help()
        if self.state is WizardState.TICKET_INPUT:
            return self.ticket_form.help()
        if self.state is WizardState.CONFIRMATION:
            return self.confirmation.help()
        return self.completion.help()

    def render(self) -> str:
        """Return the whole screen as text."""
        rule = "─" * max(self.width, 1)
        lines = [APP_TITLE, STEP_TEXT[self.state], rule]
        lines.extend(f"⚠ {notice}" for notice in self.notices)
        context = self._context_lines()
        if context:
            lines.extend(context)
            lines.append("")
        lines.append(self._render_body())
        lines.extend(["", rule, self.help()])
        return "\n".join(lines)
