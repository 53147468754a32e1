"""
The last two wizard steps: review the branch before creating it, then show the result.
"""

from dataclasses import dataclass
from typing import Optional

from .errors import JiraflowError
from .events import KeyPress
from .keys import KeyMap, format_help

__all__ = [
    "Confirmed",
    "Finished",
    "ConfirmationScreen",
    "CompletionScreen",
]

_TROUBLESHOOTING_TIPS = [
    "Check if you have the necessary permissions",
    "Ensure you're in a valid Git repository",
    "Verify the base branch exists and is accessible",
    "Make sure the branch name doesn't already exist",
]


@dataclass(frozen=True)
class Confirmed:
    """The user asked to create the branch."""


@dataclass(frozen=True)
class Finished:
    """The user dismissed the completion screen."""


class ConfirmationScreen:
    """Shows the collected values and the generated branch name."""

    def __init__(self, keymap: Optional[KeyMap] = None):
        self.keymap = keymap or KeyMap()
        self.width = 80
        self.height = 24
        self.clear()

    def clear(self) -> None:
        self.type_label = ""
        self.base_branch = ""
        self.ticket_id = ""
        self.title = ""
        self.branch_name = ""
        self.already_exists = False
        self.error = ""

    def show(
        self,
        type_label: str,
        base_branch: str,
        ticket_id: str,
        title: str,
        branch_name: str,
        already_exists: bool = False,
    ) -> None:
        self.type_label = type_label
        self.base_branch = base_branch
        self.ticket_id = ticket_id
        self.title = title
        self.branch_name = branch_name
        self.already_exists = already_exists
        self.error = ""

    def resize(self, width: int, height: int) -> None:
        self.width = width
        self.height = height

    def update(self, event: KeyPress) -> Optional[Confirmed]:
        if self.keymap.enter.matches(event):
            return Confirmed()
        return None

    def render(self) -> str:
        lines = ["Confirm Branch Creation", "", "Summary:"]
        lines.append(f"  Type:        {self.type_label}")
        lines.append(f"  Base branch: {self.base_branch}")
        lines.append(f"  Ticket:      {self.ticket_id}")
        if self.title:
            lines.append(f"  Title:       {self.title}")
        lines.extend(["", "Branch to create:", f"  {self.branch_name}", ""])
        if self.already_exists:
            lines.append(
                f"⚠ A branch named '{self.branch_name}' already exists locally; creating it will fail."
            )
        if self.error:
            lines.append(f"✗ {self.error}")
        lines.append("Press Enter to create this branch, or Esc to go back")
        return "\n".join(lines)

    def help(self) -> str:
        keymap = self.keymap
        return format_help((keymap.enter, "create branch"), keymap.back, keymap.quit)


class CompletionScreen:
    """Shows whether the branch was created."""

    def __init__(self, keymap: Optional[KeyMap] = None):
        self.keymap = keymap or KeyMap()
        self.width = 80
        self.height = 24
        self.clear()

    def clear(self) -> None:
        self.success = False
        self.branch_name = ""
        self.base_branch = ""
        self.error_message = ""
        self.suggestions: list[str] = []

    def show_success(self, branch_name: str, base_branch: str) -> None:
        self.clear()
        self.success = True
        self.branch_name = branch_name
        self.base_branch = base_branch

    def show_failure(
        self, branch_name: str, base_branch: str, error: JiraflowError | str
    ) -> None:
        self.clear()
        self.branch_name = branch_name
        self.base_branch = base_branch
        if isinstance(error, JiraflowError):
            self.error_message = error.user_message()
            self.suggestions = error.suggestions()
        else:
            self.error_message = error

    def resize(self, width: int, height: int) -> None:
        self.width = width
        self.height = height

    def update(self, event: KeyPress) -> Optional[Finished]:
        keymap = self.keymap
        for binding in (keymap.enter, keymap.quit, keymap.back, keymap.interrupt):
            if binding.matches(event):
                return Finished()
        return None

    def render(self) -> str:
        if self.success:
            return "\n".join(
                [
                    "✅ Branch Created Successfully!",
                    "",
                    f"Created: {self.branch_name}",
                    f"From:    {self.base_branch}",
                    "Status:  ✓ Active and checked out",
                    "",
                    "Next Steps:",
                    "  • Your new branch has been created and checked out",
                    "  • You can now start working on your changes",
                    f"  • Remember to push your branch when ready: git push -u origin {self.branch_name}",
                ]
            )
        lines = ["❌ Branch Creation Failed", "", f"Error: {self.error_message}"]
        if self.branch_name:
            lines.append(f"Attempted: {self.branch_name}")
        lines.extend(["", "Troubleshooting Tips:"])
        lines.extend(f"  • {tip}" for tip in self.suggestions or _TROUBLESHOOTING_TIPS)
        return "\n".join(lines)

    def help(self) -> str:
        keymap = self.keymap
        return format_help((keymap.enter, "exit application"), keymap.quit)
