"""
Error types for jiraflow.

Every error that can reach the user carries a human-readable message and a list of
suggested corrective actions. Collaborators (git, the Jira CLI, the config loader)
raise these exceptions; the wizard and the command line catch them where the call is
made and turn them into inline text, a failure screen, or an exit code.

Example:
    >>> from jiraflow.errors import RepositoryError, exit_code_for
    >>> exit_code_for(RepositoryError("branch", "already exists"))
    3
"""

from typing import Any

__all__ = [
    "JiraflowError",
    "ValidationError",
    "InvalidRefName",
    "InvalidTicketId",
    "TicketLookupError",
    "RepositoryError",
    "ConfigError",
    "UserCancelled",
    "EXIT_SUCCESS",
    "EXIT_GENERAL",
    "EXIT_CONFIG",
    "EXIT_GIT",
    "EXIT_JIRA",
    "exit_code_for",
    "format_error",
]

EXIT_SUCCESS: int = 0
EXIT_GENERAL: int = 1
EXIT_CONFIG: int = 2
EXIT_GIT: int = 3
EXIT_JIRA: int = 4


class JiraflowError(Exception):
    """Base class for all jiraflow errors."""

    def user_message(self) -> str:
        """Return a short message suitable for display."""
        return str(self)

    def suggestions(self) -> list[str]:
        """Return suggested corrective actions, most useful first."""
        return []


class ValidationError(JiraflowError):
    """Raised when user-provided or generated text fails validation."""


class InvalidRefName(ValidationError):
    """
    Raised when a branch name violates git ref naming rules.

    Attributes:
        name: The offending branch name.
        reason: Which rule was broken.
    """

    def __init__(self, name: str, reason: str):
        super().__init__(f"invalid branch name '{name}': {reason}")
        self.name = name
        self.reason = reason

    def user_message(self) -> str:
        return f"Branch name is not valid: {self.reason}"

    def suggestions(self) -> list[str]:
        return [
            "Go back and edit the ticket title",
            "Avoid characters such as ~ ^ : ? * [ and spaces",
        ]


class InvalidTicketId(ValidationError):
    """Raised when a ticket id does not look like PROJECT-123."""

    def __init__(self, ticket_id: str, message: str):
        super().__init__(message)
        self.ticket_id = ticket_id

    def suggestions(self) -> list[str]:
        return ["Ticket format must be PROJECT-123 (e.g., JIRA-123)"]


class TicketLookupError(JiraflowError):
    """
    Raised when a ticket title cannot be fetched.

    Attributes:
        ticket_id: The ticket that was looked up, may be empty.
        message: What went wrong.
    """

    def __init__(self, ticket_id: str, message: str):
        if ticket_id:
            super().__init__(f"jira error for ticket {ticket_id}: {message}")
        else:
            super().__init__(f"jira error: {message}")
        self.ticket_id = ticket_id
        self.message = message

    def user_message(self) -> str:
        if "not installed" in self.message or "not available" in self.message:
            return "Jira CLI is not installed or not in PATH"
        if "authentication" in self.message:
            return "Jira authentication failed"
        if "not found" in self.message and self.ticket_id:
            return f"Ticket {self.ticket_id} was not found"
        return f"Jira integration issue: {self.message}"

    def suggestions(self) -> list[str]:
        if "not installed" in self.message or "not available" in self.message:
            return [
                "Install the Jira CLI from https://github.com/ankitpokhrel/jira-cli",
                "Ensure the 'jira' command is in your PATH",
                "You can still enter the ticket title manually",
            ]
        if "authentication" in self.message:
            return [
                "Run 'jira init' to configure your Jira credentials",
                "Check your Jira server URL and credentials",
            ]
        if "not found" in self.message and self.ticket_id:
            return [
                f"Verify that ticket {self.ticket_id} exists in your Jira instance",
                "Check the ticket ID format (e.g., PROJ-123)",
                "You can proceed by entering the title manually",
            ]
        return [
            "Check your Jira CLI configuration",
            "You can continue without Jira integration",
        ]


class RepositoryError(JiraflowError):
    """
    Raised when a git operation fails.

    Attributes:
        operation: The git operation that failed (e.g. "branch", "checkout").
        message: The error output or description.
    """

    def __init__(self, operation: str, message: str):
        super().__init__(f"git {operation}: {message}")
        self.operation = operation
        self.message = message

    def user_message(self) -> str:
        if "not a git repository" in self.message:
            return "This directory is not a Git repository"
        if "already exists" in self.message:
            return "A branch with this name already exists"
        if self.operation == "checkout":
            return f"Failed to switch branches: {self.message}"
        if self.operation == "branch":
            return f"Branch operation failed: {self.message}"
        return f"Git operation failed: {self.message}"

    def suggestions(self) -> list[str]:
        if "not a git repository" in self.message:
            return [
                "Navigate to a Git repository directory",
                "Initialize a Git repository with 'git init'",
            ]
        if "already exists" in self.message:
            return [
                "Use a different ticket number or title",
                "Delete the existing branch if it's no longer needed",
            ]
        if "does not exist" in self.message or "not a valid" in self.message:
            return [
                "Check that the base branch exists locally",
                "Fetch the latest branches with 'git fetch'",
            ]
        if self.operation == "checkout":
            return [
                "Ensure the branch exists",
                "Commit or stash any uncommitted changes",
            ]
        return [
            "Ensure you have proper Git permissions",
            "Check that the base branch exists and is accessible",
        ]


class ConfigError(JiraflowError):
    """
    Raised when the configuration cannot be used.

    Attributes:
        field: The offending configuration key, may be empty.
        value: The offending value.
        message: What is wrong with it.
    """

    def __init__(
        self,
        field: str,
        message: str,
        value: Any = None,
    ):
        if field:
            super().__init__(f"configuration error in field '{field}': {message}")
        else:
            super().__init__(f"configuration error: {message}")
        self.field = field
        self.value = value
        self.message = message

    def user_message(self) -> str:
        if self.field:
            return f"Configuration issue with '{self.field}': {self.message}"
        return f"Configuration issue: {self.message}"

    def suggestions(self) -> list[str]:
        if self.field == "max_branch_length":
            return ["Set max_branch_length to a value between 10 and 200"]
        if self.field.startswith("branch_types"):
            return [
                "Ensure all branch types have non-empty keys and labels",
                "Check the [branch_types] table in your config file",
            ]
        if self.field == "sanitization.separator":
            return [
                "Use a single character for the separator",
                "Common separators: '-', '_', '.'",
            ]
        return [
            "Check your jiraflow.toml configuration file",
            "Run 'jiraflow --init-config' to regenerate the defaults",
        ]


class UserCancelled(JiraflowError):
    """Raised when the user backs out of the wizard. Not a failure."""

    def __init__(self, message: str = "user cancelled operation"):
        super().__init__(message)


def exit_code_for(exc: BaseException | None) -> int:
    """
    Map an exception to the process exit code.

    Args:
        exc: The exception that stopped the program, or None on success.

    Returns:
        int: 0 for success or cancellation, 2 for configuration, 3 for git,
        4 for Jira, and 1 for anything else.
    """
    if exc is None or isinstance(exc, UserCancelled):
        return EXIT_SUCCESS
    if isinstance(exc, ConfigError):
        return EXIT_CONFIG
    if isinstance(exc, RepositoryError):
        return EXIT_GIT
    if isinstance(exc, TicketLookupError):
        return EXIT_JIRA
    return EXIT_GENERAL


def format_error(exc: BaseException) -> str:
    """
    Render an exception as a message followed by bullet-point suggestions.

    Args:
        exc: The exception to render.

    Returns:
        str: Multi-line text for terminal output.
    """
    if not isinstance(exc, JiraflowError):
        return f"Error: {exc}"
    lines = [exc.user_message()]
    suggestions = exc.suggestions()
    if suggestions:
        lines.append("")
        lines.append("Suggestions:")
        lines.extend(f"  • {suggestion}" for suggestion in suggestions)
    return "\n".join(lines)
