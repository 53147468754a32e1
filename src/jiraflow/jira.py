"""
Ticket title lookup through the jira command line client.

The client shells out to ``jira issue view <ticket> --plain`` and picks the summary
out of the output. It holds no state between calls, so it can be used from a
worker thread.
"""

import json
import re
import shlex
import shutil
import subprocess
from typing import Any, Optional

from loguru import logger

from .errors import TicketLookupError

__all__ = ["JiraClient", "parse_ticket_title"]

_SUMMARY_LINE = re.compile(r"^\s*(?:Summary|Title)\s*:\s*(?P<title>.+?)\s*$", re.MULTILINE)
_HEADING_LINE = re.compile(r"^\s*#\s+(?P<title>.+?)\s*$", re.MULTILINE)


def parse_ticket_title(output: str) -> Optional[str]:
    """
    Extract the ticket summary from jira CLI output.

    JSON output (``fields.summary``) is tried first, then a ``Summary: ...`` line,
    then the first markdown heading as printed by ``--plain``.

    Args:
        output: Standard output of the jira CLI.

    Returns:
        str | None: The summary, or None if none was found.

    Examples:
        >>> parse_ticket_title("Key: PROJ-1\\nSummary: Fix login bug\\n")
        'Fix login bug'
    """
    text = output.strip()
    if not text:
        return None
    if text.startswith("{"):
        try:
            data = json.loads(text)
        except json.JSONDecodeError:
            logger.debug("jira output looks like JSON but could not be decoded")
        else:
            summary = (data.get("fields") or {}).get("summary")
            if isinstance(summary, str) and summary.strip():
                return summary.strip()
    for pattern in (_SUMMARY_LINE, _HEADING_LINE):
        match = pattern.search(text)
        if match:
            return match.group("title")
    return None


def _classify_failure(ticket_id: str, output: str) -> str:
    lowered = output.lower()
    if "401" in lowered or "unauthorized" in lowered or "authentication" in lowered:
        return f"authentication failed: {output}"
    if "404" in lowered or "not found" in lowered or "does not exist" in lowered:
        return f"ticket {ticket_id} not found"
    return output or "unknown error"


class JiraClient:
    """
    Looks up ticket titles with the jira CLI.

    Args:
        command: The jira executable name or path.
        timeout: Seconds to wait for a single lookup.
        env: Environment for the subprocess; None inherits the current one.
    """

    def __init__(
        self,
        command: str = "jira",
        timeout: float = 15,
        env: dict[str, str] | None = None,
    ):
        self.command = command
        self.timeout = timeout
        self.env = env

    @classmethod
    def from_config(cls, config: Any, env: dict[str, str] | None = None) -> "JiraClient":
        return cls(
            command=config.jira_command,
            timeout=config.jira_timeout_seconds,
            env=env,
        )

    def is_available(self) -> bool:
        """Return True if the jira executable can be found on PATH."""
        path = self.env.get("PATH") if self.env else None
        return shutil.which(self.command, path=path) is not None

    def fetch_ticket_title(self, ticket_id: str) -> str:
        """
        Fetch the summary of a ticket.

        Args:
            ticket_id: The ticket id, e.g. ``"PROJ-123"``.

        Returns:
            str: The ticket summary.

        Raises:
            TicketLookupError: If the CLI is missing, times out, fails, or prints
                no summary.
        """
        if not ticket_id.strip():
            raise TicketLookupError("", "ticket id cannot be empty")
        if not self.is_available():
            raise TicketLookupError(
                ticket_id, "jira CLI is not installed or not available in PATH"
            )

        cmd = [self.command, "issue", "view", ticket_id, "--plain"]
        logger.debug(f"Running subprocess: {shlex.join(cmd)}")
        try:
            result = subprocess.run(
                cmd,
                capture_output=True,
                text=True,
                errors="replace",
                check=False,
                timeout=self.timeout,
                env=self.env,
            )
        except subprocess.TimeoutExpired as exc:
            logger.error(f"jira lookup for {ticket_id} timed out after {self.timeout}s")
            raise TicketLookupError(
                ticket_id, f"lookup timed out after {self.timeout:g} seconds"
            ) from exc
        except FileNotFoundError as exc:
            raise TicketLookupError(
                ticket_id, "jira CLI is not installed or not available in PATH"
            ) from exc
        except OSError as exc:
            logger.error(f"jira CLI could not be run: {exc}")
            raise TicketLookupError(ticket_id, f"jira CLI could not be run: {exc}") from exc
        logger.debug(f"subprocess stdout: {result.stdout}")
        logger.debug(f"subprocess stderr: {result.stderr}")

        if result.returncode != 0:
            output = (result.stderr or result.stdout).strip()
            logger.error(
                f"jira issue view failed with return code {result.returncode}, stderr: {result.stderr}"
            )
            raise TicketLookupError(ticket_id, _classify_failure(ticket_id, output))

        title = parse_ticket_title(result.stdout)
        if not title:
            raise TicketLookupError(ticket_id, "no summary found in jira output")
        logger.debug(f"Fetched title for {ticket_id}: {title}")
        return title
