"""
An interactive terminal tool for creating git branches named after Jira tickets.

This package walks the user through a four step wizard: pick a branch type, pick a
base branch, enter the Jira ticket (the title is fetched through the ``jira`` CLI
when available) and confirm. The resulting branch is named
``<type>/<TICKET-ID>-<sanitized-title>`` and checked out.

Features:
- Pre-fills the ticket from the current branch name when it contains one.
- Fuzzy search over local branches.
- Normalizes titles into git-safe names, folding diacritics and truncating at word boundaries.
- A non-interactive mode driven by command line flags.

Example:
    >>> from jiraflow import main
    >>> main()

Notes:
    This tool is intended to be run as a standalone application.
"""

import sys


def main() -> None:
    """Run the jiraflow application."""
    from .cli import run_app

    sys.exit(run_app())
