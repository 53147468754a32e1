"""
Git command helpers for jiraflow.

This module wraps the handful of git commands the wizard needs: listing local
branches, reading the current branch, and creating and switching to a new branch.
Every failure is raised as ``RepositoryError``.
"""

import re
import shlex
import subprocess
from typing import Optional

from loguru import logger

from .errors import RepositoryError
from .fuzzy import BranchCandidate

__all__ = [
    "GitRepository",
    "parse_branch_for_ticket",
]

_TICKET_IN_BRANCH = re.compile(r"(?:^|[/_-])([A-Z][A-Z0-9]*-[0-9]+)(?=$|[/_.-])")


def _filtered_env_for_log(env: dict[str, str] | None) -> dict[str, str]:
    """
    Return a filtered copy of the environment containing only PATH and variables starting with GIT_.

    Args:
        env: The environment dictionary.

    Returns:
        dict: Filtered environment dictionary.
    """
    if not env:
        return {}
    return {k: v for k, v in env.items() if k == "PATH" or k.startswith("GIT_")}


def parse_branch_for_ticket(branch: str) -> Optional[str]:
    """
    Extract a ticket id from a branch name if present.

    Args:
        branch: Branch name string.

    Returns:
        str | None: The ticket id, e.g. ``"PROJ-123"``, or None.

    Examples:
        >>> parse_branch_for_ticket("feature/PROJ-123-add-login")
        'PROJ-123'
        >>> parse_branch_for_ticket("main") is None
        True
    """
    match = _TICKET_IN_BRANCH.search(branch)
    if match:
        return match.group(1)
    return None


class GitRepository:
    """
    The local git repository the wizard operates on.

    Args:
        env: Environment for the git subprocesses, e.g. with ``GIT_WORK_TREE`` set.
            None inherits the current environment.
    """

    def __init__(self, env: dict[str, str] | None = None):
        self.env = env

    def _run(self, args: list[str], operation: str) -> subprocess.CompletedProcess:
        cmd = ["git", *args]
        logger.debug(
            f"Running subprocess: {shlex.join(cmd)} with env: {_filtered_env_for_log(self.env)}"
        )
        try:
            result = subprocess.run(
                cmd,
                capture_output=True,
                text=True,
                check=False,
                env=self.env,
            )
        except FileNotFoundError as exc:
            logger.error(f"git executable not found: {exc}")
            raise RepositoryError(operation, "git is not installed or not in PATH") from exc
        except OSError as exc:
            logger.error(f"git could not be run: {exc}")
            raise RepositoryError(operation, f"git could not be run: {exc}") from exc
        except UnicodeDecodeError as exc:
            logger.error(f"git {operation} printed output that is not valid UTF-8: {exc}")
            raise RepositoryError(
                operation, f"git output is not valid UTF-8 ({exc.reason})"
            ) from exc
        logger.debug(f"subprocess stdout: {result.stdout}")
        logger.debug(f"subprocess stderr: {result.stderr}")
        return result

    def _check(self, result: subprocess.CompletedProcess, operation: str) -> str:
        if result.returncode != 0:
            message = (result.stderr or result.stdout or "Unknown error").strip()
            logger.error(
                f"git {operation} failed with return code {result.returncode}, stderr: {result.stderr}"
            )
            raise RepositoryError(operation, message)
        return result.stdout

    def is_git_repository(self) -> bool:
        """Return True if the working directory is inside a git work tree."""
        try:
            result = self._run(["rev-parse", "--is-inside-work-tree"], "rev-parse")
        except RepositoryError:
            return False
        return result.returncode == 0 and result.stdout.strip() == "true"

    def current_branch(self) -> str:
        """
        Return the name of the checked out branch.

        Returns:
            str: The current branch name.

        Raises:
            RepositoryError: If git fails or HEAD is detached.

        Examples:
            >>> GitRepository().current_branch()
            'main'
        """
        result = self._run(["symbolic-ref", "--quiet", "--short", "HEAD"], "symbolic-ref")
        if result.returncode != 0 and not result.stderr.strip():
            raise RepositoryError(
                "symbolic-ref", "HEAD is detached, check out a branch first"
            )
        branch = self._check(result, "symbolic-ref").strip()
        if not branch:
            logger.error("Current branch is blank")
            raise RepositoryError("symbolic-ref", "current branch is blank or unknown")
        return branch

    def list_local_branches(self) -> list[BranchCandidate]:
        """
        List the local branches, the current one marked.

        Remote-tracking branches are never included.

        Returns:
            list[BranchCandidate]: Local branches in git's ref order.

        Raises:
            RepositoryError: If git fails.
        """
        result = self._run(
            ["for-each-ref", "--format=%(HEAD)%(refname:short)", "refs/heads"],
            "for-each-ref",
        )
        output = self._check(result, "for-each-ref")
        branches = []
        for line in output.splitlines():
            if not line.strip():
                continue
            marker, name = line[0], line[1:].strip()
            branches.append(BranchCandidate(name=name, is_current=marker == "*"))
        logger.debug(f"Found {len(branches)} local branches")
        return branches

    def branch_exists(self, name: str) -> bool:
        """Return True if a local branch called ``name`` exists."""
        result = self._run(
            ["rev-parse", "--verify", "--quiet", f"refs/heads/{name}"], "rev-parse"
        )
        return result.returncode == 0

    def create_and_switch_branch(self, name: str, base: str) -> None:
        """
        Create branch ``name`` from ``base`` and check it out.

        Args:
            name: The new branch name.
            base: The local branch to start from.

        Raises:
            RepositoryError: If the base is missing, the name is taken, or git
                fails otherwise. Also raised if git reports success but the new
                branch is not checked out afterwards.
        """
        if not self.branch_exists(base):
            raise RepositoryError("branch", f"base branch '{base}' does not exist")
        if self.branch_exists(name):
            raise RepositoryError("branch", f"a branch named '{name}' already exists")

        result = self._run(["switch", "--quiet", "--create", name, base], "switch")
        self._check(result, "switch")

        current = self.current_branch()
        logger.debug(f"Current branch after switch: {current}")
        if current != name:
            raise RepositoryError(
                "checkout",
                f"expected branch '{name}' but current branch is '{current or 'unknown'}'",
            )
