"""
Command line entry point for jiraflow.

Without branch flags the interactive wizard runs in the terminal. Any of
``--type``, ``--base`` or ``--ticket`` switches to the non-interactive mode, which
creates the branch straight from the flags.

Example:
    $ jiraflow
    $ jiraflow --type feature --base main --ticket PROJ-123 --title "Add user authentication"
    $ jiraflow --dry-run --type hotfix --ticket PROJ-456
"""

import argparse
import os
import sys
from pathlib import Path
from typing import Optional, Sequence

from loguru import logger
from platformdirs import user_log_dir

from .branch_name import GeneratorConfig, generate, validate_ref_name
from .config import APPLICATION_NAME, EffectiveConfig, load_effective_config, write_default_config
from .errors import (
    EXIT_GENERAL,
    EXIT_SUCCESS,
    InvalidTicketId,
    JiraflowError,
    RepositoryError,
    TicketLookupError,
    UserCancelled,
    ValidationError,
    exit_code_for,
    format_error,
)
from .git_utils import GitRepository, _filtered_env_for_log
from .jira import JiraClient
from .ticket_form import validate_ticket_id

__all__ = [
    "parse_arguments",
    "configure_logging",
    "determine_work_tree",
    "validate_git_repo",
    "is_non_interactive",
    "run_non_interactive",
    "run_interactive",
    "run_app",
]


def parse_arguments(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        prog=APPLICATION_NAME,
        description="Create git branches named after Jira tickets.",
    )
    parser.add_argument(
        "directory",
        nargs="?",
        default=None,
        help="Optional working directory for git operations",
    )
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Show the branch that would be created without creating it",
    )
    parser.add_argument("-t", "--type", dest="branch_type", help="Branch type (e.g. feature)")
    parser.add_argument("-b", "--base", dest="base_branch", help="Base branch (default: current branch)")
    parser.add_argument("--ticket", help="Jira ticket number (e.g. PROJ-123)")
    parser.add_argument("--title", help="Ticket title (fetched from Jira when omitted)")
    parser.add_argument(
        "--init-config",
        action="store_true",
        help="Write the default configuration file and exit",
    )
    return parser.parse_args(argv)


def configure_logging(debug: bool, interactive: bool = True) -> None:
    """
    Configure loguru sinks.

    Logs always go to a rotating file in the user log directory. The
    non-interactive mode also logs warnings (everything with ``--debug``) to
    stderr; the interactive mode does not, since stderr output would tear the
    terminal UI.
    """
    logger.remove()
    log_file_path = Path(user_log_dir(APPLICATION_NAME)) / f"{APPLICATION_NAME}.log"
    logger.add(
        str(log_file_path),
        level="DEBUG" if debug else "INFO",
        format="{time} {level} {message}",
        rotation="16 MB",
        retention=3,
        compression="zip",
    )
    if not interactive:
        logger.add(
            sys.stderr,
            level="DEBUG" if debug else "WARNING",
            format="{level}: {message}",
        )


def determine_work_tree(directory: Optional[str], env: dict[str, str]) -> Optional[str]:
    """
    Determine the git work tree based on environment and arguments.

    ``GIT_WORK_TREE`` from the environment wins; otherwise ``directory`` becomes
    the work tree and the process changes into it.

    Raises:
        RepositoryError: If ``directory`` is not a directory.
    """
    if env.get("GIT_WORK_TREE"):
        return env["GIT_WORK_TREE"]

    if directory:
        dir_path = Path(directory).expanduser().resolve()
        if not dir_path.is_dir():
            raise RepositoryError("rev-parse", f"{directory} is not a directory")
        env["GIT_WORK_TREE"] = str(dir_path)
        os.chdir(dir_path)
        return str(dir_path)

    return None


def validate_git_repo(work_tree: Optional[str], repository: GitRepository) -> None:
    """
    Check that the work tree is a git repository.

    Raises:
        RepositoryError: If it is not.
    """
    if not repository.is_git_repository():
        raise RepositoryError(
            "rev-parse", f"{work_tree or os.getcwd()}: not a git repository"
        )


def is_non_interactive(args: argparse.Namespace) -> bool:
    return bool(args.branch_type or args.base_branch or args.ticket)


def _validate_flags(args: argparse.Namespace, config: EffectiveConfig) -> None:
    problems = []
    valid_types = ", ".join(config.branch_types)
    if not args.branch_type:
        problems.append("branch type is required (use --type)")
        problems.append(f"  Available types: {valid_types}")
    elif args.branch_type not in config.branch_types:
        problems.append(f"invalid branch type '{args.branch_type}'")
        problems.append(f"  Valid types: {valid_types}")

    if not args.ticket:
        problems.append("ticket number is required (use --ticket)")
        problems.append("  Example: --ticket PROJ-123")
    else:
        try:
            validate_ticket_id(args.ticket)
        except InvalidTicketId as exc:
            problems.append(f"invalid ticket format '{args.ticket}': {exc}")

    if problems:
        raise ValidationError("validation failed:\n  " + "\n  ".join(problems))


def run_non_interactive(
    args: argparse.Namespace,
    config: EffectiveConfig,
    repository: GitRepository,
    jira: Optional[JiraClient] = None,
) -> int:
    """
    Create a branch from command line flags.

    Args:
        args: Parsed arguments.
        config: Effective configuration.
        repository: Git collaborator.
        jira: Title lookup collaborator; None skips the lookup.

    Returns:
        int: The exit code.

    Raises:
        JiraflowError: On invalid flags or git failures.
    """
    _validate_flags(args, config)

    base_branch = args.base_branch
    if not base_branch:
        base_branch = repository.current_branch()
        print(f"Using current branch '{base_branch}' as base branch")
    else:
        names = [branch.name for branch in repository.list_local_branches()]
        if base_branch not in names:
            raise RepositoryError(
                "branch",
                f"base branch '{base_branch}' does not exist locally\n"
                f"Available branches: {', '.join(names)}",
            )

    title = args.title or ""
    if not title and jira is not None:
        try:
            title = jira.fetch_ticket_title(args.ticket)
            print(f"Fetched title from Jira: {title}")
        except TicketLookupError as exc:
            logger.warning(f"Could not fetch title: {exc}")
            print(f"Warning: Could not fetch title from Jira: {exc.user_message()}")
            print("Proceeding without title...")

    branch_name = generate(
        args.branch_type, args.ticket, title, GeneratorConfig.from_config(config)
    )

    print("\nBranch Information:")
    print(f"  Type: {args.branch_type}")
    print(f"  Base Branch: {base_branch}")
    print(f"  Ticket: {args.ticket}")
    if title:
        print(f"  Title: {title}")
    print(f"  Generated Branch: {branch_name}")

    if args.dry_run:
        print(f"\n✓ Dry-run complete. Branch '{branch_name}' would be created from '{base_branch}'")
        return EXIT_SUCCESS

    if repository.branch_exists(branch_name):
        raise RepositoryError("branch", f"branch '{branch_name}' already exists")
    validate_ref_name(branch_name)

    print(f"\nCreating branch '{branch_name}' from '{base_branch}'...")
    repository.create_and_switch_branch(branch_name, base_branch)
    print(f"✓ Successfully created and checked out branch '{branch_name}'")
    return EXIT_SUCCESS


def run_interactive(
    config: EffectiveConfig,
    repository: GitRepository,
    jira: Optional[JiraClient] = None,
    notices: Optional[list[str]] = None,
) -> int:
    """
    Run the wizard in the terminal.

    Returns:
        int: 0 when the branch was created or the user cancelled, otherwise the
        exit code for the creation error.
    """
    from .tui import JiraflowApp
    from .wizard import OutcomeStatus, WizardController

    wizard = WizardController(
        config,
        repository,
        can_fetch_title=jira is not None,
        notices=notices,
    )
    app = JiraflowApp(wizard, fetch_title=jira.fetch_ticket_title if jira else None)
    app.run()
    outcome = app.outcome()
    logger.info(f"Wizard finished: {outcome.status.value} {outcome.branch_name}")

    if outcome.status is OutcomeStatus.CREATED:
        print(f"✓ Created and checked out branch '{outcome.branch_name}'")
        return EXIT_SUCCESS
    if outcome.status is OutcomeStatus.FAILED:
        print(format_error(outcome.error), file=sys.stderr)
    return exit_code_for(outcome.error)


def run_app(argv: Optional[Sequence[str]] = None) -> int:
    """
    Run jiraflow.

    This function determines the working directory for git operations in the following order:
    1. If the GIT_WORK_TREE environment variable is set, use its value as the worktree and do not modify it.
    2. If the directory argument is provided, use it as the worktree and set GIT_WORK_TREE accordingly.
    3. Otherwise, use the current working directory.

    Args:
        argv: Arguments to parse instead of ``sys.argv``.

    Returns:
        int: The process exit code.
    """
    args = parse_arguments(argv)
    interactive = not (is_non_interactive(args) or args.init_config)
    configure_logging(args.debug, interactive=interactive)

    try:
        if args.init_config:
            path = write_default_config()
            print(f"Wrote default configuration to {path}")
            return EXIT_SUCCESS

        config, warnings = load_effective_config()
        if not interactive:
            for warning in warnings:
                print(f"Configuration warning: {warning}", file=sys.stderr)

        env = os.environ.copy()
        work_tree = determine_work_tree(args.directory, env)
        logger.debug(f"Using git environment: {_filtered_env_for_log(env)}")
        repository = GitRepository(env=env)
        validate_git_repo(work_tree, repository)

        jira = None
        if config.jira_enabled:
            jira = JiraClient.from_config(config, env=env)
            if not jira.is_available():
                logger.info(f"{config.jira_command} not found, title lookup disabled")
                jira = None

        if interactive:
            return run_interactive(config, repository, jira, notices=warnings)
        return run_non_interactive(args, config, repository, jira)
    except JiraflowError as exc:
        logger.error(f"jiraflow failed: {exc}")
        print(format_error(exc), file=sys.stderr)
        return exit_code_for(exc)
    except KeyboardInterrupt:
        logger.info("Interrupted")
        return exit_code_for(UserCancelled())
    except OSError as exc:
        logger.exception("Unexpected operating system error")
        print(format_error(exc), file=sys.stderr)
        return EXIT_GENERAL
