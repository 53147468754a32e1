"""
Configuration loading and validation utilities for jiraflow.

This module finds the jiraflow TOML configuration, reads it once, and turns the raw
table into an ``EffectiveConfig``. Invalid values are replaced with defaults and
reported as warnings rather than stopping the program.
"""

import os
import tomllib
from dataclasses import dataclass, field, replace
from functools import lru_cache
from pathlib import Path
from typing import Any, Optional

import platformdirs
from loguru import logger

from .errors import ConfigError

__all__ = [
    "APPLICATION_NAME",
    "CONFIG_ENV_VAR",
    "DEFAULT_BRANCH_TYPES",
    "DEFAULT_CONFIG_TOML",
    "EffectiveConfig",
    "find_pyproject_config",
    "find_toml_config",
    "discover_config",
    "load_config",
    "validate_and_fix",
    "load_effective_config",
    "default_config_path",
    "write_default_config",
]

APPLICATION_NAME: str = "jiraflow"
CONFIG_ENV_VAR: str = "JIRAFLOW_CONFIG"

MIN_BRANCH_LENGTH: int = 10
MAX_BRANCH_LENGTH: int = 200
DEFAULT_MAX_BRANCH_LENGTH: int = 60
DEFAULT_BRANCH_TYPE: str = "feature"
DEFAULT_SEPARATOR: str = "-"
DEFAULT_JIRA_TIMEOUT: float = 15

DEFAULT_BRANCH_TYPES: dict[str, str] = {
    "feature": "Feature",
    "hotfix": "Hotfix",
    "refactor": "Refactor",
    "support": "Support",
}

# Characters that would break the ref name or the word splitting.
_INVALID_SEPARATOR_CHARS = "/\\~^:?*[ \t"

DEFAULT_CONFIG_TOML: str = """\
# jiraflow configuration

# Maximum branch name length (10-200)
max_branch_length = 60

# Branch type highlighted when the wizard starts
default_branch_type = "feature"

# Branch types offered by the wizard, in display order: key = "Label"
[branch_types]
feature = "Feature"
hotfix = "Hotfix"
refactor = "Refactor"
support = "Support"

[sanitization]
# Joins the words of the ticket title
separator = "-"
# Convert the title to lowercase
lowercase = true
# Replace accented letters such as ä, é or ñ with ASCII (ä -> ae)
fold_diacritics = false

[jira]
# Look up ticket titles with the jira CLI (https://github.com/ankitpokhrel/jira-cli)
enabled = true
command = "jira"
timeout_seconds = 15
"""


@dataclass(frozen=True)
class EffectiveConfig:
    """
    Validated configuration used by the wizard and the command line.

    Attributes:
        max_branch_length: Target maximum branch name length.
        default_branch_type: Key of the branch type highlighted first.
        branch_types: Branch type key to display label, in display order.
        separator: Word separator for the title part of the branch name.
        lowercase: Lowercase the title part.
        fold_diacritics: Replace accented letters with ASCII.
        jira_enabled: Whether ticket titles are looked up.
        jira_command: The jira CLI executable.
        jira_timeout_seconds: Timeout for a single title lookup.
        source: The file the configuration was read from, if any.
    """

    max_branch_length: int = DEFAULT_MAX_BRANCH_LENGTH
    default_branch_type: str = DEFAULT_BRANCH_TYPE
    branch_types: dict[str, str] = field(
        default_factory=lambda: dict(DEFAULT_BRANCH_TYPES)
    )
    separator: str = DEFAULT_SEPARATOR
    lowercase: bool = True
    fold_diacritics: bool = False
    jira_enabled: bool = True
    jira_command: str = "jira"
    jira_timeout_seconds: float = DEFAULT_JIRA_TIMEOUT
    source: Optional[Path] = None


def find_pyproject_config(start_path: Path) -> dict[str, Any]:
    """
    Walk backwards from start_path to root, looking for a pyproject.toml file.
    If found, return the [tool.jiraflow] section as a dict, or {} if not found.

    Args:
        start_path: The directory to start searching from.

    Returns:
        dict: The [tool.jiraflow] config dict, or {} if not found.

    Raises:
        ConfigError: If a pyproject.toml on the way is not valid TOML.
    """
    current = start_path.expanduser().resolve()
    logger.debug(f"Searching for pyproject.toml starting from {current}")
    for parent in [current] + list(current.parents):
        pyproject = parent / "pyproject.toml"
        if not pyproject.is_file():
            continue
        logger.debug(f"Found pyproject.toml at {pyproject}")
        data = _read_toml(pyproject)
        tool_section = data.get("tool")
        if not isinstance(tool_section, dict):
            logger.debug(f"No [tool] section in {pyproject}")
            continue
        jiraflow_section = tool_section.get(APPLICATION_NAME)
        if isinstance(jiraflow_section, dict):
            logger.debug(f"Found [tool.jiraflow] section in {pyproject}")
            return jiraflow_section
        logger.debug(f"No [tool.jiraflow] section in {pyproject}")
        return {}
    logger.debug("No pyproject.toml with [tool.jiraflow] found in any parent directory")
    return {}


def find_toml_config(path: Path) -> dict[str, Any]:
    """
    Load a TOML config file if it exists.

    Args:
        path: Path to the TOML file.

    Returns:
        dict: The config dict, or {} if the file does not exist.

    Raises:
        ConfigError: If the file exists but cannot be read or parsed.
    """
    logger.debug(f"Checking for config file at {path}")
    if path.is_file():
        config = _read_toml(path)
        logger.debug(f"Loaded config from {path}")
        return config
    logger.debug(f"No config file found at {path}")
    return {}


def _read_toml(path: Path) -> dict[str, Any]:
    try:
        with path.open("rb") as f:
            return tomllib.load(f)
    except tomllib.TOMLDecodeError as exc:
        logger.exception(f"Invalid TOML format in {path}")
        raise ConfigError("", f"failed to parse {path}: {exc}", value=str(path)) from exc
    except OSError as exc:
        logger.exception(f"Failed to read config at {path}")
        raise ConfigError("", f"failed to read {path}: {exc}", value=str(path)) from exc


def _candidate_paths() -> list[Path]:
    paths = []
    xdg_config_home = os.environ.get("XDG_CONFIG_HOME")
    if xdg_config_home:
        paths.append(
            Path(xdg_config_home).expanduser().resolve()
            / APPLICATION_NAME
            / f"{APPLICATION_NAME}.toml"
        )
    config_dir = Path(platformdirs.user_config_dir(APPLICATION_NAME)).expanduser().resolve()
    paths.append(config_dir / f"{APPLICATION_NAME}.toml")
    paths.append(Path.home().expanduser().resolve() / f".{APPLICATION_NAME}.toml")
    return paths


@lru_cache(maxsize=1)
def discover_config() -> tuple[dict[str, Any], Optional[Path]]:
    """
    Find and read the first configuration source.

    Returns:
        tuple: The raw configuration table and the file it came from, or
        ({}, None) when no file exists.

    Raises:
        ConfigError: If a configuration file exists but cannot be parsed.
    """
    logger.debug("Starting configuration loading process")
    override = os.environ.get(CONFIG_ENV_VAR)
    if override:
        override_path = Path(override).expanduser().resolve()
        logger.debug(f"Using {CONFIG_ENV_VAR}={override_path}")
        if not override_path.is_file():
            raise ConfigError(
                "", f"config file {override_path} does not exist", value=override
            )
        return find_toml_config(override_path), override_path

    cwd = Path.cwd()
    pyproject_config = find_pyproject_config(cwd)
    if pyproject_config:
        logger.debug("Using configuration from pyproject.toml [tool.jiraflow]")
        return pyproject_config, cwd / "pyproject.toml"

    for path in _candidate_paths():
        config = find_toml_config(path)
        if config:
            logger.debug(f"Using configuration from {path}")
            return config, path
    logger.debug("No configuration file found, using defaults")
    return {}, None


def load_config() -> dict[str, Any]:
    """
    Load the raw configuration table from the first available source:
    1. the file named by $JIRAFLOW_CONFIG
    2. pyproject.toml [tool.jiraflow] (searching upwards from cwd)
    3. jiraflow.toml in $XDG_CONFIG_HOME/jiraflow/
    4. jiraflow.toml in platformdirs.user_config_dir
    5. .jiraflow.toml in the user home directory

    The result is cached for the lifetime of the process.

    Returns:
        dict: Raw configuration dictionary, empty if no file was found.

    Raises:
        ConfigError: If a configuration file exists but cannot be parsed.
    """
    raw, _ = discover_config()
    return raw


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _fix_branch_types(raw: Any, warnings: list[str]) -> dict[str, str]:
    if raw is None:
        return dict(DEFAULT_BRANCH_TYPES)
    if not isinstance(raw, dict) or not raw:
        warnings.append("branch_types must contain at least one branch type, using defaults")
        return dict(DEFAULT_BRANCH_TYPES)

    branch_types: dict[str, str] = {}
    for key, label in raw.items():
        key = str(key).strip()
        if not key:
            raise ConfigError(
                "branch_types", "branch type key cannot be empty", value=label
            )
        if not isinstance(label, str) or not label.strip():
            warnings.append(f"branch type '{key}' has an empty label, using '{key}'")
            label = key
        branch_types[key] = label.strip()
    return branch_types


def validate_and_fix(raw: dict[str, Any]) -> tuple[EffectiveConfig, list[str]]:
    """
    Turn a raw configuration table into an effective configuration.

    Missing keys take their defaults silently. Present but invalid values are
    replaced with defaults and produce one warning each. This function is pure.

    Args:
        raw: The raw configuration table as read from TOML.

    Returns:
        tuple: The effective configuration and the list of warnings.

    Raises:
        ConfigError: If a branch type has an empty key.

    Examples:
        >>> config, warnings = validate_and_fix({"max_branch_length": 5})
        >>> config.max_branch_length, len(warnings)
        (60, 1)
    """
    warnings: list[str] = []

    max_branch_length = raw.get("max_branch_length", DEFAULT_MAX_BRANCH_LENGTH)
    if not _is_int(max_branch_length) or not (
        MIN_BRANCH_LENGTH <= max_branch_length <= MAX_BRANCH_LENGTH
    ):
        warnings.append(
            f"max_branch_length {max_branch_length!r} must be between "
            f"{MIN_BRANCH_LENGTH} and {MAX_BRANCH_LENGTH}, using {DEFAULT_MAX_BRANCH_LENGTH}"
        )
        max_branch_length = DEFAULT_MAX_BRANCH_LENGTH

    branch_types = _fix_branch_types(raw.get("branch_types"), warnings)

    default_branch_type = raw.get("default_branch_type", DEFAULT_BRANCH_TYPE)
    if not isinstance(default_branch_type, str) or default_branch_type not in branch_types:
        fallback = (
            DEFAULT_BRANCH_TYPE
            if DEFAULT_BRANCH_TYPE in branch_types
            else next(iter(branch_types))
        )
        warnings.append(
            f"default_branch_type {default_branch_type!r} is not a configured branch type, "
            f"using '{fallback}'"
        )
        default_branch_type = fallback

    sanitization = raw.get("sanitization", {})
    if not isinstance(sanitization, dict):
        warnings.append("sanitization must be a table, using defaults")
        sanitization = {}

    separator = sanitization.get("separator", DEFAULT_SEPARATOR)
    if (
        not isinstance(separator, str)
        or len(separator) != 1
        or separator in _INVALID_SEPARATOR_CHARS
        or separator.isalnum()
    ):
        warnings.append(
            f"sanitization.separator {separator!r} must be a single character that is "
            f"not a letter, digit, space or one of / \\ ~ ^ : ? * [, using '{DEFAULT_SEPARATOR}'"
        )
        separator = DEFAULT_SEPARATOR

    lowercase = sanitization.get("lowercase", True)
    if not isinstance(lowercase, bool):
        warnings.append(f"sanitization.lowercase {lowercase!r} is not a boolean, using true")
        lowercase = True

    fold = sanitization.get("fold_diacritics", False)
    if not isinstance(fold, bool):
        warnings.append(
            f"sanitization.fold_diacritics {fold!r} is not a boolean, using false"
        )
        fold = False

    jira = raw.get("jira", {})
    if not isinstance(jira, dict):
        warnings.append("jira must be a table, using defaults")
        jira = {}

    jira_enabled = jira.get("enabled", True)
    if not isinstance(jira_enabled, bool):
        warnings.append(f"jira.enabled {jira_enabled!r} is not a boolean, using true")
        jira_enabled = True

    jira_command = jira.get("command", "jira")
    if not isinstance(jira_command, str) or not jira_command.strip():
        warnings.append(f"jira.command {jira_command!r} is not a command, using 'jira'")
        jira_command = "jira"

    timeout = jira.get("timeout_seconds", DEFAULT_JIRA_TIMEOUT)
    if isinstance(timeout, bool) or not isinstance(timeout, (int, float)) or timeout <= 0:
        warnings.append(
            f"jira.timeout_seconds {timeout!r} must be a positive number, "
            f"using {DEFAULT_JIRA_TIMEOUT:g}"
        )
        timeout = DEFAULT_JIRA_TIMEOUT

    config = EffectiveConfig(
        max_branch_length=max_branch_length,
        default_branch_type=default_branch_type,
        branch_types=branch_types,
        separator=separator,
        lowercase=lowercase,
        fold_diacritics=fold,
        jira_enabled=jira_enabled,
        jira_command=jira_command.strip(),
        jira_timeout_seconds=timeout,
    )
    return config, warnings


def load_effective_config() -> tuple[EffectiveConfig, list[str]]:
    """
    Discover, read and validate the configuration.

    Returns:
        tuple: The effective configuration and any correction warnings.

    Raises:
        ConfigError: If the configuration cannot be parsed or has an
            unrecoverable problem.
    """
    raw, source = discover_config()
    config, warnings = validate_and_fix(raw)
    if source is not None:
        config = replace(config, source=source)
    for warning in warnings:
        logger.warning(f"Configuration corrected: {warning}")
    return config, warnings


def default_config_path() -> Path:
    """Return the path ``--init-config`` writes to."""
    xdg_config_home = os.environ.get("XDG_CONFIG_HOME")
    if xdg_config_home:
        return (
            Path(xdg_config_home).expanduser().resolve()
            / APPLICATION_NAME
            / f"{APPLICATION_NAME}.toml"
        )
    return (
        Path(platformdirs.user_config_dir(APPLICATION_NAME)).expanduser().resolve()
        / f"{APPLICATION_NAME}.toml"
    )


def write_default_config(path: Optional[Path] = None, overwrite: bool = False) -> Path:
    """
    Write the commented default configuration file.

    Args:
        path: Target file; defaults to ``default_config_path()``.
        overwrite: Replace an existing file.

    Returns:
        Path: The file that was written.

    Raises:
        ConfigError: If the file exists and ``overwrite`` is False, or it
            cannot be written.
    """
    path = path or default_config_path()
    if path.exists() and not overwrite:
        raise ConfigError("", f"{path} already exists", value=str(path))
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(DEFAULT_CONFIG_TOML, encoding="utf-8")
    except OSError as exc:
        logger.exception(f"Failed to write default config to {path}")
        raise ConfigError("", f"failed to write {path}: {exc}", value=str(path)) from exc
    logger.debug(f"Wrote default configuration to {path}")
    return path
