"""
Branch name generation and sanitization for jiraflow.

This module turns free-form ticket titles into safe branch name fragments and composes
full branch names of the form ``type/TICKET-sanitized-title``. Everything here is pure:
the wizard and the non-interactive command line call the same functions and get
byte-identical results.

Example:
    >>> from jiraflow.branch_name import GeneratorConfig, generate
    >>> generate("feature", "STR-123", "Add user authentication", GeneratorConfig())
    'feature/STR-123-add-user-authentication'
"""

import re
from dataclasses import dataclass
from typing import Any

from .errors import InvalidRefName

__all__ = [
    "SanitizationOptions",
    "GeneratorConfig",
    "MIN_TITLE_BUDGET",
    "fold_diacritics",
    "sanitize",
    "generate",
    "validate_ref_name",
]

MIN_TITLE_BUDGET: int = 10

_DIACRITICS: dict[str, str] = {
    # German
    "ä": "ae",
    "ö": "oe",
    "ü": "ue",
    "ß": "ss",
    "Ä": "Ae",
    "Ö": "Oe",
    "Ü": "Ue",
    # Other European letters
    "à": "a",
    "á": "a",
    "â": "a",
    "ã": "a",
    "å": "a",
    "è": "e",
    "é": "e",
    "ê": "e",
    "ë": "e",
    "ì": "i",
    "í": "i",
    "î": "i",
    "ï": "i",
    "ò": "o",
    "ó": "o",
    "ô": "o",
    "õ": "o",
    "ø": "o",
    "ù": "u",
    "ú": "u",
    "û": "u",
    "ç": "c",
    "ñ": "n",
    "ý": "y",
    "ÿ": "y",
    "À": "A",
    "Á": "A",
    "Â": "A",
    "Ã": "A",
    "Å": "A",
    "È": "E",
    "É": "E",
    "Ê": "E",
    "Ë": "E",
    "Ì": "I",
    "Í": "I",
    "Î": "I",
    "Ï": "I",
    "Ò": "O",
    "Ó": "O",
    "Ô": "O",
    "Õ": "O",
    "Ø": "O",
    "Ù": "U",
    "Ú": "U",
    "Û": "U",
    "Ç": "C",
    "Ñ": "N",
    "Ý": "Y",
}
_DIACRITICS_TABLE = str.maketrans(_DIACRITICS)

_PATH_SEPARATORS = re.compile(r"[/\\]")
_STRIPPED_CHARS_TABLE = str.maketrans("", "", "\"'()[]{}:;,<>?|*&^%$#@!~`")
_WORD_BREAKS = re.compile(r"\s*[-_]\s*|\s+")
_DOT_RUNS = re.compile(r"\.{2,}")

_REF_RESERVED_CHARS = "~^:?*["


@dataclass(frozen=True)
class SanitizationOptions:
    """
    Options controlling title sanitization.

    Attributes:
        separator: Single character used to join words.
        lowercase: Fold the result to lowercase.
        fold_diacritics: Replace accented letters with ASCII equivalents.
        max_length: Maximum result length; 0 means unbounded.
    """

    separator: str = "-"
    lowercase: bool = True
    fold_diacritics: bool = False
    max_length: int = 0

    def __post_init__(self) -> None:
        if len(self.separator) != 1:
            raise ValueError(
                f"separator must be exactly one character, got {self.separator!r}"
            )
        if self.max_length < 0:
            raise ValueError(f"max_length must be >= 0, got {self.max_length}")


@dataclass(frozen=True)
class GeneratorConfig:
    """
    Options controlling full branch name generation.

    Attributes:
        max_branch_length: Target maximum length of the composed branch name.
        separator: Single character joining the ticket id and title words.
        lowercase: Fold the title portion to lowercase.
        fold_diacritics: Replace accented letters in the title with ASCII.
    """

    max_branch_length: int = 60
    separator: str = "-"
    lowercase: bool = True
    fold_diacritics: bool = True

    @classmethod
    def from_config(cls, config: Any) -> "GeneratorConfig":
        """
        Build a generator config from an effective application config.

        Args:
            config: An object exposing ``max_branch_length``, ``separator``,
                ``lowercase`` and ``fold_diacritics`` attributes.

        Returns:
            GeneratorConfig: The generator settings.
        """
        return cls(
            max_branch_length=config.max_branch_length,
            separator=config.separator,
            lowercase=config.lowercase,
            fold_diacritics=config.fold_diacritics,
        )

    def sanitization_options(self, max_length: int) -> SanitizationOptions:
        """Return title sanitization options limited to ``max_length``."""
        return SanitizationOptions(
            separator=self.separator,
            lowercase=self.lowercase,
            fold_diacritics=self.fold_diacritics,
            max_length=max_length,
        )


def fold_diacritics(text: str) -> str:
    """
    Replace accented and umlaut letters with ASCII equivalents.

    Letters missing from the table are returned unchanged.

    Args:
        text: Input text.

    Returns:
        str: Text with known diacritics folded, e.g. ``"Müller" -> "Mueller"``.
    """
    return text.translate(_DIACRITICS_TABLE)


def _collapse_separators(text: str, separator: str) -> str:
    return re.sub(re.escape(separator) + "{2,}", separator, text)


def sanitize(title: str, options: SanitizationOptions) -> str:
    """
    Turn a free-form title into a branch-name-safe fragment.

    The pipeline trims and optionally folds diacritics, turns path separators into
    word breaks, deletes quote/bracket/shell characters, joins words with the
    separator, drops anything that is not ASCII alphanumeric, the separator, or a
    dot, optionally lowercases, truncates at a word boundary when possible, and
    finally strips leading/trailing separators and leading dots.

    Args:
        title: The title to sanitize.
        options: Sanitization options.

    Returns:
        str: The sanitized fragment; empty for empty input.

    Examples:
        >>> sanitize('Fix "login" (issue) with: special chars', SanitizationOptions())
        'fix-login-issue-with-special-chars'
    """
    if not title:
        return ""
    separator = options.separator

    result = title.strip()
    if options.fold_diacritics:
        result = fold_diacritics(result)
    result = _PATH_SEPARATORS.sub(" ", result)
    result = result.translate(_STRIPPED_CHARS_TABLE)
    result = _WORD_BREAKS.sub(lambda _: separator, result)
    result = _collapse_separators(result, separator)
    result = re.sub(rf"[^A-Za-z0-9.{re.escape(separator)}]", "", result)
    result = _collapse_separators(result, separator)
    if options.lowercase:
        result = result.lower()

    max_length = options.max_length
    if max_length > 0 and len(result) > max_length:
        result = result[:max_length]
        cut = result.rfind(separator)
        if cut > max_length // 2:
            result = result[:cut]

    return result.lstrip(separator + ".").rstrip(separator)


def _ref_safe_title(title: str, separator: str) -> str:
    title = _DOT_RUNS.sub(".", title)
    return title.rstrip(separator + ".")


def generate(
    branch_type: str,
    ticket_id: str,
    title: str,
    config: GeneratorConfig | None = None,
) -> str:
    """
    Compose a branch name ``type/TICKET<sep>sanitized-title``.

    When the title is empty the ticket id is used as the title source. The title
    budget is ``max_branch_length`` minus the prefix; a budget below 1 is clamped to
    ``MIN_TITLE_BUDGET``, so the result may exceed ``max_branch_length`` when the
    type and ticket id alone are too long. The type and ticket id are never cut.

    Args:
        branch_type: Branch type key, e.g. ``"feature"``.
        ticket_id: Ticket id, e.g. ``"STR-123"``.
        title: Free-form ticket title, may be empty.
        config: Generator settings; defaults to ``GeneratorConfig()``.

    Returns:
        str: The branch name, or ``""`` when type or ticket id is empty.
    """
    if not branch_type or not ticket_id:
        return ""
    config = config or GeneratorConfig()
    separator = config.separator

    source = title if title.strip() else ticket_id
    budget = config.max_branch_length - (
        len(branch_type) + 1 + len(ticket_id) + len(separator)
    )
    if budget < 1:
        budget = MIN_TITLE_BUDGET

    sanitized = sanitize(source, config.sanitization_options(budget))
    sanitized = _ref_safe_title(sanitized, separator)

    prefix = f"{branch_type}/{ticket_id}{separator}"
    name = prefix + sanitized
    available = config.max_branch_length - len(prefix)
    if len(name) > config.max_branch_length and available > 0:
        sanitized = _ref_safe_title(sanitized[:available], separator)
        name = prefix + sanitized
    return name.rstrip(".")


def validate_ref_name(name: str) -> None:
    """
    Check a branch name against git ref naming restrictions.

    Args:
        name: The branch name to check.

    Raises:
        InvalidRefName: If the name is empty, starts or ends with ``.`` or ``/``,
            contains ``..`` or ``//``, contains whitespace or control characters,
            or contains any of ``~ ^ : ? * [``.
    """
    if not name:
        raise InvalidRefName(name, "branch name cannot be empty")
    if name.startswith("."):
        raise InvalidRefName(name, "cannot start with '.'")
    if name.endswith("."):
        raise InvalidRefName(name, "cannot end with '.'")
    if ".." in name:
        raise InvalidRefName(name, "cannot contain '..'")
    if name.startswith("/"):
        raise InvalidRefName(name, "cannot start with '/'")
    if name.endswith("/"):
        raise InvalidRefName(name, "cannot end with '/'")
    if "//" in name:
        raise InvalidRefName(name, "cannot contain '//'")
    for char in name:
        if char.isspace() or ord(char) < 32 or ord(char) == 127:
            raise InvalidRefName(
                name, "cannot contain whitespace or control characters"
            )
        if char in _REF_RESERVED_CHARS:
            raise InvalidRefName(name, f"cannot contain '{char}'")
