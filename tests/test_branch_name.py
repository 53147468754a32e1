"""
Test suite for jiraflow branch_name module.

Covers title sanitization, diacritic folding, branch name composition with
length budgets, and git ref name validation.

Run with:
    pytest tests/
"""

import pytest
from jiraflow import branch_name
from jiraflow.branch_name import GeneratorConfig, SanitizationOptions
from jiraflow.errors import InvalidRefName


@pytest.mark.parametrize(
    "title, expected",
    [
        ("Add user authentication", "add-user-authentication"),
        ('Fix "login" (issue) with: special chars', "fix-login-issue-with-special-chars"),
        ("Fix--multiple--hyphens", "fix-multiple-hyphens"),
        ("  padded   title  ", "padded-title"),
        ("snake_case_title", "snake-case-title"),
        ("path/like\\title", "path-like-title"),
        ("-leading and trailing-", "leading-and-trailing"),
        ("...dots first", "dots-first"),
        ("Version 2.0 release", "version-2.0-release"),
        ("", ""),
    ],
)
def test_sanitize_default_options(title, expected):
    """
    Test sanitize with the default options.
    """
    assert branch_name.sanitize(title, SanitizationOptions()) == expected


def test_sanitize_truncates_at_word_boundary():
    """
    Test that sanitize cuts back to the last separator past half the limit.
    """
    title = "This is a very long title that should be truncated"
    assert (
        branch_name.sanitize(title, SanitizationOptions(max_length=20))
        == "this-is-a-very-long"
    )
    assert (
        branch_name.sanitize(title, SanitizationOptions(max_length=30))
        == "this-is-a-very-long-title"
    )


def test_sanitize_hard_cut_without_early_separator():
    """
    Test that a word longer than half the limit is cut mid-word.
    """
    options = SanitizationOptions(max_length=8)
    assert branch_name.sanitize("a supercalifragilistic", options) == "a-superc"


def test_sanitize_keeps_case_when_lowercase_disabled():
    """
    Test that lowercase=False keeps the original letter case.
    """
    options = SanitizationOptions(lowercase=False)
    assert branch_name.sanitize("Add New Feature", options) == "Add-New-Feature"


def test_sanitize_custom_separator():
    """
    Test that underscores and dots can join words.
    """
    assert (
        branch_name.sanitize("Fix user login", SanitizationOptions(separator="_"))
        == "fix_user_login"
    )
    assert (
        branch_name.sanitize("Fix user login", SanitizationOptions(separator="."))
        == "fix.user.login"
    )


def test_sanitize_folds_diacritics():
    """
    Test that diacritics are folded before non-ASCII letters are dropped.
    """
    title = "Füge Benutzerverwaltung hinzü ß test"
    assert (
        branch_name.sanitize(title, SanitizationOptions(fold_diacritics=True))
        == "fuege-benutzerverwaltung-hinzue-ss-test"
    )
    assert (
        branch_name.sanitize(title, SanitizationOptions(fold_diacritics=False))
        == "fge-benutzerverwaltung-hinz-test"
    )


def test_sanitize_is_idempotent():
    """
    Test that sanitizing an already sanitized fragment changes nothing.
    """
    options = SanitizationOptions(max_length=25, fold_diacritics=True)
    for title in ("Ünïcödé and [brackets] / slashes", "a.b..c", "x - y _ z"):
        once = branch_name.sanitize(title, options)
        assert branch_name.sanitize(once, options) == once


ADVERSARIAL_TITLES = [
    "....",
    "a..b...c",
    ". . .",
    "---",
    "___",
    "- _ -",
    "/\\/",
    "日本語",
    "Ünïcödé",
    "🚀🚀",
    "..hidden.",
    "trailing dot.",
    "v1.2..3.",
    "[]{}()~^:?*",
    "tab\tand\nnewline",
    "nul\x00byte",
    "-.-a",
    "  .-_.  ",
    "x" * 200,
    "word " * 40 + "end",
]


@pytest.mark.parametrize("title", ADVERSARIAL_TITLES)
@pytest.mark.parametrize("max_length", [0, 1, 5, 12])
@pytest.mark.parametrize("separator", ["-", "_"])
@pytest.mark.parametrize("fold", [True, False])
def test_sanitize_is_idempotent_on_adversarial_titles(title, max_length, separator, fold):
    """
    Test that a second sanitize pass never changes the result.
    """
    options = SanitizationOptions(
        separator=separator, fold_diacritics=fold, max_length=max_length
    )
    once = branch_name.sanitize(title, options)
    assert branch_name.sanitize(once, options) == once
    if max_length:
        assert len(once) <= max_length


def test_sanitization_options_reject_bad_values():
    """
    Test that multi-character separators and negative lengths are rejected.
    """
    with pytest.raises(ValueError):
        SanitizationOptions(separator="--")
    with pytest.raises(ValueError):
        SanitizationOptions(separator="")
    with pytest.raises(ValueError):
        SanitizationOptions(max_length=-1)


def test_fold_diacritics_table():
    """
    Test the full vowel table and that unknown letters pass through.
    """
    assert (
        branch_name.fold_diacritics("àáâãäåèéêëìíîïòóôõöùúûüçñ")
        == "aaaaaeaeeeeiiiioooooeuuuuecn"
    )
    assert branch_name.fold_diacritics("Müller ÄÖÜ") == "Mueller AeOeUe"
    assert branch_name.fold_diacritics("Łódź") == "Łodź"


@pytest.mark.parametrize(
    "branch_type, ticket_id, title, config, expected",
    [
        (
            "feature",
            "STR-123",
            "Add user authentication",
            GeneratorConfig(),
            "feature/STR-123-add-user-authentication",
        ),
        ("feature", "STR-123", "", GeneratorConfig(), "feature/STR-123-str-123"),
        ("hotfix", "HOT-999", "", GeneratorConfig(), "hotfix/HOT-999-hot-999"),
        ("hotfix", "HOT-999", "   ", GeneratorConfig(), "hotfix/HOT-999-hot-999"),
        (
            "feature",
            "STR-123",
            "This is a very long title that should be truncated",
            GeneratorConfig(max_branch_length=40),
            "feature/STR-123-this-is-a-very-long",
        ),
        (
            "bugfix",
            "BUG-456",
            "Fix user login issue",
            GeneratorConfig(separator="_"),
            "bugfix/BUG-456_fix_user_login_issue",
        ),
        (
            "fix",
            "F-1",
            "Short fix",
            GeneratorConfig(max_branch_length=15),
            "fix/F-1-short",
        ),
        (
            "Feature",
            "CAPS-123",
            "Add New Feature",
            GeneratorConfig(lowercase=False),
            "Feature/CAPS-123-Add-New-Feature",
        ),
        (
            "feature",
            "UML-456",
            "Füge neue Funktionalität hinzü",
            GeneratorConfig(fold_diacritics=False),
            "feature/UML-456-fge-neue-funktionalitt-hinz",
        ),
        (
            "feature",
            "UML-456",
            "Füge neue Funktionalität hinzü",
            GeneratorConfig(fold_diacritics=True),
            "feature/UML-456-fuege-neue-funktionalitaet-hinzue",
        ),
        (
            "hotfix",
            "DOT-789",
            "Fix critical bug",
            GeneratorConfig(separator="."),
            "hotfix/DOT-789.fix.critical.bug",
        ),
        ("feature", "DOC-123", "!@#$%^&*()", GeneratorConfig(), "feature/DOC-123-"),
    ],
)
def test_generate(branch_type, ticket_id, title, config, expected):
    """
    Test generate for representative titles and settings.
    """
    assert branch_name.generate(branch_type, ticket_id, title, config) == expected


def test_generate_keeps_prefix_when_it_exceeds_the_limit():
    """
    Test that a too long type and ticket id fall back to the minimum title budget.
    """
    config = GeneratorConfig(max_branch_length=20)
    assert (
        branch_name.generate("feature", "LONG-TICKET-123", "Some title", config)
        == "feature/LONG-TICKET-123-some-title"
    )
    config = GeneratorConfig(max_branch_length=30)
    assert (
        branch_name.generate(
            "verylongbranchtype", "VERYLONGTICKETID-12345", "With this title", config
        )
        == "verylongbranchtype/VERYLONGTICKETID-12345-with-this"
    )


def test_generate_respects_max_length():
    """
    Test that names with a short prefix never exceed max_branch_length.
    """
    title = "word " * 40
    for max_length in (20, 35, 60, 100):
        name = branch_name.generate(
            "feature", "PROJ-1", title, GeneratorConfig(max_branch_length=max_length)
        )
        assert len(name) <= max_length
        assert name.startswith("feature/PROJ-1-")


def test_generate_returns_empty_without_type_or_ticket():
    """
    Test that a missing type or ticket id yields an empty name.
    """
    assert branch_name.generate("", "PROJ-1", "title") == ""
    assert branch_name.generate("feature", "", "title") == ""


def test_generate_makes_dotted_titles_ref_safe():
    """
    Test that dot runs collapse and trailing dots are removed.
    """
    name = branch_name.generate("feature", "PROJ-1", "Bump to 2..0.", GeneratorConfig())
    assert name == "feature/PROJ-1-bump-to-2.0"
    branch_name.validate_ref_name(name)


@pytest.mark.parametrize("title", ADVERSARIAL_TITLES)
@pytest.mark.parametrize("max_length", [5, 16, 17, 20, 60])
@pytest.mark.parametrize("separator", ["-", "_"])
def test_generate_is_ref_safe_for_adversarial_titles(title, max_length, separator):
    """
    Test that generated names pass ref validation for hostile titles and tiny budgets.
    """
    config = GeneratorConfig(max_branch_length=max_length, separator=separator)
    name = branch_name.generate("feature", "PROJ-1", title, config)
    assert name.startswith(f"feature/PROJ-1{separator}")
    branch_name.validate_ref_name(name)


def test_generate_default_config_folds_umlauts():
    """
    Test that the default settings fold German umlauts.
    """
    config = GeneratorConfig()
    assert branch_name.generate("feature", "PROJ-9", "Ärger", config) == "feature/PROJ-9-aerger"


def test_generator_config_from_config(effective_config):
    """
    Test that GeneratorConfig copies the relevant settings.
    """
    generator = GeneratorConfig.from_config(effective_config)
    assert generator.max_branch_length == effective_config.max_branch_length
    assert generator.separator == effective_config.separator
    assert generator.fold_diacritics is effective_config.fold_diacritics


@pytest.mark.parametrize(
    "name",
    [
        "feature/PROJ-123-add-login",
        "hotfix/DOT-789.fix.critical.bug",
        "bugfix/BUG-456_fix_user_login_issue",
        "feature/DOC-123-",
    ],
)
def test_validate_ref_name_accepts(name):
    """
    Test names git accepts.
    """
    branch_name.validate_ref_name(name)


@pytest.mark.parametrize(
    "name, reason",
    [
        ("", "branch name cannot be empty"),
        (".hidden", "cannot start with '.'"),
        ("feature/x.", "cannot end with '.'"),
        ("feature/a..b", "cannot contain '..'"),
        ("/feature", "cannot start with '/'"),
        ("feature/", "cannot end with '/'"),
        ("feature//x", "cannot contain '//'"),
        ("feature/a b", "cannot contain whitespace or control characters"),
        ("feature/a\tb", "cannot contain whitespace or control characters"),
        ("feature/a~b", "cannot contain '~'"),
        ("feature/a^b", "cannot contain '^'"),
        ("feature/a:b", "cannot contain ':'"),
        ("feature/a?b", "cannot contain '?'"),
        ("feature/a*b", "cannot contain '*'"),
        ("feature/a[b", "cannot contain '['"),
    ],
)
def test_validate_ref_name_rejects(name, reason):
    """
    Test each ref name rule and its reason.
    """
    with pytest.raises(InvalidRefName) as excinfo:
        branch_name.validate_ref_name(name)
    assert excinfo.value.reason == reason
