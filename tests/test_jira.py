"""
Test suite for jiraflow jira module.

Covers parsing of jira CLI output and the failure modes of a title lookup.

Run with:
    pytest tests/
"""

import subprocess

import pytest
from jiraflow import jira
from jiraflow.config import EffectiveConfig
from jiraflow.errors import TicketLookupError


class Result:
    def __init__(self, stdout="", stderr="", returncode=0):
        self.stdout = stdout
        self.stderr = stderr
        self.returncode = returncode


@pytest.fixture
def jira_installed(monkeypatch):
    monkeypatch.setattr(jira.shutil, "which", lambda cmd, path=None: f"/usr/bin/{cmd}")


def test_parse_ticket_title_summary_line():
    """
    Test the Summary: line format.
    """
    output = "Key: PROJ-1\nSummary:   Fix login bug  \nStatus: Open\n"
    assert jira.parse_ticket_title(output) == "Fix login bug"


def test_parse_ticket_title_plain_heading():
    """
    Test the markdown heading printed by --plain.
    """
    output = "🐞 Bug  🚧 In Progress\n\n# Add user authentication\n\n------ Description ------\n"
    assert jira.parse_ticket_title(output) == "Add user authentication"


def test_parse_ticket_title_json():
    """
    Test JSON output with fields.summary.
    """
    output = '{"key": "PROJ-1", "fields": {"summary": "From JSON"}}'
    assert jira.parse_ticket_title(output) == "From JSON"


def test_parse_ticket_title_nothing():
    """
    Test output without any summary.
    """
    assert jira.parse_ticket_title("") is None
    assert jira.parse_ticket_title("just some text") is None
    assert jira.parse_ticket_title("{not json") is None


def test_fetch_ticket_title(monkeypatch, jira_installed):
    """
    Test a successful lookup and the command that is run.
    """
    calls = []

    def fake_run(cmd, **kwargs):
        calls.append((cmd, kwargs))
        return Result(stdout="# Add user authentication\n")

    monkeypatch.setattr(jira.subprocess, "run", fake_run)
    client = jira.JiraClient(timeout=3)
    assert client.fetch_ticket_title("PROJ-123") == "Add user authentication"
    cmd, kwargs = calls[0]
    assert cmd == ["jira", "issue", "view", "PROJ-123", "--plain"]
    assert kwargs["timeout"] == 3


def test_fetch_ticket_title_empty_id():
    """
    Test that an empty ticket id is refused without running anything.
    """
    with pytest.raises(TicketLookupError) as excinfo:
        jira.JiraClient().fetch_ticket_title("  ")
    assert excinfo.value.message == "ticket id cannot be empty"


def test_fetch_ticket_title_not_installed(monkeypatch):
    """
    Test the error when the jira CLI is missing.
    """
    monkeypatch.setattr(jira.shutil, "which", lambda cmd, path=None: None)
    client = jira.JiraClient()
    assert not client.is_available()
    with pytest.raises(TicketLookupError) as excinfo:
        client.fetch_ticket_title("PROJ-1")
    assert excinfo.value.user_message() == "Jira CLI is not installed or not in PATH"


def test_fetch_ticket_title_timeout(monkeypatch, jira_installed):
    """
    Test that a hanging CLI is reported as a timeout.
    """

    def fake_run(cmd, **kwargs):
        raise subprocess.TimeoutExpired(cmd, kwargs["timeout"])

    monkeypatch.setattr(jira.subprocess, "run", fake_run)
    with pytest.raises(TicketLookupError) as excinfo:
        jira.JiraClient(timeout=2).fetch_ticket_title("PROJ-1")
    assert excinfo.value.message == "lookup timed out after 2 seconds"


@pytest.mark.parametrize(
    "error",
    [
        OSError(8, "Exec format error", "jira"),
        PermissionError(13, "Permission denied", "jira"),
    ],
)
def test_fetch_ticket_title_cli_cannot_run(monkeypatch, jira_installed, error):
    """
    Test that a CLI that cannot be executed is reported as a lookup error.
    """

    def fake_run(cmd, **kwargs):
        raise error

    monkeypatch.setattr(jira.subprocess, "run", fake_run)
    with pytest.raises(TicketLookupError) as excinfo:
        jira.JiraClient().fetch_ticket_title("PROJ-1")
    assert excinfo.value.message.startswith("jira CLI could not be run: ")
    assert excinfo.value.__cause__ is error


def test_fetch_ticket_title_undecodable_output(monkeypatch, jira_installed):
    """
    Test that output which is not valid UTF-8 is decoded with replacements.
    """
    seen = {}

    def fake_run(cmd, **kwargs):
        seen.update(kwargs)
        return Result(stdout=b"Summary: Caf\xe9 fix\n".decode("utf-8", errors="replace"))

    monkeypatch.setattr(jira.subprocess, "run", fake_run)
    assert jira.JiraClient().fetch_ticket_title("PROJ-1") == "Caf\ufffd fix"
    assert seen["text"] is True
    assert seen["errors"] == "replace"


@pytest.mark.parametrize(
    "stderr, expected",
    [
        ("Error: 404 Not Found", "Ticket PROJ-1 was not found"),
        ("Error: 401 Unauthorized", "Jira authentication failed"),
        ("something else", "Jira integration issue: something else"),
    ],
)
def test_fetch_ticket_title_failures(monkeypatch, jira_installed, stderr, expected):
    """
    Test that CLI failures are classified.
    """
    monkeypatch.setattr(
        jira.subprocess, "run", lambda *a, **k: Result(stderr=stderr, returncode=1)
    )
    with pytest.raises(TicketLookupError) as excinfo:
        jira.JiraClient().fetch_ticket_title("PROJ-1")
    assert excinfo.value.user_message() == expected


def test_fetch_ticket_title_no_summary(monkeypatch, jira_installed):
    """
    Test that output without a summary is an error.
    """
    monkeypatch.setattr(jira.subprocess, "run", lambda *a, **k: Result(stdout="nothing here"))
    with pytest.raises(TicketLookupError) as excinfo:
        jira.JiraClient().fetch_ticket_title("PROJ-1")
    assert excinfo.value.message == "no summary found in jira output"


def test_from_config_and_path_lookup(monkeypatch):
    """
    Test that the client uses the configured command and the given PATH.
    """
    seen = {}

    def fake_which(cmd, path=None):
        seen["args"] = (cmd, path)
        return None

    monkeypatch.setattr(jira.shutil, "which", fake_which)
    config = EffectiveConfig(jira_command="jira-cli", jira_timeout_seconds=4)
    client = jira.JiraClient.from_config(config, env={"PATH": "/opt/bin"})
    assert client.timeout == 4
    client.is_available()
    assert seen["args"] == ("jira-cli", "/opt/bin")
