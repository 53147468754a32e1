"""
Shared fixtures for the jiraflow test suite.

Run with:
    pytest tests/
"""

import pytest

from jiraflow import config
from jiraflow.config import EffectiveConfig
from jiraflow.errors import RepositoryError
from jiraflow.events import KeyPress
from jiraflow.fuzzy import BranchCandidate


class FakeGitRepository:
    """
    In-memory stand-in for GitRepository.

    Records created branches and can be told to fail creation or listing.
    """

    def __init__(self, branches=None, current="main", create_error=None, list_error=None):
        names = branches if branches is not None else ["main", "develop", "feature/existing"]
        self.names = list(names)
        self.current = current
        self.create_error = create_error
        self.list_error = list_error
        self.created = []

    def list_local_branches(self):
        if self.list_error is not None:
            raise self.list_error
        return [BranchCandidate(name, is_current=name == self.current) for name in self.names]

    def current_branch(self):
        if self.current is None:
            raise RepositoryError("symbolic-ref", "HEAD is detached, check out a branch first")
        return self.current

    def branch_exists(self, name):
        return name in self.names

    def is_git_repository(self):
        return True

    def create_and_switch_branch(self, name, base):
        if self.create_error is not None:
            raise self.create_error
        self.created.append((name, base))
        self.names.append(name)
        self.current = name


@pytest.fixture(autouse=True)
def clear_config_cache():
    """Forget configuration discovered by earlier tests."""
    config.discover_config.cache_clear()
    yield
    config.discover_config.cache_clear()


@pytest.fixture
def isolated_config(tmp_path, monkeypatch):
    """Point every configuration location at an empty temporary directory."""
    home = tmp_path / "home"
    xdg = tmp_path / "xdg"
    work = tmp_path / "work"
    for directory in (home, xdg, work):
        directory.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.setenv("XDG_CONFIG_HOME", str(xdg))
    monkeypatch.delenv("JIRAFLOW_CONFIG", raising=False)
    monkeypatch.chdir(work)
    return tmp_path


@pytest.fixture
def effective_config():
    return EffectiveConfig()


@pytest.fixture
def fake_repo():
    return FakeGitRepository()


_KEY_NAMES = {"-": "minus", "/": "slash", " ": "space", ".": "full_stop", "_": "underscore"}


def char_key(char):
    """Build the KeyPress a terminal reports for a typed character."""
    return KeyPress(_KEY_NAMES.get(char, char), char)


@pytest.fixture
def type_text():
    """
    Return a helper that types ``text`` into ``update`` one key at a time.

    The helper returns the non-None results of every call.
    """

    def _type(update, text):
        results = []
        for char in text:
            result = update(char_key(char))
            if result:
                results.append(result)
        return results

    return _type


@pytest.fixture
def make_repo():
    """Return the in-memory repository class for tests that need custom branches."""
    return FakeGitRepository
