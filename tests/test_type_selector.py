"""
Test suite for jiraflow type_selector module.

Run with:
    pytest tests/
"""

from jiraflow.config import DEFAULT_BRANCH_TYPES
from jiraflow.events import KeyPress
from jiraflow.type_selector import TypeSelected, TypeSelector, items_from_config


def make_selector(default="feature", branch_types=None):
    return TypeSelector(items_from_config(branch_types or DEFAULT_BRANCH_TYPES, default))


def test_items_from_config():
    """
    Test labels, descriptions and the default flag.
    """
    items = items_from_config({"feature": "Feature", "chore": "Chore"}, "chore")
    assert [item.key for item in items] == ["feature", "chore"]
    assert items[0].description == "New features and enhancements"
    assert items[1].description == "Custom branch type"
    assert items[1].is_default and not items[0].is_default


def test_starts_on_default():
    """
    Test that the default type is highlighted first.
    """
    selector = make_selector(default="refactor")
    assert selector.highlighted.key == "refactor"


def test_navigation_and_selection():
    """
    Test arrow keys, vim keys, home/end and enter.
    """
    selector = make_selector()
    assert selector.update(KeyPress("down")) is None
    assert selector.update(KeyPress("j", "j")) is None
    assert selector.highlighted.key == "refactor"
    selector.update(KeyPress("k", "k"))
    assert selector.highlighted.key == "hotfix"
    selector.update(KeyPress("end"))
    selector.update(KeyPress("down"))
    assert selector.highlighted.key == "support"
    selector.update(KeyPress("home"))
    selector.update(KeyPress("up"))
    assert selector.highlighted.key == "feature"
    assert selector.update(KeyPress("enter")) == TypeSelected("feature")


def test_render():
    """
    Test the marker, the default note and the descriptions.
    """
    lines = make_selector().render().splitlines()
    assert lines[0] == "Select Branch Type"
    assert lines[2] == "> Feature (default)"
    assert lines[3] == "    New features and enhancements"
    assert "  Hotfix" in lines
    assert "    Critical bug fixes for production" in lines


def test_scrolls_when_short():
    """
    Test that only the rows that fit are drawn and the highlight stays visible.
    """
    selector = make_selector()
    selector.resize(80, 8)
    selector.update(KeyPress("end"))
    text = selector.render()
    assert "> Support" in text
    assert "Feature" not in text
    selector.reset()
    assert selector.highlighted.key == "feature"
    assert "> Feature (default)" in selector.render()


def test_label_for():
    """
    Test label lookup with a fallback to the key.
    """
    selector = make_selector()
    assert selector.label_for("hotfix") == "Hotfix"
    assert selector.label_for("unknown") == "unknown"
