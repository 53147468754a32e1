"""
First wizard step: choose the branch type.
"""

from dataclasses import dataclass
from typing import Optional

from .events import KeyPress
from .keys import KeyMap, format_help
from .layout import scroll_offset, truncate

__all__ = [
    "BRANCH_TYPE_DESCRIPTIONS",
    "BranchTypeItem",
    "TypeSelected",
    "TypeSelector",
    "items_from_config",
]

BRANCH_TYPE_DESCRIPTIONS: dict[str, str] = {
    "feature": "New features and enhancements",
    "bugfix": "Bug fixes for issues found during development",
    "hotfix": "Critical bug fixes for production",
    "refactor": "Code improvements without changing functionality",
    "support": "Supporting changes like documentation or tooling",
}
CUSTOM_TYPE_DESCRIPTION: str = "Custom branch type"

# Each item takes a label line, a description line and a blank line.
_ROWS_PER_ITEM = 3


@dataclass(frozen=True)
class BranchTypeItem:
    key: str
    display_label: str
    description: str
    is_default: bool = False


@dataclass(frozen=True)
class TypeSelected:
    key: str


def items_from_config(branch_types: dict[str, str], default_key: str) -> list[BranchTypeItem]:
    """
    Build the selectable items from the configured branch types.

    Args:
        branch_types: Branch type key to display label, in display order.
        default_key: The key marked as default.

    Returns:
        list[BranchTypeItem]: One item per configured type.
    """
    return [
        BranchTypeItem(
            key=key,
            display_label=label,
            description=BRANCH_TYPE_DESCRIPTIONS.get(key, CUSTOM_TYPE_DESCRIPTION),
            is_default=key == default_key,
        )
        for key, label in branch_types.items()
    ]


class TypeSelector:
    """A single-choice list of branch types, starting on the default one."""

    def __init__(self, items: list[BranchTypeItem], keymap: Optional[KeyMap] = None):
        self.items = items
        self.keymap = keymap or KeyMap()
        self.width = 80
        self.height = 24
        self.offset = 0
        self.index = self._default_index()
        self._follow()

    def _default_index(self) -> int:
        for index, item in enumerate(self.items):
            if item.is_default:
                return index
        return 0

    @property
    def highlighted(self) -> Optional[BranchTypeItem]:
        if not self.items:
            return None
        return self.items[self.index]

    def label_for(self, key: str) -> str:
        for item in self.items:
            if item.key == key:
                return item.display_label
        return key

    def reset(self) -> None:
        self.index = self._default_index()
        self.offset = 0
        self._follow()

    def resize(self, width: int, height: int) -> None:
        self.width = width
        self.height = height
        self._follow()

    def _visible_items(self) -> int:
        return max((self.height - 2) // _ROWS_PER_ITEM, 1)

    def _follow(self) -> None:
        self.offset = scroll_offset(self.offset, self.index, self._visible_items())

    def update(self, event: KeyPress) -> Optional[TypeSelected]:
        """Handle a key; return the selection when Enter commits one."""
        keymap = self.keymap
        if not self.items:
            return None
        if keymap.up.matches(event):
            self.index = max(self.index - 1, 0)
        elif keymap.down.matches(event):
            self.index = min(self.index + 1, len(self.items) - 1)
        elif keymap.home.matches(event):
            self.index = 0
        elif keymap.end.matches(event):
            self.index = len(self.items) - 1
        elif keymap.enter.matches(event):
            return TypeSelected(self.items[self.index].key)
        self._follow()
        return None

    def render(self) -> str:
        lines = ["Select Branch Type", ""]
        visible = self.items[self.offset : self.offset + self._visible_items()]
        for position, item in enumerate(visible, start=self.offset):
            label = item.display_label + (" (default)" if item.is_default else "")
            marker = "> " if position == self.index else "  "
            lines.append(truncate(marker + label, self.width))
            lines.append(truncate("    " + item.description, self.width))
            lines.append("")
        return "\n".join(lines).rstrip("\n")

    def help(self) -> str:
        keymap = self.keymap
        return format_help(
            (keymap.up, "navigate"),
            keymap.enter,
            (keymap.back, "cancel"),
            keymap.quit,
        )
