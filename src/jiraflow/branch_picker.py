"""
Second wizard step: choose the base branch, with fuzzy search.

The picker has two modes. While browsing, the arrow keys and ``j``/``k`` move the
highlight and ``/`` starts a search. While searching, every printable key edits the
query and the list is re-matched; Enter or Esc leave search mode and keep the query.
"""

from dataclasses import dataclass
from typing import Optional

from loguru import logger

from .events import KeyPress
from .fuzzy import BranchCandidate, SearchState, match
from .keys import KeyMap, format_help
from .layout import scroll_offset, truncate
from .text_input import TextField

__all__ = ["BranchSelected", "BranchPicker"]

# Title, search line and summary line above the list.
_CHROME_ROWS = 4


@dataclass(frozen=True)
class BranchSelected:
    name: str


class BranchPicker:
    """
    Searchable single choice over the local branches.

    Args:
        candidates: Local branches in display order.
        keymap: Key bindings.
        warning: Shown above the list, e.g. when listing the branches failed.
    """

    def __init__(
        self,
        candidates: list[BranchCandidate],
        keymap: Optional[KeyMap] = None,
        warning: str = "",
    ):
        self.candidates = candidates
        self.names = [candidate.name for candidate in candidates]
        self.current = next(
            (candidate.name for candidate in candidates if candidate.is_current), None
        )
        self.keymap = keymap or KeyMap()
        self.warning = warning
        self.search = TextField(placeholder="Type to search branches...")
        self.searching = False
        self.width = 80
        self.height = 24
        self.state = match(self.candidates, "")
        self.index = 0
        self.offset = 0
        self._highlight_current()

    @property
    def query(self) -> str:
        return self.search.value

    @property
    def matches(self) -> list[str]:
        return self.state.matched_names

    @property
    def highlighted(self) -> Optional[str]:
        if not self.matches:
            return None
        return self.matches[self.index]

    @property
    def is_capturing_text(self) -> bool:
        return self.searching

    def _highlight_current(self) -> None:
        if self.current in self.matches:
            self.index = self.matches.index(self.current)
        self._follow()

    def _visible_rows(self) -> int:
        return max(self.height - _CHROME_ROWS, 1)

    def _follow(self) -> None:
        self.offset = scroll_offset(self.offset, self.index, self._visible_rows())

    def _move(self, index: int) -> None:
        if not self.matches:
            return
        self.index = min(max(index, 0), len(self.matches) - 1)
        self._follow()

    def _refilter(self) -> None:
        state: SearchState = match(self.candidates, self.query)
        if state.matched_candidates != self.state.matched_candidates:
            self.index = 0
            self.offset = 0
        self.state = state
        logger.debug(f"Branch search '{self.query}': {len(self.matches)} matches")

    def _select(self) -> Optional[BranchSelected]:
        if self.highlighted is None:
            return None
        return BranchSelected(self.highlighted)

    def reset(self) -> None:
        self.search.clear()
        self.searching = False
        self.state = match(self.candidates, "")
        self.index = 0
        self.offset = 0
        self._highlight_current()

    def resize(self, width: int, height: int) -> None:
        self.width = width
        self.height = height
        self._follow()

    def update(self, event: KeyPress) -> Optional[BranchSelected]:
        """Handle a key; return the selection when Enter commits one."""
        if self.searching:
            return self._update_searching(event)
        return self._update_browsing(event)

    def _update_browsing(self, event: KeyPress) -> Optional[BranchSelected]:
        keymap = self.keymap
        if keymap.up.matches(event):
            self._move(self.index - 1)
        elif keymap.down.matches(event):
            self._move(self.index + 1)
        elif keymap.home.matches(event):
            self._move(0)
        elif keymap.end.matches(event):
            self._move(len(self.matches) - 1)
        elif keymap.search.matches(event):
            self.searching = True
        elif keymap.clear.matches(event) and self.query:
            self.search.clear()
            self._refilter()
        elif keymap.enter.matches(event):
            return self._select()
        return None

    def _update_searching(self, event: KeyPress) -> Optional[BranchSelected]:
        keymap = self.keymap
        if keymap.enter.matches(event):
            self.searching = False
            return self._select()
        if keymap.back.matches(event):
            self.searching = False
            return None
        if not event.is_printable and event.key in ("up", "down"):
            self._move(self.index + (1 if event.key == "down" else -1))
            return None
        previous = self.query
        if self.search.handle_key(event, keymap) and self.query != previous:
            self._refilter()
        return None

    def render(self) -> str:
        lines = ["Select Base Branch"]
        if self.searching or self.query:
            lines.append("Search: " + self.search.render(focused=self.searching))
        else:
            lines.append("Press / to search")
        lines.append(self.state.summary())
        if self.warning:
            lines.append(f"⚠ {self.warning}")

        if not self.matches:
            lines.append(self.state.empty_message())
            return "\n".join(lines)

        visible = self.matches[self.offset : self.offset + self._visible_rows()]
        for position, name in enumerate(visible, start=self.offset):
            marker = "> " if position == self.index else "  "
            label = f"* {name} (current)" if name == self.current else f"  {name}"
            lines.append(truncate(marker + label, self.width))
        return "\n".join(lines)

    def help(self) -> str:
        keymap = self.keymap
        if self.searching:
            return format_help(
                (keymap.enter, "select"),
                (keymap.back, "stop searching"),
                keymap.clear,
            )
        return format_help(
            (keymap.up, "navigate"),
            keymap.search,
            keymap.enter,
            keymap.back,
            keymap.quit,
        )
