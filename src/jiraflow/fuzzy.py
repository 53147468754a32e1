"""
Fuzzy matching over branch names.

Exact (substring) matches are ranked before subsequence-only matches; inside each
group the original candidate order is kept.
"""

from dataclasses import dataclass, field
from typing import Iterable, Union

__all__ = [
    "BranchCandidate",
    "SearchState",
    "is_subsequence",
    "match",
]


@dataclass(frozen=True)
class BranchCandidate:
    """A local branch offered as a base branch."""

    name: str
    is_current: bool = False


@dataclass(frozen=True)
class SearchState:
    """
    Result of matching a query against the branch names.

    Attributes:
        query: The query the matches were computed for.
        matched_candidates: Matching branches, exact matches first.
        has_results: Whether at least one name matched.
    """

    query: str = ""
    matched_candidates: list[BranchCandidate] = field(default_factory=list)
    has_results: bool = False

    @property
    def matched_names(self) -> list[str]:
        return [candidate.name for candidate in self.matched_candidates]

    def summary(self) -> str:
        """Return a one-line result count, empty when no query is active."""
        if not self.query:
            return ""
        count = len(self.matched_candidates)
        if count == 0:
            return f"No branches found matching '{self.query}'"
        if count == 1:
            return "1 branch found"
        return f"{count} branches found"

    def empty_message(self) -> str:
        """Return the text shown in place of an empty list."""
        if self.query:
            return f"No branches found matching '{self.query}'"
        return "No branches available"


def is_subsequence(candidate: str, query: str) -> bool:
    """
    Return True if every character of ``query`` appears in ``candidate`` in order.

    Case sensitive; callers lower-case both sides first.

    Examples:
        >>> is_subsequence("feature/user-auth", "ftr")
        True
        >>> is_subsequence("feature/user-auth", "rft")
        False
    """
    position = 0
    for char in candidate:
        if position == len(query):
            break
        if char == query[position]:
            position += 1
    return position == len(query)


def match(
    candidate_names: Iterable[Union[str, BranchCandidate]], query: str
) -> SearchState:
    """
    Match branch names against a query.

    Args:
        candidate_names: Branch names or candidates in display order; plain
            names become candidates that are not current.
        query: The search text; empty returns every name.

    Returns:
        SearchState: The matches, exact substring matches before subsequence
        matches, each group in original order.
    """
    candidates = [
        item if isinstance(item, BranchCandidate) else BranchCandidate(item)
        for item in candidate_names
    ]
    if not query:
        return SearchState(query=query, matched_candidates=candidates, has_results=True)

    needle = query.lower()
    exact: list[BranchCandidate] = []
    fuzzy: list[BranchCandidate] = []
    for candidate in candidates:
        haystack = candidate.name.lower()
        if needle in haystack:
            exact.append(candidate)
        elif is_subsequence(haystack, needle):
            fuzzy.append(candidate)
    matches = exact + fuzzy
    return SearchState(
        query=query, matched_candidates=matches, has_results=bool(matches)
    )
