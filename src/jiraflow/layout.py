"""Small helpers shared by the list screens."""

__all__ = ["scroll_offset", "truncate"]


def scroll_offset(offset: int, index: int, size: int) -> int:
    """
    Return the first visible row so that ``index`` stays inside a window of ``size`` rows.

    Examples:
        >>> scroll_offset(0, 7, 5)
        3
        >>> scroll_offset(3, 1, 5)
        1
    """
    if size <= 0:
        return index
    if index < offset:
        return index
    if index >= offset + size:
        return index - size + 1
    return offset


def truncate(text: str, width: int) -> str:
    """Cut ``text`` to ``width`` columns, marking the cut with an ellipsis."""
    if width <= 0 or len(text) <= width:
        return text
    if width == 1:
        return "…"
    return text[: width - 1] + "…"
