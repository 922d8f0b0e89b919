"""Progress bar rendering and its mouse inverse (pure functions, no I/O)."""

from typing import Optional

from .layout import Rect


def clamp_progress(value: int) -> int:
    """Clamp a progress value into 0..100."""
    return max(0, min(100, value))


def bar_overhead(percent: int) -> int:
    """Columns taken by the two brackets and the " N%" suffix."""
    return 2 + len(f" {percent}%")


def render_bar(percent: int, width: int) -> str:
    """Render an ASCII progress bar exactly `width` columns wide.

    When the width cannot hold the brackets and the suffix only the suffix
    is returned, which may be shorter than `width`.
    """
    suffix = f" {percent}%"
    overhead = 2 + len(suffix)
    if width <= overhead:
        return suffix
    bar_width = width - overhead
    filled = max(0, min(bar_width, percent * bar_width // 100))
    empty = bar_width - filled
    return "[" + "#" * filled + "-" * empty + "]" + suffix


def progress_from_column(bar: Rect, column: int, percent: int) -> Optional[int]:
    """Map a mouse column over a bar region back to a percentage.

    `percent` is the value currently drawn, which fixes the suffix width and
    therefore the interior span [bar.x + 1, bar.x + 1 + bar_width). Columns
    outside the bar region give None. Inside it the offset is clamped to the
    interior, so the closing bracket and suffix read as 100 and the opening
    bracket as 0.
    """
    bar_width = bar.width - bar_overhead(percent)
    if bar_width <= 0:
        return None
    if not bar.x <= column < bar.x + bar.width:
        return None
    offset = max(0, min(bar_width, column - (bar.x + 1)))
    return clamp_progress(offset * 100 // bar_width)
