"""Screen layout and mouse hit testing (pure functions, no I/O)."""

from typing import List, Literal, NamedTuple, Tuple

from .models import MARGIN, TITLE_WIDTH

HitKind = Literal["none", "title", "bar", "add"]


class Rect(NamedTuple):
    x: int
    y: int
    width: int
    height: int

    def contains(self, column: int, row: int) -> bool:
        return self.x <= column < self.x + self.width and self.y <= row < self.y + self.height

    def center(self) -> Tuple[int, int]:
        return self.x + self.width // 2, self.y + self.height // 2


class Hit(NamedTuple):
    kind: HitKind
    index: int = -1


NO_HIT = Hit("none")


def compute_layout(width: int, height: int, count: int) -> List[Rect]:
    """Return count + 1 one-row rectangles: one per todo, then the add button.

    The terminal area is inset by MARGIN on every side. Rows that fall below
    the inset area get zero height so they are neither drawn nor hit.
    """
    x = MARGIN
    y = MARGIN
    inner_w = max(0, width - 2 * MARGIN)
    inner_h = max(0, height - 2 * MARGIN)

    rects = []
    for i in range(count + 1):
        rows = 1 if i < inner_h else 0
        rects.append(Rect(x, y + i, inner_w, rows))
    return rects


def split_row(rect: Rect) -> Tuple[Rect, Rect]:
    """Split a todo row into its title region and its bar region.

    The title takes TITLE_WIDTH columns; the bar keeps at least one column
    whenever the row has any width at all.
    """
    title_w = min(TITLE_WIDTH, max(0, rect.width - 1))
    title = Rect(rect.x, rect.y, title_w, rect.height)
    bar = Rect(rect.x + title_w, rect.y, rect.width - title_w, rect.height)
    return title, bar


def hit_test(column: int, row: int, rects: List[Rect]) -> Hit:
    """Classify a cell against a layout from compute_layout."""
    if not rects:
        return NO_HIT
    for i, rect in enumerate(rects[:-1]):
        if rect.contains(column, row):
            title, bar = split_row(rect)
            if title.contains(column, row):
                return Hit("title", i)
            if bar.contains(column, row):
                return Hit("bar", i)
            break
    if rects[-1].contains(column, row):
        return Hit("add")
    return NO_HIT
