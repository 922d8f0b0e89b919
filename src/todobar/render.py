"""Frame rendering as a list of draw operations.

Kept free of curses so a frame can be inspected directly; tui.py paints the
operations onto the screen.
"""

from typing import List, Literal, NamedTuple

from .app import InteractionState
from .core import render_bar
from .layout import compute_layout, split_row
from .models import ADD_LABEL, Todo

Style = Literal["title", "editing", "bar", "add"]


class DrawOp(NamedTuple):
    row: int
    column: int
    text: str
    width: int
    style: Style


def _printable(text: str) -> str:
    return "".join(ch if ch.isprintable() else "?" for ch in text)


def _edit_text(buffer: str, width: int) -> str:
    # keep the tail so the cursor glyph stays visible
    text = _printable(buffer) + "_"
    if width > 0 and len(text) > width:
        return text[-width:]
    return text


def render_frame(
    todos: List[Todo], state: InteractionState, width: int, height: int
) -> List[DrawOp]:
    """Lay out and render one frame for the given terminal size."""
    rects = compute_layout(width, height, len(todos))
    ops: List[DrawOp] = []

    for i, todo in enumerate(todos):
        rect = rects[i]
        if rect.height == 0 or rect.width == 0:
            continue
        title, bar = split_row(rect)
        if state.editing == i:
            ops.append(DrawOp(title.y, title.x, _edit_text(state.edit_buffer, title.width),
                              title.width, "editing"))
        else:
            ops.append(DrawOp(title.y, title.x, _printable(todo.name), title.width, "title"))
        ops.append(DrawOp(bar.y, bar.x, render_bar(todo.progress, bar.width), bar.width, "bar"))

    add = rects[len(todos)]
    if add.height and add.width:
        ops.append(DrawOp(add.y, add.x, ADD_LABEL, add.width, "add"))
    return ops
