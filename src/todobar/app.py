"""Interaction state machine: turns input events into todo list mutations.

No terminal I/O happens here. The main loop in tui.py feeds events together
with the layout that was on screen when they arrived.
"""

from dataclasses import dataclass
from typing import Callable, List, Optional

from loguru import logger

from .core import progress_from_column
from .events import BACKSPACE, ENTER, ESC, Event, Input, Key, Mouse
from .layout import Rect, hit_test, split_row
from .models import DEFAULT_NAME, Todo
from .storage import save_todos

SaveFn = Callable[[List[Todo]], object]


@dataclass
class InteractionState:
    """Process-local UI state; never persisted."""

    editing: Optional[int] = None
    edit_buffer: str = ""
    dragging: bool = False
    drag_index: Optional[int] = None
    # Set by the mouse-down that opened the editor, so its mouse-up is dropped.
    just_started_editing: bool = False


def seed_todos(todos: List[Todo]) -> List[Todo]:
    """Return the loaded list, or a single default todo if it is empty."""
    return todos if todos else [Todo(name=DEFAULT_NAME, progress=0)]


class TodoApp:
    """Owns the todo list and the interaction mode."""

    def __init__(self, todos: List[Todo], save: SaveFn = save_todos):
        self.todos = todos
        self.state = InteractionState()
        self._save = save

    # -------------------- persistence --------------------
    def persist(self) -> None:
        self._save(self.todos)

    def shutdown(self) -> None:
        """Final save before the terminal is torn down."""
        self.persist()

    # -------------------- dispatch --------------------
    def handle(self, event: Event, rects: List[Rect]) -> bool:
        """Apply one event. Returns False when the loop should exit."""
        if not isinstance(event, Input):
            return True
        inner = event.event
        if self.state.editing is None:
            if isinstance(inner, Key):
                return self._normal_key(inner)
            self._normal_mouse(inner, rects)
            return True
        if isinstance(inner, Key):
            return self._editing_key(inner)
        self._editing_mouse(inner, rects)
        return True

    # -------------------- normal mode --------------------
    def _normal_key(self, key: Key) -> bool:
        return key.code != "q"

    def _normal_mouse(self, mouse: Mouse, rects: List[Rect]) -> None:
        if mouse.button != "left":
            return
        if mouse.kind == "down":
            self._mouse_down(mouse, rects)
        elif mouse.kind == "drag":
            if self.state.dragging and self.state.editing is None:
                self._drag_to(mouse.column, rects)
        elif mouse.kind == "up":
            self.state.dragging = False
            self.state.drag_index = None

    def _mouse_down(self, mouse: Mouse, rects: List[Rect]) -> None:
        hit = hit_test(mouse.column, mouse.row, rects)
        if hit.kind == "title":
            self.start_editing(hit.index)
        elif hit.kind == "bar":
            self.state.dragging = True
            self.state.drag_index = hit.index
            self._set_progress_from(hit.index, rects, mouse.column, force_save=True)
        elif hit.kind == "add":
            self.add_todo()

    def _drag_to(self, column: int, rects: List[Rect]) -> None:
        i = self.state.drag_index
        if i is None or i >= len(self.todos) or i >= len(rects) - 1:
            return
        self._set_progress_from(i, rects, column)

    def _set_progress_from(
        self, index: int, rects: List[Rect], column: int, force_save: bool = False
    ) -> None:
        todo = self.todos[index]
        _, bar = split_row(rects[index])
        value = progress_from_column(bar, column, todo.progress)
        if value is None:
            return
        changed = value != todo.progress
        todo.progress = value
        if changed or force_save:
            logger.debug("todo {} progress -> {}", index, value)
            self.persist()

    # -------------------- mutations --------------------
    def add_todo(self) -> None:
        self.todos.append(Todo(name=DEFAULT_NAME, progress=0))
        logger.debug("added todo {}", len(self.todos) - 1)
        self.persist()

    def start_editing(self, index: int) -> None:
        name = self.todos[index].name
        self.state.editing = index
        self.state.edit_buffer = "" if name == DEFAULT_NAME else name
        self.state.just_started_editing = True
        self.state.dragging = False
        self.state.drag_index = None

    def commit_edit(self) -> None:
        """Store the edit buffer as the todo's name and leave edit mode."""
        i = self.state.editing
        if i is None:
            return
        self.todos[i].name = self.state.edit_buffer
        self.state.editing = None
        self.state.edit_buffer = ""
        self.state.just_started_editing = False
        logger.debug("renamed todo {}", i)
        self.persist()

    # -------------------- editing mode --------------------
    def _editing_key(self, key: Key) -> bool:
        ch = key.char
        if ch is not None and ch != "q":
            self.state.edit_buffer += ch
            return True
        if key.code == BACKSPACE:
            self.state.edit_buffer = self.state.edit_buffer[:-1]
            return True
        # Esc commits too; there is no cancel.
        self.commit_edit()
        if key.code in (ENTER, ESC):
            return True
        return key.code != "q"

    def _editing_mouse(self, mouse: Mouse, rects: List[Rect]) -> None:
        if self.state.just_started_editing:
            self.state.just_started_editing = False
            return
        if mouse.kind == "moved":
            return
        self.commit_edit()
        self._normal_mouse(mouse, rects)
