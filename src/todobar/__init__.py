"""todobar - progress-tracked todo list for the terminal."""

__version__ = "1.0.0"

from .models import Todo, DEFAULT_NAME, TITLE_WIDTH, todos_path
from .storage import load_todos, save_todos
from .layout import Rect, Hit, compute_layout, split_row, hit_test
from .core import render_bar, progress_from_column, clamp_progress
from .app import TodoApp, InteractionState, seed_todos

__all__ = [
    "Todo",
    "DEFAULT_NAME",
    "TITLE_WIDTH",
    "todos_path",
    "load_todos",
    "save_todos",
    "Rect",
    "Hit",
    "compute_layout",
    "split_row",
    "hit_test",
    "render_bar",
    "progress_from_column",
    "clamp_progress",
    "TodoApp",
    "InteractionState",
    "seed_todos",
]
