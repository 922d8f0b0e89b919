"""
State machine tests: normal and editing modes, dragging, persistence calls.

The terminal is 80x24 throughout, so todo i sits on row 1 + i with its title
in columns 1..30 and its bar in columns 31..78; the add button follows the
last todo.

Usage:
    python -m pytest tests/test_app.py -v
"""
import json
import os
import random
import sys
import tempfile
import unittest
from pathlib import Path

sys.path.insert(0, os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), "src"))

from todobar.app import TodoApp, seed_todos
from todobar.events import BACKSPACE, ENTER, ESC, TAB, UP, Input, Key, Mouse, Tick
from todobar.layout import compute_layout
from todobar.models import Todo
from todobar.storage import load_todos, save_todos

WIDTH, HEIGHT = 80, 24
TITLE_COL = 5
BAR_LEFT = 32  # first interior column of every bar


class RecordingSave:
    """Stands in for save_todos and keeps a snapshot of every call."""

    def __init__(self):
        self.snapshots = []

    def __call__(self, todos):
        self.snapshots.append([(t.name, t.progress) for t in todos])

    @property
    def count(self):
        return len(self.snapshots)

    @property
    def last(self):
        return self.snapshots[-1]


class AppTestCase(unittest.TestCase):

    def make_app(self, *todos):
        self.saves = RecordingSave()
        self.app = TodoApp(list(todos) or seed_todos([]), save=self.saves)
        return self.app

    def send(self, event):
        rects = compute_layout(WIDTH, HEIGHT, len(self.app.todos))
        return self.app.handle(event, rects)

    def mouse(self, kind, column, row, button="left"):
        return self.send(Input(Mouse(kind, column, row, button)))

    def click(self, column, row):
        self.mouse("down", column, row)
        return self.mouse("up", column, row)

    def key(self, code):
        return self.send(Input(Key(code)))

    def type(self, text):
        for ch in text:
            self.key(ch)

    def add_row(self):
        return 1 + len(self.app.todos)

    def assert_invariants(self):
        st = self.app.state
        for t in self.app.todos:
            self.assertTrue(0 <= t.progress <= 100)
        self.assertFalse(st.dragging and st.editing is not None)
        self.assertEqual(st.dragging, st.drag_index is not None)
        if st.editing is None:
            self.assertEqual(st.edit_buffer, "")


class TestScenarios(AppTestCase):

    def test_fresh_start_add_edit_quit(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "todos.json"
            app = TodoApp(seed_todos(load_todos(path)), save=lambda t: save_todos(t, path))
            self.app = app
            self.assertEqual(app.todos, [Todo("New Todo", 0)])

            self.click(TITLE_COL, self.add_row())
            self.assertEqual(app.todos, [Todo("New Todo", 0), Todo("New Todo", 0)])

            self.click(TITLE_COL, 2)
            self.assertEqual(app.state.editing, 1)
            self.type("Buy milk")
            self.key(ENTER)
            self.assertTrue(self.key("j"))
            self.assertFalse(self.key("q"))
            app.shutdown()

            self.assertEqual(
                json.loads(path.read_text(encoding="utf-8")),
                [{"name": "New Todo", "progress": 0}, {"name": "Buy milk", "progress": 0}],
            )

    def test_drag_across_bar(self):
        self.make_app(Todo("A", 0))
        # bar region is columns 31..78: 48 wide, interior 43 at 0%
        self.mouse("down", BAR_LEFT + 20, 1)
        self.assertEqual(self.app.todos[0].progress, 20 * 100 // 43)
        self.assertTrue(self.app.state.dragging)
        self.assertEqual(self.app.state.drag_index, 0)

        self.mouse("drag", 78, 1)
        self.assertEqual(self.app.todos[0].progress, 100)
        self.mouse("drag", BAR_LEFT, 1)
        self.assertEqual(self.app.todos[0].progress, 0)
        self.assertEqual(self.saves.count, 3)

        self.mouse("up", BAR_LEFT, 1)
        self.assertFalse(self.app.state.dragging)
        self.assertIsNone(self.app.state.drag_index)
        self.mouse("drag", 78, 1)
        self.assertEqual(self.app.todos[0].progress, 0)

    def test_esc_commits(self):
        self.make_app(Todo("A", 0))
        self.click(TITLE_COL, 1)
        self.assertEqual(self.app.state.edit_buffer, "A")
        self.key(BACKSPACE)
        self.type("BC")
        self.key(ESC)
        self.assertEqual(self.app.todos[0].name, "BC")
        self.assertIsNone(self.app.state.editing)
        self.assertEqual(self.saves.last, [("BC", 0)])

    def test_default_name_starts_with_empty_buffer(self):
        self.make_app(Todo("X", 0))
        self.click(TITLE_COL, self.add_row())
        self.click(TITLE_COL, 2)
        self.assertEqual(self.app.state.editing, 1)
        self.assertEqual(self.app.state.edit_buffer, "")

        self.mouse("down", TITLE_COL, 1)
        self.assertEqual(self.app.state.editing, 0)
        self.assertEqual(self.app.state.edit_buffer, "X")
        self.assertEqual(self.app.todos[1].name, "")

    def test_opening_click_release_is_swallowed(self):
        self.make_app(Todo("A", 0))
        self.mouse("down", TITLE_COL, 1)
        self.assertEqual(self.app.state.editing, 0)
        self.assertTrue(self.app.state.just_started_editing)
        self.mouse("up", TITLE_COL, 1)
        self.assertEqual(self.app.state.editing, 0)
        self.assertFalse(self.app.state.just_started_editing)
        self.assertEqual(self.saves.count, 0)

    def test_q_while_editing_commits_and_quits(self):
        self.make_app(Todo("A", 0))
        self.click(TITLE_COL, 1)
        self.key(BACKSPACE)
        self.type("Hello")
        self.assertFalse(self.key("q"))
        self.assertEqual(self.app.todos[0].name, "Hello")
        self.assertIsNone(self.app.state.editing)
        self.assertEqual(self.saves.last, [("Hello", 0)])


class TestNormalMode(AppTestCase):

    def test_q_quits_other_keys_do_nothing(self):
        self.make_app()
        for code in ("a", ENTER, ESC, UP, " "):
            self.assertTrue(self.key(code))
        self.assertFalse(self.key("q"))
        self.assertEqual(self.saves.count, 0)

    def test_shutdown_saves(self):
        self.make_app(Todo("A", 3))
        self.app.shutdown()
        self.assertEqual(self.saves.snapshots, [[("A", 3)]])

    def test_add_appends_default(self):
        self.make_app(Todo("A", 40))
        self.click(TITLE_COL, self.add_row())
        self.assertEqual(self.app.todos[-1], Todo("New Todo", 0))
        self.assertEqual(len(self.app.todos), 2)
        self.assertEqual(self.saves.last, [("A", 40), ("New Todo", 0)])

    def test_click_anywhere_on_add_row(self):
        self.make_app()
        self.click(70, self.add_row())
        self.assertEqual(len(self.app.todos), 2)

    def test_miss_is_noop(self):
        self.make_app()
        self.click(0, 0)
        self.click(10, 20)
        self.assertEqual(self.app.todos, [Todo("New Todo", 0)])
        self.assertEqual(self.saves.count, 0)

    def test_other_buttons_ignored(self):
        self.make_app(Todo("A", 0))
        self.mouse("down", TITLE_COL, 1, button="right")
        self.mouse("down", BAR_LEFT + 10, 1, button="middle")
        self.send(Input(Mouse("scroll_up", BAR_LEFT, 1)))
        self.assertIsNone(self.app.state.editing)
        self.assertFalse(self.app.state.dragging)
        self.assertEqual(self.app.todos[0].progress, 0)

    def test_tick_is_noop(self):
        self.make_app(Todo("A", 0))
        self.assertTrue(self.send(Tick()))
        self.assertEqual(self.saves.count, 0)

    def test_drag_without_press_is_ignored(self):
        self.make_app(Todo("A", 0))
        self.mouse("drag", 60, 1)
        self.assertEqual(self.app.todos[0].progress, 0)

    def test_drag_keeps_following_row_when_pointer_leaves_it(self):
        self.make_app(Todo("A", 0), Todo("B", 0))
        self.mouse("down", BAR_LEFT, 1)
        self.mouse("drag", 78, 2)
        self.assertEqual(self.app.todos[0].progress, 100)
        self.assertEqual(self.app.todos[1].progress, 0)

    def test_drag_into_title_leaves_progress(self):
        self.make_app(Todo("A", 0))
        self.mouse("down", 60, 1)
        value = self.app.todos[0].progress
        self.mouse("drag", TITLE_COL, 1)
        self.assertEqual(self.app.todos[0].progress, value)

    def test_unchanged_drag_sample_not_saved_again(self):
        self.make_app(Todo("A", 0))
        self.mouse("down", 78, 1)
        self.mouse("drag", 78, 1)
        self.mouse("drag", 77, 1)
        self.assertEqual(self.saves.count, 1)


class TestEditingMode(AppTestCase):

    def setUp(self):
        self.make_app(Todo("Old", 10), Todo("Other", 20))
        self.click(TITLE_COL, 1)

    def test_backspace(self):
        self.key(BACKSPACE)
        self.assertEqual(self.app.state.edit_buffer, "Ol")
        for _ in range(5):
            self.key(BACKSPACE)
        self.assertEqual(self.app.state.edit_buffer, "")

    def test_keys_are_not_commands(self):
        self.type(" a+")
        self.assertEqual(self.app.state.edit_buffer, "Old a+")
        self.assertEqual(self.app.todos[0].name, "Old")

    def test_other_named_key_commits_and_continues(self):
        self.type("!")
        self.assertTrue(self.key(TAB))
        self.assertEqual(self.app.todos[0].name, "Old!")
        self.assertIsNone(self.app.state.editing)

    def test_moved_keeps_editing(self):
        self.send(Input(Mouse("moved", 60, 10)))
        self.assertEqual(self.app.state.editing, 0)

    def test_click_on_bar_commits_then_drags(self):
        self.type("!")
        self.mouse("down", 78, 2)
        self.assertEqual(self.app.todos[0].name, "Old!")
        self.assertIsNone(self.app.state.editing)
        self.assertTrue(self.app.state.dragging)
        self.assertEqual(self.app.state.drag_index, 1)
        self.assertEqual(self.app.todos[1].progress, 100)

    def test_click_on_add_commits_then_adds(self):
        self.mouse("down", TITLE_COL, self.add_row())
        self.assertEqual(len(self.app.todos), 3)
        self.assertEqual(self.app.todos[0].name, "Old")
        self.assertEqual(self.saves.snapshots[-2], [("Old", 10), ("Other", 20)])

    def test_click_on_empty_space_commits(self):
        self.mouse("down", 5, 20)
        self.assertIsNone(self.app.state.editing)

    def test_tick_keeps_editing(self):
        self.send(Tick())
        self.assertEqual(self.app.state.editing, 0)


class TestInvariants(AppTestCase):

    def random_event(self, rng):
        roll = rng.random()
        if roll < 0.4:
            kind = rng.choice(["down", "up", "drag", "moved", "scroll_up"])
            button = rng.choice(["left", "left", "left", "right"])
            column = rng.randrange(0, WIDTH)
            row = rng.randrange(0, min(HEIGHT, len(self.app.todos) + 3))
            return Input(Mouse(kind, column, row, button))
        if roll < 0.9:
            return Input(Key(rng.choice(["a", "b", " ", "q", ENTER, ESC, BACKSPACE, TAB, UP])))
        return Tick()

    def test_random_sessions(self):
        rng = random.Random(1234)
        for _ in range(30):
            self.make_app()
            for _ in range(200):
                before = len(self.app.todos)
                self.send(self.random_event(rng))
                self.assert_invariants()
                self.assertIn(len(self.app.todos), (before, before + 1))
                if len(self.app.todos) == before + 1:
                    self.assertEqual(self.app.todos[-1], Todo("New Todo", 0))


if __name__ == "__main__":
    unittest.main()
