"""todobar curses-based terminal user interface."""

import curses
import os
import queue
import sys
import threading
import time
from contextlib import contextmanager
from typing import Callable, Dict, List, Optional, Union

from loguru import logger

from .app import SaveFn, TodoApp, seed_todos
from .events import (
    BACKSPACE,
    DELETE,
    DOWN,
    ENTER,
    ESC,
    LEFT,
    RIGHT,
    TAB,
    UNKNOWN,
    UP,
    Event,
    Input,
    Key,
    Mouse,
    TerminalEvent,
    Tick,
)
from .layout import compute_layout
from .log import configure_logging
from .models import POLL_INTERVAL, TICK_PERIOD, Todo
from .render import DrawOp, render_frame
from .storage import load_todos, save_todos

# xterm button-event tracking: reports motion while a button is held.
ENABLE_TRACKING = "\033[?1002h"
DISABLE_TRACKING = "\033[?1002l"

PUMP_JOIN_TIMEOUT = 1.0

MOUSE_MASK = curses.ALL_MOUSE_EVENTS | curses.REPORT_MOUSE_POSITION

_BUTTONS = [
    (curses.BUTTON1_PRESSED, curses.BUTTON1_RELEASED, curses.BUTTON1_CLICKED, "left"),
    (curses.BUTTON2_PRESSED, curses.BUTTON2_RELEASED, curses.BUTTON2_CLICKED, "middle"),
    (curses.BUTTON3_PRESSED, curses.BUTTON3_RELEASED, curses.BUTTON3_CLICKED, "right"),
]
_SCROLL_UP = curses.BUTTON4_PRESSED
_SCROLL_DOWN = getattr(curses, "BUTTON5_PRESSED", 0)

_NAMED_KEYS: Dict[int, str] = {
    curses.KEY_ENTER: ENTER,
    curses.KEY_BACKSPACE: BACKSPACE,
    curses.KEY_DC: DELETE,
    curses.KEY_UP: UP,
    curses.KEY_DOWN: DOWN,
    curses.KEY_LEFT: LEFT,
    curses.KEY_RIGHT: RIGHT,
}
_CHAR_KEYS: Dict[str, str] = {
    "\n": ENTER,
    "\r": ENTER,
    "\x7f": BACKSPACE,
    "\b": BACKSPACE,
    "\x1b": ESC,
    "\t": TAB,
}


def translate_key(ch: Union[str, int]) -> Optional[Key]:
    """Map a get_wch() result to a Key; None for resize and mouse codes."""
    if isinstance(ch, str):
        if ch in _CHAR_KEYS:
            return Key(_CHAR_KEYS[ch])
        return Key(ch if ch.isprintable() else UNKNOWN)
    if ch in (curses.KEY_MOUSE, curses.KEY_RESIZE):
        return None
    return Key(_NAMED_KEYS.get(ch, UNKNOWN))


class MouseTranslator:
    """Turns curses button states into Mouse events, tracking the held button."""

    def __init__(self):
        self.held: Optional[str] = None

    def translate(self, column: int, row: int, bstate: int) -> List[Mouse]:
        if bstate & curses.REPORT_MOUSE_POSITION:
            if self.held:
                return [Mouse("drag", column, row, self.held)]
            return [Mouse("moved", column, row)]
        for pressed, released, clicked, button in _BUTTONS:
            if bstate & pressed:
                self.held = button
                return [Mouse("down", column, row, button)]
            if bstate & released:
                if self.held == button:
                    self.held = None
                return [Mouse("up", column, row, button)]
            if bstate & clicked:
                # press and release folded together by curses
                self.held = None
                return [Mouse("down", column, row, button), Mouse("up", column, row, button)]
        if bstate & _SCROLL_UP:
            return [Mouse("scroll_up", column, row)]
        if _SCROLL_DOWN and bstate & _SCROLL_DOWN:
            return [Mouse("scroll_down", column, row)]
        return []


class CursesEventSource:
    """Non-blocking reader over a curses window.

    Every curses call happens under `lock`, which the main thread also holds
    while drawing. The lock is released between attempts.
    """

    def __init__(
        self,
        stdscr,
        lock: threading.Lock,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.stdscr = stdscr
        self.lock = lock
        self.mouse = MouseTranslator()
        self._sleep = sleep
        self._clock = clock
        self._pending: List[TerminalEvent] = []

    def poll(self, timeout: float) -> bool:
        """Wait up to `timeout` seconds for at least one event."""
        deadline = self._clock() + timeout
        while True:
            self._pending.extend(self._drain())
            if self._pending:
                return True
            remaining = deadline - self._clock()
            if remaining <= 0:
                return False
            self._sleep(min(POLL_INTERVAL, remaining))

    def read(self) -> List[TerminalEvent]:
        events, self._pending = self._pending, []
        return events

    def _drain(self) -> List[TerminalEvent]:
        out: List[TerminalEvent] = []
        with self.lock:
            while True:
                try:
                    ch = self.stdscr.get_wch()
                except curses.error:
                    break
                if ch == curses.KEY_MOUSE:
                    out.extend(self._read_mouse())
                    continue
                key = translate_key(ch)
                if key is not None:
                    out.append(key)
        return out

    def _read_mouse(self) -> List[Mouse]:
        try:
            _, x, y, _, bstate = curses.getmouse()
        except curses.error:
            return []
        return self.mouse.translate(x, y, bstate)


class InputPump(threading.Thread):
    """Feeds terminal input and periodic ticks into a queue."""

    def __init__(
        self,
        source,
        events: "queue.Queue[Event]",
        tick_period: float = TICK_PERIOD,
        clock: Callable[[], float] = time.monotonic,
    ):
        super().__init__(name="todobar-input", daemon=True)
        self.source = source
        self.events = events
        self.tick_period = tick_period
        self._clock = clock
        self._stopped = threading.Event()

    def stop(self) -> None:
        self._stopped.set()

    def run(self) -> None:
        try:
            self._pump()
        except Exception:
            logger.exception("input thread stopped")

    def _pump(self) -> None:
        last_tick = self._clock()
        while not self._stopped.is_set():
            timeout = max(0.0, self.tick_period - (self._clock() - last_tick))
            if self.source.poll(timeout):
                for event in self.source.read():
                    self.events.put(Input(event))
            if self._clock() - last_tick >= self.tick_period:
                self.events.put(Tick())
                last_tick = self._clock()


class Screen:
    """Paints DrawOps onto the curses screen."""

    def __init__(self, stdscr, lock: threading.Lock):
        self.stdscr = stdscr
        self.lock = lock

        if curses.has_colors():
            try:
                curses.use_default_colors()
            except Exception:
                pass
            curses.init_pair(1, curses.COLOR_YELLOW, -1)
            curses.init_pair(2, curses.COLOR_BLUE, -1)
            curses.init_pair(3, curses.COLOR_GREEN, -1)
            self.styles = {
                "title": curses.A_NORMAL,
                "editing": curses.color_pair(1) | curses.A_BOLD,
                "bar": curses.color_pair(2),
                "add": curses.color_pair(3) | curses.A_BOLD,
            }
        else:
            self.styles = {
                "title": curses.A_NORMAL,
                "editing": curses.A_STANDOUT,
                "bar": curses.A_NORMAL,
                "add": curses.A_BOLD,
            }

    def size(self):
        """Return (width, height) of the terminal."""
        with self.lock:
            height, width = self.stdscr.getmaxyx()
        return width, height

    def draw(self, ops: List[DrawOp]) -> None:
        with self.lock:
            self.stdscr.erase()
            height, width = self.stdscr.getmaxyx()
            for op in ops:
                if op.row >= height or op.column >= width:
                    continue
                n = min(op.width, width - op.column)
                if op.row == height - 1 and op.column + n >= width:
                    n -= 1  # curses refuses to write the bottom-right cell
                if n <= 0:
                    continue
                self.stdscr.addnstr(op.row, op.column, op.text, n, self.styles[op.style])
            self.stdscr.refresh()


def _set_cursor(visibility: int) -> None:
    try:
        curses.curs_set(visibility)
    except curses.error:
        pass  # terminal cannot change cursor visibility


def _write_tty(sequence: str) -> None:
    sys.stdout.write(sequence)
    sys.stdout.flush()


@contextmanager
def terminal_session(stdscr, lock: threading.Lock):
    """Raw mode plus mouse capture for the life of the block.

    curses.wrapper already owns the alternate screen and endwin(). Teardown
    runs under `lock` like every other curses call.
    """
    curses.raw()
    stdscr.keypad(True)
    stdscr.nodelay(True)
    _set_cursor(0)
    curses.mousemask(MOUSE_MASK)
    curses.mouseinterval(0)
    _write_tty(ENABLE_TRACKING)
    try:
        yield stdscr
    finally:
        with lock:
            _write_tty(DISABLE_TRACKING)
            curses.mousemask(0)
            curses.noraw()
            _set_cursor(1)


def run(stdscr, todos: List[Todo], save: SaveFn = save_todos) -> TodoApp:
    """Main event loop: render, wait for one event, apply it."""
    lock = threading.Lock()
    events: "queue.Queue[Event]" = queue.Queue()
    app = TodoApp(todos, save=save)

    with terminal_session(stdscr, lock):
        screen = Screen(stdscr, lock)
        pump = InputPump(CursesEventSource(stdscr, lock), events)
        pump.start()
        try:
            while True:
                width, height = screen.size()
                rects = compute_layout(width, height, len(app.todos))
                screen.draw(render_frame(app.todos, app.state, width, height))
                if not app.handle(events.get(), rects):
                    break
        finally:
            # no curses calls from the pump once teardown starts
            pump.stop()
            pump.join(PUMP_JOIN_TIMEOUT)
            app.shutdown()
    return app


def main() -> None:
    """todobar entry point."""
    configure_logging()
    todos = seed_todos(load_todos())
    logger.debug("loaded {} todos", len(todos))

    os.environ.setdefault("ESCDELAY", "25")
    try:
        curses.wrapper(run, todos)
    except curses.error as exc:
        sys.exit(f"todobar: terminal error: {exc}")


if __name__ == "__main__":
    main()
