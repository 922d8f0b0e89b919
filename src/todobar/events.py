"""Input and timer events passed from the input pump to the main loop."""

from dataclasses import dataclass
from typing import Literal, Optional, Union

MouseKind = Literal["down", "up", "drag", "moved", "scroll_up", "scroll_down"]
MouseButton = Literal["left", "right", "middle"]

# Named keys; printable characters are carried as the character itself.
ENTER = "Enter"
BACKSPACE = "Backspace"
ESC = "Esc"
TAB = "Tab"
DELETE = "Delete"
UP = "Up"
DOWN = "Down"
LEFT = "Left"
RIGHT = "Right"
UNKNOWN = "Unknown"


@dataclass(frozen=True)
class Key:
    code: str

    @property
    def char(self) -> Optional[str]:
        """The typed character, or None for named keys."""
        if len(self.code) == 1 and self.code.isprintable():
            return self.code
        return None


@dataclass(frozen=True)
class Mouse:
    kind: MouseKind
    column: int
    row: int
    button: Optional[MouseButton] = None


TerminalEvent = Union[Key, Mouse]


@dataclass(frozen=True)
class Input:
    event: TerminalEvent


@dataclass(frozen=True)
class Tick:
    pass


Event = Union[Input, Tick]
