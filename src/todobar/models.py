"""Data models, constants and configuration for todobar."""

import os
import sys
from dataclasses import dataclass
from pathlib import Path

import platformdirs

QUALIFIER = "com"
ORGANIZATION = "todo"
APPLICATION = "todo"
TODOS_FILENAME = "todos.json"

DEFAULT_NAME = "New Todo"
TITLE_WIDTH = 30  # shared by the renderer and the hit tester
MARGIN = 1
ADD_LABEL = "[     +     ]"

TICK_PERIOD = 0.25
POLL_INTERVAL = 0.01

DATA_DIR_ENV = "TODOBAR_DATA_DIR"
LOG_LEVEL_ENV = "TODOBAR_LOG_LEVEL"
LOG_FILE_ENV = "TODOBAR_LOG_FILE"
DEFAULT_LOG_LEVEL = "WARNING"


@dataclass
class Todo:
    """A single todo with a name and a progress percentage."""

    name: str = DEFAULT_NAME
    progress: int = 0  # 0..100


def data_dir() -> Path:
    """Return the per-user data directory for todobar.

    TODOBAR_DATA_DIR wins when set. Otherwise the platform directory for
    com.todo.todo: appname "com.todo.todo" on macOS, "todo\\todo\\data" on
    Windows and "todo" elsewhere.
    """
    override = os.environ.get(DATA_DIR_ENV)
    if override:
        return Path(override).expanduser()
    if sys.platform == "darwin":
        return platformdirs.user_data_path(
            f"{QUALIFIER}.{ORGANIZATION}.{APPLICATION}", appauthor=False
        )
    if sys.platform == "win32":
        return platformdirs.user_data_path(APPLICATION, ORGANIZATION, roaming=True) / "data"
    return platformdirs.user_data_path(APPLICATION, appauthor=False)


def todos_path() -> Path:
    """Return the full path of the todo list file."""
    return data_dir() / TODOS_FILENAME
