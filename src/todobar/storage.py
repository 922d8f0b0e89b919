"""JSON persistence for the todo list."""

import json
import os
import tempfile
from pathlib import Path
from typing import Any, List, Optional, Union

from loguru import logger

from .models import Todo, todos_path

PathLike = Union[str, Path]


def _parse(data: Any) -> Optional[List[Todo]]:
    """Turn a decoded JSON document into todos, or None if it has the wrong shape."""
    if not isinstance(data, list):
        return None
    todos: List[Todo] = []
    for raw in data:
        if not isinstance(raw, dict):
            return None
        name = raw.get("name")
        progress = raw.get("progress")
        if not isinstance(name, str):
            return None
        # bool is an int subclass; JSON true/false is not a progress value
        if not isinstance(progress, int) or isinstance(progress, bool):
            return None
        todos.append(Todo(name=name, progress=progress))
    return todos


def load_todos(path: Optional[PathLike] = None) -> List[Todo]:
    """Load the todo list.

    Any failure (no data directory, missing or unreadable file, bad JSON,
    unexpected document shape) yields an empty list. Extra fields on an
    entry are ignored and progress values are not range checked.
    """
    try:
        target = Path(path) if path is not None else todos_path()
    except Exception as exc:
        logger.debug("could not resolve data directory: {}", exc)
        return []

    try:
        with open(target, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, ValueError, RecursionError) as exc:
        logger.debug("could not load todos: {}", exc)
        return []

    todos = _parse(data)
    if todos is None:
        logger.debug("ignoring malformed todo file {}", target)
        return []
    return todos


def dump_todos(todos: List[Todo]) -> str:
    """Serialize todos as a pretty-printed JSON array."""
    payload = [{"name": t.name, "progress": t.progress} for t in todos]
    return json.dumps(payload, indent=2, ensure_ascii=False)


def save_todos(todos: List[Todo], path: Optional[PathLike] = None) -> bool:
    """Write the whole list to disk, replacing the previous file.

    The payload goes to a temporary file next to the target which is then
    renamed over it. Failures are reported on stderr through the logger and
    leave the in-memory list alone. Returns True when the file was written.
    """
    try:
        target = Path(path) if path is not None else todos_path()
    except Exception as exc:
        logger.error("failed to resolve data directory: {}", exc)
        return False

    try:
        target.parent.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        logger.error("failed to create data directory {}: {}", target.parent, exc)
        return False

    try:
        text = dump_todos(todos)
        encoded = text.encode("utf-8")
    except (TypeError, ValueError) as exc:
        logger.error("failed to serialize todos: {}", exc)
        return False

    tmp_name = None
    try:
        fd, tmp_name = tempfile.mkstemp(
            prefix=f".{target.name}.", suffix=".tmp", dir=str(target.parent)
        )
        with os.fdopen(fd, "wb") as f:
            f.write(encoded)
        os.replace(tmp_name, target)
        tmp_name = None
    except OSError as exc:
        logger.error("failed to write {}: {}", target, exc)
        return False
    finally:
        if tmp_name is not None:
            try:
                os.unlink(tmp_name)
            except OSError:
                pass
    return True
