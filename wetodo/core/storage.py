"""
FILE: wetodo/core/storage.py
PURPOSE: Flat-file persistence, one text file per list uuid
EXPORTS:
  - save_list(todo_list) -> None
  - read_list_text(uuid) -> str | None
  - read_all_list_texts() -> List[Tuple[str, str]]
  - delete_list(uuid) -> None
  - list_exists(uuid) -> bool
  - get_list_dir() -> Path
DEPENDENCIES:
  - pathlib (stdlib)
  - os (stdlib)
  - errno (stdlib)
  - tempfile (stdlib)
  - logging (stdlib)
  - wetodo.core.exceptions (StorageError, ListNotFoundError, MalformedListError)
NOTES:
  - Lists stored at ~/.wetodo/lists/<uuid>.list
  - Auto-creates the directory on first use
  - Deals in text only: parsing lives in wetodo.core.todolist
  - OS errors are wrapped in StorageError with a stable code
  - Writes go to a temp file first, then replace the list file
  - Files are decoded line by line: log lines that aren't UTF-8 are dropped
"""

import errno
import logging
import os
import tempfile
from pathlib import Path
from typing import List, Optional, Tuple

from .constants import LIST_FILE_SUFFIX
from .exceptions import ListNotFoundError, MalformedListError, StorageError


logger = logging.getLogger(__name__)

# Data location (cross-platform)
DATA_DIR = Path.home() / ".wetodo"
LISTS_DIR = DATA_DIR / "lists"


def _storage_error(error: OSError, action: str) -> StorageError:
    """Map an OS error to a StorageError with a stable code."""
    codes = {
        errno.ENOENT: "E_NOT_FOUND",
        errno.EACCES: "E_PERMISSION",
        errno.EPERM: "E_PERMISSION",
        errno.ENOSPC: "E_NO_SPACE",
        getattr(errno, "EDQUOT", errno.ENOSPC): "E_NO_SPACE",
    }
    code = codes.get(error.errno, "E_UNKNOWN")
    return StorageError(code, f"could not {action}: {error.strerror or error}")


def get_list_dir() -> Path:
    """
    Get the directory lists are stored in.

    Creates it (and the data directory) if it doesn't exist.
    """
    try:
        LISTS_DIR.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise _storage_error(e, f"create {LISTS_DIR}")
    return LISTS_DIR


def _list_path(uuid: str) -> Path:
    if not uuid or "/" in uuid or "\\" in uuid or uuid.startswith("."):
        raise StorageError("E_INVALID_NAME", f"not a list id: {uuid!r}")
    return get_list_dir() / f"{uuid}{LIST_FILE_SUFFIX}"


def _decode(uuid: str, data: bytes) -> str:
    """
    Decode a list file one line at a time.

    Log lines that aren't valid UTF-8 are dropped with a warning, like any
    other unreadable log line.

    Raises:
        MalformedListError: If the title or users line isn't valid UTF-8
    """
    lines = []
    for line_number, raw in enumerate(data.split(b"\n"), start=1):
        try:
            lines.append(raw.decode("utf-8"))
        except UnicodeDecodeError as e:
            if line_number <= 2:
                raise MalformedListError(uuid, f"line {line_number} is not valid UTF-8")
            logger.warning("List %s, line %d: skipped: not valid UTF-8 (%s)", uuid, line_number, e.reason)
    return "\n".join(lines)


def save_list(todo_list) -> None:
    """
    Write a list's serialized form to its file.

    Args:
        todo_list: Any object with a uuid and a text form (str())

    Raises:
        StorageError: If the file can't be written
    """
    path = _list_path(todo_list.uuid)
    text = str(todo_list)

    try:
        fd, temp_name = tempfile.mkstemp(dir=path.parent, prefix=".", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8", newline="\n") as f:
                f.write(text)
            os.replace(temp_name, path)
        except BaseException:
            if os.path.exists(temp_name):
                os.unlink(temp_name)
            raise
    except OSError as e:
        raise _storage_error(e, f"save list {todo_list.uuid}")

    logger.debug("Saved list %s to %s", todo_list.uuid, path)


def read_list_text(uuid: str) -> Optional[str]:
    """
    Read the raw text of one list.

    Returns:
        File contents, or None if the list doesn't exist

    Raises:
        MalformedListError: If the title or users line isn't valid UTF-8
    """
    path = _list_path(uuid)
    try:
        data = path.read_bytes()
    except FileNotFoundError:
        return None
    except OSError as e:
        raise _storage_error(e, f"read list {uuid}")
    return _decode(uuid, data)


def read_all_list_texts() -> List[Tuple[str, str]]:
    """
    Read every stored list.

    Files whose title or users line can't be decoded are skipped with a
    warning, so one damaged file never hides the others.

    Returns:
        (uuid, text) pairs, ordered by uuid
    """
    directory = get_list_dir()
    texts = []

    try:
        paths = sorted(directory.glob(f"*{LIST_FILE_SUFFIX}"))
    except OSError as e:
        raise _storage_error(e, f"list {directory}")

    for path in paths:
        if path.name.startswith("."):
            continue
        try:
            data = path.read_bytes()
        except OSError as e:
            raise _storage_error(e, f"read {path.name}")
        try:
            texts.append((path.stem, _decode(path.stem, data)))
        except MalformedListError as e:
            logger.warning("Skipping unreadable list: %s", e)

    return texts


def list_exists(uuid: str) -> bool:
    return _list_path(uuid).exists()


def delete_list(uuid: str) -> None:
    """
    Delete a stored list.

    Raises:
        ListNotFoundError: If no file exists for uuid
        StorageError: If the file can't be removed
    """
    path = _list_path(uuid)
    try:
        path.unlink()
    except FileNotFoundError:
        raise ListNotFoundError(uuid)
    except OSError as e:
        raise _storage_error(e, f"delete list {uuid}")

    logger.debug("Deleted list %s", uuid)
