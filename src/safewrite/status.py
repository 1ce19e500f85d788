"""Per-run record of which targets safewrite has created or overwritten."""

from __future__ import annotations

import os
from enum import Enum
from typing import Dict, Iterator, Tuple, Union

StrPath = Union[str, "os.PathLike[str]"]


class Status(str, Enum):
    """How a target has been handled by safewrite during the current run.

    This is history, not the state of the file on disk.
    """

    NONE = "none"
    CREATE = "create"
    OVERWRITE = "overwrite"


class StatusRegistry:
    """In-memory map from target path to :class:`Status`.

    Keys are the path strings exactly as the caller passed them, so
    ``"./a.txt"`` and ``"a.txt"`` are separate entries.

    Not thread-safe: callers must not open or finalize the same path
    from several threads at once.
    """

    def __init__(self) -> None:
        self._entries: Dict[str, Status] = {}

    def lookup(self, path: StrPath) -> Status:
        return self._entries.get(os.fspath(path), Status.NONE)

    def record(self, path: StrPath, status: Status) -> Status:
        """Move *path* forward to *status* and return the status now held.

        A path that already left ``NONE`` keeps its first recorded value.
        """
        if status is Status.NONE:
            raise ValueError("cannot record Status.NONE")
        key = os.fspath(path)
        current = self._entries.get(key, Status.NONE)
        if current is Status.NONE:
            self._entries[key] = status
            return status
        return current

    def clear(self) -> None:
        self._entries.clear()

    def items(self) -> Iterator[Tuple[str, Status]]:
        return iter(list(self._entries.items()))

    def __contains__(self, path: object) -> bool:
        if not isinstance(path, (str, os.PathLike)):
            return False
        return os.fspath(path) in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return f"StatusRegistry({self._entries!r})"
