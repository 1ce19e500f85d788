"""Writable handles returned by :func:`safewrite.gate.open_target`."""

from __future__ import annotations

import logging
import os
from enum import Enum
from typing import IO, Any, Iterable

from .errors import BackupError, ReplaceError
from .status import Status, StatusRegistry

logger = logging.getLogger(__name__)

BACKUP_SUFFIX = "~"


class OpenKind(str, Enum):
    NEW_FILE = "new_file"
    DEVICE_FILE = "device_file"
    MANAGED_OVERWRITE = "managed_overwrite"


class Handle:
    kind: OpenKind

    def __init__(self, target: str, stream: IO[Any]) -> None:
        self._target = target
        self._stream = stream
        self._finalized = False

    @property
    def name(self) -> str:
        return self._target

    @property
    def closed(self) -> bool:
        return self._finalized

    @property
    def stream(self) -> IO[Any]:
        return self._stream

    def write(self, data: Any) -> int:
        return self._stream.write(data)

    def writelines(self, lines: Iterable[Any]) -> None:
        self._stream.writelines(lines)

    def flush(self) -> None:
        self._stream.flush()

    def seek(self, offset: int, whence: int = os.SEEK_SET) -> int:
        return self._stream.seek(offset, whence)

    def tell(self) -> int:
        return self._stream.tell()

    def fileno(self) -> int:
        return self._stream.fileno()

    def _begin_finalize(self) -> None:
        if self._finalized:
            raise ValueError(f"{self._target!r} is already finalized")
        self._finalized = True

    def close(self) -> None:
        self._begin_finalize()
        self._stream.close()

    def discard(self) -> None:
        """Give up on the write without finalizing it."""
        if self._finalized:
            return
        self._finalized = True
        self._stream.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if exc_type is None:
            self.close()
        else:
            self.discard()

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self._target!r}>"


class NewFile(Handle):
    """The target did not exist and was created in place."""

    kind = OpenKind.NEW_FILE


class DeviceFile(Handle):
    """The target is a character or block device, written directly."""

    kind = OpenKind.DEVICE_FILE


class ManagedOverwrite(Handle):
    """Write session for an existing file.

    Content goes to :attr:`tmp` until :meth:`close` backs up the target
    (once per run) and renames the temporary file over it.
    """

    kind = OpenKind.MANAGED_OVERWRITE

    def __init__(
        self,
        target: str,
        stream: IO[Any],
        *,
        tmp: str,
        perm: int,
        registry: StatusRegistry,
    ) -> None:
        super().__init__(target, stream)
        self.tmp = tmp
        self.perm = perm
        self._registry = registry

    @property
    def backup(self) -> str:
        return self._target + BACKUP_SUFFIX

    def close(self) -> None:
        self._begin_finalize()
        self._stream.close()

        target = self._target
        backup = self.backup
        if self._registry.lookup(target) is Status.NONE:
            try:
                os.replace(target, backup)
            except OSError as e:
                logger.warning("Backup of %s failed; new content left in %s", target, self.tmp)
                raise BackupError(target, backup, e, self.tmp) from e
            self._registry.record(target, Status.OVERWRITE)
            logger.info("Backed up %s -> %s", target, backup)
        else:
            logger.debug("Backup of %s already taken in this run; skipping", target)

        try:
            os.replace(self.tmp, target)
        except OSError as e:
            logger.warning("Replace of %s failed; new content left in %s", target, self.tmp)
            raise ReplaceError(self.tmp, target, e) from e
        logger.info("Replaced %s", target)

    def discard(self) -> None:
        """Close and delete the temporary file, leaving the target alone."""
        if self._finalized:
            return
        self._finalized = True
        try:
            self._stream.close()
        finally:
            try:
                os.unlink(self.tmp)
            except FileNotFoundError:
                pass
        logger.debug("Discarded working file %s", self.tmp)
