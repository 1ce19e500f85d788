"""Classify a target path and open it for safe writing."""

from __future__ import annotations

import codecs
import logging
import os
import stat
import tempfile
from dataclasses import dataclass
from typing import Callable, Optional

from .errors import CreateError, OverwriteRejected, StatError
from .handles import DeviceFile, Handle, ManagedOverwrite, NewFile
from .status import Status, StatusRegistry, StrPath

logger = logging.getLogger(__name__)

TEMP_INFIX = ".tmp-"


@dataclass(frozen=True)
class TargetInfo:
    """Read-only view of an existing target, passed to the confirm callback."""

    name: str
    mode: int
    status: Status

    @property
    def read_only(self) -> bool:
        return self.mode & stat.S_IWUSR == 0


ConfirmFunc = Callable[[TargetInfo], bool]


def _open_stream(fd: int, encoding: Optional[str]):
    if encoding is None:
        return os.fdopen(fd, "wb")
    return os.fdopen(fd, "w", encoding=encoding)


def open_target(
    path: StrPath,
    confirm: ConfirmFunc,
    registry: StatusRegistry,
    *,
    encoding: Optional[str] = None,
) -> Handle:
    """Open *path* for writing without risking its current content.

    - Missing path: created directly, recorded as ``CREATE``.
    - Character/block device: opened directly.
    - Anything else: *confirm* decides; on approval the content goes to a
      temporary file next to the target until the handle is closed.

    Raises :class:`StatError`, :class:`CreateError` or
    :class:`OverwriteRejected`. Failure to create the temporary file
    propagates as the underlying ``OSError``.
    An unknown *encoding* raises ``LookupError`` before anything on disk
    changes.
    """
    if encoding is not None:
        codecs.lookup(encoding)
    name = os.fspath(path)
    try:
        st = os.stat(name)
    except FileNotFoundError:
        try:
            fd = os.open(name, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o666)
        except OSError as e:
            raise CreateError(name, e) from e
        registry.record(name, Status.CREATE)
        logger.debug("Created new file %s", name)
        return NewFile(name, _open_stream(fd, encoding))
    except OSError as e:
        raise StatError(name, e) from e

    if stat.S_ISCHR(st.st_mode) or stat.S_ISBLK(st.st_mode):
        try:
            fd = os.open(name, os.O_WRONLY)
        except OSError as e:
            raise CreateError(name, e) from e
        logger.debug("Opened device %s directly", name)
        return DeviceFile(name, _open_stream(fd, encoding))

    perm = stat.S_IMODE(st.st_mode)
    info = TargetInfo(name=name, mode=perm, status=registry.lookup(name))
    if not confirm(info):
        logger.debug("Overwrite of %s rejected", name)
        raise OverwriteRejected(name)

    directory, base = os.path.split(name)
    fd, tmp = tempfile.mkstemp(prefix=base + TEMP_INFIX, dir=directory or ".")
    try:
        stream = _open_stream(fd, encoding)
    except BaseException:
        # fdopen closes fd when it fails
        os.unlink(tmp)
        raise
    logger.debug("Writing %s through %s", name, tmp)
    return ManagedOverwrite(
        name,
        stream,
        tmp=tmp,
        perm=perm,
        registry=registry,
    )
