"""Exceptions raised by safewrite.

Errors that leave new content behind in a temporary file implement
:class:`WorkingFileError`, so callers can find the file and move it
into place by hand.
"""

from __future__ import annotations


class SafeWriteError(Exception):
    """Base class for every safewrite failure."""


class _WrappedOSError(SafeWriteError, OSError):
    def __init__(self, message: str, cause: BaseException) -> None:
        errno = getattr(cause, "errno", None)
        if errno is not None:
            OSError.__init__(self, errno, message)
        else:
            OSError.__init__(self, message)
        self.cause = cause
        self._message = message

    def __str__(self) -> str:
        return self._message


class StatError(_WrappedOSError):
    """Checking the target failed for a reason other than it not existing."""

    def __init__(self, path: str, cause: BaseException) -> None:
        super().__init__(f"stat {path!r}: {cause}", cause)
        self.path = path
        self.filename = path


class CreateError(_WrappedOSError):
    """A new target (or a device target) could not be opened for writing."""

    def __init__(self, path: str, cause: BaseException) -> None:
        super().__init__(f"create {path!r}: {cause}", cause)
        self.path = path
        self.filename = path


class OverwriteRejected(SafeWriteError):
    """The confirmation callback declined to overwrite an existing file.

    Not an I/O failure: nothing on disk was touched.
    """

    def __init__(self, path: str) -> None:
        super().__init__(f"overwrite rejected: {path!r}")
        self.path = path


class WorkingFileError(SafeWriteError):
    """Base for errors that leave the new content in a temporary file."""

    tmp: str

    @property
    def working_file(self) -> str:
        return self.tmp


class BackupError(_WrappedOSError, WorkingFileError):
    """Renaming the target to its backup path failed.

    The target still holds its original content. The new content is in
    :attr:`working_file`.
    """

    def __init__(self, target: str, backup: str, cause: BaseException, tmp: str) -> None:
        super().__init__(f"failed to backup: {target} -> {backup}: {cause}", cause)
        self.target = target
        self.backup = backup
        self.tmp = tmp
        self.filename = target
        self.filename2 = backup


class ReplaceError(_WrappedOSError, WorkingFileError):
    """Renaming the temporary file onto the target failed.

    If the backup was taken in the same finalize, the target path is now
    missing until :attr:`working_file` is renamed into place.
    """

    def __init__(self, tmp: str, target: str, cause: BaseException) -> None:
        super().__init__(f"failed to replace: {tmp} -> {target}: {cause}", cause)
        self.tmp = tmp
        self.target = target
        self.filename = tmp
        self.filename2 = target
