"""Safe overwrite of output files.

Typical use::

    registry = StatusRegistry()
    with open_target("report.txt", prompt.ask, registry) as fh:
        fh.write(b"...")
    restore_permissions(fh)

Existing files are written through a temporary file in the same
directory, backed up to ``<name>~`` on the first save in a run, and
renamed into place on close.
"""

from .errors import (
    BackupError,
    CreateError,
    OverwriteRejected,
    ReplaceError,
    SafeWriteError,
    StatError,
    WorkingFileError,
)
from .file_io import write_bytes, write_text
from .gate import ConfirmFunc, TargetInfo, open_target
from .handles import BACKUP_SUFFIX, DeviceFile, Handle, ManagedOverwrite, NewFile, OpenKind
from .perm import PermissionTracker, restore_permissions
from .status import Status, StatusRegistry

__all__ = [
    "BACKUP_SUFFIX",
    "BackupError",
    "ConfirmFunc",
    "CreateError",
    "DeviceFile",
    "Handle",
    "ManagedOverwrite",
    "NewFile",
    "OpenKind",
    "OverwriteRejected",
    "PermissionTracker",
    "ReplaceError",
    "SafeWriteError",
    "StatError",
    "Status",
    "StatusRegistry",
    "TargetInfo",
    "WorkingFileError",
    "open_target",
    "restore_permissions",
    "write_bytes",
    "write_text",
]
