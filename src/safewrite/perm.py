"""Deferred restoration of a replaced file's original permission bits.

Temporary files are created with private permissions, so a file replaced
through :class:`~safewrite.handles.ManagedOverwrite` ends up with
different mode bits than the original. Close does not fix that up,
because making the new file read-only straight away could break a second
save of the same file in the same run. Call :func:`restore_permissions`
(or :meth:`PermissionTracker.restore_all`) once writing is done.
"""

from __future__ import annotations

import logging
import os
from typing import Dict, Optional

from .handles import Handle, ManagedOverwrite
from .status import StatusRegistry

logger = logging.getLogger(__name__)


def restore_permissions(handle: Handle) -> None:
    """Apply the mode bits captured at open time to the target.

    Does nothing for new files and devices.
    """
    if not isinstance(handle, ManagedOverwrite):
        return
    os.chmod(handle.name, handle.perm)
    logger.debug("Restored mode %o on %s", handle.perm, handle.name)


class PermissionTracker:
    """Remembers the first handle seen per target for a bulk restore."""

    def __init__(self) -> None:
        self._seen: Dict[str, Handle] = {}

    def track(self, handle: Handle) -> None:
        self._seen.setdefault(handle.name, handle)

    def restore_all(self, *, reset_registry: Optional[StatusRegistry] = None) -> None:
        """Restore every tracked target, then forget them.

        Stops at the first failure and leaves the tracked set untouched.
        When *reset_registry* is given it is cleared after a full restore.
        """
        for handle in self._seen.values():
            restore_permissions(handle)
        self._seen.clear()
        if reset_registry is not None:
            reset_registry.clear()

    def __contains__(self, name: object) -> bool:
        return name in self._seen

    def __len__(self) -> int:
        return len(self._seen)
