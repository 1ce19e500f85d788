"""One-shot write helpers built on :func:`safewrite.gate.open_target`."""

from __future__ import annotations

from .gate import ConfirmFunc, open_target
from .handles import Handle
from .status import StatusRegistry, StrPath


def write_bytes(
    path: StrPath,
    data: bytes,
    *,
    confirm: ConfirmFunc,
    registry: StatusRegistry,
) -> Handle:
    """Write *data* to *path* and finalize; returns the closed handle.

    An exception while writing discards the temporary file.
    """
    with open_target(path, confirm, registry) as fh:
        fh.write(data)
    return fh


def write_text(
    path: StrPath,
    text: str,
    *,
    confirm: ConfirmFunc,
    registry: StatusRegistry,
    encoding: str = "utf-8",
) -> Handle:
    with open_target(path, confirm, registry, encoding=encoding) as fh:
        fh.write(text)
    return fh
