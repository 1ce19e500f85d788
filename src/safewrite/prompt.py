"""Ready-made confirmation callbacks for :func:`safewrite.open_target`."""

from __future__ import annotations

import sys

import questionary

from .gate import TargetInfo


class NoTTYError(SystemExit):
    def __init__(self, flag: str) -> None:
        super().__init__(f"No TTY detected. Use {flag} to run non-interactively.")


def _is_tty() -> bool:
    return sys.stdin.isatty()


def always(info: TargetInfo) -> bool:
    return True


def never(info: TargetInfo) -> bool:
    return False


def message_for(info: TargetInfo) -> str:
    if info.read_only:
        return f"Overwrite READONLY file {info.name!r}?"
    return f"Overwrite file {info.name!r}?"


def ask(info: TargetInfo) -> bool:
    """Ask on the terminal whether to overwrite *info.name*."""
    if not _is_tty():
        raise NoTTYError("--yes")
    result = questionary.confirm(message_for(info), default=False).ask()
    if result is None:
        raise SystemExit(1)
    return result
