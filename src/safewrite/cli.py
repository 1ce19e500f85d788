"""CLI for safewrite."""

import argparse
import sys
from importlib.metadata import version
from pathlib import Path
from typing import Optional

from rich.console import Console

from . import config as cfg
from . import prompt
from .errors import OverwriteRejected, SafeWriteError, WorkingFileError
from .file_io import write_bytes
from .gate import ConfirmFunc
from .logging_setup import configure
from .perm import PermissionTracker
from .status import StatusRegistry

console = Console(stderr=True)


def _read_input(source: Optional[str]) -> bytes:
    if not source or source == "-":
        return sys.stdin.buffer.read()
    return Path(source).read_bytes()


def _resolve_scope(args: argparse.Namespace) -> cfg.Scope:
    if getattr(args, "project", False):
        return cfg.Scope.PROJECT
    return cfg.Scope.GLOBAL


def _setup_logging(args: argparse.Namespace, settings: dict) -> None:
    log_file = settings.get("log_file")
    configure(
        Path(log_file).expanduser() if log_file else None,
        debug=bool(getattr(args, "debug", False) or settings.get("debug")),
    )


def _write_one(
    target: str,
    data: bytes,
    *,
    confirm: ConfirmFunc,
    registry: StatusRegistry,
    tracker: Optional[PermissionTracker],
) -> int:
    try:
        fh = write_bytes(target, data, confirm=confirm, registry=registry)
    except OverwriteRejected:
        console.print(f"[dim]{target}: skipped[/dim]")
        return 0
    except WorkingFileError as e:
        console.print(f"[red]Error:[/red] {e}")
        console.print(f"  Working file left at: {e.working_file}")
        return 1
    except OSError as e:
        console.print(f"[red]Error:[/red] {target}: {e}")
        return 1

    if tracker is not None:
        tracker.track(fh)
    console.print(f"[green]Wrote[/green] {target} ({fh.kind.value}, {len(data)} bytes)")
    return 0


def cmd_write(args: argparse.Namespace) -> int:
    settings = cfg.load_config()
    _setup_logging(args, settings)

    assume_yes = args.yes or bool(settings.get("assume_yes"))
    restore = args.restore_perm or bool(settings.get("restore_perm"))
    confirm = prompt.always if assume_yes else prompt.ask

    data = _read_input(args.input)
    registry = StatusRegistry()
    tracker = PermissionTracker() if restore else None

    rc = 0
    for target in args.targets:
        rc |= _write_one(target, data, confirm=confirm, registry=registry, tracker=tracker)

    if tracker is not None:
        try:
            tracker.restore_all()
        except OSError as e:
            console.print(f"[yellow]Warning:[/yellow] failed to restore permissions: {e}")
            rc = 1
    return rc


def cmd_config(args: argparse.Namespace) -> int:
    scope = _resolve_scope(args)
    if not args.set:
        from rich.table import Table

        merged = cfg.load_config()
        table = Table(title="safewrite config")
        table.add_column("Key")
        table.add_column("Value")
        for key in cfg.KNOWN_KEYS:
            table.add_row(key, str(merged.get(key)))
        console.print(table)
        return 0

    data = cfg.load_raw_config(scope)
    for item in args.set:
        key, sep, raw = item.partition("=")
        if not sep:
            console.print(f"[red]Expected KEY=VALUE, got {item!r}[/red]")
            return 1
        try:
            cfg.set_value(data, key.strip(), raw)
        except KeyError:
            console.print(f"[red]Unknown key {key!r}. Known keys: {', '.join(cfg.KNOWN_KEYS)}[/red]")
            return 1

    try:
        cfg.save_config(data, scope)
    except (SafeWriteError, OSError) as e:
        console.print(f"[red]Error:[/red] {e}")
        return 1
    console.print(f"[green]Saved.[/green] {cfg.config_path(scope)}")
    return 0


def _add_scope_flags(parser: argparse.ArgumentParser) -> None:
    group = parser.add_mutually_exclusive_group()
    group.add_argument("--global", action="store_true",
                       help="Use global scope")
    group.add_argument("--project", action="store_true",
                       help="Use project scope")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="safewrite",
        description="Overwrite files without losing the previous version",
    )
    sub = parser.add_subparsers(dest="command")

    p_write = sub.add_parser("write", help="Write input to one or more files safely")
    p_write.add_argument("targets", nargs="+", metavar="TARGET")
    p_write.add_argument("--input", "-i", help="Read content from this file (default: stdin)")
    p_write.add_argument("--yes", "-y", action="store_true",
                         help="Overwrite existing files without asking")
    p_write.add_argument("--restore-perm", action="store_true",
                         help="Restore original permissions after writing")
    p_write.add_argument("--debug", action="store_true", help="Verbose logging")

    p_config = sub.add_parser("config", help="Show or update settings")
    _add_scope_flags(p_config)
    p_config.add_argument("--set", action="append", metavar="KEY=VALUE",
                          help="Set a value in the selected scope (repeatable)")

    sub.add_parser("version", help="Show version")
    return parser


def main() -> None:
    parser = build_parser()
    args = parser.parse_args()
    if not args.command:
        parser.print_help()
        sys.exit(0)

    commands = {
        "write": cmd_write,
        "config": cmd_config,
        "version": lambda _: console.print(version("safewrite")) or 0,
    }
    sys.exit(commands[args.command](args))


if __name__ == "__main__":
    main()
