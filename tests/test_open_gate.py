from __future__ import annotations

import tests._path_setup  # noqa: F401

import os
import stat
import tempfile
import unittest
from pathlib import Path
from unittest.mock import patch

from safewrite.errors import CreateError, OverwriteRejected, StatError
from safewrite.gate import TargetInfo, open_target
from safewrite.handles import DeviceFile, ManagedOverwrite, NewFile, OpenKind
from safewrite.status import Status, StatusRegistry


def _forbidden(info: TargetInfo) -> bool:
    raise AssertionError(f"confirm should not be called for {info.name}")


class OpenGateTest(unittest.TestCase):
    def setUp(self) -> None:
        self._td = tempfile.TemporaryDirectory()
        self.dir = Path(self._td.name)
        self.registry = StatusRegistry()

    def tearDown(self) -> None:
        self._td.cleanup()

    def test_new_file_is_written_directly_without_confirm(self) -> None:
        path = str(self.dir / "new.bin")
        fh = open_target(path, _forbidden, self.registry)
        self.assertIsInstance(fh, NewFile)
        self.assertIs(fh.kind, OpenKind.NEW_FILE)
        self.assertIs(self.registry.lookup(path), Status.CREATE)

        fh.write(b"hello")
        fh.close()

        self.assertEqual(Path(path).read_bytes(), b"hello")
        self.assertFalse(os.path.exists(path + "~"))
        self.assertEqual(os.listdir(self.dir), ["new.bin"])

    def test_missing_parent_directory_raises_create_error(self) -> None:
        path = str(self.dir / "no-such-dir" / "file.bin")
        with self.assertRaises(CreateError) as ctx:
            open_target(path, lambda info: True, self.registry)
        self.assertIsInstance(ctx.exception, OSError)
        self.assertIsInstance(ctx.exception.cause, FileNotFoundError)
        self.assertIs(self.registry.lookup(path), Status.NONE)

    def test_stat_failure_other_than_missing_raises_stat_error(self) -> None:
        blocker = self.dir / "plain"
        blocker.write_bytes(b"x")
        path = str(blocker / "child.bin")
        with self.assertRaises(StatError) as ctx:
            open_target(path, _forbidden, self.registry)
        self.assertIsInstance(ctx.exception.cause, NotADirectoryError)
        self.assertEqual(ctx.exception.path, path)

    @unittest.skipUnless(os.path.exists(os.devnull), "no null device")
    def test_device_is_opened_directly(self) -> None:
        fh = open_target(os.devnull, _forbidden, self.registry)
        self.assertIsInstance(fh, DeviceFile)
        self.assertIs(fh.kind, OpenKind.DEVICE_FILE)
        self.assertEqual(fh.write(b"test"), 4)
        fh.close()
        self.assertFalse(os.path.exists(os.devnull + "~"))
        self.assertIs(self.registry.lookup(os.devnull), Status.NONE)

    def test_existing_file_asks_once_and_rejection_changes_nothing(self) -> None:
        path = self.dir / "file.bin"
        path.write_bytes(b"old")
        os.chmod(path, 0o640)
        seen: list[TargetInfo] = []

        def _reject(info: TargetInfo) -> bool:
            seen.append(info)
            return False

        with self.assertRaises(OverwriteRejected):
            open_target(str(path), _reject, self.registry)

        self.assertEqual(len(seen), 1)
        self.assertEqual(seen[0], TargetInfo(name=str(path), mode=0o640, status=Status.NONE))
        self.assertEqual(path.read_bytes(), b"old")
        self.assertEqual(os.listdir(self.dir), ["file.bin"])

    def test_overwrite_rejected_is_not_an_io_error(self) -> None:
        self.assertFalse(issubclass(OverwriteRejected, OSError))

    def test_confirmed_overwrite_uses_temp_file_in_same_directory(self) -> None:
        path = self.dir / "file.bin"
        path.write_bytes(b"old")
        os.chmod(path, 0o604)

        fh = open_target(str(path), lambda info: True, self.registry)
        self.assertIsInstance(fh, ManagedOverwrite)
        self.assertIs(fh.kind, OpenKind.MANAGED_OVERWRITE)
        self.assertEqual(fh.name, str(path))
        self.assertEqual(fh.perm, 0o604)
        self.assertEqual(os.path.dirname(fh.tmp), str(self.dir))
        self.assertTrue(os.path.basename(fh.tmp).startswith("file.bin.tmp-"))
        self.assertTrue(os.path.exists(fh.tmp))
        self.assertEqual(path.read_bytes(), b"old")
        fh.discard()

    def test_confirm_sees_prior_status_and_read_only_flag(self) -> None:
        path = self.dir / "file.txt"
        path.write_bytes(b"old")
        os.chmod(path, 0o444)
        self.registry.record(str(path), Status.OVERWRITE)
        seen: list[TargetInfo] = []

        def _reject(info: TargetInfo) -> bool:
            seen.append(info)
            return False

        with self.assertRaises(OverwriteRejected):
            open_target(str(path), _reject, self.registry)
        self.assertIs(seen[0].status, Status.OVERWRITE)
        self.assertTrue(seen[0].read_only)

    def test_temp_file_creation_failure_propagates_unchanged(self) -> None:
        path = self.dir / "file.bin"
        path.write_bytes(b"old")
        boom = PermissionError(13, "denied")
        with patch("safewrite.gate.tempfile.mkstemp", side_effect=boom):
            with self.assertRaises(PermissionError) as ctx:
                open_target(str(path), lambda info: True, self.registry)
        self.assertIs(ctx.exception, boom)
        self.assertEqual(path.read_bytes(), b"old")

    def test_accepts_path_objects(self) -> None:
        path = self.dir / "p.txt"
        fh = open_target(path, _forbidden, self.registry)
        fh.close()
        self.assertEqual(fh.name, str(path))
        self.assertIs(self.registry.lookup(str(path)), Status.CREATE)

    def test_encoding_opens_text_stream(self) -> None:
        path = self.dir / "t.txt"
        path.write_text("old", encoding="utf-8")
        with open_target(path, lambda info: True, self.registry, encoding="utf-8") as fh:
            fh.write("héllo")
        self.assertEqual(path.read_text(encoding="utf-8"), "héllo")

    def test_unknown_encoding_changes_nothing_on_disk(self) -> None:
        existing = self.dir / "old.txt"
        existing.write_text("old", encoding="utf-8")
        missing = self.dir / "new.txt"

        for path in (existing, missing):
            with self.assertRaises(LookupError):
                open_target(path, lambda info: True, self.registry, encoding="no-such-codec")

        self.assertEqual(os.listdir(self.dir), ["old.txt"])
        self.assertEqual(existing.read_text(encoding="utf-8"), "old")
        self.assertEqual(len(self.registry), 0)

    def test_stream_failure_removes_temp_file(self) -> None:
        path = self.dir / "file.bin"
        path.write_bytes(b"old")
        with patch("safewrite.gate._open_stream", side_effect=OSError(24, "Too many open files")):
            with self.assertRaises(OSError):
                open_target(path, lambda info: True, self.registry)
        self.assertEqual(os.listdir(self.dir), ["file.bin"])

    def test_target_info_read_only_uses_owner_write_bit(self) -> None:
        self.assertTrue(TargetInfo("a", stat.S_IRUSR | stat.S_IWGRP, Status.NONE).read_only)
        self.assertFalse(TargetInfo("a", 0o600, Status.NONE).read_only)


if __name__ == "__main__":
    unittest.main()
