"""Tests for the scoped work directory."""

from unittest.mock import patch

import pytest

from alpine_netboot.lib.command import CmdResult
from alpine_netboot.lib.workdir import WorkDir


class TestWorkDir:
    def test_created_and_removed(self, tmp_path):
        with WorkDir(parent=str(tmp_path)) as w:
            assert w.path.is_dir()
            assert w.path.parent == tmp_path
            (w.rootfs / "etc").mkdir(parents=True)
        assert not w.path.exists()

    def test_removed_on_error(self, tmp_path):
        with pytest.raises(RuntimeError):
            with WorkDir(parent=str(tmp_path)) as w:
                raise RuntimeError("boom")
        assert list(tmp_path.iterdir()) == []

    def test_removed_on_interrupt(self, tmp_path):
        with pytest.raises(KeyboardInterrupt):
            with WorkDir(parent=str(tmp_path)):
                raise KeyboardInterrupt
        assert list(tmp_path.iterdir()) == []

    def test_unmounts_in_reverse_order_once(self, tmp_path, fake_commands):
        with WorkDir(parent=str(tmp_path)) as w:
            assert w.mount_pseudo_filesystems() == []
            root = str(w.rootfs)
            w.teardown()
            w.teardown()

        umounts = [c[-1] for c in fake_commands if c[0] == "umount"]
        assert umounts == [f"{root}/tmp", f"{root}/dev", f"{root}/sys", f"{root}/proc"]

    def test_failed_mounts_are_warnings_and_not_unmounted(self, tmp_path):
        calls = []

        def fake(argv, **kwargs):
            calls.append(list(argv))
            rc = 1 if argv[0] == "mount" and argv[-1].endswith("/sys") else 0
            return CmdResult(argv=list(argv), returncode=rc, stdout="", stderr="denied" if rc else "")

        with patch("alpine_netboot.lib.chroot.run_cmd", side_effect=fake):
            with WorkDir(parent=str(tmp_path)) as w:
                warnings = w.mount_pseudo_filesystems()

        assert len(warnings) == 1 and "/sys" in warnings[0]
        umounted = [c[-1] for c in calls if c[0] == "umount"]
        assert not any(t.endswith("/sys") for t in umounted)
        assert len(umounted) == 3

    def test_keeps_directory_while_something_is_mounted(self, tmp_path):
        with patch("alpine_netboot.lib.workdir.os.path.ismount", side_effect=lambda p: p.endswith("/dev")):
            with WorkDir(parent=str(tmp_path)) as w:
                pass
        assert w.path.exists()

    def test_rootfs_outside_context(self):
        with pytest.raises(RuntimeError):
            WorkDir().rootfs
