from __future__ import annotations

import logging
import os
import shutil
import tempfile
from pathlib import Path
from typing import List, Optional

from .chroot import Mount, mount_best_effort, pseudo_fs_mounts, umount_best_effort

logger = logging.getLogger(__name__)


class WorkDir:
    """Ephemeral work directory owning the extracted rootfs and its mounts.

    Use as a context manager. teardown() unmounts whatever was mounted, in
    reverse order, then removes the directory. It runs at most once and
    logs its own failures instead of raising, so one stuck resource does
    not keep the next one from being released.
    """

    def __init__(self, *, parent: Optional[str] = None, prefix: str = "alpine-netboot-", dry_run: bool = False):
        self.parent = parent
        self.prefix = prefix
        self.dry_run = dry_run
        self.path: Optional[Path] = None
        self.mounted: List[Mount] = []
        self._torn_down = False

    def __enter__(self) -> "WorkDir":
        if self.parent:
            Path(self.parent).mkdir(parents=True, exist_ok=True)
        self.path = Path(tempfile.mkdtemp(prefix=self.prefix, dir=self.parent))
        logger.info("Work directory: %s", self.path)
        return self

    def __exit__(self, exc_type, exc, tb) -> bool:
        self.teardown()
        return False

    @property
    def rootfs(self) -> Path:
        if self.path is None:
            raise RuntimeError("WorkDir used outside its context")
        return self.path / "rootfs"

    @property
    def apkovl_dir(self) -> Path:
        if self.path is None:
            raise RuntimeError("WorkDir used outside its context")
        return self.path / "apkovl"

    def mount_pseudo_filesystems(self) -> List[str]:
        """Bind /proc, /sys, /dev and a tmpfs into the rootfs.

        Each mount is independent. Returns the warnings for the ones that
        failed; successful ones are remembered for teardown.
        """

        warnings: List[str] = []
        for m in pseudo_fs_mounts(str(self.rootfs)):
            w = mount_best_effort(m, dry_run=self.dry_run)
            if w is None:
                self.mounted.append(m)
            else:
                warnings.append(w)
        return warnings

    def _active_mounts(self) -> List[str]:
        if self.path is None:
            return []
        return [m.target for m in pseudo_fs_mounts(str(self.rootfs)) if os.path.ismount(m.target)]

    def teardown(self) -> None:
        if self._torn_down:
            return
        self._torn_down = True

        for m in reversed(self.mounted):
            umount_best_effort(m.target, dry_run=self.dry_run)
        self.mounted.clear()

        if self.path is None or not self.path.exists():
            return

        busy = self._active_mounts()
        if busy:
            logger.error("Refusing to remove %s; still mounted: %s", self.path, ", ".join(busy))
            return

        try:
            shutil.rmtree(self.path)
            logger.info("Removed work directory %s", self.path)
        except OSError as e:
            logger.warning("Could not remove %s: %s", self.path, e)
