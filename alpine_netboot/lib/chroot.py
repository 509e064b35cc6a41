from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Sequence

from .command import CmdResult, run_cmd

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Mount:
    source: str
    target: str
    fstype: Optional[str] = None

    def argv(self) -> List[str]:
        if self.fstype:
            return ["mount", "-t", self.fstype, self.source, self.target]
        return ["mount", "--bind", self.source, self.target]


def pseudo_fs_mounts(target_root: str) -> List[Mount]:
    # Order matters: teardown walks this list backwards.
    return [
        Mount("/proc", f"{target_root}/proc"),
        Mount("/sys", f"{target_root}/sys"),
        Mount("/dev", f"{target_root}/dev"),
        Mount("tmpfs", f"{target_root}/tmp", fstype="tmpfs"),
    ]


def chroot_cmd(
    target_root: str,
    argv: Sequence[str],
    *,
    check: bool = True,
    dry_run: bool = False,
) -> CmdResult:
    """Run a command with target_root substituted as the filesystem root.

    Returns the structured result; with check=True a non-zero exit raises.
    Note: running an aarch64 root on another host arch requires
    qemu-user-static/binfmt to be registered on the host.
    """

    return run_cmd(["chroot", target_root, *argv], check=check, dry_run=dry_run)


def is_root() -> bool:
    return os.geteuid() == 0


def mount_best_effort(m: Mount, *, dry_run: bool = False) -> Optional[str]:
    """Try one mount. Returns a warning string on failure, None on success."""

    if not dry_run:
        Path(m.target).mkdir(parents=True, exist_ok=True)
    try:
        r = run_cmd(m.argv(), check=False, dry_run=dry_run)
    except OSError as e:
        r = CmdResult(argv=m.argv(), returncode=127, stdout="", stderr=str(e))
    if r.ok:
        return None
    warning = f"Could not mount {m.source} on {m.target} (may need sudo): {r.stderr.strip()}"
    logger.warning(warning)
    return warning


def umount_best_effort(target: str, *, dry_run: bool = False) -> None:
    try:
        r = run_cmd(["umount", "-lf", target], check=False, dry_run=dry_run)
        if not r.ok:
            logger.debug("umount %s failed: %s", target, r.stderr.strip())
    except OSError as e:
        logger.debug("umount %s failed: %s", target, e)
