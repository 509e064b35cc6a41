from __future__ import annotations

import logging
from typing import Sequence

from .chroot import chroot_cmd
from .command import CmdResult

logger = logging.getLogger(__name__)


def apk_update(target_root: str, *, dry_run: bool = False) -> CmdResult:
    return chroot_cmd(target_root, ["apk", "update"], dry_run=dry_run)


def apk_add(
    target_root: str,
    packages: Sequence[str],
    *,
    no_cache: bool = True,
    dry_run: bool = False,
) -> CmdResult | None:
    if not packages:
        return None
    argv = ["apk", "add"]
    if no_cache:
        argv.append("--no-cache")
    return chroot_cmd(target_root, [*argv, *packages], dry_run=dry_run)


def clear_root_password(target_root: str, *, dry_run: bool = False) -> CmdResult:
    """passwd -d root inside the tree. Never raises on a non-zero exit."""

    return chroot_cmd(target_root, ["passwd", "-d", "root"], check=False, dry_run=dry_run)
