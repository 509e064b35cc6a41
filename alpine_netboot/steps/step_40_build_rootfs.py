from __future__ import annotations

import logging
import shutil
from pathlib import Path
from typing import Optional, Tuple

from ..context import BuildCtx
from ..lib.apk import apk_add, apk_update
from ..lib.archive import extract_rootfs
from ..lib.chroot import is_root
from ..lib.net import download_first, fetch_text
from ..lib.versions import latest_patch

logger = logging.getLogger(__name__)

HOST_RESOLV_CONF = Path("/etc/resolv.conf")
SAVED_SUFFIX = ".netboot-saved"


class BuildRootfsStep:
    """Download the minirootfs, mount pseudo filesystems, install packages."""

    step_id = "40_build_rootfs"

    def run(self, ctx: BuildCtx) -> BuildCtx:
        cfg = ctx.cfg
        work = ctx.workdir
        branch = ctx.branch

        listing = fetch_text(ctx.session, cfg.release_index_url(branch), timeout=cfg.http_timeout)
        ctx.patch = latest_patch(listing, branch)

        tarball = work.path / "alpine-minirootfs.tar.gz"
        urls = cfg.minirootfs_urls(branch, ctx.patch)
        logger.info("Downloading Alpine minirootfs from: %s", urls[0])
        ctx.minirootfs_url = download_first(
            ctx.session, urls, tarball, timeout=cfg.http_timeout, dry_run=ctx.dry_run
        )

        rootfs = work.rootfs
        if ctx.dry_run:
            logger.info("Would extract %s -> %s", tarball, rootfs)
        else:
            extract_rootfs(tarball, rootfs)

        if not is_root():
            ctx.warn("Not running as root. Mounts may fail. Consider running with sudo.")
        ctx.extend_warnings(work.mount_pseudo_filesystems())

        resolv = None
        if cfg.copy_host_resolv_conf:
            resolv = self._copy_resolv_conf(ctx, rootfs)

        logger.info("Installing packages in chroot: %s", " ".join(cfg.packages))
        try:
            apk_update(str(rootfs), dry_run=ctx.dry_run)
            apk_add(str(rootfs), cfg.packages, dry_run=ctx.dry_run)
        finally:
            if resolv is not None:
                self._restore_resolv_conf(ctx, *resolv)
        return ctx

    def _copy_resolv_conf(self, ctx: BuildCtx, rootfs: Path) -> Optional[Tuple[Path, Optional[Path]]]:
        """Put the host resolv.conf in the tree, keeping whatever was there.

        Returns (path written, saved original or None), or None when the
        tree was left untouched.
        """

        dst = rootfs / "etc/resolv.conf"
        if ctx.dry_run:
            logger.info("Would copy %s -> %s", HOST_RESOLV_CONF, dst)
            return None
        saved: Optional[Path] = None
        touched = False
        try:
            dst.parent.mkdir(parents=True, exist_ok=True)
            if dst.exists() or dst.is_symlink():
                candidate = dst.with_name(dst.name + SAVED_SUFFIX)
                dst.rename(candidate)
                saved = candidate
            touched = True
            shutil.copyfile(HOST_RESOLV_CONF, dst)
        except OSError as e:
            ctx.warn(f"Could not copy host resolv.conf into rootfs: {e}")
        return (dst, saved) if touched else None

    def _restore_resolv_conf(self, ctx: BuildCtx, dst: Path, saved: Optional[Path]) -> None:
        try:
            dst.unlink(missing_ok=True)
            if saved is not None:
                saved.rename(dst)
        except OSError as e:
            ctx.warn(f"Could not remove host resolv.conf from rootfs: {e}")
