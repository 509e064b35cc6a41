from __future__ import annotations

import logging

from ..context import BuildCtx
from ..lib.apk import clear_root_password
from ..lib.files import force_symlink, in_root, write_file
from ..lib.templates import (
    ANSWERS_PATH,
    DISKLESS_FSTAB,
    DISKLESS_LBU_CONF,
    SETUP_SERVICE,
    SSHD_POLICY,
    render_answers,
    render_setup_service,
)

logger = logging.getLogger(__name__)


class WriteOverlayConfigStep:
    """Write the diskless configuration the overlay carries.

    Order: answers file, OpenRC unit, boot runlevel link, sshd policy,
    root password, fstab, lbu.conf.
    """

    step_id = "50_write_overlay_config"

    def run(self, ctx: BuildCtx) -> BuildCtx:
        cfg = ctx.cfg
        rootfs = ctx.workdir.rootfs
        dry_run = ctx.dry_run

        logger.info("Creating answers file for diskless operation...")
        write_file(rootfs, ANSWERS_PATH, render_answers(cfg), dry_run=dry_run)

        logger.info("Creating OpenRC unit...")
        init_script = f"/etc/init.d/{SETUP_SERVICE}"
        write_file(rootfs, init_script, render_setup_service(ANSWERS_PATH), mode=0o755, dry_run=dry_run)
        force_symlink(rootfs, f"/etc/runlevels/boot/{SETUP_SERVICE}", init_script, dry_run=dry_run)

        if cfg.allow_passwordless_root:
            logger.warning("Enabling root SSH login and clearing the root password")
            write_file(rootfs, "/etc/ssh/sshd_config", SSHD_POLICY, append=True, dry_run=dry_run)
            self._clear_root_password(ctx)
        else:
            logger.info("allow_passwordless_root is off; leaving sshd_config and root password untouched")

        logger.info("Configuring for diskless operation...")
        fstab = in_root(rootfs, "/etc/fstab")
        if not dry_run and (fstab.exists() or fstab.is_symlink()):
            fstab.unlink()
        write_file(rootfs, "/etc/fstab", DISKLESS_FSTAB, dry_run=dry_run)
        write_file(rootfs, "/etc/lbu/lbu.conf", DISKLESS_LBU_CONF, dry_run=dry_run)
        return ctx

    def _clear_root_password(self, ctx: BuildCtx) -> None:
        try:
            r = clear_root_password(str(ctx.workdir.rootfs), dry_run=ctx.dry_run)
        except OSError as e:
            ctx.warn(f"Could not clear root password: {e}")
            return
        if not r.ok:
            ctx.warn(f"Could not clear root password (exit {r.returncode}): {r.stderr.strip()}")
