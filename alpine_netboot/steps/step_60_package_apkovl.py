from __future__ import annotations

import logging

from ..context import BuildCtx
from ..lib.archive import pack_apkovl, stage_etc

logger = logging.getLogger(__name__)


class PackageApkovlStep:
    step_id = "60_package_apkovl"

    def run(self, ctx: BuildCtx) -> BuildCtx:
        work = ctx.workdir
        out_path = ctx.boot_dir / ctx.cfg.apkovl_name

        if ctx.dry_run:
            logger.info("Would stage %s/etc and pack it into %s", work.rootfs, out_path)
            ctx.apkovl_path = out_path
            return ctx

        logger.info("Creating apkovl...")
        ctx.extend_warnings(stage_etc(work.rootfs, work.apkovl_dir))
        ctx.apkovl_path = pack_apkovl(work.apkovl_dir, out_path)
        return ctx
