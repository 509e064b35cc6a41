from __future__ import annotations

import logging

from ..context import BuildCtx
from ..lib.net import download_first
from ..netboot_config import RPI4_FIRMWARE, RPI4_NETBOOT

logger = logging.getLogger(__name__)


class FetchArtifactsStep:
    step_id = "20_fetch_artifacts"

    def run(self, ctx: BuildCtx) -> BuildCtx:
        cfg = ctx.cfg
        boot_dir = ctx.boot_dir
        if not ctx.dry_run:
            boot_dir.mkdir(parents=True, exist_ok=True)

        logger.info("Downloading RPI4 firmware files...")
        for saved_as, candidates in RPI4_FIRMWARE:
            urls = [cfg.firmware_url(n) for n in candidates]
            ctx.artifacts[saved_as] = download_first(
                ctx.session, urls, boot_dir / saved_as, timeout=cfg.http_timeout, dry_run=ctx.dry_run
            )

        logger.info("Downloading Alpine kernel and initramfs for RPI4...")
        for saved_as, upstream in RPI4_NETBOOT:
            url = cfg.netboot_url(ctx.branch, upstream)
            ctx.artifacts[saved_as] = download_first(
                ctx.session, [url], boot_dir / saved_as, timeout=cfg.http_timeout, dry_run=ctx.dry_run
            )

        logger.info("Fetched %d artifacts into %s", len(ctx.artifacts), boot_dir)
        return ctx
