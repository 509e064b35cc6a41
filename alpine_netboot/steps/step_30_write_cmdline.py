from __future__ import annotations

import logging

from ..context import BuildCtx
from ..lib.files import write_file
from ..lib.templates import render_cmdline

logger = logging.getLogger(__name__)


class WriteCmdlineStep:
    step_id = "30_write_cmdline"

    def run(self, ctx: BuildCtx) -> BuildCtx:
        contents = render_cmdline(ctx.cfg, ctx.branch)
        write_file(ctx.boot_dir, "cmdline.txt", contents, dry_run=ctx.dry_run)
        logger.info("cmdline.txt: %s", contents.strip())
        return ctx
