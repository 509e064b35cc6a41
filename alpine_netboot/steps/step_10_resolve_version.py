from __future__ import annotations

import logging

from ..context import BuildCtx
from ..lib.net import fetch_text
from ..lib.versions import branch_from_listing, is_branch

logger = logging.getLogger(__name__)


class ResolveVersionStep:
    """Pick the Alpine major.minor every later URL is built from.

    Best-effort: a listing that cannot be read or parsed falls back to the
    configured default instead of failing.
    """

    step_id = "10_resolve_version"

    def run(self, ctx: BuildCtx) -> BuildCtx:
        cfg = ctx.cfg

        pinned = cfg.pinned_version
        if pinned:
            if not is_branch(pinned):
                raise ValueError(f"version must look like MAJOR.MINOR, got {pinned!r}")
            ctx.branch = pinned
            logger.info("Using pinned Alpine version: %s", pinned)
            return ctx

        logger.info("Getting latest Alpine version...")
        listing = fetch_text(ctx.session, cfg.latest_stable_index_url, timeout=cfg.http_timeout)
        branch = branch_from_listing(listing)
        if not branch:
            ctx.warn(f"Could not determine latest Alpine version; falling back to {cfg.default_version}")
            branch = cfg.default_version

        ctx.branch = branch
        logger.info("Using Alpine version: %s", branch)
        return ctx
