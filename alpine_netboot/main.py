from __future__ import annotations

import argparse
import logging
import signal
from contextlib import contextmanager
from typing import Iterator, Optional, Sequence

import requests

from .context import BuildCtx
from .lib.net import new_session
from .lib.workdir import WorkDir
from .logging_utils import DEFAULT_LOG_PATH, configure_logging
from .netboot_config import NetbootConfig, load_netboot_config
from .pipeline import PipelineResult, Step, run_pipeline
from .run_record import save_run_record
from .steps import (
    BuildRootfsStep,
    FetchArtifactsStep,
    PackageApkovlStep,
    ResolveVersionStep,
    WriteCmdlineStep,
    WriteOverlayConfigStep,
)

logger = logging.getLogger(__name__)


def build_steps() -> list[Step]:
    return [
        ResolveVersionStep(),
        FetchArtifactsStep(),
        WriteCmdlineStep(),
        BuildRootfsStep(),
        WriteOverlayConfigStep(),
        PackageApkovlStep(),
    ]


@contextmanager
def sigterm_as_exit() -> Iterator[None]:
    """Turn SIGTERM into SystemExit so enclosing teardown still runs."""

    def _handler(signum, frame):
        raise SystemExit(128 + signum)

    previous = signal.signal(signal.SIGTERM, _handler)
    try:
        yield
    finally:
        signal.signal(signal.SIGTERM, previous)


def run(
    cfg: NetbootConfig,
    *,
    dry_run: bool = False,
    stop_after: Optional[str] = None,
    record_path: Optional[str] = None,
    session: Optional[requests.Session] = None,
    steps: Optional[Sequence[Step]] = None,
) -> PipelineResult:
    """Run the netboot build once. The work directory never outlives this call."""

    owns_session = session is None
    ctx = BuildCtx(cfg=cfg, session=session or new_session(), dry_run=dry_run)
    error: Optional[str] = None

    try:
        with sigterm_as_exit(), WorkDir(parent=cfg.work_dir_parent, dry_run=dry_run) as work:
            ctx.work = work
            result = run_pipeline(
                ctx=ctx,
                steps=build_steps() if steps is None else steps,
                stop_after=stop_after,
            )
    except Exception as e:
        logger.exception("Netboot build failed")
        error = str(e)
        raise
    finally:
        if owns_session:
            ctx.session.close()
        if record_path:
            record = ctx.record()
            record["error"] = error
            save_run_record(record_path, record)

    _log_summary(result)
    return result


def _log_summary(result: PipelineResult) -> None:
    ctx = result.ctx
    logger.info("Setup complete! Ran: %s", ", ".join(result.ran_steps))
    if ctx.branch:
        logger.info("Files are in: %s", ctx.boot_dir)
    if ctx.apkovl_path:
        logger.info("APKOVL file: %s", ctx.apkovl_path)
        logger.info("Make sure to serve the apkovl file via HTTP at: %s", ctx.cfg.apkovl_url)
    if result.warnings:
        logger.warning("Completed with %d warning(s):", len(result.warnings))
        for w in result.warnings:
            logger.warning("  - %s", w)


def main(argv: Optional[list[str]] = None) -> int:
    p = argparse.ArgumentParser(
        prog="alpine-netboot",
        description="Stage a Raspberry Pi 4 diskless Alpine netboot (TFTP + apkovl).",
    )
    p.add_argument("--config", default=None, help="YAML settings file")
    p.add_argument("--log", default=DEFAULT_LOG_PATH, help="Path to build log")
    p.add_argument("--board-name", default=None, help="Board name; names the apkovl and the hostname")
    p.add_argument("--tftp-root", default=None, help="TFTP root; files land in <root>/<major.minor>")
    p.add_argument("--server", default=None, help="Address of the HTTP server that will serve the apkovl")
    p.add_argument("--version", default=None, help="Pin Alpine MAJOR.MINOR instead of discovering it")
    p.add_argument("--stop-after", default=None, help="Stop after step_id (e.g. 30_write_cmdline)")
    p.add_argument("--record", default=None, help="Write a JSON record of the run to this path")
    p.add_argument("--dry-run", action="store_true", help="Log commands and downloads without running them")
    p.add_argument("-v", "--verbose", action="store_true")

    args = p.parse_args(argv)

    configure_logging(log_path=args.log, level=logging.DEBUG if args.verbose else logging.INFO)

    cfg = load_netboot_config(args.config).with_overrides(
        {
            "board_name": args.board_name,
            "tftp_root": args.tftp_root,
            "overlay_server": args.server,
            "version": args.version,
        }
    )

    run(
        cfg,
        dry_run=bool(args.dry_run),
        stop_after=args.stop_after,
        record_path=args.record,
    )
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
