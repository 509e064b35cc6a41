from __future__ import annotations

import logging
import shlex
import subprocess
from dataclasses import dataclass
from typing import Sequence

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CmdResult:
    argv: list[str]
    returncode: int
    stdout: str
    stderr: str

    @property
    def ok(self) -> bool:
        return self.returncode == 0


def fmt_argv(argv: Sequence[str]) -> str:
    return " ".join(shlex.quote(a) for a in argv)


def run_cmd(argv: Sequence[str], *, check: bool = True, dry_run: bool = False) -> CmdResult:
    """Run a host command (mount, umount, chroot) and capture its output.

    The command line is logged at INFO, its output at DEBUG. In dry-run mode
    nothing runs and a successful empty result comes back. With check=True a
    non-zero exit raises RuntimeError carrying stderr.
    """

    argv_list = [str(a) for a in argv]
    logger.info("CMD %s", fmt_argv(argv_list))
    if dry_run:
        return CmdResult(argv_list, 0, "", "")

    p = subprocess.run(argv_list, capture_output=True, text=True)
    for name, stream in (("STDOUT", p.stdout), ("STDERR", p.stderr)):
        if stream:
            logger.debug("%s %s", name, stream.strip())

    result = CmdResult(argv_list, p.returncode, p.stdout, p.stderr)
    if check and not result.ok:
        raise RuntimeError(f"Command failed ({p.returncode}): {fmt_argv(argv_list)}\n{p.stderr}")
    return result
