from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

import requests

from .lib.workdir import WorkDir
from .netboot_config import NetbootConfig

logger = logging.getLogger(__name__)


@dataclass
class BuildCtx:
    """Everything one run knows: settings in, resolved values and warnings out."""

    cfg: NetbootConfig
    session: requests.Session
    dry_run: bool = False
    work: Optional[WorkDir] = None

    branch: Optional[str] = None
    patch: Optional[int] = None
    minirootfs_url: Optional[str] = None
    artifacts: Dict[str, str] = field(default_factory=dict)
    apkovl_path: Optional[Path] = None
    warnings: List[str] = field(default_factory=list)
    completed_steps: List[str] = field(default_factory=list)

    def warn(self, message: str) -> None:
        logger.warning(message)
        self.warnings.append(message)

    def extend_warnings(self, messages: List[str]) -> None:
        # Already logged where they were produced.
        self.warnings.extend(messages)

    @property
    def boot_dir(self) -> Path:
        if not self.branch:
            raise RuntimeError("Alpine version not resolved yet; run 10_resolve_version first")
        return self.cfg.boot_dir(self.branch)

    @property
    def workdir(self) -> WorkDir:
        if self.work is None:
            raise RuntimeError("No work directory; steps 40+ must run inside WorkDir")
        return self.work

    def record(self) -> Dict[str, Any]:
        return {
            "board_name": self.cfg.board_name,
            "alpine_version": self.branch,
            "alpine_patch": self.patch,
            "boot_dir": str(self.boot_dir) if self.branch else None,
            "minirootfs_url": self.minirootfs_url,
            "artifacts": dict(self.artifacts),
            "apkovl_path": str(self.apkovl_path) if self.apkovl_path else None,
            "apkovl_url": self.cfg.apkovl_url,
            "dry_run": self.dry_run,
            "warnings": list(self.warnings),
            "completed_steps": list(self.completed_steps),
        }
