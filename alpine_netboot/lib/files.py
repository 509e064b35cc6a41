from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)


def in_root(root: Path | str, rel: str) -> Path:
    return Path(root) / rel.lstrip("/")


def write_file(
    root: Path | str,
    rel: str,
    contents: str,
    *,
    mode: Optional[int] = None,
    append: bool = False,
    dry_run: bool = False,
) -> Path:
    p = in_root(root, rel)
    if dry_run:
        logger.info("Would %s %s", "append to" if append else "write", str(p))
        return p
    p.parent.mkdir(parents=True, exist_ok=True)
    with p.open("a" if append else "w", encoding="utf-8") as f:
        f.write(contents)
    if mode is not None:
        os.chmod(p, mode)
    logger.info("Wrote %s", str(p))
    return p


def force_symlink(root: Path | str, rel: str, target: str, *, dry_run: bool = False) -> Path:
    """ln -sf target <root>/<rel>; target is kept as given (absolute inside the tree)."""

    p = in_root(root, rel)
    if dry_run:
        logger.info("Would link %s -> %s", str(p), target)
        return p
    p.parent.mkdir(parents=True, exist_ok=True)
    if p.is_symlink() or p.exists():
        p.unlink()
    os.symlink(target, p)
    return p
