from __future__ import annotations

import logging
import shutil
import tarfile
from pathlib import Path
from typing import List

logger = logging.getLogger(__name__)

# Entries the boot-time setup cannot do without.
REQUIRED_ENTRIES = ["etc/answers", "etc/apk/world"]


def stage_etc(rootfs: Path, staging: Path) -> List[str]:
    """Copy <rootfs>/etc into <staging>/etc and make sure required entries made it.

    Dotfiles and symlinks are copied as-is. Any required entry still missing
    after the tree copy is copied individually. Returns warnings; never
    raises for a partial copy.
    """

    warnings: List[str] = []
    src = rootfs / "etc"
    dst = staging / "etc"
    dst.mkdir(parents=True, exist_ok=True)

    if not src.is_dir():
        warnings.append(f"{src} does not exist; overlay will be empty")
        logger.warning(warnings[-1])
        return warnings

    try:
        shutil.copytree(src, dst, symlinks=True, dirs_exist_ok=True)
    except shutil.Error as e:
        failed = e.args[0] if e.args and isinstance(e.args[0], list) else []
        warnings.append(f"Partial copy of {src}: {len(failed)} entries failed")
        logger.warning("%s (%s)", warnings[-1], e)

    for rel in REQUIRED_ENTRIES:
        staged = staging / rel
        source = rootfs / rel
        if staged.exists():
            continue
        if not source.exists():
            if rel == "etc/answers":
                warnings.append(f"{source} missing; unattended setup will not run")
                logger.warning(warnings[-1])
            continue
        try:
            staged.parent.mkdir(parents=True, exist_ok=True)
            shutil.copy2(source, staged)
            warnings.append(f"{rel} was missing from the staging copy; copied it individually")
        except OSError as e:
            warnings.append(f"Could not copy {rel} into staging: {e}")
        logger.warning(warnings[-1])

    return warnings


def pack_apkovl(staging: Path, out_path: Path) -> Path:
    """Write <staging>/etc as a tar.gz whose only top-level entry is etc/."""

    out_path.parent.mkdir(parents=True, exist_ok=True)
    part = out_path.with_name(out_path.name + ".part")
    with tarfile.open(part, "w:gz") as tar:
        tar.add(staging / "etc", arcname="etc")
    part.replace(out_path)
    logger.info("APKOVL created at: %s", out_path)
    return out_path


def extract_rootfs(tarball: Path, dest: Path) -> Path:
    dest.mkdir(parents=True, exist_ok=True)
    logger.info("Extracting %s -> %s", tarball, dest)
    with tarfile.open(tarball, "r:gz") as tar:
        tar.extractall(path=dest, filter="tar")
    return dest
