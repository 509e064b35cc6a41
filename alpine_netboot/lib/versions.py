from __future__ import annotations

import logging
import re
from typing import Optional, Tuple

logger = logging.getLogger(__name__)

_MINIROOTFS_RE = re.compile(r"alpine-minirootfs-(\d+\.\d+\.\d+)")
_BRANCH_RE = re.compile(r"v(\d+\.\d+)")


def _key(v: str) -> Tuple[int, ...]:
    return tuple(int(p) for p in v.split("."))


def branch_from_listing(listing: Optional[str]) -> Optional[str]:
    """Pick the highest major.minor named in a release index listing.

    Primary strategy: every alpine-minirootfs-X.Y.Z name, ordered
    numerically, truncated to X.Y. Secondary: the first vX.Y token.
    Returns None when neither matches.
    """

    if not listing:
        return None

    found = _MINIROOTFS_RE.findall(listing)
    if found:
        newest = max(found, key=_key)
        return ".".join(newest.split(".")[:2])

    m = _BRANCH_RE.search(listing)
    if m:
        logger.info("No minirootfs names in listing; using branch token v%s", m.group(1))
        return m.group(1)

    return None


def latest_patch(listing: Optional[str], branch: str) -> int:
    """Highest Z among alpine-minirootfs-<branch>.Z names; 0 if none."""

    if not listing:
        return 0
    pattern = re.compile(rf"alpine-minirootfs-{re.escape(branch)}\.(\d+)")
    patches = [int(p) for p in pattern.findall(listing)]
    return max(patches) if patches else 0


def is_branch(value: str) -> bool:
    return re.fullmatch(r"\d+\.\d+", value or "") is not None
