from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional, Sequence

import requests
from tqdm import tqdm

from .. import __version__

logger = logging.getLogger(__name__)

CHUNK_SIZE = 8192


class FetchError(RuntimeError):
    """Every candidate URL for an artifact failed."""

    def __init__(self, dest: Path, attempts: Sequence[str]):
        self.dest = dest
        self.attempts = list(attempts)
        super().__init__(f"Could not fetch {dest.name}; tried: {', '.join(self.attempts)}")


def new_session() -> requests.Session:
    s = requests.Session()
    s.headers["User-Agent"] = f"alpine-netboot/{__version__}"
    return s


def fetch_text(session: requests.Session, url: str, *, timeout: float = 60) -> Optional[str]:
    """Best-effort GET of a release index listing. Never raises."""

    logger.info("GET %s", url)
    try:
        r = session.get(url, timeout=timeout)
        r.raise_for_status()
    except requests.exceptions.RequestException as e:
        logger.warning("Could not read %s: %s", url, e)
        return None
    return r.text


def download(
    session: requests.Session,
    url: str,
    dest: Path,
    *,
    timeout: float = 60,
    dry_run: bool = False,
) -> Path:
    """Stream url into dest. HTTP and connection errors propagate.

    Data lands in a .part file first so a failed transfer never leaves a
    truncated artifact under the final name.
    """

    if dry_run:
        logger.info("Would download %s -> %s", url, dest)
        return dest

    logger.info("Downloading %s -> %s", url, dest)
    dest.parent.mkdir(parents=True, exist_ok=True)
    part = dest.with_name(dest.name + ".part")

    with session.get(url, stream=True, timeout=timeout) as r:
        r.raise_for_status()
        total = int(r.headers.get("content-length", 0) or 0)
        try:
            with part.open("wb") as f, tqdm(
                total=total or None,
                unit="B",
                unit_scale=True,
                desc=dest.name,
                ncols=80,
                disable=not total,
            ) as bar:
                for chunk in r.iter_content(chunk_size=CHUNK_SIZE):
                    f.write(chunk)
                    bar.update(len(chunk))
        except BaseException:
            part.unlink(missing_ok=True)
            raise

    part.replace(dest)
    return dest


def download_first(
    session: requests.Session,
    urls: Sequence[str],
    dest: Path,
    *,
    timeout: float = 60,
    dry_run: bool = False,
) -> str:
    """Try each URL in order, saving the first that succeeds to dest.

    Returns the URL that worked; raises FetchError if none did.
    """

    tried = []
    for url in urls:
        tried.append(url)
        try:
            download(session, url, dest, timeout=timeout, dry_run=dry_run)
            return url
        except requests.exceptions.RequestException as e:
            logger.warning("Fetch failed for %s: %s", url, e)
    raise FetchError(dest, tried)
