# stage3_dl/core/download.py
from __future__ import annotations
import logging
import os
import shutil
import tempfile
import time
from pathlib import Path
from typing import BinaryIO, Callable, Optional

import requests

from .errors import DownloadExhausted, TransportError
from .http import SESSION
from .utils import remove_quietly, secure_tempfile, url_leaf_name

logger = logging.getLogger(__name__)

ProgressCB = Callable[[int, int], None]  # (downloaded_bytes, total_bytes)
AttemptCB = Callable[[int, int], None]   # (attempt, max_attempts)

MAX_ATTEMPTS = 3
TIMEOUT = 60
RETRY_DELAY = 5

def _stream_into(
    session: requests.Session,
    url: str,
    f: BinaryIO,
    timeout: float,
    on_progress: Optional[ProgressCB],
    chunk_size: int,
) -> int:
    deadline = time.monotonic() + timeout
    with session.get(url, stream=True, timeout=timeout, allow_redirects=True) as r:
        if not 200 <= r.status_code < 300:
            raise TransportError(f"HTTP {r.status_code}")
        total = int(r.headers.get("Content-Length") or 0)
        done = 0
        for chunk in r.iter_content(chunk_size=chunk_size):
            if not chunk:
                continue
            f.write(chunk)
            done += len(chunk)
            if on_progress:
                on_progress(done, total)
            if time.monotonic() > deadline:
                raise TransportError(f"transfer exceeded {timeout:g}s")
        if total and done < total:
            raise TransportError(f"short read: {done}/{total} bytes")
    return done

def fetch(
    url: str,
    destination: Path,
    max_attempts: int = MAX_ATTEMPTS,
    timeout: float = TIMEOUT,
    retry_delay: float = RETRY_DELAY,
    on_progress: Optional[ProgressCB] = None,
    on_attempt: Optional[AttemptCB] = None,
    log: Optional[logging.Logger] = None,
    session: Optional[requests.Session] = None,
    chunk_size: int = 128 * 1024,
) -> Path:
    """
    GET ``url`` into ``destination`` with bounded, fixed-delay retries.
    - Each attempt streams into a fresh 0600 temp file next to the destination
    - The temp file is renamed over ``destination`` only after a complete transfer
    - The temp file is removed on every other exit path, Ctrl+C included
    Raises DownloadExhausted once ``max_attempts`` transport failures have happened.
    """
    log = log or logger
    session = session or SESSION
    destination = Path(destination)
    attempts = max(1, int(max_attempts))
    reason = ""

    for attempt in range(1, attempts + 1):
        if on_attempt:
            on_attempt(attempt, attempts)
        log.info("Downloading %s (attempt %d/%d)", url_leaf_name(url), attempt, attempts)
        fd, tmp = secure_tempfile(destination.parent, prefix=f".{destination.name}.")
        try:
            with os.fdopen(fd, "wb") as f:
                size = _stream_into(session, url, f, timeout, on_progress, chunk_size)
            os.replace(tmp, destination)
            tmp = None
            log.debug("Download finished: %s (%d bytes)", destination, size)
            return destination
        except (requests.RequestException, TransportError) as e:
            reason = str(e) or e.__class__.__name__
            log.warning("Download attempt %d failed: %s", attempt, reason)
        finally:
            remove_quietly(tmp)

        if attempt < attempts:
            log.info("Retrying in %gs...", retry_delay)
            time.sleep(retry_delay)

    log.debug("Giving up on %s after %d attempts.", url_leaf_name(url), attempts)
    raise DownloadExhausted(url, attempts, reason)

def fetch_text(url: str, **kwargs) -> str:
    """fetch() into a private scratch dir, return the body as text, clean up."""
    workdir = Path(tempfile.mkdtemp(prefix="stage3_"))
    try:
        target = fetch(url, workdir / url_leaf_name(url), **kwargs)
        return target.read_text(encoding="utf-8", errors="replace")
    finally:
        shutil.rmtree(workdir, ignore_errors=True)
