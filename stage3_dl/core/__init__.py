# stage3_dl/core/__init__.py
from .arches import ARCHITECTURES, find_arch, listing_url, artifact_url, sidecar_urls
from .config import load_cfg, save_cfg, config_path, log_dir, DEFAULT_BASE_URL
from .download import fetch, fetch_text
from .errors import (
    Stage3Error, TransportError, DownloadExhausted, ParseError, ParseKind,
    ValidationError, ValidationKind, VerificationError, VerificationKind, PreflightError,
)
from .http import SESSION
from .listing import parse_listing
from .models import (
    ArchitectureTarget, ListingEntry, DownloadRequest,
    VerificationResult, VerifyStatus, VerifyMethod,
)
from .pipeline import Stage, Stage3Pipeline, RunSettings, RunOutcome
from .selection import validate_ordinal, prompt_ordinal
from .utils import human_size, sha256_file, url_leaf_name, check_dependencies, check_download_dir
from .verify import ChecksumVerifier, verify

__all__ = [
    "ARCHITECTURES", "find_arch", "listing_url", "artifact_url", "sidecar_urls",
    "load_cfg", "save_cfg", "config_path", "log_dir", "DEFAULT_BASE_URL",
    "fetch", "fetch_text",
    "Stage3Error", "TransportError", "DownloadExhausted", "ParseError", "ParseKind",
    "ValidationError", "ValidationKind", "VerificationError", "VerificationKind",
    "PreflightError",
    "SESSION",
    "parse_listing",
    "ArchitectureTarget", "ListingEntry", "DownloadRequest",
    "VerificationResult", "VerifyStatus", "VerifyMethod",
    "Stage", "Stage3Pipeline", "RunSettings", "RunOutcome",
    "validate_ordinal", "prompt_ordinal",
    "human_size", "sha256_file", "url_leaf_name", "check_dependencies", "check_download_dir",
    "ChecksumVerifier", "verify",
    "setup_logging",
]

# ---- logging setup for the package ----
import logging
import time
from datetime import date
from pathlib import Path
from typing import Optional

LOG_KEEP_DAYS = 7

def _rotate_logs(directory: Path, keep_days: int = LOG_KEEP_DAYS) -> None:
    cutoff = time.time() - keep_days * 86400
    for old in directory.glob("downloads_*.log"):
        try:
            if old.stat().st_mtime < cutoff:
                old.unlink()
        except OSError:
            pass  # best-effort, same as the log dir itself

def setup_logging(verbose: bool = False, log_to: Optional[Path] = None) -> Optional[Path]:
    """Console logging, plus a dated log file under ``log_to`` when given.

    Returns the log file path actually in use (None when console-only).
    """
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(levelname)s %(name)s: %(message)s"
    )
    # quiet down noisy deps
    logging.getLogger("urllib3").setLevel(logging.WARNING)
    logging.getLogger("requests").setLevel(logging.WARNING)

    if log_to is None:
        return None
    try:
        log_to.mkdir(parents=True, exist_ok=True)
        _rotate_logs(log_to)
        path = log_to / f"downloads_{date.today():%Y%m%d}.log"
        fh = logging.FileHandler(path, encoding="utf-8")
    except OSError as e:
        logging.getLogger(__name__).warning("File logging disabled (%s): %s", log_to, e)
        return None
    fh.setLevel(level)
    fh.setFormatter(logging.Formatter("[%(levelname)s] %(asctime)s - %(message)s", "%Y-%m-%d %H:%M:%S"))
    logging.getLogger().addHandler(fh)
    return path
