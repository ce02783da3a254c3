# stage3_dl/core/utils.py
from __future__ import annotations
import hashlib, logging, math, os, shutil, tempfile, urllib.parse
from pathlib import Path
from typing import Optional, Tuple

from .errors import PreflightError

logger = logging.getLogger(__name__)

def human_size(n: Optional[int]) -> str:
    if not n or n <= 0: return "?"
    units = ["B","KB","MB","GB","TB"]
    i = min(int(math.floor(math.log(n, 1024))), len(units) - 1)
    return f"{n/(1024**i):.2f} {units[i]}"

def url_leaf_name(u: str) -> str:
    return urllib.parse.unquote((u or "").split("?")[0].split("/")[-1]) or "download.bin"

def sha256_file(path: Path) -> str:
    h = hashlib.sha256()
    with path.open("rb") as f:
        for chunk in iter(lambda: f.read(1024*1024), b""):
            h.update(chunk)
    return h.hexdigest()

def secure_tempfile(directory: Path, prefix: str = "stage3_") -> Tuple[int, Path]:
    """mkstemp in ``directory`` so the final rename stays on one filesystem; mode 0600."""
    directory.mkdir(parents=True, exist_ok=True)
    fd, name = tempfile.mkstemp(prefix=prefix, suffix=".part", dir=str(directory))
    os.chmod(name, 0o600)
    return fd, Path(name)

def remove_quietly(path: Optional[Path]) -> None:
    if path is None: return
    try:
        path.unlink()
    except FileNotFoundError:
        pass
    except OSError as e:
        logger.warning("Could not remove temporary file %s: %s", path, e)

def gpg_binary() -> Optional[str]:
    return shutil.which("gpg") or shutil.which("gpg2")

def check_dependencies() -> None:
    """Report optional external tools; none of them are required."""
    if gpg_binary():
        logger.debug("gpg found; signed sidecars will be passed through gpg --verify")
    else:
        logger.debug("gpg not installed; signature check on .asc sidecars will be skipped")

def check_download_dir(path: Path) -> Path:
    """Create ``path`` if needed; PreflightError when it cannot hold the download."""
    if path.exists() and not path.is_dir():
        raise PreflightError(f"download location is not a directory: {path}")
    try:
        path.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise PreflightError(f"cannot create download directory {path}: {e}") from e
    if not os.access(path, os.W_OK):
        raise PreflightError(f"download directory is not writable: {path}")
    return path
