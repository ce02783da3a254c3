# stage3_dl/core/config.py
from __future__ import annotations
import json
import logging
import os
from pathlib import Path
from typing import Any, Dict

logger = logging.getLogger(__name__)

# ---- schema & defaults -------------------------------------------------------
SCHEMA_VERSION = 1
DEFAULT_BASE_URL = "https://distfiles.gentoo.org/releases"
DEFAULT_CFG: Dict[str, Any] = {
    "schema": SCHEMA_VERSION,
    "base_url": DEFAULT_BASE_URL,
    "download_dir": "",     # empty = current working directory
    "max_attempts": 3,
    "timeout": 60,          # seconds, whole transfer per attempt
    "retry_delay": 5,       # seconds between attempts, no backoff
    "log_file": True,       # ~/.log/gentoo-stage3/downloads_YYYYMMDD.log
    "verbose": False,
}

# ---- locations ---------------------------------------------------------------
# Overrides:
#   STAGE3_DL_CONFIG=<full path to config.json>
#   STAGE3_DL_DIR=<directory to place config.json>
def _xdg_config_home() -> Path:
    return Path(os.environ.get("XDG_CONFIG_HOME", Path.home() / ".config"))

def config_dir() -> Path:
    env_dir = os.environ.get("STAGE3_DL_DIR")
    if env_dir:
        return Path(env_dir).expanduser().resolve()
    return (_xdg_config_home() / "stage3_dl").resolve()

def config_path() -> Path:
    env_path = os.environ.get("STAGE3_DL_CONFIG")
    if env_path:
        return Path(env_path).expanduser().resolve()
    return config_dir() / "config.json"

def log_dir() -> Path:
    return Path.home() / ".log" / "gentoo-stage3"

# ---- load / save -------------------------------------------------------------
_SECONDS = ("timeout", "retry_delay")

def _coerce(key: str, value: Any) -> Any:
    """Cast ``value`` to the type of the default; wrong types fall back to the default."""
    default = DEFAULT_CFG[key]
    if isinstance(default, bool):
        return value if isinstance(value, bool) else default
    if isinstance(default, (int, float)):
        try:
            n = (float if key in _SECONDS else int)(value)
        except (TypeError, ValueError):
            logger.warning("Config value %s=%r is not a number; using %r", key, value, default)
            return default
        return n if n >= 0 else default
    return value if isinstance(value, str) else default

def _merge_defaults(cfg: Dict[str, Any]) -> Dict[str, Any]:
    out = DEFAULT_CFG.copy()
    out.update({k: _coerce(k, v) for k, v in (cfg or {}).items() if k in DEFAULT_CFG})
    return out

def load_cfg() -> Dict[str, Any]:
    p = config_path()
    if not p.exists():
        return DEFAULT_CFG.copy()
    try:
        raw = json.loads(p.read_text(encoding="utf-8"))
    except (OSError, ValueError) as e:
        # Corrupt file: keep a .bad copy and start fresh
        logger.warning("Ignoring unreadable config %s: %s", p, e)
        try:
            p.rename(p.with_suffix(".bad.json"))
        except OSError:
            pass
        return DEFAULT_CFG.copy()
    if not isinstance(raw, dict):
        return DEFAULT_CFG.copy()
    return _merge_defaults(raw)

def save_cfg(cfg: Dict[str, Any]) -> None:
    p = config_path()
    p.parent.mkdir(parents=True, exist_ok=True)
    tmp = p.with_suffix(".tmp")
    tmp.write_text(json.dumps(_merge_defaults(cfg), indent=2), encoding="utf-8")
    tmp.replace(p)
