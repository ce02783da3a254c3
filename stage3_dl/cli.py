# stage3_dl/cli.py
from __future__ import annotations
import argparse
import logging
import sys
from pathlib import Path

from . import DESCRIPTION, __version__
from .core import (
    PreflightError, RunSettings, check_dependencies, check_download_dir,
    config_path, load_cfg, log_dir, save_cfg, setup_logging,
)
from .ui import console, run_flow

def parse_args(argv=None):
    ap = argparse.ArgumentParser(
        prog="stage3-dl",
        description=DESCRIPTION,
        epilog="Downloads the latest Gentoo Stage3 tarball for a chosen architecture "
               "and verifies it against the published checksum files.",
    )
    ap.add_argument("-v", "--version", action="version", version=f"Gentoo Stage3 Downloader version {__version__}")
    ap.add_argument("-d", "--debug", action="store_true", help="Enable debug mode")
    ap.add_argument("--arch", help="Architecture id or menu number (skip the menu)")
    ap.add_argument("--select", metavar="N", help="Entry number to download (skip the prompt)")
    ap.add_argument("--out", help="Download directory (default: current directory)")
    ap.add_argument("--base-url", help="Mirror releases URL")
    ap.add_argument("--attempts", type=int, help="Download attempts per file")
    ap.add_argument("--timeout", type=float, help="Per-attempt transfer timeout in seconds")
    ap.add_argument("--no-log-file", action="store_true", help="Do not write ~/.log/gentoo-stage3/*.log")
    ap.add_argument("--save-config", action="store_true", help="Remember --out/--base-url/--attempts/--timeout as defaults")
    ap.add_argument("--no-banner", action="store_true", help=argparse.SUPPRESS)
    return ap.parse_args(argv)

def build_settings(args, cfg) -> RunSettings:
    out = args.out or cfg.get("download_dir") or ""
    return RunSettings(
        base_url=args.base_url or cfg["base_url"],
        download_dir=Path(out).expanduser() if out else Path.cwd(),
        max_attempts=args.attempts or int(cfg["max_attempts"]),
        timeout=args.timeout or float(cfg["timeout"]),
        retry_delay=float(cfg["retry_delay"]),
    )

def remember_settings(cfg, settings: RunSettings) -> None:
    cfg.update(
        base_url=settings.base_url,
        download_dir=str(Path(settings.download_dir).resolve()),
        max_attempts=settings.max_attempts,
        timeout=settings.timeout,
    )
    save_cfg(cfg)
    console.print(f"[dim]Saved defaults to {config_path()}[/]")

def main(argv=None) -> int:
    args = parse_args(argv)
    cfg = load_cfg()
    verbose = args.debug or bool(cfg.get("verbose"))
    log_to = None if args.no_log_file or not cfg.get("log_file", True) else log_dir()
    setup_logging(verbose=verbose, log_to=log_to)
    logging.getLogger(__name__).debug("Debug mode enabled.")

    settings = build_settings(args, cfg)
    if args.save_config:
        remember_settings(cfg, settings)
    try:
        check_dependencies()
        check_download_dir(settings.download_dir)
    except PreflightError as e:
        console.print(f"[bold red]Preflight failed:[/] {e}")
        return 1
    return run_flow(settings, arch=args.arch, select=args.select, banner=not args.no_banner)

if __name__ == "__main__":
    sys.exit(main())
