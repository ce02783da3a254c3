#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Gentoo Stage3 Downloader

What it does
------------
• Lists the latest stage3 tarballs a Gentoo mirror publishes for an architecture
  (latest-stage3.txt), with size and build date.
• Downloads the one you pick, retrying on network errors; the file only appears
  under its final name once the transfer completed.
• Verifies the SHA-256 against whichever sidecar the mirror has
  (.sha256, .asc, .DIGESTS), falling back to a size check.

Install:  pip install .
Run:      python gentoo_stage3_downloader.py
Flags:    python gentoo_stage3_downloader.py --arch amd64 --select 1 --out /mnt/gentoo

License:  MIT
"""
import sys

from stage3_dl.cli import main

if __name__ == "__main__":
    sys.exit(main())
