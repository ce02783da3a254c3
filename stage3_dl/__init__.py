# stage3_dl/__init__.py
"""Gentoo Stage3 Downloader: pick, fetch and verify a stage3 tarball."""

__version__ = "1.0.0"

DESCRIPTION = "Gentoo Stage3 Downloader - Simplifying your Gentoo Linux installation"
