#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Shared TUI pieces (banner, section headers) for the Gentoo Stage3 Downloader.
"""
from __future__ import annotations
import platform
from datetime import date

from rich.console import Console
from rich.panel import Panel

from . import DESCRIPTION, __version__

def get_system_label() -> str:
    """Return a formatted system status string."""
    os_name = platform.system()
    release = platform.release()
    if os_name == "Darwin":
        return f"[dim]Running on macOS {release}[/]"
    return f"[dim]Running on {os_name} {release}[/]"

_ART = (
    '                                           .',
    '     .vir.                                d$b',
    '  .d$$$$$$b.    .cd$$$b.     .d$$$b.   d$$$$$$$$$$b  .d$$$b.',
    '  $$$( )$$$b d$$$()$$$.   d$$$$$$b Q$$$$$$$P$$$P.$$$$$$$b.  .$$$$$$$b.',
    '  Q$$$$$$$$B$$$$$$$$P"  d$$$PQ$$$$b.   $$$$$.   .$$$P\' `$$$ .$$$P\' `$$$',
    '    "$$$$$P Q$$$$$$$b  d$$$P   Q$$$$b  $$$$b   $$$$b..d$$$ $$$$b..d$$$',
    '   d$$$$$P"   "$$$$$$$$ Q$$$     Q$$$$  $$$$$   `Q$$$$$$$P  `Q$$$$$$P',
    '  $$$$$P       `"""""   ""        ""   Q$$$P     "Q$$$P"     "Q$$$P"',
    '  `Q$$P"                                  """',
)

def header_art() -> str:
    return "\n".join(_ART)

def print_banner(console: Console) -> None:
    console.print(f"[magenta]{header_art().rstrip()}[/]", highlight=False)
    console.print(f"[bold magenta]{DESCRIPTION}[/]")
    console.print(f"[dim]Version: {__version__} | Date: {date.today():%Y-%m-%d}[/]")
    console.print(get_system_label())
    console.print()

def section(console: Console, title: str, subtitle: str = "") -> None:
    msg = f"[bold]{title}[/]"
    if subtitle:
        msg += f"\n[dim]{subtitle}[/]"
    console.print(Panel.fit(msg, border_style="magenta"))
