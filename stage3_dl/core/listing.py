# stage3_dl/core/listing.py
"""Parser for ``latest-stage3.txt``.

The index is published PGP clear-signed, e.g.::

    -----BEGIN PGP SIGNED MESSAGE-----
    Hash: SHA512

    # Latest as of Sat, 15 Jun 2024 17:00:14 +0000
    # ts=1718470814
    20240615T170014Z/stage3-amd64-openrc-20240615T170014Z.tar.xz 274382931
    -----BEGIN PGP SIGNATURE-----
    ...
"""
from __future__ import annotations
import logging
import posixpath
import re
from typing import Iterable, List, Optional

from .errors import ParseError, ParseKind
from .models import ListingEntry

logger = logging.getLogger(__name__)

ENTRY_RE = re.compile(r"^([0-9]{8}T[0-9]{6}Z/stage3-\S+)")
_STAMP_RE = re.compile(r"^([0-9]{4})([0-9]{2})([0-9]{2})T([0-9]{2})([0-9]{2})([0-9]{2})Z")

def _skip(line: str) -> bool:
    return not line.strip() or line.startswith("#") or line.startswith("-----")

def _timestamp(remote_path: str) -> str:
    y, mo, d, h, mi, s = _STAMP_RE.match(remote_path).groups()
    return f"{y}-{mo}-{d}T{h}:{mi}:{s}Z"

def parse_line(line: str) -> Optional[ListingEntry]:
    """One data line -> entry, or None when the line is not a stage3 record."""
    if _skip(line):
        return None
    m = ENTRY_RE.match(line)
    if not m:
        return None
    cols = line.split()
    if len(cols) < 2 or not (cols[1].isascii() and cols[1].isdigit()):
        return None
    path = m.group(1)
    return ListingEntry(
        remote_path=path,
        filename=posixpath.basename(path),
        size_bytes=int(cols[1]),
        build_timestamp=_timestamp(path),
    )

def parse_lines(lines: Iterable[str]) -> List[ListingEntry]:
    out: List[ListingEntry] = []
    for line in lines:
        e = parse_line(line.rstrip("\r\n"))
        if e is not None:
            out.append(e)
    return out

def parse_listing(raw_text: str) -> List[ListingEntry]:
    """Entries in published order; raises ParseError when nothing usable is found."""
    entries = parse_lines((raw_text or "").splitlines())
    if not entries:
        raise ParseError(ParseKind.EMPTY_RESULT)
    logger.debug("Parsed %d stage3 entries", len(entries))
    return entries
