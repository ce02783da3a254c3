# stage3_dl/core/verify.py
"""Integrity check of a downloaded artifact against whatever sidecar is published.

Gentoo mirrors have not always shipped the same checksum files for every
arch/release, so instead of assuming one format the verifier fetches the first
sidecar that exists and runs an ordered list of digest extractors over it:

  1. ``.sha256``  ``<digest>  <filename>``
  2. ``.asc``     clear-signed text carrying a SHA-256 digest
  3. ``DIGESTS``  multi-algorithm manifest

A match on any extractor -> VERIFIED. No sidecar, or no extractor matching ->
SIZE_ONLY (degraded, but not an error). Only an unreadable or empty local file
is a hard failure.

The ``.asc`` path runs ``gpg --verify`` when gpg is available, purely as
information: key trust is never checked, so a match there says the digest is
consistent, not that the file is authentic.
"""
from __future__ import annotations
import logging
import re
import subprocess
import tempfile
from pathlib import Path
from typing import Iterable, List, Optional, Protocol, Sequence, Tuple

import requests

from .errors import VerificationError, VerificationKind
from .http import SESSION
from .models import VerificationResult, VerifyMethod, VerifyStatus
from .utils import gpg_binary, remove_quietly, sha256_file

logger = logging.getLogger(__name__)

SIDECAR_TIMEOUT = 15
GPG_TIMEOUT = 30

# Exactly 64 hex chars: keeps SHA512/BLAKE2B (128) digests from matching half-way.
HEX64_RE = re.compile(r"(?<![0-9A-Fa-f])[0-9A-Fa-f]{64}(?![0-9A-Fa-f])")


class DigestStrategy(Protocol):
    """One sidecar format: pull the artifact's SHA-256 out of the sidecar text."""

    method: VerifyMethod

    def try_extract_digest(self, sidecar_text: str, artifact_filename: str) -> Optional[str]:
        ...


def _lines_naming(text: str, filename: str) -> Iterable[str]:
    return (ln for ln in text.splitlines() if filename in ln)


class Sha256FileStrategy:
    method = VerifyMethod.SHA256_FILE

    def try_extract_digest(self, sidecar_text: str, artifact_filename: str) -> Optional[str]:
        for line in _lines_naming(sidecar_text, artifact_filename):
            cols = line.split()
            if cols:
                return cols[0]
        return None


class ArmoredSignatureStrategy:
    method = VerifyMethod.ASC_SIGNATURE

    def __init__(self, run_gpg: bool = True):
        self.run_gpg = run_gpg

    def _gpg_verify(self, text: str) -> None:
        gpg = gpg_binary()
        if not gpg:
            logger.debug("gpg not available; skipping signature check")
            return
        with tempfile.NamedTemporaryFile("w", suffix=".asc", delete=False, encoding="utf-8") as f:
            f.write(text)
            path = Path(f.name)
        try:
            r = subprocess.run(
                [gpg, "--batch", "--verify", str(path)],
                capture_output=True, text=True, timeout=GPG_TIMEOUT,
            )
            if r.returncode == 0:
                logger.debug("gpg --verify accepted the signature (trust not evaluated)")
            else:
                logger.debug("gpg --verify rc=%d: %s", r.returncode, (r.stderr or "").strip()[:200])
        except (OSError, subprocess.SubprocessError) as e:
            logger.debug("gpg --verify could not run: %s", e)
        finally:
            remove_quietly(path)

    def try_extract_digest(self, sidecar_text: str, artifact_filename: str) -> Optional[str]:
        if self.run_gpg and "-----BEGIN PGP" in sidecar_text:
            self._gpg_verify(sidecar_text)
        # Prefer a digest that starts a line (signed body) over one buried in prose.
        for line in sidecar_text.splitlines():
            m = HEX64_RE.match(line.strip())
            if m:
                return m.group(0)
        m = HEX64_RE.search(sidecar_text)
        return m.group(0) if m else None


class DigestsFileStrategy:
    method = VerifyMethod.DIGESTS_FILE

    @staticmethod
    def _names(line: str, filename: str) -> bool:
        # Whole-name match: DIGESTS also lists <file>.CONTENTS.gz and friends.
        return any(t.lstrip("*") == filename or t.endswith("/" + filename) for t in line.split())

    def try_extract_digest(self, sidecar_text: str, artifact_filename: str) -> Optional[str]:
        for line in _lines_naming(sidecar_text, artifact_filename):
            if not self._names(line, artifact_filename):
                continue
            m = HEX64_RE.search(line)
            if m:
                return m.group(0)
        return None


DEFAULT_STRATEGIES: Tuple[DigestStrategy, ...] = (
    Sha256FileStrategy(),
    ArmoredSignatureStrategy(),
    DigestsFileStrategy(),
)


class ChecksumVerifier:
    def __init__(
        self,
        strategies: Sequence[DigestStrategy] = DEFAULT_STRATEGIES,
        session: Optional[requests.Session] = None,
        log: Optional[logging.Logger] = None,
        timeout: float = SIDECAR_TIMEOUT,
    ):
        self.strategies: List[DigestStrategy] = list(strategies)
        self.session = session or SESSION
        self.log = log or logger
        self.timeout = timeout

    def _file_size(self, path: Path) -> int:
        try:
            size = path.stat().st_size
        except OSError as e:
            self.log.error("Could not determine file size of %s: %s", path, e)
            raise VerificationError(VerificationKind.STAT_FAILED, str(path)) from e
        if size == 0:
            self.log.error("Downloaded file is empty: %s", path)
            raise VerificationError(VerificationKind.EMPTY_FILE, str(path))
        return size

    def fetch_sidecar(self, urls: Sequence[str]) -> Tuple[Optional[str], Optional[str]]:
        """(url, text) of the first sidecar answering 2xx, else (None, None)."""
        for url in urls:
            self.log.debug("Trying checksum URL: %s", url)
            try:
                r = self.session.get(url, timeout=self.timeout, allow_redirects=True)
            except requests.RequestException as e:
                self.log.debug("Checksum URL failed: %s (%s)", url, e)
                continue
            if 200 <= r.status_code < 300:
                return url, r.text
            self.log.debug("Checksum URL returned HTTP %d: %s", r.status_code, url)
        return None, None

    def verify(self, local_path: Path, candidate_urls: Sequence[str]) -> VerificationResult:
        path = Path(local_path)
        size = self._file_size(path)

        sidecar_url, text = self.fetch_sidecar(candidate_urls)
        if text is None:
            self.log.warning(
                "Could not download checksum file from any location. "
                "Performing basic size verification only."
            )
            return VerificationResult(VerifyStatus.SIZE_ONLY, VerifyMethod.NONE, size)

        local = sha256_file(path)
        self.log.debug("Local SHA-256: %s", local)
        for strategy in self.strategies:
            remote = strategy.try_extract_digest(text, path.name)
            if remote is None:
                continue
            self.log.debug("Found %s format checksum: %s", strategy.method.value, remote)
            if remote == local:
                self.log.info("Checksum verification successful (%s format).", strategy.method.value)
                return VerificationResult(
                    VerifyStatus.VERIFIED, strategy.method, size, local, sidecar_url
                )

        self.log.warning(
            "Could not verify checksum using any known format. "
            "Performing basic size verification only."
        )
        self.log.info("Basic file integrity check passed. Size: %d bytes", size)
        return VerificationResult(VerifyStatus.SIZE_ONLY, VerifyMethod.NONE, size, local, sidecar_url)


def verify(local_path: Path, candidate_urls: Sequence[str], **kwargs) -> VerificationResult:
    return ChecksumVerifier(**kwargs).verify(local_path, candidate_urls)
