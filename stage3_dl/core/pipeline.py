# stage3_dl/core/pipeline.py
"""selection -> download -> verify, as an explicit state machine.

    SELECT_ARCHITECTURE -> FETCH_LISTING -> PARSE_LISTING -> PROMPT_SELECTION
        -> DOWNLOAD_ARTIFACT -> VERIFY_ARTIFACT -> DONE

Any failure jumps straight to FAILED; nothing after the failing step runs.
The pipeline never prints: it talks through the injected logger and the
chooser/progress callbacks the UI hands in.
"""
from __future__ import annotations
import logging
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Callable, Dict, List, Optional

from . import download as dl
from .arches import ARCHITECTURES, artifact_url, listing_url, sidecar_urls
from .config import DEFAULT_BASE_URL
from .errors import Stage3Error
from .listing import parse_listing
from .models import (
    ArchitectureTarget, DownloadRequest, ListingEntry, VerificationResult,
)
from .verify import ChecksumVerifier

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FAILED = 1
EXIT_INTERRUPTED = 130

class Stage(Enum):
    SELECT_ARCHITECTURE = "architecture selection"
    FETCH_LISTING = "stage3 list download"
    PARSE_LISTING = "stage3 list parsing"
    PROMPT_SELECTION = "stage3 selection"
    DOWNLOAD_ARTIFACT = "stage3 download"
    VERIFY_ARTIFACT = "download verification"
    DONE = "done"
    FAILED = "failed"

TERMINAL = (Stage.DONE, Stage.FAILED)

NEXT: Dict[Stage, Stage] = {
    Stage.SELECT_ARCHITECTURE: Stage.FETCH_LISTING,
    Stage.FETCH_LISTING: Stage.PARSE_LISTING,
    Stage.PARSE_LISTING: Stage.PROMPT_SELECTION,
    Stage.PROMPT_SELECTION: Stage.DOWNLOAD_ARTIFACT,
    Stage.DOWNLOAD_ARTIFACT: Stage.VERIFY_ARTIFACT,
    Stage.VERIFY_ARTIFACT: Stage.DONE,
}

@dataclass
class RunSettings:
    base_url: str = DEFAULT_BASE_URL
    download_dir: Path = field(default_factory=Path.cwd)
    max_attempts: int = dl.MAX_ATTEMPTS
    timeout: float = dl.TIMEOUT
    retry_delay: float = dl.RETRY_DELAY

@dataclass
class RunOutcome:
    state: Stage = Stage.SELECT_ARCHITECTURE
    failed_stage: Optional[Stage] = None
    error: Optional[BaseException] = None
    interrupted: bool = False
    arch: Optional[ArchitectureTarget] = None
    listing_text: str = ""
    entries: List[ListingEntry] = field(default_factory=list)
    entry: Optional[ListingEntry] = None
    request: Optional[DownloadRequest] = None
    verification: Optional[VerificationResult] = None

    @property
    def exit_code(self) -> int:
        if self.state is Stage.DONE:
            return EXIT_OK
        return EXIT_INTERRUPTED if self.interrupted else EXIT_FAILED

    @property
    def reason(self) -> str:
        if self.interrupted:
            return "interrupted by user"
        return str(self.error) if self.error else ""

ArchChooser = Callable[[List[ArchitectureTarget]], ArchitectureTarget]
EntryChooser = Callable[[List[ListingEntry], ArchitectureTarget], int]   # returns 0-based index

class Stage3Pipeline:
    def __init__(
        self,
        settings: RunSettings,
        choose_arch: ArchChooser,
        choose_entry: EntryChooser,
        verifier: Optional[ChecksumVerifier] = None,
        log: Optional[logging.Logger] = None,
        on_stage: Optional[Callable[[Stage], None]] = None,
        on_progress: Optional[dl.ProgressCB] = None,
        on_attempt: Optional[dl.AttemptCB] = None,
        architectures: Optional[List[ArchitectureTarget]] = None,
    ):
        self.settings = settings
        self.choose_arch = choose_arch
        self.choose_entry = choose_entry
        self.log = log or logger
        self.verifier = verifier or ChecksumVerifier(log=self.log)
        self.on_stage = on_stage
        self.on_progress = on_progress
        self.on_attempt = on_attempt
        self.architectures = architectures or list(ARCHITECTURES)
        self._steps: Dict[Stage, Callable[[RunOutcome], None]] = {
            Stage.SELECT_ARCHITECTURE: self._select_architecture,
            Stage.FETCH_LISTING: self._fetch_listing,
            Stage.PARSE_LISTING: self._parse_listing,
            Stage.PROMPT_SELECTION: self._prompt_selection,
            Stage.DOWNLOAD_ARTIFACT: self._download_artifact,
            Stage.VERIFY_ARTIFACT: self._verify_artifact,
        }

    # ---- steps -----------------------------------------------------------------
    def _fetch_kwargs(self) -> dict:
        s = self.settings
        return dict(
            max_attempts=s.max_attempts, timeout=s.timeout, retry_delay=s.retry_delay,
            log=self.log,
        )

    def _select_architecture(self, out: RunOutcome) -> None:
        out.arch = self.choose_arch(self.architectures)
        self.log.debug("Selected architecture: %s", out.arch.id)

    def _fetch_listing(self, out: RunOutcome) -> None:
        self.log.info("Downloading stage3 file list for %s", out.arch.id)
        out.listing_text = dl.fetch_text(listing_url(self.settings.base_url, out.arch), **self._fetch_kwargs())

    def _parse_listing(self, out: RunOutcome) -> None:
        out.entries = parse_listing(out.listing_text)

    def _prompt_selection(self, out: RunOutcome) -> None:
        idx = self.choose_entry(out.entries, out.arch)
        out.entry = out.entries[idx]
        url = artifact_url(self.settings.base_url, out.arch, out.entry.remote_path)
        out.request = DownloadRequest(url, Path(self.settings.download_dir) / out.entry.filename)

    def _download_artifact(self, out: RunOutcome) -> None:
        self.log.info("Downloading selected stage3 file...")
        dl.fetch(
            out.request.url, out.request.destination,
            on_progress=self.on_progress, on_attempt=self.on_attempt,
            **self._fetch_kwargs(),
        )

    def _verify_artifact(self, out: RunOutcome) -> None:
        out.verification = self.verifier.verify(out.request.destination, sidecar_urls(out.request.url))
        self.log.info("Stage3 file saved as %s", out.request.destination)

    # ---- driver ----------------------------------------------------------------
    def run(self) -> RunOutcome:
        out = RunOutcome()
        while out.state not in TERMINAL:
            if self.on_stage:
                self.on_stage(out.state)
            try:
                self._steps[out.state](out)
            except KeyboardInterrupt:
                self.log.debug("Script interrupted by user.")
                out.failed_stage, out.interrupted = out.state, True
                out.state = Stage.FAILED
                break
            except (Stage3Error, OSError) as e:
                self.log.debug("%s failed: %s", out.state.value.capitalize(), e)
                self.log.debug("Failure detail", exc_info=True)
                out.failed_stage, out.error = out.state, e
                out.state = Stage.FAILED
                break
            out.state = NEXT[out.state]
        if self.on_stage:
            self.on_stage(out.state)
        return out
