#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
UI layer for the Gentoo Stage3 Downloader

- Banner + architecture menu
- Stage3 listing table and selection prompt (re-asks on bad input)
- Download progress bar, one task per attempt
- Verification summary and a single-line diagnostic on failure
"""

from __future__ import annotations
import logging
from pathlib import Path
from typing import List, Optional

from rich.console import Console
from rich.panel import Panel
from rich.prompt import Prompt
from rich.table import Table
from rich import box
from rich.progress import (
    BarColumn, Progress, TextColumn, TimeRemainingColumn, TransferSpeedColumn
)

from .core import (
    ArchitectureTarget,
    ListingEntry,
    RunOutcome,
    RunSettings,
    Stage,
    Stage3Pipeline,
    ValidationError,
    ValidationKind,
    VerifyMethod,
    VerifyStatus,
    find_arch,
    human_size,
    prompt_ordinal,
    validate_ordinal,
)
from .tui import print_banner, section

console = Console()
log = logging.getLogger("stage3_dl")

PROMPT_RETRIES = 3

# ────────────────────────── Choosers ──────────────────────────
def _ask(question: str) -> str:
    try:
        return Prompt.ask(question, console=console)
    except EOFError:
        return ""

def _complain(e: ValidationError) -> None:
    console.print(f"[red]Invalid input:[/] {e}")

def render_architectures(arches: List[ArchitectureTarget]) -> None:
    table = Table(title="Available architectures", header_style="bold magenta", box=box.SIMPLE_HEAVY)
    table.add_column("#", justify="right")
    table.add_column("Arch", style="bold")
    table.add_column("Description", style="dim")
    for i, a in enumerate(arches, 1):
        table.add_row(str(i), a.id, a.description)
    console.print(table)

def make_arch_chooser(preset: Optional[str] = None):
    def choose(arches: List[ArchitectureTarget]) -> ArchitectureTarget:
        if preset:
            if preset.strip().isdigit():
                return arches[validate_ordinal(preset, len(arches))]
            a = find_arch(preset)
            if a is None or a not in arches:
                raise ValidationError(ValidationKind.UNKNOWN_ARCH, value=preset)
            return a
        render_architectures(arches)
        idx = prompt_ordinal(
            lambda: _ask("[bold magenta]Please select an architecture by number[/]"),
            len(arches), PROMPT_RETRIES, on_invalid=_complain,
        )
        return arches[idx]
    return choose

def render_entries(entries: List[ListingEntry], arch: Optional[ArchitectureTarget] = None) -> None:
    title = f"Available Stage3 Entries for {arch.id}" if arch else "Available Stage3 Entries"
    table = Table(title=title, header_style="bold magenta", box=box.SIMPLE_HEAVY)
    table.add_column("#", justify="right")
    table.add_column("File", overflow="fold")
    table.add_column("Size", justify="right", no_wrap=True)
    table.add_column("Date", no_wrap=True)
    for i, e in enumerate(entries, 1):
        table.add_row(str(i), e.filename, f"{e.size_mb:.2f} MB", e.date)
    console.print(table)

def make_entry_chooser(preset: Optional[str] = None):
    def choose(entries: List[ListingEntry], arch: ArchitectureTarget) -> int:
        render_entries(entries, arch)
        if preset is not None:
            return validate_ordinal(preset, len(entries))
        return prompt_ordinal(
            lambda: _ask(f"[bold magenta]Select an entry (1-{len(entries)})[/]"),
            len(entries), PROMPT_RETRIES, on_invalid=_complain,
        )
    return choose

# ────────────────────────── Progress ──────────────────────────
class TransferDisplay:
    """Rich progress bar fed by the fetcher callbacks; lives only during DOWNLOAD_ARTIFACT."""

    def __init__(self, console_: Console):
        self.console = console_
        self.progress: Optional[Progress] = None
        self.task_id = None

    def stage(self, st: Stage) -> None:
        if st is Stage.DOWNLOAD_ARTIFACT:
            self.progress = Progress(
                TextColumn("[bold]Downloading[/] {task.description}", justify="left"),
                BarColumn(),
                TransferSpeedColumn(),
                TextColumn("{task.completed:>12.0f} B"),
                TimeRemainingColumn(),
                console=self.console,
                transient=False,
            )
            self.progress.start()
        else:
            self.close()

    def attempt(self, n: int, total: int) -> None:
        if not self.progress:
            return
        if self.task_id is not None:
            self.progress.remove_task(self.task_id)
        self.task_id = self.progress.add_task(f"attempt {n}/{total}", total=None)

    def update(self, done: int, total: int) -> None:
        if self.progress and self.task_id is not None:
            self.progress.update(self.task_id, completed=done, total=total or None)

    def close(self) -> None:
        if self.progress:
            self.progress.stop()
        self.progress, self.task_id = None, None

# ────────────────────────── Summary ──────────────────────────
_METHOD_LABEL = {
    VerifyMethod.SHA256_FILE: ".sha256 file",
    VerifyMethod.ASC_SIGNATURE: "digest found in signed .asc file (signature not trust-checked)",
    VerifyMethod.DIGESTS_FILE: "DIGESTS manifest",
}

def show_outcome(out: RunOutcome) -> None:
    if out.state is not Stage.DONE:
        stage = out.failed_stage.value if out.failed_stage else "run"
        console.print(f"[bold red]{stage.capitalize()} failed:[/] {out.reason}")
        return
    v = out.verification
    if v.status is VerifyStatus.VERIFIED:
        check = f"[green]SHA-256 verified[/] via {_METHOD_LABEL[v.method]}"
    else:
        check = "[yellow]size check only[/] (no usable checksum published)"
    console.print(Panel(
        f"[bold cyan]File:[/] {out.entry.filename}\n"
        f"[bold cyan]Date:[/] {out.entry.date}\n"
        f"[bold cyan]Size:[/] {human_size(v.size_bytes)} ({v.size_bytes} bytes)\n"
        f"[bold cyan]Integrity:[/] {check}\n"
        f"[bold cyan]Saved to:[/] {out.request.destination}",
        title="Stage3 ready",
        border_style="green",
        expand=False,
    ))

# ────────────────────────── Flow ──────────────────────────
def run_flow(
    settings: RunSettings,
    arch: Optional[str] = None,
    select: Optional[str] = None,
    banner: bool = True,
) -> int:
    if banner:
        print_banner(console)
    section(console, "Download target", f"Mirror: {settings.base_url}\nSaving to: {Path(settings.download_dir).resolve()}")

    display = TransferDisplay(console)
    pipeline = Stage3Pipeline(
        settings,
        choose_arch=make_arch_chooser(arch),
        choose_entry=make_entry_chooser(select),
        log=log,
        on_stage=display.stage,
        on_progress=display.update,
        on_attempt=display.attempt,
    )
    try:
        out = pipeline.run()
    finally:
        display.close()
    show_outcome(out)
    return out.exit_code
