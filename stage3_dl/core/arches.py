# stage3_dl/core/arches.py
from __future__ import annotations
from typing import List, Optional

from .models import ArchitectureTarget

ARCHITECTURES: List[ArchitectureTarget] = [
    ArchitectureTarget("alpha", "Alpha Architecture"),
    ArchitectureTarget("amd64", "64-bit x86 Architecture"),
    ArchitectureTarget("arm",   "ARM Architecture"),
    ArchitectureTarget("arm64", "64-bit ARM Architecture"),
    ArchitectureTarget("hppa",  "HP PA-RISC Architecture"),
    ArchitectureTarget("ia64",  "Intel Itanium Architecture"),
    ArchitectureTarget("loong", "Loongson MIPS-compatible Architecture"),
    ArchitectureTarget("m68k",  "Motorola 68k Architecture"),
    ArchitectureTarget("mips",  "MIPS Architecture"),
    ArchitectureTarget("ppc",   "PowerPC Architecture"),
    ArchitectureTarget("riscv", "RISC-V Architecture"),
    ArchitectureTarget("s390",  "IBM System z Architecture"),
    ArchitectureTarget("sh",    "SuperH Architecture"),
    ArchitectureTarget("sparc", "SPARC Architecture"),
    ArchitectureTarget("x86",   "32-bit x86 Architecture"),
]

def find_arch(arch_id: str) -> Optional[ArchitectureTarget]:
    key = (arch_id or "").strip().lower()
    for a in ARCHITECTURES:
        if a.id == key: return a
    return None

def listing_url(base_url: str, arch: ArchitectureTarget) -> str:
    return f"{base_url.rstrip('/')}/{arch.id}/autobuilds/latest-stage3.txt"

def artifact_url(base_url: str, arch: ArchitectureTarget, remote_path: str) -> str:
    return f"{base_url.rstrip('/')}/{arch.id}/autobuilds/{remote_path.lstrip('/')}"

def sidecar_urls(artifact: str) -> List[str]:
    """Candidate checksum sidecars, in the order they are probed."""
    return [f"{artifact}.sha256", f"{artifact}.asc", f"{artifact}.DIGESTS"]
