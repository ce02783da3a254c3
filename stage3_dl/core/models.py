# stage3_dl/core/models.py
from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Optional

@dataclass(frozen=True)
class ArchitectureTarget:
    id: str
    description: str

@dataclass(frozen=True)
class ListingEntry:
    remote_path: str       # relative to <base>/<arch>/autobuilds/
    filename: str
    size_bytes: int
    build_timestamp: str   # 2024-06-15T17:00:14Z

    @property
    def date(self) -> str:
        return self.build_timestamp[:10]

    @property
    def size_mb(self) -> float:
        return round(self.size_bytes / (1024 * 1024), 2)

    @property
    def label(self) -> str:
        return f"{self.filename} [{self.size_mb:.2f} MB|{self.date}]"

@dataclass(frozen=True)
class DownloadRequest:
    url: str
    destination: Path

class VerifyStatus(Enum):
    VERIFIED = "verified"
    SIZE_ONLY = "size-only"
    FAILED = "failed"

class VerifyMethod(Enum):
    NONE = "none"
    SHA256_FILE = ".sha256"
    ASC_SIGNATURE = ".asc"
    DIGESTS_FILE = "DIGESTS"

@dataclass(frozen=True)
class VerificationResult:
    status: VerifyStatus
    method: VerifyMethod = VerifyMethod.NONE
    size_bytes: int = 0
    digest: str = ""
    sidecar_url: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.status is not VerifyStatus.FAILED
