# stage3_dl/core/errors.py
"""Failure taxonomy for the selection -> download -> verify pipeline.

Every component fails closed by raising one of these. ``SizeOnly`` results
from the verifier are *not* errors and never surface here.
"""
from __future__ import annotations
from enum import Enum
from typing import Optional


class Stage3Error(Exception):
    """Base class for every failure the CLI reports without a traceback."""


class PreflightError(Stage3Error):
    pass


class TransportError(Stage3Error):
    """Timeout, refused connection, non-2xx status or truncated body."""


class DownloadExhausted(TransportError):
    def __init__(self, url: str, attempts: int, reason: str = ""):
        self.url = url
        self.attempts = attempts
        self.reason = reason
        msg = f"failed to download {url} after {attempts} attempt(s)"
        if reason:
            msg += f" ({reason})"
        super().__init__(msg)


class ParseKind(Enum):
    EMPTY_RESULT = "no valid stage3 entries found"


class ParseError(Stage3Error):

    def __init__(self, kind: ParseKind, detail: str = ""):
        self.kind = kind
        super().__init__(f"{kind.value}{': ' + detail if detail else ''}")


class ValidationKind(Enum):
    EMPTY = "input cannot be empty"
    NOT_NUMERIC = "please enter a positive number"
    OUT_OF_RANGE = "selection out of range"
    UNKNOWN_ARCH = "unknown architecture"


class ValidationError(Stage3Error):

    def __init__(self, kind: ValidationKind, count: Optional[int] = None, value: str = ""):
        self.kind = kind
        self.count = count
        msg = kind.value
        if kind is ValidationKind.OUT_OF_RANGE and count is not None:
            msg += f" (1-{count})"
        if value:
            msg += f": {value!r}"
        super().__init__(msg)


class VerificationKind(Enum):
    STAT_FAILED = "could not determine file size"
    EMPTY_FILE = "downloaded file is empty"


class VerificationError(Stage3Error):

    def __init__(self, kind: VerificationKind, path: str = ""):
        self.kind = kind
        self.path = path
        super().__init__(f"{kind.value}{': ' + path if path else ''}")
