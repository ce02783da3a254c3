# stage3_dl/core/selection.py
from __future__ import annotations
import logging
import re
from typing import Callable, Optional

from .errors import ValidationError, ValidationKind

logger = logging.getLogger(__name__)

_POSITIVE_INT = re.compile(r"^[1-9][0-9]*$")

def validate_ordinal(raw: Optional[str], count: int) -> int:
    """1-based menu choice -> 0-based index into a list of ``count`` items."""
    s = (raw or "").strip()
    if not s:
        raise ValidationError(ValidationKind.EMPTY)
    if s == "0":
        raise ValidationError(ValidationKind.OUT_OF_RANGE, count)
    if not _POSITIVE_INT.match(s):
        raise ValidationError(ValidationKind.NOT_NUMERIC)
    n = int(s)
    if n > count:
        raise ValidationError(ValidationKind.OUT_OF_RANGE, count)
    return n - 1

def prompt_ordinal(
    ask: Callable[[], str],
    count: int,
    retries: int = 3,
    on_invalid: Optional[Callable[[ValidationError], None]] = None,
) -> int:
    """
    Interactive wrapper around validate_ordinal(): re-asks on bad input.
    The last ValidationError propagates once ``retries`` answers were rejected.
    """
    tries = max(1, retries)
    attempt = 0
    while True:
        attempt += 1
        try:
            return validate_ordinal(ask(), count)
        except ValidationError as e:
            logger.debug("Rejected selection (try %d/%d): %s", attempt, tries, e)
            if attempt >= tries:
                raise
            if on_invalid:
                on_invalid(e)
