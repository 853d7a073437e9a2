# backend/utils/work_hours.py
"""
Daily work-hour rules: up to two entry/exit shifts per day, the last one may
run past midnight.
"""
from datetime import time
from typing import Optional

from utils.errors import DomainError, ErrorKind

_DAY_MINUTES = 24 * 60


def _minutes(t: time) -> int:
    return t.hour * 60 + t.minute


def shift_minutes(entry: Optional[time], exit_: Optional[time]) -> int:
    """Length of a closed shift; an exit earlier than the entry is on the next day."""
    if entry is None or exit_ is None:
        return 0
    return (_minutes(exit_) - _minutes(entry)) % _DAY_MINUTES


def check_shifts(entry_1, exit_1, entry_2, exit_2) -> None:
    if exit_1 is not None and entry_1 is None:
        raise DomainError(ErrorKind.INVALID_SHIFT, "First exit without an entry")
    if exit_2 is not None and entry_2 is None:
        raise DomainError(ErrorKind.INVALID_SHIFT, "Second exit without an entry")
    if entry_2 is None:
        return
    if entry_1 is None or exit_1 is None:
        raise DomainError(ErrorKind.INVALID_SHIFT, "Second shift needs a closed first shift")
    if exit_1 < entry_1:
        raise DomainError(ErrorKind.INVALID_SHIFT, "Only the last shift may run past midnight")
    if entry_2 < exit_1:
        raise DomainError(ErrorKind.INVALID_SHIFT, "Second shift starts before the first one ends")


def worked_minutes(log) -> int:
    return shift_minutes(log.entry_time_1, log.exit_time_1) + shift_minutes(log.entry_time_2, log.exit_time_2)
