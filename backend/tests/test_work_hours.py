"""Daily shift rules and worked-time arithmetic."""
from datetime import time
from types import SimpleNamespace

import pytest

from utils.errors import DomainError, ErrorKind
from utils.work_hours import check_shifts, shift_minutes, worked_minutes


class TestShiftMinutes:

    def test_day_shift(self):
        assert shift_minutes(time(8, 0), time(12, 30)) == 270

    def test_overnight_shift_ends_next_day(self):
        assert shift_minutes(time(22, 0), time(6, 0)) == 480

    def test_open_shift_counts_nothing(self):
        assert shift_minutes(time(8, 0), None) == 0
        assert shift_minutes(None, None) == 0

    def test_worked_minutes_sums_both_shifts(self):
        log = SimpleNamespace(entry_time_1=time(7, 0), exit_time_1=time(11, 0),
                              entry_time_2=time(12, 0), exit_time_2=time(17, 15))
        assert worked_minutes(log) == 240 + 315


class TestCheckShifts:

    @pytest.mark.parametrize("times", [
        (time(8), time(12), time(13), time(17)),
        (time(8), None, None, None),
        (None, None, None, None),
        (time(8), time(12), time(20), time(4)),
        (time(22), time(6), None, None),
    ])
    def test_valid_days(self, times):
        check_shifts(*times)

    @pytest.mark.parametrize("times", [
        (None, time(12), None, None),
        (time(8), time(12), None, time(17)),
        (time(8), None, time(13), time(17)),
        (time(22), time(2), time(3), time(6)),
        (time(8), time(12), time(11), time(17)),
    ])
    def test_invalid_days(self, times):
        with pytest.raises(DomainError) as exc:
            check_shifts(*times)
        assert exc.value.kind == ErrorKind.INVALID_SHIFT
