from datetime import datetime, timezone

import pytest

from utils.timestamps import RenderClock, friendly_date, ordinal_suffix


class TestRenderClock:

    def test_pretty_in_display_timezone(self, clock):
        assert clock.pretty() == "Wednesday 27th August 2025 at 6.17pm"

    def test_file_stamp(self, clock):
        assert clock.file_stamp() == "20250827-1817"

    def test_iso_is_utc(self, clock):
        assert clock.iso() == "2025-08-27T17:17:00+00:00"

    def test_naive_datetime_treated_as_utc(self):
        clock = RenderClock("UTC", fixed=datetime(2025, 1, 1, 0, 5))
        assert clock.pretty() == "Wednesday 1st January 2025 at 12.05am"

    def test_midday(self):
        clock = RenderClock("UTC", fixed=datetime(2025, 3, 22, 12, 0, tzinfo=timezone.utc))
        assert clock.pretty() == "Saturday 22nd March 2025 at 12.00pm"


@pytest.mark.parametrize("day,suffix", [
    (1, "st"), (2, "nd"), (3, "rd"), (4, "th"), (11, "th"), (12, "th"), (13, "th"),
    (21, "st"), (22, "nd"), (23, "rd"), (30, "th"), (31, "st"),
])
def test_ordinal_suffix(day, suffix):
    assert ordinal_suffix(day) == suffix


class TestFriendlyDate:

    def test_iso_date(self):
        assert friendly_date("2025-05-15") == "Thursday, 15 May 2025"

    def test_datetime_string_uses_date_part(self):
        assert friendly_date("2025-05-15T23:30:00Z") == "Thursday, 15 May 2025"

    def test_unparseable_returned_unchanged(self):
        assert friendly_date("TBC") == "TBC"
        assert friendly_date(None) == ""
