"""日期时间识别单元测试"""

from autorecipe.common.utils.dates import (
    DateTimePoint,
    DateTimeRange,
    DateTimeRecognizer,
    format_ranges,
    has_start_month_and_day,
)


class TestDateTimePoint:
    """端点格式化测试"""

    def test_full(self):
        assert str(DateTimePoint(2024, 5, 3, 19, 30)) == "2024-05-03T19:30"

    def test_unknown_year(self):
        assert str(DateTimePoint(None, 5, 3)) == "????-05-03"

    def test_range(self):
        r = DateTimeRange(DateTimePoint(2024, 5, 3), DateTimePoint(2024, 5, 5))
        assert str(r) == "2024-05-03/2024-05-05"
        assert format_ranges([r, r]) == "2024-05-03/2024-05-05; 2024-05-03/2024-05-05"


class TestDateTimeRecognizer:
    """日期识别测试"""

    def setup_method(self):
        self.recognizer = DateTimeRecognizer()

    def test_looks_like_datetime(self):
        assert self.recognizer.looks_like_datetime("Fri, June 14")
        assert self.recognizer.looks_like_datetime("since 1999")
        assert not self.recognizer.looks_like_datetime("Alpha Bravo")

    def test_date(self):
        ranges = self.recognizer.parse("May 3, 2024")
        assert len(ranges) == 1
        start = ranges[0].start
        assert (start.year, start.month, start.day) == (2024, 5, 3)
        assert start.hour is None
        assert ranges[0].end is None

    def test_date_without_year(self):
        start = self.recognizer.parse("Saturday, May 3")[0].start
        assert start.year is None
        assert (start.month, start.day) == (5, 3)

    def test_time(self):
        start = self.recognizer.parse("June 14, 2024 7:30 PM")[0].start
        assert (start.hour, start.minute) == (19, 30)

    def test_range(self):
        ranges = self.recognizer.parse("May 3 2024 to May 5 2024")
        assert str(ranges[0]) == "2024-05-03/2024-05-05"

    def test_iso_date_not_split(self):
        start = self.recognizer.parse("2024-05-01")[0].start
        assert (start.year, start.month, start.day) == (2024, 5, 1)

    def test_no_hint(self):
        assert self.recognizer.parse("Alpha") == []

    def test_empty(self):
        assert self.recognizer.parse("") == []

    def test_year_only(self):
        ranges = self.recognizer.parse("2024")
        assert not has_start_month_and_day(ranges)

    def test_unparseable_returns_list(self):
        assert isinstance(self.recognizer.parse("Mon 99:99"), list)
