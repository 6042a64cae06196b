"""日期时间识别

把自由文本解析为零个或多个日期时间区间。识别结果只用于字段分类，
从不用来拒绝字段；无法解析的文本返回空列表而不是抛出异常。
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import datetime

from dateutil import parser as date_parser

_MONTHS = (
    "jan|january|feb|february|mar|march|apr|april|may|jun|june|jul|july|aug|august|"
    "sep|sept|september|oct|october|nov|november|dec|december"
)
_WEEKDAYS = (
    "sun|sunday|mon|monday|tue|tues|tuesday|wed|weds|wednesday|thu|thus|thursday|"
    "fri|friday|saturday|sat"
)

# 快速预筛：四位年份、英文月份或星期
DATETIME_HINT_RE = re.compile(
    rf"\b(?:(?:19|20)\d{{2}}|{_MONTHS}|{_WEEKDAYS})\b", re.IGNORECASE
)

# 区间分隔符，两侧必须有空白，避免切开 2024-05-01
_RANGE_SPLIT_RE = re.compile(r"\s+(?:-|–|—|to|until|through)\s+", re.IGNORECASE)

# 两组互不相同的默认值，用来判断哪些部分真正出现在文本中
_DEFAULT_A = datetime(2000, 1, 1, 0, 0)
_DEFAULT_B = datetime(2004, 3, 2, 1, 1)


@dataclass(frozen=True)
class DateTimePoint:
    """区间端点，未出现在文本中的部分为 None"""

    year: int | None = None
    month: int | None = None
    day: int | None = None
    hour: int | None = None
    minute: int | None = None

    def has_month_and_day(self) -> bool:
        return self.month is not None and self.day is not None

    def __str__(self) -> str:
        year = f"{self.year:04d}" if self.year is not None else "????"
        month = f"{self.month:02d}" if self.month is not None else "??"
        day = f"{self.day:02d}" if self.day is not None else "??"
        text = f"{year}-{month}-{day}"
        if self.hour is not None:
            text += f"T{self.hour:02d}:{self.minute or 0:02d}"
        return text


@dataclass(frozen=True)
class DateTimeRange:
    start: DateTimePoint
    end: DateTimePoint | None = None

    def __str__(self) -> str:
        if self.end is None:
            return str(self.start)
        return f"{self.start}/{self.end}"


def format_ranges(ranges: list[DateTimeRange]) -> str:
    return "; ".join(str(r) for r in ranges)


def has_start_month_and_day(ranges: list[DateTimeRange]) -> bool:
    """至少有一个区间的起点同时带有月份和日期"""
    return any(r.start.has_month_and_day() for r in ranges)


class DateTimeRecognizer:
    """基于 dateutil 的日期时间识别器

    Args:
        parserinfo: 可选的 dateutil 语言配置，用于非英文月份/星期名
    """

    def __init__(self, parserinfo: date_parser.parserinfo | None = None):
        self.parserinfo = parserinfo

    def looks_like_datetime(self, text: str) -> bool:
        return bool(DATETIME_HINT_RE.search(text))

    def parse(self, text: str) -> list[DateTimeRange]:
        text = (text or "").strip()
        if not text or not self.looks_like_datetime(text):
            return []

        parts = _RANGE_SPLIT_RE.split(text, maxsplit=1)
        start = self._parse_point(parts[0])
        if start is None:
            return []
        end = self._parse_point(parts[1]) if len(parts) > 1 else None
        if end is not None:
            # 结束端点常常省略月份或年份，如 "May 3 - 5"
            end = DateTimePoint(
                year=end.year if end.year is not None else start.year,
                month=end.month if end.month is not None else start.month,
                day=end.day,
                hour=end.hour,
                minute=end.minute,
            )
        return [DateTimeRange(start=start, end=end)]

    def _parse_point(self, text: str) -> DateTimePoint | None:
        try:
            a = date_parser.parse(text, default=_DEFAULT_A, fuzzy=True, parserinfo=self.parserinfo)
            b = date_parser.parse(text, default=_DEFAULT_B, fuzzy=True, parserinfo=self.parserinfo)
        except (ValueError, OverflowError):
            return None

        def pick(x: int, y: int) -> int | None:
            return x if x == y else None

        hour = pick(a.hour, b.hour)
        minute = pick(a.minute, b.minute)
        if hour is not None and minute is None:
            minute = 0
        point = DateTimePoint(
            year=pick(a.year, b.year),
            month=pick(a.month, b.month),
            day=pick(a.day, b.day),
            hour=hour,
            minute=minute,
        )
        if point.year is None and point.month is None and point.day is None:
            return None
        return point
