"""通用工具模块"""

from .dates import DateTimeRange, DateTimeRecognizer, has_start_month_and_day
from .delay import get_random_delay
from .slug import domain_label, make_url_slug, trim_url_scheme

__all__ = [
    "DateTimeRange",
    "DateTimeRecognizer",
    "has_start_month_and_day",
    "get_random_delay",
    "domain_label",
    "make_url_slug",
    "trim_url_scheme",
]
