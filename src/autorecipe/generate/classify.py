"""字段分类

``href`` / ``src`` 属性是 url；超过阈值比例的示例能解析出带月日的
日期时是日期区间；其余都是文本。
"""

from __future__ import annotations

from ..common.constants import FIELD_TYPE_DATE, FIELD_TYPE_TEXT, FIELD_TYPE_URL
from ..common.logger import get_logger
from ..common.utils.dates import DateTimeRecognizer, has_start_month_and_day
from ..scrape.detail import url_extension
from ..scrape.models import ElementLocation, Field
from .locations import LocationProps
from .path import Path

logger = get_logger(__name__)

URL_ATTRS = frozenset({"href", "src"})


class ExampleCache:
    """一次运行内复用的示例解析结果"""

    def __init__(self, recognizer: DateTimeRecognizer | None = None):
        self.recognizer = recognizer or DateTimeRecognizer()
        self._results: dict[str, bool] = {}

    def is_date(self, example: str) -> bool:
        if example not in self._results:
            ok = False
            if self.recognizer.looks_like_datetime(example):
                ok = has_start_month_and_day(self.recognizer.parse(example))
            self._results[example] = ok
        return self._results[example]


def classify(lp: LocationProps, cache: ExampleCache, threshold: float = 0.25) -> str:
    if lp.attr in URL_ATTRS:
        return FIELD_TYPE_URL
    if lp.examples:
        hits = sum(1 for ex in lp.examples if cache.is_date(ex))
        if hits / len(lp.examples) > threshold:
            logger.debug(f"[Classify] {lp.name}: {hits}/{len(lp.examples)} 个示例是日期")
            return FIELD_TYPE_DATE
    return FIELD_TYPE_TEXT


def build_fields(
    locations: list[LocationProps],
    root: Path,
    cache: ExampleCache,
    threshold: float = 0.25,
) -> list[Field]:
    """把候选位置转为相对于根选择器的字段"""
    fields = []
    for lp in locations:
        location = ElementLocation(
            selector=str(lp.path[len(root):]),
            attr=lp.attr,
            all_nodes=True,
            entire_subtree=True,
        )
        fields.append(Field(name=lp.name, type=classify(lp, cache, threshold), location=[location]))
    return fields


def is_detail_url_location(lp: LocationProps, skip_extensions: list[str]) -> bool:
    """url 类型且示例不全是图片等二进制文件"""
    if lp.attr not in URL_ATTRS:
        return False
    return any(url_extension(ex) not in skip_extensions for ex in lp.examples)
