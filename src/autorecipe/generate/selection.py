"""候选字段选择

批处理模式选择全部候选；交互模式用 rich 表格展示候选并读取要保留的下标。
"""

from __future__ import annotations

from typing import Protocol

from rich.console import Console
from rich.prompt import Prompt
from rich.table import Table

from ..common.logger import console as default_console
from ..common.logger import get_logger
from ..scrape.extract import shorten_string
from .locations import LocationManager, LocationProps

logger = get_logger(__name__)

MAX_EXAMPLES = 4
EXAMPLE_LENGTH = 40
# 累计路径距离每超过该值换一种颜色
DISTANCE_BAND = 5.0
_COLORS = ["cyan", "green", "yellow", "magenta", "blue"]


class FieldSelector(Protocol):
    def select_fields(self, candidates: LocationManager) -> list[LocationProps]: ...


class SelectAll:
    """选择全部候选"""

    def select_fields(self, candidates: LocationManager) -> list[LocationProps]:
        return select_all(candidates)


def select_all(candidates: LocationManager) -> list[LocationProps]:
    for lp in candidates:
        lp.selected = True
    return list(candidates)


def parse_indices(text: str, upper: int) -> list[int]:
    """解析 ``0,2-4`` 形式的下标列表，越界或无法解析的部分被忽略"""
    result: set[int] = set()
    for part in text.replace(" ", "").split(","):
        if not part:
            continue
        lo, sep, hi = part.partition("-")
        try:
            start = int(lo)
            end = int(hi) if sep else start
        except ValueError:
            logger.warning(f"[Selection] 无法解析的下标: {part!r}")
            continue
        result.update(i for i in range(start, end + 1) if 0 <= i < upper)
    return sorted(result)


class RichFieldSelector:
    """在终端中交互选择字段"""

    def __init__(self, console: Console | None = None):
        self.console = console or default_console

    def render(self, candidates: LocationManager) -> Table:
        candidates.set_distances()
        table = Table(title="候选字段", show_lines=False)
        table.add_column("#", justify="right")
        table.add_column("字段名")
        table.add_column("次数", justify="right")
        table.add_column("示例")

        total = 0.0
        for i, lp in enumerate(candidates):
            total += lp.distance
            color = _COLORS[int(total // DISTANCE_BAND) % len(_COLORS)]
            examples = " | ".join(
                shorten_string(ex, EXAMPLE_LENGTH) for ex in lp.examples[:MAX_EXAMPLES]
            )
            table.add_row(str(i), lp.name, str(lp.count), examples, style=color)
        return table

    def select_fields(self, candidates: LocationManager) -> list[LocationProps]:
        if not candidates:
            return []
        self.console.print(self.render(candidates))
        answer = Prompt.ask(
            "输入要保留的字段下标（如 0,2-4），直接回车选择全部",
            console=self.console,
            default="",
        )
        if not answer.strip():
            return select_all(candidates)

        chosen = []
        for i in parse_indices(answer, len(candidates)):
            candidates[i].selected = True
            chosen.append(candidates[i])
        return chosen
