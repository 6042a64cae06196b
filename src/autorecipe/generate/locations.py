"""候选位置模型

分析器为每个文本节点和每个白名单属性产生一个 ``LocationProps``。
压缩（squash）把同一列表中不同记录的相同位置合并为一个代表位置，
过滤去掉出现次数不足或取值不变的位置，最后按路径哈希命名。
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace

from ..common.exceptions import FieldNameCollisionError
from ..common.logger import get_logger
from ..scrape.fieldname import compute_field_hash, generate_field_name
from .path import Path

logger = get_logger(__name__)


@dataclass
class LocationProps:
    """一个候选位置"""

    path: Path
    examples: list[str] = field(default_factory=list)
    attr: str = ""  # 空字符串表示文本内容
    text_index: int = 0  # 元素内第几个子节点
    count: int = 1  # 合并的实例数
    name: str = ""
    pivot: int = 0  # 该下标之前的伪类不参与泛化比较
    selected: bool = False
    distance: float = 0.0  # 与上一个位置的路径距离，仅用于交互展示
    origin_path: Path | None = None  # 泛化前的原始路径

    def __post_init__(self) -> None:
        self.path = Path(self.path)
        if self.origin_path is None:
            self.origin_path = self.path

    def copy(self) -> "LocationProps":
        return replace(self, examples=list(self.examples))

    def debug_string(self) -> str:
        return (
            f"{self.name or '-'} path={str(self.path)!r} attr={self.attr!r} "
            f"text_index={self.text_index} count={self.count} pivot={self.pivot} "
            f"examples={self.examples[:3]!r}"
        )


class LocationManager(list):
    """有序的候选位置集合"""

    def sort_by_name(self) -> None:
        self.sort(key=lambda lp: lp.name)

    def names(self) -> list[str]:
        return [lp.name for lp in self]

    def set_distances(self) -> None:
        """记录每个位置与前一个位置的路径距离"""
        prev: LocationProps | None = None
        for lp in self:
            lp.distance = 0.0 if prev is None else float(lp.path.distance(prev.path))
            prev = lp

    def debug_lines(self) -> list[str]:
        return [lp.debug_string() for lp in self]


# ============================================================================
# 压缩
# ============================================================================


def strip_nth_child(lp: LocationProps, min_occ: int) -> None:
    """删除序号不小于 ``min_occ`` 的 ``nth-child`` 伪类

    从路径尾部向头部扫描（``min_occ`` 小于 6 时跳过最后一个节点）。
    发生删除的最深位置记为 pivot，比它浅的位置的伪类全部清除。
    """
    sub = 2 if min_occ < 6 else 1
    nodes = list(lp.path)
    i_strip = 0
    for i in range(len(nodes) - sub, -1, -1):
        if i < i_strip:
            if nodes[i].pseudo_classes:
                nodes[i] = nodes[i].with_pseudo()
            continue
        k = nodes[i].nth_child()
        if k is not None and k >= min_occ:
            nodes[i] = nodes[i].with_pseudo()
            i_strip = i
    lp.path = Path(nodes)
    if i_strip > 0:
        lp.pivot = i_strip


def try_merge(rep: LocationProps, new: LocationProps) -> bool:
    """尝试把 ``new`` 合并进代表位置 ``rep``

    合并条件：文本序号、属性、路径长度和每一层标签都相同；
    pivot 之后的伪类与 ``new`` 的原始伪类一致；
    每一层要么都没有类名，要么类名有交集（合并后保留交集）。
    """
    if rep.text_index != new.text_index or rep.attr != new.attr:
        return False
    if len(rep.path) != len(new.path):
        return False

    origin = new.origin_path
    merged = []
    for i, (old, cur) in enumerate(zip(rep.path, new.path)):
        if old.tag != cur.tag:
            return False
        expected = origin[i].pseudo_classes if i > rep.pivot else ()
        if old.pseudo_classes != expected:
            return False
        if old.classes or cur.classes:
            common = tuple(c for c in old.classes if c in cur.classes)
            if not common:
                return False
            merged.append(old.with_classes(common))
        else:
            merged.append(old)

    rep.path = Path(merged)
    rep.count += new.count
    rep.examples.extend(new.examples)
    return True


def squash(locations: list[LocationProps], min_occ: int) -> LocationManager:
    """合并近似重复的候选位置

    按发现顺序的逆序处理，返回的代表位置保持发现顺序。输入不会被修改，
    对结果再次调用（相同 ``min_occ``）不会发生新的合并。
    """
    kept: list[LocationProps] = []
    for lp in reversed(locations):
        for rep in kept:
            if try_merge(rep, lp):
                break
        else:
            rep = lp.copy()
            strip_nth_child(rep, min_occ)
            kept.append(rep)
    kept.reverse()
    return LocationManager(kept)


# ============================================================================
# 过滤
# ============================================================================


def filter_below_min_count(locations: list[LocationProps], min_count: int) -> LocationManager:
    return LocationManager(lp for lp in locations if lp.count >= min_count)


def filter_static_fields(locations: list[LocationProps]) -> LocationManager:
    """去掉所有示例取值都相同的位置"""
    result = LocationManager()
    for lp in locations:
        if any(ex != lp.examples[0] for ex in lp.examples[1:]):
            result.append(lp)
        else:
            logger.debug(f"[Filter] 丢弃静态字段: {str(lp.path)!r} attr={lp.attr!r}")
    return result


# ============================================================================
# 命名
# ============================================================================


def set_field_names(locations: LocationManager) -> None:
    """为每个位置生成字段名并按名称排序

    Raises:
        FieldNameCollisionError: 两条不同的路径得到相同哈希
    """
    seen: dict[str, str] = {}
    for lp in locations:
        path_str = str(lp.path).strip()
        field_hash = compute_field_hash(path_str)
        other = seen.setdefault(field_hash, path_str)
        if other != path_str:
            raise FieldNameCollisionError(field_hash, path_str, other)
        lp.name = generate_field_name(path_str, lp.attr, lp.text_index)
    locations.sort_by_name()
