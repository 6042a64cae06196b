"""根选择器解析

先按路径逐层比较得到候选位置的公共前缀，再对照实际页面回退（pullback），
让选择器的匹配数与期望的记录数一致。
"""

from __future__ import annotations

from ..common.config import PullbackConfig
from ..common.logger import get_logger
from ..fetch.document import Document
from .locations import LocationProps
from .path import Path

logger = get_logger(__name__)


def find_shared_prefix(locations: list[LocationProps]) -> tuple[Path, int]:
    """返回公共前缀和期望出现次数

    逐个下标比较所有路径：某条路径已到最后一个节点，或该位置的节点不同，
    就返回此前的前缀，期望次数取触发停止的那个位置的出现次数。
    单个位置时得到它的路径去掉最后一个节点。
    """
    if not locations:
        return Path(), 0
    i = 0
    while True:
        first = None
        for lp in locations:
            if i + 1 >= len(lp.path):
                return lp.path[:i], lp.count
            if first is None:
                first = lp.path[i]
            elif not first.same_structure(lp.path[i]):
                return lp.path[:i], lp.count
        i += 1


def pull_back_root_selector(
    prefix: Path,
    expected: int,
    document: Document,
    settings: PullbackConfig | None = None,
) -> Path:
    """对照实际页面调整根选择器

    首先在不短于 ``min_length`` 的祖先中，找匹配数是期望数整数倍的选择器，
    返回最深的一个以 ``preferred_tag`` 结尾且倍数小于 ``max_ratio`` 的。
    否则逐层缩短：匹配数等于期望数时返回；不能整除时返回上一个（更长的）选择器。
    """
    settings = settings or PullbackConfig()
    if not prefix or expected <= 0:
        return prefix

    candidates: list[tuple[Path, int]] = []
    test = prefix
    while len(test) > settings.min_length:
        n = document.count(str(test))
        if n > 0 and n % expected == 0:
            candidates.append((test, n))
        test = test[:-1]

    for path, n in candidates:
        if path.last().tag == settings.preferred_tag and n // expected < settings.max_ratio:
            logger.debug(
                f"[Root] 回退到 {settings.preferred_tag} 结尾的选择器: {str(path)!r} "
                f"(匹配 {n}, 期望 {expected})"
            )
            return path

    ret = prefix
    prev = ret
    while True:
        n = document.count(str(ret))
        if n == expected:
            return ret
        if n % expected != 0:
            return prev
        if not ret:
            break
        prev = ret
        ret = ret[:-1]
    return ret


def find_root(
    locations: list[LocationProps],
    document: Document | None = None,
    settings: PullbackConfig | None = None,
) -> Path:
    """公共前缀，提供页面时再做回退调整"""
    prefix, expected = find_shared_prefix(locations)
    if document is None:
        return prefix
    root = pull_back_root_selector(prefix, expected, document, settings)
    if root != prefix:
        logger.debug(f"[Root] {str(prefix)!r} -> {str(root)!r}")
    return root
